"""Daily admission control for AI-authored articles."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..models import DailyCounts


class StopReason(str, Enum):
    """Why no article will be generated."""

    DAILY_MAX_REACHED = "daily_max_reached"
    AI_HARD_CAP_REACHED = "ai_hard_cap_reached"
    AI_BALANCE_LIMIT = "ai_balance_limit"
    LIMITS_REACHED = "limits_reached"


class AdmissionDecision(BaseModel):
    """How many AI-authored articles may be added today, and why."""

    scraped: int
    ai_generated: int
    daily_min: int
    daily_max: int
    max_ai_per_day: int
    to_generate: int = 0
    reason: Optional[StopReason] = None
    balance_slots: int = 0
    needed_for_min: int = 0
    room_to_max: int = 0
    remaining_ai_slots: int = 0

    @property
    def total(self) -> int:
        return self.scraped + self.ai_generated

    @property
    def should_generate(self) -> bool:
        return self.to_generate > 0


class AdmissionLimits(BaseModel):
    """Daily limits in effect for one decision."""

    daily_min: int = Field(5, ge=0)
    daily_max: int = Field(10, ge=0)
    max_ai_per_day: int = Field(3, ge=0)


def plan_supplement(counts: DailyCounts, limits: AdmissionLimits) -> AdmissionDecision:
    """
    Decide how many AI-authored articles to generate.

    Checks run in order: the daily total cap, the AI hard cap, then the
    balance rule (AI may never outnumber scraped). Otherwise the count is the
    shortfall to the daily minimum (at least one) bounded by every cap.
    """
    s, a = counts.scraped, counts.ai_generated
    decision = AdmissionDecision(
        scraped=s,
        ai_generated=a,
        daily_min=limits.daily_min,
        daily_max=limits.daily_max,
        max_ai_per_day=limits.max_ai_per_day,
    )

    if s + a >= limits.daily_max:
        decision.reason = StopReason.DAILY_MAX_REACHED
        return decision

    if a >= limits.max_ai_per_day:
        decision.reason = StopReason.AI_HARD_CAP_REACHED
        return decision

    decision.balance_slots = max(0, s - a)
    if decision.balance_slots == 0:
        decision.reason = StopReason.AI_BALANCE_LIMIT
        return decision

    decision.needed_for_min = max(0, limits.daily_min - (s + a))
    decision.room_to_max = limits.daily_max - (s + a)
    decision.remaining_ai_slots = limits.max_ai_per_day - a

    to_generate = min(
        max(decision.needed_for_min, 1),
        decision.remaining_ai_slots,
        decision.balance_slots,
        decision.room_to_max,
    )
    if to_generate <= 0:
        decision.reason = StopReason.LIMITS_REACHED
        return decision

    decision.to_generate = to_generate
    return decision
