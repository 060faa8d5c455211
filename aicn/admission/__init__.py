"""Daily admission control for AI-authored content."""

from .policy import AdmissionDecision, AdmissionLimits, StopReason, plan_supplement
from .supplement import ContentSupplementer, SupplementResult

__all__ = [
    "AdmissionDecision",
    "AdmissionLimits",
    "ContentSupplementer",
    "StopReason",
    "SupplementResult",
    "plan_supplement",
]
