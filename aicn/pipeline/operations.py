"""Single-operation progress tracking with pause, resume and cancel."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

import pendulum
from pydantic import BaseModel, Field

from ..errors import OperationAlreadyRunningError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_MESSAGES = 50
SNAPSHOT_MESSAGES = 10


class OperationType(str, Enum):
    """Manual operations an operator can trigger."""

    SCRAPE = "scrape"
    SUPPLEMENT = "supplement"
    PROCESS_ALL = "process-all"
    FULL_REFRESH = "full-refresh"


class OperationStatus(str, Enum):
    """Lifecycle of an operation."""

    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        return self in (OperationStatus.RUNNING, OperationStatus.PAUSED)


STEP_NAMES = {
    OperationType.SCRAPE: "Scraping RSS Feeds",
    OperationType.SUPPLEMENT: "Generating AI Articles",
    OperationType.PROCESS_ALL: "Processing All Pending Articles",
    OperationType.FULL_REFRESH: "Step 1: Scraping RSS Feeds",
}


class ScrapingProgress(BaseModel):
    total_sources: int = 0
    sources_processed: int = 0
    current_source: Optional[str] = None
    articles_found: int = 0
    articles_added: int = 0
    articles_skipped: int = 0
    source_errors: int = 0


class ProcessingProgress(BaseModel):
    articles_to_process: int = 0
    articles_processed: int = 0
    articles_approved: int = 0
    articles_rejected: int = 0
    articles_queued: int = 0
    errors: int = 0
    current_article: Optional[str] = None


class AIProgress(BaseModel):
    to_generate: int = 0
    generated: int = 0
    errors: int = 0
    current_category: Optional[str] = None


class OperationMessage(BaseModel):
    time: datetime
    text: str


class OperationState(BaseModel):
    """Mutable state of the current operation, owned by the coordinator."""

    type: OperationType
    status: OperationStatus = OperationStatus.RUNNING
    started_at: datetime
    completed_at: Optional[datetime] = None
    current_step: int = 1
    total_steps: int = 1
    step_name: str = ""
    scraping: ScrapingProgress = Field(default_factory=ScrapingProgress)
    processing: ProcessingProgress = Field(default_factory=ProcessingProgress)
    ai: AIProgress = Field(default_factory=AIProgress)
    messages: List[OperationMessage] = Field(default_factory=list)
    error: Optional[str] = None


def _ratio(done: int, total: int, empty: float = 0.0) -> float:
    return done / total * 100 if total > 0 else empty


def progress_percent(state: OperationState) -> float:
    """
    Overall completion percentage.

    Full refresh weights its three steps equally. An AI step with nothing
    to generate counts as done inside a full refresh.
    """
    if state.type == OperationType.FULL_REFRESH:
        if state.current_step == 1:
            step = _ratio(state.scraping.sources_processed, state.scraping.total_sources)
        elif state.current_step == 2:
            step = _ratio(state.processing.articles_processed, state.processing.articles_to_process)
        else:
            step = _ratio(state.ai.generated, state.ai.to_generate, empty=100.0)
        base = (state.current_step - 1) / state.total_steps * 100
        return min(100.0, base + step / state.total_steps)

    if state.type == OperationType.SCRAPE:
        return _ratio(state.scraping.sources_processed, state.scraping.total_sources)
    if state.type == OperationType.SUPPLEMENT:
        return _ratio(state.ai.generated, state.ai.to_generate)
    if state.type == OperationType.PROCESS_ALL:
        return _ratio(state.processing.articles_processed, state.processing.articles_to_process)
    return 0.0


class CancellationToken:
    """Cooperative pause and cancel flags shared with a running loop."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._cancelled = False
        self._paused = False

    @property
    def cancelled(self) -> bool:
        with self._condition:
            return self._cancelled

    @property
    def paused(self) -> bool:
        with self._condition:
            return self._paused and not self._cancelled

    def cancel(self) -> None:
        with self._condition:
            self._cancelled = True
            self._paused = False
            self._condition.notify_all()

    def pause(self) -> None:
        with self._condition:
            self._paused = True

    def resume(self) -> None:
        with self._condition:
            self._paused = False
            self._condition.notify_all()

    def wait_while_paused(self) -> bool:
        """Block until resumed or cancelled. Returns False if cancelled."""
        with self._condition:
            while self._paused and not self._cancelled:
                self._condition.wait()
            return not self._cancelled


class OperationTracker:
    """Handle a running loop uses to report progress and honour controls."""

    def __init__(
        self,
        coordinator: "OperationCoordinator",
        state: OperationState,
        token: CancellationToken,
    ) -> None:
        self._coordinator = coordinator
        self._state = state
        self._token = token

    @property
    def operation_type(self) -> OperationType:
        return self._state.type

    def log(self, text: str) -> None:
        self._coordinator._append_message(self._state, text)

    def set_step(self, step: int, name: str) -> None:
        with self._coordinator._lock:
            self._state.current_step = step
            self._state.step_name = name
        self.log(f"Starting {name}")

    def _update(self, section: BaseModel, fields: Dict[str, Any]) -> None:
        with self._coordinator._lock:
            for name, value in fields.items():
                if name not in type(section).model_fields:
                    raise AttributeError(f"Unknown progress field: {name}")
                setattr(section, name, value)

    def update_scraping(self, **fields: Any) -> None:
        self._update(self._state.scraping, fields)

    def update_processing(self, **fields: Any) -> None:
        self._update(self._state.processing, fields)

    def update_ai(self, **fields: Any) -> None:
        self._update(self._state.ai, fields)

    def is_cancel_requested(self) -> bool:
        return self._token.cancelled

    def checkpoint(self) -> bool:
        """
        Wait out a pause, then report whether the loop may continue.

        Returns:
            False if cancellation was requested
        """
        if self._token.paused:
            self._coordinator._set_status(self._state, OperationStatus.PAUSED, "Operation paused")
            self._token.wait_while_paused()
            if not self._token.cancelled:
                self._coordinator._set_status(self._state, OperationStatus.RUNNING, "Operation resumed")
        return not self._token.cancelled


class OperationCoordinator:
    """
    Owner of the one operation that may run at a time.

    State is only changed under the coordinator's lock; readers get copies
    through ``snapshot``.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._lock = threading.RLock()
        self._state: Optional[OperationState] = None
        self._token: Optional[CancellationToken] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._clock = clock or (lambda: pendulum.now("UTC"))

    def _append_message(self, state: OperationState, text: str) -> None:
        with self._lock:
            state.messages.append(OperationMessage(time=self._clock(), text=text))
            if len(state.messages) > MAX_MESSAGES:
                del state.messages[:-MAX_MESSAGES]
        logger.info(text)

    def _set_status(self, state: OperationState, status: OperationStatus, message: str) -> None:
        with self._lock:
            if state.status == status or not state.status.is_active:
                return
            state.status = status
        self._append_message(state, message)

    def is_running(self) -> bool:
        with self._lock:
            return self._state is not None and self._state.status.is_active

    def start(self, operation_type: OperationType) -> OperationTracker:
        """
        Begin a new operation.

        Raises:
            OperationAlreadyRunningError: if another operation is running or paused
        """
        with self._lock:
            if self._state is not None and self._state.status.is_active:
                raise OperationAlreadyRunningError(self._state.type.value)

            self._token = CancellationToken()
            self._state = OperationState(
                type=operation_type,
                started_at=self._clock(),
                total_steps=3 if operation_type == OperationType.FULL_REFRESH else 1,
                step_name=STEP_NAMES[operation_type],
            )
            tracker = OperationTracker(self, self._state, self._token)
        tracker.log(f"Started {operation_type.value} operation")
        return tracker

    def snapshot(self) -> Optional[Dict[str, Any]]:
        """Copy of the current operation with progress and the latest messages."""
        with self._lock:
            if self._state is None:
                return None
            data = self._state.model_dump(mode="json")
            data["progress_percent"] = round(progress_percent(self._state), 1)
        data["messages"] = data["messages"][-SNAPSHOT_MESSAGES:]
        return data

    def pause(self) -> bool:
        """Request a pause. Only a running operation can be paused."""
        with self._lock:
            if self._state is None or self._state.status != OperationStatus.RUNNING:
                return False
            self._token.pause()
            state = self._state
        self._append_message(state, "Pause requested...")
        return True

    def resume(self) -> bool:
        with self._lock:
            if self._state is None or not self._state.status.is_active:
                return False
            self._token.resume()
            state = self._state
        self._append_message(state, "Resume requested...")
        return True

    def toggle_pause(self) -> Optional[bool]:
        """
        Pause a running operation, or resume one that is paused or pausing.

        Returns:
            The new paused state, or None if no operation is active
        """
        with self._lock:
            if self._state is None or not self._state.status.is_active:
                return None
            paused = self._token.paused
        if paused:
            self.resume()
            return False
        return True if self.pause() else None

    def cancel(self) -> bool:
        """Request cancellation; paused loops are woken so they can exit."""
        with self._lock:
            if self._state is None or not self._state.status.is_active:
                return False
            self._token.cancel()
            state = self._state
        self._append_message(state, "Cancel requested...")
        return True

    def complete(self, error: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Finish the current operation as completed, cancelled or errored."""
        with self._lock:
            state = self._state
            if state is None:
                return None
            cancelled = self._token.cancelled and not error
            if cancelled:
                state.status = OperationStatus.CANCELLED
            else:
                state.status = OperationStatus.ERROR if error else OperationStatus.COMPLETED
            state.completed_at = self._clock()
            state.error = error

        if cancelled:
            self._append_message(state, "Operation cancelled by user")
        elif error:
            self._append_message(state, f"Operation failed: {error}")
        else:
            self._append_message(state, "Operation completed successfully")
        return self.snapshot()

    def clear(self) -> None:
        """Forget the current operation, cancelling it if still active."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._state = None
            self._token = None

    def _execute(self, tracker: OperationTracker, func: Callable[[OperationTracker], T]) -> T:
        try:
            result = func(tracker)
        except Exception as e:
            logger.error("%s operation failed: %s", tracker.operation_type.value, e)
            self.complete(str(e))
            raise
        self.complete()
        return result

    def run(self, operation_type: OperationType, func: Callable[[OperationTracker], T]) -> T:
        """Run an operation on the calling thread."""
        tracker = self.start(operation_type)
        return self._execute(tracker, func)

    def run_in_background(
        self,
        operation_type: OperationType,
        func: Callable[[OperationTracker], T],
    ) -> "Future[T]":
        """
        Run an operation on a worker thread.

        The start happens synchronously, so an overlapping request raises here.
        """
        tracker = self.start(operation_type)
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="aicn-op")
            executor = self._executor
        return executor.submit(self._execute, tracker, func)

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
