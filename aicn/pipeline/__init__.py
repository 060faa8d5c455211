"""Operator-triggered pipeline flows and operation tracking."""

from .operations import (
    CancellationToken,
    OperationCoordinator,
    OperationStatus,
    OperationTracker,
    OperationType,
    progress_percent,
)
from .orchestrator import PipelineOrchestrator, PipelineStage

__all__ = [
    "CancellationToken",
    "OperationCoordinator",
    "OperationStatus",
    "OperationTracker",
    "OperationType",
    "PipelineOrchestrator",
    "PipelineStage",
    "progress_percent",
]
