"""Review and queue workflow."""

from .workflow import ALL, ReviewWorkflow

__all__ = ["ALL", "ReviewWorkflow"]
