"""Article classification."""

from .classifier import Classifier
from .models import APPROVAL_THRESHOLD, ClassificationResult, ProcessingSummary

__all__ = [
    "Classifier",
    "ClassificationResult",
    "ProcessingSummary",
    "APPROVAL_THRESHOLD",
]
