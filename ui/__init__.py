"""User interface components"""

from .progress import (
    ProgressTracker,
    ProgressAggregator,
    ConsoleProgress,
    CallbackProgress,
    NullProgress,
    emit,
)

__all__ = [
    "ProgressTracker",
    "ProgressAggregator",
    "ConsoleProgress",
    "CallbackProgress",
    "NullProgress",
    "emit",
]
