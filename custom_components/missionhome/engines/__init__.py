"""Engine modules for MissionHome integration.

Contains pure computation engines:
- recurrence_engine: Occurrence rules (none, daily, weekly, monthly)
- completion_engine: Per-occurrence completion queries and mutation planning
- progression_engine: EXP curve, levels and streaks
- suggestion_engine: Daily suggestion eligibility, sampling and transitions
"""

# Use relative imports within package to avoid mypy module resolution issues
from .completion_engine import (
    Actor,
    CompletionEffect,
    CompletionEngine,
    CompletionMode,
    ExpGainEvent,
    MissionNotFoundError,
    MissionNotScheduledError,
    OccurrenceInFutureError,
)
from .progression_engine import ExpGainResult, ProgressionEngine
from .recurrence_engine import RecurrenceEngine
from .suggestion_engine import SuggestionEngine, SuggestionNotFoundError

__all__ = [
    "Actor",
    "CompletionEffect",
    "CompletionEngine",
    "CompletionMode",
    "ExpGainEvent",
    "ExpGainResult",
    "MissionNotFoundError",
    "MissionNotScheduledError",
    "OccurrenceInFutureError",
    "ProgressionEngine",
    "RecurrenceEngine",
    "SuggestionEngine",
    "SuggestionNotFoundError",
]
