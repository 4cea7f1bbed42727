"""Type definitions for MissionHome data structures.

TypedDict is used for documents whose keys are fixed at design time
(missions, users, suggestions, log entries). Maps keyed by runtime values
(date-keys, template keys, event keys) stay as plain `dict[str, ...]`.

IMPORTANT: This file must NOT import from coordinator.py or any module that
imports the coordinator, to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime checks (.get() defaults,
None handling) remain in the engines and managers.
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

MissionId = str
UserId = str
SuggestionId = str
DateKey = str  # Canonical local date "2026-01-18"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"

RepeatType = Literal["none", "daily", "weekly", "monthly"]
ExpMode = Literal["easy", "medium", "hard", "extreme"]
SuggestionStatus = Literal["PENDING", "ACCEPTED", "DECLINED", "EXPIRED"]


# =============================================================================
# Mission
# =============================================================================


class RepeatRule(TypedDict):
    """Recurrence rule of a mission."""

    type: RepeatType


class CompletedBy(TypedDict):
    """Who completed a recurring occurrence (value of completedByByDate)."""

    userId: UserId | None
    name: str
    at: ISODatetime


class MissionData(TypedDict):
    """A mission (task template or single task)."""

    id: MissionId
    title: str
    dueDate: ISODatetime | None
    repeat: RepeatRule
    skipDates: list[DateKey]
    archived: bool
    expValue: int
    expMode: NotRequired[ExpMode]
    assignedToUserId: NotRequired[UserId | None]
    assignedByUserId: NotRequired[UserId | None]
    createdByUserId: NotRequired[UserId | None]
    source: NotRequired[str]
    suggestionId: NotRequired[SuggestionId]
    createdAt: NotRequired[ISODatetime]
    updatedAt: NotRequired[ISODatetime]

    # Single-completion representation (repeat.type == "none")
    completed: NotRequired[bool]
    completedAt: NotRequired[ISODatetime | None]
    completedByUserId: NotRequired[UserId | None]
    completedByName: NotRequired[str | None]

    # Per-date representation (recurring)
    completedDates: NotRequired[list[DateKey]]
    completedByByDate: NotRequired[dict[DateKey, CompletedBy]]


# =============================================================================
# User progression
# =============================================================================


class UserProgressData(TypedDict):
    """Per-user progression and suggestion bookkeeping."""

    uid: UserId
    displayName: NotRequired[str | None]
    totalExp: int
    level: int
    lastOfferDay: DateKey | None
    lastAcceptedAt: dict[str, ISODatetime]
    createdAt: NotRequired[ISODatetime]
    updatedAt: NotRequired[ISODatetime]


# =============================================================================
# Suggestions
# =============================================================================


class SuggestionTemplate(TypedDict):
    """A reusable suggestion definition from the template pool."""

    key: str
    title: str
    expValue: int


class SuggestionData(TypedDict):
    """A daily challenge suggestion offered to one user."""

    id: SuggestionId
    userId: UserId
    key: str
    title: str
    expValue: int
    expMode: ExpMode
    status: SuggestionStatus
    dayOffer: DateKey
    dueAt: ISODatetime
    createdAt: ISODatetime
    acceptedAt: NotRequired[ISODatetime]
    declinedAt: NotRequired[ISODatetime]
    expiredAt: NotRequired[ISODatetime]
    missionId: NotRequired[MissionId]


# =============================================================================
# EXP audit trail
# =============================================================================


class MissionLogEntry(TypedDict):
    """One applied EXP grant."""

    missionId: MissionId
    userId: UserId
    expGain: int
    levelBefore: int
    levelAfter: int
    totalExpAfter: int
    occurrenceKey: DateKey
    timestamp: ISODatetime
