"""Completion Engine - Pure logic for per-occurrence completion tracking.

This engine provides stateless, pure Python functions for:
- Selecting the completion representation (CompletionMode) of a mission
- Querying whether an occurrence is done, and who gets credit for it
- Planning the document mutation of a completion (CompletionEffect)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in MissionManager.

Completion representations:
- SINGLE: one-off missions carry completed / completedAt / completedBy*.
- PER_DATE: recurring missions carry completedDates (a set of date-keys) and
  completedByByDate (date-key -> who and when).

Records written before the per-date model only carry completedAt. That read
path lives in `_legacy_done_on` and can be removed once all recurring
missions carry completedDates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import date_key, dt_now_utc, to_local_date
from .recurrence_engine import RecurrenceEngine

if TYPE_CHECKING:
    from ..type_defs import MissionData


# =============================================================================
# EXCEPTIONS
# =============================================================================


class MissionNotFoundError(Exception):
    """Raised when a mission id does not exist.

    Attributes:
        mission_id: The unknown mission id
    """

    def __init__(self, mission_id: str) -> None:
        """Initialize MissionNotFoundError."""
        self.mission_id = mission_id
        super().__init__(const.ERROR_MISSION_NOT_FOUND_FMT.format(mission_id))


class MissionNotScheduledError(Exception):
    """Raised when completing or skipping a day the mission does not occur on.

    Attributes:
        mission_id: The mission being acted on
        occurrence_key: Date-key of the requested occurrence
    """

    message_fmt = const.ERROR_MISSION_NOT_SCHEDULED_FMT

    def __init__(self, mission_id: str, occurrence_key: str | None) -> None:
        """Initialize MissionNotScheduledError."""
        self.mission_id = mission_id
        self.occurrence_key = occurrence_key
        super().__init__(self.message_fmt.format(mission_id, occurrence_key))


class OccurrenceInFutureError(MissionNotScheduledError):
    """Raised when completing an occurrence that lies after today.

    Future occurrences can be skipped but not completed.
    """

    message_fmt = const.ERROR_OCCURRENCE_IN_FUTURE_FMT


# =============================================================================
# DATA STRUCTURES
# =============================================================================


class CompletionMode(StrEnum):
    """How completion is represented on a mission document."""

    SINGLE = "single"
    PER_DATE = "per_date"


@dataclass(frozen=True)
class Actor:
    """Who performed an action (supplied by the caller's session)."""

    user_id: str | None
    name: str


@dataclass
class ExpGainEvent:
    """Payload of the EXP-gain event emitted after a completion.

    Attributes:
        mission_id: Completed mission
        user_id: Recipient of the EXP (assignee, else the actor)
        exp_value: EXP to grant
        occurrence_key: Date-key of the completed occurrence
    """

    mission_id: str
    user_id: str | None
    exp_value: int
    occurrence_key: str

    @property
    def event_key(self) -> str:
        """Idempotence token of this grant."""
        return f"{self.mission_id}:{self.occurrence_key}"

    def as_payload(self) -> dict[str, Any]:
        """Return the dispatcher payload (JSON-serializable)."""
        return {
            "mission_id": self.mission_id,
            "user_id": self.user_id,
            "exp_value": self.exp_value,
            "occurrence_key": self.occurrence_key,
            "event_key": self.event_key,
        }


@dataclass
class CompletionEffect:
    """Planned mutation for one completion.

    Returned by CompletionEngine.plan_completion(); applied by MissionManager.

    Attributes:
        mode: Representation being written
        occurrence_key: Date-key of the occurrence
        updates: Scalar fields to set on the mission
        add_completed_date: Date-key to union into completedDates (PER_DATE)
        completed_by: Value for completedByByDate[occurrence_key] (PER_DATE)
        exp_event: EXP-gain event to emit once the mutation is persisted
    """

    mode: CompletionMode
    occurrence_key: str
    updates: dict[str, Any] = field(default_factory=dict)
    add_completed_date: str | None = None
    completed_by: dict[str, Any] | None = None
    exp_event: ExpGainEvent | None = None


# =============================================================================
# COMPLETION ENGINE
# =============================================================================


class CompletionEngine:
    """Pure logic engine for completion queries and mutation planning.

    All methods are static - no instance state.
    """

    @staticmethod
    def mode_for(mission: MissionData | dict[str, Any]) -> CompletionMode:
        """Select the completion representation from the repeat type."""
        if RecurrenceEngine.is_recurring(mission):
            return CompletionMode.PER_DATE
        return CompletionMode.SINGLE

    @staticmethod
    def is_done_on(
        mission: MissionData | dict[str, Any], day: date | datetime
    ) -> bool:
        """Return True if the occurrence on `day` is completed."""
        if CompletionEngine.mode_for(mission) == CompletionMode.SINGLE:
            return bool(mission.get(const.DATA_MISSION_COMPLETED))

        completed_dates = mission.get(const.DATA_MISSION_COMPLETED_DATES) or []
        if completed_dates:
            return date_key(day) in completed_dates

        return CompletionEngine._legacy_done_on(mission, day)

    @staticmethod
    def _legacy_done_on(
        mission: MissionData | dict[str, Any], day: date | datetime
    ) -> bool:
        """Read recurring completion from completedAt (pre per-date records)."""
        completed_day = to_local_date(mission.get(const.DATA_MISSION_COMPLETED_AT))
        if completed_day is None:
            return False
        return completed_day == to_local_date(day)

    @staticmethod
    def completed_by_on(
        mission: MissionData | dict[str, Any], day: date | datetime
    ) -> dict[str, Any] | None:
        """Return who completed the occurrence on `day`, if known."""
        if CompletionEngine.mode_for(mission) == CompletionMode.SINGLE:
            if not mission.get(const.DATA_MISSION_COMPLETED):
                return None
            return {
                const.DATA_COMPLETED_BY_USER_ID: mission.get(
                    const.DATA_MISSION_COMPLETED_BY_USER_ID
                ),
                const.DATA_COMPLETED_BY_NAME: mission.get(
                    const.DATA_MISSION_COMPLETED_BY_NAME
                ),
                const.DATA_COMPLETED_BY_AT: mission.get(
                    const.DATA_MISSION_COMPLETED_AT
                ),
            }

        by_date = mission.get(const.DATA_MISSION_COMPLETED_BY_BY_DATE) or {}
        return by_date.get(date_key(day))

    @staticmethod
    def is_done_by_user_on(
        mission: MissionData | dict[str, Any], day: date | datetime, user_id: str
    ) -> bool:
        """Return True if `user_id` gets credit for completing the mission on `day`.

        One-off missions credit completedByUserId on the completedAt day.
        Recurring missions credit the completer recorded for that date-key,
        and the assignee as well. Recurring records without completedDates
        fall back to completedAt / completedByUserId.
        """
        if not user_id:
            return False

        if CompletionEngine.mode_for(mission) == CompletionMode.SINGLE:
            if not mission.get(const.DATA_MISSION_COMPLETED):
                return False
            if mission.get(const.DATA_MISSION_COMPLETED_BY_USER_ID) != user_id:
                return False
            completed_day = to_local_date(mission.get(const.DATA_MISSION_COMPLETED_AT))
            return completed_day is not None and completed_day == to_local_date(day)

        key = date_key(day)
        if key not in (mission.get(const.DATA_MISSION_COMPLETED_DATES) or []):
            return (
                mission.get(const.DATA_MISSION_COMPLETED_BY_USER_ID) == user_id
                and CompletionEngine._legacy_done_on(mission, day)
            )

        entry = (mission.get(const.DATA_MISSION_COMPLETED_BY_BY_DATE) or {}).get(key)
        if entry and entry.get(const.DATA_COMPLETED_BY_USER_ID) == user_id:
            return True
        return mission.get(const.DATA_MISSION_ASSIGNED_TO_USER_ID) == user_id

    @staticmethod
    def count_completed_by_user(
        mission: MissionData | dict[str, Any], user_id: str
    ) -> int:
        """Count the completions of this mission credited to `user_id`.

        Per-date completions without a completedBy entry are credited to the
        assignee.
        """
        if not user_id:
            return 0

        completed_dates = mission.get(const.DATA_MISSION_COMPLETED_DATES) or []
        if CompletionEngine.mode_for(mission) == CompletionMode.SINGLE or (
            not completed_dates
        ):
            return int(
                bool(mission.get(const.DATA_MISSION_COMPLETED))
                and mission.get(const.DATA_MISSION_COMPLETED_BY_USER_ID) == user_id
            )

        by_date = mission.get(const.DATA_MISSION_COMPLETED_BY_BY_DATE) or {}
        assignee = mission.get(const.DATA_MISSION_ASSIGNED_TO_USER_ID)
        total = 0
        for key in completed_dates:
            entry = by_date.get(key)
            if entry:
                total += entry.get(const.DATA_COMPLETED_BY_USER_ID) == user_id
            else:
                total += assignee == user_id
        return total

    @staticmethod
    def exp_recipient(
        mission: MissionData | dict[str, Any], actor: Actor
    ) -> str | None:
        """Return who earns the EXP: the assignee when set, else the actor."""
        return mission.get(const.DATA_MISSION_ASSIGNED_TO_USER_ID) or actor.user_id

    @staticmethod
    def plan_completion(
        mission: MissionData | dict[str, Any],
        day: date | datetime,
        actor: Actor,
        now: datetime | None = None,
    ) -> CompletionEffect:
        """Plan the completion of the occurrence on `day`.

        Does not check whether the occurrence is already done; callers must
        check is_done_on() first so the EXP grant is not duplicated.

        Args:
            mission: Mission document (not modified)
            day: Occurrence day
            actor: Who completed it
            now: Completion timestamp (defaults to current UTC time)

        Returns:
            CompletionEffect describing the mutation and the EXP-gain event.
        """
        now_iso = (now or dt_now_utc()).isoformat()
        occurrence_key = date_key(day) or ""
        mode = CompletionEngine.mode_for(mission)

        exp_event = ExpGainEvent(
            mission_id=str(mission.get(const.DATA_MISSION_ID)),
            user_id=CompletionEngine.exp_recipient(mission, actor),
            exp_value=int(mission.get(const.DATA_MISSION_EXP_VALUE) or 0),
            occurrence_key=occurrence_key,
        )

        if mode == CompletionMode.PER_DATE:
            return CompletionEffect(
                mode=mode,
                occurrence_key=occurrence_key,
                updates={
                    const.DATA_MISSION_COMPLETED: False,
                    const.DATA_MISSION_COMPLETED_AT: now_iso,
                    const.DATA_MISSION_UPDATED_AT: now_iso,
                },
                add_completed_date=occurrence_key,
                completed_by={
                    const.DATA_COMPLETED_BY_USER_ID: actor.user_id,
                    const.DATA_COMPLETED_BY_NAME: actor.name,
                    const.DATA_COMPLETED_BY_AT: now_iso,
                },
                exp_event=exp_event,
            )

        return CompletionEffect(
            mode=mode,
            occurrence_key=occurrence_key,
            updates={
                const.DATA_MISSION_COMPLETED: True,
                const.DATA_MISSION_COMPLETED_AT: now_iso,
                const.DATA_MISSION_COMPLETED_BY_USER_ID: actor.user_id,
                const.DATA_MISSION_COMPLETED_BY_NAME: actor.name,
                const.DATA_MISSION_UPDATED_AT: now_iso,
            },
            exp_event=exp_event,
        )

    @staticmethod
    def apply_effect(
        mission: MissionData | dict[str, Any], effect: CompletionEffect
    ) -> None:
        """Apply a planned effect to the mission in place.

        completedDates is updated as a set union, so applying the same effect
        twice leaves the same set. completedByByDate is last-write-wins.
        """
        for key, value in effect.updates.items():
            mission[key] = value  # type: ignore[literal-required]

        if effect.add_completed_date:
            completed_dates = list(
                mission.get(const.DATA_MISSION_COMPLETED_DATES) or []
            )
            if effect.add_completed_date not in completed_dates:
                completed_dates.append(effect.add_completed_date)
            mission[const.DATA_MISSION_COMPLETED_DATES] = completed_dates

        if effect.completed_by is not None:
            by_date = dict(mission.get(const.DATA_MISSION_COMPLETED_BY_BY_DATE) or {})
            by_date[effect.occurrence_key] = effect.completed_by
            mission[const.DATA_MISSION_COMPLETED_BY_BY_DATE] = by_date
