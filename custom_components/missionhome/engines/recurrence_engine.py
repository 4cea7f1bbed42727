"""Recurrence Engine - Pure logic deciding when a mission occurs.

This engine provides stateless, pure Python functions for:
- Occurrence checks for one-off, daily, weekly and monthly missions
- Skip-date suppression and archived filtering
- Occurrence expansion over a date window (calendar)
- Next-anchor calculation for series regeneration

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.

Policy notes:
- A series never occurs before its anchor (dueDate).
- Monthly missions match on day-of-month only. An anchor on the 31st has no
  occurrence in shorter months (no rollover to the last day).
- A missing or unparseable dueDate fails closed: the mission never occurs.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import date_key, dt_add_months, to_local_date

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import MissionData


# Hard cap on window expansion to keep calendar queries bounded
MAX_EXPANSION_DAYS = 3660


class RecurrenceEngine:
    """Pure logic engine for mission occurrence rules.

    All methods are static - no instance state.
    """

    @staticmethod
    def repeat_type(mission: MissionData | dict[str, Any]) -> str:
        """Return the mission's repeat type, defaulting to 'none'."""
        repeat = mission.get(const.DATA_MISSION_REPEAT) or {}
        if not isinstance(repeat, dict):
            return const.REPEAT_NONE
        return repeat.get(const.DATA_MISSION_REPEAT_TYPE) or const.REPEAT_NONE

    @staticmethod
    def is_recurring(mission: MissionData | dict[str, Any]) -> bool:
        """Return True for daily, weekly and monthly missions."""
        return RecurrenceEngine.repeat_type(mission) != const.REPEAT_NONE

    @staticmethod
    def anchor_date(mission: MissionData | dict[str, Any]) -> date | None:
        """Return the anchor (dueDate) as a local calendar date, or None."""
        return to_local_date(mission.get(const.DATA_MISSION_DUE_DATE))

    @staticmethod
    def occurs_on(
        mission: MissionData | dict[str, Any], day: date | datetime
    ) -> bool:
        """Return True if the mission has an occurrence on the given day.

        Args:
            mission: Mission document
            day: Calendar date or datetime (normalized to its local day)

        Returns:
            False for archived missions, skipped days, days before the anchor
            and missions whose dueDate cannot be parsed.
        """
        if mission.get(const.DATA_MISSION_ARCHIVED):
            return False

        target = to_local_date(day)
        if target is None:
            return False
        target_key = date_key(target)

        if target_key in (mission.get(const.DATA_MISSION_SKIP_DATES) or []):
            return False

        anchor = RecurrenceEngine.anchor_date(mission)
        if anchor is None:
            const.LOGGER.debug(
                "DEBUG: Mission '%s' has no usable dueDate (%r), never occurs",
                mission.get(const.DATA_MISSION_ID),
                mission.get(const.DATA_MISSION_DUE_DATE),
            )
            return False

        repeat = RecurrenceEngine.repeat_type(mission)

        if repeat == const.REPEAT_NONE:
            return target == anchor

        # Series start only from the anchor day
        if target < anchor:
            return False

        if repeat == const.REPEAT_DAILY:
            return True
        if repeat == const.REPEAT_WEEKLY:
            return target.weekday() == anchor.weekday()
        if repeat == const.REPEAT_MONTHLY:
            return target.day == anchor.day

        const.LOGGER.debug(
            "DEBUG: Mission '%s' has unknown repeat type '%s', never occurs",
            mission.get(const.DATA_MISSION_ID),
            repeat,
        )
        return False

    @staticmethod
    def occurrences_between(
        mission: MissionData | dict[str, Any], start: date, end: date
    ) -> list[date]:
        """Expand occurrences within [start, end] (both inclusive).

        The window is clamped to the anchor and to MAX_EXPANSION_DAYS.
        """
        anchor = RecurrenceEngine.anchor_date(mission)
        if anchor is None or end < start:
            return []

        if not RecurrenceEngine.is_recurring(mission):
            return [anchor] if start <= anchor <= end and RecurrenceEngine.occurs_on(
                mission, anchor
            ) else []

        current = max(start, anchor)
        last = min(end, current + timedelta(days=MAX_EXPANSION_DAYS))
        occurrences: list[date] = []
        while current <= last:
            if RecurrenceEngine.occurs_on(mission, current):
                occurrences.append(current)
            current += timedelta(days=1)
        return occurrences

    @staticmethod
    def next_occurrence(
        mission: MissionData | dict[str, Any],
        after: date,
        max_lookahead: int = 366,
    ) -> date | None:
        """Return the first occurrence strictly after `after`, or None.

        Used when regenerating the anchor of a recurring series after a
        completion: daily advances by one day, weekly by seven, monthly to the
        next month that has the anchor's day-of-month.
        """
        anchor = RecurrenceEngine.anchor_date(mission)
        if anchor is None or mission.get(const.DATA_MISSION_ARCHIVED):
            return None

        repeat = RecurrenceEngine.repeat_type(mission)
        if repeat == const.REPEAT_NONE:
            return anchor if anchor > after and RecurrenceEngine.occurs_on(
                mission, anchor
            ) else None

        horizon = after + timedelta(days=max_lookahead)

        if repeat == const.REPEAT_MONTHLY:
            month_index = 0
            candidate = anchor
            while candidate <= horizon:
                if candidate > after and RecurrenceEngine.occurs_on(mission, candidate):
                    return candidate
                month_index += 1
                candidate = dt_add_months(anchor, month_index)
            return None

        step = timedelta(days=7 if repeat == const.REPEAT_WEEKLY else 1)
        candidate = anchor
        if candidate <= after:
            # Jump close to `after` instead of walking from the anchor
            periods = (after - anchor).days // step.days
            candidate = anchor + step * periods
        while candidate <= horizon:
            if candidate > after and RecurrenceEngine.occurs_on(mission, candidate):
                return candidate
            candidate += step
        return None

    @staticmethod
    def filter_for_date(
        missions: Iterable[MissionData | dict[str, Any]], day: date | datetime
    ) -> list[MissionData | dict[str, Any]]:
        """Return the missions that occur on the given day."""
        return [m for m in missions if RecurrenceEngine.occurs_on(m, day)]
