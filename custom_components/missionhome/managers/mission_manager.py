"""Mission Manager - Mission documents and per-occurrence completion.

This manager handles all mission-related operations:
- Mission creation (manual and suggestion-born)
- Marking an occurrence done (the completion fact + one EXP-gain event)
- Skipping a single occurrence of a series
- Deleting a whole series (moved to the deleted_missions archive)
- Day views (which missions occur on a date and whether they are done)

ARCHITECTURE:
- MissionManager = STATEFUL owner of mission documents
- RecurrenceEngine / CompletionEngine = pure occurrence and completion logic
- ProgressionManager listens to EXP_GAINED events (Event Bus coupling)
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any
import uuid

from .. import const
from ..engines.completion_engine import (
    Actor,
    CompletionEngine,
    MissionNotFoundError,
    MissionNotScheduledError,
    OccurrenceInFutureError,
)
from ..engines.recurrence_engine import RecurrenceEngine
from ..engines.suggestion_engine import SuggestionEngine
from ..utils.dt_utils import (
    date_key,
    dt_now_utc,
    dt_parse,
    dt_today_local,
    to_local_date,
)
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import MissionHomeDataCoordinator
    from ..type_defs import MissionData


# Re-export exceptions for external use
__all__ = [
    "MissionManager",
    "MissionNotFoundError",
    "MissionNotScheduledError",
    "OccurrenceInFutureError",
]


class MissionManager(BaseManager):
    """Manager for mission documents and completion tracking.

    Responsibilities:
    - Create, skip and delete missions
    - Persist completion facts (single or per-date representation)
    - Emit SIGNAL_SUFFIX_EXP_GAINED exactly once per newly completed occurrence

    NOT responsible for:
    - EXP / level arithmetic (ProgressionManager)
    - Suggestion bookkeeping (SuggestionManager)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: MissionHomeDataCoordinator,
    ) -> None:
        """Initialize the MissionManager."""
        super().__init__(hass, coordinator)
        self._coordinator = coordinator

    async def async_setup(self) -> None:
        """Set up the MissionManager.

        Missions are driven by service calls and suggestion acceptance only;
        there are no events to subscribe to.
        """

    # =========================================================================
    # Queries
    # =========================================================================

    def get_mission(self, mission_id: str) -> MissionData:
        """Return a mission document.

        Raises:
            MissionNotFoundError: If the mission does not exist
        """
        mission = self._coordinator.missions_data.get(mission_id)
        if mission is None:
            raise MissionNotFoundError(mission_id)
        return mission

    def is_done_on(self, mission_id: str, day: date | datetime) -> bool:
        """Return True if the mission's occurrence on `day` is completed."""
        return CompletionEngine.is_done_on(self.get_mission(mission_id), day)

    def missions_for_date(
        self, day: date, user_id: str | None = None
    ) -> list[dict[str, Any]]:
        """Return the missions occurring on `day` with their done flag.

        Args:
            day: Local calendar date
            user_id: Optional filter; keeps missions visible to this user

        Returns:
            List of summary dicts sorted by title.
        """
        missions = self._coordinator.missions_data.values()
        if user_id:
            missions = [m for m in missions if self.is_visible_to(m, user_id)]

        result = []
        for mission in RecurrenceEngine.filter_for_date(missions, day):
            completed_by = CompletionEngine.completed_by_on(mission, day)
            result.append(
                {
                    const.DATA_MISSION_ID: mission.get(const.DATA_MISSION_ID),
                    const.DATA_MISSION_TITLE: mission.get(const.DATA_MISSION_TITLE),
                    const.DATA_MISSION_REPEAT_TYPE: RecurrenceEngine.repeat_type(
                        mission
                    ),
                    const.DATA_MISSION_EXP_VALUE: mission.get(
                        const.DATA_MISSION_EXP_VALUE, 0
                    ),
                    const.DATA_MISSION_EXP_MODE: mission.get(const.DATA_MISSION_EXP_MODE),
                    const.DATA_MISSION_ASSIGNED_TO_USER_ID: mission.get(
                        const.DATA_MISSION_ASSIGNED_TO_USER_ID
                    ),
                    "done": CompletionEngine.is_done_on(mission, day),
                    "completed_by": completed_by,
                    "next_occurrence": date_key(
                        RecurrenceEngine.next_occurrence(mission, day)
                    ),
                }
            )
        return sorted(result, key=lambda item: item[const.DATA_MISSION_TITLE] or "")

    @staticmethod
    def is_visible_to(mission: MissionData | dict[str, Any], user_id: str) -> bool:
        """Return True if the mission belongs on the user's own list.

        Assigned missions belong to the assignee; unassigned ones to their
        creator.
        """
        assignee = mission.get(const.DATA_MISSION_ASSIGNED_TO_USER_ID)
        if assignee:
            return assignee == user_id
        return mission.get(const.DATA_MISSION_CREATED_BY_USER_ID) == user_id

    # =========================================================================
    # Creation
    # =========================================================================

    def create_mission(
        self,
        title: str,
        due_date: str | date | datetime,
        *,
        repeat: str = const.REPEAT_NONE,
        exp_value: int = 0,
        exp_mode: str | None = None,
        assigned_to_user_id: str | None = None,
        created_by_user_id: str | None = None,
        source: str = const.MISSION_SOURCE_MANUAL,
        mission_id: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> str:
        """Create a mission and return its id.

        Raises:
            ValueError: Empty title, unknown repeat type, negative EXP,
                unparseable due date or duplicate id
        """
        title = (title or "").strip()
        if not title:
            raise ValueError("Mission title must not be empty")
        if repeat not in const.REPEAT_TYPES:
            raise ValueError(f"Unknown repeat type: {repeat}")
        if exp_value < 0:
            raise ValueError(f"EXP value must not be negative, got {exp_value}")
        if exp_mode is not None and exp_mode not in const.EXP_MODES:
            raise ValueError(f"Unknown exp mode: {exp_mode}")

        due = dt_parse(due_date)
        if due is None:
            raise ValueError(const.ERROR_INVALID_DATE_FMT.format(due_date))

        mission_id = mission_id or str(uuid.uuid4())
        if mission_id in self._coordinator.missions_data:
            raise ValueError(f"Mission already exists: {mission_id}")

        now_iso = dt_now_utc().isoformat()
        mission: dict[str, Any] = {
            const.DATA_MISSION_ID: mission_id,
            const.DATA_MISSION_TITLE: title,
            const.DATA_MISSION_DUE_DATE: due.isoformat(),
            const.DATA_MISSION_REPEAT: {const.DATA_MISSION_REPEAT_TYPE: repeat},
            const.DATA_MISSION_SKIP_DATES: [],
            const.DATA_MISSION_ARCHIVED: False,
            const.DATA_MISSION_EXP_VALUE: int(exp_value),
            const.DATA_MISSION_EXP_MODE: exp_mode
            or SuggestionEngine.difficulty_for_exp(int(exp_value)),
            const.DATA_MISSION_ASSIGNED_TO_USER_ID: assigned_to_user_id,
            const.DATA_MISSION_ASSIGNED_BY_USER_ID: created_by_user_id,
            const.DATA_MISSION_CREATED_BY_USER_ID: created_by_user_id,
            const.DATA_MISSION_SOURCE: source,
            const.DATA_MISSION_COMPLETED: False,
            const.DATA_MISSION_COMPLETED_AT: None,
            const.DATA_MISSION_COMPLETED_BY_USER_ID: None,
            const.DATA_MISSION_COMPLETED_BY_NAME: None,
            const.DATA_MISSION_CREATED_AT: now_iso,
            const.DATA_MISSION_UPDATED_AT: now_iso,
        }
        if repeat != const.REPEAT_NONE:
            mission[const.DATA_MISSION_COMPLETED_DATES] = []
            mission[const.DATA_MISSION_COMPLETED_BY_BY_DATE] = {}
        if extra:
            mission.update(extra)

        self._coordinator.missions_data[mission_id] = mission
        self._coordinator._persist()

        self.emit(
            const.SIGNAL_SUFFIX_MISSION_CREATED,
            mission_id=mission_id,
            source=source,
        )
        const.LOGGER.info(
            "INFO: Mission '%s' (%s) created, repeat=%s, exp=%s",
            title,
            mission_id,
            repeat,
            exp_value,
        )
        return mission_id

    # =========================================================================
    # Completion
    # =========================================================================

    def mark_done(
        self,
        mission_id: str,
        day: date | datetime | None,
        actor: Actor,
    ) -> bool:
        """Mark the mission's occurrence on `day` as completed.

        An occurrence that is already done is left untouched and no EXP-gain
        event is emitted, so repeated calls grant EXP once.

        Args:
            mission_id: Mission to complete
            day: Occurrence day (defaults to today)
            actor: Who completed it

        Returns:
            True if the completion was recorded, False if it was already done.

        Raises:
            MissionNotFoundError: Unknown mission
            MissionNotScheduledError: The mission does not occur on `day`
            OccurrenceInFutureError: `day` is after today
        """
        mission = self.get_mission(mission_id)
        today = dt_today_local()
        day = day or today

        if not RecurrenceEngine.occurs_on(mission, day):
            raise MissionNotScheduledError(mission_id, date_key(day))
        if to_local_date(day) > today:
            raise OccurrenceInFutureError(mission_id, date_key(day))

        if CompletionEngine.is_done_on(mission, day):
            const.LOGGER.debug(
                "DEBUG: Mission '%s' already done on %s, ignoring",
                mission_id,
                date_key(day),
            )
            return False

        effect = CompletionEngine.plan_completion(mission, day, actor)
        CompletionEngine.apply_effect(mission, effect)
        self._coordinator._persist()

        self.emit(
            const.SIGNAL_SUFFIX_MISSION_COMPLETED,
            mission_id=mission_id,
            occurrence_key=effect.occurrence_key,
            user_id=actor.user_id,
            user_name=actor.name,
        )
        if effect.exp_event is not None:
            self.emit(const.SIGNAL_SUFFIX_EXP_GAINED, **effect.exp_event.as_payload())

        const.LOGGER.info(
            "INFO: Mission '%s' completed for %s by '%s'",
            mission.get(const.DATA_MISSION_TITLE),
            effect.occurrence_key,
            actor.name,
        )
        return True

    # =========================================================================
    # Deletion
    # =========================================================================

    def skip_occurrence(self, mission_id: str, day: date | datetime) -> bool:
        """Hide one occurrence of a mission; the series itself survives.

        Returns:
            True if the date-key was added, False if it was already skipped.

        Raises:
            MissionNotFoundError: Unknown mission
        """
        mission = self.get_mission(mission_id)
        key = date_key(day)
        if key is None:
            raise ValueError(const.ERROR_INVALID_DATE_FMT.format(day))

        skip_dates = list(mission.get(const.DATA_MISSION_SKIP_DATES) or [])
        if key in skip_dates:
            const.LOGGER.debug(
                "DEBUG: Mission '%s' already skips %s", mission_id, key
            )
            return False

        skip_dates.append(key)
        mission[const.DATA_MISSION_SKIP_DATES] = skip_dates
        mission[const.DATA_MISSION_UPDATED_AT] = dt_now_utc().isoformat()
        self._coordinator._persist()

        self.emit(
            const.SIGNAL_SUFFIX_MISSION_SKIPPED,
            mission_id=mission_id,
            occurrence_key=key,
        )
        const.LOGGER.info("INFO: Mission '%s' skipped on %s", mission_id, key)
        return True

    def delete_series(self, mission_id: str) -> None:
        """Delete a mission and all of its future occurrences.

        The document is copied to the deleted_missions archive with a
        deletedAt stamp before it is removed.

        Raises:
            MissionNotFoundError: Unknown mission
        """
        mission = self.get_mission(mission_id)

        archived = dict(mission)
        archived[const.DATA_MISSION_DELETED_AT] = dt_now_utc().isoformat()
        archived[const.DATA_MISSION_ORIGINAL_COLLECTION] = const.COLLECTION_MISSIONS
        self._coordinator.deleted_missions_data[mission_id] = archived
        del self._coordinator.missions_data[mission_id]
        self._coordinator._persist()

        self.emit(const.SIGNAL_SUFFIX_MISSION_DELETED, mission_id=mission_id)
        const.LOGGER.info(
            "INFO: Mission series '%s' (%s) deleted",
            mission.get(const.DATA_MISSION_TITLE),
            mission_id,
        )
