"""Progression Manager - EXP application, levels and streaks.

This manager is the level transition trigger: it reacts to EXP_GAINED events
emitted by MissionManager and applies each grant to the user's progression
exactly once.

ARCHITECTURE:
- ProgressionManager = STATEFUL owner of user progression documents
- ProgressionEngine = Pure EXP curve, level and streak logic (STATELESS)
- Redelivered events are recognized by their event key
  ("<mission_id>:<occurrence date-key>") in processed_exp_events

Level-ups emit LEVEL_CHANGED for other managers and fire the
`missionhome_level_up` bus event for notification automations.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..engines.completion_engine import CompletionEngine
from ..engines.progression_engine import ExpGainResult, ProgressionEngine
from ..utils.dt_utils import dt_now_utc, dt_today_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import MissionHomeDataCoordinator
    from ..type_defs import MissionLogEntry, UserProgressData


class ProgressionManager(BaseManager):
    """Manager for user progression.

    Responsibilities:
    - Create user progression documents on first reference
    - Apply EXP grants idempotently and keep the cached level consistent
    - Append the mission log (EXP audit trail)
    - Compute streaks and completion counts from completer records
    """

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: MissionHomeDataCoordinator,
    ) -> None:
        """Initialize the ProgressionManager."""
        super().__init__(hass, coordinator)
        self._coordinator = coordinator

    async def async_setup(self) -> None:
        """Subscribe to EXP-gain and series-deletion events from MissionManager."""
        self.listen(const.SIGNAL_SUFFIX_EXP_GAINED, self._on_exp_gained)
        self.listen(const.SIGNAL_SUFFIX_MISSION_DELETED, self._on_mission_deleted)

    # =========================================================================
    # Users
    # =========================================================================

    def get_user(self, user_id: str) -> UserProgressData | None:
        """Return the user's progression document, or None."""
        return self._coordinator.users_data.get(user_id)

    def ensure_user(
        self, user_id: str, display_name: str | None = None
    ) -> UserProgressData:
        """Return the user's document, creating a fresh one if missing.

        Does not persist; callers persist together with their own mutation.
        """
        user = self._coordinator.users_data.get(user_id)
        if user is not None:
            if display_name and not user.get(const.DATA_USER_DISPLAY_NAME):
                user[const.DATA_USER_DISPLAY_NAME] = display_name
            return user

        now_iso = dt_now_utc().isoformat()
        user = {
            const.DATA_USER_UID: user_id,
            const.DATA_USER_DISPLAY_NAME: display_name,
            const.DATA_USER_TOTAL_EXP: const.DEFAULT_USER_TOTAL_EXP,
            const.DATA_USER_LEVEL: const.DEFAULT_USER_LEVEL,
            const.DATA_USER_LAST_OFFER_DAY: None,
            const.DATA_USER_LAST_ACCEPTED_AT: {},
            const.DATA_USER_CREATED_AT: now_iso,
            const.DATA_USER_UPDATED_AT: now_iso,
        }
        self._coordinator.users_data[user_id] = user
        const.LOGGER.info("INFO: Created progression profile for user '%s'", user_id)
        self.emit(
            const.SIGNAL_SUFFIX_USER_CREATED,
            user_id=user_id,
            display_name=display_name,
        )
        return user  # type: ignore[return-value]

    def reconcile_levels(self) -> int:
        """Repair cached levels that disagree with totalExp.

        Returns:
            Number of users whose level was corrected.
        """
        repaired = 0
        for user_id, user in self._coordinator.users_data.items():
            total_exp = int(user.get(const.DATA_USER_TOTAL_EXP) or 0)
            cached = int(user.get(const.DATA_USER_LEVEL) or const.DEFAULT_USER_LEVEL)
            level = ProgressionEngine.level_for_exp(total_exp, cached)
            if level != cached:
                const.LOGGER.warning(
                    "WARNING: User '%s' cached level %s does not match %s EXP, "
                    "correcting to %s",
                    user_id,
                    cached,
                    total_exp,
                    level,
                )
                user[const.DATA_USER_LEVEL] = level
                repaired += 1
        return repaired

    # =========================================================================
    # EXP application
    # =========================================================================

    @callback
    def _on_exp_gained(self, payload: dict[str, Any]) -> None:
        """Handle EXP_GAINED event - apply the grant once.

        Args:
            payload: Event data containing:
                - mission_id, occurrence_key, event_key
                - user_id: Recipient
                - exp_value: EXP to grant
        """
        user_id = payload.get("user_id")
        mission_id = payload.get("mission_id")
        if not user_id or not mission_id:
            const.LOGGER.warning(
                "WARNING: EXP event without recipient or mission - user_id=%s, "
                "mission_id=%s",
                user_id,
                mission_id,
            )
            return

        self.apply_exp_event(
            user_id=user_id,
            mission_id=mission_id,
            occurrence_key=payload.get("occurrence_key") or "",
            gain=int(payload.get("exp_value") or 0),
        )

    def apply_exp_event(
        self,
        *,
        user_id: str,
        mission_id: str,
        occurrence_key: str,
        gain: int,
    ) -> ExpGainResult | None:
        """Apply one EXP grant and persist it.

        Returns:
            The ExpGainResult, or None when the event was already processed
            or the gain was not positive.
        """
        event_key = f"{mission_id}:{occurrence_key}"
        processed = self._coordinator.processed_exp_events
        if event_key in processed:
            const.LOGGER.debug(
                "DEBUG: EXP event '%s' already applied at %s, ignoring",
                event_key,
                processed[event_key],
            )
            return None

        if gain <= 0:
            const.LOGGER.info(
                "INFO: Mission '%s' has no positive EXP value, nothing to apply",
                mission_id,
            )
            return None

        user = self.ensure_user(user_id)
        result = ProgressionEngine.apply_exp_gain(user, gain)
        now_iso = dt_now_utc().isoformat()

        user[const.DATA_USER_TOTAL_EXP] = result.total_exp
        user[const.DATA_USER_LEVEL] = result.level
        user[const.DATA_USER_UPDATED_AT] = now_iso
        processed[event_key] = now_iso

        entry: MissionLogEntry = {
            const.DATA_LOG_MISSION_ID: mission_id,
            const.DATA_LOG_USER_ID: user_id,
            const.DATA_LOG_EXP_GAIN: gain,
            const.DATA_LOG_LEVEL_BEFORE: result.previous_level,
            const.DATA_LOG_LEVEL_AFTER: result.level,
            const.DATA_LOG_TOTAL_EXP_AFTER: result.total_exp,
            const.DATA_LOG_OCCURRENCE_KEY: occurrence_key,
            const.DATA_LOG_TIMESTAMP: now_iso,
        }  # type: ignore[typeddict-item]
        logs = self._coordinator.mission_logs
        logs.append(entry)
        if len(logs) > const.DEFAULT_MISSION_LOG_MAX_ENTRIES:
            del logs[: len(logs) - const.DEFAULT_MISSION_LOG_MAX_ENTRIES]

        self._coordinator._persist()

        const.LOGGER.info(
            "INFO: User '%s' gained %s EXP for mission '%s', new total: %s, level: %s",
            user_id,
            gain,
            mission_id,
            result.total_exp,
            result.level,
        )

        if result.levels_gained > 0:
            self.emit(
                const.SIGNAL_SUFFIX_LEVEL_CHANGED,
                user_id=user_id,
                old_level=result.previous_level,
                new_level=result.level,
                total_exp=result.total_exp,
            )
            self.hass.bus.async_fire(
                const.EVENT_LEVEL_UP,
                {
                    "user_id": user_id,
                    "old_level": result.previous_level,
                    "new_level": result.level,
                    "total_exp": result.total_exp,
                    "mission_id": mission_id,
                },
            )

        return result

    def get_history(self, user_id: str, limit: int = 20) -> list[MissionLogEntry]:
        """Return the user's most recent mission log entries (newest last)."""
        entries = [
            e
            for e in self._coordinator.mission_logs
            if e.get(const.DATA_LOG_USER_ID) == user_id
        ]
        return entries[-limit:]

    # =========================================================================
    # Ledger retention
    # =========================================================================

    def prune_processed_events(self) -> int:
        """Drop processed EXP event keys past the retention window.

        Does not persist; the coordinator refresh persists when this
        returns a non-zero count.
        """
        removed = ProgressionEngine.prune_processed_events(
            self._coordinator.processed_exp_events
        )
        if removed:
            const.LOGGER.debug("DEBUG: Pruned %s processed EXP event key(s)", removed)
        return removed

    @callback
    def _on_mission_deleted(self, payload: dict[str, Any]) -> None:
        """Handle MISSION_DELETED event - forget the series' event keys."""
        mission_id = payload.get("mission_id")
        if not mission_id:
            return

        processed = self._coordinator.processed_exp_events
        prefix = f"{mission_id}:"
        stale = [key for key in processed if key.startswith(prefix)]
        if not stale:
            return
        for key in stale:
            del processed[key]
        self._coordinator._persist()
        const.LOGGER.debug(
            "DEBUG: Dropped %s processed EXP event key(s) of deleted mission '%s'",
            len(stale),
            mission_id,
        )

    # =========================================================================
    # Streaks and display figures
    # =========================================================================

    def get_streak(self, user_id: str, reference_date: date | None = None) -> int:
        """Count consecutive days, ending today, on which the user completed a mission.

        Credit follows the completer, not the mission's owner; see
        CompletionEngine.is_done_by_user_on.
        """
        missions = list(self._coordinator.missions_data.values())

        def completed_on_day(day: date) -> bool:
            return any(
                CompletionEngine.is_done_by_user_on(m, day, user_id) for m in missions
            )

        return ProgressionEngine.streak(
            completed_on_day,
            reference_date or dt_today_local(),
            self._coordinator.get_option(const.CONF_STREAK_MAX_LOOKBACK_DAYS),
        )

    def get_completed_count(self, user_id: str) -> int:
        """Return how many mission completions are credited to the user."""
        return sum(
            CompletionEngine.count_completed_by_user(m, user_id)
            for m in self._coordinator.missions_data.values()
        )

    def get_progress(self, user_id: str) -> dict[str, Any]:
        """Return level, total EXP and progress-to-next-level for display."""
        user = self.get_user(user_id) or {}
        total_exp = int(user.get(const.DATA_USER_TOTAL_EXP) or 0)
        level = int(user.get(const.DATA_USER_LEVEL) or const.DEFAULT_USER_LEVEL)
        return {
            const.DATA_USER_LEVEL: level,
            const.ATTR_TOTAL_EXP: total_exp,
            **ProgressionEngine.exp_progress(total_exp, level),
        }
