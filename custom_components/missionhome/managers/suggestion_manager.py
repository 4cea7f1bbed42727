"""Suggestion Manager - Daily challenge suggestions.

This manager handles the daily suggestion workflow:
- Generating at most one batch per user per calendar day
- Cooldown filtering against each user's lastAcceptedAt clock
- Accepting a suggestion (creates a one-off mission due today)
- Declining a suggestion
- Expiring PENDING suggestions left over from earlier days
- Purging decided suggestions past their retention window

ARCHITECTURE:
- SuggestionManager = STATEFUL owner of suggestion documents and the
  per-user offer bookkeeping (lastOfferDay, lastAcceptedAt)
- SuggestionEngine = Pure eligibility, sampling and transition logic
- Accepted suggestions become normal missions through MissionManager, so
  their completion follows the regular EXP path
"""

from __future__ import annotations

from datetime import timedelta
import random
from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.suggestion_engine import SuggestionEngine, SuggestionNotFoundError
from ..templates import DEFAULT_TEMPLATES
from ..utils.dt_utils import date_key, dt_now_utc, dt_today_local, start_of_local_day
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Sequence

    from homeassistant.core import HomeAssistant

    from ..coordinator import MissionHomeDataCoordinator
    from ..type_defs import SuggestionData, SuggestionTemplate


# Re-export exception for external use
__all__ = ["SuggestionManager", "SuggestionNotFoundError"]


class SuggestionManager(BaseManager):
    """Manager for daily challenge suggestions.

    Responsibilities:
    - Keep at most one PENDING batch per user
    - Guard ACCEPTED / DECLINED transitions so redelivery is a no-op
    - Create the 1:1 mission for an accepted suggestion
    """

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: MissionHomeDataCoordinator,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the SuggestionManager.

        Args:
            hass: Home Assistant instance
            coordinator: The main MissionHome coordinator
            rng: Random source for sampling and ids (injectable for tests)
        """
        super().__init__(hass, coordinator)
        self._coordinator = coordinator
        self.rng = rng or random.Random()
        self.templates: Sequence[SuggestionTemplate] = DEFAULT_TEMPLATES

    async def async_setup(self) -> None:
        """Set up the SuggestionManager.

        Suggestions are driven by service calls and the coordinator refresh;
        there are no events to subscribe to.
        """

    # =========================================================================
    # Queries
    # =========================================================================

    def get_suggestion(self, suggestion_id: str) -> SuggestionData:
        """Return a suggestion document.

        Raises:
            SuggestionNotFoundError: If the suggestion does not exist
        """
        suggestion = self._coordinator.suggestions_data.get(suggestion_id)
        if suggestion is None:
            raise SuggestionNotFoundError(suggestion_id)
        return suggestion

    def pending_for_user(self, user_id: str) -> list[SuggestionData]:
        """Return the user's current PENDING batch, oldest first."""
        return SuggestionEngine.pending_for_user(
            self._coordinator.suggestions_data, user_id
        )  # type: ignore[return-value]

    # =========================================================================
    # Generation
    # =========================================================================

    def generate(
        self,
        user_id: str,
        template_pool: Sequence[SuggestionTemplate] | None = None,
        cooldown_days: int | None = None,
        pool_size: int | None = None,
    ) -> list[SuggestionData]:
        """Generate today's suggestion batch for a user.

        Idempotent per user per calendar day: once lastOfferDay is today, the
        existing PENDING batch is returned without any change.

        Args:
            user_id: User receiving the suggestions
            template_pool: Templates to sample from (default pool if None)
            cooldown_days: Days before an accepted template is offered again
                (config option if None)
            pool_size: Maximum suggestions per batch (config option if None)

        Returns:
            The user's PENDING suggestions for today.
        """
        if cooldown_days is None:
            cooldown_days = self._coordinator.get_option(
                const.CONF_SUGGESTION_COOLDOWN_DAYS
            )
        if pool_size is None:
            pool_size = self._coordinator.get_option(const.CONF_DAILY_SUGGESTIONS_LIMIT)
        pool = list(template_pool if template_pool is not None else self.templates)

        user = self._coordinator.progression_manager.ensure_user(user_id)
        today = dt_today_local()
        today_key = date_key(today)

        if user.get(const.DATA_USER_LAST_OFFER_DAY) == today_key:
            const.LOGGER.debug(
                "DEBUG: Suggestions for user '%s' already generated for %s",
                user_id,
                today_key,
            )
            return self.pending_for_user(user_id)

        now = dt_now_utc()
        eligible = SuggestionEngine.eligible_templates(
            pool,
            user.get(const.DATA_USER_LAST_ACCEPTED_AT) or {},
            cooldown_days,
            now,
        )
        chosen = SuggestionEngine.sample(eligible, pool_size, self.rng)

        removed = self._remove_open_suggestions(user_id)

        batch: list[SuggestionData] = []
        for template in chosen:
            suggestion = SuggestionEngine.build_suggestion(
                user_id, template, today, now, self.rng
            )
            self._coordinator.suggestions_data[
                suggestion[const.DATA_SUGGESTION_ID]
            ] = suggestion
            batch.append(suggestion)

        user[const.DATA_USER_LAST_OFFER_DAY] = today_key
        user[const.DATA_USER_UPDATED_AT] = now.isoformat()
        self._coordinator._persist()

        self.emit(
            const.SIGNAL_SUFFIX_SUGGESTIONS_GENERATED,
            user_id=user_id,
            day_offer=today_key,
            suggestion_ids=[s[const.DATA_SUGGESTION_ID] for s in batch],
        )
        const.LOGGER.info(
            "INFO: Generated %s suggestion(s) for user '%s' on %s "
            "(%s eligible, %s old removed)",
            len(batch),
            user_id,
            today_key,
            len(eligible),
            removed,
        )
        return batch

    def _remove_open_suggestions(self, user_id: str) -> int:
        """Delete the user's PENDING and EXPIRED suggestions before a new batch."""
        suggestions = self._coordinator.suggestions_data
        stale_ids = [
            suggestion_id
            for suggestion_id, s in suggestions.items()
            if s.get(const.DATA_SUGGESTION_USER_ID) == user_id
            and s.get(const.DATA_SUGGESTION_STATUS)
            in (const.SUGGESTION_STATUS_PENDING, const.SUGGESTION_STATUS_EXPIRED)
        ]
        for suggestion_id in stale_ids:
            del suggestions[suggestion_id]
        return len(stale_ids)

    # =========================================================================
    # Transitions
    # =========================================================================

    def accept(self, suggestion_id: str) -> str | None:
        """Accept a suggestion and create its mission.

        Re-delivery of an accept (or accepting a declined/expired suggestion)
        is a no-op.

        Returns:
            The mission id bound to the suggestion, or None if the suggestion
            was not accepted by this or an earlier call.

        Raises:
            SuggestionNotFoundError: Unknown suggestion
        """
        suggestion = self.get_suggestion(suggestion_id)
        now = dt_now_utc()

        if not SuggestionEngine.transition(
            suggestion,
            const.SUGGESTION_STATUS_ACCEPTED,
            const.DATA_SUGGESTION_ACCEPTED_AT,
            now,
        ):
            const.LOGGER.debug(
                "DEBUG: Suggestion '%s' is %s, accept ignored",
                suggestion_id,
                suggestion.get(const.DATA_SUGGESTION_STATUS),
            )
            return suggestion.get(const.DATA_SUGGESTION_MISSION_ID)

        user_id = suggestion[const.DATA_SUGGESTION_USER_ID]
        mission_id = f"{const.MISSION_ID_PREFIX_DAILY}{suggestion_id}"

        if mission_id not in self._coordinator.missions_data:
            self._coordinator.mission_manager.create_mission(
                suggestion[const.DATA_SUGGESTION_TITLE],
                start_of_local_day(dt_today_local()),
                repeat=const.REPEAT_NONE,
                exp_value=int(suggestion.get(const.DATA_SUGGESTION_EXP_VALUE) or 0),
                exp_mode=suggestion.get(const.DATA_SUGGESTION_EXP_MODE),
                assigned_to_user_id=user_id,
                created_by_user_id=user_id,
                source=const.MISSION_SOURCE_DAILY_SUGGESTION,
                mission_id=mission_id,
                extra={const.DATA_MISSION_SUGGESTION_ID: suggestion_id},
            )
        suggestion[const.DATA_SUGGESTION_MISSION_ID] = mission_id

        user = self._coordinator.progression_manager.ensure_user(user_id)
        accepted = dict(user.get(const.DATA_USER_LAST_ACCEPTED_AT) or {})
        accepted[suggestion[const.DATA_SUGGESTION_KEY]] = now.isoformat()
        user[const.DATA_USER_LAST_ACCEPTED_AT] = accepted
        user[const.DATA_USER_UPDATED_AT] = now.isoformat()
        self._coordinator._persist()

        self.emit(
            const.SIGNAL_SUFFIX_SUGGESTION_ACCEPTED,
            suggestion_id=suggestion_id,
            user_id=user_id,
            mission_id=mission_id,
        )
        const.LOGGER.info(
            "INFO: Suggestion '%s' accepted by user '%s', mission '%s' created",
            suggestion_id,
            user_id,
            mission_id,
        )
        return mission_id

    def decline(self, suggestion_id: str) -> bool:
        """Decline a suggestion.

        Leaves lastAcceptedAt untouched and creates no mission.

        Returns:
            True on the first transition, False if it was not PENDING.

        Raises:
            SuggestionNotFoundError: Unknown suggestion
        """
        suggestion = self.get_suggestion(suggestion_id)

        if not SuggestionEngine.transition(
            suggestion,
            const.SUGGESTION_STATUS_DECLINED,
            const.DATA_SUGGESTION_DECLINED_AT,
        ):
            const.LOGGER.debug(
                "DEBUG: Suggestion '%s' is %s, decline ignored",
                suggestion_id,
                suggestion.get(const.DATA_SUGGESTION_STATUS),
            )
            return False

        self._coordinator._persist()
        self.emit(
            const.SIGNAL_SUFFIX_SUGGESTION_DECLINED,
            suggestion_id=suggestion_id,
            user_id=suggestion.get(const.DATA_SUGGESTION_USER_ID),
        )
        const.LOGGER.info("INFO: Suggestion '%s' declined", suggestion_id)
        return True

    def expire_stale(self) -> int:
        """Mark PENDING suggestions offered before today as EXPIRED.

        Does not persist; the coordinator refresh persists when this
        returns a non-zero count.

        Returns:
            Number of suggestions expired.
        """
        today_key = date_key(dt_today_local())
        now = dt_now_utc()
        expired = 0
        for suggestion in self._coordinator.suggestions_data.values():
            day_offer = suggestion.get(const.DATA_SUGGESTION_DAY_OFFER)
            if not day_offer or day_offer >= today_key:
                continue
            if SuggestionEngine.transition(
                suggestion,
                const.SUGGESTION_STATUS_EXPIRED,
                const.DATA_SUGGESTION_EXPIRED_AT,
                now,
            ):
                expired += 1

        if expired:
            const.LOGGER.debug("DEBUG: Expired %s stale suggestion(s)", expired)
        return expired

    def purge_decided(
        self, retention_days: int = const.DEFAULT_DECIDED_SUGGESTION_RETENTION_DAYS
    ) -> int:
        """Delete ACCEPTED, DECLINED and EXPIRED suggestions offered long ago.

        The cooldown clock lives on the user (lastAcceptedAt) and is not
        touched.
        Does not persist; the coordinator refresh persists when this returns
        a non-zero count.

        Returns:
            Number of suggestions deleted.
        """
        cutoff_key = date_key(dt_today_local() - timedelta(days=retention_days))
        suggestions = self._coordinator.suggestions_data
        old_ids = [
            suggestion_id
            for suggestion_id, s in suggestions.items()
            if s.get(const.DATA_SUGGESTION_STATUS) != const.SUGGESTION_STATUS_PENDING
            and (s.get(const.DATA_SUGGESTION_DAY_OFFER) or "") < cutoff_key
        ]
        for suggestion_id in old_ids:
            del suggestions[suggestion_id]

        if old_ids:
            const.LOGGER.debug(
                "DEBUG: Purged %s decided suggestion(s) offered before %s",
                len(old_ids),
                cutoff_key,
            )
        return len(old_ids)

    def summary_for_user(self, user_id: str) -> list[dict[str, Any]]:
        """Return a compact view of the user's PENDING batch for entities."""
        return [
            {
                const.DATA_SUGGESTION_ID: s[const.DATA_SUGGESTION_ID],
                const.DATA_SUGGESTION_TITLE: s[const.DATA_SUGGESTION_TITLE],
                const.DATA_SUGGESTION_EXP_VALUE: s[const.DATA_SUGGESTION_EXP_VALUE],
                const.DATA_SUGGESTION_EXP_MODE: s.get(const.DATA_SUGGESTION_EXP_MODE),
            }
            for s in self.pending_for_user(user_id)
        ]
