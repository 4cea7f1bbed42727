"""Suggestion Engine - Pure logic for daily challenge suggestions.

This engine provides stateless, pure Python functions for:
- Cooldown eligibility of suggestion templates
- Uniform sampling of a daily batch (injectable RNG)
- Suggestion document construction and id generation
- Difficulty (expMode) derivation from EXP value
- Guarded status transitions (PENDING -> ACCEPTED / DECLINED / EXPIRED)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in SuggestionManager.
"""

from __future__ import annotations

from datetime import date, datetime
import random
import string
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import (
    date_key,
    days_elapsed,
    dt_now_utc,
    dt_parse,
    end_of_local_day,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import SuggestionData, SuggestionTemplate


_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LENGTH = 6


class SuggestionNotFoundError(Exception):
    """Raised when a suggestion id does not exist.

    Attributes:
        suggestion_id: The unknown suggestion id
    """

    def __init__(self, suggestion_id: str) -> None:
        """Initialize SuggestionNotFoundError."""
        self.suggestion_id = suggestion_id
        super().__init__(const.ERROR_SUGGESTION_NOT_FOUND_FMT.format(suggestion_id))


class SuggestionEngine:
    """Pure logic engine for suggestion eligibility, sampling and transitions.

    All methods are static - no instance state.
    """

    # Allowed status transitions (terminal states have no entry)
    VALID_TRANSITIONS: dict[str, list[str]] = {
        const.SUGGESTION_STATUS_PENDING: [
            const.SUGGESTION_STATUS_ACCEPTED,
            const.SUGGESTION_STATUS_DECLINED,
            const.SUGGESTION_STATUS_EXPIRED,
        ],
    }

    @staticmethod
    def difficulty_for_exp(exp_value: int) -> str:
        """Map an EXP value to an expMode label."""
        if exp_value >= const.EXP_THRESHOLD_EXTREME:
            return const.EXP_MODE_EXTREME
        if exp_value >= const.EXP_THRESHOLD_HARD:
            return const.EXP_MODE_HARD
        if exp_value >= const.EXP_THRESHOLD_MEDIUM:
            return const.EXP_MODE_MEDIUM
        return const.EXP_MODE_EASY

    @staticmethod
    def is_eligible(
        template_key: str,
        last_accepted_at: Mapping[str, str],
        cooldown_days: int,
        now: datetime,
    ) -> bool:
        """Return True if the template is out of its cooldown.

        Eligible when never accepted, or when at least `cooldown_days` whole
        days have elapsed since the last acceptance. Exactly `cooldown_days`
        ago is eligible; one day less is not. An unparseable timestamp does
        not block the template.
        """
        raw = last_accepted_at.get(template_key)
        if not raw:
            return True

        accepted_at = dt_parse(raw)
        if accepted_at is None:
            const.LOGGER.warning(
                "WARNING: Ignoring unparseable lastAcceptedAt '%s' for template '%s'",
                raw,
                template_key,
            )
            return True

        return days_elapsed(accepted_at, now) >= cooldown_days

    @staticmethod
    def eligible_templates(
        templates: Iterable[SuggestionTemplate],
        last_accepted_at: Mapping[str, str],
        cooldown_days: int,
        now: datetime,
    ) -> list[SuggestionTemplate]:
        """Filter the pool down to templates outside their cooldown."""
        return [
            template
            for template in templates
            if SuggestionEngine.is_eligible(
                template[const.DATA_TEMPLATE_KEY],
                last_accepted_at,
                cooldown_days,
                now,
            )
        ]

    @staticmethod
    def sample(
        templates: list[SuggestionTemplate],
        pool_size: int,
        rng: random.Random | None = None,
    ) -> list[SuggestionTemplate]:
        """Uniformly sample min(pool_size, len(templates)) without replacement."""
        count = max(0, min(pool_size, len(templates)))
        return (rng or random.Random()).sample(templates, count)

    @staticmethod
    def make_suggestion_id(
        template_key: str, now: datetime, rng: random.Random | None = None
    ) -> str:
        """Build an id of the form '<key>_<epoch ms>_<6 base36 chars>'."""
        chooser = rng or random.Random()
        suffix = "".join(chooser.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
        return f"{template_key}_{int(now.timestamp() * 1000)}_{suffix}"

    @staticmethod
    def build_suggestion(
        user_id: str,
        template: SuggestionTemplate,
        day: date,
        now: datetime,
        rng: random.Random | None = None,
    ) -> SuggestionData:
        """Create a PENDING suggestion document for `day`."""
        exp_value = int(template.get(const.DATA_TEMPLATE_EXP_VALUE) or 0)
        key = template[const.DATA_TEMPLATE_KEY]
        return {
            const.DATA_SUGGESTION_ID: SuggestionEngine.make_suggestion_id(key, now, rng),
            const.DATA_SUGGESTION_USER_ID: user_id,
            const.DATA_SUGGESTION_KEY: key,
            const.DATA_SUGGESTION_TITLE: template[const.DATA_TEMPLATE_TITLE],
            const.DATA_SUGGESTION_EXP_VALUE: exp_value,
            const.DATA_SUGGESTION_EXP_MODE: SuggestionEngine.difficulty_for_exp(
                exp_value
            ),
            const.DATA_SUGGESTION_STATUS: const.SUGGESTION_STATUS_PENDING,
            const.DATA_SUGGESTION_DAY_OFFER: date_key(day),
            const.DATA_SUGGESTION_DUE_AT: end_of_local_day(day).isoformat(),
            const.DATA_SUGGESTION_CREATED_AT: now.isoformat(),
        }  # type: ignore[typeddict-item]

    @staticmethod
    def can_transition(current_status: str | None, new_status: str) -> bool:
        """Return True if `current_status` may move to `new_status`."""
        return new_status in SuggestionEngine.VALID_TRANSITIONS.get(
            current_status or "", []
        )

    @staticmethod
    def transition(
        suggestion: SuggestionData | dict[str, Any],
        new_status: str,
        timestamp_field: str,
        now: datetime | None = None,
    ) -> bool:
        """Apply a guarded status transition in place.

        If the current status cannot reach `new_status` (including already
        being there), nothing changes and False is returned.
        """
        before = suggestion.get(const.DATA_SUGGESTION_STATUS)
        if not SuggestionEngine.can_transition(before, new_status):
            return False

        suggestion[const.DATA_SUGGESTION_STATUS] = new_status
        suggestion[timestamp_field] = (now or dt_now_utc()).isoformat()
        return True

    @staticmethod
    def pending_for_user(
        suggestions: Mapping[str, SuggestionData | dict[str, Any]], user_id: str
    ) -> list[SuggestionData | dict[str, Any]]:
        """Return the user's PENDING suggestions, oldest first."""
        pending = [
            s
            for s in suggestions.values()
            if s.get(const.DATA_SUGGESTION_USER_ID) == user_id
            and s.get(const.DATA_SUGGESTION_STATUS) == const.SUGGESTION_STATUS_PENDING
        ]
        return sorted(pending, key=lambda s: s.get(const.DATA_SUGGESTION_CREATED_AT, ""))
