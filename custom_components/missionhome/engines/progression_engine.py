"""Progression Engine - Pure logic for the EXP curve, levels and streaks.

This engine provides stateless, pure Python functions for:
- The cumulative EXP cost of each level
- Level derivation from total EXP (self-correcting from a cached hint)
- EXP-gain application (monotone, never lowers the level)
- Streak counting over a completion predicate
- Progress-to-next-level figures for display
- Retention of the processed EXP event ledger

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in ProgressionManager.

EXP curve:
    Level 1 -> 2 costs 100 EXP; every further level-up costs 50 more than
    the previous one.

    LVL 1 → 0
    LVL 2 → 100
    LVL 3 → 250
    LVL 4 → 450
    LVL 5 → 700
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_now_utc, dt_parse

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..type_defs import UserProgressData


@dataclass(frozen=True)
class ExpGainResult:
    """Outcome of ProgressionEngine.apply_exp_gain().

    Attributes:
        total_exp: Total EXP after the gain
        level: Level after the gain
        previous_level: Level before the gain
        applied: False when the gain was ignored (gain <= 0)
    """

    total_exp: int
    level: int
    previous_level: int
    applied: bool = True

    @property
    def levels_gained(self) -> int:
        """Number of levels crossed by this gain."""
        return self.level - self.previous_level


class ProgressionEngine:
    """Pure logic engine for EXP and level arithmetic.

    All methods are static - no instance state.
    """

    @staticmethod
    def required_exp_for_level(level: int) -> int:
        """Return the cumulative EXP needed to reach `level`.

        Level 1 -> 0, 2 -> 100, 3 -> 250, 4 -> 450, 5 -> 700 (closed form for
        L >= 1 is 25L² + 25L - 50).
        """
        if level <= 1:
            return 0

        total = 0
        for step in range(1, level):
            total += const.EXP_BASE_LEVEL_COST + const.EXP_LEVEL_COST_STEP * (step - 1)
        return total

    @staticmethod
    def level_for_exp(total_exp: int, hint_level: int = 1) -> int:
        """Derive the level for `total_exp`, starting from a cached level.

        Walks upward while the next threshold is reached, then downward while
        the current threshold is not. A stale hint (too high or too low) is
        corrected without recomputing from level 1.
        """
        level = max(1, int(hint_level or 1))

        while total_exp >= ProgressionEngine.required_exp_for_level(level + 1):
            level += 1

        while level > 1 and total_exp < ProgressionEngine.required_exp_for_level(level):
            level -= 1

        return level

    @staticmethod
    def apply_exp_gain(
        user: UserProgressData | dict[str, Any], gain: int
    ) -> ExpGainResult:
        """Apply an EXP gain to a user's totals (does not modify `user`).

        Args:
            user: User progression document (totalExp, level)
            gain: EXP to add

        Returns:
            ExpGainResult; `applied` is False and the totals are unchanged
            when gain <= 0.
        """
        current_exp = int(user.get(const.DATA_USER_TOTAL_EXP) or 0)
        current_level = max(1, int(user.get(const.DATA_USER_LEVEL) or 1))

        if gain <= 0:
            const.LOGGER.debug(
                "DEBUG: Ignoring non-positive EXP gain %s for user '%s'",
                gain,
                user.get(const.DATA_USER_UID),
            )
            return ExpGainResult(
                total_exp=current_exp,
                level=current_level,
                previous_level=current_level,
                applied=False,
            )

        new_exp = current_exp + gain
        level = current_level
        # Gains never lower the level, so only the upward walk is needed
        while new_exp >= ProgressionEngine.required_exp_for_level(level + 1):
            level += 1

        return ExpGainResult(
            total_exp=new_exp,
            level=level,
            previous_level=current_level,
        )

    @staticmethod
    def streak(
        completed_on_day: Callable[[date], bool],
        reference_date: date,
        max_lookback: int = const.DEFAULT_STREAK_MAX_LOOKBACK_DAYS,
    ) -> int:
        """Count consecutive completed days ending at `reference_date`.

        Walks backward one day at a time (reference day included) and stops at
        the first day without a completion, or after `max_lookback` days.
        """
        count = 0
        cursor = reference_date
        for _ in range(max(0, max_lookback)):
            if not completed_on_day(cursor):
                break
            count += 1
            cursor -= timedelta(days=1)
        return count

    @staticmethod
    def prune_processed_events(
        processed: dict[str, str],
        max_age_days: int = const.DEFAULT_PROCESSED_EXP_EVENTS_MAX_AGE_DAYS,
        max_entries: int = const.DEFAULT_PROCESSED_EXP_EVENTS_MAX_ENTRIES,
        now_utc: datetime | None = None,
    ) -> int:
        """Drop processed EXP event keys applied too long ago.

        Modifies the mapping in place. Keys are aged by the timestamp they
        were applied at, not by their occurrence date. Entries with an
        unreadable timestamp are kept. After the age cut, the oldest
        insertions are dropped until at most `max_entries` remain.

        Args:
            processed: event key -> ISO timestamp of application
            max_age_days: Retention window in days (0 disables the age cut)
            max_entries: Maximum keys to keep
            now_utc: Optional current time override for deterministic tests

        Returns:
            Number of keys removed.
        """
        before = len(processed)

        if max_age_days > 0:
            cutoff = (now_utc or dt_now_utc()) - timedelta(days=max_age_days)
            for event_key, applied_at in list(processed.items()):
                parsed = dt_parse(applied_at, default_tzinfo=UTC)
                if parsed is not None and parsed < cutoff:
                    del processed[event_key]

        overflow = len(processed) - max(0, max_entries)
        if overflow > 0:
            for event_key in list(processed)[:overflow]:
                del processed[event_key]

        return before - len(processed)

    @staticmethod
    def exp_progress(total_exp: int, level: int) -> dict[str, Any]:
        """Return progress figures within the current level.

        Returns:
            Dict with exp_into_level, exp_for_next_level, exp_to_next_level
            and progress_pct (0-100, one decimal).
        """
        floor_exp = ProgressionEngine.required_exp_for_level(level)
        next_exp = ProgressionEngine.required_exp_for_level(level + 1)
        span = next_exp - floor_exp
        into_level = max(0, total_exp - floor_exp)

        return {
            const.ATTR_EXP_INTO_LEVEL: into_level,
            const.ATTR_EXP_FOR_NEXT_LEVEL: span,
            const.ATTR_EXP_TO_NEXT_LEVEL: max(0, next_exp - total_exp),
            const.ATTR_PROGRESS_PCT: round(min(100.0, into_level * 100 / span), 1),
        }
