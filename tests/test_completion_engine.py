"""Tests for CompletionEngine - pure logic, no HA fixtures needed.

Covers the single vs per-date completion representations, the legacy
completedAt read path and completion effect planning.
"""

from __future__ import annotations

from datetime import UTC, date, datetime

from custom_components.missionhome import const
from custom_components.missionhome.engines.completion_engine import (
    Actor,
    CompletionEngine,
    CompletionMode,
)

from tests.conftest import create_mock_mission_data

NOW = datetime(2025, 4, 7, 12, 0, tzinfo=UTC)
ALICE = Actor(user_id="alice", name="Alice")
BOB = Actor(user_id="bob", name="Bob")

# =============================================================================
# TEST: MODE SELECTION
# =============================================================================


class TestCompletionMode:
    """Test representation selection by repeat type."""

    def test_one_off_is_single(self) -> None:
        """repeat 'none' uses the single representation."""
        mission = create_mock_mission_data("m1")
        assert CompletionEngine.mode_for(mission) == CompletionMode.SINGLE

    def test_recurring_is_per_date(self) -> None:
        """Every recurring type uses the per-date representation."""
        for repeat in (const.REPEAT_DAILY, const.REPEAT_WEEKLY, const.REPEAT_MONTHLY):
            mission = create_mock_mission_data("m1", repeat=repeat)
            assert CompletionEngine.mode_for(mission) == CompletionMode.PER_DATE


# =============================================================================
# TEST: IS_DONE_ON
# =============================================================================


class TestIsDoneOn:
    """Test completion queries."""

    def test_one_off_uses_completed_flag(self) -> None:
        """A one-off is done when its completed flag is set."""
        mission = create_mock_mission_data("m1")
        assert not CompletionEngine.is_done_on(mission, date(2025, 4, 7))

        mission[const.DATA_MISSION_COMPLETED] = True
        assert CompletionEngine.is_done_on(mission, date(2025, 4, 7))

    def test_recurring_uses_completed_dates(self) -> None:
        """A recurring occurrence is done only if its date-key is recorded."""
        mission = create_mock_mission_data(
            "m1", repeat="daily", completedDates=["2025-04-07"]
        )

        assert CompletionEngine.is_done_on(mission, date(2025, 4, 7))
        assert not CompletionEngine.is_done_on(mission, date(2025, 4, 8))

    def test_recurring_ignores_completed_flag(self) -> None:
        """The single-completion flag does not mark recurring occurrences done."""
        mission = create_mock_mission_data("m1", repeat="daily", completed=True)

        assert not CompletionEngine.is_done_on(mission, date(2025, 4, 7))

    def test_legacy_completed_at_fallback(self) -> None:
        """Without completedDates, completedAt's local day counts as done."""
        mission = create_mock_mission_data(
            "m1", repeat="weekly", completedAt="2025-04-07T09:30:00+00:00"
        )
        del mission[const.DATA_MISSION_COMPLETED_DATES]

        assert CompletionEngine.is_done_on(mission, date(2025, 4, 7))
        assert not CompletionEngine.is_done_on(mission, date(2025, 4, 14))

    def test_completed_dates_take_precedence_over_legacy(self) -> None:
        """Once completedDates exists, completedAt is no longer consulted."""
        mission = create_mock_mission_data(
            "m1",
            repeat="daily",
            completedDates=["2025-04-06"],
            completedAt="2025-04-07T09:30:00+00:00",
        )

        assert not CompletionEngine.is_done_on(mission, date(2025, 4, 7))


# =============================================================================
# TEST: COMPLETION CREDIT
# =============================================================================


class TestCompletionCredit:
    """Test is_done_by_user_on and count_completed_by_user."""

    def test_one_off_credits_completer_on_completion_day(self) -> None:
        """A one-off counts for whoever completed it, on that day only."""
        mission = create_mock_mission_data(
            "m1",
            createdByUserId="alice",
            completed=True,
            completedAt="2025-04-07T12:00:00+00:00",
            completedByUserId="bob",
        )

        assert CompletionEngine.is_done_by_user_on(mission, date(2025, 4, 7), "bob")
        assert not CompletionEngine.is_done_by_user_on(
            mission, date(2025, 4, 7), "alice"
        )
        assert not CompletionEngine.is_done_by_user_on(mission, date(2025, 4, 8), "bob")

    def test_recurring_credits_completer_and_assignee(self) -> None:
        """A per-date completion counts for the recorded completer and the assignee."""
        mission = create_mock_mission_data(
            "m1",
            repeat="daily",
            assignedToUserId="alice",
            completedDates=["2025-04-07"],
            completedByByDate={"2025-04-07": {"userId": "bob", "name": "Bob"}},
        )

        assert CompletionEngine.is_done_by_user_on(mission, date(2025, 4, 7), "bob")
        assert CompletionEngine.is_done_by_user_on(mission, date(2025, 4, 7), "alice")
        assert not CompletionEngine.is_done_by_user_on(
            mission, date(2025, 4, 7), "carol"
        )
        assert not CompletionEngine.is_done_by_user_on(mission, date(2025, 4, 6), "bob")

    def test_count_credits_entries_then_assignee(self) -> None:
        """Dates with a completedBy entry go to the completer, others to the assignee."""
        mission = create_mock_mission_data(
            "m1",
            repeat="daily",
            assignedToUserId="alice",
            completedDates=["2025-04-05", "2025-04-06", "2025-04-07"],
            completedByByDate={"2025-04-07": {"userId": "bob", "name": "Bob"}},
        )

        assert CompletionEngine.count_completed_by_user(mission, "alice") == 2
        assert CompletionEngine.count_completed_by_user(mission, "bob") == 1
        assert CompletionEngine.count_completed_by_user(mission, "carol") == 0

    def test_count_one_off(self) -> None:
        """A completed one-off counts once, for its completer."""
        mission = create_mock_mission_data(
            "m1", completed=True, completedByUserId="bob"
        )

        assert CompletionEngine.count_completed_by_user(mission, "bob") == 1
        assert CompletionEngine.count_completed_by_user(mission, "alice") == 0


# =============================================================================
# TEST: PLAN_COMPLETION / APPLY_EFFECT
# =============================================================================


class TestPlanCompletion:
    """Test completion effect planning and application."""

    def test_plan_one_off(self) -> None:
        """One-off completion sets the single-completion fields."""
        mission = create_mock_mission_data("m1", exp_value=50)

        effect = CompletionEngine.plan_completion(mission, date(2025, 4, 7), ALICE, NOW)

        assert effect.mode == CompletionMode.SINGLE
        assert effect.occurrence_key == "2025-04-07"
        assert effect.updates[const.DATA_MISSION_COMPLETED] is True
        assert effect.updates[const.DATA_MISSION_COMPLETED_BY_USER_ID] == "alice"
        assert effect.updates[const.DATA_MISSION_COMPLETED_AT] == NOW.isoformat()
        assert effect.add_completed_date is None

    def test_plan_recurring(self) -> None:
        """Recurring completion adds the date-key and records who did it."""
        mission = create_mock_mission_data("m1", repeat="daily")

        effect = CompletionEngine.plan_completion(mission, date(2025, 4, 7), ALICE, NOW)

        assert effect.mode == CompletionMode.PER_DATE
        assert effect.updates[const.DATA_MISSION_COMPLETED] is False
        assert effect.add_completed_date == "2025-04-07"
        assert effect.completed_by == {
            const.DATA_COMPLETED_BY_USER_ID: "alice",
            const.DATA_COMPLETED_BY_NAME: "Alice",
            const.DATA_COMPLETED_BY_AT: NOW.isoformat(),
        }

    def test_exp_event_goes_to_assignee(self) -> None:
        """The assignee earns the EXP even when someone else completes it."""
        mission = create_mock_mission_data(
            "m1", exp_value=30, assignedToUserId="alice"
        )

        effect = CompletionEngine.plan_completion(mission, date(2025, 4, 7), BOB, NOW)

        assert effect.exp_event is not None
        assert effect.exp_event.user_id == "alice"
        assert effect.exp_event.exp_value == 30
        assert effect.exp_event.event_key == "m1:2025-04-07"

    def test_exp_event_falls_back_to_actor(self) -> None:
        """Unassigned missions grant EXP to whoever completed them."""
        mission = create_mock_mission_data("m1", exp_value=30)

        effect = CompletionEngine.plan_completion(mission, date(2025, 4, 7), BOB, NOW)

        assert effect.exp_event is not None
        assert effect.exp_event.user_id == "bob"

    def test_plan_does_not_mutate_mission(self) -> None:
        """Planning leaves the document untouched."""
        mission = create_mock_mission_data("m1", repeat="daily")

        CompletionEngine.plan_completion(mission, date(2025, 4, 7), ALICE, NOW)

        assert mission[const.DATA_MISSION_COMPLETED_DATES] == []
        assert mission[const.DATA_MISSION_COMPLETED_BY_BY_DATE] == {}

    def test_apply_effect_is_set_union(self) -> None:
        """Applying the same recurring effect twice records the date once."""
        mission = create_mock_mission_data("m1", repeat="daily")
        effect = CompletionEngine.plan_completion(mission, date(2025, 4, 7), ALICE, NOW)

        CompletionEngine.apply_effect(mission, effect)
        CompletionEngine.apply_effect(mission, effect)

        assert mission[const.DATA_MISSION_COMPLETED_DATES] == ["2025-04-07"]
        assert CompletionEngine.is_done_on(mission, date(2025, 4, 7))

    def test_completed_by_by_date_last_write_wins(self) -> None:
        """Two actors on the same date-key: the later write is kept."""
        mission = create_mock_mission_data("m1", repeat="daily")

        first = CompletionEngine.plan_completion(mission, date(2025, 4, 7), ALICE, NOW)
        second = CompletionEngine.plan_completion(mission, date(2025, 4, 7), BOB, NOW)
        CompletionEngine.apply_effect(mission, first)
        CompletionEngine.apply_effect(mission, second)

        assert mission[const.DATA_MISSION_COMPLETED_DATES] == ["2025-04-07"]
        completed_by = CompletionEngine.completed_by_on(mission, date(2025, 4, 7))
        assert completed_by is not None
        assert completed_by[const.DATA_COMPLETED_BY_USER_ID] == "bob"

    def test_completed_by_on_one_off(self) -> None:
        """One-off completer is read from the single-completion fields."""
        mission = create_mock_mission_data("m1")
        assert CompletionEngine.completed_by_on(mission, date(2025, 4, 7)) is None

        effect = CompletionEngine.plan_completion(mission, date(2025, 4, 7), ALICE, NOW)
        CompletionEngine.apply_effect(mission, effect)

        completed_by = CompletionEngine.completed_by_on(mission, date(2025, 4, 7))
        assert completed_by is not None
        assert completed_by[const.DATA_COMPLETED_BY_NAME] == "Alice"
