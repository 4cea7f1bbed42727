"""Tests for MissionHome services (scripts, automations and dashboards)."""

from __future__ import annotations

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError

from custom_components.missionhome import const
from custom_components.missionhome.utils.dt_utils import date_key, dt_today_local
from tests.helpers import SetupResult, day_offset, setup_from_yaml


@pytest.fixture
async def scenario(hass: HomeAssistant) -> SetupResult:
    """Load the household scenario."""
    return await setup_from_yaml(hass, "tests/scenarios/scenario_household.yaml")


async def test_services_registered(hass: HomeAssistant, scenario: SetupResult) -> None:
    """Every MissionHome service is registered after setup."""
    for service in (
        const.SERVICE_CREATE_MISSION,
        const.SERVICE_COMPLETE_MISSION,
        const.SERVICE_SKIP_MISSION_OCCURRENCE,
        const.SERVICE_DELETE_MISSION,
        const.SERVICE_GENERATE_DAILY_SUGGESTIONS,
        const.SERVICE_ACCEPT_SUGGESTION,
        const.SERVICE_DECLINE_SUGGESTION,
        const.SERVICE_GET_MISSIONS_FOR_DATE,
    ):
        assert hass.services.has_service(const.DOMAIN, service)


class TestMissionServices:
    """Test create, complete, skip and delete services."""

    async def test_create_mission_returns_id(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """create_mission responds with the new mission id."""
        response = await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_CREATE_MISSION,
            {
                const.FIELD_TITLE: "Sort the recycling",
                const.FIELD_DUE_DATE: date_key(dt_today_local()),
                const.FIELD_REPEAT: const.REPEAT_WEEKLY,
                const.FIELD_EXP_VALUE: 50,
                const.FIELD_ASSIGNED_TO_USER_ID: "bob",
            },
            blocking=True,
            return_response=True,
        )

        mission = scenario.coordinator.missions_data[response[const.FIELD_MISSION_ID]]
        assert mission[const.DATA_MISSION_TITLE] == "Sort the recycling"
        assert mission[const.DATA_MISSION_REPEAT][const.DATA_MISSION_REPEAT_TYPE] == (
            const.REPEAT_WEEKLY
        )

    async def test_create_mission_bad_date(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """An unparseable due date surfaces as HomeAssistantError."""
        with pytest.raises(HomeAssistantError):
            await hass.services.async_call(
                const.DOMAIN,
                const.SERVICE_CREATE_MISSION,
                {const.FIELD_TITLE: "Broken", const.FIELD_DUE_DATE: "someday"},
                blocking=True,
            )

    async def test_complete_mission(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """complete_mission records today's occurrence and grants EXP."""
        await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_COMPLETE_MISSION,
            {
                const.FIELD_MISSION_ID: scenario.mission_ids["trash"],
                const.FIELD_USER_ID: "alice",
                const.FIELD_USER_NAME: "Alice",
            },
            blocking=True,
        )
        await hass.async_block_till_done()

        coordinator = scenario.coordinator
        assert coordinator.mission_manager.is_done_on(
            scenario.mission_ids["trash"], dt_today_local()
        )
        assert coordinator.users_data["alice"][const.DATA_USER_TOTAL_EXP] == 110

    async def test_complete_mission_twice_is_noop(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """A duplicate completion is not an error and grants nothing."""
        data = {
            const.FIELD_MISSION_ID: scenario.mission_ids["trash"],
            const.FIELD_USER_ID: "alice",
        }
        await hass.services.async_call(
            const.DOMAIN, const.SERVICE_COMPLETE_MISSION, data, blocking=True
        )
        await hass.services.async_call(
            const.DOMAIN, const.SERVICE_COMPLETE_MISSION, data, blocking=True
        )
        await hass.async_block_till_done()

        assert scenario.coordinator.users_data["alice"][const.DATA_USER_TOTAL_EXP] == 110

    async def test_complete_unscheduled_day(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """Completing a day with no occurrence is rejected."""
        with pytest.raises(HomeAssistantError):
            await hass.services.async_call(
                const.DOMAIN,
                const.SERVICE_COMPLETE_MISSION,
                {
                    const.FIELD_MISSION_ID: scenario.mission_ids["windows"],
                    const.FIELD_DATE: date_key(day_offset(1)),
                    const.FIELD_USER_ID: "alice",
                },
                blocking=True,
            )

    async def test_complete_future_occurrence(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """Completing tomorrow's occurrence of a daily mission is rejected."""
        with pytest.raises(HomeAssistantError):
            await hass.services.async_call(
                const.DOMAIN,
                const.SERVICE_COMPLETE_MISSION,
                {
                    const.FIELD_MISSION_ID: scenario.mission_ids["trash"],
                    const.FIELD_DATE: date_key(day_offset(1)),
                    const.FIELD_USER_ID: "alice",
                },
                blocking=True,
            )

        assert scenario.coordinator.users_data["alice"][const.DATA_USER_TOTAL_EXP] == 80

    async def test_complete_unknown_mission(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """Unknown mission ids are rejected."""
        with pytest.raises(HomeAssistantError):
            await hass.services.async_call(
                const.DOMAIN,
                const.SERVICE_COMPLETE_MISSION,
                {const.FIELD_MISSION_ID: "nope", const.FIELD_USER_ID: "alice"},
                blocking=True,
            )

    async def test_skip_and_delete(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """Skip hides one day; delete removes the whole series."""
        mission_id = scenario.mission_ids["trash"]
        tomorrow = date_key(day_offset(1))

        await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_SKIP_MISSION_OCCURRENCE,
            {const.FIELD_MISSION_ID: mission_id, const.FIELD_DATE: tomorrow},
            blocking=True,
        )
        assert tomorrow in scenario.coordinator.missions_data[mission_id][
            const.DATA_MISSION_SKIP_DATES
        ]

        await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_DELETE_MISSION,
            {const.FIELD_MISSION_ID: mission_id},
            blocking=True,
        )
        assert mission_id not in scenario.coordinator.missions_data
        assert mission_id in scenario.coordinator.deleted_missions_data

    async def test_get_missions_for_date(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """get_missions_for_date returns the day view for a user."""
        response = await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_GET_MISSIONS_FOR_DATE,
            {
                const.FIELD_DATE: date_key(day_offset(-1)),
                const.FIELD_USER_ID: "alice",
            },
            blocking=True,
            return_response=True,
        )

        assert response[const.FIELD_DATE] == date_key(day_offset(-1))
        missions = response["missions"]
        assert [m[const.DATA_MISSION_ID] for m in missions] == [
            scenario.mission_ids["trash"]
        ]
        assert missions[0]["done"] is True


class TestSuggestionServices:
    """Test the suggestion services."""

    async def test_generate_accept_decline(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """Generate a batch, accept one suggestion and decline another."""
        response = await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_GENERATE_DAILY_SUGGESTIONS,
            {const.FIELD_USER_ID: "alice"},
            blocking=True,
            return_response=True,
        )
        suggestions = response[const.ATTR_SUGGESTIONS]
        assert response[const.ATTR_USER_ID] == "alice"
        assert len(suggestions) == const.DEFAULT_DAILY_SUGGESTIONS_LIMIT

        accepted_id = suggestions[0][const.DATA_SUGGESTION_ID]
        declined_id = suggestions[1][const.DATA_SUGGESTION_ID]

        accept_response = await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_ACCEPT_SUGGESTION,
            {const.FIELD_SUGGESTION_ID: accepted_id},
            blocking=True,
            return_response=True,
        )
        await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_DECLINE_SUGGESTION,
            {const.FIELD_SUGGESTION_ID: declined_id},
            blocking=True,
        )

        coordinator = scenario.coordinator
        assert accept_response[const.FIELD_MISSION_ID] == f"daily_{accepted_id}"
        assert f"daily_{accepted_id}" in coordinator.missions_data
        assert coordinator.suggestions_data[declined_id][
            const.DATA_SUGGESTION_STATUS
        ] == const.SUGGESTION_STATUS_DECLINED

    async def test_generate_requires_user(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """Without user_id and without a calling user, generation fails."""
        with pytest.raises(HomeAssistantError):
            await hass.services.async_call(
                const.DOMAIN,
                const.SERVICE_GENERATE_DAILY_SUGGESTIONS,
                {},
                blocking=True,
            )

    async def test_accept_unknown_suggestion(
        self, hass: HomeAssistant, scenario: SetupResult
    ) -> None:
        """Unknown suggestion ids are rejected."""
        with pytest.raises(HomeAssistantError):
            await hass.services.async_call(
                const.DOMAIN,
                const.SERVICE_ACCEPT_SUGGESTION,
                {const.FIELD_SUGGESTION_ID: "missing"},
                blocking=True,
            )


async def test_services_removed_on_unload(
    hass: HomeAssistant, scenario: SetupResult
) -> None:
    """Services are removed when the last entry unloads."""
    assert await hass.config_entries.async_unload(scenario.config_entry.entry_id)
    await hass.async_block_till_done()

    assert not hass.services.has_service(const.DOMAIN, const.SERVICE_CREATE_MISSION)
