"""Tests for the MissionHome config and options flows."""

from __future__ import annotations

from unittest.mock import patch

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.missionhome import const


async def test_user_flow_creates_entry(hass: HomeAssistant) -> None:
    """The user step shows a confirmation form, then creates the entry."""
    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result["type"] == FlowResultType.FORM
    assert result["step_id"] == const.CONFIG_FLOW_STEP_USER

    with patch(
        "custom_components.missionhome.async_setup_entry", return_value=True
    ) as mock_setup:
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], user_input={}
        )
        await hass.async_block_till_done()

    assert result["type"] == FlowResultType.CREATE_ENTRY
    assert result["title"] == const.MISSIONHOME_TITLE
    assert result["data"] == {}
    assert result["options"] == const.DEFAULT_OPTIONS
    assert len(mock_setup.mock_calls) == 1


async def test_single_instance(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """A second household cannot be added."""
    mock_config_entry.add_to_hass(hass)

    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    assert result["type"] == FlowResultType.ABORT
    assert result["reason"] == const.TRANS_KEY_ERROR_SINGLE_INSTANCE


async def test_options_flow_saves_integers(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Options are stored as integers (NumberSelector hands back floats)."""
    result = await hass.config_entries.options.async_init(init_integration.entry_id)
    assert result["type"] == FlowResultType.FORM
    assert result["step_id"] == const.OPTIONS_FLOW_STEP_INIT

    result = await hass.config_entries.options.async_configure(
        result["flow_id"],
        user_input={
            const.CONF_SUGGESTION_COOLDOWN_DAYS: 5.0,
            const.CONF_DAILY_SUGGESTIONS_LIMIT: 6.0,
            const.CONF_STREAK_MAX_LOOKBACK_DAYS: 730.0,
            const.CONF_CALENDAR_SHOW_PERIOD: 14.0,
            const.CONF_UPDATE_INTERVAL: 10.0,
        },
    )
    await hass.async_block_till_done()

    assert result["type"] == FlowResultType.CREATE_ENTRY
    assert init_integration.options[const.CONF_SUGGESTION_COOLDOWN_DAYS] == 5
    assert init_integration.options[const.CONF_DAILY_SUGGESTIONS_LIMIT] == 6
    assert isinstance(init_integration.options[const.CONF_UPDATE_INTERVAL], int)


async def test_options_change_reloads_entry(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """The new pool size is used after the options-triggered reload."""
    result = await hass.config_entries.options.async_init(init_integration.entry_id)
    await hass.config_entries.options.async_configure(
        result["flow_id"],
        user_input={
            const.CONF_SUGGESTION_COOLDOWN_DAYS: 3,
            const.CONF_DAILY_SUGGESTIONS_LIMIT: 2,
            const.CONF_STREAK_MAX_LOOKBACK_DAYS: 365,
            const.CONF_CALENDAR_SHOW_PERIOD: 30,
            const.CONF_UPDATE_INTERVAL: 5,
        },
    )
    await hass.async_block_till_done()

    coordinator = hass.data[const.DOMAIN][init_integration.entry_id][const.COORDINATOR]
    assert len(coordinator.suggestion_manager.generate("alice")) == 2


async def test_unload_entry(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Unloading removes the entry data."""
    assert await hass.config_entries.async_unload(init_integration.entry_id)
    await hass.async_block_till_done()

    assert init_integration.entry_id not in hass.data[const.DOMAIN]
    assert init_integration.state is config_entries.ConfigEntryState.NOT_LOADED
