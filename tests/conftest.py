"""Shared fixtures for MissionHome tests."""

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.missionhome.const import (
    DEFAULT_OPTIONS,
    DOMAIN,
    MISSIONHOME_TITLE,
)
from custom_components.missionhome.store import MissionHomeStore
from custom_components.missionhome.utils import dt_utils

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def restore_default_timezone() -> Any:
    """Keep the dt_utils timezone set by one test from leaking into the next."""
    original = dt_utils.get_default_timezone()
    yield
    dt_utils.set_default_timezone(original)


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title=MISSIONHOME_TITLE,
        data={},
        options=dict(DEFAULT_OPTIONS),
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return mock storage data structure."""
    return MissionHomeStore.get_default_structure()


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the MissionHome integration for testing with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry


def create_mock_mission_data(
    mission_id: str,
    title: str = "Test Mission",
    due_date: str = "2025-04-07",
    repeat: str = "none",
    exp_value: int = 50,
    **extra: Any,
) -> dict[str, Any]:
    """Create mock mission data for testing."""
    mission = {
        "id": mission_id,
        "title": title,
        "dueDate": due_date,
        "repeat": {"type": repeat},
        "skipDates": [],
        "archived": False,
        "expValue": exp_value,
        "expMode": "medium",
        "assignedToUserId": None,
        "createdByUserId": None,
        "source": "MANUAL",
        "completed": False,
        "completedAt": None,
    }
    if repeat != "none":
        mission["completedDates"] = []
        mission["completedByByDate"] = {}
    mission.update(extra)
    return mission


def create_mock_user_data(
    uid: str, total_exp: int = 0, level: int = 1, **extra: Any
) -> dict[str, Any]:
    """Create mock user progression data for testing."""
    user = {
        "uid": uid,
        "displayName": uid.title(),
        "totalExp": total_exp,
        "level": level,
        "lastOfferDay": None,
        "lastAcceptedAt": {},
    }
    user.update(extra)
    return user
