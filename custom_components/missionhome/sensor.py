# File: sensor.py
"""Sensors for the MissionHome integration.

Per-user sensors, created for every user with a progression profile and
added on the fly when a new profile appears:

01. UserLevelSensor
02. UserStreakSensor
03. UserPendingSuggestionsSensor
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect

from . import const
from .coordinator import MissionHomeDataCoordinator
from .entity import MissionHomeCoordinatorEntity
from .helpers.device_helpers import create_user_device_info
from .helpers.entity_helpers import get_event_signal

# Coordinator-based entities don't poll
PARALLEL_UPDATES = 0


def _user_sensors(
    coordinator: MissionHomeDataCoordinator, entry: ConfigEntry, user_id: str
) -> list[SensorEntity]:
    user = coordinator.users_data.get(user_id, {})
    user_name = user.get(const.DATA_USER_DISPLAY_NAME) or user_id
    return [
        UserLevelSensor(coordinator, entry, user_id, user_name),
        UserStreakSensor(coordinator, entry, user_id, user_name),
        UserPendingSuggestionsSensor(coordinator, entry, user_id, user_name),
    ]


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities
):
    """Set up sensors for MissionHome integration."""
    coordinator: MissionHomeDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    entities: list[SensorEntity] = []
    for user_id in coordinator.users_data:
        entities.extend(_user_sensors(coordinator, entry, user_id))
    async_add_entities(entities)

    @callback
    def _on_user_created(payload: dict[str, Any]) -> None:
        user_id = payload.get("user_id")
        if not user_id:
            return
        const.LOGGER.debug("DEBUG: Adding sensors for new user '%s'", user_id)
        async_add_entities(_user_sensors(coordinator, entry, user_id))

    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_USER_CREATED),
            _on_user_created,
        )
    )


class _UserSensorBase(MissionHomeCoordinatorEntity, SensorEntity):
    """Shared identity for per-user sensors."""

    _attr_has_entity_name = True
    _uid_suffix = ""

    def __init__(
        self,
        coordinator: MissionHomeDataCoordinator,
        entry: ConfigEntry,
        user_id: str,
        user_name: str,
    ):
        """Initialize the sensor.

        Args:
            coordinator: MissionHomeDataCoordinator instance for data access.
            entry: ConfigEntry for this integration instance.
            user_id: User the sensor belongs to.
            user_name: Display name of the user.
        """
        super().__init__(coordinator)
        self._user_id = user_id
        self._user_name = user_name
        self._attr_unique_id = f"{entry.entry_id}_{user_id}{self._uid_suffix}"
        self._attr_device_info = create_user_device_info(user_id, user_name, entry)


# ------------------------------------------------------------------------------------------
class UserLevelSensor(_UserSensorBase):
    """Sensor for a user's level, with EXP progress in attributes."""

    _attr_name = "Level"
    _attr_icon = "mdi:trophy-outline"
    _attr_state_class = SensorStateClass.MEASUREMENT
    _uid_suffix = const.SENSOR_UID_SUFFIX_LEVEL

    @property
    def native_value(self) -> int:
        """Return the user's current level."""
        return self.coordinator.progression_manager.get_progress(self._user_id)[
            const.DATA_USER_LEVEL
        ]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose total EXP and progress to the next level."""
        progress = dict(self.coordinator.progression_manager.get_progress(self._user_id))
        progress.pop(const.DATA_USER_LEVEL, None)
        progress[const.ATTR_USER_ID] = self._user_id
        progress[const.ATTR_RECENT_EXP_GAINS] = [
            {
                const.DATA_LOG_MISSION_ID: entry.get(const.DATA_LOG_MISSION_ID),
                const.DATA_LOG_EXP_GAIN: entry.get(const.DATA_LOG_EXP_GAIN),
                const.DATA_LOG_TIMESTAMP: entry.get(const.DATA_LOG_TIMESTAMP),
            }
            for entry in self.coordinator.progression_manager.get_history(
                self._user_id, const.DEFAULT_RECENT_EXP_GAINS
            )
        ]
        return dict(sorted(progress.items()))


# ------------------------------------------------------------------------------------------
class UserStreakSensor(_UserSensorBase):
    """Sensor for consecutive days (ending today) with a completed mission."""

    _attr_name = "Streak"
    _attr_icon = "mdi:fire"
    _attr_native_unit_of_measurement = "days"
    _attr_state_class = SensorStateClass.MEASUREMENT
    _uid_suffix = const.SENSOR_UID_SUFFIX_STREAK

    @property
    def native_value(self) -> int:
        """Return the current streak length."""
        return self.coordinator.progression_manager.get_streak(self._user_id)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the number of completions credited to the user."""
        return {
            const.ATTR_USER_ID: self._user_id,
            const.ATTR_COMPLETED_MISSIONS: (
                self.coordinator.progression_manager.get_completed_count(self._user_id)
            ),
        }


# ------------------------------------------------------------------------------------------
class UserPendingSuggestionsSensor(_UserSensorBase):
    """Sensor for the number of open daily suggestions."""

    _attr_name = "Pending suggestions"
    _attr_icon = "mdi:lightbulb-on-outline"
    _uid_suffix = const.SENSOR_UID_SUFFIX_PENDING_SUGGESTIONS

    @property
    def native_value(self) -> int:
        """Return how many suggestions are waiting for a decision."""
        return len(self.coordinator.suggestion_manager.pending_for_user(self._user_id))

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the pending batch so dashboards can offer accept/decline."""
        user = self.coordinator.progression_manager.get_user(self._user_id) or {}
        return {
            const.ATTR_USER_ID: self._user_id,
            const.ATTR_DAY_OFFER: user.get(const.DATA_USER_LAST_OFFER_DAY),
            const.ATTR_SUGGESTIONS: self.coordinator.suggestion_manager.summary_for_user(
                self._user_id
            ),
        }
