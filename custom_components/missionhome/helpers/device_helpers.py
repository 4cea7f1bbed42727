# File: helpers/device_helpers.py
"""Device registry helper functions for MissionHome.

Functions that construct DeviceInfo objects for Home Assistant's device registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_user_device_info(
    user_id: str,
    user_name: str,
    config_entry: ConfigEntry,
) -> DeviceInfo:
    """Create device info for a household member's progression profile.

    Args:
        user_id: User id supplied by the caller's session
        user_name: Display name of the user
        config_entry: Config entry for this integration instance

    Returns:
        DeviceInfo dict for the user device
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, user_id)},
        name=f"{user_name} ({config_entry.title})",
        manufacturer=const.MISSIONHOME_TITLE,
        model="Member Profile",
        entry_type=DeviceEntryType.SERVICE,
    )


def create_household_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create device info for the household-wide entities (calendar)."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, config_entry.entry_id)},
        name=config_entry.title,
        manufacturer=const.MISSIONHOME_TITLE,
        model="Household",
        entry_type=DeviceEntryType.SERVICE,
    )
