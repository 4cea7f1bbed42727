# File: helpers/__init__.py
"""Home Assistant-bound helper functions for MissionHome.

This module contains functions that REQUIRE Home Assistant dependencies.

NOTE: Functions that need `hass` object belong here, NOT in utils/.

Submodules:
    - entity_helpers: Event signal names and config entry lookup
    - device_helpers: DeviceInfo construction

Usage:
    from .entity_helpers import get_event_signal
    from .device_helpers import create_user_device_info
"""

from . import device_helpers, entity_helpers

__all__ = [
    "device_helpers",
    "entity_helpers",
]
