# File: helpers/entity_helpers.py
"""Signal and config entry helper functions for MissionHome."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Each config entry gets its own signal namespace, so managers of one
    MissionHome instance never hear events from another.

    Format: 'missionhome_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_EXP_GAINED)
        'missionhome_abc123_exp_gained'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


def get_first_entry_id(hass: HomeAssistant) -> str | None:
    """Retrieve the first loaded MissionHome config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)
