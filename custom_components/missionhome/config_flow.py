# File: config_flow.py
"""Config flow for the MissionHome integration.

MissionHome keeps one household per Home Assistant instance. Missions, users
and suggestions live in storage, so setup only creates the entry with the
default options.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .options_flow import MissionHomeOptionsFlowHandler


class MissionHomeConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for MissionHome."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Confirm setup of the single MissionHome instance."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            const.LOGGER.info("INFO: Creating MissionHome config entry")
            return self.async_create_entry(
                title=const.MISSIONHOME_TITLE,
                data={},
                options=dict(const.DEFAULT_OPTIONS),
            )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER, data_schema=vol.Schema({})
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return MissionHomeOptionsFlowHandler(config_entry)
