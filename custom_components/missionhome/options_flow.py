# File: options_flow.py
"""Options Flow for the MissionHome integration.

Edits the general options (suggestion cooldown and batch size, streak
lookback, calendar window, refresh interval). The entry is reloaded by the
update listener registered in __init__.py.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.helpers import selector

from . import const


def _number_box(minimum: int, maximum: int | None = None) -> selector.NumberSelector:
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            mode=selector.NumberSelectorMode.BOX,
            min=minimum,
            max=maximum,
            step=1,
        )
    )


def build_general_options_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build schema for the general options, prefilled from `default`."""
    default = default or {}

    def current(key: str) -> int:
        return int(default.get(key, const.DEFAULT_OPTIONS[key]))

    return vol.Schema(
        {
            vol.Required(
                const.CONF_SUGGESTION_COOLDOWN_DAYS,
                default=current(const.CONF_SUGGESTION_COOLDOWN_DAYS),
            ): _number_box(0, 365),
            vol.Required(
                const.CONF_DAILY_SUGGESTIONS_LIMIT,
                default=current(const.CONF_DAILY_SUGGESTIONS_LIMIT),
            ): _number_box(1, 50),
            vol.Required(
                const.CONF_STREAK_MAX_LOOKBACK_DAYS,
                default=current(const.CONF_STREAK_MAX_LOOKBACK_DAYS),
            ): _number_box(1, 3650),
            vol.Required(
                const.CONF_CALENDAR_SHOW_PERIOD,
                default=current(const.CONF_CALENDAR_SHOW_PERIOD),
            ): _number_box(1, 366),
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=current(const.CONF_UPDATE_INTERVAL),
            ): _number_box(1),
        }
    )


class MissionHomeOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for the general MissionHome settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry):
        """Initialize the options flow."""
        self._entry_options: dict[str, Any] = {}

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show and save the general options."""
        self._entry_options = dict(self.config_entry.options)

        if user_input is not None:
            # NumberSelector returns floats
            for key, value in user_input.items():
                self._entry_options[key] = int(value)
            const.LOGGER.debug(
                "DEBUG: Saving MissionHome options: %s", self._entry_options
            )
            return self.async_create_entry(title="", data=self._entry_options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=build_general_options_schema(self._entry_options),
        )
