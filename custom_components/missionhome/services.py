# File: services.py
"""Defines custom services for the MissionHome integration.

These services are the entry points for scripts, automations and dashboards:
creating and completing missions, skipping or deleting occurrences and
working with the daily challenge suggestions.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import MissionHomeDataCoordinator
from .engines import (
    Actor,
    MissionNotFoundError,
    MissionNotScheduledError,
    SuggestionNotFoundError,
)
from .helpers.entity_helpers import get_first_entry_id
from .utils.dt_utils import date_key, dt_today_local, to_local_date

# --- Service Schemas ---
CREATE_MISSION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_DUE_DATE): cv.string,
        vol.Optional(const.FIELD_REPEAT, default=const.REPEAT_NONE): vol.In(
            const.REPEAT_TYPES
        ),
        vol.Optional(const.FIELD_EXP_VALUE, default=0): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
        vol.Optional(const.FIELD_EXP_MODE): vol.In(const.EXP_MODES),
        vol.Optional(const.FIELD_ASSIGNED_TO_USER_ID): cv.string,
        vol.Optional(const.FIELD_CREATED_BY_USER_ID): cv.string,
    }
)

COMPLETE_MISSION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MISSION_ID): cv.string,
        vol.Optional(const.FIELD_DATE): cv.string,
        vol.Optional(const.FIELD_USER_ID): cv.string,
        vol.Optional(const.FIELD_USER_NAME): cv.string,
    }
)

SKIP_MISSION_OCCURRENCE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MISSION_ID): cv.string,
        vol.Required(const.FIELD_DATE): cv.string,
    }
)

DELETE_MISSION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MISSION_ID): cv.string,
    }
)

GENERATE_DAILY_SUGGESTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_USER_ID): cv.string,
    }
)

SUGGESTION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_SUGGESTION_ID): cv.string,
    }
)

GET_MISSIONS_FOR_DATE_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_DATE): cv.string,
        vol.Optional(const.FIELD_USER_ID): cv.string,
    }
)


def _get_coordinator(hass: HomeAssistant, action: str) -> MissionHomeDataCoordinator:
    """Return the coordinator of the first loaded entry or raise."""
    entry_id = get_first_entry_id(hass)
    if not entry_id:
        const.LOGGER.warning("WARNING: %s: %s", action, const.MSG_NO_ENTRY_FOUND)
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


def _parse_day(value: str | None, action: str):
    """Parse an optional service date, defaulting to today."""
    if not value:
        return dt_today_local()
    day = to_local_date(value)
    if day is None:
        const.LOGGER.warning("WARNING: %s: Invalid date '%s'", action, value)
        raise HomeAssistantError(const.ERROR_INVALID_DATE_FMT.format(value))
    return day


def _resolve_user_id(call: ServiceCall, action: str) -> str:
    """Return the explicit user_id field, falling back to the calling user."""
    user_id = call.data.get(const.FIELD_USER_ID) or call.context.user_id
    if not user_id:
        const.LOGGER.warning("WARNING: %s: No user_id given or in context", action)
        raise HomeAssistantError("A user_id is required for this action")
    return user_id


def async_setup_services(hass: HomeAssistant):
    """Register MissionHome services."""

    async def handle_create_mission(call: ServiceCall) -> ServiceResponse:
        """Handle creating a mission."""
        coordinator = _get_coordinator(hass, "Create Mission")
        created_by = (
            call.data.get(const.FIELD_CREATED_BY_USER_ID) or call.context.user_id
        )

        try:
            mission_id = coordinator.mission_manager.create_mission(
                call.data[const.FIELD_TITLE],
                call.data[const.FIELD_DUE_DATE],
                repeat=call.data[const.FIELD_REPEAT],
                exp_value=call.data[const.FIELD_EXP_VALUE],
                exp_mode=call.data.get(const.FIELD_EXP_MODE),
                assigned_to_user_id=call.data.get(const.FIELD_ASSIGNED_TO_USER_ID),
                created_by_user_id=created_by,
            )
        except ValueError as err:
            const.LOGGER.warning("WARNING: Create Mission: %s", err)
            raise HomeAssistantError(str(err)) from err

        await coordinator.async_request_refresh()
        if call.return_response:
            return {const.FIELD_MISSION_ID: mission_id}
        return None

    async def handle_complete_mission(call: ServiceCall):
        """Handle marking one occurrence of a mission done."""
        coordinator = _get_coordinator(hass, "Complete Mission")
        mission_id = call.data[const.FIELD_MISSION_ID]
        day = _parse_day(call.data.get(const.FIELD_DATE), "Complete Mission")

        user_id = call.data.get(const.FIELD_USER_ID) or call.context.user_id
        user_name = call.data.get(const.FIELD_USER_NAME)
        if not user_name and call.context.user_id:
            ha_user = await hass.auth.async_get_user(call.context.user_id)
            user_name = ha_user.name if ha_user else None
        actor = Actor(user_id=user_id, name=user_name or user_id or "unknown")

        try:
            recorded = coordinator.mission_manager.mark_done(mission_id, day, actor)
        except MissionNotFoundError as err:
            const.LOGGER.warning("WARNING: Complete Mission: %s", err)
            raise HomeAssistantError(str(err)) from err
        except MissionNotScheduledError as err:
            const.LOGGER.warning("WARNING: Complete Mission: %s", err)
            raise HomeAssistantError(str(err)) from err

        if not recorded:
            const.LOGGER.info(
                "INFO: Mission '%s' was already completed on %s",
                mission_id,
                date_key(day),
            )
        await coordinator.async_request_refresh()

    async def handle_skip_mission_occurrence(call: ServiceCall):
        """Handle hiding a single occurrence of a mission."""
        coordinator = _get_coordinator(hass, "Skip Mission Occurrence")
        mission_id = call.data[const.FIELD_MISSION_ID]
        day = _parse_day(call.data[const.FIELD_DATE], "Skip Mission Occurrence")

        try:
            coordinator.mission_manager.skip_occurrence(mission_id, day)
        except MissionNotFoundError as err:
            const.LOGGER.warning("WARNING: Skip Mission Occurrence: %s", err)
            raise HomeAssistantError(str(err)) from err

        await coordinator.async_request_refresh()

    async def handle_delete_mission(call: ServiceCall):
        """Handle deleting a whole mission series."""
        coordinator = _get_coordinator(hass, "Delete Mission")
        mission_id = call.data[const.FIELD_MISSION_ID]

        try:
            coordinator.mission_manager.delete_series(mission_id)
        except MissionNotFoundError as err:
            const.LOGGER.warning("WARNING: Delete Mission: %s", err)
            raise HomeAssistantError(str(err)) from err

        await coordinator.async_request_refresh()

    async def handle_generate_daily_suggestions(call: ServiceCall) -> ServiceResponse:
        """Handle generating today's suggestion batch for a user."""
        coordinator = _get_coordinator(hass, "Generate Daily Suggestions")
        user_id = _resolve_user_id(call, "Generate Daily Suggestions")

        batch = coordinator.suggestion_manager.generate(user_id)
        await coordinator.async_request_refresh()

        if call.return_response:
            return {
                const.ATTR_USER_ID: user_id,
                const.ATTR_SUGGESTIONS: [dict(s) for s in batch],
            }
        return None

    async def handle_accept_suggestion(call: ServiceCall) -> ServiceResponse:
        """Handle accepting a suggestion (creates today's mission)."""
        coordinator = _get_coordinator(hass, "Accept Suggestion")
        suggestion_id = call.data[const.FIELD_SUGGESTION_ID]

        try:
            mission_id = coordinator.suggestion_manager.accept(suggestion_id)
        except SuggestionNotFoundError as err:
            const.LOGGER.warning("WARNING: Accept Suggestion: %s", err)
            raise HomeAssistantError(str(err)) from err

        await coordinator.async_request_refresh()
        if call.return_response:
            return {const.FIELD_MISSION_ID: mission_id}
        return None

    async def handle_decline_suggestion(call: ServiceCall):
        """Handle declining a suggestion."""
        coordinator = _get_coordinator(hass, "Decline Suggestion")
        suggestion_id = call.data[const.FIELD_SUGGESTION_ID]

        try:
            coordinator.suggestion_manager.decline(suggestion_id)
        except SuggestionNotFoundError as err:
            const.LOGGER.warning("WARNING: Decline Suggestion: %s", err)
            raise HomeAssistantError(str(err)) from err

        await coordinator.async_request_refresh()

    async def handle_get_missions_for_date(call: ServiceCall) -> ServiceResponse:
        """Return the missions occurring on a date with their done flags."""
        coordinator = _get_coordinator(hass, "Get Missions For Date")
        day = _parse_day(call.data.get(const.FIELD_DATE), "Get Missions For Date")

        missions: list[dict[str, Any]] = coordinator.mission_manager.missions_for_date(
            day, call.data.get(const.FIELD_USER_ID)
        )
        return {const.FIELD_DATE: date_key(day), "missions": missions}

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_MISSION,
        handle_create_mission,
        schema=CREATE_MISSION_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_COMPLETE_MISSION,
        handle_complete_mission,
        schema=COMPLETE_MISSION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SKIP_MISSION_OCCURRENCE,
        handle_skip_mission_occurrence,
        schema=SKIP_MISSION_OCCURRENCE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_MISSION,
        handle_delete_mission,
        schema=DELETE_MISSION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GENERATE_DAILY_SUGGESTIONS,
        handle_generate_daily_suggestions,
        schema=GENERATE_DAILY_SUGGESTIONS_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ACCEPT_SUGGESTION,
        handle_accept_suggestion,
        schema=SUGGESTION_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DECLINE_SUGGESTION,
        handle_decline_suggestion,
        schema=SUGGESTION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_MISSIONS_FOR_DATE,
        handle_get_missions_for_date,
        schema=GET_MISSIONS_FOR_DATE_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    const.LOGGER.info("INFO: MissionHome services have been registered successfully")


async def async_unload_services(hass: HomeAssistant):
    """Unregister MissionHome services when unloading the integration."""
    services = [
        const.SERVICE_CREATE_MISSION,
        const.SERVICE_COMPLETE_MISSION,
        const.SERVICE_SKIP_MISSION_OCCURRENCE,
        const.SERVICE_DELETE_MISSION,
        const.SERVICE_GENERATE_DAILY_SUGGESTIONS,
        const.SERVICE_ACCEPT_SUGGESTION,
        const.SERVICE_DECLINE_SUGGESTION,
        const.SERVICE_GET_MISSIONS_FOR_DATE,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: MissionHome services have been unregistered")
