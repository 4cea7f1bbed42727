# pyright: reportIncompatibleVariableOverride=false
"""Calendar platform for MissionHome integration.

Provides a read-only household calendar: one all-day event per mission
occurrence, with completed occurrences marked in the summary.
"""

from __future__ import annotations

import datetime
from typing import Any

from homeassistant.components.calendar import CalendarEntity, CalendarEvent
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import MissionHomeDataCoordinator
from .engines.completion_engine import CompletionEngine
from .engines.recurrence_engine import RecurrenceEngine
from .helpers.device_helpers import create_household_device_info
from .helpers.entity_helpers import get_event_signal
from .utils.dt_utils import date_key, dt_today_local, to_local_date

# Coordinator-based entities don't poll
PARALLEL_UPDATES = 0

DONE_MARKER = "✓ "


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the MissionHome calendar platform."""
    coordinator: MissionHomeDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    calendar_duration = datetime.timedelta(
        days=coordinator.get_option(const.CONF_CALENDAR_SHOW_PERIOD)
    )
    async_add_entities([MissionCalendar(coordinator, entry, calendar_duration)])


class MissionCalendar(CalendarEntity):
    """Calendar entity listing every mission occurrence in the household."""

    _attr_has_entity_name = True
    _attr_name = "Missions"

    def __init__(
        self,
        coordinator: MissionHomeDataCoordinator,
        config_entry: ConfigEntry,
        calendar_duration: datetime.timedelta,
    ):
        """Initialize the calendar entity.

        Args:
            coordinator: MissionHomeDataCoordinator instance for data access.
            config_entry: ConfigEntry for this integration instance.
            calendar_duration: How far ahead `event` looks for the next occurrence.
        """
        super().__init__()
        self.coordinator = coordinator
        self._config_entry = config_entry
        self._calendar_duration = calendar_duration
        self._attr_unique_id = (
            f"{config_entry.entry_id}{const.CALENDAR_UID_SUFFIX_MISSIONS}"
        )
        self._attr_device_info = create_household_device_info(config_entry)
        self._events_cache: dict[tuple[str, str], list[CalendarEvent]] = {}
        self._max_cache_entries = const.CALENDAR_MAX_CACHE_ENTRIES

    async def async_added_to_hass(self) -> None:
        """Subscribe to mutation signals that invalidate the event cache."""
        await super().async_added_to_hass()

        invalidation_signals = (
            const.SIGNAL_SUFFIX_MISSION_CREATED,
            const.SIGNAL_SUFFIX_MISSION_COMPLETED,
            const.SIGNAL_SUFFIX_MISSION_SKIPPED,
            const.SIGNAL_SUFFIX_MISSION_DELETED,
        )
        for suffix in invalidation_signals:
            signal = get_event_signal(self._config_entry.entry_id, suffix)
            self.async_on_remove(
                async_dispatcher_connect(
                    self.hass, signal, self._on_calendar_data_changed
                )
            )

    @callback
    def _on_calendar_data_changed(self, _payload: dict[str, Any] | None = None) -> None:
        """Invalidate cached events when missions mutate."""
        self._events_cache.clear()
        self.async_write_ha_state()

    @property
    def event(self) -> CalendarEvent | None:
        """Return the first occurrence from today within the show period."""
        today = dt_today_local()
        last = today + self._calendar_duration
        events = self._events_between(today, last)
        return events[0] if events else None

    async def async_get_events(
        self,
        hass: HomeAssistant,
        start_date: datetime.datetime,
        end_date: datetime.datetime,
    ) -> list[CalendarEvent]:
        """Return all-day occurrence events overlapping [start_date, end_date)."""
        first = to_local_date(start_date)
        # end_date is exclusive; an all-day event on that date does not overlap
        last = to_local_date(end_date - datetime.timedelta(microseconds=1))
        if first is None or last is None:
            return []
        return self._events_between(first, last)

    async def async_create_event(self, **kwargs) -> None:
        """Create a new event - not supported for read-only calendar."""
        raise HomeAssistantError("Use the create_mission service to add missions")

    async def async_delete_event(
        self,
        uid: str,
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Delete an event - not supported for read-only calendar."""
        raise HomeAssistantError(
            "Use the skip_mission_occurrence or delete_mission services"
        )

    def _events_between(
        self, first: datetime.date, last: datetime.date
    ) -> list[CalendarEvent]:
        """Return cached events for [first, last] or generate them."""
        cache_key = (first.isoformat(), last.isoformat())
        cached = self._events_cache.get(cache_key)
        if cached is not None:
            return list(cached)

        events: list[CalendarEvent] = []
        for mission in self.coordinator.missions_data.values():
            for day in RecurrenceEngine.occurrences_between(mission, first, last):
                events.append(self._build_event(mission, day))
        events.sort(key=lambda e: (e.start, e.summary))

        self._events_cache[cache_key] = events
        if len(self._events_cache) > self._max_cache_entries:
            oldest_key = next(iter(self._events_cache))
            del self._events_cache[oldest_key]

        return list(events)

    @staticmethod
    def _build_event(mission: dict[str, Any], day: datetime.date) -> CalendarEvent:
        """Build the all-day event of one occurrence."""
        title = mission.get(const.DATA_MISSION_TITLE) or ""
        done = CompletionEngine.is_done_on(mission, day)
        description = (
            f"{mission.get(const.DATA_MISSION_EXP_VALUE, 0)} EXP "
            f"({mission.get(const.DATA_MISSION_EXP_MODE) or const.EXP_MODE_EASY})"
        )
        completed_by = CompletionEngine.completed_by_on(mission, day)
        if done and completed_by:
            description += f", done by {completed_by.get(const.DATA_COMPLETED_BY_NAME)}"

        return CalendarEvent(
            summary=f"{DONE_MARKER}{title}" if done else title,
            start=day,
            end=day + datetime.timedelta(days=1),
            description=description,
            uid=f"{mission.get(const.DATA_MISSION_ID)}:{date_key(day)}",
        )
