# File: coordinator.py
"""Coordinator for the MissionHome integration.

Owns the in-memory MissionHome document, wires up the managers that mutate it,
persists changes through MissionHomeStore and notifies entities.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .managers import MissionManager, ProgressionManager, SuggestionManager
from .store import MissionHomeStore


class MissionHomeDataCoordinator(DataUpdateCoordinator):
    """Coordinator for MissionHome integration.

    Holds the storage document and the three managers:
    - mission_manager: mission CRUD and per-occurrence completion
    - progression_manager: EXP application, levels and streaks
    - suggestion_manager: daily challenge suggestions
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        storage_manager: MissionHomeStore,
    ):
        """Initialize the MissionHomeDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.config_entry = config_entry
        self.storage_manager = storage_manager
        self._data: dict[str, Any] = {}

        self.mission_manager = MissionManager(hass, self)
        self.progression_manager = ProgressionManager(hass, self)
        self.suggestion_manager = SuggestionManager(hass, self)

    # -------------------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------------------

    async def async_config_entry_first_refresh(self) -> None:
        """Load from storage, set up managers and repair cached levels."""
        stored_data = self.storage_manager.data
        self._data = stored_data if stored_data else MissionHomeStore.get_default_structure()

        # Backfill buckets missing from older or hand-edited files
        for key, default in MissionHomeStore.get_default_structure().items():
            if not isinstance(self._data.get(key), type(default)):
                const.LOGGER.debug("DEBUG: Initializing missing storage bucket '%s'", key)
                self._data[key] = default

        await self.mission_manager.async_setup()
        await self.progression_manager.async_setup()
        await self.suggestion_manager.async_setup()

        repaired = self.progression_manager.reconcile_levels()
        if repaired:
            const.LOGGER.info("INFO: Repaired cached level for %s user(s)", repaired)

        self._persist()
        await super().async_config_entry_first_refresh()

    async def _async_update_data(self):
        """Periodic update: expire and purge suggestions, prune the EXP ledger."""
        try:
            changed = self.suggestion_manager.expire_stale()
            changed += self.suggestion_manager.purge_decided()
            changed += self.progression_manager.prune_processed_events()
            if changed:
                self._persist(notify=False)
            return self._data
        except Exception as err:  # pylint: disable=broad-exception-caught
            raise UpdateFailed(f"Error updating MissionHome data: {err}") from err

    # -------------------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------------------

    def get_option(self, key: str) -> int:
        """Return an integer option with its default from const.DEFAULT_OPTIONS."""
        return int(self.config_entry.options.get(key, const.DEFAULT_OPTIONS[key]))

    # -------------------------------------------------------------------------------------
    # Properties for Easy Access
    # -------------------------------------------------------------------------------------

    @property
    def missions_data(self) -> dict[str, Any]:
        """Return the missions data."""
        return self._data.setdefault(const.DATA_MISSIONS, {})

    @property
    def deleted_missions_data(self) -> dict[str, Any]:
        """Return the deleted missions archive."""
        return self._data.setdefault(const.DATA_DELETED_MISSIONS, {})

    @property
    def users_data(self) -> dict[str, Any]:
        """Return the user progression data."""
        return self._data.setdefault(const.DATA_USERS, {})

    @property
    def suggestions_data(self) -> dict[str, Any]:
        """Return the suggestions data."""
        return self._data.setdefault(const.DATA_SUGGESTIONS, {})

    @property
    def mission_logs(self) -> list[dict[str, Any]]:
        """Return the EXP audit trail."""
        return self._data.setdefault(const.DATA_MISSION_LOGS, [])

    @property
    def processed_exp_events(self) -> dict[str, str]:
        """Return the processed EXP event keys."""
        return self._data.setdefault(const.DATA_PROCESSED_EXP_EVENTS, {})

    # -------------------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------------------

    def _persist(self, notify: bool = True):
        """Save to persistent storage.

        Args:
            notify: Push the new data to entities. Pass False from inside
                _async_update_data, where the refresh itself notifies them.
        """
        self.storage_manager.set_data(self._data)
        self.hass.add_job(self.storage_manager.async_save)
        if notify:
            self.async_set_updated_data(self._data)
