# File: store.py
"""Handles persistent data storage for the MissionHome integration.

Uses Home Assistant's Storage helper to save and load missions, user
progression, daily suggestions and the EXP audit trail, so state is preserved
across restarts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class MissionHomeStore:
    """Handles persistent storage operations for MissionHome data.

    Thin wrapper around Home Assistant's Store API for loading, saving and
    accessing the single MissionHome document.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}  # In-memory data cache for quick access.

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations.

        This is the single source of truth for the storage schema. The
        coordinator also uses it to backfill buckets missing from older files.
        """
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
            },
            const.DATA_MISSIONS: {},
            const.DATA_DELETED_MISSIONS: {},
            const.DATA_USERS: {},
            const.DATA_SUGGESTIONS: {},
            const.DATA_MISSION_LOGS: [],
            const.DATA_PROCESSED_EXP_EVENTS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure.
        """
        const.LOGGER.debug("DEBUG: MissionHomeStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = MissionHomeStore.get_default_structure()
        else:
            self._data = existing_data
            const.LOGGER.debug(
                "DEBUG: Loaded existing data from storage: %s",
                {
                    "missions": len(self._data.get(const.DATA_MISSIONS, {})),
                    "users": len(self._data.get(const.DATA_USERS, {})),
                    "suggestions": len(self._data.get(const.DATA_SUGGESTIONS, {})),
                    "mission_logs": len(self._data.get(const.DATA_MISSION_LOGS, [])),
                },
            )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Errors are logged but do not stop execution:
            OSError: File system issues prevent saving.
            TypeError: Data contains non-serializable types.
            ValueError: Data is invalid for JSON serialization.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s",
                err,
            )

    async def async_clear_data(self) -> None:
        """Clear all stored data and reset to default structure."""
        const.LOGGER.warning(
            "WARNING: Clearing all MissionHome data and resetting storage"
        )
        self._data = MissionHomeStore.get_default_structure()
        await self.async_save()

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        await self.async_clear_data()

        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
