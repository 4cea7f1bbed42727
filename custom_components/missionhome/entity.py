"""Base entity classes for MissionHome integration."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import MissionHomeDataCoordinator


class MissionHomeCoordinatorEntity(CoordinatorEntity[MissionHomeDataCoordinator]):
    """Base entity class for MissionHome entities with typed coordinator access."""

    @property
    def coordinator(self) -> MissionHomeDataCoordinator:
        """Return typed coordinator.

        Reads the private _coordinator attribute set by CoordinatorEntity.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: MissionHomeDataCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)
