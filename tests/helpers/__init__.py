"""Test helpers for MissionHome integration tests.

    from tests.helpers import SetupResult, setup_from_yaml, day_offset

See setup.py for the YAML scenario format.
"""

from tests.helpers.setup import SetupResult, day_offset, setup_from_yaml

__all__ = [
    "SetupResult",
    "day_offset",
    "setup_from_yaml",
]
