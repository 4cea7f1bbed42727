"""Manager modules for MissionHome integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and own persistence of their documents.
"""

from .base_manager import BaseManager
from .mission_manager import MissionManager
from .progression_manager import ProgressionManager
from .suggestion_manager import SuggestionManager

__all__ = [
    "BaseManager",
    "MissionManager",
    "ProgressionManager",
    "SuggestionManager",
]
