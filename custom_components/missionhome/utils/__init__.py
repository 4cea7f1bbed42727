# File: utils/__init__.py
"""Pure Python utilities for MissionHome.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed in this module.

Submodules:
    - dt_utils: Date/time parsing, date-keys, local-day boundaries

Usage:
    from . import dt_utils
    from .dt_utils import date_key
"""

from . import dt_utils

__all__ = ["dt_utils"]
