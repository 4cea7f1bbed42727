# File: const.py
"""Constants for the MissionHome integration.

This file centralizes configuration keys, defaults, storage keys, signal
suffixes, service names and platform identifiers for consistency across
the integration.
"""

import logging

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)
    if DEFAULT_TIME_ZONE is not None:
        dt_utils.set_default_timezone(DEFAULT_TIME_ZONE)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
MISSIONHOME_TITLE = "MissionHome"

# Integration Domain
DOMAIN = "missionhome"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.CALENDAR,
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_MANAGER = "storage_manager"
STORAGE_KEY = "missionhome_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# ------------------------------------------------------------------------------------------------
# Configuration Keys (config entry options)
# ------------------------------------------------------------------------------------------------
CONF_SUGGESTION_COOLDOWN_DAYS = "suggestion_cooldown_days"
CONF_DAILY_SUGGESTIONS_LIMIT = "daily_suggestions_limit"
CONF_STREAK_MAX_LOOKBACK_DAYS = "streak_max_lookback_days"
CONF_CALENDAR_SHOW_PERIOD = "calendar_show_period_days"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_SUGGESTION_COOLDOWN_DAYS = 3
DEFAULT_DAILY_SUGGESTIONS_LIMIT = 12
DEFAULT_STREAK_MAX_LOOKBACK_DAYS = 365
DEFAULT_CALENDAR_SHOW_PERIOD = 30
DEFAULT_UPDATE_INTERVAL = 5

DEFAULT_OPTIONS = {
    CONF_SUGGESTION_COOLDOWN_DAYS: DEFAULT_SUGGESTION_COOLDOWN_DAYS,
    CONF_DAILY_SUGGESTIONS_LIMIT: DEFAULT_DAILY_SUGGESTIONS_LIMIT,
    CONF_STREAK_MAX_LOOKBACK_DAYS: DEFAULT_STREAK_MAX_LOOKBACK_DAYS,
    CONF_CALENDAR_SHOW_PERIOD: DEFAULT_CALENDAR_SHOW_PERIOD,
    CONF_UPDATE_INTERVAL: DEFAULT_UPDATE_INTERVAL,
}

# Flow steps
CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# Translation keys
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"

# ------------------------------------------------------------------------------------------------
# Storage Layout
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_MISSIONS = "missions"
DATA_DELETED_MISSIONS = "deleted_missions"
DATA_USERS = "users"
DATA_SUGGESTIONS = "suggestions"
DATA_MISSION_LOGS = "mission_logs"
DATA_PROCESSED_EXP_EVENTS = "processed_exp_events"

# Mission document fields
DATA_MISSION_ID = "id"
DATA_MISSION_TITLE = "title"
DATA_MISSION_DUE_DATE = "dueDate"
DATA_MISSION_REPEAT = "repeat"
DATA_MISSION_REPEAT_TYPE = "type"
DATA_MISSION_SKIP_DATES = "skipDates"
DATA_MISSION_ARCHIVED = "archived"
DATA_MISSION_EXP_VALUE = "expValue"
DATA_MISSION_EXP_MODE = "expMode"
DATA_MISSION_ASSIGNED_TO_USER_ID = "assignedToUserId"
DATA_MISSION_ASSIGNED_BY_USER_ID = "assignedByUserId"
DATA_MISSION_CREATED_BY_USER_ID = "createdByUserId"
DATA_MISSION_SOURCE = "source"
DATA_MISSION_SUGGESTION_ID = "suggestionId"
DATA_MISSION_COMPLETED = "completed"
DATA_MISSION_COMPLETED_AT = "completedAt"
DATA_MISSION_COMPLETED_BY_USER_ID = "completedByUserId"
DATA_MISSION_COMPLETED_BY_NAME = "completedByName"
DATA_MISSION_COMPLETED_DATES = "completedDates"
DATA_MISSION_COMPLETED_BY_BY_DATE = "completedByByDate"
DATA_MISSION_CREATED_AT = "createdAt"
DATA_MISSION_UPDATED_AT = "updatedAt"
DATA_MISSION_DELETED_AT = "deletedAt"
DATA_MISSION_ORIGINAL_COLLECTION = "originalCollection"

# completedByByDate entry fields
DATA_COMPLETED_BY_USER_ID = "userId"
DATA_COMPLETED_BY_NAME = "name"
DATA_COMPLETED_BY_AT = "at"

# Repeat types
REPEAT_NONE = "none"
REPEAT_DAILY = "daily"
REPEAT_WEEKLY = "weekly"
REPEAT_MONTHLY = "monthly"
REPEAT_TYPES = [REPEAT_NONE, REPEAT_DAILY, REPEAT_WEEKLY, REPEAT_MONTHLY]

# Difficulty (expMode)
EXP_MODE_EASY = "easy"
EXP_MODE_MEDIUM = "medium"
EXP_MODE_HARD = "hard"
EXP_MODE_EXTREME = "extreme"
EXP_MODES = [EXP_MODE_EASY, EXP_MODE_MEDIUM, EXP_MODE_HARD, EXP_MODE_EXTREME]

# Mission sources
MISSION_SOURCE_MANUAL = "MANUAL"
MISSION_SOURCE_DAILY_SUGGESTION = "DAILY_SUGGESTION"
MISSION_ID_PREFIX_DAILY = "daily_"
COLLECTION_MISSIONS = "missions"

# User progression fields
DATA_USER_UID = "uid"
DATA_USER_DISPLAY_NAME = "displayName"
DATA_USER_TOTAL_EXP = "totalExp"
DATA_USER_LEVEL = "level"
DATA_USER_LAST_OFFER_DAY = "lastOfferDay"
DATA_USER_LAST_ACCEPTED_AT = "lastAcceptedAt"
DATA_USER_CREATED_AT = "createdAt"
DATA_USER_UPDATED_AT = "updatedAt"

DEFAULT_USER_LEVEL = 1
DEFAULT_USER_TOTAL_EXP = 0

# Suggestion fields
DATA_SUGGESTION_ID = "id"
DATA_SUGGESTION_USER_ID = "userId"
DATA_SUGGESTION_KEY = "key"
DATA_SUGGESTION_TITLE = "title"
DATA_SUGGESTION_EXP_VALUE = "expValue"
DATA_SUGGESTION_EXP_MODE = "expMode"
DATA_SUGGESTION_STATUS = "status"
DATA_SUGGESTION_DAY_OFFER = "dayOffer"
DATA_SUGGESTION_DUE_AT = "dueAt"
DATA_SUGGESTION_CREATED_AT = "createdAt"
DATA_SUGGESTION_ACCEPTED_AT = "acceptedAt"
DATA_SUGGESTION_DECLINED_AT = "declinedAt"
DATA_SUGGESTION_EXPIRED_AT = "expiredAt"
DATA_SUGGESTION_MISSION_ID = "missionId"

SUGGESTION_STATUS_PENDING = "PENDING"
SUGGESTION_STATUS_ACCEPTED = "ACCEPTED"
SUGGESTION_STATUS_DECLINED = "DECLINED"
SUGGESTION_STATUS_EXPIRED = "EXPIRED"

# Decided suggestions are dropped once their offer day is this many days old
DEFAULT_DECIDED_SUGGESTION_RETENTION_DAYS = 30

# Template fields
DATA_TEMPLATE_KEY = "key"
DATA_TEMPLATE_TITLE = "title"
DATA_TEMPLATE_EXP_VALUE = "expValue"

# Mission log fields
DATA_LOG_MISSION_ID = "missionId"
DATA_LOG_USER_ID = "userId"
DATA_LOG_EXP_GAIN = "expGain"
DATA_LOG_LEVEL_BEFORE = "levelBefore"
DATA_LOG_LEVEL_AFTER = "levelAfter"
DATA_LOG_TOTAL_EXP_AFTER = "totalExpAfter"
DATA_LOG_OCCURRENCE_KEY = "occurrenceKey"
DATA_LOG_TIMESTAMP = "timestamp"

DEFAULT_MISSION_LOG_MAX_ENTRIES = 500
DEFAULT_RECENT_EXP_GAINS = 5

# Processed EXP event retention (redelivery window)
DEFAULT_PROCESSED_EXP_EVENTS_MAX_AGE_DAYS = 90
DEFAULT_PROCESSED_EXP_EVENTS_MAX_ENTRIES = 5000

# ------------------------------------------------------------------------------------------------
# Progression Curve
# ------------------------------------------------------------------------------------------------
EXP_BASE_LEVEL_COST = 100
EXP_LEVEL_COST_STEP = 50

# Difficulty thresholds (expValue -> expMode)
EXP_THRESHOLD_EXTREME = 150
EXP_THRESHOLD_HARD = 100
EXP_THRESHOLD_MEDIUM = 50

# ------------------------------------------------------------------------------------------------
# Event Signals (instance-scoped, see helpers.get_event_signal)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_EXP_GAINED = "exp_gained"
SIGNAL_SUFFIX_LEVEL_CHANGED = "level_changed"
SIGNAL_SUFFIX_MISSION_CREATED = "mission_created"
SIGNAL_SUFFIX_MISSION_COMPLETED = "mission_completed"
SIGNAL_SUFFIX_MISSION_SKIPPED = "mission_skipped"
SIGNAL_SUFFIX_MISSION_DELETED = "mission_deleted"
SIGNAL_SUFFIX_SUGGESTIONS_GENERATED = "suggestions_generated"
SIGNAL_SUFFIX_SUGGESTION_ACCEPTED = "suggestion_accepted"
SIGNAL_SUFFIX_SUGGESTION_DECLINED = "suggestion_declined"
SIGNAL_SUFFIX_USER_CREATED = "user_created"

# Home Assistant bus events
EVENT_LEVEL_UP = f"{DOMAIN}_level_up"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_CREATE_MISSION = "create_mission"
SERVICE_COMPLETE_MISSION = "complete_mission"
SERVICE_SKIP_MISSION_OCCURRENCE = "skip_mission_occurrence"
SERVICE_DELETE_MISSION = "delete_mission"
SERVICE_GENERATE_DAILY_SUGGESTIONS = "generate_daily_suggestions"
SERVICE_ACCEPT_SUGGESTION = "accept_suggestion"
SERVICE_DECLINE_SUGGESTION = "decline_suggestion"
SERVICE_GET_MISSIONS_FOR_DATE = "get_missions_for_date"

FIELD_MISSION_ID = "mission_id"
FIELD_TITLE = "title"
FIELD_DUE_DATE = "due_date"
FIELD_REPEAT = "repeat"
FIELD_EXP_VALUE = "exp_value"
FIELD_EXP_MODE = "exp_mode"
FIELD_ASSIGNED_TO_USER_ID = "assigned_to_user_id"
FIELD_CREATED_BY_USER_ID = "created_by_user_id"
FIELD_USER_ID = "user_id"
FIELD_USER_NAME = "user_name"
FIELD_DATE = "date"
FIELD_SUGGESTION_ID = "suggestion_id"

# Error / info messages
MSG_NO_ENTRY_FOUND = "No MissionHome entry found"
ERROR_MISSION_NOT_FOUND_FMT = "Mission '{}' not found"
ERROR_MISSION_NOT_SCHEDULED_FMT = "Mission '{}' does not occur on {}"
ERROR_OCCURRENCE_IN_FUTURE_FMT = "Mission '{}' cannot be completed ahead of its {} occurrence"
ERROR_SUGGESTION_NOT_FOUND_FMT = "Suggestion '{}' not found"
ERROR_INVALID_DATE_FMT = "Invalid date '{}'"

# ------------------------------------------------------------------------------------------------
# Entities
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_LEVEL = "_level"
SENSOR_UID_SUFFIX_STREAK = "_streak"
SENSOR_UID_SUFFIX_PENDING_SUGGESTIONS = "_pending_suggestions"
CALENDAR_UID_SUFFIX_MISSIONS = "_missions_calendar"
CALENDAR_MAX_CACHE_ENTRIES = 8

ATTR_USER_ID = "user_id"
ATTR_TOTAL_EXP = "total_exp"
ATTR_EXP_INTO_LEVEL = "exp_into_level"
ATTR_EXP_FOR_NEXT_LEVEL = "exp_for_next_level"
ATTR_EXP_TO_NEXT_LEVEL = "exp_to_next_level"
ATTR_PROGRESS_PCT = "progress_pct"
ATTR_SUGGESTIONS = "suggestions"
ATTR_DAY_OFFER = "day_offer"
ATTR_RECENT_EXP_GAINS = "recent_exp_gains"
ATTR_COMPLETED_MISSIONS = "completed_missions"
