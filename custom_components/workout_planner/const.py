"""Constants for Workout Planner integration."""

from __future__ import annotations

from homeassistant.const import Platform

DOMAIN = "workout_planner"

PLATFORMS: list[Platform] = [
    Platform.BUTTON,
    Platform.SENSOR,
]

CONF_NAME = "name"
CONF_DEFAULT_UNIT = "default_unit"
CONF_WEEK_START_DAY = "week_start_day"

DEFAULT_NAME = "Workout Planner"
DEFAULT_UNIT = "KG"
DEFAULT_WEEK_START_DAY = "Monday"

# Calendar order, Monday first (matches date.weekday()).
DAY_NAMES: list[str] = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

MASS_UNITS = ["KG", "LBS"]
# Per-exercise override; DEFAULT follows the global setting.
WEIGHT_UNITS = ["DEFAULT", *MASS_UNITS]

WEIGHT_REPS = "WEIGHT_REPS"
HOLD_SECONDS = "HOLD_SECONDS"
REPS_ONLY = "REPS_ONLY"
DISTANCE_TIME = "DISTANCE_TIME"
PROGRESSION_TYPES = [WEIGHT_REPS, HOLD_SECONDS, REPS_ONLY, DISTANCE_TIME]

# Slice prefixes of action tags.
PREFIX_EXERCISES = "EXERCISES_"
PREFIX_ROUTINES = "ROUTINES_"
PREFIX_PLANNER = "PLANNER_"
PREFIX_LOGS = "LOGS_"
PREFIX_SETTINGS = "SETTINGS_"

# Root-level action tags.
REPLACE_ALL = "REPLACE_ALL"
LOAD_FROM_STORAGE = "LOAD_FROM_STORAGE"
RECALCULATE_CURRENT_WEEK = "RECALCULATE_CURRENT_WEEK"

# Accept partially-shaped payloads coming from persisted data.
TRUST_BOUNDARY_ACTIONS = frozenset({REPLACE_ALL, LOAD_FROM_STORAGE})

TREND_THRESHOLD_PCT = 5.0
DEFAULT_TREND_DAYS = 30

SIGNAL_STATE_UPDATED = f"{DOMAIN}_state_updated"
