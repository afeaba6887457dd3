"""Validation gate for dispatched actions.

Every action tag maps to a voluptuous payload schema. A payload that fails
its schema never reaches the reducer: it is turned into a ``<SLICE>_SET_ERROR``
action so the UI always gets a message it can render.
"""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from voluptuous.humanize import humanize_error

from .actions import Action, set_error
from .const import (
    DAY_NAMES,
    MASS_UNITS,
    PREFIX_EXERCISES,
    PREFIX_LOGS,
    PREFIX_PLANNER,
    PREFIX_ROUTINES,
    PREFIX_SETTINGS,
    PROGRESSION_TYPES,
    RECALCULATE_CURRENT_WEEK,
    TRUST_BOUNDARY_ACTIONS,
    WEIGHT_UNITS,
)
from .dates import parse_iso
from .plan import parse_path

_LOGGER = logging.getLogger(__name__)

_PREFIXES = (PREFIX_EXERCISES, PREFIX_ROUTINES, PREFIX_PLANNER, PREFIX_LOGS, PREFIX_SETTINGS)


def _required_str(what: str):
    return vol.All(str, vol.Length(min=1, msg=f"{what} is required"))


def _real_date(value: str) -> str:
    try:
        parse_iso(value)
    except ValueError:
        raise vol.Invalid(f"{value} is not a calendar date") from None
    return value


ISO_DATE = vol.All(str, vol.Match(r"^\d{4}-\d{2}-\d{2}$", msg="Date must be in YYYY-MM-DD format"), _real_date)
_INDEX = vol.All(int, vol.Range(min=0))


def _number(min_value: float):
    # bool is an int subclass; a checkbox value is not a measurement.
    def _validate(value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise vol.Invalid("expected a number")
        if value < min_value:
            raise vol.Invalid(f"value must be at least {min_value}")
        return value

    return _validate


def _reps(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise vol.Invalid("reps must be a whole number of at least 1")
    return value


_SET_SHAPES: dict[frozenset[str], vol.Schema] = {
    frozenset({"weight", "reps"}): vol.Schema({"weight": _number(0), "reps": _reps}, required=True),
    frozenset({"seconds"}): vol.Schema({"seconds": _number(0)}, required=True),
    frozenset({"reps"}): vol.Schema({"reps": _reps}, required=True),
    frozenset({"distance", "seconds"}): vol.Schema({"distance": _number(0), "seconds": _number(0)}, required=True),
}


def workout_set(value: Any) -> dict[str, Any]:
    """Pick the set variant from the fields present, then check it."""
    if not isinstance(value, dict):
        raise vol.Invalid("Invalid workout set: expected an object")
    schema = _SET_SHAPES.get(frozenset(value))
    if schema is None:
        raise vol.Invalid(
            "Invalid workout set: must be {weight, reps}, {seconds}, {reps} or {distance, seconds}"
        )
    return schema(value)


EXERCISE_SCHEMA = vol.Schema(
    {
        vol.Required("id"): _required_str("Exercise ID"),
        vol.Required("name"): _required_str("Exercise name"),
        vol.Required("color"): _required_str("Exercise color"),
        vol.Required("type"): vol.In(PROGRESSION_TYPES),
        vol.Optional("refUrl"): str,
        vol.Optional("weightUnit"): vol.In(WEIGHT_UNITS),
    }
)

ROUTINE_SCHEMA = vol.Schema(
    {
        vol.Required("id"): _required_str("Routine ID"),
        vol.Required("name"): _required_str("Routine name"),
        vol.Optional("color"): str,
        vol.Optional("description"): str,
        vol.Required("exerciseIds"): vol.All([str], vol.Length(min=1, msg="Routine must contain at least one exercise")),
    }
)

_EXERCISE_ITEM_SCHEMA = vol.Schema(
    {
        vol.Required("type"): "exercise",
        vol.Required("exerciseId"): _required_str("Exercise ID"),
    }
)

_ROUTINE_ITEM_SCHEMA = vol.Schema(
    {
        vol.Required("type"): "routine",
        vol.Required("name"): _required_str("Routine name"),
        vol.Required("color"): str,
        vol.Required("exerciseIds"): vol.All([str], vol.Length(min=1, msg="Routine must contain at least one exercise")),
    }
)


def plan_item(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise vol.Invalid("Plan item must be an object")
    kind = value.get("type")
    if kind == "exercise":
        if "exerciseId" not in value and "id" in value:
            value = {"type": "exercise", "exerciseId": value["id"]}
        return _EXERCISE_ITEM_SCHEMA(value)
    if kind == "routine":
        return _ROUTINE_ITEM_SCHEMA(value)
    raise vol.Invalid(f"Unknown plan item type: {kind!r}")


_TOP_LEVEL_PATH_SCHEMA = vol.Schema({vol.Required("dateISO"): ISO_DATE, vol.Required("index"): _INDEX})
_NESTED_PATH_SCHEMA = vol.Schema(
    {
        vol.Required("dateISO"): ISO_DATE,
        vol.Required("routineIndex"): _INDEX,
        vol.Required("exerciseIndex"): _INDEX,
    }
)
ITEM_PATH = vol.All(vol.Any(_TOP_LEVEL_PATH_SCHEMA, _NESTED_PATH_SCHEMA, msg="Invalid item path"), parse_path)

LOG_PAYLOAD_SCHEMA = vol.Schema(
    {vol.Required("sets"): vol.All([workout_set], vol.Length(min=1, msg="At least one set is required"))}
)

LOG_ENTRY_SCHEMA = vol.Schema(
    {
        vol.Required("id"): _required_str("Log ID"),
        vol.Required("dateISO"): ISO_DATE,
        vol.Required("day"): vol.In(DAY_NAMES),
        vol.Required("exerciseId"): _required_str("Exercise ID"),
        vol.Required("payload"): LOG_PAYLOAD_SCHEMA,
    }
)

SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional("defaultUnit"): vol.In(MASS_UNITS),
        vol.Optional("weekStartDay"): vol.In(DAY_NAMES),
    }
)


def _bookkeeping_schemas(prefix: str) -> dict[str, vol.Schema]:
    return {
        f"{prefix}SET_LOADING": vol.Schema({vol.Required("loading"): bool}),
        f"{prefix}SET_ERROR": vol.Schema({vol.Required("error"): vol.Any(None, str)}),
    }


ACTION_SCHEMAS: dict[str, vol.Schema] = {
    "EXERCISES_ADD": vol.Schema({vol.Required("exercise"): EXERCISE_SCHEMA}),
    "EXERCISES_REMOVE": vol.Schema({vol.Required("id"): _required_str("Exercise ID")}),
    "EXERCISES_UPDATE": vol.Schema({vol.Required("exercise"): EXERCISE_SCHEMA}),
    "EXERCISES_LOAD_ALL": vol.Schema({vol.Required("exercises"): [EXERCISE_SCHEMA]}),
    **_bookkeeping_schemas(PREFIX_EXERCISES),
    "ROUTINES_ADD": vol.Schema({vol.Required("routine"): ROUTINE_SCHEMA}),
    "ROUTINES_REMOVE": vol.Schema({vol.Required("id"): _required_str("Routine ID")}),
    "ROUTINES_UPDATE": vol.Schema({vol.Required("routine"): ROUTINE_SCHEMA}),
    "ROUTINES_REORDER_EXERCISES": vol.Schema(
        {
            vol.Required("routineId"): _required_str("Routine ID"),
            vol.Required("exerciseIds"): vol.All([str], vol.Length(min=1, msg="Exercise IDs are required")),
        }
    ),
    "ROUTINES_LOAD_ALL": vol.Schema({vol.Required("routines"): [ROUTINE_SCHEMA]}),
    **_bookkeeping_schemas(PREFIX_ROUTINES),
    "PLANNER_UPDATE_PLAN": vol.Schema({vol.Required("dateISO"): ISO_DATE, vol.Required("items"): [plan_item]}),
    "PLANNER_REORDER_ITEMS": vol.Schema({vol.Required("dateISO"): ISO_DATE, vol.Required("items"): [plan_item]}),
    "PLANNER_ADD_ITEM": vol.Schema({vol.Required("dateISO"): ISO_DATE, vol.Required("item"): plan_item}),
    "PLANNER_REMOVE_ITEM": vol.Schema({vol.Required("dateISO"): ISO_DATE, vol.Required("index"): int}),
    "PLANNER_MOVE_ITEM": vol.Schema({vol.Required("source"): ITEM_PATH, vol.Required("destination"): ITEM_PATH}),
    "PLANNER_SET_CURRENT_WEEK": vol.Schema({vol.Required("weekStartISO"): ISO_DATE}),
    "PLANNER_REMOVE_EXERCISE_FROM_PLAN": vol.Schema({vol.Required("exerciseId"): _required_str("Exercise ID")}),
    "PLANNER_REMOVE_ROUTINE_FROM_PLAN": vol.Schema(
        {vol.Required("name"): _required_str("Routine name"), vol.Required("color"): str}
    ),
    "PLANNER_LOAD_PLAN": vol.Schema(
        {
            vol.Required("plan"): vol.Schema({str: [plan_item]}),
            vol.Required("currentWeekStartISO"): ISO_DATE,
        }
    ),
    **_bookkeeping_schemas(PREFIX_PLANNER),
    "LOGS_SAVE": vol.Schema({vol.Required("entry"): LOG_ENTRY_SCHEMA}),
    "LOGS_UPDATE": vol.Schema({vol.Required("id"): _required_str("Log ID"), vol.Required("payload"): LOG_PAYLOAD_SCHEMA}),
    "LOGS_REMOVE": vol.Schema({vol.Required("id"): _required_str("Log ID")}),
    "LOGS_REMOVE_BY_DATE": vol.Schema({vol.Required("dateISO"): ISO_DATE}),
    "LOGS_LOAD_ALL": vol.Schema({vol.Required("logs"): [LOG_ENTRY_SCHEMA]}),
    **_bookkeeping_schemas(PREFIX_LOGS),
    "SETTINGS_UPDATE": vol.Schema({vol.Required("settings"): SETTINGS_SCHEMA}),
    "SETTINGS_LOAD": vol.Schema(
        {
            vol.Required("settings"): vol.Schema(
                {vol.Required("defaultUnit"): vol.In(MASS_UNITS), vol.Required("weekStartDay"): vol.In(DAY_NAMES)}
            )
        }
    ),
    **_bookkeeping_schemas(PREFIX_SETTINGS),
    RECALCULATE_CURRENT_WEEK: vol.Schema({}),
}


def error_prefix_for(action_type: str) -> str:
    for prefix in _PREFIXES:
        if action_type.startswith(prefix):
            return prefix
    # Root-level tags have no slice of their own.
    return PREFIX_EXERCISES


def check_action(action: Action) -> tuple[Action | None, str | None]:
    """Return (validated action, None) or (None, reason)."""
    if not action.type:
        return None, "Action must have a valid type property"
    if action.type in TRUST_BOUNDARY_ACTIONS:
        return action, None
    schema = ACTION_SCHEMAS.get(action.type)
    if schema is None:
        return None, f"Unknown action type: {action.type}"
    try:
        payload = schema(action.payload)
    except vol.Invalid as err:
        return None, f"{action.type}: {humanize_error(action.payload, err)}"
    return Action(action.type, payload), None


def validate_action(action: Action | dict[str, Any]) -> Action:
    """Gate an action: the validated action, or an error report for its slice."""
    if isinstance(action, dict):
        action = Action.from_message(action)
    validated, error = check_action(action)
    if validated is not None:
        return validated
    _LOGGER.warning("Rejected action %s: %s", action.type or "<missing>", error)
    return set_error(error_prefix_for(action.type), f"Validation failed: {error}")


_HEX_COLOR = vol.Match(r"^#[0-9A-Fa-f]{6}$")
_URL = vol.Url()


def exercise_form_errors(data: dict[str, Any]) -> dict[str, str]:
    """Field -> message for a user-entered exercise; empty when it is acceptable."""
    errors: dict[str, str] = {}
    name = str(data.get("name") or "").strip()
    if not name:
        errors["name"] = "Exercise name is required"
    elif len(name) > 100:
        errors["name"] = "Exercise name must be less than 100 characters"

    color = str(data.get("color") or "")
    if not color:
        errors["color"] = "Color is required"
    else:
        try:
            _HEX_COLOR(color)
        except vol.Invalid:
            errors["color"] = "Color must be a valid hex color"

    ref_url = str(data.get("refUrl") or "").strip()
    if ref_url:
        try:
            _URL(ref_url)
        except vol.Invalid:
            errors["refUrl"] = "Reference URL must be a valid URL"
    return errors
