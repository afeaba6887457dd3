"""Websocket API for Workout Planner."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.components import websocket_api
from homeassistant.core import HomeAssistant

from .actions import move_plan_item
from .const import DEFAULT_TREND_DAYS, DOMAIN
from .dates import week_dates
from .engine import EngineNotReadyError, ExerciseInUseError, InvalidExerciseError
from .metrics import (
    completion_stats,
    effective_unit,
    exercise_usage,
    format_current_progress,
    format_last_session,
    format_personal_best,
    latest_log,
    locked_exercise_ids,
    log_on_date,
    personal_best,
    planned_exercise_ids,
    progress_trend,
    weekly_stats,
    workout_summary,
)
from .storage import StateImportError
from .ws_state import public_state, runtime_payload

_LOGGER = logging.getLogger(__name__)

_PATH = vol.Schema(
    {
        vol.Required("dateISO"): str,
        vol.Optional("index"): vol.Coerce(int),
        vol.Optional("routineIndex"): vol.Coerce(int),
        vol.Optional("exerciseIndex"): vol.Coerce(int),
    }
)


def _coordinator(hass: HomeAssistant, connection: websocket_api.ActiveConnection, msg: dict[str, Any]):
    entry_id = msg["entry_id"]
    coordinator = hass.data.get(DOMAIN, {}).get(entry_id)
    if coordinator is None:
        connection.send_error(msg["id"], "entry_not_found", f"No entry found for entry_id={entry_id}")
    return coordinator


def _state_result(coordinator) -> dict[str, Any]:
    engine = coordinator.engine
    return {
        "entry_id": coordinator.entry.entry_id,
        "state": public_state(engine.state, runtime=runtime_payload(engine.state, engine.today())),
    }


@websocket_api.websocket_command({vol.Required("type"): "workout_planner/list_entries"})
@websocket_api.async_response
async def ws_list_entries(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    entries = hass.config_entries.async_entries(DOMAIN)
    payload = [{"entry_id": entry.entry_id, "title": entry.title} for entry in entries]
    connection.send_result(msg["id"], {"entries": payload})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/get_state",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_get_state(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    connection.send_result(msg["id"], _state_result(coordinator))


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/dispatch",
        vol.Required("entry_id"): str,
        vol.Required("action"): dict,
    }
)
@websocket_api.async_response
async def ws_dispatch(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Apply any action; validation failures come back as a slice error in state."""
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        coordinator.dispatch(msg["action"])
    except EngineNotReadyError as e:
        connection.send_error(msg["id"], "not_ready", str(e))
        return
    connection.send_result(msg["id"], _state_result(coordinator))


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/save_exercise",
        vol.Required("entry_id"): str,
        vol.Required("exercise"): dict,
    }
)
@websocket_api.async_response
async def ws_save_exercise(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        exercise = coordinator.engine.save_exercise(msg["exercise"])
    except InvalidExerciseError as e:
        connection.send_error(msg["id"], "invalid_exercise", str(e))
        return
    connection.send_result(msg["id"], {**_state_result(coordinator), "exercise": exercise.as_dict()})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/delete_exercise",
        vol.Required("entry_id"): str,
        vol.Required("exercise_id"): str,
    }
)
@websocket_api.async_response
async def ws_delete_exercise(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        coordinator.engine.delete_exercise(str(msg["exercise_id"]))
    except ExerciseInUseError as e:
        connection.send_error(msg["id"], "exercise_in_use", str(e))
        return
    connection.send_result(msg["id"], _state_result(coordinator))


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/move_item",
        vol.Required("entry_id"): str,
        vol.Required("source"): _PATH,
        vol.Required("destination"): _PATH,
    }
)
@websocket_api.async_response
async def ws_move_item(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Reorder within a date or within one routine snapshot; other moves are ignored."""
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    coordinator.dispatch(move_plan_item(msg["source"], msg["destination"]))
    connection.send_result(msg["id"], _state_result(coordinator))


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/export",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_export(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "data": coordinator.engine.export()})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/import",
        vol.Required("entry_id"): str,
        vol.Required("data"): vol.Any(str, dict),
    }
)
@websocket_api.async_response
async def ws_import(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        coordinator.engine.import_snapshot(msg["data"])
    except StateImportError as e:
        _LOGGER.warning("Import rejected for entry_id=%s: %s", msg["entry_id"], e)
        connection.send_error(msg["id"], "invalid_import", str(e))
        return
    connection.send_result(msg["id"], _state_result(coordinator))


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/metrics",
        vol.Required("entry_id"): str,
        vol.Optional("week_start"): str,
        vol.Optional("date"): str,
        vol.Optional("days", default=DEFAULT_TREND_DAYS): vol.All(vol.Coerce(int), vol.Range(min=1, max=3650)),
    }
)
@websocket_api.async_response
async def ws_metrics(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    engine = coordinator.engine
    state = engine.state
    today = engine.today()
    default_unit = state.settings.preferences.default_unit
    week_start = str(msg.get("week_start") or state.planner.current_week_start_iso)
    day = str(msg.get("date") or today.isoformat())
    logs = state.logs.items()

    exercises: dict[str, Any] = {}
    for exercise in state.exercises.items():
        unit = effective_unit(exercise, default_unit)
        pb = personal_best(exercise, logs)
        exercises[exercise.id] = {
            "personal_best": pb.as_dict() if pb is not None else None,
            "personal_best_text": format_personal_best(exercise, logs, unit),
            "last_session": format_last_session(exercise, latest_log(logs, exercise.id), unit),
            "on_date": format_current_progress(exercise, log_on_date(logs, exercise.id, day), unit),
            "trend": progress_trend(exercise, logs, msg["days"], today=today).as_dict(),
        }

    try:
        dates = week_dates(week_start)
    except ValueError as e:
        connection.send_error(msg["id"], "invalid_date", str(e))
        return

    connection.send_result(
        msg["id"],
        {
            "entry_id": msg["entry_id"],
            "exercises": exercises,
            "usage": exercise_usage(state),
            "week": weekly_stats(logs, state.planner.plan, week_start).as_dict(),
            "completion": completion_stats(state.planner.plan, logs, dates).as_dict(),
            "summary": workout_summary(logs, day).as_dict(),
            "locked": {
                d: locked_exercise_ids(sorted(planned_exercise_ids(state.planner.plan[d])), d, logs)
                for d in dates
                if d in state.planner.plan
            },
        },
    )


def async_register(hass: HomeAssistant) -> None:
    websocket_api.async_register_command(hass, ws_list_entries)
    websocket_api.async_register_command(hass, ws_get_state)
    websocket_api.async_register_command(hass, ws_dispatch)
    websocket_api.async_register_command(hass, ws_save_exercise)
    websocket_api.async_register_command(hass, ws_delete_exercise)
    websocket_api.async_register_command(hass, ws_move_item)
    websocket_api.async_register_command(hass, ws_export)
    websocket_api.async_register_command(hass, ws_import)
    websocket_api.async_register_command(hass, ws_metrics)
