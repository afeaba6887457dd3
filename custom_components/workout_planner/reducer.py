"""Transition engine: (state, action) -> state.

Actions are routed by tag prefix to the owning slice reducer. A few tags
carry cross-slice side effects, applied here after the slice reducer ran:

- EXERCISES_REMOVE strips the exercise from every plan date and snapshot
- ROUTINES_REMOVE drops the snapshots matching the routine's name and color
- SETTINGS_UPDATE with a new week start day re-anchors the current week
- REPLACE_ALL / LOAD_FROM_STORAGE swap in a hydrated snapshot
- RECALCULATE_CURRENT_WEEK re-anchors the current week on today

``today`` is passed in so the function stays pure.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any

from .actions import Action
from .const import (
    LOAD_FROM_STORAGE,
    PREFIX_EXERCISES,
    PREFIX_LOGS,
    PREFIX_PLANNER,
    PREFIX_ROUTINES,
    PREFIX_SETTINGS,
    RECALCULATE_CURRENT_WEEK,
    REPLACE_ALL,
)
from .dates import current_week_start
from .entities import exercise_reducer, log_reducer, routine_reducer
from .models import Settings, plan_item_from_dict
from .plan import (
    ItemPath,
    add_item,
    move_item,
    parse_path,
    remove_exercise_everywhere,
    remove_item,
    remove_routine_snapshots_by_identity,
    reorder,
    set_items,
)
from .state import AppState, PlanSlice, SettingsSlice, hydrate_state, plan_from_raw

_LOGGER = logging.getLogger(__name__)


def _path(value: ItemPath | dict[str, Any]) -> ItemPath:
    return parse_path(value) if isinstance(value, dict) else value


def planner_reducer(planner: PlanSlice, action: Action, *, week_start_day: str) -> PlanSlice:
    payload: dict[str, Any] = action.payload
    plan = planner.plan

    if action.type == "PLANNER_UPDATE_PLAN":
        items = [plan_item_from_dict(i) for i in payload["items"]]
        return replace(planner, plan=set_items(plan, payload["dateISO"], items), error=None)
    if action.type == "PLANNER_REORDER_ITEMS":
        items = [plan_item_from_dict(i) for i in payload["items"]]
        return replace(planner, plan=reorder(plan, payload["dateISO"], items), error=None)
    if action.type == "PLANNER_ADD_ITEM":
        item = plan_item_from_dict(payload["item"])
        return replace(planner, plan=add_item(plan, payload["dateISO"], item), error=None)
    if action.type == "PLANNER_REMOVE_ITEM":
        return replace(planner, plan=remove_item(plan, payload["dateISO"], int(payload["index"])), error=None)
    if action.type == "PLANNER_MOVE_ITEM":
        moved = move_item(plan, _path(payload["source"]), _path(payload["destination"]))
        if moved is plan:
            _LOGGER.debug("Move refused: %s -> %s", payload["source"], payload["destination"])
            return planner
        return replace(planner, plan=moved, error=None)
    if action.type == "PLANNER_SET_CURRENT_WEEK":
        week_iso = str(payload["weekStartISO"])
        if week_iso == planner.current_week_start_iso and planner.error is None:
            return planner
        return replace(planner, current_week_start_iso=week_iso, error=None)
    if action.type == "PLANNER_REMOVE_EXERCISE_FROM_PLAN":
        return replace(planner, plan=remove_exercise_everywhere(plan, str(payload["exerciseId"])), error=None)
    if action.type == "PLANNER_REMOVE_ROUTINE_FROM_PLAN":
        stripped = remove_routine_snapshots_by_identity(plan, str(payload["name"]), str(payload["color"]))
        return replace(planner, plan=stripped, error=None)
    if action.type == "PLANNER_LOAD_PLAN":
        week_iso = str(payload["currentWeekStartISO"])
        return PlanSlice(
            plan=plan_from_raw(payload["plan"], week_start_iso=week_iso, week_start_day=week_start_day),
            current_week_start_iso=week_iso,
        )
    if action.type == f"{PREFIX_PLANNER}SET_LOADING":
        return replace(planner, loading=bool(payload["loading"]))
    if action.type == f"{PREFIX_PLANNER}SET_ERROR":
        return replace(planner, error=payload.get("error"), loading=False)
    return planner


def settings_reducer(settings: SettingsSlice, action: Action) -> SettingsSlice:
    payload: dict[str, Any] = action.payload
    if action.type == "SETTINGS_UPDATE":
        return replace(settings, preferences=settings.preferences.merged(payload["settings"]), error=None)
    if action.type == "SETTINGS_LOAD":
        return SettingsSlice(preferences=Settings.from_dict(payload["settings"]))
    if action.type == f"{PREFIX_SETTINGS}SET_LOADING":
        return replace(settings, loading=bool(payload["loading"]))
    if action.type == f"{PREFIX_SETTINGS}SET_ERROR":
        return replace(settings, error=payload.get("error"), loading=False)
    return settings


def _with_slice(state: AppState, name: str, new_slice: Any) -> AppState:
    # Unchanged slice means unchanged state, so callers can compare by identity.
    if new_slice is getattr(state, name):
        return state
    return replace(state, **{name: new_slice})


def _route(state: AppState, action: Action) -> AppState:
    tag = action.type
    if tag.startswith(PREFIX_EXERCISES):
        return _with_slice(state, "exercises", exercise_reducer(state.exercises, action))
    if tag.startswith(PREFIX_ROUTINES):
        return _with_slice(state, "routines", routine_reducer(state.routines, action))
    if tag.startswith(PREFIX_PLANNER):
        week_start_day = state.settings.preferences.week_start_day
        return _with_slice(state, "planner", planner_reducer(state.planner, action, week_start_day=week_start_day))
    if tag.startswith(PREFIX_LOGS):
        return _with_slice(state, "logs", log_reducer(state.logs, action))
    if tag.startswith(PREFIX_SETTINGS):
        return _with_slice(state, "settings", settings_reducer(state.settings, action))
    _LOGGER.debug("No slice handles %s", tag)
    return state


def reduce(state: AppState, action: Action, *, today: date) -> AppState:
    """Apply one action, cascades included."""
    if action.type in (REPLACE_ALL, LOAD_FROM_STORAGE):
        return hydrate_state(action.payload, today=today)

    if action.type == RECALCULATE_CURRENT_WEEK:
        anchor = current_week_start(today, state.settings.preferences.week_start_day)
        if anchor == state.planner.current_week_start_iso:
            return state
        return replace(state, planner=replace(state.planner, current_week_start_iso=anchor))

    # Snapshots are matched by value, so the name/color must be read before removal.
    removed_routine = None
    if action.type == "ROUTINES_REMOVE":
        removed_routine = state.routines.get(str(action.payload["id"]))

    previous_week_start_day = state.settings.preferences.week_start_day
    new_state = _route(state, action)

    if action.type == "EXERCISES_REMOVE":
        plan = remove_exercise_everywhere(new_state.planner.plan, str(action.payload["id"]))
        new_state = replace(new_state, planner=replace(new_state.planner, plan=plan))
    elif action.type == "ROUTINES_REMOVE" and removed_routine is not None:
        plan = remove_routine_snapshots_by_identity(
            new_state.planner.plan, removed_routine.name, removed_routine.color
        )
        new_state = replace(new_state, planner=replace(new_state.planner, plan=plan))
    elif action.type == "SETTINGS_UPDATE":
        week_start_day = new_state.settings.preferences.week_start_day
        if week_start_day != previous_week_start_day:
            anchor = current_week_start(today, week_start_day)
            _LOGGER.debug("Week start day is now %s, current week starts %s", week_start_day, anchor)
            new_state = replace(new_state, planner=replace(new_state.planner, current_week_start_iso=anchor))

    return new_state
