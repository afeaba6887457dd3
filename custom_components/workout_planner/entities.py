"""Reducers for the normalized entity collections (exercises, routines, logs)."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from .actions import Action
from .const import PREFIX_EXERCISES, PREFIX_LOGS, PREFIX_ROUTINES
from .models import Exercise, LogEntry, Routine, workout_set_from_dict
from .state import EntitySlice, T, entity_slice_from

_LOGGER = logging.getLogger(__name__)


def add_entity(entity_slice: EntitySlice[T], entity: T) -> EntitySlice[T]:
    # Ids are generated by the caller; a repeated id replaces the record in place.
    all_ids = entity_slice.all_ids if entity.id in entity_slice.by_id else (*entity_slice.all_ids, entity.id)
    return replace(
        entity_slice,
        by_id={**entity_slice.by_id, entity.id: entity},
        all_ids=all_ids,
        error=None,
    )


def remove_entity(entity_slice: EntitySlice[T], entity_id: str) -> EntitySlice[T]:
    by_id = dict(entity_slice.by_id)
    by_id.pop(entity_id, None)
    return replace(
        entity_slice,
        by_id=by_id,
        all_ids=tuple(i for i in entity_slice.all_ids if i != entity_id),
        error=None,
    )


def update_entity(entity_slice: EntitySlice[T], entity: T) -> EntitySlice[T]:
    """Replace the whole record; the id order is untouched."""
    if entity.id not in entity_slice.by_id:
        _LOGGER.debug("Update for unknown id %s ignored", entity.id)
        return entity_slice
    return replace(entity_slice, by_id={**entity_slice.by_id, entity.id: entity}, error=None)


def load_all(entity_slice: EntitySlice[T], entities: list[T]) -> EntitySlice[T]:
    fresh = entity_slice_from(entities)
    return replace(entity_slice, by_id=fresh.by_id, all_ids=fresh.all_ids, loading=False, error=None)


def _bookkeeping(entity_slice: EntitySlice[T], action: Action, prefix: str) -> EntitySlice[T]:
    if action.type == f"{prefix}SET_LOADING":
        return replace(entity_slice, loading=bool(action.payload["loading"]))
    if action.type == f"{prefix}SET_ERROR":
        return replace(entity_slice, error=action.payload.get("error"), loading=False)
    return entity_slice


def exercise_reducer(entity_slice: EntitySlice[Exercise], action: Action) -> EntitySlice[Exercise]:
    payload: dict[str, Any] = action.payload
    if action.type == "EXERCISES_ADD":
        return add_entity(entity_slice, Exercise.from_dict(payload["exercise"]))
    if action.type == "EXERCISES_REMOVE":
        return remove_entity(entity_slice, str(payload["id"]))
    if action.type == "EXERCISES_UPDATE":
        return update_entity(entity_slice, Exercise.from_dict(payload["exercise"]))
    if action.type == "EXERCISES_LOAD_ALL":
        return load_all(entity_slice, [Exercise.from_dict(e) for e in payload["exercises"]])
    return _bookkeeping(entity_slice, action, PREFIX_EXERCISES)


def routine_reducer(entity_slice: EntitySlice[Routine], action: Action) -> EntitySlice[Routine]:
    payload: dict[str, Any] = action.payload
    if action.type == "ROUTINES_ADD":
        return add_entity(entity_slice, Routine.from_dict(payload["routine"]))
    if action.type == "ROUTINES_REMOVE":
        return remove_entity(entity_slice, str(payload["id"]))
    if action.type == "ROUTINES_UPDATE":
        return update_entity(entity_slice, Routine.from_dict(payload["routine"]))
    if action.type == "ROUTINES_REORDER_EXERCISES":
        routine_id = str(payload["routineId"])
        routine = entity_slice.get(routine_id)
        if routine is None:
            return replace(entity_slice, error=f"Routine with id {routine_id} not found")
        return update_entity(entity_slice, replace(routine, exercise_ids=tuple(payload["exerciseIds"])))
    if action.type == "ROUTINES_LOAD_ALL":
        return load_all(entity_slice, [Routine.from_dict(r) for r in payload["routines"]])
    return _bookkeeping(entity_slice, action, PREFIX_ROUTINES)


def log_reducer(entity_slice: EntitySlice[LogEntry], action: Action) -> EntitySlice[LogEntry]:
    payload: dict[str, Any] = action.payload
    if action.type == "LOGS_SAVE":
        return add_entity(entity_slice, LogEntry.from_dict(payload["entry"]))
    if action.type == "LOGS_UPDATE":
        existing = entity_slice.get(str(payload["id"]))
        if existing is None:
            return entity_slice
        sets = tuple(workout_set_from_dict(s) for s in payload["payload"]["sets"])
        return update_entity(entity_slice, existing.with_sets(sets))
    if action.type == "LOGS_REMOVE":
        return remove_entity(entity_slice, str(payload["id"]))
    if action.type == "LOGS_REMOVE_BY_DATE":
        date_iso = str(payload["dateISO"])
        fresh = entity_slice_from(e for e in entity_slice.items() if e.date_iso != date_iso)
        return replace(entity_slice, by_id=fresh.by_id, all_ids=fresh.all_ids, error=None)
    if action.type == "LOGS_LOAD_ALL":
        return load_all(entity_slice, [LogEntry.from_dict(e) for e in payload["logs"]])
    return _bookkeeping(entity_slice, action, PREFIX_LOGS)
