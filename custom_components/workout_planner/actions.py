"""Action records and creators.

An action is a tag plus a wire payload. Payloads stay plain JSON-like dicts
until the validation gate has checked them; the reducer converts them to
domain records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .const import LOAD_FROM_STORAGE, RECALCULATE_CURRENT_WEEK, REPLACE_ALL
from .models import (
    Exercise,
    LogEntry,
    PlanItem,
    Routine,
    WorkoutSet,
    plan_item_as_dict,
    workout_set_as_dict,
)


@dataclass(frozen=True, slots=True)
class Action:
    type: str
    payload: Any = field(default_factory=dict)

    @classmethod
    def from_message(cls, msg: dict[str, Any]) -> Action:
        return cls(type=str(msg.get("type") or ""), payload=msg.get("payload", {}))

    def as_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}


def add_exercise(exercise: Exercise) -> Action:
    return Action("EXERCISES_ADD", {"exercise": exercise.as_dict()})


def remove_exercise(exercise_id: str) -> Action:
    return Action("EXERCISES_REMOVE", {"id": exercise_id})


def update_exercise(exercise: Exercise) -> Action:
    return Action("EXERCISES_UPDATE", {"exercise": exercise.as_dict()})


def load_exercises(exercises: list[Exercise]) -> Action:
    return Action("EXERCISES_LOAD_ALL", {"exercises": [e.as_dict() for e in exercises]})


def add_routine(routine: Routine) -> Action:
    return Action("ROUTINES_ADD", {"routine": routine.as_dict()})


def remove_routine(routine_id: str) -> Action:
    return Action("ROUTINES_REMOVE", {"id": routine_id})


def update_routine(routine: Routine) -> Action:
    return Action("ROUTINES_UPDATE", {"routine": routine.as_dict()})


def reorder_routine_exercises(routine_id: str, exercise_ids: list[str]) -> Action:
    return Action("ROUTINES_REORDER_EXERCISES", {"routineId": routine_id, "exerciseIds": list(exercise_ids)})


def update_plan(date_iso: str, items: list[PlanItem]) -> Action:
    return Action("PLANNER_UPDATE_PLAN", {"dateISO": date_iso, "items": [plan_item_as_dict(i) for i in items]})


def reorder_plan_items(date_iso: str, items: list[PlanItem]) -> Action:
    return Action("PLANNER_REORDER_ITEMS", {"dateISO": date_iso, "items": [plan_item_as_dict(i) for i in items]})


def add_plan_item(date_iso: str, item: PlanItem) -> Action:
    return Action("PLANNER_ADD_ITEM", {"dateISO": date_iso, "item": plan_item_as_dict(item)})


def remove_plan_item(date_iso: str, index: int) -> Action:
    return Action("PLANNER_REMOVE_ITEM", {"dateISO": date_iso, "index": index})


def move_plan_item(source: dict[str, Any], destination: dict[str, Any]) -> Action:
    """Paths use the wire form: {dateISO, index} or {dateISO, routineIndex, exerciseIndex}."""
    return Action("PLANNER_MOVE_ITEM", {"source": source, "destination": destination})


def set_current_week(week_start_iso: str) -> Action:
    return Action("PLANNER_SET_CURRENT_WEEK", {"weekStartISO": week_start_iso})


def save_log(entry: LogEntry) -> Action:
    return Action("LOGS_SAVE", {"entry": entry.as_dict()})


def update_log(log_id: str, sets: list[WorkoutSet]) -> Action:
    return Action("LOGS_UPDATE", {"id": log_id, "payload": {"sets": [workout_set_as_dict(s) for s in sets]}})


def remove_log(log_id: str) -> Action:
    return Action("LOGS_REMOVE", {"id": log_id})


def remove_logs_by_date(date_iso: str) -> Action:
    return Action("LOGS_REMOVE_BY_DATE", {"dateISO": date_iso})


def update_settings(**settings: Any) -> Action:
    """Keyword names follow the wire keys: defaultUnit, weekStartDay."""
    return Action("SETTINGS_UPDATE", {"settings": dict(settings)})


def set_loading(prefix: str, loading: bool) -> Action:
    return Action(f"{prefix}SET_LOADING", {"loading": bool(loading)})


def set_error(prefix: str, error: str | None) -> Action:
    return Action(f"{prefix}SET_ERROR", {"error": error})


def replace_all(snapshot: Any) -> Action:
    return Action(REPLACE_ALL, snapshot)


def load_from_storage(snapshot: Any) -> Action:
    return Action(LOAD_FROM_STORAGE, snapshot)


def recalculate_current_week() -> Action:
    return Action(RECALCULATE_CURRENT_WEEK, {})
