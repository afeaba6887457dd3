"""Date-indexed plan operations.

The plan maps ISO date -> ordered items. A date with zero items has no key,
so every helper here funnels through set_items().
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, assert_never

from .models import ExerciseItem, PlanItem, RoutineSnapshot
from .state import Plan


def get_items(plan: Plan, date_iso: str) -> tuple[PlanItem, ...]:
    return plan.get(date_iso, ())


def set_items(plan: Plan, date_iso: str, items: list[PlanItem] | tuple[PlanItem, ...]) -> Plan:
    out = dict(plan)
    if items:
        out[date_iso] = tuple(items)
    else:
        out.pop(date_iso, None)
    return out


def add_item(plan: Plan, date_iso: str, item: PlanItem) -> Plan:
    return set_items(plan, date_iso, (*get_items(plan, date_iso), item))


def remove_item(plan: Plan, date_iso: str, index: int) -> Plan:
    items = list(get_items(plan, date_iso))
    if index < 0 or index >= len(items):
        return plan
    del items[index]
    return set_items(plan, date_iso, items)


def reorder(plan: Plan, date_iso: str, new_order: list[PlanItem] | tuple[PlanItem, ...]) -> Plan:
    return set_items(plan, date_iso, new_order)


def _strip_exercise(item: PlanItem, exercise_id: str) -> PlanItem | None:
    if isinstance(item, ExerciseItem):
        return None if item.exercise_id == exercise_id else item
    if isinstance(item, RoutineSnapshot):
        remaining = tuple(i for i in item.exercise_ids if i != exercise_id)
        if not remaining:
            return None
        if len(remaining) == len(item.exercise_ids):
            return item
        return replace(item, exercise_ids=remaining)
    assert_never(item)


def remove_exercise_everywhere(plan: Plan, exercise_id: str) -> Plan:
    """Drop direct references and nested snapshot ids for an exercise.

    Snapshots left without exercises are dropped, and so are emptied dates.
    """
    out: Plan = {}
    for date_iso, items in plan.items():
        kept = tuple(s for s in (_strip_exercise(i, exercise_id) for i in items) if s is not None)
        if kept:
            out[date_iso] = kept
    return out


def remove_routine_snapshots_by_identity(plan: Plan, name: str, color: str) -> Plan:
    """Snapshots are detached copies, so they are matched by value."""
    out: Plan = {}
    for date_iso, items in plan.items():
        kept = tuple(
            i for i in items if not (isinstance(i, RoutineSnapshot) and i.name == name and i.color == color)
        )
        if kept:
            out[date_iso] = kept
    return out


def dates_referencing_exercise(plan: Plan, exercise_id: str) -> list[str]:
    """Dates whose items (direct or nested in a snapshot) reference exercise_id."""
    found: list[str] = []
    for date_iso, items in plan.items():
        for item in items:
            if isinstance(item, ExerciseItem):
                hit = item.exercise_id == exercise_id
            elif isinstance(item, RoutineSnapshot):
                hit = exercise_id in item.exercise_ids
            else:
                assert_never(item)
            if hit:
                found.append(date_iso)
                break
    return sorted(found)


def can_delete_exercise(plan: Plan, exercise_id: str) -> bool:
    # Plan only; routine definitions may keep the id.
    return not dates_referencing_exercise(plan, exercise_id)


def total_item_count(plan: Plan) -> int:
    return sum(len(items) for items in plan.values())


@dataclass(frozen=True, slots=True)
class TopLevelPath:
    """A plan item on a date."""

    date_iso: str
    index: int


@dataclass(frozen=True, slots=True)
class NestedPath:
    """An exercise inside a routine snapshot on a date."""

    date_iso: str
    routine_index: int
    exercise_index: int


ItemPath = TopLevelPath | NestedPath


def parse_path(raw: dict[str, Any]) -> ItemPath:
    """Parse the wire form of a drag target once, at the boundary."""
    date_iso = str(raw["dateISO"])
    if "routineIndex" in raw or "exerciseIndex" in raw:
        return NestedPath(
            date_iso=date_iso,
            routine_index=int(raw["routineIndex"]),
            exercise_index=int(raw["exerciseIndex"]),
        )
    return TopLevelPath(date_iso=date_iso, index=int(raw["index"]))


def path_as_dict(path: ItemPath) -> dict[str, Any]:
    if isinstance(path, TopLevelPath):
        return {"dateISO": path.date_iso, "index": path.index}
    if isinstance(path, NestedPath):
        return {
            "dateISO": path.date_iso,
            "routineIndex": path.routine_index,
            "exerciseIndex": path.exercise_index,
        }
    assert_never(path)


def _array_move(values: list[Any], source: int, destination: int) -> list[Any] | None:
    if not (0 <= source < len(values)) or not (0 <= destination < len(values)):
        return None
    out = list(values)
    out.insert(destination, out.pop(source))
    return out


def move_item(plan: Plan, source: ItemPath, destination: ItemPath) -> Plan:
    """Move an item within its container.

    Cross-day, cross-routine and mixed-depth moves are refused and leave the
    plan untouched, as are out-of-range indices.
    """
    if isinstance(source, TopLevelPath) and isinstance(destination, TopLevelPath):
        if source.date_iso != destination.date_iso:
            return plan
        moved = _array_move(list(get_items(plan, source.date_iso)), source.index, destination.index)
        if moved is None:
            return plan
        return set_items(plan, source.date_iso, moved)

    if isinstance(source, NestedPath) and isinstance(destination, NestedPath):
        if (source.date_iso, source.routine_index) != (destination.date_iso, destination.routine_index):
            return plan
        items = list(get_items(plan, source.date_iso))
        if not (0 <= source.routine_index < len(items)):
            return plan
        snapshot = items[source.routine_index]
        if not isinstance(snapshot, RoutineSnapshot):
            return plan
        moved = _array_move(list(snapshot.exercise_ids), source.exercise_index, destination.exercise_index)
        if moved is None:
            return plan
        items[source.routine_index] = replace(snapshot, exercise_ids=tuple(moved))
        return set_items(plan, source.date_iso, items)

    return plan
