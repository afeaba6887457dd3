"""Domain records for Workout Planner.

Records are frozen dataclasses. Wire/storage payloads use the camelCase keys
the frontend card speaks (``exerciseIds``, ``dateISO``...), converted at the
``from_dict``/``as_dict`` seams only.

Two tagged variants exist:
- PlanItem: ExerciseItem | RoutineSnapshot (discriminated by ``type``)
- WorkoutSet: WeightRepsSet | HoldSecondsSet | RepsOnlySet | DistanceTimeSet
  (discriminated structurally by which fields are present)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, assert_never

from .const import (
    DAY_NAMES,
    DEFAULT_UNIT,
    DEFAULT_WEEK_START_DAY,
    MASS_UNITS,
    WEIGHT_REPS,
)


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True, slots=True)
class Exercise:
    id: str
    name: str
    color: str
    progression_type: str
    ref_url: str | None = None
    weight_unit: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Exercise:
        progression_type = str(data.get("type") or data.get("progressionType") or WEIGHT_REPS)
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            color=str(data.get("color") or ""),
            progression_type=progression_type,
            ref_url=_opt_str(data.get("refUrl")),
            # Only meaningful for weight based exercises.
            weight_unit=_opt_str(data.get("weightUnit")) if progression_type == WEIGHT_REPS else None,
        )

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "type": self.progression_type,
        }
        if self.ref_url is not None:
            out["refUrl"] = self.ref_url
        if self.weight_unit is not None:
            out["weightUnit"] = self.weight_unit
        return out


@dataclass(frozen=True, slots=True)
class Routine:
    id: str
    name: str
    color: str
    exercise_ids: tuple[str, ...]
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Routine:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            color=str(data.get("color") or ""),
            exercise_ids=tuple(str(x) for x in (data.get("exerciseIds") or [])),
            description=_opt_str(data.get("description")),
        )

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "exerciseIds": list(self.exercise_ids),
        }
        if self.description is not None:
            out["description"] = self.description
        return out


@dataclass(frozen=True, slots=True)
class ExerciseItem:
    """A direct reference to an exercise on a plan date."""

    exercise_id: str


@dataclass(frozen=True, slots=True)
class RoutineSnapshot:
    """A detached copy of a routine, frozen when it was placed on a date."""

    name: str
    color: str
    exercise_ids: tuple[str, ...]

    @classmethod
    def from_routine(cls, routine: Routine) -> RoutineSnapshot:
        return cls(name=routine.name, color=routine.color, exercise_ids=tuple(routine.exercise_ids))


PlanItem = ExerciseItem | RoutineSnapshot


def plan_item_from_dict(data: dict[str, Any]) -> PlanItem:
    kind = data.get("type")
    if kind == "exercise":
        # Older snapshots stored the reference under "id".
        ref = data.get("exerciseId", data.get("id"))
        if not ref:
            raise ValueError("Exercise plan item without exerciseId")
        return ExerciseItem(exercise_id=str(ref))
    if kind == "routine":
        return RoutineSnapshot(
            name=str(data["name"]),
            color=str(data.get("color") or ""),
            exercise_ids=tuple(str(x) for x in (data.get("exerciseIds") or [])),
        )
    raise ValueError(f"Unknown plan item type: {kind!r}")


def plan_item_as_dict(item: PlanItem) -> dict[str, Any]:
    if isinstance(item, ExerciseItem):
        return {"type": "exercise", "exerciseId": item.exercise_id}
    if isinstance(item, RoutineSnapshot):
        return {
            "type": "routine",
            "name": item.name,
            "color": item.color,
            "exerciseIds": list(item.exercise_ids),
        }
    assert_never(item)


def plan_item_exercise_ids(item: PlanItem) -> tuple[str, ...]:
    """Every exercise id an item schedules, nested ones included."""
    if isinstance(item, ExerciseItem):
        return (item.exercise_id,)
    if isinstance(item, RoutineSnapshot):
        return item.exercise_ids
    assert_never(item)


@dataclass(frozen=True, slots=True)
class WeightRepsSet:
    weight: float
    reps: int


@dataclass(frozen=True, slots=True)
class HoldSecondsSet:
    seconds: float


@dataclass(frozen=True, slots=True)
class RepsOnlySet:
    reps: int


@dataclass(frozen=True, slots=True)
class DistanceTimeSet:
    distance: float
    seconds: float


WorkoutSet = WeightRepsSet | HoldSecondsSet | RepsOnlySet | DistanceTimeSet


def workout_set_from_dict(data: dict[str, Any]) -> WorkoutSet:
    keys = set(data)
    if keys == {"weight", "reps"}:
        return WeightRepsSet(weight=data["weight"], reps=int(data["reps"]))
    if keys == {"distance", "seconds"}:
        return DistanceTimeSet(distance=data["distance"], seconds=data["seconds"])
    if keys == {"seconds"}:
        return HoldSecondsSet(seconds=data["seconds"])
    if keys == {"reps"}:
        return RepsOnlySet(reps=int(data["reps"]))
    raise ValueError(f"Unrecognized workout set shape: {sorted(keys)}")


def workout_set_as_dict(workout_set: WorkoutSet) -> dict[str, Any]:
    if isinstance(workout_set, WeightRepsSet):
        return {"weight": workout_set.weight, "reps": workout_set.reps}
    if isinstance(workout_set, HoldSecondsSet):
        return {"seconds": workout_set.seconds}
    if isinstance(workout_set, RepsOnlySet):
        return {"reps": workout_set.reps}
    if isinstance(workout_set, DistanceTimeSet):
        return {"distance": workout_set.distance, "seconds": workout_set.seconds}
    assert_never(workout_set)


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One exercise's session on one date."""

    id: str
    day: str
    exercise_id: str
    date_iso: str
    sets: tuple[WorkoutSet, ...]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogEntry:
        payload = data.get("payload")
        if not isinstance(payload, dict):
            payload = {}
        return cls(
            id=str(data["id"]),
            day=str(data.get("day") or ""),
            exercise_id=str(data["exerciseId"]),
            date_iso=str(data["dateISO"]),
            sets=tuple(workout_set_from_dict(s) for s in (payload.get("sets") or [])),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "day": self.day,
            "exerciseId": self.exercise_id,
            "dateISO": self.date_iso,
            "payload": {"sets": [workout_set_as_dict(s) for s in self.sets]},
        }

    def with_sets(self, sets: tuple[WorkoutSet, ...]) -> LogEntry:
        return replace(self, sets=tuple(sets))


@dataclass(frozen=True, slots=True)
class Settings:
    default_unit: str = DEFAULT_UNIT
    week_start_day: str = DEFAULT_WEEK_START_DAY

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        unit = str(data.get("defaultUnit") or DEFAULT_UNIT)
        day = str(data.get("weekStartDay") or DEFAULT_WEEK_START_DAY)
        return cls(
            default_unit=unit if unit in MASS_UNITS else DEFAULT_UNIT,
            week_start_day=day if day in DAY_NAMES else DEFAULT_WEEK_START_DAY,
        )

    def as_dict(self) -> dict[str, Any]:
        return {"defaultUnit": self.default_unit, "weekStartDay": self.week_start_day}

    def merged(self, partial: dict[str, Any]) -> Settings:
        """Settings update merges; every other entity is replaced wholesale."""
        return Settings(
            default_unit=str(partial.get("defaultUnit") or self.default_unit),
            week_start_day=str(partial.get("weekStartDay") or self.week_start_day),
        )
