"""Read-side metrics over logs and the plan.

Nothing here mutates state. Every function takes the records it needs and
returns display-ready values (plain numbers, strings or small dataclasses
with an ``as_dict`` for the websocket layer).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, assert_never

from .const import (
    DISTANCE_TIME,
    HOLD_SECONDS,
    MASS_UNITS,
    REPS_ONLY,
    TREND_THRESHOLD_PCT,
    WEIGHT_REPS,
)
from .dates import format_seconds, week_dates
from .models import (
    DistanceTimeSet,
    Exercise,
    HoldSecondsSet,
    LogEntry,
    PlanItem,
    RepsOnlySet,
    WeightRepsSet,
    WorkoutSet,
    plan_item_exercise_ids,
    workout_set_as_dict,
)
from .plan import can_delete_exercise
from .state import AppState, Plan

NO_VALUE = "—"

_PB_KINDS = {
    WEIGHT_REPS: "weight",
    REPS_ONLY: "reps",
    HOLD_SECONDS: "seconds",
    DISTANCE_TIME: "distance",
}


def _round1(value: float) -> float:
    # Half rounds up, the way the card has always displayed percentages.
    return math.floor(value * 10 + 0.5) / 10


def _num(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _plural(count: int, word: str) -> str:
    return f"{count} {word if count == 1 else word + 's'}"


def mass_label(unit: str) -> str:
    return "kg" if unit == "KG" else "lbs"


def effective_unit(exercise: Exercise, default_unit: str) -> str:
    """Per-exercise weight unit, or the global default for "DEFAULT"/unset."""
    if exercise.weight_unit in MASS_UNITS:
        return exercise.weight_unit
    return default_unit


def set_value(workout_set: WorkoutSet, progression_type: str) -> float | None:
    """Primary measurement of a set, or None when the shape does not fit the type."""
    if isinstance(workout_set, WeightRepsSet):
        return workout_set.weight if progression_type == WEIGHT_REPS else None
    if isinstance(workout_set, RepsOnlySet):
        return workout_set.reps if progression_type == REPS_ONLY else None
    if isinstance(workout_set, HoldSecondsSet):
        return workout_set.seconds if progression_type == HOLD_SECONDS else None
    if isinstance(workout_set, DistanceTimeSet):
        return workout_set.distance if progression_type == DISTANCE_TIME else None
    assert_never(workout_set)


def logs_for_exercise(logs: Iterable[LogEntry], exercise_id: str) -> list[LogEntry]:
    return [log for log in logs if log.exercise_id == exercise_id]


def latest_log(logs: Iterable[LogEntry], exercise_id: str) -> LogEntry | None:
    found = logs_for_exercise(logs, exercise_id)
    return max(found, key=lambda log: log.date_iso) if found else None


def latest_log_before(logs: Iterable[LogEntry], exercise_id: str, before_date_iso: str) -> LogEntry | None:
    found = [log for log in logs_for_exercise(logs, exercise_id) if log.date_iso < before_date_iso]
    return max(found, key=lambda log: log.date_iso) if found else None


def log_on_date(logs: Iterable[LogEntry], exercise_id: str, date_iso: str) -> LogEntry | None:
    for log in logs:
        if log.exercise_id == exercise_id and log.date_iso == date_iso:
            return log
    return None


@dataclass(frozen=True, slots=True)
class PersonalBest:
    value: float
    date_iso: str
    kind: str

    def as_dict(self) -> dict[str, Any]:
        return {"value": self.value, "date": self.date_iso, "type": self.kind}


def personal_best(exercise: Exercise, logs: Iterable[LogEntry]) -> PersonalBest | None:
    """Highest single-set value ever logged; None when nothing qualifies.

    For WEIGHT_REPS this is the heaviest weight regardless of reps.
    """
    best: PersonalBest | None = None
    kind = _PB_KINDS.get(exercise.progression_type)
    if kind is None:
        return None
    for log in logs_for_exercise(logs, exercise.id):
        for workout_set in log.sets:
            value = set_value(workout_set, exercise.progression_type)
            if value is None:
                continue
            if best is None or value > best.value:
                best = PersonalBest(value=value, date_iso=log.date_iso, kind=kind)
    return best


def format_personal_best(exercise: Exercise, logs: Iterable[LogEntry], unit: str) -> str:
    pb = personal_best(exercise, logs)
    if pb is None:
        return NO_VALUE
    if exercise.progression_type == WEIGHT_REPS:
        return f"{_num(pb.value)}{mass_label(unit)}"
    if exercise.progression_type == HOLD_SECONDS:
        return f"{_num(pb.value)}s"
    if exercise.progression_type == REPS_ONLY:
        return f"{_num(pb.value)} reps"
    return _num(pb.value)


def format_set(workout_set: WorkoutSet, unit: str) -> str:
    if isinstance(workout_set, WeightRepsSet):
        return f"{workout_set.reps} × {_num(workout_set.weight)}{mass_label(unit)}"
    if isinstance(workout_set, HoldSecondsSet):
        return f"{_num(workout_set.seconds)}s"
    if isinstance(workout_set, RepsOnlySet):
        return f"{workout_set.reps} reps"
    if isinstance(workout_set, DistanceTimeSet):
        return f"{_num(workout_set.distance)} in {format_seconds(workout_set.seconds)}"
    assert_never(workout_set)


def session_details(exercise: Exercise, log: LogEntry | None, unit: str) -> list[str]:
    """One line per logged set, in logged order."""
    if log is None:
        return []
    lines: list[str] = []
    for workout_set in log.sets:
        if set_value(workout_set, exercise.progression_type) is None:
            lines.append("Invalid set type")
        else:
            lines.append(format_set(workout_set, unit))
    return lines


def format_current_progress(exercise: Exercise, log: LogEntry | None, unit: str) -> str:
    return " • ".join(session_details(exercise, log, unit))


def format_last_session(exercise: Exercise, log: LogEntry | None, unit: str) -> str:
    """Compact one-line summary of a session, e.g. "3 sets at 100 kg"."""
    if log is None or not log.sets:
        return NO_VALUE
    sets = log.sets
    if exercise.progression_type == WEIGHT_REPS:
        counts: dict[str, int] = {}
        for s in sets:
            if isinstance(s, WeightRepsSet):
                key = _num(s.weight)
                counts[key] = counts.get(key, 0) + 1
        if not counts:
            return NO_VALUE
        return ", ".join(f"{_plural(c, 'set')} at {w} {mass_label(unit)}" for w, c in counts.items())
    if exercise.progression_type == HOLD_SECONDS:
        total = sum(s.seconds for s in sets if isinstance(s, HoldSecondsSet))
        return f"{_plural(len(sets), 'set')}, avg {round(total / len(sets))}s"
    if exercise.progression_type == REPS_ONLY:
        total = sum(s.reps for s in sets if isinstance(s, RepsOnlySet))
        return f"{_plural(len(sets), 'set')}, {total} total reps"
    if exercise.progression_type == DISTANCE_TIME:
        distance = sum(s.distance for s in sets if isinstance(s, DistanceTimeSet))
        seconds = sum(s.seconds for s in sets if isinstance(s, DistanceTimeSet))
        return f"{_plural(len(sets), 'set')}, {_num(distance)} in {format_seconds(seconds)}"
    return NO_VALUE


@dataclass(frozen=True, slots=True)
class ProgressTrend:
    direction: str
    data_points: int
    period_days: int
    change_percent: float | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "direction": self.direction,
            "dataPoints": self.data_points,
            "periodDays": self.period_days,
        }
        if self.change_percent is not None:
            out["changePercent"] = self.change_percent
        return out


def progress_trend(exercise: Exercise, logs: Iterable[LogEntry], days: int, *, today: date) -> ProgressTrend:
    """Compare the average of the older half of sessions with the newer half.

    One value per log entry (its best set). Entries without a positive value
    are ignored; fewer than two remaining points is ``insufficient_data``.
    """
    cutoff = (today - timedelta(days=days)).isoformat()
    recent = sorted(
        (log for log in logs_for_exercise(logs, exercise.id) if log.date_iso >= cutoff),
        key=lambda log: log.date_iso,
    )
    if len(recent) < 2:
        return ProgressTrend("insufficient_data", len(recent), days)

    points: list[float] = []
    for log in recent:
        values = [v for v in (set_value(s, exercise.progression_type) for s in log.sets) if v is not None]
        best = max(values, default=0)
        if best > 0:
            points.append(best)
    if len(points) < 2:
        return ProgressTrend("insufficient_data", len(points), days)

    middle = len(points) // 2
    first_avg = sum(points[:middle]) / middle
    second_avg = sum(points[middle:]) / (len(points) - middle)
    change = (second_avg - first_avg) / first_avg * 100

    direction = "stable"
    if change > TREND_THRESHOLD_PCT:
        direction = "up"
    elif change < -TREND_THRESHOLD_PCT:
        direction = "down"
    return ProgressTrend(direction, len(points), days, _round1(change))


def _volume(workout_set: WorkoutSet) -> float:
    if isinstance(workout_set, WeightRepsSet):
        return workout_set.weight * workout_set.reps
    return 0


@dataclass(frozen=True, slots=True)
class ExerciseSessionSummary:
    exercise_id: str
    sets: int
    best_set: WorkoutSet | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "exerciseId": self.exercise_id,
            "sets": self.sets,
            "bestSet": workout_set_as_dict(self.best_set) if self.best_set is not None else None,
        }


@dataclass(frozen=True, slots=True)
class WorkoutSummary:
    total_exercises: int
    total_sets: int
    total_volume: float | None
    exercises: tuple[ExerciseSessionSummary, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalExercises": self.total_exercises,
            "totalSets": self.total_sets,
            "totalVolume": self.total_volume,
            "exercises": [e.as_dict() for e in self.exercises],
        }


def _better_set(candidate: WorkoutSet, current: WorkoutSet | None) -> bool:
    if current is None:
        return True
    if isinstance(candidate, WeightRepsSet) and isinstance(current, WeightRepsSet):
        return (candidate.weight, candidate.reps) > (current.weight, current.reps)
    return False


def workout_summary(logs: Iterable[LogEntry], date_iso: str) -> WorkoutSummary:
    """Sets, volume and best set per exercise logged on one date."""
    per_exercise: dict[str, tuple[int, WorkoutSet | None]] = {}
    total_sets = 0
    total_volume = 0.0
    for log in logs:
        if log.date_iso != date_iso:
            continue
        count, best = per_exercise.get(log.exercise_id, (0, None))
        for workout_set in log.sets:
            total_sets += 1
            total_volume += _volume(workout_set)
            if _better_set(workout_set, best):
                best = workout_set
        per_exercise[log.exercise_id] = (count + len(log.sets), best)

    return WorkoutSummary(
        total_exercises=len(per_exercise),
        total_sets=total_sets,
        total_volume=total_volume if total_volume > 0 else None,
        exercises=tuple(
            ExerciseSessionSummary(exercise_id=k, sets=c, best_set=b) for k, (c, b) in per_exercise.items()
        ),
    )


def planned_exercise_ids(items: Iterable[PlanItem]) -> set[str]:
    """Distinct exercises scheduled by a date's items, snapshots included."""
    out: set[str] = set()
    for item in items:
        out.update(plan_item_exercise_ids(item))
    return out


@dataclass(frozen=True, slots=True)
class CompletionStats:
    total_planned: int
    completed: int
    completion_rate: float
    planned_by_date: dict[str, int] = field(default_factory=dict)
    completed_by_date: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalPlannedItems": self.total_planned,
            "completedItems": self.completed,
            "completionRate": self.completion_rate,
            "plannedByDate": dict(self.planned_by_date),
            "completedByDate": dict(self.completed_by_date),
        }


def completion_stats(plan: Plan, logs: Iterable[LogEntry], dates: Iterable[str] | None = None) -> CompletionStats:
    """Planned vs. logged exercises, per date.

    ``dates`` limits the calculation; by default every planned date counts.
    Zero planned exercises gives a rate of 0.
    """
    logged: dict[str, set[str]] = {}
    for log in logs:
        logged.setdefault(log.date_iso, set()).add(log.exercise_id)

    planned_by_date: dict[str, int] = {}
    completed_by_date: dict[str, int] = {}
    for date_iso in sorted(plan) if dates is None else dates:
        items = plan.get(date_iso)
        if not items:
            continue
        planned = planned_exercise_ids(items)
        planned_by_date[date_iso] = len(planned)
        completed_by_date[date_iso] = len(planned & logged.get(date_iso, set()))

    total_planned = sum(planned_by_date.values())
    completed = sum(completed_by_date.values())
    rate = _round1(completed / total_planned * 100) if total_planned else 0.0
    return CompletionStats(total_planned, completed, rate, planned_by_date, completed_by_date)


@dataclass(frozen=True, slots=True)
class WeeklyStats:
    week_start_iso: str
    total_workouts: int
    total_exercises: int
    total_sets: int
    total_volume: float | None
    completion_rate: float
    exercise_frequency: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "weekStartISO": self.week_start_iso,
            "totalWorkouts": self.total_workouts,
            "totalExercises": self.total_exercises,
            "totalSets": self.total_sets,
            "totalVolume": self.total_volume,
            "completionRate": self.completion_rate,
            "exerciseFrequency": dict(self.exercise_frequency),
        }


def weekly_stats(logs: Iterable[LogEntry], plan: Plan, week_start_iso: str) -> WeeklyStats:
    dates = week_dates(week_start_iso)
    week_logs = [log for log in logs if log.date_iso in dates]

    frequency: dict[str, int] = {}
    total_sets = 0
    total_volume = 0.0
    for log in week_logs:
        frequency[log.exercise_id] = frequency.get(log.exercise_id, 0) + 1
        total_sets += len(log.sets)
        total_volume += sum(_volume(s) for s in log.sets)

    return WeeklyStats(
        week_start_iso=week_start_iso,
        total_workouts=len({log.date_iso for log in week_logs}),
        total_exercises=len(frequency),
        total_sets=total_sets,
        total_volume=total_volume if total_volume > 0 else None,
        completion_rate=completion_stats(plan, week_logs, dates).completion_rate,
        exercise_frequency=frequency,
    )


def usage_count(plan: Plan, exercise_id: str) -> int:
    """Plan items referencing the exercise; a snapshot counts once."""
    return sum(1 for items in plan.values() for item in items if exercise_id in plan_item_exercise_ids(item))


def exercise_usage(state: AppState) -> list[dict[str, Any]]:
    plan = state.planner.plan
    return [
        {
            **exercise.as_dict(),
            "usageCount": usage_count(plan, exercise.id),
            "canDelete": can_delete_exercise(plan, exercise.id),
        }
        for exercise in state.exercises.items()
    ]


def has_logged_data(exercise_id: str, date_iso: str, logs: Iterable[LogEntry]) -> bool:
    return any(log.exercise_id == exercise_id and log.date_iso == date_iso for log in logs)


def can_move_item(item: PlanItem, date_iso: str, logs: Iterable[LogEntry]) -> bool:
    """Items with logged work on their date stay where they are."""
    logs = list(logs)
    return not any(has_logged_data(i, date_iso, logs) for i in plan_item_exercise_ids(item))


def locked_exercise_ids(exercise_ids: Iterable[str], date_iso: str, logs: Iterable[LogEntry]) -> list[str]:
    logs = list(logs)
    return [i for i in exercise_ids if has_logged_data(i, date_iso, logs)]
