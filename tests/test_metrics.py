from __future__ import annotations

from datetime import date

from custom_components.workout_planner.const import DISTANCE_TIME, HOLD_SECONDS, REPS_ONLY, WEIGHT_REPS
from custom_components.workout_planner.metrics import (
    NO_VALUE,
    can_move_item,
    completion_stats,
    effective_unit,
    format_current_progress,
    format_last_session,
    format_personal_best,
    latest_log,
    latest_log_before,
    locked_exercise_ids,
    log_on_date,
    personal_best,
    progress_trend,
    session_details,
    usage_count,
    weekly_stats,
    workout_summary,
)
from custom_components.workout_planner.models import (
    DistanceTimeSet,
    Exercise,
    ExerciseItem,
    HoldSecondsSet,
    LogEntry,
    RepsOnlySet,
    RoutineSnapshot,
    WeightRepsSet,
)

TODAY = date(2024, 1, 31)


def _exercise(progression_type: str = WEIGHT_REPS, **kwargs) -> Exercise:
    return Exercise(id="e1", name="Squat", color="#ff0000", progression_type=progression_type, **kwargs)


def _log(date_iso: str, *sets, exercise_id: str = "e1", log_id: str | None = None) -> LogEntry:
    return LogEntry(
        id=log_id or f"{exercise_id}-{date_iso}",
        day="Monday",
        exercise_id=exercise_id,
        date_iso=date_iso,
        sets=tuple(sets),
    )


def test_personal_best_is_heaviest_weight_regardless_of_reps() -> None:
    logs = [_log("2024-01-01", WeightRepsSet(80, 5), WeightRepsSet(100, 1))]
    pb = personal_best(_exercise(), logs)
    assert pb is not None
    assert pb.value == 100
    assert pb.date_iso == "2024-01-01"


def test_no_logs_means_no_personal_best() -> None:
    assert personal_best(_exercise(), []) is None
    assert personal_best(_exercise(), [_log("2024-01-01", WeightRepsSet(50, 5), exercise_id="e2")]) is None
    assert format_personal_best(_exercise(), [], "KG") == NO_VALUE


def test_personal_best_per_progression_type() -> None:
    holds = [_log("2024-01-01", HoldSecondsSet(30), HoldSecondsSet(45)), _log("2024-01-02", HoldSecondsSet(40))]
    assert personal_best(_exercise(HOLD_SECONDS), holds).value == 45
    assert format_personal_best(_exercise(HOLD_SECONDS), holds, "KG") == "45s"

    reps = [_log("2024-01-01", RepsOnlySet(12), RepsOnlySet(15))]
    assert format_personal_best(_exercise(REPS_ONLY), reps, "KG") == "15 reps"

    runs = [_log("2024-01-01", DistanceTimeSet(5, 1500)), _log("2024-01-08", DistanceTimeSet(8.5, 2700))]
    assert personal_best(_exercise(DISTANCE_TIME), runs).value == 8.5


def test_session_details_lines() -> None:
    log = _log("2024-01-01", WeightRepsSet(100, 5), WeightRepsSet(102.5, 3))
    assert session_details(_exercise(), log, "KG") == ["5 × 100kg", "3 × 102.5kg"]
    assert session_details(_exercise(HOLD_SECONDS), _log("2024-01-01", HoldSecondsSet(30)), "KG") == ["30s"]
    assert session_details(_exercise(REPS_ONLY), _log("2024-01-01", RepsOnlySet(12)), "KG") == ["12 reps"]
    assert session_details(_exercise(), None, "KG") == []


def test_exercise_unit_overrides_default() -> None:
    assert effective_unit(_exercise(weight_unit="LBS"), "KG") == "LBS"
    assert effective_unit(_exercise(weight_unit="DEFAULT"), "KG") == "KG"
    assert effective_unit(_exercise(), "LBS") == "LBS"
    log = _log("2024-01-01", WeightRepsSet(225, 5))
    assert session_details(_exercise(), log, "LBS") == ["5 × 225lbs"]


def test_last_session_summary() -> None:
    log = _log("2024-01-01", WeightRepsSet(100, 5), WeightRepsSet(100, 5), WeightRepsSet(90, 8))
    assert format_last_session(_exercise(), log, "KG") == "2 sets at 100 kg, 1 set at 90 kg"
    reps = _log("2024-01-01", RepsOnlySet(10), RepsOnlySet(8))
    assert format_last_session(_exercise(REPS_ONLY), reps, "KG") == "2 sets, 18 total reps"
    assert format_last_session(_exercise(), None, "KG") == NO_VALUE


def test_latest_log_lookups() -> None:
    logs = [_log("2024-01-01", WeightRepsSet(1, 1)), _log("2024-01-10", WeightRepsSet(1, 1))]
    assert latest_log(logs, "e1").date_iso == "2024-01-10"
    assert latest_log_before(logs, "e1", "2024-01-10").date_iso == "2024-01-01"
    assert latest_log_before(logs, "e1", "2024-01-01") is None
    assert latest_log(logs, "missing") is None


def test_trend_with_single_entry_is_insufficient() -> None:
    trend = progress_trend(_exercise(), [_log("2024-01-20", WeightRepsSet(100, 5))], 30, today=TODAY)
    assert trend.direction == "insufficient_data"
    assert trend.data_points == 1
    assert trend.change_percent is None


def test_trend_directions() -> None:
    rising = [
        _log("2024-01-05", WeightRepsSet(100, 5)),
        _log("2024-01-12", WeightRepsSet(100, 5)),
        _log("2024-01-19", WeightRepsSet(110, 5)),
        _log("2024-01-26", WeightRepsSet(120, 5)),
    ]
    trend = progress_trend(_exercise(), rising, 30, today=TODAY)
    assert trend.direction == "up"
    assert trend.change_percent == 15.0

    flat = [_log("2024-01-05", WeightRepsSet(100, 5)), _log("2024-01-26", WeightRepsSet(103, 5))]
    assert progress_trend(_exercise(), flat, 30, today=TODAY).direction == "stable"

    falling = [_log("2024-01-05", WeightRepsSet(100, 5)), _log("2024-01-26", WeightRepsSet(90, 5))]
    assert progress_trend(_exercise(), falling, 30, today=TODAY).direction == "down"


def test_trend_ignores_entries_outside_window() -> None:
    logs = [_log("2023-11-01", WeightRepsSet(50, 5)), _log("2024-01-26", WeightRepsSet(100, 5))]
    assert progress_trend(_exercise(), logs, 30, today=TODAY).direction == "insufficient_data"


def test_completion_counts_snapshot_exercises() -> None:
    plan = {
        "2024-01-01": (ExerciseItem("e1"), RoutineSnapshot(name="Legs", color="#000", exercise_ids=("e2", "e3"))),
        "2024-01-02": (ExerciseItem("e1"),),
    }
    logs = [_log("2024-01-01", WeightRepsSet(100, 5)), _log("2024-01-01", RepsOnlySet(10), exercise_id="e3")]
    stats = completion_stats(plan, logs)
    assert stats.total_planned == 4
    assert stats.completed == 2
    assert stats.completion_rate == 50.0
    assert stats.planned_by_date == {"2024-01-01": 3, "2024-01-02": 1}

    thirds = completion_stats(plan, logs, ["2024-01-01"])
    assert thirds.completion_rate == 66.7


def test_completion_rate_with_nothing_planned_is_zero() -> None:
    assert completion_stats({}, []).completion_rate == 0
    assert weekly_stats([], {}, "2024-01-01").completion_rate == 0


def test_weekly_stats_and_workout_summary() -> None:
    plan = {"2024-01-01": (ExerciseItem("e1"),), "2024-01-03": (ExerciseItem("e2"),)}
    logs = [
        _log("2024-01-01", WeightRepsSet(100, 5), WeightRepsSet(105, 3)),
        _log("2024-01-03", WeightRepsSet(40, 10), exercise_id="e2"),
        _log("2024-01-09", WeightRepsSet(200, 1)),
    ]
    week = weekly_stats(logs, plan, "2024-01-01")
    assert week.total_workouts == 2
    assert week.total_sets == 3
    assert week.total_volume == 100 * 5 + 105 * 3 + 40 * 10
    assert week.completion_rate == 100.0
    assert week.exercise_frequency == {"e1": 1, "e2": 1}

    summary = workout_summary(logs, "2024-01-01")
    assert summary.total_exercises == 1
    assert summary.total_sets == 2
    assert summary.exercises[0].best_set == WeightRepsSet(105, 3)
    assert workout_summary(logs, "2024-02-01").total_volume is None


def test_usage_and_drag_lock() -> None:
    snapshot = RoutineSnapshot(name="Legs", color="#000", exercise_ids=("e1", "e2"))
    plan = {"2024-01-01": (ExerciseItem("e1"), snapshot), "2024-01-02": (ExerciseItem("e2"),)}
    assert usage_count(plan, "e1") == 2
    assert usage_count(plan, "e2") == 2

    logs = [_log("2024-01-01", WeightRepsSet(40, 10), exercise_id="e2")]
    assert can_move_item(ExerciseItem("e1"), "2024-01-01", logs)
    assert not can_move_item(snapshot, "2024-01-01", logs)


def test_progress_on_a_date() -> None:
    logs = [_log("2024-01-01", WeightRepsSet(100, 5), WeightRepsSet(100, 3)), _log("2024-01-02", WeightRepsSet(90, 8))]
    log = log_on_date(logs, "e1", "2024-01-01")
    assert format_current_progress(_exercise(), log, "KG") == "5 × 100kg • 3 × 100kg"
    assert log_on_date(logs, "e1", "2024-01-05") is None
    assert format_current_progress(_exercise(), None, "KG") == ""


def test_locked_exercises_are_the_logged_ones() -> None:
    logs = [_log("2024-01-01", RepsOnlySet(10), exercise_id="e2")]
    assert locked_exercise_ids(["e1", "e2", "e3"], "2024-01-01", logs) == ["e2"]
    assert locked_exercise_ids(["e2"], "2024-01-02", logs) == []
