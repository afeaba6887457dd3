from __future__ import annotations

from datetime import date

from custom_components.workout_planner import actions
from custom_components.workout_planner.const import PREFIX_LOGS, PREFIX_ROUTINES, WEIGHT_REPS
from custom_components.workout_planner.models import (
    Exercise,
    ExerciseItem,
    LogEntry,
    Routine,
    RoutineSnapshot,
    WeightRepsSet,
)
from custom_components.workout_planner.reducer import reduce
from custom_components.workout_planner.state import default_state
from custom_components.workout_planner.validation import validate_action
from custom_components.workout_planner.ws_state import runtime_payload

TODAY = date(2024, 1, 3)  # Wednesday


def _apply(state, *items):
    for action in items:
        state = reduce(state, action, today=TODAY)
    return state


def _squat() -> Exercise:
    return Exercise(id="e1", name="Squat", color="#ff0000", progression_type=WEIGHT_REPS)


def _lunge() -> Exercise:
    return Exercise(id="e2", name="Lunge", color="#00ff00", progression_type=WEIGHT_REPS)


def _legs() -> Routine:
    return Routine(id="r1", name="Legs", color="#0000ff", exercise_ids=("e1", "e2"))


def _base():
    return _apply(
        default_state(TODAY),
        actions.add_exercise(_squat()),
        actions.add_exercise(_lunge()),
        actions.add_routine(_legs()),
    )


def test_default_state_anchors_current_week() -> None:
    state = default_state(TODAY)
    assert state.planner.current_week_start_iso == "2024-01-01"
    assert state.planner.plan == {}
    assert len(state.exercises) == 0


def test_entity_add_update_remove_keeps_order() -> None:
    state = _base()
    assert state.exercises.all_ids == ("e1", "e2")

    renamed = Exercise(id="e1", name="Back squat", color="#ff0000", progression_type=WEIGHT_REPS)
    state = _apply(state, actions.update_exercise(renamed))
    assert state.exercises.all_ids == ("e1", "e2")
    assert state.exercises.get("e1").name == "Back squat"

    state = _apply(state, actions.remove_exercise("e2"))
    assert state.exercises.all_ids == ("e1",)
    assert state.exercises.get("e2") is None


def test_update_of_unknown_exercise_is_ignored() -> None:
    state = _base()
    ghost = Exercise(id="nope", name="Ghost", color="#000000", progression_type=WEIGHT_REPS)
    assert _apply(state, actions.update_exercise(ghost)).exercises == state.exercises


def test_exercise_removal_cascades_into_plan() -> None:
    state = _apply(
        _base(),
        actions.add_plan_item("2024-01-02", ExerciseItem("e1")),
        actions.add_plan_item("2024-01-02", RoutineSnapshot.from_routine(_legs())),
        actions.add_plan_item("2024-01-04", ExerciseItem("e1")),
        actions.remove_exercise("e1"),
    )
    assert state.planner.plan == {
        "2024-01-02": (RoutineSnapshot(name="Legs", color="#0000ff", exercise_ids=("e2",)),),
    }


def test_routine_edit_does_not_touch_placed_snapshots() -> None:
    state = _apply(_base(), actions.add_plan_item("2024-01-02", RoutineSnapshot.from_routine(_legs())))
    edited = Routine(id="r1", name="Legs v2", color="#123456", exercise_ids=("e2",))
    state = _apply(
        state,
        actions.update_routine(edited),
        actions.reorder_routine_exercises("r1", ["e2"]),
    )

    assert state.routines.get("r1").name == "Legs v2"
    assert state.planner.plan["2024-01-02"] == (
        RoutineSnapshot(name="Legs", color="#0000ff", exercise_ids=("e1", "e2")),
    )


def test_routine_removal_drops_matching_snapshots() -> None:
    other = RoutineSnapshot(name="Legs", color="#999999", exercise_ids=("e1",))
    state = _apply(
        _base(),
        actions.add_plan_item("2024-01-02", RoutineSnapshot.from_routine(_legs())),
        actions.add_plan_item("2024-01-02", other),
        actions.remove_routine("r1"),
    )
    assert len(state.routines) == 0
    assert state.planner.plan == {"2024-01-02": (other,)}


def test_reorder_missing_routine_sets_error() -> None:
    state = _apply(_base(), actions.reorder_routine_exercises("missing", ["e1"]))
    assert state.routines.error == "Routine with id missing not found"


def test_week_start_change_reanchors_current_week() -> None:
    state = _apply(_base(), actions.update_settings(weekStartDay="Sunday"))
    assert state.settings.preferences.week_start_day == "Sunday"
    assert state.planner.current_week_start_iso == "2023-12-31"


def test_unit_change_keeps_anchor_and_merges_settings() -> None:
    state = _apply(
        _base(),
        actions.set_current_week("2024-02-05"),
        actions.update_settings(defaultUnit="LBS"),
    )
    assert state.settings.preferences.default_unit == "LBS"
    assert state.settings.preferences.week_start_day == "Monday"
    assert state.planner.current_week_start_iso == "2024-02-05"


def test_recalculate_current_week() -> None:
    state = _apply(_base(), actions.set_current_week("2024-02-05"), actions.recalculate_current_week())
    assert state.planner.current_week_start_iso == "2024-01-01"
    assert reduce(state, actions.recalculate_current_week(), today=TODAY) is state


def test_move_item_action_uses_wire_paths() -> None:
    state = _apply(
        _base(),
        actions.update_plan("2024-01-02", [ExerciseItem("e1"), ExerciseItem("e2")]),
        actions.move_plan_item({"dateISO": "2024-01-02", "index": 1}, {"dateISO": "2024-01-02", "index": 0}),
    )
    assert state.planner.plan["2024-01-02"] == (ExerciseItem("e2"), ExerciseItem("e1"))

    refused = _apply(
        state,
        actions.move_plan_item({"dateISO": "2024-01-02", "index": 1}, {"dateISO": "2024-01-03", "index": 0}),
    )
    assert refused is state


def test_update_plan_with_empty_list_removes_date() -> None:
    state = _apply(
        _base(),
        actions.update_plan("2024-01-02", [ExerciseItem("e1")]),
        actions.update_plan("2024-01-02", []),
    )
    assert state.planner.plan == {}


def test_log_actions() -> None:
    entry = LogEntry(id="l1", day="Monday", exercise_id="e1", date_iso="2024-01-01", sets=(WeightRepsSet(100, 5),))
    other = LogEntry(id="l2", day="Tuesday", exercise_id="e2", date_iso="2024-01-02", sets=(WeightRepsSet(40, 8),))
    state = _apply(_base(), actions.save_log(entry), actions.save_log(other))
    assert state.logs.all_ids == ("l1", "l2")

    state = _apply(state, actions.update_log("l1", [WeightRepsSet(105, 3)]))
    updated = state.logs.get("l1")
    assert updated.sets == (WeightRepsSet(105, 3),)
    assert updated.date_iso == "2024-01-01"

    state = _apply(state, actions.remove_logs_by_date("2024-01-01"))
    assert state.logs.all_ids == ("l2",)

    state = _apply(state, actions.remove_log("l2"))
    assert len(state.logs) == 0


def test_logs_survive_exercise_removal() -> None:
    entry = LogEntry(id="l1", day="Monday", exercise_id="e1", date_iso="2024-01-01", sets=(WeightRepsSet(100, 5),))
    state = _apply(_base(), actions.save_log(entry), actions.remove_exercise("e1"))
    assert state.logs.get("l1") == entry


def test_loading_and_error_bookkeeping() -> None:
    state = _apply(_base(), actions.set_loading(PREFIX_LOGS, True))
    assert state.logs.loading is True

    state = _apply(state, actions.set_error(PREFIX_LOGS, "boom"))
    assert state.logs.loading is False
    assert state.logs.error == "boom"

    state = _apply(state, actions.set_error(PREFIX_ROUTINES, "bad"), actions.add_routine(_legs()))
    assert state.routines.error is None


def test_load_from_storage_fills_missing_slices() -> None:
    snapshot = {
        "exercises": {"byId": {"e1": _squat().as_dict()}, "allIds": ["e1"], "loading": False, "error": None},
    }
    state = reduce(_base(), actions.load_from_storage(snapshot), today=TODAY)
    assert state.exercises.all_ids == ("e1",)
    assert len(state.routines) == 0
    assert state.planner.current_week_start_iso == "2024-01-01"
    assert state.settings.preferences.default_unit == "KG"


def test_load_from_storage_migrates_day_keyed_plan() -> None:
    snapshot = {
        "planner": {
            "plan": {
                "Monday": [{"type": "exercise", "id": "e1"}],
                "Wednesday": [{"type": "routine", "name": "Legs", "color": "#0000ff", "exerciseIds": ["e1"]}],
            },
            "currentWeekStartISO": "2024-01-08",
        },
    }
    state = reduce(default_state(TODAY), actions.replace_all(snapshot), today=TODAY)
    assert state.planner.plan == {
        "2024-01-08": (ExerciseItem("e1"),),
        "2024-01-10": (RoutineSnapshot(name="Legs", color="#0000ff", exercise_ids=("e1",)),),
    }


def test_garbage_snapshot_falls_back_to_defaults() -> None:
    state = reduce(_base(), actions.replace_all("not a snapshot"), today=TODAY)
    assert state == default_state(TODAY)


def test_load_all_replaces_exercises() -> None:
    state = _apply(_base(), actions.load_exercises([_lunge()]))
    assert state.exercises.all_ids == ("e2",)
    assert state.exercises.get("e2") == _lunge()


def test_reorder_plan_items() -> None:
    state = _apply(
        _base(),
        actions.update_plan("2024-01-02", [ExerciseItem("e1"), ExerciseItem("e2")]),
        actions.reorder_plan_items("2024-01-02", [ExerciseItem("e2"), ExerciseItem("e1")]),
    )
    assert state.planner.plan["2024-01-02"] == (ExerciseItem("e2"), ExerciseItem("e1"))


def test_set_current_week_clears_planner_error() -> None:
    state = _apply(_base(), actions.set_error("PLANNER_", "stale"))
    state = _apply(state, actions.set_current_week("2024-01-08"))
    assert state.planner.current_week_start_iso == "2024-01-08"
    assert state.planner.error is None

    state = _apply(state, actions.set_error("PLANNER_", "stale"), actions.set_current_week("2024-01-08"))
    assert state.planner.error is None


def test_impossible_week_anchor_never_reaches_state() -> None:
    state = _apply(_base(), validate_action(actions.set_current_week("2024-13-45")))
    assert state.planner.current_week_start_iso == "2024-01-01"
    assert state.planner.error.startswith("Validation failed: PLANNER_SET_CURRENT_WEEK")
    assert runtime_payload(state, TODAY)["displayed_week_dates"][0] == "2024-01-01"


def test_malformed_nested_shapes_in_snapshot_are_tolerated() -> None:
    snapshot = {
        "exercises": {"byId": {"e1": _squat().as_dict()}, "allIds": 5},
        "logs": {
            "byId": {
                "l1": {"id": "l1", "day": "Monday", "exerciseId": "e1", "dateISO": "2024-01-01", "payload": [1]},
                "l2": {"id": "l2", "day": "Monday", "exerciseId": "e1", "dateISO": "2024-01-01", "payload": {"sets": 7}},
                "l3": "not a record",
            },
            "allIds": ["l1", "l2", "l3"],
        },
        "planner": {"plan": {}, "currentWeekStartISO": "not-a-date"},
    }
    state = reduce(default_state(TODAY), actions.load_from_storage(snapshot), today=TODAY)
    assert state.exercises.all_ids == ("e1",)
    assert state.logs.all_ids == ("l1",)
    assert state.logs.get("l1").sets == ()
    assert state.planner.current_week_start_iso == "2024-01-01"
    assert runtime_payload(state, TODAY)["this_week_start"] == "2024-01-01"
