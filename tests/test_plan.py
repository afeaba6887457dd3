from __future__ import annotations

from custom_components.workout_planner.models import ExerciseItem, RoutineSnapshot
from custom_components.workout_planner.plan import (
    NestedPath,
    TopLevelPath,
    add_item,
    can_delete_exercise,
    dates_referencing_exercise,
    get_items,
    move_item,
    parse_path,
    path_as_dict,
    remove_exercise_everywhere,
    remove_item,
    remove_routine_snapshots_by_identity,
    set_items,
)


def _leg_day() -> RoutineSnapshot:
    return RoutineSnapshot(name="Leg day", color="#ff0000", exercise_ids=("squat", "lunge", "calf"))


def _plan() -> dict:
    return {
        "2024-01-01": (ExerciseItem("squat"), _leg_day(), ExerciseItem("bench")),
        "2024-01-02": (RoutineSnapshot(name="Solo", color="#00ff00", exercise_ids=("squat",)),),
        "2024-01-03": (ExerciseItem("row"),),
    }


def test_empty_date_has_no_key() -> None:
    plan = set_items(_plan(), "2024-01-03", [])
    assert "2024-01-03" not in plan
    assert get_items(plan, "2024-01-03") == ()
    assert get_items({}, "2030-01-01") == ()


def test_add_and_remove_item() -> None:
    plan = add_item({}, "2024-01-05", ExerciseItem("row"))
    assert get_items(plan, "2024-01-05") == (ExerciseItem("row"),)
    assert remove_item(plan, "2024-01-05", 0) == {}


def test_remove_item_out_of_range_is_noop() -> None:
    plan = _plan()
    assert remove_item(plan, "2024-01-01", 9) is plan
    assert remove_item(plan, "2024-01-01", -1) is plan
    assert remove_item(plan, "2030-01-01", 0) is plan


def test_remove_exercise_everywhere_strips_items_and_snapshots() -> None:
    plan = remove_exercise_everywhere(_plan(), "squat")

    assert plan["2024-01-01"] == (
        RoutineSnapshot(name="Leg day", color="#ff0000", exercise_ids=("lunge", "calf")),
        ExerciseItem("bench"),
    )
    # The only snapshot on that date became empty, so the date is gone too.
    assert "2024-01-02" not in plan
    assert dates_referencing_exercise(plan, "squat") == []


def test_remove_routine_snapshots_by_identity_matches_name_and_color() -> None:
    plan = _plan()
    assert remove_routine_snapshots_by_identity(plan, "Leg day", "#000000") == plan

    stripped = remove_routine_snapshots_by_identity(plan, "Leg day", "#ff0000")
    assert stripped["2024-01-01"] == (ExerciseItem("squat"), ExerciseItem("bench"))
    assert stripped["2024-01-02"] == plan["2024-01-02"]


def test_deletion_check_walks_direct_items_and_snapshots() -> None:
    plan = _plan()
    assert dates_referencing_exercise(plan, "squat") == ["2024-01-01", "2024-01-02"]
    assert dates_referencing_exercise(plan, "calf") == ["2024-01-01"]
    assert not can_delete_exercise(plan, "calf")
    assert can_delete_exercise(plan, "deadlift")


def test_move_top_level_within_date() -> None:
    plan = move_item(_plan(), TopLevelPath("2024-01-01", 0), TopLevelPath("2024-01-01", 2))
    assert plan["2024-01-01"] == (_leg_day(), ExerciseItem("bench"), ExerciseItem("squat"))


def test_move_nested_within_routine() -> None:
    plan = move_item(_plan(), NestedPath("2024-01-01", 1, 2), NestedPath("2024-01-01", 1, 0))
    assert plan["2024-01-01"][1].exercise_ids == ("calf", "squat", "lunge")


def test_cross_date_cross_routine_and_mixed_moves_are_refused() -> None:
    plan = _plan()
    assert move_item(plan, TopLevelPath("2024-01-01", 0), TopLevelPath("2024-01-03", 0)) is plan
    assert move_item(plan, NestedPath("2024-01-01", 1, 0), NestedPath("2024-01-02", 0, 0)) is plan
    assert move_item(plan, NestedPath("2024-01-01", 1, 0), NestedPath("2024-01-01", 0, 0)) is plan
    assert move_item(plan, TopLevelPath("2024-01-01", 0), NestedPath("2024-01-01", 1, 0)) is plan
    # Index 0 is a direct exercise, not a routine snapshot.
    assert move_item(plan, NestedPath("2024-01-01", 0, 0), NestedPath("2024-01-01", 0, 1)) is plan
    assert move_item(plan, TopLevelPath("2024-01-01", 0), TopLevelPath("2024-01-01", 7)) is plan


def test_parse_path_and_back() -> None:
    nested = parse_path({"dateISO": "2024-01-01", "routineIndex": 1, "exerciseIndex": 2})
    assert nested == NestedPath("2024-01-01", 1, 2)
    top = parse_path({"dateISO": "2024-01-01", "index": 3})
    assert top == TopLevelPath("2024-01-01", 3)
    assert path_as_dict(top) == {"dateISO": "2024-01-01", "index": 3}
