"""State container: the single writer of AppState.

Load is awaited once before any action is accepted. Each dispatch runs the
validation gate and the reducer synchronously, then hands the new state to
storage without waiting for the write.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from datetime import date
from typing import Any
from uuid import uuid4

from .actions import Action, add_exercise, load_from_storage, remove_exercise, replace_all, update_exercise
from .models import Exercise
from .plan import dates_referencing_exercise
from .reducer import reduce
from .state import AppState, default_state
from .storage import WorkoutPlannerStore, export_state, import_state
from .validation import exercise_form_errors, validate_action

_LOGGER = logging.getLogger(__name__)

Listener = Callable[[AppState], None]


class WorkoutPlannerError(RuntimeError):
    """Base error for refused engine operations."""


class EngineNotReadyError(WorkoutPlannerError):
    """Raised when an action arrives before stored state was loaded."""

    def __init__(self) -> None:
        super().__init__("Stored state has not been loaded yet")


class ExerciseInUseError(WorkoutPlannerError):
    """Raised when an exercise is still scheduled in the plan."""

    def __init__(self, *, exercise_id: str, dates: list[str]) -> None:
        super().__init__(f"Exercise {exercise_id} is still planned on {', '.join(dates)}")
        self.exercise_id = exercise_id
        self.dates = dates


class InvalidExerciseError(WorkoutPlannerError):
    """Raised when a user-entered exercise fails the form checks."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(errors.values()))
        self.errors = errors


class WorkoutPlannerEngine:
    def __init__(
        self,
        store: WorkoutPlannerStore,
        create_task: Callable[[Coroutine[Any, Any, None]], Any],
        *,
        today_fn: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._create_task = create_task
        self._today_fn = today_fn
        self._state = default_state(today_fn())
        self._ready = False
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._ready

    def today(self) -> date:
        return self._today_fn()

    async def async_start(self) -> AppState:
        snapshot = await self._store.async_load(today=self._today_fn())
        self._state = reduce(self._state, load_from_storage(snapshot), today=self._today_fn())
        self._ready = True
        _LOGGER.debug(
            "Loaded %s exercises, %s routines, %s logs, %s planned dates",
            len(self._state.exercises),
            len(self._state.routines),
            len(self._state.logs),
            len(self._state.planner.plan),
        )
        return self._state

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def dispatch(self, action: Action | dict[str, Any]) -> AppState:
        """Validate and apply one action; returns the resulting state.

        A rejected action is applied as the matching ``*_SET_ERROR`` report,
        so the caller always observes the outcome in state.
        """
        if not self._ready:
            raise EngineNotReadyError
        gated = validate_action(action)
        new_state = reduce(self._state, gated, today=self._today_fn())
        if new_state is self._state:
            return new_state
        self._state = new_state
        _LOGGER.debug("Applied %s", gated.type)
        self._create_task(self._store.async_save(new_state))
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def delete_exercise(self, exercise_id: str) -> AppState:
        """Remove an exercise unless a plan date still uses it.

        Only the plan is checked; routine definitions may keep the id.
        """
        dates = dates_referencing_exercise(self._state.planner.plan, exercise_id)
        if dates:
            raise ExerciseInUseError(exercise_id=exercise_id, dates=dates)
        return self.dispatch(remove_exercise(exercise_id))

    def save_exercise(self, data: dict[str, Any]) -> Exercise:
        """Add (no id) or replace (known id) an exercise entered by the user."""
        errors = exercise_form_errors(data)
        if errors:
            raise InvalidExerciseError(errors)
        exercise_id = str(data.get("id") or "").strip()
        is_update = bool(exercise_id) and exercise_id in self._state.exercises.by_id
        exercise = Exercise.from_dict(
            {**data, "id": exercise_id or f"ex_{uuid4().hex[:10]}", "name": str(data["name"]).strip()}
        )
        self.dispatch(update_exercise(exercise) if is_update else add_exercise(exercise))
        return exercise

    def export(self) -> str:
        return export_state(self._state)

    def import_snapshot(self, payload: str | bytes | dict[str, Any]) -> AppState:
        """Replace everything with an imported snapshot; StateImportError on bad input."""
        snapshot = import_state(payload, today=self._today_fn())
        return self.dispatch(replace_all(snapshot))
