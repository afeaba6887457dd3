"""Application state for Workout Planner.

State model (persisted as one document):
- exercises: {byId, allIds, loading, error}
- routines:  {byId, allIds, loading, error}
- planner:   {plan, currentWeekStartISO, loading, error}; plan maps ISO date -> items
- logs:      {byId, allIds, loading, error}
- settings:  {preferences, loading, error}

Every transition builds a new AppState; nothing here is mutated in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Generic, TypeVar

from .const import DAY_NAMES, DEFAULT_WEEK_START_DAY
from .dates import current_week_start, day_order, parse_iso
from .models import (
    Exercise,
    LogEntry,
    PlanItem,
    Routine,
    Settings,
    plan_item_as_dict,
    plan_item_from_dict,
)

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", Exercise, Routine, LogEntry)

Plan = dict[str, tuple[PlanItem, ...]]


@dataclass(frozen=True, slots=True)
class EntitySlice(Generic[T]):
    """Normalized collection: id -> entity map plus the insertion order."""

    by_id: dict[str, T] = field(default_factory=dict)
    all_ids: tuple[str, ...] = ()
    loading: bool = False
    error: str | None = None

    def get(self, entity_id: str) -> T | None:
        return self.by_id.get(entity_id)

    def items(self) -> list[T]:
        return [self.by_id[i] for i in self.all_ids if i in self.by_id]

    def __len__(self) -> int:
        return len(self.all_ids)


@dataclass(frozen=True, slots=True)
class PlanSlice:
    plan: Plan = field(default_factory=dict)
    current_week_start_iso: str = ""
    loading: bool = False
    error: str | None = None


@dataclass(frozen=True, slots=True)
class SettingsSlice:
    preferences: Settings = field(default_factory=Settings)
    loading: bool = False
    error: str | None = None


@dataclass(frozen=True, slots=True)
class AppState:
    exercises: EntitySlice[Exercise] = field(default_factory=EntitySlice)
    routines: EntitySlice[Routine] = field(default_factory=EntitySlice)
    planner: PlanSlice = field(default_factory=PlanSlice)
    logs: EntitySlice[LogEntry] = field(default_factory=EntitySlice)
    settings: SettingsSlice = field(default_factory=SettingsSlice)

    def as_dict(self) -> dict[str, Any]:
        return {
            "exercises": _entity_slice_as_dict(self.exercises),
            "routines": _entity_slice_as_dict(self.routines),
            "planner": {
                "plan": plan_as_dict(self.planner.plan),
                "currentWeekStartISO": self.planner.current_week_start_iso,
                "loading": self.planner.loading,
                "error": self.planner.error,
            },
            "logs": _entity_slice_as_dict(self.logs),
            "settings": {
                "preferences": self.settings.preferences.as_dict(),
                "loading": self.settings.loading,
                "error": self.settings.error,
            },
        }


def default_state(today: date) -> AppState:
    return AppState(
        planner=PlanSlice(current_week_start_iso=current_week_start(today, DEFAULT_WEEK_START_DAY)),
    )


def entity_slice_from(entities: Iterable[T]) -> EntitySlice[T]:
    by_id: dict[str, T] = {}
    all_ids: list[str] = []
    for entity in entities:
        if entity.id not in by_id:
            all_ids.append(entity.id)
        by_id[entity.id] = entity
    return EntitySlice(by_id=by_id, all_ids=tuple(all_ids))


def plan_as_dict(plan: Plan) -> dict[str, list[dict[str, Any]]]:
    return {date_iso: [plan_item_as_dict(i) for i in items] for date_iso, items in plan.items()}


def _entity_slice_as_dict(entity_slice: EntitySlice[Any]) -> dict[str, Any]:
    return {
        "byId": {k: v.as_dict() for k, v in entity_slice.by_id.items()},
        "allIds": list(entity_slice.all_ids),
        "loading": entity_slice.loading,
        "error": entity_slice.error,
    }


def _parse_many(raw: Iterable[Any], parse: Callable[[dict[str, Any]], Any], what: str) -> list[Any]:
    out: list[Any] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            out.append(parse(item))
        except (AttributeError, KeyError, TypeError, ValueError) as err:
            _LOGGER.warning("Dropping malformed %s record: %s", what, err)
    return out


def _entity_slice_from_raw(raw: Any, parse: Callable[[dict[str, Any]], T], what: str) -> EntitySlice[T]:
    # Legacy snapshots stored plain lists instead of normalized slices.
    if isinstance(raw, list):
        return entity_slice_from(_parse_many(raw, parse, what))
    if not isinstance(raw, dict):
        return EntitySlice()
    by_id_raw = raw.get("byId") if isinstance(raw.get("byId"), dict) else {}
    all_ids_raw = raw.get("allIds") if isinstance(raw.get("allIds"), list) else []
    ordered = [str(i) for i in all_ids_raw if str(i) in by_id_raw]
    ordered += [k for k in by_id_raw if k not in ordered]
    slice_ = entity_slice_from(_parse_many((by_id_raw[k] for k in ordered), parse, what))
    error = raw.get("error")
    return EntitySlice(
        by_id=slice_.by_id,
        all_ids=slice_.all_ids,
        loading=bool(raw.get("loading", False)),
        error=str(error) if error is not None else None,
    )


def plan_from_raw(raw: Any, *, week_start_iso: str, week_start_day: str) -> Plan:
    """Parse a persisted plan, migrating the legacy day-name keyed layout."""
    if not isinstance(raw, dict):
        return {}
    keys = list(raw)
    if keys and all(k in DAY_NAMES for k in keys):
        try:
            start = parse_iso(week_start_iso)
            order = day_order(week_start_day)
        except ValueError as err:
            _LOGGER.warning("Cannot migrate legacy plan: %s", err)
            return {}
        migrated: dict[str, Any] = {}
        for offset, day_key in enumerate(order):
            items = raw.get(day_key)
            if items:
                migrated[date.fromordinal(start.toordinal() + offset).isoformat()] = items
        _LOGGER.debug("Migrated legacy day-keyed plan (%s days)", len(migrated))
        raw = migrated

    plan: Plan = {}
    for date_iso, items in raw.items():
        if not isinstance(items, list):
            continue
        parsed = tuple(_parse_many(items, plan_item_from_dict, "plan item"))
        if parsed:
            plan[str(date_iso)] = parsed
    return plan


def _week_anchor(raw: Any, fallback: str) -> str:
    if not raw:
        return fallback
    try:
        return parse_iso(str(raw)).isoformat()
    except ValueError:
        _LOGGER.warning("Ignoring stored week anchor %r", raw)
        return fallback


def hydrate_state(raw: Any, *, today: date) -> AppState:
    """Build a full AppState from a possibly partial snapshot.

    Missing or unusable slices fall back to defaults so schema drift in a
    persisted document can never crash the engine.
    """
    defaults = default_state(today)
    if isinstance(raw, AppState):
        return raw
    if not isinstance(raw, dict):
        return defaults

    settings_raw = raw.get("settings")
    if isinstance(settings_raw, dict) and isinstance(settings_raw.get("preferences"), dict):
        error = settings_raw.get("error")
        settings = SettingsSlice(
            preferences=Settings.from_dict(settings_raw["preferences"]),
            loading=bool(settings_raw.get("loading", False)),
            error=str(error) if error is not None else None,
        )
    elif isinstance(settings_raw, dict):
        # Legacy flat settings object.
        settings = SettingsSlice(preferences=Settings.from_dict(settings_raw))
    else:
        settings = defaults.settings
    week_start_day = settings.preferences.week_start_day

    planner_raw = raw.get("planner")
    if isinstance(planner_raw, dict):
        week_iso = _week_anchor(planner_raw.get("currentWeekStartISO"), defaults.planner.current_week_start_iso)
        error = planner_raw.get("error")
        planner = PlanSlice(
            plan=plan_from_raw(planner_raw.get("plan"), week_start_iso=week_iso, week_start_day=week_start_day),
            current_week_start_iso=week_iso,
            loading=bool(planner_raw.get("loading", False)),
            error=str(error) if error is not None else None,
        )
    elif "plan" in raw:
        week_iso = _week_anchor(raw.get("currentWeekStartISO"), defaults.planner.current_week_start_iso)
        planner = PlanSlice(
            plan=plan_from_raw(raw.get("plan"), week_start_iso=week_iso, week_start_day=week_start_day),
            current_week_start_iso=week_iso,
        )
    else:
        planner = defaults.planner

    return AppState(
        exercises=_entity_slice_from_raw(raw.get("exercises"), Exercise.from_dict, "exercise"),
        routines=_entity_slice_from_raw(raw.get("routines"), Routine.from_dict, "routine"),
        planner=planner,
        logs=_entity_slice_from_raw(raw.get("logs"), LogEntry.from_dict, "log"),
        settings=settings,
    )
