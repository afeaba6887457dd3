"""Sensor platform for Workout Planner."""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import WorkoutPlannerCoordinator
from .dates import current_week_start
from .entity import device_info_from_entry
from .metrics import completion_stats, planned_exercise_ids, weekly_stats
from .models import plan_item_as_dict
from .plan import get_items


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: WorkoutPlannerCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        [
            PlannedTodaySensor(entry, coordinator),
            WeeklyCompletionSensor(entry, coordinator),
        ]
    )


class PlannedTodaySensor(CoordinatorEntity[WorkoutPlannerCoordinator], SensorEntity):
    """Number of distinct exercises planned for today."""

    _attr_has_entity_name = True
    _attr_name = "Planned today"
    _attr_icon = "mdi:dumbbell"
    _attr_translation_key = "planned_today"
    _attr_native_unit_of_measurement = "exercises"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
        super().__init__(coordinator)
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_planned_today"
        self._attr_device_info = device_info_from_entry(entry)

    @property
    def native_value(self) -> int:
        engine = self.coordinator.engine
        items = get_items(engine.state.planner.plan, engine.today().isoformat())
        return len(planned_exercise_ids(items))

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        engine = self.coordinator.engine
        state = engine.state
        today_iso = engine.today().isoformat()
        items = get_items(state.planner.plan, today_iso)
        names = {e.id: e.name for e in state.exercises.items()}
        return {
            "entry_id": self._entry.entry_id,
            "date": today_iso,
            "items": [plan_item_as_dict(i) for i in items],
            "exercises": [names.get(i, i) for i in sorted(planned_exercise_ids(items))],
            "completion_rate": completion_stats(state.planner.plan, state.logs.items(), [today_iso]).completion_rate,
        }


class WeeklyCompletionSensor(CoordinatorEntity[WorkoutPlannerCoordinator], SensorEntity):
    """Share of this week's planned exercises that have been logged."""

    _attr_has_entity_name = True
    _attr_name = "Weekly completion"
    _attr_icon = "mdi:progress-check"
    _attr_translation_key = "weekly_completion"
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
        super().__init__(coordinator)
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_weekly_completion"
        self._attr_device_info = device_info_from_entry(entry)

    def _week_start(self) -> str:
        engine = self.coordinator.engine
        return current_week_start(engine.today(), engine.state.settings.preferences.week_start_day)

    @property
    def native_value(self) -> float:
        state = self.coordinator.engine.state
        return weekly_stats(state.logs.items(), state.planner.plan, self._week_start()).completion_rate

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        state = self.coordinator.engine.state
        stats = weekly_stats(state.logs.items(), state.planner.plan, self._week_start())
        return {"entry_id": self._entry.entry_id, **stats.as_dict()}
