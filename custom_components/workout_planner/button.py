"""Button platform for Workout Planner."""

from __future__ import annotations

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .actions import recalculate_current_week
from .const import DOMAIN
from .coordinator import WorkoutPlannerCoordinator
from .entity import device_info_from_entry


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: WorkoutPlannerCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([RecalculateWeekButton(entry, coordinator)])


class RecalculateWeekButton(ButtonEntity):
    """Jump the planner back to the week containing today."""

    _attr_has_entity_name = True
    _attr_name = "Go to current week"
    _attr_icon = "mdi:calendar-today"
    _attr_translation_key = "recalculate_current_week"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
        self._entry = entry
        self._coordinator = coordinator
        self._attr_unique_id = f"{entry.entry_id}_recalculate_week"
        self._attr_device_info = device_info_from_entry(entry)

    async def async_press(self) -> None:
        self._coordinator.dispatch(recalculate_current_week())
