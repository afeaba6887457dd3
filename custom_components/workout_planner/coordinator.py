"""Coordinator for Workout Planner."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .actions import Action, recalculate_current_week, update_settings
from .const import (
    CONF_DEFAULT_UNIT,
    CONF_WEEK_START_DAY,
    DOMAIN,
    SIGNAL_STATE_UPDATED,
)
from .engine import WorkoutPlannerEngine
from .models import Settings
from .state import AppState
from .storage import WorkoutPlannerStore, today_local

_LOGGER = logging.getLogger(__name__)


class WorkoutPlannerCoordinator(DataUpdateCoordinator[AppState]):
    """Owns the engine for one config entry and fans out state changes."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        self.entry = entry
        self.store = WorkoutPlannerStore(hass, entry.entry_id)
        self.engine = WorkoutPlannerEngine(self.store, hass.async_create_task, today_fn=today_local)
        self._unsubs: list[Any] = []

        # No polling: every change comes through the engine.
        super().__init__(hass, logger=_LOGGER, name=f"{DOMAIN}_{entry.entry_id}")

    async def _async_update_data(self) -> AppState:
        if not self.engine.ready:
            await self.engine.async_start()
            self._unsubs.append(self.engine.add_listener(self._handle_state))
            self._unsubs.append(
                async_track_time_change(self.hass, self._handle_midnight, hour=0, minute=0, second=5)
            )
            if self.engine.state.settings.preferences == Settings():
                # Fresh storage: seed Settings from the config flow answers.
                self.apply_entry_settings()
        return self.engine.state

    @callback
    def _handle_state(self, state: AppState) -> None:
        self.async_set_updated_data(state)
        async_dispatcher_send(self.hass, f"{SIGNAL_STATE_UPDATED}_{self.entry.entry_id}")

    @callback
    def _handle_midnight(self, _now: Any) -> None:
        self.dispatch(recalculate_current_week())

    def dispatch(self, action: Action | dict[str, Any]) -> AppState:
        return self.engine.dispatch(action)

    def apply_entry_settings(self) -> None:
        """Push config entry options into Settings as an explicit update."""
        opts = {**(self.entry.data or {}), **(self.entry.options or {})}
        wanted: dict[str, Any] = {}
        if opts.get(CONF_DEFAULT_UNIT):
            wanted["defaultUnit"] = str(opts[CONF_DEFAULT_UNIT])
        if opts.get(CONF_WEEK_START_DAY):
            wanted["weekStartDay"] = str(opts[CONF_WEEK_START_DAY])
        current = self.engine.state.settings.preferences.as_dict()
        if all(current.get(k) == v for k, v in wanted.items()):
            return
        self.dispatch(update_settings(**wanted))

    @callback
    def async_shutdown_listeners(self) -> None:
        while self._unsubs:
            self._unsubs.pop()()
