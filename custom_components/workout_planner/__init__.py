"""Workout Planner integration."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN, PLATFORMS
from .coordinator import WorkoutPlannerCoordinator
from .services import async_register as async_register_services
from .storage import WorkoutPlannerStore
from .websocket_api import async_register as async_register_ws

_LOGGER = logging.getLogger(__name__)


async def _async_register_domain_resources(hass: HomeAssistant) -> None:
    """Register websocket commands and services once per Home Assistant instance.

    Called from both async_setup and async_setup_entry; whichever runs first wins.
    """
    domain_data: dict[str, Any] = hass.data.setdefault(DOMAIN, {})
    if domain_data.get("resources_registered"):
        return
    async_register_ws(hass)
    await async_register_services(hass)
    domain_data["resources_registered"] = True


async def async_setup(hass: HomeAssistant, _config: dict[str, Any]) -> bool:
    await _async_register_domain_resources(hass)
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Load stored state for the entry, then bring up its entities."""
    await _async_register_domain_resources(hass)

    coordinator = WorkoutPlannerCoordinator(hass, entry)
    await coordinator.async_config_entry_first_refresh()
    entry.async_on_unload(coordinator.async_shutdown_listeners)
    hass.data[DOMAIN][entry.entry_id] = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_options_updated))
    _LOGGER.debug("Setup complete for entry_id=%s", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Drop the stored document together with the entry."""
    await WorkoutPlannerStore(hass, entry.entry_id).async_remove()
    _LOGGER.debug("Removed stored state for entry_id=%s", entry.entry_id)


async def async_options_updated(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply changed options as a settings update; no reload needed."""
    coordinator: WorkoutPlannerCoordinator | None = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if coordinator is None:
        return
    coordinator.apply_entry_settings()
