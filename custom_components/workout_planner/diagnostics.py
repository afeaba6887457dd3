"""Diagnostics support for Workout Planner.

This file is picked up by Home Assistant automatically when present.
"""

from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN
from .plan import total_item_count


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant,
    entry: ConfigEntry,
) -> dict[str, Any]:
    """Return diagnostics for a config entry.

    Only sizes and error fields are reported; exercise names and logs stay out.
    """
    coordinator = hass.data.get(DOMAIN, {}).get(entry.entry_id)

    payload: dict[str, Any] = {
        "entry": {
            "entry_id": entry.entry_id,
            "title": entry.title,
            "version": entry.version,
            "data": dict(entry.data),
            "options": dict(entry.options),
        },
    }

    if coordinator is not None:
        state = coordinator.engine.state
        payload["coordinator"] = {
            "last_update_success": bool(getattr(coordinator, "last_update_success", False)),
            "last_exception": repr(getattr(coordinator, "last_exception", None)),
            "engine_ready": coordinator.engine.ready,
        }
        payload["state"] = {
            "exercises": {"count": len(state.exercises), "error": state.exercises.error},
            "routines": {"count": len(state.routines), "error": state.routines.error},
            "planner": {
                "dates": len(state.planner.plan),
                "items": total_item_count(state.planner.plan),
                "current_week_start": state.planner.current_week_start_iso,
                "error": state.planner.error,
            },
            "logs": {"count": len(state.logs), "error": state.logs.error},
            "settings": {**state.settings.preferences.as_dict(), "error": state.settings.error},
        }

    return payload
