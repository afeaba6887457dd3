"""Storage for Workout Planner (.storage).

One document per config entry, laid out exactly like AppState.as_dict():
exercises / routines / logs as {byId, allIds, loading, error}, planner as
{plan, currentWeekStartISO, loading, error}, settings as {preferences, loading, error}.

Loading never fails: a missing or unreadable document hydrates to defaults.
Saving is best effort and only logs failures.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any

import voluptuous as vol
from voluptuous.humanize import humanize_error

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store
from homeassistant.util import dt as dt_util

from .const import DOMAIN
from .state import AppState, default_state, hydrate_state
from .validation import ISO_DATE

_LOGGER = logging.getLogger(__name__)

_STORAGE_VERSION = 1
_SLICE_KEYS = ("exercises", "routines", "planner", "logs", "settings", "plan")

# Container shapes an imported file must have. Records inside are still
# checked one by one during hydration, where bad ones are dropped.
_ENTITY_SLICE = vol.Any(
    list,
    vol.Schema({vol.Optional("byId"): dict, vol.Optional("allIds"): list}, extra=vol.ALLOW_EXTRA),
)
_LOG_RECORD = vol.Schema(
    {vol.Optional("payload"): vol.Schema({vol.Optional("sets"): list}, extra=vol.ALLOW_EXTRA)},
    extra=vol.ALLOW_EXTRA,
)
_LOG_SLICE = vol.Any(
    [_LOG_RECORD],
    vol.Schema({vol.Optional("byId"): {str: _LOG_RECORD}, vol.Optional("allIds"): list}, extra=vol.ALLOW_EXTRA),
)
_WEEK_ANCHOR = vol.Any(None, ISO_DATE)
_IMPORT_SCHEMA = vol.Schema(
    {
        vol.Optional("exercises"): _ENTITY_SLICE,
        vol.Optional("routines"): _ENTITY_SLICE,
        vol.Optional("logs"): _LOG_SLICE,
        vol.Optional("planner"): vol.Schema(
            {vol.Optional("plan"): dict, vol.Optional("currentWeekStartISO"): _WEEK_ANCHOR},
            extra=vol.ALLOW_EXTRA,
        ),
        vol.Optional("settings"): dict,
        vol.Optional("plan"): dict,
        vol.Optional("currentWeekStartISO"): _WEEK_ANCHOR,
    },
    extra=vol.ALLOW_EXTRA,
)


def today_local() -> date:
    return dt_util.as_local(dt_util.utcnow()).date()


class StateImportError(ValueError):
    """Raised when an import payload cannot be turned into state."""


def export_state(state: AppState) -> str:
    """Pretty-printed snapshot for manual download."""
    return json.dumps(state.as_dict(), indent=2, ensure_ascii=False)


def import_state(payload: str | bytes | dict[str, Any], *, today: date) -> AppState:
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as err:
            raise StateImportError("Import file is not UTF-8 text") from err
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as err:
            raise StateImportError(f"Import file is not valid JSON: {err.msg} (line {err.lineno})") from err
    if not isinstance(payload, dict):
        raise StateImportError("Import must be a JSON object")
    if not any(key in payload for key in _SLICE_KEYS):
        raise StateImportError("Import does not look like a Workout Planner snapshot")
    try:
        _IMPORT_SCHEMA(payload)
    except vol.Invalid as err:
        raise StateImportError(f"Import has an invalid shape: {humanize_error(payload, err)}") from err
    try:
        return hydrate_state(payload, today=today)
    except (AttributeError, TypeError, ValueError) as err:
        _LOGGER.exception("Import payload could not be hydrated")
        raise StateImportError(f"Import does not look like a Workout Planner snapshot: {err}") from err


class WorkoutPlannerStore:
    """Per-config-entry storage wrapper."""

    def __init__(self, hass: HomeAssistant | None, entry_id: str, *, store: Any = None) -> None:
        self._store: Store[dict[str, Any]] = (
            store if store is not None else Store(hass, _STORAGE_VERSION, f"{DOMAIN}_{entry_id}")
        )

    async def async_load(self, *, today: date) -> AppState:
        try:
            loaded = await self._store.async_load()
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Failed to read stored state; starting from defaults")
            return default_state(today)
        if loaded is None:
            _LOGGER.debug("No stored state yet")
            return default_state(today)
        try:
            return hydrate_state(loaded, today=today)
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Stored state is unusable; starting from defaults")
            return default_state(today)

    async def async_save(self, state: AppState) -> None:
        try:
            await self._store.async_save(state.as_dict())
        except Exception:  # noqa: BLE001
            # In-memory state stays authoritative.
            _LOGGER.exception("Failed to save state")

    async def async_remove(self) -> None:
        await self._store.async_remove()
