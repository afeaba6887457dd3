"""Services for Workout Planner."""

from __future__ import annotations

import voluptuous as vol

from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError

from .actions import recalculate_current_week
from .const import DOMAIN
from .engine import ExerciseInUseError
from .storage import StateImportError

SERVICE_EXPORT = "export_state"
SERVICE_IMPORT = "import_state"
SERVICE_DELETE_EXERCISE = "delete_exercise"
SERVICE_RECALCULATE_WEEK = "recalculate_week"

_ENTRY_SCHEMA = vol.Schema({vol.Required("entry_id"): str})
_IMPORT_SCHEMA = vol.Schema({vol.Required("entry_id"): str, vol.Required("data"): vol.Any(str, dict)})
_DELETE_EXERCISE_SCHEMA = vol.Schema({vol.Required("entry_id"): str, vol.Required("exercise_id"): str})


async def async_register(hass: HomeAssistant) -> None:
    def _coordinator_for_entry(entry_id: str):
        return hass.data.get(DOMAIN, {}).get(entry_id)

    async def _async_export(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        return {"ok": True, "entry_id": entry_id, "data": coordinator.engine.export()}

    async def _async_import(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        try:
            state = coordinator.engine.import_snapshot(call.data["data"])
        except StateImportError as e:
            raise HomeAssistantError(str(e)) from e
        return {"ok": True, "entry_id": entry_id, "exercises": len(state.exercises), "logs": len(state.logs)}

    async def _async_delete_exercise(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        try:
            coordinator.engine.delete_exercise(str(call.data["exercise_id"]))
        except ExerciseInUseError as e:
            raise HomeAssistantError(str(e)) from e
        return {"ok": True, "entry_id": entry_id}

    async def _async_recalculate(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        state = coordinator.dispatch(recalculate_current_week())
        return {"ok": True, "entry_id": entry_id, "current_week_start": state.planner.current_week_start_iso}

    if not hass.services.has_service(DOMAIN, SERVICE_EXPORT):
        hass.services.async_register(
            DOMAIN,
            SERVICE_EXPORT,
            _async_export,
            schema=_ENTRY_SCHEMA,
            supports_response=SupportsResponse.ONLY,
        )
    if not hass.services.has_service(DOMAIN, SERVICE_IMPORT):
        hass.services.async_register(
            DOMAIN,
            SERVICE_IMPORT,
            _async_import,
            schema=_IMPORT_SCHEMA,
            supports_response=SupportsResponse.OPTIONAL,
        )
    if not hass.services.has_service(DOMAIN, SERVICE_DELETE_EXERCISE):
        hass.services.async_register(
            DOMAIN,
            SERVICE_DELETE_EXERCISE,
            _async_delete_exercise,
            schema=_DELETE_EXERCISE_SCHEMA,
            supports_response=SupportsResponse.OPTIONAL,
        )
    if not hass.services.has_service(DOMAIN, SERVICE_RECALCULATE_WEEK):
        hass.services.async_register(
            DOMAIN,
            SERVICE_RECALCULATE_WEEK,
            _async_recalculate,
            schema=_ENTRY_SCHEMA,
            supports_response=SupportsResponse.OPTIONAL,
        )
