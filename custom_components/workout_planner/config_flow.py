"""Config flow for Workout Planner."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback

from .const import (
    CONF_DEFAULT_UNIT,
    CONF_NAME,
    CONF_WEEK_START_DAY,
    DAY_NAMES,
    DEFAULT_NAME,
    DEFAULT_UNIT,
    DEFAULT_WEEK_START_DAY,
    DOMAIN,
    MASS_UNITS,
)


def _settings_schema(*, unit: str, week_start_day: str) -> dict[Any, Any]:
    return {
        vol.Required(CONF_DEFAULT_UNIT, default=unit): vol.In(MASS_UNITS),
        vol.Required(CONF_WEEK_START_DAY, default=week_start_day): vol.In(DAY_NAMES),
    }


class WorkoutPlannerConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Workout Planner."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        if user_input is not None:
            name = str(user_input.get(CONF_NAME, DEFAULT_NAME)).strip() or DEFAULT_NAME
            await self.async_set_unique_id(name.lower())
            self._abort_if_unique_id_configured()

            return self.async_create_entry(
                title=name,
                data={
                    CONF_NAME: name,
                    CONF_DEFAULT_UNIT: user_input[CONF_DEFAULT_UNIT],
                    CONF_WEEK_START_DAY: user_input[CONF_WEEK_START_DAY],
                },
            )

        schema = vol.Schema(
            {
                vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
                **_settings_schema(unit=DEFAULT_UNIT, week_start_day=DEFAULT_WEEK_START_DAY),
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return WorkoutPlannerOptionsFlow(config_entry)


class WorkoutPlannerOptionsFlow(config_entries.OptionsFlow):
    """Edit the default unit and week start day."""

    def __init__(self, config_entry) -> None:
        self._entry = config_entry

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        if user_input is not None:
            return self.async_create_entry(
                title="",
                data={
                    CONF_DEFAULT_UNIT: user_input[CONF_DEFAULT_UNIT],
                    CONF_WEEK_START_DAY: user_input[CONF_WEEK_START_DAY],
                },
            )

        current = {**self._entry.data, **self._entry.options}
        schema = vol.Schema(
            _settings_schema(
                unit=str(current.get(CONF_DEFAULT_UNIT) or DEFAULT_UNIT),
                week_start_day=str(current.get(CONF_WEEK_START_DAY) or DEFAULT_WEEK_START_DAY),
            )
        )
        return self.async_show_form(step_id="init", data_schema=schema)
