"""Websocket state helpers."""

from __future__ import annotations

from datetime import date
from typing import Any

from .dates import current_week_start, day_key_for_date, week_dates
from .state import AppState


def runtime_payload(state: AppState, today: date) -> dict[str, Any]:
    """Calendar values the UI needs alongside the stored state."""
    week_start_day = state.settings.preferences.week_start_day
    this_week = current_week_start(today, week_start_day)
    return {
        "today": today.isoformat(),
        "today_day": day_key_for_date(today.isoformat()),
        "this_week_start": this_week,
        "displayed_week_dates": week_dates(state.planner.current_week_start_iso or this_week),
    }


def public_state(state: AppState, *, runtime: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a stable public payload for the UI."""
    return {**state.as_dict(), "runtime": runtime or {}}
