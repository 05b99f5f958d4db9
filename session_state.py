"""Session state helpers for the Streamlit app."""
from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from app_constants import LANDING_ROUTE, RESULT_ROUTE
from session_proxy import AppSessionProxy

_STATE_DEFAULTS: dict[str, Any] = {
    # Routing
    "route": LANDING_ROUTE,

    # Authentication state
    "auth_session": None,
    "auth_error": None,

    # Result page
    "result_controller": None,
}

_ROUTES = frozenset({LANDING_ROUTE, RESULT_ROUTE})


def ensure_state(state: MutableMapping[str, Any]) -> AppSessionProxy:
    proxy = AppSessionProxy(state)
    for key, default in _STATE_DEFAULTS.items():
        proxy.setdefault(key, default)
    if proxy.route not in _ROUTES:
        proxy.route = LANDING_ROUTE
    return proxy


def release_result_view(state: MutableMapping[str, Any]) -> None:
    """Tear down the result page's controller and any running reveal."""

    proxy = AppSessionProxy(state)
    controller = proxy.result_controller
    if controller is not None:
        controller.release()
    proxy.result_controller = None


def go_route(state: MutableMapping[str, Any], route: str) -> None:
    if route not in _ROUTES:
        raise ValueError(f"Unknown route: {route}")
    proxy = AppSessionProxy(state)
    if proxy.route == RESULT_ROUTE and route != RESULT_ROUTE:
        release_result_view(state)
    proxy.route = route


__all__ = ["ensure_state", "go_route", "release_result_view"]
