"""Session proxy for wrapping Streamlit's session state mapping."""
from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from app_constants import LANDING_ROUTE


class AppSessionProxy:
    """Lightweight view over a Streamlit ``session_state`` mapping."""

    def __init__(self, backing: MutableMapping[str, Any]):
        self._backing = backing

    def setdefault(self, key: str, default: Any) -> Any:
        if key not in self._backing:
            self._backing[key] = default
        return self._backing[key]

    # Convenience accessors -------------------------------------------------------
    @property
    def route(self) -> str:
        return str(self._backing.get("route") or LANDING_ROUTE)

    @route.setter
    def route(self, value: str) -> None:
        self._backing["route"] = value

    @property
    def result_controller(self) -> Any:
        return self._backing.get("result_controller")

    @result_controller.setter
    def result_controller(self, value: Any) -> None:
        self._backing["result_controller"] = value


__all__ = ["AppSessionProxy"]
