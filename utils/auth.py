"""Authentication state helpers shared across UI components."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping, Protocol

import supabase_auth
from supabase_auth import AuthSession, SupabaseAuthError

logger = logging.getLogger(__name__)

SESSION_STATE_KEY = "auth_session"


@dataclass(frozen=True)
class SessionLookup:
    session: AuthSession | None
    error: str | None = None


class SessionProvider(Protocol):
    def get_session(self) -> SessionLookup: ...

    def sign_out(self) -> None: ...


class StateSessionProvider:
    """Reads the signed-in session from a session-state mapping."""

    def __init__(self, state: MutableMapping[str, Any]):
        self._state = state

    def get_session(self) -> SessionLookup:
        raw = self._state.get(SESSION_STATE_KEY)
        if raw is None:
            return SessionLookup(session=None)
        if not isinstance(raw, Mapping):
            return SessionLookup(session=None, error="Stored session is malformed")
        session = AuthSession.from_state(raw)
        if session is None:
            return SessionLookup(session=None, error="Stored session has no access token")
        return SessionLookup(session=session)

    def sign_out(self) -> None:
        lookup = self.get_session()
        if lookup.session is not None:
            try:
                supabase_auth.sign_out(lookup.session.access_token)
            except RuntimeError as exc:
                logger.warning("Supabase sign-out failed, clearing local session anyway: %s", exc)
        clear_auth_session(self._state)


def store_auth_session(state: MutableMapping[str, Any], session: AuthSession) -> None:
    state[SESSION_STATE_KEY] = session.to_state()
    state["auth_error"] = None


def clear_auth_session(state: MutableMapping[str, Any]) -> None:
    state[SESSION_STATE_KEY] = None
    state["auth_error"] = None


def format_auth_error(error: Exception) -> str:
    if isinstance(error, SupabaseAuthError):
        code = (error.code or "").lower()
        messages = {
            "flow_state_not_found": "Your sign-in link expired. Please try logging in again.",
            "flow_state_expired": "Your sign-in link expired. Please try logging in again.",
            "bad_code_verifier": "Sign-in could not be verified. Please try again.",
            "provider_disabled": "Spotify sign-in is not enabled for this app.",
        }
        if code in messages:
            return messages[code]
        return "Spotify sign-in failed. Please try again in a moment."
    if isinstance(error, RuntimeError):
        return str(error)
    return "Something went wrong while signing you in."


def auth_display_name(user: Mapping[str, Any] | None) -> str:
    if not user:
        return ""
    return str(user.get("name") or user.get("display_name") or user.get("full_name") or "").strip()


def auth_email(session: AuthSession | None) -> str | None:
    if session is None:
        return None
    return session.email.strip() or None


__all__ = [
    "SESSION_STATE_KEY",
    "SessionLookup",
    "SessionProvider",
    "StateSessionProvider",
    "store_auth_session",
    "clear_auth_session",
    "format_auth_error",
    "auth_display_name",
    "auth_email",
]
