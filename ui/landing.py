"""Landing page and the Spotify sign-in round trip."""
from __future__ import annotations

import logging
import secrets
import time
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import streamlit as st

from app_constants import RESULT_ROUTE
from session_state import go_route
from supabase_auth import PkceFlow, build_authorize_url, exchange_code_for_session, new_pkce_flow
from telemetry import emit_log_event
from ui.styles import render_app_styles
from utils.auth import StateSessionProvider, auth_email, format_auth_error, store_auth_session

logger = logging.getLogger(__name__)

_FLOW_STATE_KEY = "pending_flow_id"
# Supabase drops its own flow state after the same interval.
_FLOW_TTL_SECONDS = 600.0


@dataclass(frozen=True)
class PendingFlow:
    flow: PkceFlow
    created_at: float


def _now() -> float:
    return time.monotonic()


@st.cache_resource
def _pending_flows() -> dict[str, PendingFlow]:
    # Process-wide: the OAuth redirect lands in a fresh browser session.
    return {}


def _prune_expired(flows: dict[str, PendingFlow], now: float) -> None:
    expired = [flow_id for flow_id, pending in list(flows.items()) if now - pending.created_at > _FLOW_TTL_SECONDS]
    for flow_id in expired:
        flows.pop(flow_id, None)
    if expired:
        logger.debug("Dropped %d abandoned sign-in flows", len(expired))


def begin_sign_in(state: MutableMapping[str, Any], redirect_base: str) -> str:
    """Return the provider sign-in URL, reusing this session's pending flow."""

    flows = _pending_flows()
    now = _now()
    _prune_expired(flows, now)
    flow_id = state.get(_FLOW_STATE_KEY)
    pending = flows.get(flow_id) if flow_id else None
    if pending is None:
        flow_id = secrets.token_urlsafe(16)
        pending = PendingFlow(flow=new_pkce_flow(), created_at=now)
        flows[flow_id] = pending
        state[_FLOW_STATE_KEY] = flow_id

    redirect_to = f"{redirect_base.rstrip('/')}/?{urlencode({'flow': flow_id})}"
    return build_authorize_url(redirect_to, pending.flow)


def complete_sign_in(state: MutableMapping[str, Any], code: str, flow_id: str | None) -> bool:
    """Exchange the callback code and store the session. Returns True on success."""

    flows = _pending_flows()
    _prune_expired(flows, _now())
    pending = flows.pop(flow_id, None) if flow_id else None
    if pending is None:
        state["auth_error"] = "Your sign-in link expired. Please try logging in again."
        return False

    try:
        session = exchange_code_for_session(code, pending.flow.verifier)
    except RuntimeError as exc:
        message = format_auth_error(exc)
        state["auth_error"] = message
        emit_log_event(type="user", action="login", result="fail", params=[message])
        return False

    store_auth_session(state, session)
    state.pop(_FLOW_STATE_KEY, None)
    emit_log_event(type="user", action="login", result="success", user_email=auth_email(session))
    return True


def render_landing_page(state: MutableMapping[str, Any], *, redirect_base: str) -> None:
    render_app_styles()
    st.title("🎧 What does your music say about you?")
    st.subheader("Connect Spotify and get a reading of your taste.")

    if state.get("auth_error"):
        st.error(state["auth_error"])

    if StateSessionProvider(state).get_session().session is not None:
        st.button(
            "See my result",
            type="primary",
            on_click=go_route,
            args=(state, RESULT_ROUTE),
        )
        return

    try:
        sign_in_url = begin_sign_in(state, redirect_base)
    except RuntimeError as exc:
        logger.error("Cannot build the sign-in URL: %s", exc)
        st.error(str(exc))
        return

    st.link_button("Log in with Spotify", sign_in_url, type="primary")
    st.caption("We only read your top artists and tracks.")


__all__ = ["PendingFlow", "begin_sign_in", "complete_sign_in", "render_landing_page"]
