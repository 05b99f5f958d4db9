# app.py
from __future__ import annotations

import logging
import os
from functools import partial

import streamlit as st
from dotenv import load_dotenv

from app_constants import RESULT_ROUTE
from services.result_flow import ResultController
from session_state import ensure_state, go_route
from ui.landing import complete_sign_in, render_landing_page
from ui.result import render_result_page
from utils.auth import StateSessionProvider

load_dotenv()

logging.basicConfig(
    level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

st.set_page_config(page_title="Music Taste Result", page_icon="🎧", layout="centered")

APP_BASE_URL = (os.getenv("APP_BASE_URL") or "http://localhost:8501").strip()

session_proxy = ensure_state(st.session_state)


def handle_auth_callback() -> None:
    """Finish the OAuth round trip if the provider redirected back here."""
    params = st.query_params
    if "code" in params:
        signed_in = complete_sign_in(st.session_state, params.get("code"), params.get("flow"))
        st.query_params.clear()
        if signed_in:
            go_route(st.session_state, RESULT_ROUTE)
        st.rerun()
    elif "error" in params:
        st.session_state["auth_error"] = params.get("error_description") or params.get("error")
        st.query_params.clear()
        st.rerun()


def result_controller() -> ResultController:
    controller = session_proxy.result_controller
    if controller is None:
        controller = ResultController(
            StateSessionProvider(st.session_state),
            navigate=partial(go_route, st.session_state),
        )
        session_proxy.result_controller = controller
    return controller


handle_auth_callback()

if session_proxy.route == RESULT_ROUTE:
    render_result_page(result_controller())
else:
    render_landing_page(st.session_state, redirect_base=APP_BASE_URL)
