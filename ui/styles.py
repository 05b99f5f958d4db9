"""Styling helpers for Streamlit layouts."""
from __future__ import annotations

import streamlit as st


def render_app_styles(*, result_page: bool = False) -> None:
    """Apply the dark gradient background and result-page typography."""
    base_css = """
    <style>
    .stApp {
        background: linear-gradient(160deg, #1db954 0%, #121212 55%, #000000 100%);
        color: #ffffff;
    }
    [data-testid="stHeader"] {
        background: rgba(0, 0, 0, 0);
    }
    [data-testid="stAppViewContainer"] > .main > div:first-child {
        max-width: 860px;
    }
    .loading-note {
        text-align: center;
        font-weight: 700;
        font-size: 1.25rem;
        padding-top: 30vh;
    }
    </style>
    """
    st.markdown(base_css, unsafe_allow_html=True)

    if result_page:
        st.markdown(
            """
            <style>
            .result-description p {
                font-size: 0.95rem;
                text-align: left;
            }
            .result-list-title {
                font-weight: 700;
                font-size: 1.25rem;
                margin-bottom: 0.5rem;
            }
            </style>
            """,
            unsafe_allow_html=True,
        )


__all__ = ["render_app_styles"]
