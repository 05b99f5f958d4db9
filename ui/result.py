"""Result page: top artists, top tracks and the typed taste narrative."""
from __future__ import annotations

import html
import time
from typing import Callable, Sequence

import streamlit as st

from services.result_flow import ResultController, ViewStatus
from services.typing_effect import split_paragraphs
from spotify_client import Artist, Track
from ui.styles import render_app_styles


def _render_loading() -> None:
    st.markdown("<div class='loading-note'>Analyzing your music taste...</div>", unsafe_allow_html=True)


def _render_error(controller: ResultController) -> None:
    st.subheader("Oops! Something went wrong")
    st.caption(controller.error or "")
    st.button("Go Back", key="result_go_back", on_click=controller.logout)


def _render_ranked_list(title: str, image_url: str | None, names: Sequence[str], image_caption: str) -> None:
    image_col, list_col = st.columns([1, 2])
    with image_col:
        if image_url:
            st.image(image_url, width=160, caption=image_caption)
    with list_col:
        st.markdown(f"<div class='result-list-title'>{title}</div>", unsafe_allow_html=True)
        st.markdown("\n".join(f"{idx}. {name}" for idx, name in enumerate(names, start=1)))


def _render_paragraphs(placeholder, text: str) -> None:
    with placeholder.container():
        for paragraph in split_paragraphs(text):
            st.markdown(f"<div class='result-description'><p>{html.escape(paragraph)}</p></div>", unsafe_allow_html=True)


def _render_narrative(controller: ResultController, placeholder, sleep: Callable[[float], None]) -> None:
    narrative = controller.narrative
    if not narrative:
        return

    typing = controller.typing
    if typing.source_text != narrative:
        typing.start(narrative)

    if typing.is_typing:
        note = st.empty()
        note.caption("Generating your description...")
        typing.play(placeholder.text, sleep=sleep)
        note.empty()

    if typing.finished:
        _render_paragraphs(placeholder, narrative)


def _render_ready(controller: ResultController, sleep: Callable[[float], None]) -> None:
    name = controller.display_name
    st.header(f"{name}, here's your result" if name else "Here's your result")
    description = st.empty()

    artists: list[Artist] = controller.top_artists
    tracks: list[Track] = controller.top_tracks
    _render_ranked_list(
        "Top Artists",
        artists[0].image_url if artists else None,
        [artist.name for artist in artists],
        "Top artist",
    )
    _render_ranked_list(
        "Top Tracks",
        tracks[0].image_url if tracks else None,
        [track.name for track in tracks],
        "Top track",
    )
    st.button("Log Out", key="result_logout", on_click=controller.logout)

    _render_narrative(controller, description, sleep)


def render_result_page(controller: ResultController, *, sleep: Callable[[float], None] = time.sleep) -> None:
    render_app_styles(result_page=True)

    if controller.status is ViewStatus.LOADING:
        with st.spinner("Analyzing your music taste..."):
            controller.advance()

    status = controller.status
    if status is ViewStatus.ERROR:
        _render_error(controller)
    elif status is ViewStatus.LOADING:
        _render_loading()
        st.button("Log Out", key="result_logout_loading", on_click=controller.logout)
    else:
        _render_ready(controller, sleep)


__all__ = ["render_result_page"]
