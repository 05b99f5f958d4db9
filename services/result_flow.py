"""State machine behind the result page.

The controller sequences the three network calls the page depends on:

1. read the session from the provider,
2. fetch top artists and top tracks (concurrently, once),
3. generate the narrative (once, after both lists are non-empty).

It is UI-agnostic: Streamlit keeps one instance per page visit in session
state and renders whatever ``status`` says.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

from app_constants import LANDING_ROUTE, NARRATIVE_FAILED_MESSAGE
from gemini_client import generate_taste_narrative
from services.typing_effect import TypingAnimation
from spotify_client import (
    AccessTokenUnavailable,
    Artist,
    SpotifyAPIError,
    Track,
    fetch_top_artists,
    fetch_top_tracks,
)
from supabase_auth import AuthSession
from telemetry import emit_log_event
from utils.auth import SessionProvider, auth_display_name, auth_email

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    NOT_STARTED = "not_started"
    IN_FLIGHT = "in_flight"
    DONE = "done"


class ViewStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


class OneShot:
    """``NOT_STARTED -> IN_FLIGHT -> DONE``; ``begin`` succeeds only once."""

    def __init__(self) -> None:
        self.phase = Phase.NOT_STARTED

    def begin(self) -> bool:
        if self.phase is not Phase.NOT_STARTED:
            return False
        self.phase = Phase.IN_FLIGHT
        return True

    def finish(self) -> None:
        self.phase = Phase.DONE


class ResultController:
    def __init__(
        self,
        provider: SessionProvider,
        *,
        navigate: Callable[[str], None],
        artists_fetcher: Callable[[str], list[Artist]] = fetch_top_artists,
        tracks_fetcher: Callable[[str], list[Track]] = fetch_top_tracks,
        narrator: Callable[[Sequence[Artist], Sequence[Track]], dict] = generate_taste_narrative,
    ) -> None:
        self._provider = provider
        self._navigate = navigate
        self._artists_fetcher = artists_fetcher
        self._tracks_fetcher = tracks_fetcher
        self._narrator = narrator

        self.session: AuthSession | None = None
        self.user: Mapping[str, Any] | None = None
        self.loading_done = False

        self.top_artists: list[Artist] = []
        self.top_tracks: list[Track] = []
        self.narrative: str | None = None

        self.error: str | None = None
        self.error_detail: dict | None = None

        self.fetches = OneShot()
        self.narrative_job = OneShot()
        self.typing = TypingAnimation()

    # Session ---------------------------------------------------------------------
    def load_session(self) -> None:
        lookup = self._provider.get_session()
        if lookup.error:
            logger.warning("Session lookup reported an error: %s", lookup.error)
        self.session = lookup.session
        self.user = lookup.session.user_metadata if lookup.session else None
        self.loading_done = True

    def access_token(self) -> str:
        lookup = self._provider.get_session()
        if lookup.error or lookup.session is None or not lookup.session.provider_token:
            raise AccessTokenUnavailable()
        return lookup.session.provider_token

    @property
    def display_name(self) -> str:
        return auth_display_name(self.user)

    # Fetching ---------------------------------------------------------------------
    def start_fetches(self) -> bool:
        """Fetch both lists once the session is loaded. Returns True if issued."""

        if not self.loading_done or self.top_artists:
            return False
        if not self.fetches.begin():
            return False

        # Session state is only readable from the script thread.
        try:
            token = self.access_token()
        except AccessTokenUnavailable as exc:
            logger.warning("Fetching top items skipped: %s", exc)
            self.error = str(exc)
            self.fetches.finish()
            return True

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="spotify-top") as pool:
            artists_future = pool.submit(self._artists_fetcher, token)
            tracks_future = pool.submit(self._tracks_fetcher, token)

        try:
            for future, target in ((artists_future, "top_artists"), (tracks_future, "top_tracks")):
                try:
                    setattr(self, target, list(future.result() or []))
                except (AccessTokenUnavailable, SpotifyAPIError) as exc:
                    logger.warning("Fetching %s failed: %s", target, exc)
                    self.error = str(exc)
                except Exception as exc:
                    logger.exception("Unexpected failure fetching %s", target)
                    self.error = str(exc) or type(exc).__name__
        finally:
            self.fetches.finish()
        return True

    # Narrative -------------------------------------------------------------------
    def maybe_generate_narrative(self) -> bool:
        """Generate the narrative the first time both lists are non-empty."""

        if not self.top_artists or not self.top_tracks:
            return False
        if not self.narrative_job.begin():
            return False

        try:
            result = self._narrator(list(self.top_artists), list(self.top_tracks))
        except Exception as exc:
            logger.exception("Narrative generator raised")
            result = {"error": f"{type(exc).__name__}: {exc}", "exception_type": type(exc).__name__}
        try:
            self._record_narrative(result)
        finally:
            self.narrative_job.finish()
        return True

    def _record_narrative(self, result: Any) -> None:
        text = result.get("text") if isinstance(result, Mapping) else None
        if text:
            self.narrative = str(text)
            emit_log_event(type="narrative", action="generate", result="success", user_email=auth_email(self.session))
        else:
            self.error = NARRATIVE_FAILED_MESSAGE
            self.error_detail = dict(result) if isinstance(result, Mapping) else {"error": repr(result)}
            logger.error("Narrative generation failed: %s", self.error_detail)
            emit_log_event(
                type="narrative",
                action="generate",
                result="fail",
                params=[self.error_detail.get("error")],
                user_email=auth_email(self.session),
            )

    def advance(self) -> ViewStatus:
        """Run whichever step the current data makes possible."""

        if not self.loading_done:
            self.load_session()
        self.start_fetches()
        self.maybe_generate_narrative()
        return self.status

    # View ------------------------------------------------------------------------
    @property
    def status(self) -> ViewStatus:
        if self.error:
            return ViewStatus.ERROR
        if not self.loading_done or not self.top_artists or not self.top_tracks:
            return ViewStatus.LOADING
        return ViewStatus.READY

    def release(self) -> None:
        """Stop the typing reveal; called when the page goes away."""

        self.typing.cancel()

    def logout(self) -> None:
        email = auth_email(self.session)
        self.release()
        self._provider.sign_out()
        self.session = None
        self.user = None
        emit_log_event(type="user", action="logout", result="success", user_email=email)
        self._navigate(LANDING_ROUTE)


__all__ = ["OneShot", "Phase", "ResultController", "ViewStatus"]
