from __future__ import annotations

from datetime import datetime, timezone

import pytest

from services.result_flow import OneShot, Phase, ResultController, ViewStatus
from spotify_client import Artist, SpotifyAPIError, Track
from supabase_auth import AuthSession
from utils.auth import SessionLookup

ARTISTS = [Artist(id="a1", name="Radiohead", image_url="https://img/a1.jpg")]
TRACKS = [Track(id="t1", name="Reckoner", artist_names=("Radiohead",))]


def make_session(provider_token: str | None = "spotify-token") -> AuthSession:
    return AuthSession(
        access_token="sb-access",
        refresh_token="sb-refresh",
        expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        email="listener@example.com",
        provider_token=provider_token,
        user_metadata={"name": "Listener"},
    )


class FakeProvider:
    def __init__(self, session: AuthSession | None):
        self.session = session
        self.lookups = 0
        self.sign_outs = 0

    def get_session(self) -> SessionLookup:
        self.lookups += 1
        return SessionLookup(session=self.session)

    def sign_out(self) -> None:
        self.sign_outs += 1
        self.session = None


class Recorder:
    def __init__(self, result=None, exc: Exception | None = None):
        self.result = result
        self.exc = exc
        self.calls: list[tuple] = []

    def __call__(self, *args):
        self.calls.append(args)
        if self.exc is not None:
            raise self.exc
        return self.result


def build(session=None, *, artists=None, tracks=None, narrator=None, navigate=None):
    provider = FakeProvider(session)
    routes: list[str] = []
    controller = ResultController(
        provider,
        navigate=navigate or routes.append,
        artists_fetcher=artists or Recorder(list(ARTISTS)),
        tracks_fetcher=tracks or Recorder(list(TRACKS)),
        narrator=narrator or Recorder({"text": "One.\n\nTwo."}),
    )
    return controller, provider, routes


def test_one_shot_transitions_only_once():
    guard = OneShot()
    assert guard.phase is Phase.NOT_STARTED
    assert guard.begin() is True
    assert guard.phase is Phase.IN_FLIGHT
    assert guard.begin() is False
    guard.finish()
    assert guard.phase is Phase.DONE
    assert guard.begin() is False


def test_status_is_loading_before_session_loads():
    controller, _, _ = build(make_session())
    assert controller.status is ViewStatus.LOADING


def test_happy_path_reaches_ready_with_narrative():
    narrator = Recorder({"text": "One.\n\nTwo."})
    artists = Recorder(list(ARTISTS))
    controller, _, _ = build(make_session(), artists=artists, narrator=narrator)

    status = controller.advance()

    assert status is ViewStatus.READY
    assert controller.user == {"name": "Listener"}
    assert controller.display_name == "Listener"
    assert artists.calls == [("spotify-token",)]
    assert controller.top_artists == ARTISTS
    assert controller.top_tracks == TRACKS
    assert controller.narrative == "One.\n\nTwo."
    assert narrator.calls == [(ARTISTS, TRACKS)]


def test_missing_provider_token_fails_both_fetchers():
    artists = Recorder(list(ARTISTS))
    tracks = Recorder(list(TRACKS))
    narrator = Recorder({"text": "unused"})
    controller, _, _ = build(make_session(provider_token=None), artists=artists, tracks=tracks, narrator=narrator)

    status = controller.advance()

    assert status is ViewStatus.ERROR
    assert controller.error == "Access token not available"
    assert artists.calls == []
    assert tracks.calls == []
    assert narrator.calls == []


def test_no_session_surfaces_only_when_fetching():
    controller, _, _ = build(None)

    controller.load_session()
    assert controller.loading_done is True
    assert controller.error is None

    controller.start_fetches()
    assert controller.status is ViewStatus.ERROR
    assert controller.error == "Access token not available"


def test_tracks_403_records_status_and_skips_narrative():
    narrator = Recorder({"text": "unused"})
    tracks = Recorder(exc=SpotifyAPIError("Spotify error 403", status_code=403))
    controller, _, _ = build(make_session(), tracks=tracks, narrator=narrator)

    status = controller.advance()

    assert status is ViewStatus.ERROR
    assert "403" in controller.error
    assert controller.top_artists == ARTISTS
    assert controller.top_tracks == []
    assert narrator.calls == []


def test_fetches_run_once_across_reruns():
    artists = Recorder(list(ARTISTS))
    tracks = Recorder(list(TRACKS))
    controller, _, _ = build(make_session(), artists=artists, tracks=tracks)

    controller.advance()
    controller.advance()
    controller.advance()

    assert len(artists.calls) == 1
    assert len(tracks.calls) == 1


def test_narrative_generated_exactly_once_even_if_lists_change():
    narrator = Recorder({"text": "Story"})
    controller, _, _ = build(make_session(), narrator=narrator)
    controller.advance()

    controller.top_artists = [Artist(id="a9", name="Someone Else")]
    controller.top_tracks = [Track(id="t9", name="Other", artist_names=("Someone Else",))]
    assert controller.maybe_generate_narrative() is False
    controller.advance()

    assert len(narrator.calls) == 1
    assert controller.narrative == "Story"


def test_narrative_failure_is_generic_but_keeps_cause():
    narrator = Recorder({"error": "TimeoutError: deadline exceeded", "attempt": 1, "attempts": 1})
    controller, _, _ = build(make_session(), narrator=narrator)

    status = controller.advance()

    assert status is ViewStatus.ERROR
    assert controller.error == "Failed to generate AI response"
    assert controller.error_detail == {"error": "TimeoutError: deadline exceeded", "attempt": 1, "attempts": 1}
    assert controller.narrative is None
    assert controller.narrative_job.phase is Phase.DONE


def test_narrator_exception_becomes_generic_error_and_finishes():
    narrator = Recorder(exc=ImportError("cannot import google.generativeai"))
    controller, _, _ = build(make_session(), narrator=narrator)

    status = controller.advance()

    assert status is ViewStatus.ERROR
    assert controller.error == "Failed to generate AI response"
    assert controller.error_detail == {
        "error": "ImportError: cannot import google.generativeai",
        "exception_type": "ImportError",
    }
    assert controller.narrative_job.phase is Phase.DONE

    controller.advance()
    assert len(narrator.calls) == 1


def test_unexpected_fetch_exception_reaches_error_screen():
    artists = Recorder(exc=KeyError("items"))
    tracks = Recorder(list(TRACKS))
    narrator = Recorder({"text": "unused"})
    controller, _, _ = build(make_session(), artists=artists, tracks=tracks, narrator=narrator)

    controller.advance()
    status = controller.advance()

    assert status is ViewStatus.ERROR
    assert controller.error == "'items'"
    assert controller.fetches.phase is Phase.DONE
    assert len(artists.calls) == 1
    assert narrator.calls == []


def test_empty_lists_stay_loading_without_narrative():
    narrator = Recorder({"text": "unused"})
    controller, _, _ = build(make_session(), artists=Recorder([]), tracks=Recorder([]), narrator=narrator)

    assert controller.advance() is ViewStatus.LOADING
    assert narrator.calls == []


@pytest.mark.parametrize("stage", ["loading", "error", "ready"])
def test_logout_signs_out_and_navigates_home_from_any_state(stage):
    session = None if stage == "error" else make_session()
    controller, provider, routes = build(session)
    if stage != "loading":
        controller.advance()
    expected = {"loading": ViewStatus.LOADING, "error": ViewStatus.ERROR, "ready": ViewStatus.READY}[stage]
    assert controller.status is expected

    controller.logout()

    assert provider.sign_outs == 1
    assert controller.session is None
    assert controller.user is None
    assert routes == ["landing"]


def test_logout_cancels_running_typing():
    controller, _, _ = build(make_session())
    controller.advance()
    handle = controller.typing.start(controller.narrative)
    controller.typing.tick()

    controller.logout()

    assert handle.cancelled is True
    assert controller.typing.is_typing is False
