"""Spotify Web API helpers for the user's top artists and tracks."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import requests

from app_constants import (
    ACCESS_TOKEN_MISSING_MESSAGE,
    SPOTIFY_API_BASE,
    TOP_ARTISTS_TIME_RANGE,
    TOP_ITEMS_LIMIT,
    TOP_TRACKS_TIME_RANGE,
)

logger = logging.getLogger(__name__)

_REQUEST_TIMEOUT = 20


class AccessTokenUnavailable(RuntimeError):
    """Raised when no Spotify bearer token can be read from the session."""

    def __init__(self, message: str = ACCESS_TOKEN_MISSING_MESSAGE) -> None:
        super().__init__(message)


class SpotifyAPIError(RuntimeError):
    """Raised when the Spotify Web API call does not succeed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class Artist:
    id: str
    name: str
    image_url: str | None = None


@dataclass(frozen=True)
class Track:
    id: str
    name: str
    artist_names: Sequence[str] = field(default_factory=tuple)
    image_url: str | None = None

    @property
    def primary_artist(self) -> str:
        return self.artist_names[0] if self.artist_names else ""


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _first_image_url(images: Any) -> str | None:
    if not isinstance(images, list) or not images:
        return None
    first = images[0]
    if not isinstance(first, Mapping):
        return None
    url = first.get("url")
    return str(url) if url else None


def _parse_artist(item: Mapping[str, Any]) -> Artist:
    return Artist(
        id=str(item.get("id") or ""),
        name=str(item.get("name") or ""),
        image_url=_first_image_url(item.get("images")),
    )


def _parse_track(item: Mapping[str, Any]) -> Track:
    artists = item.get("artists") or []
    names = tuple(
        str(artist.get("name") or "") for artist in artists if isinstance(artist, Mapping)
    )
    album = item.get("album") if isinstance(item.get("album"), Mapping) else {}
    return Track(
        id=str(item.get("id") or ""),
        name=str(item.get("name") or ""),
        artist_names=names,
        image_url=_first_image_url(album.get("images")),
    )


def _get_top_items(kind: str, token: str, *, time_range: str, limit: int) -> list[Mapping[str, Any]]:
    if not token:
        raise AccessTokenUnavailable()

    url = f"{SPOTIFY_API_BASE}/me/top/{kind}"
    try:
        response = requests.get(
            url,
            params={"limit": limit, "time_range": time_range},
            headers=_auth_header(token),
            timeout=_REQUEST_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise SpotifyAPIError(f"Spotify request failed: {exc}") from exc

    if not 200 <= response.status_code < 300:
        logger.warning("Spotify top %s request returned HTTP %s", kind, response.status_code)
        raise SpotifyAPIError(f"Spotify error {response.status_code}", status_code=response.status_code)

    try:
        data = response.json()
    except ValueError as exc:
        raise SpotifyAPIError("Spotify returned a non-JSON body", status_code=response.status_code) from exc

    items = data.get("items") if isinstance(data, Mapping) else None
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def fetch_top_artists(
    token: str,
    *,
    time_range: str = TOP_ARTISTS_TIME_RANGE,
    limit: int = TOP_ITEMS_LIMIT,
) -> list[Artist]:
    """Return the user's top artists, most listened first."""

    items = _get_top_items("artists", token, time_range=time_range, limit=limit)
    logger.info("Fetched %d top artists (%s)", len(items), time_range)
    return [_parse_artist(item) for item in items]


def fetch_top_tracks(
    token: str,
    *,
    time_range: str = TOP_TRACKS_TIME_RANGE,
    limit: int = TOP_ITEMS_LIMIT,
) -> list[Track]:
    """Return the user's top tracks, most listened first."""

    items = _get_top_items("tracks", token, time_range=time_range, limit=limit)
    logger.info("Fetched %d top tracks (%s)", len(items), time_range)
    return [_parse_track(item) for item in items]


__all__ = [
    "AccessTokenUnavailable",
    "Artist",
    "SpotifyAPIError",
    "Track",
    "fetch_top_artists",
    "fetch_top_tracks",
]
