"""Constants shared across the result page modules."""
from __future__ import annotations

LANDING_ROUTE = "landing"
RESULT_ROUTE = "result"

SPOTIFY_API_BASE = "https://api.spotify.com/v1"
TOP_ITEMS_LIMIT = 5
TOP_ARTISTS_TIME_RANGE = "medium_term"
TOP_TRACKS_TIME_RANGE = "short_term"

TYPING_INTERVAL_SECONDS = 0.03

ACCESS_TOKEN_MISSING_MESSAGE = "Access token not available"
NARRATIVE_FAILED_MESSAGE = "Failed to generate AI response"

__all__ = [
    "LANDING_ROUTE",
    "RESULT_ROUTE",
    "SPOTIFY_API_BASE",
    "TOP_ITEMS_LIMIT",
    "TOP_ARTISTS_TIME_RANGE",
    "TOP_TRACKS_TIME_RANGE",
    "TYPING_INTERVAL_SECONDS",
    "ACCESS_TOKEN_MISSING_MESSAGE",
    "NARRATIVE_FAILED_MESSAGE",
]
