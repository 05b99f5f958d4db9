"""Prompt assembly helpers for the music taste narrative."""
from __future__ import annotations

from typing import Sequence

from spotify_client import Artist, Track


SYSTEM_INSTRUCTION = """You are a witty, warm music critic who reads people through their playlists.
You receive a user's current top artists and top tracks from Spotify.

Write a short personality reading based on that taste:
- Address the user directly as "you".
- Mention at least two of the artists or tracks by name and what they say about the listener.
- Describe the mood, energy and habits their taste suggests, with light humour and no insults.
- Finish with one playful recommendation of an artist or genre they might enjoy next.

Format rules:
- Plain text only. No markdown, no headings, no bullet points, no emojis.
- Two or three paragraphs separated by a single blank line.
- At most 180 words in total.
"""


def format_track(track: Track) -> str:
    return f"{track.name}-{track.primary_artist}"


def build_taste_prompt(artists: Sequence[Artist], tracks: Sequence[Track]) -> str:
    artist_names = ", ".join(artist.name for artist in artists)
    track_names = ", ".join(format_track(track) for track in tracks)
    return f"User's top artists are {artist_names} and top tracks are {track_names}."


__all__ = ["SYSTEM_INSTRUCTION", "build_taste_prompt", "format_track"]
