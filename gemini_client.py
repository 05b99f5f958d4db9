"""Gemini client adapter for the music taste narrative."""
from __future__ import annotations

import logging
from typing import Sequence, cast

from prompts.narrative import SYSTEM_INSTRUCTION, build_taste_prompt
from services import gemini_api
from spotify_client import Artist, Track

logger = logging.getLogger(__name__)

API_KEY = gemini_api.API_KEY
_MODEL = gemini_api.TEXT_MODEL

genai = gemini_api.genai


def _require_api_key() -> dict | None:
    return None if API_KEY else gemini_api.missing_api_key_error()


def generate_taste_narrative(
    artists: Sequence[Artist],
    tracks: Sequence[Track],
    *,
    attempts: int = 1,
) -> dict:
    """Ask Gemini for a plain-text reading of the user's taste.

    Returns ``{"text": ...}`` on success or the structured ``{"error": ...}``
    dict describing why the call failed.
    """

    api_error = _require_api_key()
    if api_error:
        return api_error

    prompt = build_taste_prompt(artists, tracks)
    result = gemini_api.generate_text_with_retry(
        prompt,
        attempts=attempts,
        model_name=_MODEL,
        system_instruction=SYSTEM_INSTRUCTION,
    )
    if not result.ok:
        logger.warning("Narrative generation failed: %s", result.error)
        return result.error or {"error": "Narrative generation failed."}

    return {"text": cast(str, result.payload)}


__all__ = ["API_KEY", "_MODEL", "generate_taste_narrative", "genai"]
