"""Gemini SDK bootstrap and transport helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Callable

from dotenv import load_dotenv

# Quiet gRPC logs before importing the SDK.
os.environ.setdefault("GRPC_VERBOSITY", "ERROR")
os.environ.setdefault("GRPC_TRACE", "")

load_dotenv()

API_KEY = os.getenv("GEMINI_API_KEY", "")

_TEXT_MODEL_ENV = (os.getenv("GEMINI_TEXT_MODEL") or "").strip()
TEXT_MODEL = _TEXT_MODEL_ENV or "gemini-2.0-flash"

EMPTY_RESPONSE_MESSAGE = "The model returned an empty response (possibly blocked by safety filters)."

_GENAI_MODULE: Any | None = None
_GENAI_CONFIGURED = False
genai: Any = SimpleNamespace(GenerativeModel=None)


def missing_api_key_error() -> dict:
    return {"error": "GEMINI_API_KEY is not configured (check .env)."}


def get_genai_module():
    """Lazily import and configure the ``google.generativeai`` SDK."""

    global _GENAI_MODULE, _GENAI_CONFIGURED, genai

    if _GENAI_MODULE is None:
        if getattr(genai, "GenerativeModel", None) is not None:
            _GENAI_MODULE = genai
        else:
            import google.generativeai as genai_mod  # type: ignore

            _GENAI_MODULE = genai_mod
            genai = genai_mod

    if not _GENAI_CONFIGURED:
        if API_KEY and hasattr(_GENAI_MODULE, "configure"):
            _GENAI_MODULE.configure(api_key=API_KEY)
        _GENAI_CONFIGURED = True

    return _GENAI_MODULE


@dataclass(frozen=True)
class TextGenerationResult:
    ok: bool
    payload: Any | None = None
    error: dict | None = None


def extract_text_from_response(resp) -> str:
    try:
        text = getattr(resp, "text", None)
    except ValueError:
        # The SDK raises when the candidate was blocked and has no parts.
        text = None
    if text:
        return str(text)

    candidates = getattr(resp, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) if content else None
        if parts:
            return "".join(getattr(part, "text", "") or "" for part in parts)

    return ""


def _default_model_factory(system_instruction: str | None) -> Callable[[str], Any]:
    genai_mod = get_genai_module()

    def factory(model_name: str):
        if system_instruction:
            return genai_mod.GenerativeModel(model_name, system_instruction=system_instruction)
        return genai_mod.GenerativeModel(model_name)

    return factory


def generate_text_with_retry(
    prompt: str,
    *,
    attempts: int = 3,
    model_factory: Callable[[str], Any] | None = None,
    model_name: str | None = None,
    system_instruction: str | None = None,
) -> TextGenerationResult:
    if attempts < 1:
        attempts = 1

    target_model = model_name or TEXT_MODEL
    last_error: dict | None = None

    for attempt in range(1, attempts + 1):
        try:
            factory = model_factory or _default_model_factory(system_instruction)
            model = factory(target_model)
            response = model.generate_content(prompt)
        except Exception as exc:
            last_error = {
                "error": f"{type(exc).__name__}: {exc}",
                "exception_type": type(exc).__name__,
                "attempt": attempt,
            }
            continue

        text = extract_text_from_response(response)
        text = (text or "").strip()
        if not text:
            last_error = {"error": EMPTY_RESPONSE_MESSAGE, "attempt": attempt}
            continue

        return TextGenerationResult(ok=True, payload=text)

    if last_error is None:
        last_error = {"error": "Text generation failed.", "attempts": attempts}
    else:
        last_error.setdefault("attempts", attempts)
    return TextGenerationResult(ok=False, error=last_error)


__all__ = [
    "API_KEY",
    "EMPTY_RESPONSE_MESSAGE",
    "TEXT_MODEL",
    "genai",
    "get_genai_module",
    "generate_text_with_retry",
    "extract_text_from_response",
    "missing_api_key_error",
    "TextGenerationResult",
]
