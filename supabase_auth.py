"""Lightweight Supabase Auth helpers (Spotify sign-in via PKCE, sign-out)."""
from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, MutableMapping
from urllib.parse import urlencode

import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").strip().rstrip("/")
SUPABASE_ANON_KEY = (os.getenv("SUPABASE_ANON_KEY") or "").strip()

OAUTH_PROVIDER = "spotify"
OAUTH_SCOPES = "user-top-read"


class SupabaseAuthError(RuntimeError):
    """Raised when the Supabase Auth API returns an error."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


@dataclass(slots=True)
class AuthSession:
    """Session returned by the PKCE code exchange."""

    access_token: str
    refresh_token: str
    expires_at: datetime
    user_id: str = ""
    email: str = ""
    provider_token: str | None = None
    user_metadata: dict[str, Any] = field(default_factory=dict)

    def to_state(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at.isoformat(),
            "user_id": self.user_id,
            "email": self.email,
            "provider_token": self.provider_token,
            "user_metadata": dict(self.user_metadata),
        }

    @classmethod
    def from_state(cls, data: Mapping[str, Any]) -> "AuthSession | None":
        access_token = str(data.get("access_token") or "")
        if not access_token:
            return None
        try:
            expires_at = datetime.fromisoformat(str(data.get("expires_at")))
        except (TypeError, ValueError):
            expires_at = datetime.now(timezone.utc)
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        metadata = data.get("user_metadata")
        return cls(
            access_token=access_token,
            refresh_token=str(data.get("refresh_token") or ""),
            expires_at=expires_at,
            user_id=str(data.get("user_id") or ""),
            email=str(data.get("email") or ""),
            provider_token=data.get("provider_token") or None,
            user_metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        )


@dataclass(frozen=True)
class PkceFlow:
    verifier: str
    challenge: str


def _require_config() -> tuple[str, str]:
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured to use Supabase Auth.")
    return SUPABASE_URL, SUPABASE_ANON_KEY


def _headers(access_token: str | None = None) -> dict[str, str]:
    _, anon_key = _require_config()
    headers = {"apikey": anon_key}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def new_pkce_flow() -> PkceFlow:
    verifier = secrets.token_urlsafe(48)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
    return PkceFlow(verifier=verifier, challenge=challenge)


def build_authorize_url(redirect_to: str, flow: PkceFlow) -> str:
    """Return the hosted sign-in URL that sends the user to Spotify."""

    base_url, _ = _require_config()
    query = urlencode(
        {
            "provider": OAUTH_PROVIDER,
            "redirect_to": redirect_to,
            "scopes": OAUTH_SCOPES,
            "code_challenge": flow.challenge,
            "code_challenge_method": "s256",
        }
    )
    return f"{base_url}/auth/v1/authorize?{query}"


def _error_from_payload(data: Any, fallback: str) -> SupabaseAuthError:
    if not isinstance(data, Mapping):
        return SupabaseAuthError(fallback)
    message = data.get("error_description") or data.get("msg") or data.get("message") or data.get("error")
    code = data.get("error_code") or data.get("error")
    return SupabaseAuthError(str(message or fallback), code=str(code) if code else None)


def _post_json(url: str, payload: Mapping[str, Any], *, headers: Mapping[str, str]) -> MutableMapping[str, Any]:
    try:
        response = requests.post(url, json=payload, headers=dict(headers), timeout=10)
    except requests.RequestException as exc:  # pragma: no cover - network issues
        raise SupabaseAuthError(f"Network error contacting Supabase Auth: {exc}") from exc

    try:
        data = response.json()
    except json.JSONDecodeError as exc:  # pragma: no cover - defensive
        raise SupabaseAuthError("Invalid response from Supabase Auth (non-JSON body)") from exc

    if response.status_code >= 400:
        raise _error_from_payload(data, "Supabase auth request failed")

    if not isinstance(data, MutableMapping):
        raise SupabaseAuthError("Unexpected Supabase response shape")
    return data


def _parse_auth_session(data: Mapping[str, Any]) -> AuthSession:
    expires_at_raw = data.get("expires_at")
    if expires_at_raw:
        try:
            expires_at = datetime.fromtimestamp(int(expires_at_raw), tz=timezone.utc)
        except (TypeError, ValueError):  # pragma: no cover - defensive
            expires_at = datetime.now(timezone.utc) + timedelta(hours=1)
    else:
        try:
            expires_seconds = int(data.get("expires_in") or 3600)
        except (TypeError, ValueError):  # pragma: no cover - defensive
            expires_seconds = 3600
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_seconds)

    user = data.get("user") if isinstance(data.get("user"), Mapping) else {}
    metadata = user.get("user_metadata") if isinstance(user.get("user_metadata"), Mapping) else {}

    return AuthSession(
        access_token=str(data.get("access_token") or ""),
        refresh_token=str(data.get("refresh_token") or ""),
        expires_at=expires_at,
        user_id=str(user.get("id") or ""),
        email=str(user.get("email") or ""),
        provider_token=data.get("provider_token") or None,
        user_metadata=dict(metadata),
    )


def exchange_code_for_session(auth_code: str, code_verifier: str) -> AuthSession:
    """Trade the OAuth callback code for a session (PKCE grant)."""

    base_url, _ = _require_config()
    data = _post_json(
        f"{base_url}/auth/v1/token?grant_type=pkce",
        {"auth_code": auth_code, "code_verifier": code_verifier},
        headers=_headers(),
    )
    session = _parse_auth_session(data)
    if not session.access_token:
        raise SupabaseAuthError("Supabase did not return an access token")
    return session


def sign_out(access_token: str) -> None:
    """Revoke the session's refresh tokens on the Supabase side."""

    base_url, _ = _require_config()
    try:
        response = requests.post(f"{base_url}/auth/v1/logout", headers=_headers(access_token), timeout=10)
    except requests.RequestException as exc:  # pragma: no cover - network issues
        raise SupabaseAuthError(f"Network error contacting Supabase Auth: {exc}") from exc

    # An expired or already revoked token still counts as signed out.
    if response.status_code >= 400 and response.status_code not in (401, 403, 404):
        try:
            data = response.json()
        except json.JSONDecodeError:
            data = None
        raise _error_from_payload(data, f"Supabase sign-out failed ({response.status_code})")


__all__ = [
    "AuthSession",
    "PkceFlow",
    "SupabaseAuthError",
    "build_authorize_url",
    "exchange_code_for_session",
    "new_pkce_flow",
    "sign_out",
]
