"""Session lookup for inbound requests.

Two backends are supported: Firebase ID tokens (Authorization: Bearer), and an
X-User-Id header signed with HMAC-SHA256 by a trusted frontend.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass

from fastapi import Depends, Request

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CallerIdentity:
    user_id: str


def sign_request(body: str, timestamp: int, secret: str) -> str:
    """Sign a request body with HMAC-SHA256."""
    payload = f"{timestamp}.{body}"
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def get_user_headers(user_id: str, secret: str) -> dict[str, str]:
    """Headers a frontend sends to assert a signed-in user."""
    timestamp = int(time.time() * 1000)
    return {
        "X-User-Id": user_id,
        "X-Timestamp": str(timestamp),
        "X-Signature": sign_request(user_id, timestamp, secret),
    }


def verify_signed_user(
    user_id: str | None,
    timestamp: str | None,
    signature: str | None,
    settings: Settings,
) -> CallerIdentity | None:
    if not (user_id and timestamp and signature and settings.auth_shared_secret):
        return None
    try:
        ts = int(timestamp)
    except ValueError:
        return None
    if abs(time.time() * 1000 - ts) > settings.auth_max_skew_seconds * 1000:
        logger.info("[AUTH] Rejected signed user header: timestamp outside allowed skew")
        return None
    expected = sign_request(user_id, ts, settings.auth_shared_secret)
    if not hmac.compare_digest(expected, signature):
        logger.info("[AUTH] Rejected signed user header: bad signature")
        return None
    return CallerIdentity(user_id=user_id)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_caller(request: Request, settings: Settings = Depends(get_settings)) -> CallerIdentity | None:
    """Resolve the caller's identity, or None when the request carries no valid session."""
    if settings.auth_backend == "hmac":
        return verify_signed_user(
            request.headers.get("X-User-Id"),
            request.headers.get("X-Timestamp"),
            request.headers.get("X-Signature"),
            settings,
        )

    token = _bearer_token(request)
    if not token:
        return None
    from .firebase import verify_id_token

    uid = verify_id_token(token, settings)
    return CallerIdentity(user_id=uid) if uid else None
