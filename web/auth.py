"""
Session Authentication for the Proposal API

A single sales account is configured through the environment
(ADMIN_USER / ADMIN_PASSWORD_HASH). A successful login yields a
UserSession that travels in an HMAC-signed cookie; nothing is kept
server side.

Token format: urlsafe_b64(json).hex_hmac_sha256
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Final, Optional

from fastapi import HTTPException, Request, Response

from utils.config import Config


SESSION_COOKIE_NAME: Final[str] = "proposal_session"
SESSION_TTL: Final[timedelta] = timedelta(hours=12)
PBKDF2_ITERATIONS: Final[int] = 100000


# =============================================================================
# Passwords
# =============================================================================


def _pbkdf2(password: str, salt: str) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS)
    return digest.hex()


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """PBKDF2-HMAC-SHA256 hash stored as ``salt$digest``."""
    salt = salt or secrets.token_hex(16)
    return f"{salt}${_pbkdf2(password, salt)}"


def verify_password(password: str, stored_hash: str) -> bool:
    salt, sep, digest = (stored_hash or "").partition("$")
    if not sep or not salt:
        return False
    return hmac.compare_digest(_pbkdf2(password, salt).encode(), digest.encode())


def generate_password_hash(password: str) -> str:
    """
    Produce a value for ADMIN_PASSWORD_HASH.

        python -c "from web.auth import generate_password_hash as g; print(g('senha'))"
    """
    return hash_password(password)


# =============================================================================
# Sessions
# =============================================================================


@dataclass(frozen=True)
class UserSession:
    username: str
    session_id: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def start(cls, username: str) -> "UserSession":
        now = datetime.utcnow()
        return cls(
            username=username,
            session_id=secrets.token_hex(16),
            issued_at=now,
            expires_at=now + SESSION_TTL,
        )

    @property
    def is_expired(self) -> bool:
        return datetime.utcnow() >= self.expires_at

    def to_payload(self) -> dict:
        return {
            "u": self.username,
            "sid": self.session_id,
            "iat": self.issued_at.isoformat(),
            "exp": self.expires_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "UserSession":
        return cls(
            username=payload["u"],
            session_id=payload["sid"],
            issued_at=datetime.fromisoformat(payload["iat"]),
            expires_at=datetime.fromisoformat(payload["exp"]),
        )


def create_session(username: str) -> UserSession:
    return UserSession.start(username)


def _mac(body: str, secret: str) -> str:
    return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()


def sign_session(session: UserSession, secret: str) -> str:
    """Encode ``session`` as a cookie value."""
    raw = json.dumps(session.to_payload(), separators=(",", ":"), sort_keys=True)
    body = base64.urlsafe_b64encode(raw.encode()).decode()
    return f"{body}.{_mac(body, secret)}"


def verify_session(token: str, secret: str) -> Optional[UserSession]:
    """Decode a cookie value; None when forged, malformed or expired."""
    body, sep, mac = token.rpartition(".")
    if not sep or not hmac.compare_digest(mac.encode(), _mac(body, secret).encode()):
        return None
    try:
        session = UserSession.from_payload(json.loads(base64.urlsafe_b64decode(body.encode())))
    except (ValueError, KeyError, TypeError):
        return None
    return None if session.is_expired else session


# =============================================================================
# Authenticator
# =============================================================================


class SessionAuth:
    """
    Login and cookie handling for one application instance.

    When SESSION_SECRET is unset a random secret is drawn here, so cookies
    stop verifying after a restart.
    """

    def __init__(self, config: Config):
        self.username = config.admin_user
        self.password_hash = config.admin_password_hash
        self.secret = config.session_secret or secrets.token_hex(32)
        self.secure_cookies = not config.debug

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password_hash)

    def authenticate(self, username: str, password: str) -> Optional[UserSession]:
        if not self.is_configured:
            return None
        user_ok = hmac.compare_digest(username.strip().encode(), self.username.encode())
        if not (user_ok and verify_password(password, self.password_hash)):
            return None
        return UserSession.start(self.username)

    def current_session(self, request: Request) -> Optional[UserSession]:
        token = request.cookies.get(SESSION_COOKIE_NAME)
        return verify_session(token, self.secret) if token else None

    def require_session(self, request: Request) -> UserSession:
        """Current session, or HTTPException(401)."""
        session = self.current_session(request)
        if session is None:
            raise HTTPException(status_code=401, detail="Authentication required")
        return session

    def set_cookie(self, response: Response, session: UserSession) -> None:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=sign_session(session, self.secret),
            max_age=int(SESSION_TTL.total_seconds()),
            httponly=True,
            secure=self.secure_cookies,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(key=SESSION_COOKIE_NAME)
