"""
Password hashing and token primitives.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"

INSECURE_SECRETS = frozenset({
    "default_secret_key_change_me",
    "change_me",
    "changeme",
    "secret",
})


def resolve_jwt_secret(configured: Optional[str]) -> str:
    """
    Return the signing secret to use for this process.

    A missing or well-known default secret is replaced by a random
    throwaway one, with loud warnings: tokens will not survive a restart.
    """
    if configured and configured.strip() and configured.strip() not in INSECURE_SECRETS:
        return configured

    logger.warning("=" * 60)
    logger.warning("[SECURITY] JWT_SECRET is not set or uses an insecure default")
    logger.warning("[SECURITY] Generated a random secret for this process only")
    logger.warning("[SECURITY] Issued tokens become invalid when the server restarts")
    logger.warning("=" * 60)
    return secrets.token_hex(32)


def hash_password(password: str, rounds: int = 12) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def generate_refresh_token() -> str:
    """256-bit random token, hex encoded."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """Refresh tokens are only ever stored as their SHA-256 digest."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class InvalidTokenError(Exception):
    """Raised when an access token cannot be trusted."""


class TokenService:
    """Issues and verifies signed access tokens for one process."""

    def __init__(self, secret: str, ttl: timedelta):
        self._secret = secret
        self.ttl = ttl

    def issue(self, user_id: str, email: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "email": email,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> dict:
        """Return the claims of a valid access token or raise InvalidTokenError."""
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token expirado") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Token inválido") from e

        if claims.get("type") != ACCESS_TOKEN_TYPE or not claims.get("userId"):
            raise InvalidTokenError("Token inválido")
        return claims
