"""Registration, login and token lifecycle."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from caixa.errors import ConflictError, UnauthenticatedError, raise_if_invalid
from caixa.models import RefreshToken, User
from caixa.sanitization import sanitize_string
from caixa.security import (
    InvalidTokenError,
    TokenService,
    generate_refresh_token,
    hash_password,
    hash_token,
    verify_password,
)
from caixa.validation import (
    collect,
    validate_email,
    validate_max_bytes,
    validate_min_length,
    validate_required,
    validate_text,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt rejects anything longer than 72 bytes
MAX_PASSWORD_BYTES = 72
INVALID_CREDENTIALS = "Credenciais inválidas"


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AuthService:
    """
    Handles user registration and authentication.

    Access tokens are short JWTs; refresh tokens are random values stored
    only as SHA-256 digests and rotated on every use.
    """

    def __init__(
        self,
        db: Session,
        tokens: TokenService,
        refresh_ttl: timedelta = timedelta(days=7),
        bcrypt_rounds: int = 12,
    ):
        self.db = db
        self.tokens = tokens
        self.refresh_ttl = refresh_ttl
        self.bcrypt_rounds = bcrypt_rounds

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> Tuple[User, TokenPair]:
        email = normalize_email(email)
        password = password or ""

        raise_if_invalid(collect(
            validate_text(name, "name", 100, required=True),
            validate_email(email),
            validate_required(password, "password") or validate_min_length(password, MIN_PASSWORD_LENGTH, "password"),
            validate_max_bytes(password, MAX_PASSWORD_BYTES, "password"),
        ))

        if self.db.query(User).filter(User.email == email).first():
            raise ConflictError("Email já cadastrado", code="EMAIL_EXISTS")

        user = User(
            name=sanitize_string(name),
            email=email,
            password_hash=hash_password(password, self.bcrypt_rounds),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            self.db.rollback()
            raise ConflictError("Email já cadastrado", code="EMAIL_EXISTS")
        self.db.refresh(user)

        logger.info("[SECURITY] user registered: %s", user.id)
        return user, self._issue_pair(user)

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, TokenPair]:
        email = normalize_email(email)

        raise_if_invalid(collect(
            validate_email(email),
            validate_required(password, "password"),
        ))

        user = self.db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.password_hash):
            logger.warning("[SECURITY] failed login attempt")
            raise UnauthenticatedError(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

        logger.info("[SECURITY] user logged in: %s", user.id)
        return user, self._issue_pair(user)

    def get_current_user(self, token: Optional[str]) -> User:
        if not token:
            raise UnauthenticatedError("Missing authorization token")
        try:
            claims = self.tokens.decode(token)
        except InvalidTokenError as e:
            raise UnauthenticatedError(str(e), code="INVALID_TOKEN")

        user = self.db.query(User).filter(User.id == claims["userId"]).first()
        if not user:
            raise UnauthenticatedError("Token inválido", code="INVALID_TOKEN")
        return user

    def refresh(self, raw_token: Optional[str]) -> Tuple[User, TokenPair]:
        """Rotate a refresh token. Presenting a revoked token revokes them all."""
        if not raw_token:
            raise UnauthenticatedError("Refresh token ausente", code="INVALID_REFRESH_TOKEN")

        stored = self._find(raw_token)
        if not stored:
            raise UnauthenticatedError("Refresh token inválido", code="INVALID_REFRESH_TOKEN")

        now = datetime.utcnow()
        if stored.is_revoked:
            revoked = self._revoke_all(stored.user_id, now)
            self.db.commit()
            logger.warning(
                "[SECURITY] refresh token reuse for user %s, revoked %d tokens",
                stored.user_id, revoked,
            )
            raise UnauthenticatedError("Refresh token inválido", code="TOKEN_REUSE")

        if stored.is_expired(now):
            raise UnauthenticatedError("Refresh token expirado", code="INVALID_REFRESH_TOKEN")

        stored.revoked_at = now
        user = stored.user
        pair = self._issue_pair(user)
        logger.info("[SECURITY] refresh token rotated for user %s", user.id)
        return user, pair

    def logout(self, raw_token: Optional[str]) -> None:
        """Revoke one refresh token. Unknown tokens are ignored."""
        if not raw_token:
            return
        stored = self._find(raw_token)
        if stored and not stored.is_revoked:
            stored.revoked_at = datetime.utcnow()
            self.db.commit()
            logger.info("[SECURITY] user %s logged out", stored.user_id)

    def logout_all(self, user: User) -> int:
        revoked = self._revoke_all(user.id, datetime.utcnow())
        self.db.commit()
        logger.info("[SECURITY] user %s logged out of %d sessions", user.id, revoked)
        return revoked

    def _find(self, raw_token: str) -> Optional[RefreshToken]:
        return self.db.query(RefreshToken).filter(
            RefreshToken.token_hash == hash_token(raw_token)
        ).first()

    def _revoke_all(self, user_id: str, now: datetime) -> int:
        return self.db.query(RefreshToken).filter(
            RefreshToken.user_id == user_id,
            RefreshToken.revoked_at.is_(None),
        ).update({"revoked_at": now}, synchronize_session=False)

    def _issue_pair(self, user: User) -> TokenPair:
        raw_refresh = generate_refresh_token()
        self.db.add(RefreshToken(
            user_id=user.id,
            token_hash=hash_token(raw_refresh),
            expires_at=datetime.utcnow() + self.refresh_ttl,
        ))
        self.db.commit()
        return TokenPair(
            access_token=self.tokens.issue(user.id, user.email),
            refresh_token=raw_refresh,
            expires_in=int(self.tokens.ttl.total_seconds()),
        )
