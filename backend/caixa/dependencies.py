"""
FastAPI dependencies.
"""

import logging
from datetime import timedelta
from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from caixa.database import get_db
from caixa.errors import RateLimitedError, UnauthenticatedError
from caixa.models import User
from caixa.ratelimit import RateLimiter
from caixa.services.auth_service import AuthService
from caixa.services.cnpj_service import CnpjClient
from caixa.services.quote_service import QuoteService

logger = logging.getLogger(__name__)


def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthService:
    state = request.app.state
    return AuthService(
        db,
        state.tokens,
        refresh_ttl=timedelta(days=state.settings.refresh_token_expire_days),
        bcrypt_rounds=state.settings.bcrypt_rounds,
    )


def get_quote_service(request: Request, db: Session = Depends(get_db)) -> QuoteService:
    return QuoteService(db, request.app.state.quote_locks)


def get_cnpj_client(request: Request) -> CnpjClient:
    return request.app.state.cnpj_client


def bearer_token(request: Request) -> str:
    """Extract the token from ``Authorization: Bearer <token>``."""
    header: Optional[str] = request.headers.get("Authorization")
    if not header:
        raise UnauthenticatedError("Missing authorization token")

    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Invalid authorization format", code="INVALID_TOKEN")
    return token.strip()


def get_current_user(
    token: str = Depends(bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    return auth.get_current_user(token)


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _enforce_limit(request: Request, policy_name: str, key: str) -> None:
    state = request.app.state
    if not state.settings.rate_limit_enabled:
        return

    policy = state.rate_limit_policies[policy_name]
    limiter: RateLimiter = state.rate_limiter
    retry_after = limiter.hit(f"{policy.name}:{key}", policy.max_requests)
    if retry_after is not None:
        logger.warning("[SECURITY] %s rate limit reached for %s", policy.name, key)
        raise RateLimitedError(policy.message, retry_after)


def limit_by_client(policy_name: str) -> Callable[[Request], None]:
    """Rate limit keyed by client address, for unauthenticated routes."""
    def dependency(request: Request) -> None:
        _enforce_limit(request, policy_name, client_address(request))
    return dependency


def limit_by_user(policy_name: str) -> Callable[..., None]:
    """Rate limit keyed by client address and the authenticated user."""
    def dependency(request: Request, user: User = Depends(get_current_user)) -> None:
        _enforce_limit(request, policy_name, f"{client_address(request)}-{user.id}")
    return dependency
