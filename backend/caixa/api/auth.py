"""
Auth API endpoints.
"""

from fastapi import APIRouter, Depends

from caixa.dependencies import get_auth_service, get_current_user, limit_by_client
from caixa.models import User
from caixa.ratelimit import AUTH
from caixa.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutAllResponse,
    RefreshRequest,
    RegisterRequest,
    UserResponse,
)
from caixa.schemas.common import MessageResponse
from caixa.services.auth_service import AuthService, TokenPair

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user: User, pair: TokenPair) -> AuthResponse:
    return AuthResponse(
        token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    dependencies=[Depends(limit_by_client(AUTH))],
)
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """Create an account and return a token pair."""
    user, pair = auth.register(body.name, body.email, body.password)
    return _auth_response(user, pair)


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(limit_by_client(AUTH))],
)
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    user, pair = auth.login(body.email, body.password)
    return _auth_response(user, pair)


@router.post(
    "/refresh",
    response_model=AuthResponse,
    dependencies=[Depends(limit_by_client(AUTH))],
)
def refresh(body: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    """Exchange a refresh token for a new pair; the old refresh token stops working."""
    user, pair = auth.refresh(body.refresh_token)
    return _auth_response(user, pair)


@router.post("/logout", response_model=MessageResponse)
def logout(body: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    auth.logout(body.refresh_token)
    return MessageResponse(message="Logout realizado com sucesso")


@router.post("/logout-all", response_model=LogoutAllResponse)
def logout_all(
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Revoke every refresh token of the current user."""
    revoked = auth.logout_all(user)
    return LogoutAllResponse(message="Todas as sessões foram encerradas", revoked=revoked)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user
