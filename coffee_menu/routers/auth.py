from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from coffee_menu.core.auth_context import PrincipalKind, SessionClaims
from coffee_menu.core.errors import InvalidCredentials
from coffee_menu.deps import get_credential_store, get_session_claims, get_token_service, raise_http_error
from coffee_menu.services.credentials import CredentialStore
from coffee_menu.services.tokens import TokenService

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


class LoginPayload(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class PrincipalRead(BaseModel):
    id: int
    username: str
    is_active: bool
    coffee_shop_id: Optional[int] = None


class LoginResponse(BaseModel):
    token: str
    user: PrincipalRead


class SessionRead(BaseModel):
    principal_id: int
    username: str
    principal_kind: PrincipalKind
    shop_id: Optional[int] = None
    issued_at: int
    expires_at: int


def _login(
    kind: PrincipalKind,
    payload: LoginPayload,
    credentials: CredentialStore,
    tokens: TokenService,
) -> dict:
    try:
        principal = credentials.authenticate(kind, payload.username, payload.password)
    except InvalidCredentials as exc:
        raise_http_error(exc)

    token = tokens.issue_for(principal)
    logger.info("Login success: kind=%s principal_id=%s", kind.value, principal.id)
    return {
        "token": token,
        "user": {
            "id": principal.id,
            "username": principal.username,
            "is_active": principal.is_active,
            "coffee_shop_id": getattr(principal, "coffee_shop_id", None),
        },
    }


@router.post("/main-admin/login", response_model=LoginResponse)
def main_admin_login(
    payload: LoginPayload,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    return _login(PrincipalKind.MAIN_ADMIN, payload, credentials, tokens)


@router.post("/shop-admin/login", response_model=LoginResponse)
def shop_admin_login(
    payload: LoginPayload,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    return _login(PrincipalKind.SHOP_ADMIN, payload, credentials, tokens)


@router.get("/me", response_model=SessionRead)
def current_session(claims: SessionClaims = Depends(get_session_claims)):
    return {
        "principal_id": claims.principal_id,
        "username": claims.username,
        "principal_kind": claims.principal_kind,
        "shop_id": claims.shop_id,
        "issued_at": claims.issued_at,
        "expires_at": claims.expires_at,
    }
