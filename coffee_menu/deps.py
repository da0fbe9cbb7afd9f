# coffee_menu/deps.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import NoReturn, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coffee_menu.core.auth_context import PrincipalKind, RequestScope, SessionClaims
from coffee_menu.core.config import ENFORCE_SHOP_TENANT_SCOPE, TRUST_FORWARDED_HOST, load_token_settings
from coffee_menu.core.database import get_db
from coffee_menu.core.errors import AccessError, AuthenticationError, AuthorizationError
from coffee_menu.core.request_context import bind_request_scope
from coffee_menu.models.coffee_shop import CoffeeShop
from coffee_menu.models.tenant import Tenant
from coffee_menu.services.access_control import AccessGate
from coffee_menu.services.credentials import CredentialStore
from coffee_menu.services.tenant_resolver import TenantResolver
from coffee_menu.services.tokens import TokenService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _default_token_service() -> TokenService:
    return TokenService(load_token_settings())


def get_token_service() -> TokenService:
    """Process-wide token service built from the environment on first use."""
    return _default_token_service()


def get_access_gate(tokens: TokenService = Depends(get_token_service)) -> AccessGate:
    return AccessGate(tokens, enforce_shop_tenant_scope=ENFORCE_SHOP_TENANT_SCOPE)


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def raise_http_error(exc: AccessError) -> NoReturn:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    raise HTTPException(status_code=exc.status_code, detail=exc.detail, headers=headers) from exc


def commit_or_conflict(db: Session, *, detail: str) -> None:
    """Commit, turning a unique-constraint race into 409."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Commit rejected by constraint: %s", detail)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail) from exc


def _endpoint(request: Request) -> str:
    return f"{request.method} {request.url.path}"


def get_request_scope(request: Request) -> RequestScope:
    scope = getattr(request.state, "scope", None)
    if scope is None:
        scope = RequestScope()
        request.state.scope = scope
    return scope


def resolve_request_tenant(request: Request, db: Session = Depends(get_db)) -> Optional[Tenant]:
    """Attach the host's tenant (or nothing) to the request scope. Never rejects."""
    scope = get_request_scope(request)
    tenant = TenantResolver(db).resolve_from_request(request, trust_forwarded_host=TRUST_FORWARDED_HOST)
    scope.tenant = tenant
    return tenant


async def require_request_tenant(
    request: Request,
    tenant: Optional[Tenant] = Depends(resolve_request_tenant),
) -> Tenant:
    if tenant is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tenant not found")
    bind_request_scope(get_request_scope(request))
    return tenant


def get_session_claims(request: Request, gate: AccessGate = Depends(get_access_gate)) -> SessionClaims:
    try:
        claims = gate.authenticate(request.headers.get("authorization"))
    except AuthenticationError as exc:
        logger.info("Authentication failed (%s): endpoint=%s", type(exc).__name__, _endpoint(request))
        raise_http_error(exc)

    gate.project(get_request_scope(request), claims)
    return claims


def check_main_admin(
    request: Request,
    _claims: SessionClaims = Depends(get_session_claims),
    gate: AccessGate = Depends(get_access_gate),
) -> RequestScope:
    scope = get_request_scope(request)
    try:
        gate.require_kind(scope, PrincipalKind.MAIN_ADMIN, endpoint=_endpoint(request))
    except AuthorizationError as exc:
        raise_http_error(exc)
    return scope


def check_shop_admin(
    request: Request,
    _tenant: Optional[Tenant] = Depends(resolve_request_tenant),
    _claims: SessionClaims = Depends(get_session_claims),
    gate: AccessGate = Depends(get_access_gate),
    db: Session = Depends(get_db),
) -> RequestScope:
    """Tenant resolution, then authentication, then the shop-admin role gate."""
    scope = get_request_scope(request)
    endpoint = _endpoint(request)
    try:
        gate.require_kind(scope, PrincipalKind.SHOP_ADMIN, endpoint=endpoint)

        shop = None
        if gate.enforce_shop_tenant_scope and scope.tenant_id is not None:
            shop = db.query(CoffeeShop).filter(CoffeeShop.id == scope.shop_id).first()
        gate.ensure_shop_in_tenant(scope, shop, endpoint=endpoint)
    except AuthorizationError as exc:
        raise_http_error(exc)
    return scope


# Route-facing gates. Async: the logging context is bound on the event loop and
# inherited by the handler.

async def require_main_admin(scope: RequestScope = Depends(check_main_admin)) -> RequestScope:
    bind_request_scope(scope)
    return scope


async def require_shop_admin(scope: RequestScope = Depends(check_shop_admin)) -> RequestScope:
    bind_request_scope(scope)
    return scope
