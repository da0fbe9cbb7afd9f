from __future__ import annotations

import logging

from coffee_menu.core.auth_context import PrincipalKind, RequestScope, SessionClaims
from coffee_menu.core.errors import (
    MissingAuthorizationHeader,
    MissingBearerPrefix,
    RoleMismatch,
    ScopeMismatch,
)
from coffee_menu.services.tokens import TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

_ROLE_DENIED_DETAIL = {
    PrincipalKind.MAIN_ADMIN: "Main admin access required",
    PrincipalKind.SHOP_ADMIN: "Shop admin access required",
}


class AccessGate:
    """Ordered authorization stages for admin routes.

    Each stage is a separate call so routes can compose only the ones they
    need: bearer extraction, token verification, claim projection, role gate
    and, for shop admins, the shop/tenant consistency check.
    """

    def __init__(self, tokens: TokenService, *, enforce_shop_tenant_scope: bool = True) -> None:
        self.tokens = tokens
        self.enforce_shop_tenant_scope = enforce_shop_tenant_scope

    @staticmethod
    def extract_bearer(authorization: str | None) -> str:
        if not authorization:
            raise MissingAuthorizationHeader()
        if not authorization.startswith(BEARER_PREFIX):
            raise MissingBearerPrefix()

        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            raise MissingBearerPrefix()
        return token

    def authenticate(self, authorization: str | None) -> SessionClaims:
        token = self.extract_bearer(authorization)
        return self.tokens.verify(token)

    @staticmethod
    def project(scope: RequestScope, claims: SessionClaims) -> RequestScope:
        scope.claims = claims
        return scope

    def require_kind(self, scope: RequestScope, kind: PrincipalKind, *, endpoint: str | None = None) -> SessionClaims:
        kind = PrincipalKind(kind)
        claims = scope.claims
        if claims is None or claims.principal_kind is not kind:
            self.log_access_denied(reason="role_denied", scope=scope, endpoint=endpoint)
            raise RoleMismatch(_ROLE_DENIED_DETAIL[kind])
        return claims

    def ensure_shop_in_tenant(self, scope: RequestScope, shop, *, endpoint: str | None = None) -> None:
        """Check that the token's shop belongs to the host-resolved tenant.

        ``shop`` is the stored shop for ``scope.shop_id`` (or ``None`` when it
        no longer exists). Without a resolved tenant there is nothing to
        compare against and the check passes.
        """
        if not self.enforce_shop_tenant_scope or scope.tenant_id is None:
            return
        if shop is None or int(shop.tenant_id) != int(scope.tenant_id):
            self.log_access_denied(reason="tenant_mismatch", scope=scope, endpoint=endpoint)
            raise ScopeMismatch()

    @staticmethod
    def log_access_denied(*, reason: str, scope: RequestScope, endpoint: str | None) -> None:
        logger.warning(
            "Access denied (%s): principal_id=%s principal_kind=%s shop_id=%s tenant_id=%s endpoint=%s",
            reason,
            scope.principal_id,
            scope.principal_kind.value if scope.principal_kind else None,
            scope.shop_id,
            scope.tenant_id,
            endpoint,
        )
