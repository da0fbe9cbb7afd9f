from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from jose import JWTError, jwt

from coffee_menu.core.auth_context import (
    MainAdminClaims,
    PrincipalKind,
    SessionClaims,
    ShopAdminClaims,
)
from coffee_menu.core.config import TokenSettings
from coffee_menu.core.errors import InvalidToken

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def _as_int(value: Any) -> Optional[int]:
    # bool is an int subclass; a boolean claim is never a valid id or timestamp
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class TokenService:
    """Issue and verify HS256 session tokens.

    The clock is injectable so expiry can be checked against a fixed instant;
    it returns POSIX seconds like ``time.time``.
    """

    def __init__(self, settings: TokenSettings, clock: Callable[[], float] = time.time) -> None:
        if not settings.secret:
            raise ValueError("Token secret must not be empty")
        self.settings = settings
        self._clock = clock

    def issue(
        self,
        *,
        principal_id: int,
        username: str,
        kind: PrincipalKind,
        shop_id: int | None = None,
    ) -> str:
        kind = PrincipalKind(kind)
        if kind is PrincipalKind.SHOP_ADMIN and shop_id is None:
            raise ValueError("shop_id is required for shop_admin tokens")
        if kind is PrincipalKind.MAIN_ADMIN and shop_id is not None:
            raise ValueError("shop_id is not allowed for main_admin tokens")

        issued_at = int(self._clock())
        expires_at = issued_at + self.settings.expire_hours * SECONDS_PER_HOUR

        # "sub" must be a string for the JWT libraries; user_id keeps the numeric id.
        payload: Dict[str, Any] = {
            "sub": str(principal_id),
            "user_id": int(principal_id),
            "username": username,
            "type": kind.value,
            "shop_id": shop_id,
            "iat": issued_at,
            "exp": expires_at,
        }
        return jwt.encode(payload, self.settings.secret, algorithm=self.settings.algorithm)

    def issue_for(self, principal) -> str:
        """Issue a token for a stored ``MainAdmin`` or ``ShopAdmin`` row."""
        shop_id = getattr(principal, "coffee_shop_id", None)
        kind = PrincipalKind.SHOP_ADMIN if shop_id is not None else PrincipalKind.MAIN_ADMIN
        return self.issue(
            principal_id=principal.id,
            username=principal.username,
            kind=kind,
            shop_id=shop_id,
        )

    def verify(self, token: str) -> SessionClaims:
        try:
            # Expiry is checked below against the injected clock.
            payload = jwt.decode(
                token,
                self.settings.secret,
                algorithms=[self.settings.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.debug("Token rejected: %s", type(exc).__name__)
            raise InvalidToken() from exc

        claims = self._claims_from_payload(payload)

        if self._clock() > claims.expires_at:
            logger.debug("Token rejected: expired principal_id=%s", claims.principal_id)
            raise InvalidToken()

        return claims

    @staticmethod
    def _claims_from_payload(payload: Dict[str, Any]) -> SessionClaims:
        principal_id = _as_int(payload.get("user_id", payload.get("sub")))
        username = payload.get("username")
        issued_at = _as_int(payload.get("iat"))
        expires_at = _as_int(payload.get("exp"))
        raw_shop_id = payload.get("shop_id")

        if principal_id is None or not isinstance(username, str) or issued_at is None or expires_at is None:
            raise InvalidToken()

        try:
            kind = PrincipalKind(payload.get("type"))
        except ValueError as exc:
            raise InvalidToken() from exc

        if kind is PrincipalKind.MAIN_ADMIN:
            if raw_shop_id is not None:
                raise InvalidToken()
            return MainAdminClaims(
                principal_id=principal_id,
                username=username,
                issued_at=issued_at,
                expires_at=expires_at,
            )

        shop_id = _as_int(raw_shop_id)
        if shop_id is None:
            raise InvalidToken()
        return ShopAdminClaims(
            principal_id=principal_id,
            username=username,
            shop_id=shop_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )
