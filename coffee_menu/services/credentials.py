from __future__ import annotations

import logging
from typing import Union

from sqlalchemy.orm import Session

from coffee_menu.core.auth_context import PrincipalKind
from coffee_menu.core.errors import InvalidCredentials
from coffee_menu.models.principals import MainAdmin, ShopAdmin
from coffee_menu.services.passwords import burn_password_check, verify_password

logger = logging.getLogger(__name__)

Principal = Union[MainAdmin, ShopAdmin]

_PRINCIPAL_MODELS = {
    PrincipalKind.MAIN_ADMIN: MainAdmin,
    PrincipalKind.SHOP_ADMIN: ShopAdmin,
}


class CredentialStore:
    """Read-only lookups of admin principals plus password checks."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def model_for(kind: PrincipalKind):
        return _PRINCIPAL_MODELS[PrincipalKind(kind)]

    def find_active_by_username(self, kind: PrincipalKind, username: str) -> Principal | None:
        normalized_username = (username or "").strip()
        if not normalized_username:
            return None

        model = self.model_for(kind)
        return (
            self.db.query(model)
            .filter(model.username == normalized_username, model.is_active.is_(True))
            .first()
        )

    def authenticate(self, kind: PrincipalKind, username: str, password: str) -> Principal:
        principal = self.find_active_by_username(kind, username)
        if principal is None:
            burn_password_check(password)
            logger.info("Login rejected: kind=%s reason=unknown_or_inactive", PrincipalKind(kind).value)
            raise InvalidCredentials()

        if not verify_password(password, principal.password_hash):
            logger.info(
                "Login rejected: kind=%s principal_id=%s reason=bad_password",
                PrincipalKind(kind).value,
                principal.id,
            )
            raise InvalidCredentials()

        return principal
