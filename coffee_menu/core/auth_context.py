from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Union


class PrincipalKind(str, Enum):
    MAIN_ADMIN = "main_admin"
    SHOP_ADMIN = "shop_admin"


@dataclass(frozen=True)
class MainAdminClaims:
    principal_id: int
    username: str
    issued_at: int
    expires_at: int

    principal_kind: ClassVar[PrincipalKind] = PrincipalKind.MAIN_ADMIN
    shop_id: ClassVar[None] = None


@dataclass(frozen=True)
class ShopAdminClaims:
    principal_id: int
    username: str
    shop_id: int
    issued_at: int
    expires_at: int

    principal_kind: ClassVar[PrincipalKind] = PrincipalKind.SHOP_ADMIN


SessionClaims = Union[MainAdminClaims, ShopAdminClaims]


@dataclass
class RequestScope:
    """Per-request authorization state, filled in by the dependency stages.

    ``tenant`` comes from host resolution and ``claims`` from the verified
    bearer token. Shop scope is only ever read from the claims.
    """

    tenant: Optional[Any] = None
    claims: Optional[SessionClaims] = None

    @property
    def tenant_id(self) -> int | None:
        if self.tenant is None:
            return None
        return self.tenant.id

    @property
    def principal_kind(self) -> PrincipalKind | None:
        if self.claims is None:
            return None
        return self.claims.principal_kind

    @property
    def principal_id(self) -> int | None:
        if self.claims is None:
            return None
        return self.claims.principal_id

    @property
    def shop_id(self) -> int | None:
        if self.claims is None:
            return None
        return self.claims.shop_id
