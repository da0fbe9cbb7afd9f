from __future__ import annotations

import logging

from fastapi import Request
from sqlalchemy.orm import Session

from coffee_menu.models.tenant import Tenant


logger = logging.getLogger(__name__)

# First host labels that never name a tenant: local development hosts and
# the leading octet of loopback / wildcard IP literals.
RESERVED_SUBDOMAINS = frozenset({"localhost", "127", "0"})


class TenantResolver:
    """Resolve the active tenant from the request host.

    A host without a usable subdomain, or one naming no active tenant, yields
    ``None``. Whether a tenant is mandatory is up to the caller.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def normalize_host(host: str) -> str:
        normalized = (host or "").split(",")[0].strip()
        if not normalized:
            return ""

        if "://" in normalized:
            normalized = normalized.split("://", 1)[1]

        normalized = normalized.split("/")[0].strip()
        # Userinfo never names the host.
        normalized = normalized.rpartition("@")[2]
        if ":" in normalized:
            normalized = normalized.split(":")[0].strip()
        return normalized

    @classmethod
    def extract_subdomain(cls, host: str) -> str | None:
        normalized_host = cls.normalize_host(host)
        parts = normalized_host.split(".")
        if len(parts) < 2:
            return None

        candidate = parts[0]
        if not candidate or candidate in RESERVED_SUBDOMAINS:
            return None
        return candidate

    @staticmethod
    def host_from_request(request: Request, trust_forwarded_host: bool = False) -> str:
        if trust_forwarded_host:
            forwarded_host = request.headers.get("x-forwarded-host")
            if forwarded_host:
                return forwarded_host
        return request.headers.get("host") or ""

    def find_active_by_subdomain(self, subdomain: str) -> Tenant | None:
        return (
            self.db.query(Tenant)
            .filter(Tenant.subdomain == subdomain, Tenant.is_active.is_(True))
            .first()
        )

    def resolve(self, host: str) -> Tenant | None:
        subdomain = self.extract_subdomain(host)
        if subdomain is None:
            return None

        tenant = self.find_active_by_subdomain(subdomain)
        if tenant is None:
            logger.info("Tenant resolution: no active tenant for subdomain=%s", subdomain)
        return tenant

    def resolve_from_request(self, request: Request, trust_forwarded_host: bool = False) -> Tenant | None:
        return self.resolve(self.host_from_request(request, trust_forwarded_host=trust_forwarded_host))
