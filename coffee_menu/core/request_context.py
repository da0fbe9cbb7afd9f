from __future__ import annotations

from contextvars import ContextVar
from typing import Any


_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("request_id", default=None)
_TENANT_ID_CTX: ContextVar[str | None] = ContextVar("tenant_id", default=None)
_PRINCIPAL_CTX: ContextVar[str | None] = ContextVar("principal", default=None)


def set_request_context(
    *, request_id: str | None = None, tenant_id: str | None = None, principal: str | None = None
) -> None:
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if tenant_id is not None:
        _TENANT_ID_CTX.set(tenant_id)
    if principal is not None:
        _PRINCIPAL_CTX.set(principal)


def principal_label(scope: Any) -> str | None:
    """``<kind>:<id>`` for the verified principal of a request scope, if any."""
    kind = getattr(scope, "principal_kind", None)
    if kind is None:
        return None
    return f"{getattr(kind, 'value', kind)}:{scope.principal_id}"


def scope_labels(scope: Any) -> tuple[str | None, str | None]:
    if scope is None:
        return None, None
    tenant_id = getattr(scope, "tenant_id", None)
    return (str(tenant_id) if tenant_id is not None else None), principal_label(scope)


def bind_request_scope(scope: Any) -> None:
    """Copy the scope's tenant and principal into the logging context.

    Sync dependencies run on a copy of the context in a worker thread, so
    this has to be called from code running on the event loop (an ``async``
    dependency) for later handler log lines to see the values.
    """
    tenant_id, principal = scope_labels(scope)
    set_request_context(tenant_id=tenant_id, principal=principal)


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


def get_tenant_id() -> str | None:
    return _TENANT_ID_CTX.get()


def get_principal() -> str | None:
    return _PRINCIPAL_CTX.get()


def request_context_snapshot() -> dict[str, str | None]:
    return {
        "request_id": _REQUEST_ID_CTX.get(),
        "tenant_id": _TENANT_ID_CTX.get(),
        "principal": _PRINCIPAL_CTX.get(),
    }


def clear_request_context() -> None:
    _REQUEST_ID_CTX.set(None)
    _TENANT_ID_CTX.set(None)
    _PRINCIPAL_CTX.set(None)
