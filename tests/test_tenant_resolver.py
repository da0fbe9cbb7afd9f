import pytest
from starlette.requests import Request

from coffee_menu.services.tenant_resolver import TenantResolver
from tests.fixtures_data import CLOSED_TENANT, DEMO_TENANT, build_session_factory, seed_platform


def _request(host: str | None = None, forwarded_host: str | None = None) -> Request:
    headers = []
    if host is not None:
        headers.append((b"host", host.encode()))
    if forwarded_host is not None:
        headers.append((b"x-forwarded-host", forwarded_host.encode()))
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/public/menu",
        "query_string": b"",
        "headers": headers,
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
        "scheme": "http",
    }
    return Request(scope)


@pytest.fixture
def resolver():
    session_factory = build_session_factory()
    db = session_factory()
    seed_platform(db)
    try:
        yield TenantResolver(db)
    finally:
        db.close()


@pytest.mark.parametrize(
    "host,expected",
    [
        ("demo.example.com", "demo"),
        ("demo.example.com:8080", "demo"),
        ("demo.localhost", "demo"),
        ("https://demo.example.com/menu", "demo"),
        ("demo.example.com, proxy.internal", "demo"),
        ("localhost:8080", None),
        ("localhost", None),
        ("127.0.0.1:8080", None),
        ("0.0.0.0", None),
        ("example", None),
        ("", None),
        (".example.com", None),
    ],
)
def test_extract_subdomain(host, expected):
    assert TenantResolver.extract_subdomain(host) == expected


def test_extract_subdomain_keeps_case():
    assert TenantResolver.extract_subdomain("Demo.example.com") == "Demo"


@pytest.mark.parametrize(
    "host",
    ["Demo.example.com", "https://Demo.example.com", "http://Demo.example.com:8080/menu", "https://user@Demo.example.com"],
)
def test_scheme_does_not_change_subdomain_case(host):
    assert TenantResolver.extract_subdomain(host) == "Demo"


def test_resolve_with_scheme_is_still_case_sensitive(resolver):
    assert resolver.resolve("https://DEMO.example.com") is None
    assert resolver.resolve("https://demo.example.com").subdomain == "demo"


def test_resolve_returns_active_tenant(resolver):
    tenant = resolver.resolve("demo.example.com")

    assert tenant is not None
    assert tenant.id == DEMO_TENANT["id"]


def test_resolve_ignores_inactive_tenant(resolver):
    assert resolver.resolve(f"{CLOSED_TENANT['subdomain']}.example.com") is None


def test_resolve_unknown_subdomain_is_not_an_error(resolver):
    assert resolver.resolve("ghost.example.com") is None


def test_resolve_is_case_sensitive(resolver):
    assert resolver.resolve("DEMO.example.com") is None


def test_resolve_without_subdomain(resolver):
    assert resolver.resolve("localhost:8080") is None


def test_resolve_from_request_uses_host_header(resolver):
    tenant = resolver.resolve_from_request(_request(host="demo.example.com"))

    assert tenant is not None
    assert tenant.subdomain == "demo"


def test_forwarded_host_ignored_unless_trusted(resolver):
    request = _request(host="api.example.com", forwarded_host="demo.example.com")

    assert resolver.resolve_from_request(request) is None
    trusted = resolver.resolve_from_request(request, trust_forwarded_host=True)
    assert trusted is not None
    assert trusted.subdomain == "demo"


def test_missing_host_header_resolves_nothing(resolver):
    assert resolver.resolve_from_request(_request()) is None
