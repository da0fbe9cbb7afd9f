import pytest
from fastapi.testclient import TestClient


REQUIRED_ROUTES = {
    "/api/public/menu",
    "/api/public/shop",
    "/api/public/categories",
    "/api/auth/main-admin/login",
    "/api/auth/shop-admin/login",
    "/api/auth/me",
    "/api/admin/tenants",
    "/api/admin/tenants/{tenant_id}",
    "/api/admin/tenants/{tenant_id}/shops",
    "/api/admin/shops/{shop_id}",
    "/api/admin/shops/{shop_id}/admins",
    "/api/admin/shop-admins/{admin_id}",
    "/api/admin/categories",
    "/api/admin/categories/{category_id}",
    "/api/admin/menu",
    "/api/admin/menu/categories",
    "/api/admin/menu/{item_id}",
    "/api/admin/settings",
}


def test_api_startup_and_router_registration(monkeypatch):
    from coffee_menu import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        response = client.get("/")
        health_response = client.get("/health")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert health_response.json() == {"status": "healthy"}
    assert response.headers.get("x-request-id")
    assert response.headers.get("x-ratelimit-limit")
    assert openapi_response.status_code == 200

    paths = set(openapi_response.json()["paths"])
    assert REQUIRED_ROUTES.issubset(paths)


def test_startup_tasks_stop_on_invalid_environment(monkeypatch):
    from coffee_menu import main

    def _refuse():
        raise RuntimeError("SQLite is forbidden in production environment")

    monkeypatch.setattr(main, "validate_database_environment", _refuse)

    with pytest.raises(RuntimeError):
        main._startup_tasks()
