import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from coffee_menu.core.database import get_db
from coffee_menu.core.request_context import get_tenant_id
from coffee_menu.models.coffee_shop import CoffeeShop
from coffee_menu.routers.public_menu import router as public_menu_router
from tests.fixtures_data import CLOSED_TENANT, DEMO_SHOP_ID, build_session_factory, seed_platform


def _build_public_client():
    db = build_session_factory()()
    seed_platform(db)

    app = FastAPI()
    app.include_router(public_menu_router)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app), db


def test_public_menu_by_subdomain():
    client, _ = _build_public_client()

    response = client.get("/api/public/menu", headers={"host": "demo.example.com"})

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Green Tea", "Espresso"]
    assert response.json()[0]["category"]["display_name"] == "Tea"


def test_public_menu_isolated_per_tenant():
    client, _ = _build_public_client()

    response = client.get("/api/public/menu", headers={"host": "other.example.com:8080"})

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Latte"]


def test_public_menu_without_tenant_is_400():
    client, _ = _build_public_client()

    for host in ("localhost:8080", "127.0.0.1:8080", "ghost.example.com", f"{CLOSED_TENANT['subdomain']}.example.com"):
        response = client.get("/api/public/menu", headers={"host": host})
        assert response.status_code == 400, host
        assert response.json() == {"detail": "Tenant not found"}


def test_public_menu_hides_items_of_inactive_shops():
    client, db = _build_public_client()
    db.query(CoffeeShop).filter(CoffeeShop.id == DEMO_SHOP_ID).update({"is_active": False})
    db.commit()

    response = client.get("/api/public/menu", headers={"host": "demo.example.com"})

    assert response.status_code == 200
    assert response.json() == []


def test_public_shop_profile():
    client, _ = _build_public_client()

    response = client.get("/api/public/shop", headers={"host": "demo.example.com"})

    assert response.status_code == 200
    assert response.json()["id"] == DEMO_SHOP_ID
    assert response.json()["location"] == "Tehran"


def test_public_shop_without_active_shop_is_404():
    client, db = _build_public_client()
    db.query(CoffeeShop).filter(CoffeeShop.id == DEMO_SHOP_ID).update({"is_active": False})
    db.commit()

    response = client.get("/api/public/shop", headers={"host": "demo.example.com"})

    assert response.status_code == 404


def test_public_categories_need_no_tenant():
    client, _ = _build_public_client()

    response = client.get("/api/public/categories", headers={"host": "localhost:8080"})

    assert response.status_code == 200
    assert [category["name"] for category in response.json()] == ["coffee", "tea"]


class _TenantCapture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.tenant_ids = []

    def emit(self, record):
        self.tenant_ids.append(get_tenant_id())


def test_public_menu_log_lines_carry_tenant():
    client, _ = _build_public_client()
    handler = _TenantCapture()
    handler_logger = logging.getLogger("coffee_menu.routers.public_menu")
    previous_level = handler_logger.level
    handler_logger.addHandler(handler)
    handler_logger.setLevel(logging.INFO)
    try:
        response = client.get("/api/public/menu", headers={"host": "other.example.com"})
    finally:
        handler_logger.removeHandler(handler)
        handler_logger.setLevel(previous_level)

    assert response.status_code == 200
    assert handler.tenant_ids == ["2"]
