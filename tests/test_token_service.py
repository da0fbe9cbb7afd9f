from types import SimpleNamespace

import pytest
from jose import jwt

from coffee_menu.core.auth_context import MainAdminClaims, PrincipalKind, ShopAdminClaims
from coffee_menu.core.config import TokenSettings
from coffee_menu.core.errors import InvalidToken
from coffee_menu.services.tokens import SECONDS_PER_HOUR, TokenService
from tests.fixtures_data import TEST_SECRET, TEST_TOKEN_SETTINGS

ISSUED_AT = 1_700_000_000


class _FixedClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _service(clock=None) -> TokenService:
    return TokenService(TEST_TOKEN_SETTINGS, clock=clock or _FixedClock(ISSUED_AT))


def test_main_admin_token_round_trip():
    service = _service()
    token = service.issue(principal_id=1, username="admin", kind=PrincipalKind.MAIN_ADMIN)

    claims = service.verify(token)

    assert isinstance(claims, MainAdminClaims)
    assert claims.principal_id == 1
    assert claims.username == "admin"
    assert claims.principal_kind is PrincipalKind.MAIN_ADMIN
    assert claims.shop_id is None
    assert claims.issued_at == ISSUED_AT
    assert claims.expires_at == ISSUED_AT + 24 * SECONDS_PER_HOUR


def test_shop_admin_token_round_trip_carries_shop_id():
    service = _service()
    token = service.issue(principal_id=4, username="barista", kind="shop_admin", shop_id=7)

    claims = service.verify(token)

    assert isinstance(claims, ShopAdminClaims)
    assert claims.principal_kind is PrincipalKind.SHOP_ADMIN
    assert claims.shop_id == 7


def test_token_payload_uses_wire_claim_names():
    token = _service().issue(principal_id=4, username="barista", kind=PrincipalKind.SHOP_ADMIN, shop_id=7)

    payload = jwt.get_unverified_claims(token)

    assert payload["user_id"] == 4
    assert payload["username"] == "barista"
    assert payload["type"] == "shop_admin"
    assert payload["shop_id"] == 7
    assert payload["exp"] - payload["iat"] == 24 * SECONDS_PER_HOUR


def test_shop_admin_token_valid_until_expiry_and_rejected_after():
    clock = _FixedClock(ISSUED_AT)
    service = _service(clock)
    token = service.issue(principal_id=4, username="barista", kind=PrincipalKind.SHOP_ADMIN, shop_id=7)
    expires_at = ISSUED_AT + 24 * SECONDS_PER_HOUR

    clock.now = expires_at - 1
    assert service.verify(token).shop_id == 7

    clock.now = expires_at + 1
    with pytest.raises(InvalidToken):
        service.verify(token)


def test_token_signed_with_other_secret_is_rejected():
    foreign = TokenService(TokenSettings(secret="another-secret"), clock=_FixedClock(ISSUED_AT))
    token = foreign.issue(principal_id=1, username="admin", kind=PrincipalKind.MAIN_ADMIN)

    with pytest.raises(InvalidToken) as exc:
        _service().verify(token)

    assert exc.value.status_code == 401
    assert exc.value.detail == "Invalid token"


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(InvalidToken):
        _service().verify(token)


def test_shop_admin_without_shop_id_cannot_be_issued():
    with pytest.raises(ValueError):
        _service().issue(principal_id=4, username="barista", kind=PrincipalKind.SHOP_ADMIN)


def test_main_admin_with_shop_id_cannot_be_issued():
    with pytest.raises(ValueError):
        _service().issue(principal_id=1, username="admin", kind=PrincipalKind.MAIN_ADMIN, shop_id=3)


def test_unknown_principal_type_is_rejected():
    payload = {"user_id": 1, "username": "admin", "type": "owner", "iat": ISSUED_AT, "exp": ISSUED_AT + 60}
    token = jwt.encode(payload, TEST_SECRET, algorithm="HS256")

    with pytest.raises(InvalidToken):
        _service().verify(token)


def test_shop_admin_payload_without_shop_id_is_rejected():
    payload = {
        "user_id": 4,
        "username": "barista",
        "type": "shop_admin",
        "shop_id": None,
        "iat": ISSUED_AT,
        "exp": ISSUED_AT + 60,
    }
    token = jwt.encode(payload, TEST_SECRET, algorithm="HS256")

    with pytest.raises(InvalidToken):
        _service().verify(token)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService(TokenSettings(secret=""))


def test_issue_for_infers_kind_from_stored_principal():
    service = _service()
    shop_admin = SimpleNamespace(id=9, username="manager", coffee_shop_id=3)
    main_admin = SimpleNamespace(id=1, username="admin")

    assert service.verify(service.issue_for(shop_admin)).shop_id == 3
    assert service.verify(service.issue_for(main_admin)).principal_kind is PrincipalKind.MAIN_ADMIN
