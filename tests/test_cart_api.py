"""
Tests for the cart HTTP endpoints.

Tests cover:
- Cart token cookie issuance and reuse
- camelCase wire format
- Bearer token keying and rejection
- Mapping of collaborator failures to HTTP errors
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt
import pytest
from sqlalchemy.exc import OperationalError

from shared.config.settings import settings


def make_token(user_id, **overrides):
    """Access token as issued by the external auth service."""
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=15),
    }
    payload.update(overrides)
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def bearer(user_id, **overrides):
    return {"Authorization": f"Bearer {make_token(user_id, **overrides)}"}


class TestGetCart:
    """Tests for GET /api/cart"""

    def test_first_visit_issues_cookie(self, client):
        response = client.get("/api/cart")

        assert response.status_code == 200
        token = response.cookies.get("cartToken")
        assert token
        data = response.json()
        assert data["cartToken"] == token
        assert data["items"] == []
        assert data["totals"] == {"subtotal": 0, "discountTotal": 0, "total": 0}

    def test_cookie_is_http_only(self, client):
        response = client.get("/api/cart")

        set_cookie = response.headers["set-cookie"]
        assert "cartToken=" in set_cookie
        assert "httponly" in set_cookie.lower()
        assert "Max-Age=2592000" in set_cookie

    def test_existing_cookie_is_reused(self, client):
        client.cookies.set("cartToken", "known-token")

        response = client.get("/api/cart")

        assert response.json()["cartToken"] == "known-token"
        assert "set-cookie" not in response.headers

    def test_oversized_cookie_is_replaced(self, client):
        client.cookies.set("cartToken", "x" * 500)

        response = client.get("/api/cart")

        assert response.json()["cartToken"] != "x" * 500
        assert response.cookies.get("cartToken")

    def test_cache_outage_serves_empty_cart(self, client, fake_redis):
        fake_redis.fail_reads = True

        response = client.get("/api/cart")

        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_undecodable_cart_served_empty_and_kept(self, client, fake_redis):
        client.cookies.set("cartToken", "known-token")
        fake_redis.store["cart:token:known-token"] = '{"cartToken": "known'

        response = client.get("/api/cart")

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert fake_redis.store["cart:token:known-token"] == '{"cartToken": "known'

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/cart", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"


class TestValidateCart:
    """Tests for POST /api/cart/validate"""

    def test_reconciles_and_flattens_response(self, client, seed_item):
        offer = seed_item(name="Apples", unit_price=200, discount_percent=25, free_stock=5)

        response = client.post(
            "/api/cart/validate",
            json={"deliverySlot": "tomorrow 10-12", "items": [{"offerId": offer.id, "quantity": 2}]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["deliverySlot"] == "tomorrow 10-12"
        assert data["items"] == [
            {
                "offerId": offer.id,
                "name": "Apples",
                "quantity": 2,
                "unitPrice": 200,
                "discountPrice": 150,
                "comment": None,
                "allowReplacement": True,
                "isFavorite": False,
            }
        ]
        assert data["totals"] == {"subtotal": 400, "discountTotal": 100, "total": 300}
        assert data["changes"] == []
        assert data["stockByOfferId"] == {str(offer.id): 3}
        assert data["minOrderSum"] == 0
        assert data["isMinOrderReached"] is True

    def test_changes_are_reported(self, client, seed_item):
        offer = seed_item(free_stock=0)

        response = client.post(
            "/api/cart/validate",
            json={"items": [{"offerId": offer.id, "quantity": 4}]},
        )

        assert response.status_code == 200
        assert response.json()["changes"] == [
            {"type": "quantity_changed", "offerId": offer.id, "message": "Out of stock"}
        ]

    def test_get_returns_last_reconciled_cart(self, client, seed_item):
        offer = seed_item(free_stock=5)
        validated = client.post(
            "/api/cart/validate",
            json={"items": [{"offerId": offer.id, "quantity": 2}]},
        ).json()

        cart = client.get("/api/cart").json()

        assert cart["cartToken"] == validated["cartToken"]
        assert cart["items"] == validated["items"]
        assert cart["totals"] == validated["totals"]

    def test_snake_case_payload_is_accepted(self, client, seed_item):
        offer = seed_item(free_stock=5)

        response = client.post(
            "/api/cart/validate",
            json={"items": [{"offer_id": offer.id, "quantity": 1, "is_favorite": True}]},
        )

        assert response.status_code == 200
        assert response.json()["items"][0]["isFavorite"] is True

    @pytest.mark.parametrize(
        "item",
        [
            {"offerId": "abc", "quantity": 1},
            {"offerId": 1, "quantity": 20_000},
            {"offerId": 1},
            {"offerId": 1, "quantity": 1, "comment": "x" * 501},
        ],
    )
    def test_malformed_payload_is_422(self, client, item):
        response = client.post("/api/cart/validate", json={"items": [item]})

        assert response.status_code == 422


class TestAuthenticatedCart:
    def test_user_cart_follows_the_user(self, client, seed_item):
        offer = seed_item(free_stock=5)
        client.cookies.set("cartToken", "phone")
        client.post(
            "/api/cart/validate",
            json={"items": [{"offerId": offer.id, "quantity": 2}]},
            headers=bearer(42),
        )

        client.cookies.set("cartToken", "laptop")
        response = client.get("/api/cart", headers=bearer(42))

        assert [item["offerId"] for item in response.json()["items"]] == [offer.id]

    def test_anonymous_cart_is_not_the_user_cart(self, client, seed_item, fake_redis):
        offer = seed_item(free_stock=5)
        client.cookies.set("cartToken", "phone")
        client.post(
            "/api/cart/validate",
            json={"items": [{"offerId": offer.id, "quantity": 2}]},
            headers=bearer(42),
        )

        response = client.get("/api/cart")

        assert response.json()["items"] == []
        assert "cart:user:42" in fake_redis.store
        assert "cart:token:phone" in fake_redis.store

    @pytest.mark.parametrize(
        "header",
        [
            "Bearer not-a-jwt",
            "Basic dXNlcjpwYXNz",
            "Bearer",
        ],
    )
    def test_bad_authorization_is_401(self, client, header):
        response = client.get("/api/cart", headers={"Authorization": header})

        assert response.status_code == 401

    def test_expired_token_is_401(self, client):
        expired = datetime.now(timezone.utc) - timedelta(minutes=1)

        response = client.get("/api/cart", headers=bearer(42, exp=expired))

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"


class TestFailureMapping:
    """Collaborator failures never return a cart."""

    def test_cache_outage_is_503(self, client, seed_item, fake_redis):
        offer = seed_item(free_stock=5)
        fake_redis.fail_reads = True

        response = client.post(
            "/api/cart/validate",
            json={"items": [{"offerId": offer.id, "quantity": 1}]},
        )

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"
        assert "cart cache" in response.json()["detail"]

    def test_undecodable_cached_cart_is_503(self, client, seed_item, fake_redis):
        offer = seed_item(free_stock=5)
        client.cookies.set("cartToken", "known-token")
        client.post("/api/cart/validate", json={"items": [{"offerId": offer.id, "quantity": 2}]})
        fake_redis.store["cart:token:known-token"] = "{"

        response = client.post("/api/cart/validate", json={"items": []})

        assert response.status_code == 503
        assert "Retry-After" not in response.headers
        assert "cart cache" in response.json()["detail"]
        assert fake_redis.store["cart:token:known-token"] == "{"

    def test_inventory_outage_is_503(self, client, seed_item):
        offer = seed_item(free_stock=5)

        with patch(
            "storefront.services.cart.reconciliation.InventoryRepository.lock_by_ids",
            side_effect=OperationalError("SELECT", {}, Exception("lock timeout")),
        ):
            response = client.post(
                "/api/cart/validate",
                json={"items": [{"offerId": offer.id, "quantity": 1}]},
            )

        assert response.status_code == 503
        assert "inventory" in response.json()["detail"]

    def test_cache_write_after_commit_is_500(self, client, seed_item, fake_redis):
        offer = seed_item(free_stock=5)
        client.get("/api/cart")
        fake_redis.fail_writes = True

        response = client.post(
            "/api/cart/validate",
            json={"items": [{"offerId": offer.id, "quantity": 1}]},
        )

        assert response.status_code == 500
        assert "try again" in response.json()["detail"]
        assert "items" not in response.json()
