"""
Tests for the cart cache adapter and cart identity keys.
"""

import pytest

from shared.config.logging import mask_identity_key
from storefront.services.cart import (
    CartCache,
    CartCacheCorruptError,
    CartCacheUnavailableError,
    CartIdentity,
)
from storefront.services.cart.pricing import build_cart, build_line, empty_cart


THIRTY_DAYS = 60 * 60 * 24 * 30


class TestCartIdentity:
    def test_anonymous_key(self):
        assert CartIdentity(cart_token="abc").cache_key == "token:abc"

    def test_user_key_wins(self):
        identity = CartIdentity(cart_token="abc", user_id=42)

        assert identity.cache_key == "user:42"
        assert identity.is_authenticated

    def test_user_zero_is_still_a_user(self):
        assert CartIdentity(cart_token="abc", user_id=0).cache_key == "user:0"

    def test_mask_identity_key(self):
        assert mask_identity_key("user:42") == "user:42"
        assert mask_identity_key("token:0123456789abcdef") == "token:01234567..."


class TestCartCache:
    """Tests for CartCache get/set/load/save"""

    def test_get_miss(self, cart_cache):
        assert cart_cache.get("token:nope") is None

    def test_set_applies_prefix_and_ttl(self, cart_cache, fake_redis):
        cart_cache.set("user:1", "{}")

        assert fake_redis.store["cart:user:1"] == "{}"
        assert fake_redis.ttls["cart:user:1"] == THIRTY_DAYS

    def test_set_explicit_ttl(self, cart_cache, fake_redis):
        cart_cache.set("user:1", "{}", ttl_seconds=60)

        assert fake_redis.ttls["cart:user:1"] == 60

    def test_save_then_load(self, cart_cache, identity):
        line = build_line(offer_id=9, name="Milk", quantity=2, unit_price=90, discount_percent=None)
        cart = build_cart(identity.cart_token, "evening", [line])

        cart_cache.save(identity, cart)
        loaded = cart_cache.load(identity)

        assert loaded == cart

    def test_cached_json_is_camel_case(self, cart_cache, fake_redis, identity):
        cart_cache.save(identity, empty_cart(identity.cart_token))

        raw = fake_redis.store[f"cart:{identity.cache_key}"]
        assert '"cartToken"' in raw
        assert '"discountTotal"' in raw

    def test_save_replaces_previous_value(self, cart_cache, identity):
        first = build_cart(
            identity.cart_token,
            None,
            [build_line(offer_id=1, name="A", quantity=1, unit_price=10, discount_percent=None)],
        )
        cart_cache.save(identity, first)
        cart_cache.save(identity, empty_cart(identity.cart_token))

        assert cart_cache.load(identity).items == []

    @pytest.mark.parametrize("raw", ["not json at all", '{"cartToken": "tok", "items": [{"offerId": 1', '{"items": []}'])
    def test_undecodable_entry_raises_and_is_kept(self, cart_cache, fake_redis, identity, raw):
        key = f"cart:{identity.cache_key}"
        fake_redis.store[key] = raw

        with pytest.raises(CartCacheCorruptError) as exc:
            cart_cache.load(identity)

        assert exc.value.identity_key == identity.cache_key
        assert fake_redis.store[key] == raw

    def test_read_failure_raises(self, cart_cache, fake_redis, identity):
        fake_redis.fail_reads = True

        with pytest.raises(CartCacheUnavailableError) as exc:
            cart_cache.load(identity)
        assert exc.value.operation == "read"
        assert exc.value.identity_key == identity.cache_key

    def test_write_failure_raises(self, cart_cache, fake_redis, identity):
        fake_redis.fail_writes = True

        with pytest.raises(CartCacheUnavailableError) as exc:
            cart_cache.save(identity, empty_cart(identity.cart_token))
        assert exc.value.operation == "write"

    def test_custom_prefix(self, fake_redis):
        cache = CartCache(fake_redis, ttl_seconds=5, prefix="test:")

        cache.set("token:x", "v")

        assert fake_redis.store == {"test:token:x": "v"}
        assert fake_redis.ttls["test:token:x"] == 5
        assert cache.ttl_seconds == 5

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_rejected(self, cart_cache, fake_redis, ttl):
        with pytest.raises(ValueError):
            cart_cache.set("user:1", "{}", ttl_seconds=ttl)

        assert fake_redis.store == {}
