"""
pytest configuration and shared fixtures for the coupon service tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def make_coupon():
    """Factory for Coupon models with sensible defaults."""
    from farrtz_coupons.models import Coupon

    def _make(**overrides):
        fields = {
            "id": overrides.get("code", "SAVE10").lower(),
            "code": "SAVE10",
            "discountPercent": 10,
            "isActive": True,
            "usageCount": 0,
        }
        fields.update(overrides)
        return Coupon(**fields)

    return _make


@pytest.fixture
def store():
    from farrtz_coupons.storage import CouponStore

    return CouponStore()


@pytest.fixture
def client(store, monkeypatch):
    """TestClient wired to a fresh store, with the admin token configured."""
    from fastapi.testclient import TestClient

    from farrtz_coupons import main
    from farrtz_coupons.settings import settings

    monkeypatch.setattr(settings, "admin_token", ADMIN_TOKEN)
    monkeypatch.setattr(settings, "seed_coupons", False)
    main.app.dependency_overrides[main.get_store] = lambda: store
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN, "X-User-Id": "admin-1"}


@pytest.fixture
def yesterday(now):
    return now - timedelta(days=1)
