from datetime import datetime, timezone

import pytest

from farrtz_coupons.serialization import FIELD_MAP, from_record, to_columns, to_record


@pytest.mark.unit
def test_every_model_field_is_mapped():
    from farrtz_coupons.models import Coupon

    assert set(FIELD_MAP) == set(Coupon.model_fields)


@pytest.mark.unit
def test_to_record_uses_column_names(make_coupon):
    record = to_record(make_coupon(maxUsage=5, usedBy=["u1"]))
    assert record["discount_percent"] == 10
    assert record["is_active"] is True
    assert record["max_usage"] == 5
    assert record["used_by"] == ["u1"]
    assert "discountPercent" not in record


@pytest.mark.unit
def test_from_record_fills_missing_usage():
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    coupon = from_record(
        {
            "id": "c1",
            "code": "CYBER20",
            "discount_percent": 20,
            "created_date": created,
            "is_active": True,
            "usage_count": None,
            "used_by": None,
        }
    )
    assert coupon.usageCount == 0
    assert coupon.usedBy == []
    assert coupon.createdDate == created


@pytest.mark.unit
def test_to_columns_drops_unknown_fields():
    assert to_columns({"isActive": False, "bogus": 1}) == {"is_active": False}
