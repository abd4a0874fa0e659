from typing import Any, Dict
from .models import Coupon

# API field -> persisted column
FIELD_MAP: Dict[str, str] = {
    "id": "id",
    "code": "code",
    "discountPercent": "discount_percent",
    "createdDate": "created_date",
    "expiryDate": "expiry_date",
    "isActive": "is_active",
    "usageCount": "usage_count",
    "maxUsage": "max_usage",
    "createdBy": "created_by",
    "usedBy": "used_by",
}

COLUMN_MAP: Dict[str, str] = {column: field for field, column in FIELD_MAP.items()}


def to_columns(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Rename API field names to column names, dropping unknown keys."""
    return {FIELD_MAP[name]: value for name, value in fields.items() if name in FIELD_MAP}


def to_fields(record: Dict[str, Any]) -> Dict[str, Any]:
    return {COLUMN_MAP[name]: value for name, value in record.items() if name in COLUMN_MAP}


def to_record(coupon: Coupon) -> Dict[str, Any]:
    record = to_columns(coupon.model_dump())
    record["used_by"] = list(record.get("used_by") or [])
    return record


def from_record(record: Dict[str, Any]) -> Coupon:
    fields = to_fields(record)
    fields["usedBy"] = list(fields.get("usedBy") or [])
    fields["usageCount"] = fields.get("usageCount") or 0
    return Coupon(**fields)
