import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .logic import generate_unique_code, normalize_code, validate_coupon
from .models import Coupon, CouponCreate, CouponUpdate, ValidationResult
from .serialization import from_record, to_columns, to_record

logger = logging.getLogger(__name__)


class CouponStoreError(Exception):
    pass


class CouponNotFound(CouponStoreError):
    def __init__(self, coupon_id: str) -> None:
        super().__init__(f"Coupon {coupon_id} not found")
        self.coupon_id = coupon_id


class DuplicateCouponCode(CouponStoreError):
    def __init__(self, code: str) -> None:
        super().__init__("Coupon code already exists")
        self.code = code


class InvalidUsageLimit(CouponStoreError):
    def __init__(self, max_usage: int, usage_count: int) -> None:
        super().__init__(f"Usage limit {max_usage} is below the current usage count {usage_count}")
        self.max_usage = max_usage
        self.usage_count = usage_count


class CouponStore:
    """
    In-memory coupon persistence.

    Records are kept in their persisted (snake_case) layout and converted at
    the boundary by serialization.py. Every mutation goes through one lock,
    which makes redeem() an atomic check-then-increment.
    """

    def __init__(self, code_length: int = 8) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self.code_length = code_length

    def _all(self) -> List[Coupon]:
        return [from_record(r) for r in self._records.values()]

    def _find_id_by_code(self, code: str) -> Optional[str]:
        wanted = normalize_code(code)
        for coupon_id, record in self._records.items():
            if normalize_code(record["code"]) == wanted:
                return coupon_id
        return None

    def _record(self, coupon_id: str) -> Dict[str, Any]:
        record = self._records.get(coupon_id)
        if record is None:
            raise CouponNotFound(coupon_id)
        return record

    def list(self) -> List[Coupon]:
        with self._lock:
            coupons = self._all()
        # later inserts first when timestamps tie
        coupons.reverse()
        coupons.sort(key=lambda c: c.createdDate, reverse=True)
        return coupons

    def get(self, coupon_id: str) -> Coupon:
        with self._lock:
            return from_record(self._record(coupon_id))

    def get_by_code(self, code: str) -> Optional[Coupon]:
        with self._lock:
            coupon_id = self._find_id_by_code(code)
            if coupon_id is None:
                return None
            return from_record(self._records[coupon_id])

    def create(self, data: CouponCreate, created_by: Optional[str] = None) -> Coupon:
        with self._lock:
            if data.code and data.code.strip():
                code = normalize_code(data.code)
                if self._find_id_by_code(code) is not None:
                    raise DuplicateCouponCode(code)
            else:
                code = generate_unique_code(self._all(), self.code_length)
                if self._find_id_by_code(code) is not None:
                    raise DuplicateCouponCode(code)

            coupon = Coupon(
                id=uuid.uuid4().hex,
                code=code,
                discountPercent=data.discountPercent,
                createdDate=datetime.now(timezone.utc),
                expiryDate=data.expiryDate,
                isActive=data.isActive,
                usageCount=0,
                maxUsage=data.maxUsage or None,
                createdBy=created_by,
                usedBy=[],
            )
            self._records[coupon.id] = to_record(coupon)

        logger.info("coupons.create code=%s discount_percent=%s", coupon.code, coupon.discountPercent)
        return coupon

    def update(self, coupon_id: str, changes: CouponUpdate) -> Coupon:
        fields = changes.model_dump(exclude_unset=True)
        with self._lock:
            record = self._record(coupon_id)
            if fields.get("code"):
                code = normalize_code(fields["code"])
                other = self._find_id_by_code(code)
                if other is not None and other != coupon_id:
                    raise DuplicateCouponCode(code)
                fields["code"] = code
            elif "code" in fields:
                del fields["code"]
            if "maxUsage" in fields:
                fields["maxUsage"] = fields["maxUsage"] or None
                if fields["maxUsage"] is not None and fields["maxUsage"] < record["usage_count"]:
                    raise InvalidUsageLimit(fields["maxUsage"], record["usage_count"])
            if "isActive" in fields and fields["isActive"] is None:
                del fields["isActive"]
            if "discountPercent" in fields and fields["discountPercent"] is None:
                del fields["discountPercent"]
            updated = dict(record)
            updated.update(to_columns(fields))
            coupon = from_record(updated)
            self._records[coupon_id] = to_record(coupon)

        logger.info("coupons.update id=%s fields=%s", coupon_id, sorted(fields))
        return coupon

    def toggle_status(self, coupon_id: str) -> Coupon:
        with self._lock:
            record = self._record(coupon_id)
            record["is_active"] = not record["is_active"]
            coupon = from_record(record)

        logger.info("coupons.toggle id=%s is_active=%s", coupon_id, coupon.isActive)
        return coupon

    def delete(self, coupon_id: str) -> bool:
        """
        Remove a coupon. A coupon that was already redeemed is referenced by
        past orders, so it is deactivated instead. Returns True when the
        record was removed.
        """
        with self._lock:
            record = self._record(coupon_id)
            if record["usage_count"]:
                record["is_active"] = False
                removed = False
            else:
                del self._records[coupon_id]
                removed = True

        logger.info("coupons.delete id=%s removed=%s", coupon_id, removed)
        return removed

    def redeem(self, code: str, user_id: str, now: Optional[datetime] = None) -> ValidationResult:
        with self._lock:
            coupon_id = self._find_id_by_code(code or "")
            candidates = [from_record(self._records[coupon_id])] if coupon_id else []
            result = validate_coupon(code, candidates, user_id, now)
            if not result.valid:
                logger.info("coupons.redeem.rejected code=%s user_id=%s error=%s", code, user_id, result.error)
                return result

            record = self._records[coupon_id]
            record["usage_count"] += 1
            record["used_by"].append(user_id)
            coupon = from_record(record)

        logger.info("coupons.redeem.ok code=%s user_id=%s usage_count=%s", coupon.code, user_id, coupon.usageCount)
        return ValidationResult(valid=True, coupon=coupon)

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
