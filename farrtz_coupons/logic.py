import random
import string
from datetime import datetime, timezone
from typing import Optional, Sequence
from .models import Coupon, ValidationResult

CODE_ALPHABET = string.ascii_uppercase + string.digits
UNIQUE_CODE_ATTEMPTS = 10
INVALID_CODE_ERROR = "Invalid coupon code"


def generate_code(length: int = 8) -> str:
    # not for secrets; uniqueness is enforced again by the store
    return "".join(random.choice(CODE_ALPHABET) for _ in range(length))


def generate_unique_code(existing_coupons: Sequence[Coupon], length: int = 8) -> str:
    """
    Try up to UNIQUE_CODE_ATTEMPTS random codes and return the first one not
    already taken (exact match). If every attempt collides, the last
    candidate is returned anyway.
    """
    taken = {c.code for c in existing_coupons}
    code = ""
    for _ in range(UNIQUE_CODE_ATTEMPTS):
        code = generate_code(length)
        if code not in taken:
            break
    return code


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def find_coupon(code: Optional[str], coupons: Sequence[Coupon]) -> Optional[Coupon]:
    wanted = normalize_code(code)
    for coupon in coupons:
        if normalize_code(coupon.code) == wanted:
            return coupon
    return None


def is_coupon_expired(coupon: Coupon, now: Optional[datetime] = None) -> bool:
    if coupon.expiryDate is None:
        return False
    if now is None:
        now = datetime.now(timezone.utc)
    expiry = coupon.expiryDate
    # naive timestamps are UTC
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return expiry < now


def has_reached_limit(coupon: Coupon) -> bool:
    # a cap of 0 means "no cap"
    if not coupon.maxUsage:
        return False
    return coupon.usageCount >= coupon.maxUsage


def validate_coupon(
    code: Optional[str],
    coupons: Sequence[Coupon],
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ValidationResult:
    """
    Checks, in order, stopping at the first failure:
     1. code present
     2. code known (case-insensitive, trimmed)
     3. coupon active
     4. not expired
     5. usage limit not reached
     6. user has not redeemed it yet
    Nothing is mutated; recording the redemption is up to the caller.
    """
    if code is None or not str(code).strip():
        return ValidationResult(valid=False, error="Please enter a coupon code")

    coupon = find_coupon(str(code), coupons)
    if coupon is None:
        return ValidationResult(valid=False, error=INVALID_CODE_ERROR)

    if not coupon.isActive:
        return ValidationResult(valid=False, error="This coupon is no longer active")

    if is_coupon_expired(coupon, now):
        return ValidationResult(valid=False, error="This coupon has expired")

    if has_reached_limit(coupon):
        return ValidationResult(valid=False, error="This coupon has reached its usage limit")

    if user_id and user_id in coupon.usedBy:
        return ValidationResult(valid=False, error="You have already used this coupon")

    return ValidationResult(valid=True, coupon=coupon)


def calculate_discount(subtotal: int, coupon: Coupon) -> int:
    # truncate, never round
    return int((subtotal * coupon.discountPercent) // 100)


def format_discount(coupon: Coupon) -> str:
    return f"-{coupon.discountPercent}%"
