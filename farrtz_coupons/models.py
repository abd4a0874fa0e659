from typing import Annotated, List, Optional
from pydantic import BaseModel, BeforeValidator, Field
from datetime import date, datetime, time, timezone


def _as_datetime(value):
    # a bare date means midnight UTC of that day
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value


ExpiryDate = Annotated[Optional[datetime], BeforeValidator(_as_datetime)]


class Coupon(BaseModel):
    id: Optional[str] = None
    code: str
    discountPercent: int = Field(ge=0, le=100)
    createdDate: Optional[datetime] = None
    expiryDate: ExpiryDate = None
    isActive: bool = True
    usageCount: int = 0
    maxUsage: Optional[int] = None
    createdBy: Optional[str] = None
    usedBy: List[str] = Field(default_factory=list)


class CouponCreate(BaseModel):
    code: Optional[str] = None  # generated when omitted
    discountPercent: int = Field(ge=0, le=100)
    expiryDate: ExpiryDate = None
    maxUsage: Optional[int] = Field(default=None, ge=0)
    isActive: bool = True


class CouponUpdate(BaseModel):
    code: Optional[str] = None
    discountPercent: Optional[int] = Field(default=None, ge=0, le=100)
    expiryDate: ExpiryDate = None
    maxUsage: Optional[int] = Field(default=None, ge=0)
    isActive: Optional[bool] = None


class ValidationResult(BaseModel):
    valid: bool
    coupon: Optional[Coupon] = None
    error: Optional[str] = None


class ValidateRequest(BaseModel):
    code: Optional[str] = None
    subtotal: Optional[int] = Field(default=None, ge=0)


class ValidateResponse(ValidationResult):
    discountAmount: Optional[int] = None
    discountLabel: Optional[str] = None


class RedeemRequest(BaseModel):
    code: str
    subtotal: int = Field(ge=0)


class RedeemResponse(BaseModel):
    coupon: Coupon
    subtotal: int
    discountAmount: int
    discountLabel: str
    total: int


class DeleteResponse(BaseModel):
    id: str
    deleted: bool
    deactivated: bool
