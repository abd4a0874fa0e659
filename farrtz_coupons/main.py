import logging
from contextlib import asynccontextmanager
from typing import List
from fastapi import Depends, FastAPI, HTTPException

from .context import RequestContext, get_context, require_admin, require_user
from .logic import INVALID_CODE_ERROR, calculate_discount, format_discount, validate_coupon
from .models import (
    Coupon,
    CouponCreate,
    CouponUpdate,
    DeleteResponse,
    RedeemRequest,
    RedeemResponse,
    ValidateRequest,
    ValidateResponse,
)
from .settings import settings
from .storage import CouponNotFound, CouponStore, DuplicateCouponCode, InvalidUsageLimit

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------
# Storage
# ---------------------------

store = CouponStore(code_length=settings.coupon_code_length)


def get_store() -> CouponStore:
    return store


DEMO_COUPONS = [
    CouponCreate(code="WELCOME10", discountPercent=10),
    CouponCreate(code="CYBER20", discountPercent=20, maxUsage=100),
]


def seed_coupons(target: CouponStore) -> None:
    for data in DEMO_COUPONS:
        if target.get_by_code(data.code) is None:
            target.create(data, created_by="seed")
    logger.info("coupons.seed count=%s", len(DEMO_COUPONS))


# ---------------------------
# FastAPI App & Routes
# ---------------------------

@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.seed_coupons:
        seed_coupons(store)
    if settings.admin_token is None:
        logger.warning("startup.admin_token_missing admin routes are disabled")
    yield


app = FastAPI(title="FARRTZ Coupon Service", lifespan=lifespan)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/coupons", response_model=List[Coupon])
def list_coupons(
    _: RequestContext = Depends(require_admin),
    coupons: CouponStore = Depends(get_store),
):
    return coupons.list()


@app.post("/coupons", response_model=Coupon, status_code=201)
def create_coupon(
    payload: CouponCreate,
    ctx: RequestContext = Depends(require_admin),
    coupons: CouponStore = Depends(get_store),
):
    try:
        return coupons.create(payload, created_by=ctx.user_id)
    except DuplicateCouponCode as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/coupons/validate", response_model=ValidateResponse)
def validate(
    payload: ValidateRequest,
    ctx: RequestContext = Depends(get_context),
    coupons: CouponStore = Depends(get_store),
):
    result = validate_coupon(payload.code, coupons.list(), ctx.user_id)
    response = ValidateResponse(**result.model_dump())
    if result.valid:
        response.discountLabel = format_discount(result.coupon)
        if payload.subtotal is not None:
            response.discountAmount = calculate_discount(payload.subtotal, result.coupon)
    return response


@app.post("/coupons/redeem", response_model=RedeemResponse)
def redeem(
    payload: RedeemRequest,
    ctx: RequestContext = Depends(require_user),
    coupons: CouponStore = Depends(get_store),
):
    result = coupons.redeem(payload.code, ctx.user_id)
    if not result.valid:
        status_code = 404 if result.error == INVALID_CODE_ERROR else 400
        raise HTTPException(status_code=status_code, detail=result.error)

    discount = calculate_discount(payload.subtotal, result.coupon)
    return RedeemResponse(
        coupon=result.coupon,
        subtotal=payload.subtotal,
        discountAmount=discount,
        discountLabel=format_discount(result.coupon),
        total=payload.subtotal - discount,
    )


@app.patch("/coupons/{coupon_id}", response_model=Coupon)
def update_coupon(
    coupon_id: str,
    payload: CouponUpdate,
    _: RequestContext = Depends(require_admin),
    coupons: CouponStore = Depends(get_store),
):
    try:
        return coupons.update(coupon_id, payload)
    except CouponNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (DuplicateCouponCode, InvalidUsageLimit) as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/coupons/{coupon_id}/toggle", response_model=Coupon)
def toggle_coupon(
    coupon_id: str,
    _: RequestContext = Depends(require_admin),
    coupons: CouponStore = Depends(get_store),
):
    try:
        return coupons.toggle_status(coupon_id)
    except CouponNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.delete("/coupons/{coupon_id}", response_model=DeleteResponse)
def delete_coupon(
    coupon_id: str,
    _: RequestContext = Depends(require_admin),
    coupons: CouponStore = Depends(get_store),
):
    try:
        removed = coupons.delete(coupon_id)
    except CouponNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return DeleteResponse(id=coupon_id, deleted=removed, deactivated=not removed)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "farrtz_coupons.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,  # keep False to avoid Windows reload issues
    )
