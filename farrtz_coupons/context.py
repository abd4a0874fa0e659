import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException

from .settings import settings


@dataclass(frozen=True)
class RequestContext:
    user_id: Optional[str] = None
    is_admin: bool = False


def _is_admin_token(token: Optional[str]) -> bool:
    if not token or settings.admin_token is None:
        return False
    return secrets.compare_digest(token.encode("utf-8"), settings.admin_token.encode("utf-8"))


def get_context(
    x_user_id: Optional[str] = Header(default=None),
    x_admin_token: Optional[str] = Header(default=None),
) -> RequestContext:
    user_id = x_user_id.strip() if x_user_id else None
    return RequestContext(user_id=user_id or None, is_admin=_is_admin_token(x_admin_token))


def require_admin(ctx: RequestContext = Depends(get_context)) -> RequestContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return ctx


def require_user(ctx: RequestContext = Depends(get_context)) -> RequestContext:
    if not ctx.user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return ctx
