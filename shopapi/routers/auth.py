# shopapi/routers/auth.py
from fastapi import APIRouter, Depends

from shopapi.core.auth import get_auth_context, require_admin
from shopapi.schemas.auth import AuthContext, VerifiedUser, VerifyResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


def _verified(ctx: AuthContext) -> VerifyResponse:
    return VerifyResponse(
        user=VerifiedUser(id=ctx.id, email=ctx.email, role=ctx.role),
    )


@router.get("/verify", response_model=VerifyResponse)
def verify(ctx: AuthContext = Depends(get_auth_context)):
    """
    Probe: is the caller authenticated and approved?
    """
    return _verified(ctx)


@router.get("/verify-admin", response_model=VerifyResponse)
def verify_admin(ctx: AuthContext = Depends(require_admin)):
    """
    Probe: is the caller an approved admin?
    """
    return _verified(ctx)
