# shopapi/core/auth.py
import logging
from typing import Callable, get_args

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from shopapi.core.identity import (
    IdentityProviderError,
    IdentityVerifier,
    InvalidTokenError,
    TokenExpiredError,
    TokenRevokedError,
)
from shopapi.database import get_session
from shopapi.repositories.user_repo import UserRepository
from shopapi.schemas.auth import AuthContext, Role

logger = logging.getLogger(__name__)

# HTTP Bearer scheme:
# - auto_error=False => a missing or non-Bearer Authorization header yields
#   None, so we can answer with our own 401 message.
bearer_scheme = HTTPBearer(auto_error=False)

user_repo = UserRepository()


def get_identity_verifier(request: Request) -> IdentityVerifier:
    """
    FastAPI dependency returning the verifier owned by the running app.
    """
    return request.app.state.identity_verifier


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_auth_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    session: Session = Depends(get_session),
) -> AuthContext:
    """
    Resolve the authenticated caller.

    Flow:
      1. No / malformed Authorization header => 401.
      2. Verify token with the identity provider => 401 with a distinct
         reason for expired, revoked and invalid tokens.
      3. Extract 'email' claim => 401 if absent.
      4. Find the local user row by email => 403 if absent, not approved
         or holding a role outside Role.

    Returns:
        AuthContext for the approved user.
    """
    if credentials is None:
        raise _unauthorized("No token provided")

    try:
        claims = verifier.verify(credentials.credentials)
    except TokenExpiredError:
        raise _unauthorized("Token expired")
    except TokenRevokedError:
        raise _unauthorized("Token revoked")
    except InvalidTokenError:
        raise _unauthorized("Invalid token")
    except IdentityProviderError as exc:
        logger.error("Identity provider failure: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        )

    email = claims.get("email")
    if not email:
        raise _unauthorized("Token does not contain an email")

    user = user_repo.get_by_email(session, email)
    if user is None:
        logger.warning("Verified token for unknown user %s", email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not found in database",
        )

    if not user.approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not approved",
        )

    if user.role not in get_args(Role):
        logger.warning("User %s has unsupported role %r", email, user.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    return AuthContext(
        id=user.id,
        email=user.email,
        role=user.role,
        uid=claims.get("uid"),
    )


def require_roles(*roles: str) -> Callable[..., AuthContext]:
    """
    Build a dependency that admits only callers whose role is in `roles`.

    Usage:

        @router.get("/x")
        def x(ctx: AuthContext = Depends(require_roles("admin"))):
            ...

    Raises:
        HTTPException(403): if the caller's role is not allowed.
    """
    allowed = frozenset(roles)

    def dependency(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if ctx.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return ctx

    return dependency


require_admin = require_roles("admin")
