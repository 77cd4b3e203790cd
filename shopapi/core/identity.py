# shopapi/core/identity.py
"""
Identity token verification.

The auth gate never talks to an identity provider directly; it calls an
`IdentityVerifier` stored on `app.state.identity_verifier`.

Implementations:
  - FirebaseIdentityVerifier: Firebase ID tokens via firebase-admin
    (production).
  - JwtIdentityVerifier: HS256 tokens signed with a shared secret via
    python-jose (local development and tests).

Both return the decoded claims dict and raise one of the IdentityError
subclasses below, so the gate can answer with distinct reasons.
"""
import logging
import os
from typing import Any, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError
from jose import ExpiredSignatureError, JWTError, jwt

from shopapi.core.config import Settings

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(IdentityError):
    pass


class TokenRevokedError(IdentityError):
    pass


class InvalidTokenError(IdentityError):
    pass


class IdentityProviderError(IdentityError):
    """The provider could not be reached or answered unexpectedly."""


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> dict[str, Any]:
        """Return the verified claims of `token`."""
        ...


class FirebaseIdentityVerifier:
    """
    Verify Firebase ID tokens.

    Revocation is checked against Firebase when `check_revoked` is set
    (one extra call to the Auth backend per request).
    """

    def __init__(self, app: firebase_admin.App | None = None, check_revoked: bool = True):
        self.app = app
        self.check_revoked = check_revoked

    def verify(self, token: str) -> dict[str, Any]:
        # Subclasses of InvalidIdTokenError must be caught first.
        try:
            return firebase_auth.verify_id_token(
                token,
                app=self.app,
                check_revoked=self.check_revoked,
            )
        except firebase_auth.ExpiredIdTokenError as exc:
            raise TokenExpiredError("Token expired") from exc
        except firebase_auth.RevokedIdTokenError as exc:
            raise TokenRevokedError("Token revoked") from exc
        except firebase_auth.UserDisabledError as exc:
            raise TokenRevokedError("User disabled") from exc
        except firebase_auth.UserNotFoundError as exc:
            raise TokenRevokedError("User deleted") from exc
        except (firebase_auth.InvalidIdTokenError, ValueError) as exc:
            raise InvalidTokenError("Invalid token") from exc
        except FirebaseError as exc:
            raise IdentityProviderError(str(exc)) from exc


class JwtIdentityVerifier:
    """
    Verify HS256 tokens signed with a shared secret.

    Verification:
      - signature
      - expiration time (exp)
      - audience is NOT verified
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def verify(self, token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except JWTError as exc:
            raise InvalidTokenError("Invalid token") from exc

        # Same claim name as Firebase for the provider-side id
        claims.setdefault("uid", claims.get("sub"))
        return claims


def _firebase_app(service_account_path: str) -> firebase_admin.App:
    """
    Initialize (once) the default Firebase app from a service account file.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    path = os.path.abspath(service_account_path)
    if not os.path.exists(path):
        raise RuntimeError(f"Firebase service account file not found: {path}")

    app = firebase_admin.initialize_app(credentials.Certificate(path))
    logger.info("Firebase Admin SDK initialized from %s", path)
    return app


def build_identity_verifier(settings: Settings) -> IdentityVerifier:
    """
    Construct the verifier selected by IDENTITY_PROVIDER.

    Raises:
        RuntimeError: if the selected provider is not configured.
    """
    if settings.IDENTITY_PROVIDER == "jwt":
        if not settings.JWT_SECRET:
            raise RuntimeError("Missing JWT_SECRET for IDENTITY_PROVIDER=jwt")
        return JwtIdentityVerifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)

    if not settings.FIREBASE_SERVICE_ACCOUNT_PATH:
        raise RuntimeError("FIREBASE_SERVICE_ACCOUNT_PATH is not set")
    app = _firebase_app(settings.FIREBASE_SERVICE_ACCOUNT_PATH)
    return FirebaseIdentityVerifier(app, check_revoked=settings.FIREBASE_CHECK_REVOKED)
