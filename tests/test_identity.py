import pytest
from firebase_admin import auth as firebase_auth

from shopapi.core.config import Settings
from shopapi.core.identity import (
    FirebaseIdentityVerifier,
    IdentityProviderError,
    InvalidTokenError,
    JwtIdentityVerifier,
    TokenExpiredError,
    TokenRevokedError,
    build_identity_verifier,
)


@pytest.mark.parametrize(
    "raised, expected",
    [
        (firebase_auth.ExpiredIdTokenError("expired", None), TokenExpiredError),
        (firebase_auth.RevokedIdTokenError("revoked"), TokenRevokedError),
        (firebase_auth.UserDisabledError("disabled"), TokenRevokedError),
        (firebase_auth.UserNotFoundError("deleted"), TokenRevokedError),
        (firebase_auth.InvalidIdTokenError("bad"), InvalidTokenError),
        (ValueError("empty token"), InvalidTokenError),
        (firebase_auth.CertificateFetchError("no certs", None), IdentityProviderError),
    ],
)
def test_firebase_errors_are_translated(monkeypatch, raised, expected):
    def fake_verify(token, app=None, check_revoked=False, clock_skew_seconds=0):
        raise raised

    monkeypatch.setattr(firebase_auth, "verify_id_token", fake_verify)

    with pytest.raises(expected):
        FirebaseIdentityVerifier(app=None).verify("token")


def test_firebase_verifier_checks_revocation(monkeypatch):
    calls = {}

    def fake_verify(token, app=None, check_revoked=False, clock_skew_seconds=0):
        calls["check_revoked"] = check_revoked
        return {"uid": "abc", "email": "jane@example.com"}

    monkeypatch.setattr(firebase_auth, "verify_id_token", fake_verify)

    claims = FirebaseIdentityVerifier(app=None).verify("token")
    assert claims["email"] == "jane@example.com"
    assert calls["check_revoked"] is True


def test_jwt_verifier_exposes_subject_as_uid(token_factory):
    claims = JwtIdentityVerifier("test-secret").verify(token_factory("jane@example.com"))
    assert claims["uid"] == "uid-jane@example.com"
    assert claims["email"] == "jane@example.com"


def test_build_jwt_verifier_requires_secret():
    settings = Settings(_env_file=None, IDENTITY_PROVIDER="jwt", JWT_SECRET=None)
    with pytest.raises(RuntimeError):
        build_identity_verifier(settings)


def test_build_firebase_verifier_requires_credentials_path():
    settings = Settings(
        _env_file=None,
        IDENTITY_PROVIDER="firebase",
        FIREBASE_SERVICE_ACCOUNT_PATH=None,
    )
    with pytest.raises(RuntimeError):
        build_identity_verifier(settings)


def test_build_firebase_verifier_fails_on_missing_file(tmp_path):
    settings = Settings(
        _env_file=None,
        IDENTITY_PROVIDER="firebase",
        FIREBASE_SERVICE_ACCOUNT_PATH=str(tmp_path / "missing.json"),
    )
    with pytest.raises(RuntimeError, match="not found"):
        build_identity_verifier(settings)
