# tests/unit/services/test_auth_service.py
from __future__ import annotations

import logging
from datetime import timedelta
from uuid import uuid4

import pytest
from freezegun import freeze_time

from chirpy.infra.jwt import JWTAccessTokenCodec
from chirpy.services._shared.errors import (
    ForbiddenOperationError,
    InvalidCredentialsError,
    LoginError,
    MalformedCredentialError,
    MalformedTokenError,
    MissingCredentialError,
    RefreshTokenExpiredError,
    RefreshTokenNotFoundError,
    RefreshTokenRevokedError,
    SignatureInvalidError,
    StorageError,
    TokenExpiredError,
    UnauthorizedError,
    UserNotFoundError,
)
from chirpy.services._shared.ports import (
    Account,
    InMemoryAccountDirectory,
    InMemoryRefreshTokenStore,
)
from chirpy.services.auth import (
    ACCOUNT_GONE,
    AccessTokenOut,
    AuthService,
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RevokeIn,
    SessionOut,
)

SECRET = "auth-service-test-secret-long-enough-for-hs256"
PASSWORD = "04234"


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def account(hasher) -> Account:
    return Account(id=uuid4(), email="walt@breakingbad.com", password_hash=hasher.hash(PASSWORD))


@pytest.fixture()
def service(hasher, account) -> AuthService:
    """Build an AuthService wired to in-memory doubles and the real codec."""
    return AuthService(
        accounts=InMemoryAccountDirectory([account]),
        hasher=hasher,
        codec=JWTAccessTokenCodec(),
        refresh_store=InMemoryRefreshTokenStore(),
        token_cfg=AuthTokenConfig(secret=SECRET, platform="dev"),
    )


def _bearer(token: str) -> str:
    return f"Bearer {token}"


# ------------------------------- Login ------------------------------------ #
def test_login_issues_access_and_refresh_tokens(service, account):
    """Login returns the public fields plus a verifiable access token and an active refresh token."""
    out = service.login(LoginIn(email=account.email, password=PASSWORD))

    assert isinstance(out, SessionOut)
    assert out.user_id == account.id
    assert out.email == account.email
    assert service.codec.verify(out.access_token, SECRET) == account.id
    assert service.refresh_store.lookup_owner(out.refresh_token) == account.id


def test_login_email_lookup_is_case_insensitive(service, account):
    out = service.login(LoginIn(email="  WALT@BreakingBad.com ", password=PASSWORD))
    assert out.user_id == account.id


def test_login_twice_keeps_both_refresh_tokens_active(service, account):
    """Login never rotates or revokes earlier refresh tokens."""
    first = service.login(LoginIn(email=account.email, password=PASSWORD))
    second = service.login(LoginIn(email=account.email, password=PASSWORD))

    assert first.refresh_token != second.refresh_token
    assert service.refresh_store.lookup_owner(first.refresh_token) == account.id
    assert service.refresh_store.lookup_owner(second.refresh_token) == account.id


def test_login_wrong_password_issues_nothing(service, account):
    with pytest.raises(InvalidCredentialsError):
        service.login(LoginIn(email=account.email, password="wrong"))

    assert service.refresh_store.reset_all() == 0


def test_login_unknown_email_looks_like_wrong_password(service):
    """Unknown accounts and bad passwords share code and message."""
    with pytest.raises(UserNotFoundError) as missing:
        service.login(LoginIn(email="nobody@example.com", password=PASSWORD))

    assert isinstance(missing.value, LoginError)
    assert missing.value.code == InvalidCredentialsError.code == "invalid_credentials"
    assert str(missing.value) == str(InvalidCredentialsError())
    assert service.refresh_store.reset_all() == 0


def test_login_logs_without_secrets(service, account, caplog):
    caplog.set_level(logging.INFO, logger="chirpy.services.auth.service")

    out = service.login(LoginIn(email=account.email, password=PASSWORD))

    assert "auth.login.succeeded" in caplog.text
    assert out.access_token not in caplog.text
    assert out.refresh_token not in caplog.text
    assert PASSWORD not in caplog.text


def test_login_propagates_storage_failure(service, account, monkeypatch):
    """Store faults are not disguised as credential problems."""

    def _boom(*args, **kwargs):
        raise StorageError()

    monkeypatch.setattr(service.refresh_store, "issue", _boom)
    with pytest.raises(StorageError):
        service.login(LoginIn(email=account.email, password=PASSWORD))


# ------------------------------ Refresh ----------------------------------- #
def test_refresh_mints_new_access_token_without_rotation(service, account):
    """Login -> A, R; later refresh(R) -> B != A; A and B valid; R still usable."""
    with freeze_time("2024-01-01 12:00:00") as frozen:
        session = service.login(LoginIn(email=account.email, password=PASSWORD))
        frozen.tick(timedelta(seconds=30))

        out = service.refresh(RefreshIn(authorization=_bearer(session.refresh_token)))

        assert isinstance(out, AccessTokenOut)
        assert out.access_token != session.access_token
        assert service.authorize(_bearer(session.access_token)) == account.id
        assert service.authorize(_bearer(out.access_token)) == account.id
        assert service.refresh_store.lookup_owner(session.refresh_token) == account.id

        again = service.refresh(RefreshIn(authorization=_bearer(session.refresh_token)))
        assert service.authorize(_bearer(again.access_token)) == account.id


@pytest.mark.parametrize(
    ("header", "error"),
    [(None, MissingCredentialError), ("", MissingCredentialError), ("Basic xyz", MalformedCredentialError)],
)
def test_refresh_rejects_bad_header(service, header, error):
    with pytest.raises(error):
        service.refresh(RefreshIn(authorization=header))


def test_refresh_unknown_token_is_unauthorized(service):
    with pytest.raises(UnauthorizedError) as exc_info:
        service.refresh(RefreshIn(authorization=_bearer("0" * 64)))

    assert exc_info.value.reason == RefreshTokenNotFoundError.code
    assert isinstance(exc_info.value.__cause__, RefreshTokenNotFoundError)


def test_revoked_refresh_token_never_refreshes_again(service, account):
    session = service.login(LoginIn(email=account.email, password=PASSWORD))
    header = _bearer(session.refresh_token)

    service.revoke(RevokeIn(authorization=header))

    with pytest.raises(UnauthorizedError) as exc_info:
        service.refresh(RefreshIn(authorization=header))
    assert exc_info.value.reason == RefreshTokenRevokedError.code
    assert isinstance(exc_info.value.__cause__, RefreshTokenRevokedError)

    # Second revoke still succeeds
    service.revoke(RevokeIn(authorization=header))


def test_refresh_after_ttl_is_unauthorized(service, account):
    with freeze_time("2024-01-01 12:00:00") as frozen:
        session = service.login(LoginIn(email=account.email, password=PASSWORD))
        frozen.tick(timedelta(days=60))

        with pytest.raises(UnauthorizedError) as exc_info:
            service.refresh(RefreshIn(authorization=_bearer(session.refresh_token)))

    assert exc_info.value.reason == RefreshTokenExpiredError.code


def test_refresh_for_deleted_account_is_unauthorized(hasher, account):
    directory = InMemoryAccountDirectory([account])
    svc = AuthService(
        accounts=directory,
        hasher=hasher,
        codec=JWTAccessTokenCodec(),
        refresh_store=InMemoryRefreshTokenStore(),
        token_cfg=AuthTokenConfig(secret=SECRET),
    )
    session = svc.login(LoginIn(email=account.email, password=PASSWORD))
    directory.remove(account.id)

    with pytest.raises(UnauthorizedError) as exc_info:
        svc.refresh(RefreshIn(authorization=_bearer(session.refresh_token)))

    assert exc_info.value.reason == ACCOUNT_GONE
    assert svc.refresh_store.lookup_owner(session.refresh_token) == account.id


def test_refresh_honours_configured_lifetimes(hasher, account):
    svc = AuthService(
        accounts=InMemoryAccountDirectory([account]),
        hasher=hasher,
        codec=JWTAccessTokenCodec(),
        refresh_store=InMemoryRefreshTokenStore(),
        token_cfg=AuthTokenConfig(
            secret=SECRET,
            access_expires=timedelta(minutes=5),
            refresh_expires=timedelta(hours=1),
        ),
    )
    with freeze_time("2024-01-01 12:00:00") as frozen:
        session = svc.login(LoginIn(email=account.email, password=PASSWORD))
        frozen.tick(timedelta(minutes=5))
        with pytest.raises(TokenExpiredError):
            svc.authorize(_bearer(session.access_token))
        frozen.tick(timedelta(minutes=55))
        with pytest.raises(UnauthorizedError):
            svc.refresh(RefreshIn(authorization=_bearer(session.refresh_token)))


# ------------------------------- Revoke ----------------------------------- #
def test_revoke_unknown_token_succeeds(service):
    service.revoke(RevokeIn(authorization=_bearer("does-not-exist")))


def test_revoke_requires_bearer_header(service):
    with pytest.raises(MissingCredentialError):
        service.revoke(RevokeIn(authorization=None))


# ----------------------------- Authorize ---------------------------------- #
def test_authorize_with_wrong_secret(service, account):
    session = service.login(LoginIn(email=account.email, password=PASSWORD))

    with pytest.raises(SignatureInvalidError):
        service.authorize(_bearer(session.access_token), secret="x" * 48)


def test_authorize_expired_access_token(service, account):
    with freeze_time("2024-01-01 12:00:00") as frozen:
        session = service.login(LoginIn(email=account.email, password=PASSWORD))
        frozen.tick(timedelta(hours=1))
        with pytest.raises(TokenExpiredError):
            service.authorize(_bearer(session.access_token))


def test_authorize_rejects_refresh_token_as_access(service, account):
    """The opaque refresh token is not a JWT and cannot unlock protected operations."""
    session = service.login(LoginIn(email=account.email, password=PASSWORD))
    with pytest.raises(MalformedTokenError):
        service.authorize(_bearer(session.refresh_token))


# ------------------------------- Admin ------------------------------------ #
def test_reset_sessions_in_dev(service, account):
    for _ in range(3):
        service.login(LoginIn(email=account.email, password=PASSWORD))

    assert service.reset_sessions() == 3


def test_reset_sessions_outside_dev_is_forbidden(hasher, account):
    store = InMemoryRefreshTokenStore()
    svc = AuthService(
        accounts=InMemoryAccountDirectory([account]),
        hasher=hasher,
        codec=JWTAccessTokenCodec(),
        refresh_store=store,
        token_cfg=AuthTokenConfig(secret=SECRET, platform="production"),
    )
    session = svc.login(LoginIn(email=account.email, password=PASSWORD))

    with pytest.raises(ForbiddenOperationError):
        svc.reset_sessions()
    assert store.lookup_owner(session.refresh_token) == account.id
