import time

import pytest

from app.security.auth.jwt_handler import (
    InvalidTokenError,
    JWTConfig,
    JWTHandler,
    Principal,
    Role,
)


@pytest.fixture
def handler():
    return JWTHandler("test-secret", JWTConfig(expires_minutes=5))


def test_access_token_round_trip(handler):
    token = handler.create_access_token("user_1", Role.OWNER, "org_1")

    principal = handler.principal_from_token(token)

    assert principal == Principal(subject="user_1", role=Role.OWNER, organization_id="org_1")


def test_tampered_token_is_rejected(handler):
    token = handler.create_access_token("user_1", Role.EDITOR, "org_1")
    forged = JWTHandler("other-secret", handler.config).create_access_token(
        "user_1", Role.SUPER_ADMIN
    )
    header, _, signature = token.split(".")
    _, forged_payload, _ = forged.split(".")

    with pytest.raises(InvalidTokenError, match="signature"):
        handler.verify_token(f"{header}.{forged_payload}.{signature}")


def test_expired_token_is_rejected(handler, monkeypatch):
    token = handler.create_access_token("user_1", Role.OWNER, "org_1")
    later = time.time() + 10 * 60
    monkeypatch.setattr("app.security.auth.jwt_handler.time.time", lambda: later)

    with pytest.raises(InvalidTokenError, match="expired"):
        handler.verify_token(token)


def test_unknown_role_is_rejected(handler):
    token = handler.create_token("user_1", {"role": "janitor"})

    with pytest.raises(InvalidTokenError, match="Unknown role"):
        handler.principal_from_token(token)


def test_issuer_is_enforced():
    issuing = JWTHandler("s", JWTConfig(issuer="passiton"))
    verifying = JWTHandler("s", JWTConfig(issuer="someone-else"))

    with pytest.raises(InvalidTokenError, match="issuer"):
        verifying.verify_token(issuing.create_access_token("u", Role.OWNER))


@pytest.mark.parametrize("token", ["", "abc", "a.b", "!!!.@@@.###"])
def test_malformed_tokens(handler, token):
    with pytest.raises(InvalidTokenError):
        handler.verify_token(token)


def test_principal_permissions():
    admin = Principal("a", Role.SUPER_ADMIN)
    owner = Principal("o", Role.OWNER, "org_1")
    orphan = Principal("e", Role.EDITOR)

    assert admin.can_manage("anything")
    assert owner.can_manage("org_1")
    assert not owner.can_manage("org_2")
    assert not orphan.can_manage(None)
