from datetime import datetime, timedelta, timezone
from jose import jwt
from fileshare.core.config import Settings
from fileshare.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from fileshare.models.user import User

SETTINGS = Settings(_env_file=None, SECRET_KEY="unit-secret")


def make_user(role="user"):
    return User(id=7, username="alice", email="a@x.com", role=role)


def test_password_hash_is_salted_and_verifiable():
    first = get_password_hash("pw1")
    second = get_password_hash("pw1")

    assert first != "pw1"
    assert first != second
    assert verify_password("pw1", first)
    assert not verify_password("wrong", first)


def test_token_round_trips_identity():
    token = create_access_token(make_user("admin"), SETTINGS)

    identity = decode_access_token(token, SETTINGS)

    assert identity is not None
    assert identity.id == 7
    assert identity.username == "alice"
    assert identity.role == "admin"
    assert identity.is_admin


def test_token_expires_after_24_hours_by_default():
    token = create_access_token(make_user(), SETTINGS)
    payload = jwt.decode(token, "unit-secret", algorithms=["HS256"])

    lifetime = payload["exp"] - payload["iat"]
    assert lifetime == 24 * 60 * 60


def test_expired_token_is_rejected():
    token = create_access_token(make_user(), SETTINGS, expires_delta=timedelta(seconds=-1))

    assert decode_access_token(token, SETTINGS) is None


def test_token_signed_with_another_secret_is_rejected():
    other = Settings(_env_file=None, SECRET_KEY="someone-else")
    token = create_access_token(make_user(), other)

    assert decode_access_token(token, SETTINGS) is None


def test_garbage_token_is_rejected():
    assert decode_access_token("not-a-token", SETTINGS) is None


def test_token_with_unknown_role_is_rejected():
    exp = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode(
        {"sub": "7", "id": 7, "username": "alice", "role": "root", "exp": exp},
        "unit-secret",
        algorithm="HS256",
    )

    assert decode_access_token(token, SETTINGS) is None


def test_token_missing_claims_is_rejected():
    exp = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode({"sub": "7", "exp": exp}, "unit-secret", algorithm="HS256")

    assert decode_access_token(token, SETTINGS) is None
