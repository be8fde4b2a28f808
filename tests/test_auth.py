from __future__ import annotations

import base64
from unittest.mock import patch

import pytest

from transcript_monitor import auth
from transcript_monitor.exceptions import RandomnessError

ROUNDS = 4


def test_set_password_and_authenticate() -> None:
    stored = auth.set_password("s3cret", rounds=ROUNDS)

    assert auth.authenticate(stored, "s3cret") is True
    assert auth.authenticate(stored, "wrong") is False
    assert auth.authenticate(stored.decode("ascii"), "s3cret") is True


def test_authenticate_rejects_missing_or_malformed_hash() -> None:
    assert auth.authenticate(b"", "anything") is False
    assert auth.authenticate(b"not-a-bcrypt-hash", "anything") is False


def test_reset_password_generates_base64_password() -> None:
    password, stored = auth.reset_password(rounds=ROUNDS)

    assert len(base64.b64decode(password)) == 6
    assert auth.authenticate(stored, password) is True


def test_user_reset_forces_password_change() -> None:
    user = auth.User()
    user.set_password("initial", rounds=ROUNDS)

    password = user.reset_password(rounds=ROUNDS)

    assert user.change_password is True
    assert user.authenticate(password) is True
    assert user.authenticate("initial") is False


def test_user_reset_entropy_failure_changes_nothing() -> None:
    user = auth.User()
    user.set_password("initial", rounds=ROUNDS)
    original_hash = user.password_hash

    with patch.object(auth.secrets, "token_bytes", side_effect=OSError("no entropy")):
        with pytest.raises(RandomnessError):
            user.reset_password(rounds=ROUNDS)

    assert user.password_hash == original_hash
    assert user.change_password is False


def test_user_payload_round_trip() -> None:
    user = auth.User(type=auth.STAFF_USER)
    user.set_password("pw", rounds=ROUNDS)

    restored = auth.User.from_payload(user.to_payload())

    assert restored.type == auth.STAFF_USER
    assert restored.authenticate("pw") is True
    assert restored.created == user.created

    with pytest.raises(ValueError):
        auth.User.from_payload({"type": "root"})
