from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import pytest

from button_blitz.identity import AuthError, IdentityUnavailable, LocalIdentity, NullIdentity


def test_register_signs_the_new_user_in(tmp_path: Path) -> None:
    ident = LocalIdentity(tmp_path / "blitz.sqlite3")
    assert ident.current_user() is None

    user = ident.register("Ada@Example.com ", "hunter22", "Ada")

    assert ident.current_user() == user
    assert user.display_name == "Ada"
    assert user.email == "ada@example.com"


def test_display_name_defaults_to_email_local_part(tmp_path: Path) -> None:
    user = LocalIdentity(tmp_path / "blitz.sqlite3").register("grace@navy.mil", "cobol60")
    assert user.display_name == "grace"


def test_duplicate_email_is_rejected(tmp_path: Path) -> None:
    ident = LocalIdentity(tmp_path / "blitz.sqlite3")
    ident.register("sam@example.com", "secret1")

    with pytest.raises(AuthError, match="already exists"):
        ident.register("SAM@example.com", "secret2")


@pytest.mark.parametrize(("email", "password"), [("not-an-email", "secret1"), ("a@b.c", "short")])
def test_invalid_registration_details(tmp_path: Path, email: str, password: str) -> None:
    with pytest.raises(AuthError):
        LocalIdentity(tmp_path / "blitz.sqlite3").register(email, password)


def test_sign_in_checks_password_and_sign_out_clears(tmp_path: Path) -> None:
    path = tmp_path / "blitz.sqlite3"
    registered = LocalIdentity(path).register("sam@example.com", "secret1", "Sam")

    ident = LocalIdentity(path)
    with pytest.raises(AuthError):
        ident.sign_in("sam@example.com", "wrong-password")
    assert ident.current_user() is None

    user = ident.sign_in("sam@example.com", "secret1")
    assert user.id == registered.id
    assert user.display_name == "Sam"

    ident.sign_out()
    assert ident.current_user() is None


def test_sign_in_without_any_accounts(tmp_path: Path) -> None:
    with pytest.raises(AuthError):
        LocalIdentity(tmp_path / "missing.sqlite3").sign_in("x@y.z", "whatever")


def test_null_identity_is_disabled() -> None:
    ident = NullIdentity()
    assert ident.enabled is False
    assert ident.current_user() is None
    ident.sign_out()
    with pytest.raises(IdentityUnavailable):
        ident.sign_in("a@b.c", "secret1")
    with pytest.raises(IdentityUnavailable):
        ident.register("a@b.c", "secret1")


def test_password_is_stored_as_a_hash(tmp_path: Path) -> None:
    path = tmp_path / "blitz.sqlite3"
    LocalIdentity(path).register("sam@example.com", "secret1")

    conn = sqlite3.connect(path)
    try:
        stored = conn.execute("SELECT password_hash FROM user_account").fetchone()[0]
    finally:
        conn.close()

    assert isinstance(stored, str)
    assert "secret1" not in stored


def _corrupt_db(tmp_path: Path) -> Path:
    path = tmp_path / "blitz.sqlite3"
    path.write_bytes(b"this is not a database file\n" * 64)
    return path


def test_corrupt_data_file_makes_accounts_unavailable(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    ident = LocalIdentity(_corrupt_db(tmp_path))

    with caplog.at_level(logging.ERROR, logger="button_blitz.identity"):
        with pytest.raises(IdentityUnavailable, match="unavailable"):
            ident.register("a@b.cd", "secret1")
        with pytest.raises(IdentityUnavailable, match="unavailable"):
            ident.sign_in("a@b.cd", "secret1")

    assert ident.current_user() is None
    messages = [r.getMessage() for r in caplog.records]
    assert any("Registering a@b.cd failed" in m for m in messages)
    assert any("Signing in a@b.cd failed" in m for m in messages)


def test_unwritable_data_dir_makes_accounts_unavailable(tmp_path: Path) -> None:
    # A regular file where the data directory should be.
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(IdentityUnavailable):
        LocalIdentity(blocker / "blitz.sqlite3").register("a@b.cd", "secret1")
