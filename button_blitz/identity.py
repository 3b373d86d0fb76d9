"""Player accounts.

The game only ever asks an identity provider who is signed in; registering,
signing in and signing out are driven by the account screen. ``NullIdentity``
stands in when accounts are switched off, so the rest of the game treats a
missing provider the same as a signed-out player.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from werkzeug.security import check_password_hash, generate_password_hash

from .persistence import open_db, utc_now_iso

logger = logging.getLogger(__name__)

MIN_PASSWORD_LEN = 6


class IdentityError(Exception):
    pass


class AuthError(IdentityError):
    """Bad credentials or invalid account details; message is user-facing."""


class IdentityUnavailable(IdentityError):
    pass


@dataclass(frozen=True, slots=True)
class User:
    id: str
    display_name: str
    email: str = ""


class IdentityProvider(Protocol):
    @property
    def enabled(self) -> bool: ...
    def current_user(self) -> User | None: ...
    def register(self, email: str, password: str, display_name: str | None = None) -> User: ...
    def sign_in(self, email: str, password: str) -> User: ...
    def sign_out(self) -> None: ...


class NullIdentity:
    @property
    def enabled(self) -> bool:
        return False

    def current_user(self) -> User | None:
        return None

    def register(self, email: str, password: str, display_name: str | None = None) -> User:
        raise IdentityUnavailable("Accounts are disabled.")

    def sign_in(self, email: str, password: str) -> User:
        raise IdentityUnavailable("Accounts are disabled.")

    def sign_out(self) -> None:
        return


def _normalize_email(email: str) -> str:
    return str(email).strip().lower()


class LocalIdentity:
    """Email/password accounts stored in the same sqlite file as the scores.

    Storage failures (a corrupt or unwritable data file) surface as
    ``IdentityUnavailable`` so the account screen can show them as a message.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._current: User | None = None

    @property
    def enabled(self) -> bool:
        return True

    def current_user(self) -> User | None:
        return self._current

    def register(self, email: str, password: str, display_name: str | None = None) -> User:
        address = _normalize_email(email)
        if "@" not in address or address.startswith("@"):
            raise AuthError("Enter a valid email address.")
        if len(password) < MIN_PASSWORD_LEN:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LEN} characters.")

        name = (display_name or "").strip() or address.split("@", 1)[0]
        user = User(id=uuid.uuid4().hex, display_name=name, email=address)

        try:
            self._insert_account(user, generate_password_hash(password))
        except sqlite3.IntegrityError:
            raise AuthError("An account with that email already exists.") from None
        except (sqlite3.Error, OSError) as exc:
            logger.exception("Registering %s failed", address)
            raise IdentityUnavailable("Accounts are unavailable right now.") from exc

        logger.info("Registered account %s", user.id)
        self._current = user
        return user

    def sign_in(self, email: str, password: str) -> User:
        address = _normalize_email(email)
        try:
            row = self._find_account(address)
        except (sqlite3.Error, OSError) as exc:
            logger.exception("Signing in %s failed", address)
            raise IdentityUnavailable("Accounts are unavailable right now.") from exc

        if row is None or not check_password_hash(str(row[2]), password):
            logger.warning("Sign-in failed for %s", address)
            raise AuthError("Incorrect email or password.")

        self._current = User(id=str(row[0]), display_name=str(row[1]), email=address)
        return self._current

    def sign_out(self) -> None:
        self._current = None

    def _insert_account(self, user: User, password_hash: str) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = open_db(self._db_path)
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO user_account(id, email, display_name, password_hash, created_at_utc)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user.id, user.email, user.display_name, password_hash, utc_now_iso()),
                )
        finally:
            conn.close()

    def _find_account(self, address: str) -> tuple | None:
        if not self._db_path.exists():
            return None
        conn = open_db(self._db_path)
        try:
            return conn.execute(
                "SELECT id, display_name, password_hash FROM user_account WHERE email = ?",
                (address,),
            ).fetchone()
        finally:
            conn.close()
