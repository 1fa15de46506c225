import copy
import hashlib
import hmac
import os
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Optional
from uuid import uuid4

from marketplace.models import Account, AccountSession
from marketplace.services.document_store import utc_now_iso

PBKDF2_ITERATIONS = 120_000


class AccountError(RuntimeError):
    """Base class for account and session failures."""


class AccountConflictError(AccountError):
    pass


class InvalidCredentialsError(AccountError):
    pass


class NoSessionError(AccountError):
    pass


def _hash_password(password: str, salt: bytes) -> str:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS).hex()


@dataclass
class AccountClient:
    """Email/password accounts with at most one current session per client.

    The client plays the role of the browser: it remembers the id of the
    session it created, and ``"current"`` always refers to that one.
    """

    db_path: str

    def __post_init__(self) -> None:
        self._lock = Lock()
        self._current_session_id: Optional[str] = None
        path = Path(self.db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = str(path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._lock:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS accounts (
                        id TEXT PRIMARY KEY,
                        email TEXT NOT NULL UNIQUE,
                        name TEXT NOT NULL,
                        password_hash TEXT NOT NULL,
                        salt TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS account_sessions (
                        id TEXT PRIMARY KEY,
                        account_id TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                    """
                )
                conn.commit()

    @property
    def current_session_id(self) -> Optional[str]:
        return self._current_session_id

    def for_session(self, session_id: Optional[str]) -> "AccountClient":
        """A handle on the same accounts that treats ``session_id`` as current."""
        bound = copy.copy(self)
        bound._current_session_id = session_id
        return bound

    def create(self, account_id: str, email: str, password: str, name: str) -> Account:
        normalized_email = email.strip().lower()
        if not normalized_email or not password:
            raise InvalidCredentialsError("Email and password are required")
        salt = os.urandom(16)
        created_at = utc_now_iso()
        with self._lock:
            with self._connect() as conn:
                try:
                    conn.execute(
                        """
                        INSERT INTO accounts (id, email, name, password_hash, salt, created_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (account_id, normalized_email, name, _hash_password(password, salt), salt.hex(), created_at),
                    )
                except sqlite3.IntegrityError as exc:
                    raise AccountConflictError("A user with the same email already exists") from exc
                conn.commit()
        return Account(id=account_id, name=name, email=normalized_email, created_at=created_at)

    def create_email_password_session(self, email: str, password: str) -> AccountSession:
        normalized_email = email.strip().lower()
        with self._lock:
            with self._connect() as conn:
                row = conn.execute("SELECT * FROM accounts WHERE email = ?", (normalized_email,)).fetchone()
                if not row:
                    raise InvalidCredentialsError("Invalid credentials")
                expected = row["password_hash"]
                actual = _hash_password(password, bytes.fromhex(row["salt"]))
                if not hmac.compare_digest(expected, actual):
                    raise InvalidCredentialsError("Invalid credentials")

                session = AccountSession(
                    id=f"sess_{uuid4().hex}",
                    account_id=row["id"],
                    email=row["email"],
                    created_at=utc_now_iso(),
                )
                conn.execute(
                    "INSERT INTO account_sessions (id, account_id, created_at) VALUES (?, ?, ?)",
                    (session.id, session.account_id, session.created_at),
                )
                conn.commit()
            self._current_session_id = session.id
        return session

    def delete_session(self, session_id: str = "current") -> None:
        with self._lock:
            target = self._current_session_id if session_id == "current" else session_id
            if not target:
                raise NoSessionError("No active session")
            with self._connect() as conn:
                deleted = conn.execute("DELETE FROM account_sessions WHERE id = ?", (target,)).rowcount
                conn.commit()
            if target == self._current_session_id:
                self._current_session_id = None
            if not deleted:
                raise NoSessionError("Session not found")

    def get(self) -> Account:
        with self._lock:
            session_id = self._current_session_id
            if not session_id:
                raise NoSessionError("No active session")
            with self._connect() as conn:
                row = conn.execute(
                    """
                    SELECT a.id, a.name, a.email, a.created_at
                    FROM account_sessions s JOIN accounts a ON a.id = s.account_id
                    WHERE s.id = ?
                    """,
                    (session_id,),
                ).fetchone()
        if not row:
            raise NoSessionError("Session expired or revoked")
        return Account(id=row["id"], name=row["name"], email=row["email"], created_at=row["created_at"])
