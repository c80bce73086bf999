"""
auth/store.py -- SQLAlchemy Core persistence layer for guardian accounts.

Pattern: Repository + Data Mapper.
AccountStore is the repository; _row_to_account is the mapper. Flows and
route code never touch SQL directly -- they see only the capabilities in
auth/protocols.py.

Concurrency:
  The public methods are coroutines. Each runs one short blocking SQLAlchemy
  call in asyncio.to_thread so the event loop keeps serving other requests.
  Every write is a single statement in its own transaction, so no caller can
  observe a half-applied update. Concurrent token updates on the same account
  are last-write-wins.

Security:
  All queries use bound parameters. No f-strings in SQL.
  Email and phone uniqueness is enforced by UNIQUE constraints; create()
  also checks up front so the common conflict does not need an exception.

DB path: auth/guardian_accounts.db unless DATABASE_URL is set.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import Account, AccountDraft

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "guardians",
    _metadata,
    Column("id", String(32), primary_key=True),  # uuid4 hex
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("phone", String(32), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("access_token", Text),
    Column("verification_token", Text),  # bcrypt hash of the pending reset code
    Column("verification_token_expires_at", String(32)),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Account records.

    Usage:
        store = AccountStore("sqlite:///guardians.db")
        account = await store.create(AccountDraft(...))
        await store.update_access_token(account.id, token)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def find_by_email(self, email: str) -> Account | None:
        """Look up an account by exact email. Returns None if not found."""
        return await asyncio.to_thread(self._fetch_one, _accounts.c.email == email)

    async def find_by_id(self, account_id: str) -> Account | None:
        """Look up an account by primary key. Returns None if not found."""
        return await asyncio.to_thread(self._fetch_one, _accounts.c.id == account_id)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /health."""
        with self.engine.connect() as conn:
            conn.execute(_accounts.select().limit(1)).fetchall()
        return True

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, draft: AccountDraft) -> Account | None:
        """Insert a new account and return it, or None on email/phone conflict."""
        return await asyncio.to_thread(self._create, draft)

    async def update_access_token(self, account_id: str, token: str | None) -> bool:
        """Overwrite the stored access token. Returns False if the id is unknown."""
        return await asyncio.to_thread(self._update, account_id, access_token=token)

    async def update_verification_token(
        self, account_id: str, token_hash: str | None, expires_at: str | None = None
    ) -> bool:
        """Store the reset-code hash and its expiry, or clear both with None."""
        return await asyncio.to_thread(
            self._update,
            account_id,
            verification_token=token_hash,
            verification_token_expires_at=expires_at if token_hash is not None else None,
        )

    async def update_password(self, account_id: str, password_hash: str) -> bool:
        """Replace the password hash and drop the current access token together."""
        return await asyncio.to_thread(self._update, account_id, password_hash=password_hash, access_token=None)

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Blocking helpers (run in a worker thread)
    # ------------------------------------------------------------------

    def _fetch_one(self, clause) -> Account | None:
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(clause)).fetchone()
        return _row_to_account(row) if row is not None else None

    def _create(self, draft: AccountDraft) -> Account | None:
        account_id = uuid.uuid4().hex
        try:
            with self.engine.begin() as conn:
                taken = conn.execute(
                    _accounts.select().where(or_(_accounts.c.email == draft.email, _accounts.c.phone == draft.phone))
                ).fetchone()
                if taken is not None:
                    return None
                conn.execute(
                    _accounts.insert().values(
                        id=account_id,
                        first_name=draft.first_name,
                        last_name=draft.last_name,
                        email=draft.email,
                        phone=draft.phone,
                        password_hash=draft.password_hash,
                        created_at=_now_iso(),
                    )
                )
        except IntegrityError:
            # A concurrent create won the race for the same email or phone.
            return None
        return self._fetch_one(_accounts.c.id == account_id)

    def _update(self, account_id: str, **fields) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(_accounts.update().where(_accounts.c.id == account_id).values(**fields))
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        phone=row.phone,
        password_hash=row.password_hash,
        access_token=row.access_token,
        verification_token=row.verification_token,
        verification_token_expires_at=row.verification_token_expires_at,
        created_at=row.created_at,
    )
