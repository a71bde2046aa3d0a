"""
Questions Unlimited Backend: Question Bank (Database Session Management)
=========================================================================

What:  The async engine, the session factory, and the FastAPI dependency
       that hands one session to each request.
How:   `QuestionBank.connect()` resolves the database URL (reading the
       password file with aiofiles), builds a pooled async engine and a
       session factory. The app lifespan stores the bank on `app.state`;
       `get_db_session` pulls it from there for every request.
Who:   Created by main.lifespan; injected into route handlers via Depends().

Concurrency Model:
    There is exactly one engine per running app and no application-level
    lock around it. The pool hands each request its own connection, and
    each request runs in its own session/transaction. Reads proceed in
    parallel; concurrent writes are serialized by PostgreSQL itself.

Connection Pooling:
    pool_size=10, max_overflow=5, pool_pre_ping=True, pool_recycle=3600.
    SQLite (tests, local hacking) uses SQLAlchemy's default pool and has
    foreign keys switched on per connection so ON DELETE CASCADE applies.
"""

import logging
from typing import AsyncGenerator, Optional

import aiofiles
from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from questionbank.config import Settings
from questionbank.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers its table on this metadata, which Alembic
    (--autogenerate) and `QuestionBank.create_tables()` both read.
    """
    pass


# ── URL Resolution ────────────────────────────────────────────────────────
async def load_database_url(settings: Settings) -> str:
    """
    Resolve the SQLAlchemy URL for the configured database.

    What:    DATABASE_URL wins when set. Otherwise the PG_* settings are
             validated and the password is read from PG_PASSWORDFILE.
    Raises:  ConfigurationError for missing variables or an unreadable
             password file.
    """
    if settings.database_url:
        return settings.database_url

    settings.validate_database_settings()

    try:
        async with aiofiles.open(settings.pg_passwordfile, "r", encoding="utf-8") as f:
            password = await f.read()
    except OSError as e:
        raise ConfigurationError(
            message=f"Could not read PG_PASSWORDFILE '{settings.pg_passwordfile}'",
            context={"os_error": str(e)},
        ) from e

    return settings.build_database_url(password)


def enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Connect-event listener: SQLite only enforces FKs when asked to."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for(url: str, settings: Optional[Settings] = None, **kwargs) -> AsyncEngine:
    """
    Build an async engine for `url`.

    Server databases get the pool settings; SQLite gets the foreign-key
    listener instead. Extra keyword arguments go straight to
    `create_async_engine` (tests pass `poolclass=StaticPool`).
    """
    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    options = dict(kwargs)

    if settings is not None:
        options.setdefault("echo", settings.log_level == "DEBUG")
        if not is_sqlite:
            options.setdefault("pool_size", settings.db_pool_size)
            options.setdefault("max_overflow", settings.db_max_overflow)
            options.setdefault("pool_pre_ping", settings.db_pool_pre_ping)
            options.setdefault("pool_recycle", 3600)

    engine = create_async_engine(url, **options)

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    return engine


# ── Question Bank ─────────────────────────────────────────────────────────
class QuestionBank:
    """
    Owns the engine and session factory for one running application.

    Lifecycle:
        1. `await QuestionBank.connect(settings)` in the app lifespan
        2. `get_db_session` opens one session per request
        3. `await bank.dispose()` on shutdown closes every pooled connection
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        # expire_on_commit=False: response models are built after commit
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    async def connect(cls, settings: Settings) -> "QuestionBank":
        """Resolve the URL, build the engine and verify it answers."""
        url = await load_database_url(settings)
        engine = create_engine_for(url, settings)
        bank = cls(engine)
        await bank.ping()
        logger.info(
            "Connected to %s",
            make_url(url).render_as_string(hide_password=True),
        )
        if settings.db_create_tables:
            await bank.create_tables()
        return bank

    def session(self) -> AsyncSession:
        """A new session; use as `async with bank.session() as db:`."""
        return self.session_factory()

    async def create_tables(self) -> None:
        """CREATE TABLE IF NOT EXISTS for every registered model."""
        # Models must be imported so their tables exist on Base.metadata
        import questionbank.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables verified")

    async def ping(self) -> None:
        """Round-trip a `SELECT 1`; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close every pooled connection (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
def get_question_bank(request: Request) -> QuestionBank:
    """FastAPI dependency: the QuestionBank attached to the running app."""
    return request.app.state.question_bank


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the app's QuestionBank
        2. Yields it to the route handler
        3. On error: rolls back and re-raises for the exception handlers
        4. Always: closes the session (returns the connection to the pool)

    Write services commit themselves before returning. The code after
    `yield` may run once the response is already on the wire, so nothing
    a client is told about may depend on it.
    """
    bank = get_question_bank(request)
    async with bank.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
