"""Async engine, session factory and the get_db dependency for HRplus signal storage."""

import ssl
from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from hrsignals.config import settings

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

# libpq-style TLS query params that asyncpg rejects
SSL_QUERY_PARAMS = ("sslmode", "ssl")


def _hosted_postgres_ssl_context() -> ssl.SSLContext:
    """TLS without certificate verification, for Supabase-hosted HRplus databases."""
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def get_engine_url_and_connect_args(database_url: str | None = None) -> tuple[str, dict]:
    """
    Engine URL with TLS query params removed, plus asyncpg connect_args.
    Supabase URLs that asked for TLS get it back through an SSL context.
    """
    url = database_url or settings.database_url
    connect_args: dict = {}
    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    requested_tls = [query.pop(param) for param in SSL_QUERY_PARAMS if param in query]
    if not requested_tls:
        return url, connect_args

    url = urlunparse(parsed._replace(query=urlencode(query, doseq=True)))
    if "supabase" in parsed.netloc:
        connect_args["ssl"] = _hosted_postgres_ssl_context()
    return url, connect_args


_db_url, _connect_args = get_engine_url_and_connect_args()


class Base(DeclarativeBase):
    """Declarative base for every hrsignals table."""


engine = create_async_engine(
    _db_url,
    echo=settings.log_level == "DEBUG",
    connect_args=_connect_args,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: committed when the handler returns, rolled back if it raises."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
