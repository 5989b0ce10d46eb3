from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.core.config import settings

# libpq options asyncpg does not accept
_PSYCOPG_ONLY_PARAMS = ("sslmode", "channel_binding")


def to_async_database_url(database_url: str) -> str:
    """Use asyncpg for postgres URLs and drop psycopg-only params; other URLs pass through."""
    url = make_url(database_url)
    if url.drivername not in ("postgresql", "postgres", "postgresql+asyncpg"):
        return database_url
    query = {k: v for k, v in url.query.items() if k not in _PSYCOPG_ONLY_PARAMS}
    return url.set(drivername="postgresql+asyncpg", query=query).render_as_string(hide_password=False)


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {}
    kwargs: dict[str, Any] = {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}
    if settings.database_ssl:
        kwargs["connect_args"] = {"ssl": True}  # asyncpg uses this instead of sslmode
    return kwargs


async_database_url = to_async_database_url(settings.database_url)

engine = create_async_engine(
    async_database_url,
    echo=settings.env == "development",
    **_engine_kwargs(async_database_url),
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables if using create_all; prefer Alembic in production."""
    import app.models  # noqa: F401 - register tables

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
