from __future__ import annotations

from collections.abc import AsyncGenerator

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from rosterdesk.config import settings


def _normalize_async_database_url(url: str) -> str:
    """
    Hosted Postgres providers often hand out DATABASE_URL as:
      - postgres://...
      - postgresql://...
    For SQLAlchemy async runtime we must use an async driver, e.g. postgresql+asyncpg://...
    """
    u = (url or "").strip()
    if not u:
        return u

    # Normalize scheme -> asyncpg driver.
    if u.startswith("postgres://"):
        u = "postgresql+asyncpg://" + u[len("postgres://") :]
    elif u.startswith("postgresql://") and "+asyncpg" not in u and "+psycopg" not in u:
        u = "postgresql+asyncpg://" + u[len("postgresql://") :]

    if not u.startswith("postgresql+asyncpg://"):
        return u

    # asyncpg.connect() does NOT accept sslmode=..., it takes `ssl` instead.
    parts = urlsplit(u)
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    sslmode = params.pop("sslmode", None)
    if sslmode:
        mode = sslmode.lower()
        if mode in {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}:
            params.setdefault("ssl", mode)
    new_query = urlencode(params, doseq=True)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, new_query, parts.fragment))


def create_engine() -> AsyncEngine:
    return create_async_engine(
        _normalize_async_database_url(settings.database_url),
        pool_pre_ping=True,
    )


engine = create_engine()
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
