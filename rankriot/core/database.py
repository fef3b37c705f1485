"""Database connection and session management"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse
import ssl
import logging
from rankriot.core.config import settings

logger = logging.getLogger(__name__)


def mask_url(url: str) -> str:
    """Mask sensitive parts of database URL for logging"""
    try:
        parsed = urlparse(url)
        if parsed.password:
            netloc = parsed.netloc.replace(f":{parsed.password}@", ":***@", 1)
            return urlunparse(parsed._replace(netloc=netloc))
        return url
    except Exception:
        if len(url) > 20:
            return f"{url[:10]}...{url[-10:]}"
        return "***"


def prepare_database_url(url: str) -> tuple:
    """
    Normalize a managed Postgres URL for asyncpg.

    asyncpg does not accept ``sslmode`` in the URL, so it is stripped and
    translated into an ``ssl`` connect argument. Plain ``postgresql://`` URLs
    are switched to the asyncpg driver. Non-Postgres URLs pass through.

    Returns:
        (database_url, connect_args)
    """
    connect_args = {}
    if not (url.startswith("postgresql://") or url.startswith("postgresql+asyncpg://")):
        return url, connect_args

    parsed = urlparse(url)
    query_params = parse_qs(parsed.query)

    if "sslmode" in query_params:
        sslmode = query_params.pop("sslmode")[0]
        if sslmode in ["verify-ca", "verify-full"]:
            connect_args["ssl"] = ssl.create_default_context()
        elif sslmode == "disable":
            connect_args["ssl"] = False
        else:
            # require/prefer: encrypted, certificate not verified (managed poolers)
            ssl_context = ssl.create_default_context()
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
            connect_args["ssl"] = ssl_context

    url = urlunparse(parsed._replace(query=urlencode(query_params, doseq=True)))
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    if connect_args.get("ssl"):
        connect_args["timeout"] = 10
    return url, connect_args


database_url, connect_args = prepare_database_url(settings.database_url)
logger.info(f"DATABASE_URL: {mask_url(database_url)}")

engine_kwargs = {
    "echo": False,
    "future": True,
    "connect_args": connect_args,
}
if database_url.startswith("postgresql"):
    engine_kwargs.update(
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
    )

engine = create_async_engine(database_url, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """Dependency for getting database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
