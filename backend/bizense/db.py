import logging
import time
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from bizense.config import Settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    kwargs = {"echo": False}
    if settings.DATABASE_URL.startswith("postgresql"):
        kwargs["pool_pre_ping"] = True
    return create_async_engine(settings.DATABASE_URL, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    factory = request.app.state.context.session_factory
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_db(factory: async_sessionmaker[AsyncSession]) -> tuple[bool, float]:
    """Run a simple SELECT 1 and return (ok, latency_ms)."""
    start = time.perf_counter()
    try:
        async with factory() as session:
            await session.execute(text("SELECT 1"))
        return True, (time.perf_counter() - start) * 1000
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Store health check failed: %s", e)
        return False, (time.perf_counter() - start) * 1000
