# fintrack/core/database.py
from dataclasses import dataclass
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from fastapi import Request
from .config import Settings
import logging
from typing import AsyncGenerator

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_engine(settings: Settings) -> AsyncEngine:
    engine_kwargs = {
        "echo": settings.DB_ECHO,
        "future": True,
    }

    if settings.is_sqlite:
        # aiosqlite runs the connection in a worker thread
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if settings.is_memory_db:
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        logger.info("🔧 Configured engine for SQLite")
    else:
        engine_kwargs.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": 30,       # Seconds to wait for a free connection
            "pool_pre_ping": True,    # Check connection before using
            "pool_recycle": 300,      # Recycle connections after 5 minutes
        })

    return create_async_engine(settings.DATABASE_URL, **engine_kwargs)


@dataclass(frozen=True)
class AppContext:
    """Everything a request needs from the process: settings and the storage handle.

    Built once by the application factory and attached to ``app.state.context``.
    """
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings)
        session_factory = async_sessionmaker(
            bind=engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )
        return cls(settings=settings, engine=engine, session_factory=session_factory)


def get_app_context(request: Request) -> AppContext:
    return request.app.state.context


# Dependency to get DB session with proper exception handling
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    session = get_app_context(request).session_factory()
    try:
        yield session
    except Exception as e:
        # Anything raised inside the request discards the unit of work
        logger.debug(f"Rolling back session: {type(e).__name__}")
        await session.rollback()
        raise
    finally:
        await session.close()
        logger.debug("Database session closed")
