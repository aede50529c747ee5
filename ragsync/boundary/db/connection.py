"""
Database connection management.

Provides the SQLAlchemy async engine and session factory used by the
vector store.

Dependencies: sqlalchemy, asyncpg, ragsync.configs
System role: Database connection lifecycle management
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from ragsync.configs.database import DatabaseSettings


def get_async_engine(db_config: DatabaseSettings) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use; sessions are tagged
    with application_name so sync traffic is identifiable on the server.

    Args:
        db_config: Database settings

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails

    Usage:
        engine = get_async_engine(get_settings().database)
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
        connect_args={"server_settings": {"application_name": db_config.application_name}},
    )


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session factory for database operations.

    Sessions use autoflush=False and expire_on_commit=False for explicit
    transaction control.

    Args:
        engine: Async engine to bind sessions to

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory(engine)
        async with SessionFactory() as session:
            async with session.begin():
                await session.execute(stmt)
    """
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
