from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from crm_attendance.core.config import settings

# Marking traffic is bursty (start and end of the working day); idle connections
# in between are recycled after db_pool_recycle seconds and pinged before reuse.
engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_pre_ping=True,
    pool_recycle=settings.db_pool_recycle,
)

# Records are returned to the API after commit, so attributes must stay loaded
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; each attendance write commits on its own."""
    async with AsyncSessionLocal() as session:
        yield session
