"""
Create the attendance, users and teams tables if they do not exist.

Run once against a fresh database:
    python -m crm_attendance.db.init_db
"""
import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

# Import all models so their tables are registered on Base.metadata
from crm_attendance.auth.models import User  # noqa: F401
from crm_attendance.core.models import Attendance, Team  # noqa: F401
from crm_attendance.db.session import Base, engine


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    try:
        await create_tables(engine)
        print("Attendance tables ready.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
