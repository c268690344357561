from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from landed_cost.db.session import get_session


async def get_db_session() -> AsyncSession:
    async for session in get_session():
        yield session
