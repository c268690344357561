from __future__ import annotations

import uuid
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from landed_cost.db.base import now_ms
from landed_cost.models.fx_rate import FxRateDaily


class FxRateRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def recent(self, quote: str, limit_days: int) -> list[FxRateDaily]:
        dates = await self.session.execute(
            select(FxRateDaily.rate_date)
            .where(FxRateDaily.quote == quote)
            .group_by(FxRateDaily.rate_date)
            .order_by(FxRateDaily.rate_date.desc())
            .limit(limit_days)
        )
        wanted = [row[0] for row in dates.all()]
        if not wanted:
            return []
        result = await self.session.execute(
            select(FxRateDaily)
            .where(FxRateDaily.quote == quote, FxRateDaily.rate_date.in_(wanted))
            .order_by(FxRateDaily.rate_date)
        )
        return list(result.scalars().all())

    async def upsert_many(self, rows: list[dict]) -> None:
        if not rows:
            return
        stamp = now_ms()
        statement = insert(FxRateDaily).values(
            [{**row, "id": uuid.uuid4(), "created_at": stamp, "updated_at": stamp} for row in rows]
        )
        statement = statement.on_conflict_do_update(
            constraint="uq_fx_rates_daily",
            set_={"rate": statement.excluded.rate, "updated_at": stamp},
        )
        await self.session.execute(statement)
        await self.session.commit()
