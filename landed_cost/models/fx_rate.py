from __future__ import annotations

import uuid
from decimal import Decimal
from sqlalchemy import Date, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from landed_cost.db.base import Base, TimestampMixin


class FxRateDaily(TimestampMixin, Base):
    __tablename__ = "fx_rates_daily"
    __table_args__ = (UniqueConstraint("currency", "quote", "rate_date", name="uq_fx_rates_daily"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    quote: Mapped[str] = mapped_column(String(3), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(18, 8), nullable=False)
    rate_date: Mapped[Date] = mapped_column(Date, nullable=False)
