from __future__ import annotations

import uuid
from decimal import Decimal
from sqlalchemy import Boolean, Enum, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from landed_cost.db.base import Base, TimestampMixin
from landed_cost.models.enums import UnitType


class RateType(TimestampMixin, Base):
    __tablename__ = "shipping_rate_types"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("shipping_companies.id"), nullable=False, index=True
    )
    warehouse_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("company_warehouses.id"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    unit_type: Mapped[UnitType] = mapped_column(Enum(UnitType), nullable=False, default=UnitType.CBM)
    rounding_granularity: Mapped[Decimal | None] = mapped_column(Numeric(10, 4))
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    warehouse = relationship("Warehouse", back_populates="rate_types")
    brackets = relationship("RateBracket", back_populates="rate_type", cascade="all, delete-orphan")


class RateBracket(TimestampMixin, Base):
    __tablename__ = "international_shipping_rates"
    __table_args__ = (UniqueConstraint("rate_type_id", "cbm", name="uq_rate_bracket_cbm"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    rate_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("shipping_rate_types.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # inclusive upper bound of the bracket, in the rate type's billing unit
    cbm: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)

    rate_type = relationship("RateType", back_populates="brackets")
