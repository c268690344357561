from __future__ import annotations

import uuid
from sqlalchemy import Boolean, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from landed_cost.db.base import Base, TimestampMixin


class ShippingCompany(TimestampMixin, Base):
    __tablename__ = "shipping_companies"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    warehouses = relationship("Warehouse", back_populates="company")
    cost_items = relationship("CompanyCostItem", back_populates="company", passive_deletes=True)
