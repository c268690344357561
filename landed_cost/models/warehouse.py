from __future__ import annotations

import uuid
from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from landed_cost.db.base import Base, TimestampMixin


class Warehouse(TimestampMixin, Base):
    __tablename__ = "company_warehouses"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("shipping_companies.id"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    province_code: Mapped[str] = mapped_column(String(16), nullable=False)
    city_code: Mapped[str] = mapped_column(String(16), nullable=False)
    detail_address: Mapped[str | None] = mapped_column(String(512))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    company = relationship("ShippingCompany", back_populates="warehouses")
    rate_types = relationship("RateType", back_populates="warehouse")
