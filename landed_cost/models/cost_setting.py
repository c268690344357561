from __future__ import annotations

import uuid
from sqlalchemy import Boolean, Enum, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from landed_cost.db.base import Base, TimestampMixin
from landed_cost.models.enums import CostSettingType


class CostSetting(TimestampMixin, Base):
    __tablename__ = "cost_settings"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # one row per type
    type: Mapped[CostSettingType] = mapped_column(
        Enum(CostSettingType, values_callable=lambda enum: [member.value for member in enum]),
        nullable=False,
        unique=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    # inland: {rate_per_cbm}; domestic: {base_fee, base_cbm, extra_unit, extra_rate}; 3pl: {rate_per_unit, unit}
    config: Mapped[dict] = mapped_column(JSONB, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
