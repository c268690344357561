from __future__ import annotations

import uuid
from sqlalchemy import Boolean, Integer, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from landed_cost.db.base import Base, TimestampMixin


class FactoryPreset(TimestampMixin, Base):
    __tablename__ = "factory_presets"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # [{"factory_id": str, "selected_item_ids": [str], "cost_values": {id: num}, "charge_type_values": {id: str}}]
    slots: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False)
