from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class TimestampedSchema(BaseSchema):
    # epoch milliseconds
    created_at: int
    updated_at: int


class PatchSchema(BaseModel):
    """Partial update body.

    Only fields present in the request are applied. An explicit ``null`` clears
    a field listed in ``nullable_fields`` and is ignored for any other field,
    so a PATCH can never write NULL into a required column.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    def changes(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in self.nullable_fields
        }
