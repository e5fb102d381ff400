from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from .common import ByteOrder

HISTORY_LIMIT = 100

class ReaderConfig(BaseModel):
    byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN
    history_limit: int = Field(HISTORY_LIMIT, ge=1)

    @field_validator("byte_order", mode="before")
    @classmethod
    def _byte_order_aliases(cls, v):
        return ByteOrder.parse(v)
