from __future__ import annotations
from pydantic import BaseModel, Field, model_validator
from typing import Union
from .common import ByteOrder, ProbeKind

class BufferInfo(BaseModel):
    path: str | None = None
    size: int = Field(..., ge=0)
    byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN

class MarkerHit(BaseModel):
    marker: str
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _span_matches_marker(self):
        if self.end - self.start != len(self.marker):
            raise ValueError("end - start must equal marker length")
        return self

class ProbeResult(BaseModel):
    offset: int = Field(..., ge=0)
    kind: ProbeKind
    # bytes values are reported as hex
    value: Union[int, float, str]
    next_offset: int = Field(..., ge=0)
