from __future__ import annotations
from enum import Enum

class ByteOrder(str, Enum):
    """struct prefix for multi-byte reads."""
    LITTLE_ENDIAN = "<"
    BIG_ENDIAN = ">"

    @classmethod
    def parse(cls, v: "ByteOrder | str") -> "ByteOrder":
        if isinstance(v, cls):
            return v
        key = str(v).strip().lower()
        if key in ("<", "le", "little", "little_endian", "little-endian"):
            return cls.LITTLE_ENDIAN
        if key in (">", "be", "big", "big_endian", "big-endian"):
            return cls.BIG_ENDIAN
        raise ValueError(f"unknown byte order {v!r}")

class ProbeKind(str, Enum):
    BYTE = "byte"
    BYTES = "bytes"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    REAL = "real"
    STRING = "string"
    CSTRING = "cstring"
