from __future__ import annotations

from typing import Iterator, Optional

from binreader.models.common import ByteOrder, ProbeKind
from binreader.models.report import MarkerHit, ProbeResult

from .reader import BinaryReader, BytesLike, ReadingError, load_bytes


# -----------------------------
# Marker scanning
# -----------------------------

def iter_markers(
    data: BytesLike | BinaryReader,
    marker: str | bytes,
    *,
    byte_order: ByteOrder | str = ByteOrder.LITTLE_ENDIAN,
    start: int = 0,
    limit: Optional[int] = None,
) -> Iterator[MarkerHit]:
    """
    Yield every occurrence of ``marker``, overlapping ones included.
    Each search resumes one byte past the start of the previous hit.
    """
    reader = data if isinstance(data, BinaryReader) else BinaryReader(load_bytes(data), byte_order)
    text = marker.decode("latin-1") if isinstance(marker, (bytes, bytearray)) else marker
    if not text:
        return

    reader.seek(start)
    found = 0
    while limit is None or found < limit:
        try:
            reader.go_to(marker)
        except ReadingError:
            return
        end = reader.tell()
        hit_start = end - len(text)
        yield MarkerHit(marker=text, start=hit_start, end=end)
        found += 1
        reader.seek(hit_start + 1)


def find_marker(data: BytesLike | BinaryReader, marker: str | bytes, start: int = 0) -> Optional[MarkerHit]:
    return next(iter_markers(data, marker, start=start, limit=1), None)


# -----------------------------
# Typed probes
# -----------------------------

def probe(reader: BinaryReader, kind: ProbeKind | str, *, length: Optional[int] = None) -> ProbeResult:
    """
    Read one value of ``kind`` at the cursor. ``length`` is required for
    ``bytes`` and ``string``; bytes come back as a hex string.
    """
    kind = ProbeKind(kind)
    offset = reader.tell()

    if kind in (ProbeKind.BYTES, ProbeKind.STRING) and length is None:
        raise ValueError(f"{kind.value} probe needs a length")

    if kind is ProbeKind.BYTE:
        value = reader.read_byte()
    elif kind is ProbeKind.BYTES:
        value = reader.read_bytes(length).hex()
    elif kind is ProbeKind.SHORT:
        value = reader.read_short()
    elif kind is ProbeKind.INT:
        value = reader.read_int()
    elif kind is ProbeKind.LONG:
        value = reader.read_long()
    elif kind is ProbeKind.REAL:
        value = reader.read_real()
    elif kind is ProbeKind.STRING:
        value = reader.read_string(length)
    else:
        value = reader.read_string()

    return ProbeResult(offset=offset, kind=kind, value=value, next_offset=reader.tell())
