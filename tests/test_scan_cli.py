import json

import pytest
from pydantic import ValidationError

from binreader.binary.reader import BinaryReader
from binreader.binary.scan import find_marker, iter_markers, probe
from binreader.cli import main
from binreader.models.common import ByteOrder
from binreader.models.config import ReaderConfig


def test_iter_markers_overlapping():
    hits = list(iter_markers(b"AAAA", "AA"))
    assert [(h.start, h.end) for h in hits] == [(0, 2), (1, 3), (2, 4)]


def test_iter_markers_limit_and_start():
    hits = list(iter_markers(b"xAxAxA", "A", start=2, limit=1))
    assert [h.start for h in hits] == [3]


def test_find_marker():
    assert find_marker(b"..RIFX..", b"RIFX").start == 2
    assert find_marker(b"..RIFX..", "XFIR") is None


def test_probe():
    r = BinaryReader(b"\x2a\x00\x00\x00ab\x00\xff")
    res = probe(r, "int")
    assert (res.offset, res.value, res.next_offset) == (0, 42, 4)
    assert probe(r, "cstring").value == "ab"
    assert probe(r, "bytes", length=1).value == "ff"
    with pytest.raises(ValueError):
        probe(r, "string")


def test_reader_config():
    cfg = ReaderConfig(byte_order="big", history_limit=3)
    assert cfg.byte_order is ByteOrder.BIG_ENDIAN
    r = BinaryReader.from_config(b"\x00\x01", cfg)
    assert r.read_short() == 1
    with pytest.raises(ValidationError):
        ReaderConfig(history_limit=0)


@pytest.fixture
def blob(tmp_path):
    p = tmp_path / "archive.bin"
    p.write_bytes(b"hdrAAB\x01\x00\x00\x00AB")
    return p


def test_cli_info(blob, capsys):
    assert main(["info", str(blob), "--big-endian"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["size"] == 12
    assert out["byte_order"] == ">"


def test_cli_find(blob, capsys):
    assert main(["find", str(blob), "AB", "--all"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [h["start"] for h in out] == [4, 10]

    assert main(["find", str(blob), "ZZ"]) == 1
    captured = capsys.readouterr()
    assert json.loads(captured.out) == []
    assert "not found" in captured.err


def test_cli_read(blob, capsys):
    assert main(["read", str(blob), "int", "--offset", "6"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [{"offset": 6, "kind": "int", "value": 1, "next_offset": 10}]

    assert main(["read", str(blob), "int", "--offset", "10"]) == 1
    assert "underrun" in capsys.readouterr().err


def test_cli_find_bad_input(blob, capsys):
    assert main(["find", str(blob), "AB", "--start", "-1"]) == 2
    assert "Error:" in capsys.readouterr().err

    assert main(["find", str(blob), "€"]) == 2
    assert "Error:" in capsys.readouterr().err


def test_cli_find_limit_implies_all(blob, capsys):
    assert main(["find", str(blob), "A", "--limit", "2"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [h["start"] for h in out] == [3, 4]
