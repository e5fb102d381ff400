from __future__ import annotations
import argparse, json, logging, sys
from .binary.reader import BinaryReader, ReadingError
from .binary.scan import iter_markers, probe
from .models.common import ByteOrder, ProbeKind
from .models.report import BufferInfo

def _order(args) -> ByteOrder:
    return ByteOrder.BIG_ENDIAN if args.big_endian else ByteOrder.LITTLE_ENDIAN

def _dump(items) -> None:
    print(json.dumps([i.model_dump(mode="json") for i in items], indent=2))

def cmd_info(args):
    r = BinaryReader.from_file(args.input, _order(args))
    info = BufferInfo(path=str(args.input), size=r.size(), byte_order=r.byte_order)
    print(json.dumps(info.model_dump(mode="json"), indent=2))
    return 0

def cmd_find(args):
    r = BinaryReader.from_file(args.input)
    if not (0 <= args.start <= r.size()):
        print(f"Error: start {args.start} is outside the file ({r.size()} bytes)", file=sys.stderr)
        return 2
    # --limit implies --all
    limit = args.limit if (args.all or args.limit is not None) else 1
    try:
        hits = list(iter_markers(r, args.marker, start=args.start, limit=limit))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    _dump(hits)
    if not hits:
        print(f"Warning: marker {args.marker!r} not found", file=sys.stderr)
        return 1
    return 0

def cmd_read(args):
    r = BinaryReader.from_file(args.input, _order(args))
    try:
        r.seek(args.offset)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    out = []
    try:
        for _ in range(args.count):
            out.append(probe(r, args.kind, length=args.length))
    except ReadingError as e:
        _dump(out)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    _dump(out)
    return 0

def build_parser():
    p = argparse.ArgumentParser(prog="binreader", description="Probe binary files with a backtracking reader")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("info", help="print buffer size and byte order")
    sp.add_argument("input")
    sp.add_argument("--big-endian", action="store_true")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("find", help="locate a marker string")
    sp.add_argument("input")
    sp.add_argument("marker")
    sp.add_argument("--all", action="store_true", help="Report every occurrence, not just the first")
    sp.add_argument("--start", type=int, default=0, help="Offset to start scanning from")
    sp.add_argument("--limit", type=int, default=None, help="Stop after N hits (implies --all)")
    sp.set_defaults(func=cmd_find)

    sp = sub.add_parser("read", help="decode values at an offset")
    sp.add_argument("input")
    sp.add_argument("kind", choices=[k.value for k in ProbeKind])
    sp.add_argument("--offset", type=int, default=0)
    sp.add_argument("--length", type=int, default=None, help="Length for bytes/string reads")
    sp.add_argument("--count", type=int, default=1, help="Read N consecutive values")
    sp.add_argument("--big-endian", action="store_true")
    sp.set_defaults(func=cmd_read)

    return p

def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return ns.func(ns)


if __name__ == "__main__":
    raise SystemExit(main())
