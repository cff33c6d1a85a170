from __future__ import annotations
import argparse
import hashlib
import logging
import os
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from libmsb.errors import MsbError
from libmsb.graph import diff_graphs, iter_references
from libmsb.reader import read_msb, read_msb_bytes
from libmsb.summary import summarize_msb
from libmsb.writer import write_msb, write_msb_bytes

console = Console()
log = logging.getLogger("msbcli")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def cmd_summary(args: argparse.Namespace) -> int:
    s = summarize_msb(args.msb)
    console.print(f"[bold]File:[/bold] {escape(s.path)}")
    console.print(f"[bold]Size:[/bold] {s.file_size} bytes")
    console.print(f"[bold]Endian:[/bold] {'big' if s.big_endian else 'little'}")
    console.print(f"[bold]Compression:[/bold] {s.compression}")

    t = Table(title="Tables")
    t.add_column("Name")
    t.add_column("Version", justify="right")
    t.add_column("Entries", justify="right")
    t.add_column("Types", overflow="fold")
    for p in s.params:
        types = ", ".join(f"{name}={count}" for name, count in p.types.items()) or "-"
        t.add_row(p.name, str(p.version), str(p.count), types)
    console.print(t)
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    msb = read_msb(args.msb)
    wanted = args.table.upper() if args.table else None
    shown = 0
    for param in msb.params:
        if wanted and wanted not in param.NAME:
            continue
        shown += 1
        t = Table(title=f"{param.NAME} (v{param.version})")
        t.add_column("#", justify="right")
        t.add_column("Type")
        t.add_column("Idx", justify="right")
        t.add_column("Name", overflow="fold")
        t.add_column("References", overflow="fold")
        for i, entry in enumerate(param.entries):
            refs = ", ".join(f"{path}={escape(target.name)}" for path, target in iter_references(entry))
            type_name = entry.type.name if param.TYPED else "-"
            type_index = str(entry.type_index) if param.TYPED else "-"
            t.add_row(str(i), type_name, type_index, escape(entry.name), refs or "-")
        if not param.entries:
            t.add_row("-", "(empty)", "-", "-", "-")
        console.print(t)
    if not shown:
        console.print(f"[red]No table matches {args.table!r}[/red]")
        return 2
    return 0


def cmd_verify_roundtrip(args: argparse.Namespace) -> int:
    with open(args.msb, "rb") as f:
        original = f.read()

    first = read_msb_bytes(original)
    written = write_msb_bytes(first)
    second = read_msb_bytes(written)

    a = _sha256(original)
    b = _sha256(written)
    console.print(f"[bold]IN :[/bold] {escape(args.msb)}\n     sha256={a}")
    console.print(f"[bold]OUT:[/bold] (in memory)\n     sha256={b}")
    console.print("IDENTICAL" if a == b else "[yellow]BYTES DIFFER[/yellow] (table order may have been canonicalized)")

    diffs = diff_graphs(first, second)
    if diffs:
        for d in diffs:
            console.print(f"[red]DIFF[/red] {escape(d)}")
        return 1
    console.print("[green]Graph round-trip OK[/green]")
    return 0


def cmd_canonicalize(args: argparse.Namespace) -> int:
    msb = read_msb(args.msb)
    write_msb(msb, args.out)
    console.print(f"[green]Done.[/green] wrote {escape(args.out)} ({os.path.getsize(args.out)} bytes)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="msbcli")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("summary", help="Print header info and table counts")
    s.add_argument("msb")
    s.set_defaults(fn=cmd_summary)

    d = sub.add_parser("dump", help="List entries with their resolved references")
    d.add_argument("msb")
    d.add_argument("--table", help="Only tables whose name contains this (e.g. parts)")
    d.set_defaults(fn=cmd_dump)

    r = sub.add_parser("verify-roundtrip", help="Read -> write -> read and compare graphs")
    r.add_argument("msb")
    r.set_defaults(fn=cmd_verify_roundtrip)

    c = sub.add_parser("canonicalize", help="Rewrite a file in canonical table order")
    c.add_argument("msb")
    c.add_argument("--out", required=True)
    c.set_defaults(fn=cmd_canonicalize)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    try:
        return int(args.fn(args))
    except (MsbError, FileNotFoundError) as e:
        log.debug("command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
