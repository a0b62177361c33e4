from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from hexmark.core.config import load_config
from hexmark.core.errors import (
    ConfigError,
    DecodeCallbackError,
    DecodeError,
    PluginError,
    UnknownDecoderName,
)
from hexmark.core.plugins import load_plugins
from hexmark.core.registry import DecoderRegistry
from hexmark.core.session import Session
from hexmark.core.sizes import decode_size
from hexmark.core.store import DEFAULT_SIZE_LIMIT, load_store
from hexmark.ui.palette import PALETTE, Palette, palette_roles

__version__ = "0.1.0"

LIST_TYPES = "list"


def _size(text: str) -> int:
    try:
        return decode_size(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hexmark", description="Annotating hex viewer (Textual)")
    parser.add_argument("path", nargs="?", help="Path to binary file (standard input if omitted)")
    parser.add_argument("-d", "--debug", action="store_true", help="run in debug mode")
    parser.add_argument("-o", "--offset", type=_size, default=0, help="offset within the file")
    parser.add_argument(
        "-s", "--size", type=_size, default=DEFAULT_SIZE_LIMIT, help="size limit (1G by default)"
    )
    parser.add_argument(
        "-t", "--type", help="force a decoder type; 'list' prints the available types"
    )
    parser.add_argument("--config", type=Path, help="configuration file")
    parser.add_argument(
        "--dump", action="store_true", help="print the annotated fields instead of the viewer"
    )
    parser.add_argument("-V", "--version", action="version", version=f"hexmark {__version__}")
    return parser


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def dump_spans(session: Session, console: Console, palette: Palette = PALETTE) -> None:
    table = Table(box=None, show_header=True, header_style="bold")
    table.add_column("offset", justify="right", style=palette.offset_fg)
    table.add_column("length", justify="right")
    table.add_column("field")
    index = session.index
    for i, span in enumerate(index):
        color = palette.field_color(span.color)
        desc = " < ".join(m.description for m in span.marks) if span.marks else "-"
        # Descriptions carry text from the input and must not be read as markup
        table.add_row(
            f"{span.start:08X}", str(index.span_end(i) - span.start), Text(desc), style=color
        )
    console.print(table)


def _reattach_tty() -> None:
    # The data came through standard input; the viewer needs the terminal back
    fd = os.open("/dev/tty", os.O_RDONLY)
    os.dup2(fd, sys.stdin.fileno())
    os.close(fd)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)

    try:
        config = load_config(args.config, color_roles=palette_roles())
    except ConfigError as e:
        print(f"hexmark: invalid configuration: {e}", file=sys.stderr)
        return 2

    registry = DecoderRegistry()
    try:
        load_plugins(registry, config.plugin_dirs)
    except PluginError as e:
        print(f"hexmark: {e}", file=sys.stderr)
        return 1

    if args.type == LIST_TYPES:
        for name in registry.names():
            print(name)
        return 0

    try:
        store = load_store(args.path, offset=args.offset, limit=args.size)
    except FileNotFoundError:
        print(f"hexmark: file not found: {args.path}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"hexmark: cannot read input: {e}", file=sys.stderr)
        return 1

    session = Session(store, registry, endian=config.endian)
    try:
        session.run(args.type)
    except UnknownDecoderName as e:
        print(f"hexmark: unknown decoder type '{e.name}'", file=sys.stderr)
        return 2
    except DecodeCallbackError as e:
        print(f"hexmark: decoder '{e.decoder}' failed: {e.cause}", file=sys.stderr)
        return 1
    except DecodeError as e:
        print(f"hexmark: decoding failed: {e}", file=sys.stderr)
        return 1

    palette = PALETTE.with_overrides(config.colors)
    if args.dump:
        dump_spans(session, Console(highlight=False), palette)
        return 0

    from hexmark.app import HexmarkApp

    if args.path is None:
        try:
            _reattach_tty()
        except OSError as e:
            print(f"hexmark: cannot open the terminal: {e}", file=sys.stderr)
            return 1

    app = HexmarkApp(
        session, name=args.path, bytes_per_row=config.bytes_per_row, palette=palette
    )
    app.run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
