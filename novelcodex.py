#!/usr/bin/env python3
"""
novelcodex.py - NovelCodex CLI.

Works fully locally: reads the entity store directly, no API server needed.

Configuration: environment variables with the NOVEL_CODEX_ prefix
or a .env file (e.g. NOVEL_CODEX_DATA_DIR=~/novel/data).

Subcommands:
    entities  - list the entities in the catalog
    lookup    - find an entity by exact name or alias
    show      - print the extended (Markdown) content of an entity
    detect    - detect entity links in a text
    export    - render a text with its links to rtf / html / md
    add       - create a character record (JSON + Markdown) in the data directory
    demo      - detect links in a sample text against a built-in cast

Usage:
    python novelcodex.py entities
    python novelcodex.py lookup "Elena"
    python novelcodex.py show 6f1c2d9e-...
    python novelcodex.py detect --text "Elena walked. El followed."
    python novelcodex.py detect --file chapter1.txt
    python novelcodex.py export --format rtf --title "Chapter 1" --file chapter1.txt --out chapter1.rtf
    python novelcodex.py add --name "Kael" --aliases "Kay, K" --tags "rogue, night watch"
    python novelcodex.py demo
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from adapters.entity_catalog import CatalogReloadError, EntityCatalog
from adapters.entity_store import InMemoryEntityStore, JsonDirectoryEntityStore
from adapters.link_detector import detect_links
from adapters.markup_renderer import RENDERER_FORMATS, RenderStyle, get_renderer
from api.schemas import status_message
from config import Settings
from contracts import DetectedLink, Entity, SkippedRecord, split_aliases, split_tags
from ports.entity_store import RecordValidationError, RecordWriteError


# -- helpers ---------------------------------------------------------------

_CONSOLE: Console | None = None


def _console() -> Console:
    global _CONSOLE
    if _CONSOLE is None:
        _CONSOLE = Console(highlight=False)
    return _CONSOLE


def _safe_terminal_text(value: Any) -> str:
    s = str(value)
    encoding = sys.stdout.encoding or "utf-8"
    try:
        s.encode(encoding)
        return s
    except UnicodeEncodeError:
        return s.encode(encoding, errors="replace").decode(encoding, errors="replace")


def _short(value: Any, limit: int = 64) -> str:
    s = _safe_terminal_text(value).replace("\n", " ").strip()
    if len(s) <= limit:
        return s
    return s[: limit - 3] + "..."


def _print_entities_table(entities: list[Entity], version: int) -> None:
    table = Table(
        title=f"Entities (catalog v{version}) [{len(entities)}]",
        box=box.ASCII,
        show_lines=False,
    )
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Type", no_wrap=True)
    table.add_column("Name")
    table.add_column("Aliases")
    table.add_column("Tags")
    for e in entities:
        table.add_row(
            _safe_terminal_text(e.id[:8]),
            e.entity_type.value,
            _short(e.name or "-", 32),
            _short(", ".join(e.aliases) or "-", 40),
            _short(", ".join(e.tags) or "-", 32),
        )
    _console().print(table)


def _print_links_table(links: list[DetectedLink]) -> None:
    table = Table(title=f"Detected links [{len(links)}]", box=box.ASCII, show_lines=False)
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Span", no_wrap=True)
    table.add_column("Matched")
    table.add_column("Entity")
    table.add_column("Type", no_wrap=True)
    for idx, link in enumerate(links, 1):
        table.add_row(
            str(idx),
            f"[{link.start_index}, {link.end_index})",
            _short(link.matched_text, 40),
            _short(link.entity.name or link.entity.id, 40),
            link.entity.entity_type.value,
        )
    _console().print(table)


def _warn_skipped(skip: SkippedRecord) -> None:
    print(f"Warning: skipped record {skip.record_ref}: {skip.reason}", file=sys.stderr)


def _load_catalog(settings: Settings) -> EntityCatalog:
    store = JsonDirectoryEntityStore(settings.data_dir, settings.entity_dirs)
    catalog = EntityCatalog(store, on_warning=_warn_skipped)
    try:
        report = catalog.reload()
    except CatalogReloadError as exc:
        print(f"Error: cannot load entity store: {exc}", file=sys.stderr)
        sys.exit(1)
    if not report.store_available:
        print(f"Note: no entity store at {settings.data_dir}, catalog is empty.", file=sys.stderr)
    return catalog


def _read_text(args: argparse.Namespace) -> str:
    if getattr(args, "file", None):
        try:
            return Path(args.file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error reading file: {e}", file=sys.stderr)
            sys.exit(1)
    text = getattr(args, "text", None)
    if text is None:
        text = sys.stdin.read()
    return text


# -- subcommands -----------------------------------------------------------

def _entities(args: argparse.Namespace, settings: Settings) -> None:
    catalog = _load_catalog(settings)
    _print_entities_table(list(catalog.entities), catalog.version)


def _lookup(args: argparse.Namespace, settings: Settings) -> None:
    catalog = _load_catalog(settings)
    entity = catalog.find_by_exact_term(args.term)
    if entity is None:
        print(f"No entity named {args.term!r}.", file=sys.stderr)
        sys.exit(1)
    _print_entities_table([entity], catalog.version)


def _show(args: argparse.Namespace, settings: Settings) -> None:
    catalog = _load_catalog(settings)
    entity = catalog.find_by_id(args.entity_id) or catalog.find_by_exact_term(args.entity_id)
    if entity is None:
        print(f"Entity not found: {args.entity_id!r}", file=sys.stderr)
        sys.exit(1)
    content = catalog.load_extended_content(entity)
    if content is None:
        print(f"{entity.name or entity.id}: no extended content.")
        return
    print(content)


def _detect(args: argparse.Namespace, settings: Settings) -> None:
    catalog = _load_catalog(settings)
    links = detect_links(_read_text(args), catalog)
    if links and not args.quiet:
        _print_links_table(links)
    print(status_message(len(links)))


def _export(args: argparse.Namespace, settings: Settings) -> None:
    catalog = _load_catalog(settings)
    text = _read_text(args)
    links = detect_links(text, catalog)
    renderer = get_renderer(args.format, RenderStyle.from_settings(settings))
    content = renderer.render(text, args.title or "", links)

    if args.out:
        try:
            Path(args.out).write_text(content, encoding="utf-8")
        except OSError as exc:
            print(f"Export failed: {exc}", file=sys.stderr)
            sys.exit(1)
        print(f"Exported to {args.format.upper()} with {len(links)} links: {args.out}")
    else:
        sys.stdout.write(content)


def _add(args: argparse.Namespace, settings: Settings) -> None:
    catalog = _load_catalog(settings)
    content = _read_text(args) if (args.file or args.text is not None) else None
    try:
        entity = catalog.create_entity(
            args.name,
            aliases=split_aliases(args.aliases),
            tags=split_tags(args.tags),
            content=content,
        )
    except RecordValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except (RecordWriteError, CatalogReloadError) as exc:
        print(f"Save failed: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Character saved: {entity.name} ({entity.id})")
    _print_entities_table([entity], catalog.version)


_DEMO_CAST = [
    {"id": "char-elena", "name": "Elena Voss", "aliases": ["Elena", "El"], "tags": ["protagonist"]},
    {"id": "char-john", "name": "John Smith", "aliases": ["John", "Smith"]},
    {"id": "char-arm", "name": "Arm", "aliases": []},
    {"id": "char-doc", "name": "Dr. Hale", "aliases": ["Doc"]},
]

_DEMO_TEXT = (
    "Elena Voss met John Smith at the dock. El followed John past the ARMADA,\n"
    "where Arm waited with an arm in a sling. Doc nodded: Dr. Hale knew them all."
)


def _demo(args: argparse.Namespace, settings: Settings) -> None:
    catalog = EntityCatalog(InMemoryEntityStore(_DEMO_CAST))
    catalog.reload()
    text = args.text or _DEMO_TEXT

    _print_entities_table(list(catalog.entities), catalog.version)
    _console().print(_safe_terminal_text(text))
    links = detect_links(text, catalog)
    _print_links_table(links)
    print(status_message(len(links)))


# -- main ------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="novelcodex",
        description="NovelCodex - entity auto-linking for manuscripts (local CLI)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("entities", help="List entities in the catalog")

    p = sub.add_parser("lookup", help="Find an entity by exact name or alias")
    p.add_argument("term", help="Name or alias (case-sensitive)")

    p = sub.add_parser("show", help="Print the extended content of an entity")
    p.add_argument("entity_id", help="Entity ID (or exact name)")

    p = sub.add_parser("detect", help="Detect entity links in a text")
    p.add_argument("--text", "-t", help="Text to scan (or stdin)")
    p.add_argument("--file", "-f", help="Path of a file to scan")
    p.add_argument("--quiet", "-q", action="store_true", help="Only print the link count")

    p = sub.add_parser("export", help="Render a text with links to a document")
    p.add_argument("--format", default="rtf", choices=list(RENDERER_FORMATS))
    p.add_argument("--title", "-T", default="", help="Document title")
    p.add_argument("--text", "-t", help="Text to export (or stdin)")
    p.add_argument("--file", "-f", help="Path of a file to export")
    p.add_argument("--out", "-o", help="Output path (default: stdout)")

    p = sub.add_parser("add", help="Create a character record")
    p.add_argument("--name", "-n", required=True, help="Character name")
    p.add_argument("--aliases", "-a", default="", help="Aliases, separated by commas or spaces")
    p.add_argument("--tags", default="", help="Comma-separated tags")
    p.add_argument("--content", "-c", dest="text", default=None, help="Markdown body")
    p.add_argument("--file", "-f", help="Read the Markdown body from a file")

    p = sub.add_parser("demo", help="Run detection against a built-in cast")
    p.add_argument("--text", "-t", help="Custom text instead of the sample")

    args = parser.parse_args(argv)

    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())

    commands = {
        "entities": _entities,
        "lookup":   _lookup,
        "show":     _show,
        "detect":   _detect,
        "export":   _export,
        "add":      _add,
        "demo":     _demo,
    }
    commands[args.command](args, settings)


if __name__ == "__main__":
    main()
