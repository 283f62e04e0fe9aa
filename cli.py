#!/usr/bin/env python3
"""
CLI for the multilingual food index.

Commands:
  build [-l LOCALE ...]   Rebuild indices from a foods JSON file and save snapshots
  search LOCALE QUERY     Search a locale's saved index
  status [LOCALE]         Show version and rebuild state per locale
  analyze LOCALE TEXT     Show tokens, synonym expansion and phonetic codes
  demo                    Build the sample foods and run a few queries
"""

import argparse
import logging
import sys
import tempfile
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from dictionary import Dictionary, load_locale_configs
from server import FoodIndexServer, UnknownLocaleError
from sources import JsonRecordSource

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_FOODS = DATA_DIR / "sample_foods.json"
DEFAULT_LOCALES = DATA_DIR / "locales.json"
INDEX_STORAGE = Path("index_storage")


def _server(args: argparse.Namespace, storage: Optional[Path] = None) -> FoodIndexServer:
    locales = Path(args.locales) if args.locales else None
    return FoodIndexServer(
        JsonRecordSource(args.foods),
        storage_dir=storage or Path(args.storage),
        use_sqlite_snapshots=args.sqlite,
        locales_config_path=locales if locales and locales.exists() else None,
        backoff_base=0.1,
    )


def _print_status(status) -> None:
    line = f"{status.locale_id:6} v{status.version if status.version is not None else '-':<4} {status.state.value}"
    if status.degraded:
        line += f" (degraded, {status.skipped_records} skipped)"
    elif status.skipped_records:
        line += f" ({status.skipped_records} skipped)"
    if status.last_error:
        line += f" error: {status.last_error}"
    print(line)


def _print_results(results) -> None:
    if not results.index_available:
        print(f"No index available for locale {results.locale_id!r}.")
        return
    print(f"Index version {results.version}, {len(results.matches)} match(es)")
    for i, m in enumerate(results.matches, 1):
        print(f" {i:2}. {m.food_id:10} {m.score:6.2f}  {m.description}  [{', '.join(m.matched_tokens)}]")


def cmd_build(args: argparse.Namespace) -> None:
    server = _server(args)
    try:
        server.load_snapshots()
        locale_ids = args.locale or server.locales()
        try:
            statuses = server.rebuild_and_wait(locale_ids)
        except UnknownLocaleError as e:
            print(e, file=sys.stderr)
            sys.exit(1)
        for status in statuses:
            _print_status(status)
    finally:
        server.close()


def cmd_search(args: argparse.Namespace) -> None:
    server = _server(args)
    try:
        if args.locale not in server.load_snapshots():
            print(f"No saved index for {args.locale!r}. Run: python cli.py build -l {args.locale}", file=sys.stderr)
            sys.exit(1)
        print("Query:", args.query)
        _print_results(server.search(args.locale, args.query, args.limit))
    finally:
        server.close()


def cmd_status(args: argparse.Namespace) -> None:
    server = _server(args)
    try:
        server.load_snapshots()
        for locale_id in [args.locale] if args.locale else server.locales():
            try:
                _print_status(server.rebuild_status(locale_id))
            except UnknownLocaleError as e:
                print(e, file=sys.stderr)
                sys.exit(1)
    finally:
        server.close()


def cmd_analyze(args: argparse.Namespace) -> None:
    configs = load_locale_configs(args.locales if args.locales and Path(args.locales).exists() else None)
    if args.locale not in configs:
        print(f"Unknown locale: {args.locale}", file=sys.stderr)
        sys.exit(1)
    dictionary = Dictionary(configs[args.locale])
    analysis = dictionary.analyze(args.text)
    print("Encoder:", dictionary.encoder.identifier)
    print("Tokens:  ", sorted(analysis.base_tokens))
    print("Expanded:", sorted(analysis.tokens))
    for token in sorted(analysis.tokens):
        print(f"  {token}: {list(dictionary.encode(token))}")


def cmd_demo(args: argparse.Namespace) -> None:
    """Self-contained demo over the sample foods (temporary storage)."""
    if not Path(args.foods).exists():
        print("Sample data not found at", args.foods, file=sys.stderr)
        sys.exit(1)
    with tempfile.TemporaryDirectory() as tmp:
        server = _server(args, storage=Path(tmp))
        try:
            for status in server.rebuild_and_wait():
                _print_status(status)
            for locale_id, query in (
                ("en", "aple pie"),
                ("en", "chips"),
                ("en", "7up"),
                ("fr", "patates"),
                ("zh", "mian tiao"),
                ("ta", "சோரு"),
            ):
                print(f"\n[{locale_id}] {query}")
                _print_results(server.search(locale_id, query, 5))
        finally:
            server.close()
    print("\nDemo done.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Multilingual food index search")
    parser.add_argument("--foods", default=str(DEFAULT_FOODS), help="Foods JSON file")
    parser.add_argument("--locales", default=str(DEFAULT_LOCALES), help="Locale config JSON file")
    parser.add_argument("--storage", default=str(INDEX_STORAGE), help="Snapshot directory")
    parser.add_argument("--sqlite", action="store_true", help="Store snapshots in SQLite")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log rebuild progress")
    sub = parser.add_subparsers(dest="command", required=True)
    p_build = sub.add_parser("build", help="Rebuild indices and save snapshots")
    p_build.add_argument("-l", "--locale", action="append", help="Locale to rebuild (repeatable; default all)")
    p_search = sub.add_parser("search", help="Search a locale")
    p_search.add_argument("locale", help="Locale id")
    p_search.add_argument("query", help="Food description")
    p_search.add_argument("-n", "--limit", type=int, default=10)
    p_status = sub.add_parser("status", help="Show rebuild status")
    p_status.add_argument("locale", nargs="?", help="Locale id (default all)")
    p_analyze = sub.add_parser("analyze", help="Show tokens and phonetic codes for a text")
    p_analyze.add_argument("locale", help="Locale id")
    p_analyze.add_argument("text", help="Text to analyse")
    sub.add_parser("demo", help="Run demo with sample foods")
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command == "build":
        cmd_build(args)
    elif args.command == "search":
        cmd_search(args)
    elif args.command == "status":
        cmd_status(args)
    elif args.command == "analyze":
        cmd_analyze(args)
    elif args.command == "demo":
        cmd_demo(args)


if __name__ == "__main__":
    main()
