"""ligi - tag index maintenance for art/ markdown trees.

Usage:
    ligi index [-r ROOT] [-f FILE [-t TAGS]] [--no-fill]
    ligi index --global [--no-local]
    ligi prune [-r ROOT] [--global]
    ligi query TAG [& TAG | TAG ...] [-r ROOT | --global] [-a] [-o text|json]

Examples:
    ligi index
    ligi index -f art/notes/today.md -t work,meeting
    ligi query project '&' urgent -o json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .api import run_index, run_index_global, run_prune, run_query
from .config import IndexConfig
from .errors import LigiError, UsageError

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _add_log_flags(sub_parser: argparse.ArgumentParser) -> None:
    # also accepted after the sub-command
    sub_parser.add_argument("-q", "--quiet", action="store_true", default=argparse.SUPPRESS, help=argparse.SUPPRESS)
    sub_parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help=argparse.SUPPRESS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ligi",
        description="Maintain tag indexes for art/ markdown trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report errors")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_index = sub.add_parser("index", help="Build or update tag indexes")
    p_index.add_argument("-r", "--root", default=".", help="Repository root (default: current directory)")
    p_index.add_argument("-f", "--file", help="Only re-index this file (art/... path)")
    p_index.add_argument("-t", "--tags", help="Comma-separated tags to add to --file first")
    p_index.add_argument("--global", dest="global_scope", action="store_true",
                         help="Rebuild the global index from the registered repositories")
    p_index.add_argument("--no-local", action="store_true",
                         help="With --global, do not regenerate each repository's local index")
    p_index.add_argument("--no-fill", action="store_true", help="Do not add links to tag tokens")
    _add_log_flags(p_index)

    p_prune = sub.add_parser("prune", help="Drop index entries for files that no longer exist")
    p_prune.add_argument("-r", "--root", default=".", help="Repository root (default: current directory)")
    p_prune.add_argument("--global", dest="global_scope", action="store_true", help="Prune the global index")
    _add_log_flags(p_prune)

    p_query = sub.add_parser("query", help="List files carrying tags")
    p_query.add_argument("expr", nargs="+", metavar="TAG", help="Tags joined by '&' (and) or '|' (or)")
    p_query.add_argument("-r", "--root", help="Repository root (default: current directory)")
    p_query.add_argument("--global", dest="global_scope", action="store_true", help="Query the global index")
    p_query.add_argument("-a", "--absolute", action="store_true", help="Print absolute paths")
    p_query.add_argument("-o", "--output", choices=["text", "json"], default="text")
    p_query.add_argument("--no-index", action="store_true", help="Do not re-index a stale local index first")
    _add_log_flags(p_query)

    return parser


def _print_index_summary(data: dict) -> None:
    table = Table(title=f"ligi index: {data['art_path']}", show_header=False)
    table.add_row("files", str(data["files_indexed"]))
    table.add_row("tags", str(data["tags_found"]))
    table.add_row("pages created", str(len(data["created"])))
    table.add_row("pages updated", str(len(data["updated"])))
    if data["tombstoned"]:
        table.add_row("tags emptied", ", ".join(data["tombstoned"]))
    if data["tags_added"]:
        table.add_row("tags added", str(data["tags_added"]))
    if data["links_filled"]:
        table.add_row("links filled", str(data["links_filled"]))
    if data["global"] is not None:
        table.add_row("global tags", str(data["global"]["tags_kept"]))
    console.print(table)


def cmd_index(args: argparse.Namespace, config: IndexConfig) -> None:
    if args.global_scope:
        if args.file or args.tags:
            raise UsageError("--global cannot be combined with --file or --tags")
        stats = run_index_global(config=config, write_local=not args.no_local)
        console.print(
            f"[green]Rebuilt global index[/green]: {stats['repos_processed']} repos, "
            f"{stats['tags_written']} tags, {stats['files_indexed']} files"
        )
        for root in stats["skipped"]:
            console.print(f"[yellow]skipped[/yellow] {escape(root)}")
        return
    if args.no_local:
        raise UsageError("--no-local only applies with --global")
    data = run_index(args.root, file=args.file, tags=args.tags, config=config, fill_links=not args.no_fill)
    if not args.quiet:
        _print_index_summary(data)


def cmd_prune(args: argparse.Namespace, config: IndexConfig) -> None:
    result = run_prune(args.root, global_scope=args.global_scope, config=config)
    if not args.quiet:
        console.print(f"Pruned {result['pruned_entries']} entries, {result['pruned_tags']} tags")


def cmd_query(args: argparse.Namespace, config: IndexConfig) -> None:
    if args.global_scope and args.root:
        raise UsageError("--root cannot be combined with --global")
    results = run_query(
        args.root,
        args.expr,
        global_scope=args.global_scope,
        absolute=args.absolute,
        auto_index=not args.no_index,
        config=config,
    )
    if args.output == "json":
        console.out(json.dumps(results, ensure_ascii=False))
    else:
        for path in results:
            console.out(path)


COMMANDS = {
    "index": cmd_index,
    "prune": cmd_prune,
    "query": cmd_query,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        config = IndexConfig.from_env()
        COMMANDS[args.command](args, config)
    except LigiError as e:
        err_console.print(f"[red]error:[/red] {escape(str(e))}")
        return e.exit_code
    except OSError as e:
        err_console.print(f"[red]error:[/red] {escape(str(e))}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
