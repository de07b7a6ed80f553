"""Command line entry point: load an abstracts dump and query it.

Examples:
  abstract-search --datafile enwiki-latest-abstract1.xml.gz --query "cats"
  abstract-search --datafile enwiki-latest-abstract1.xml.gz --workers 4
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
import logging
from pathlib import Path
import sys
import textwrap

from pydantic import ValidationError
from rich.console import Console

from abstract_search.config import Settings
from abstract_search.feed import FeedError
from abstract_search.observability.logging import configure_logging
from abstract_search.observability.metrics import get_metrics
from abstract_search.observability.tracing import init_tracing
from abstract_search.search.analyzers import available_analyzers
from abstract_search.search.builder import load_index
from abstract_search.search.scoring import available_scorers
from abstract_search.service_layer.search_service import QueryTooLongError, SearchService


logger = logging.getLogger(__name__)

PROMPT = "query> "
SEPARATOR = "-------------------"


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="abstract-search",
        description="Full-text search over a Wikipedia abstracts dump",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Without --query an interactive prompt is started; exit with Ctrl-D.
            Every option can also be set through ABSTRACT_SEARCH_* environment variables.
            """
        ).strip(),
    )
    parser.add_argument("--datafile", type=Path, help="Abstracts dump (.xml or .xml.gz)")
    parser.add_argument("--query", help="Run a single query and exit")
    parser.add_argument("--limit", type=int, help="Maximum hits printed per query")
    parser.add_argument("--workers", type=int, help="Worker processes used while indexing")
    parser.add_argument("--scoring", choices=available_scorers(), help="Term scoring formula")
    parser.add_argument("--analyzer", choices=available_analyzers(), help="Text analyzer")
    parser.add_argument("--log-level", help="Logging level (debug, info, warning, ...)")
    parser.add_argument("--json-logs", action="store_true", default=None, help="Emit JSON log lines")
    parser.add_argument("--explain", action="store_true", help="Print scores and analyzed query terms")
    parser.add_argument("--metrics", action="store_true", help="Print Prometheus metrics before exiting")
    return parser


def resolve_settings(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Overlay command line flags on environment-derived settings."""
    settings = base if base is not None else Settings()
    overrides = {
        "data_file": args.datafile,
        "result_limit": args.limit,
        "build_workers": args.workers,
        "scoring": args.scoring,
        "analyzer": args.analyzer,
        "log_level": args.log_level,
        "log_json": args.json_logs,
    }
    update = {key: value for key, value in overrides.items() if value is not None}
    # model_copy skips validation, so re-validate the merged values
    return Settings.model_validate({**settings.model_dump(), **update})


def print_response(console: Console, service: SearchService, query: str, limit: int, *, explain: bool) -> None:
    console.print(f"Querying for: `{query}`", markup=False, highlight=False)
    response = service.search(query, limit=limit)
    console.print(f"Found {response.total_count} documents", highlight=False)
    if explain:
        console.print(f"Terms: {response.terms}", markup=False, highlight=False)
    for hit in response.hits:
        if explain:
            console.print(f"#{hit.rank} score={hit.score:.4f}", highlight=False)
        console.print(str(hit.document), markup=False, highlight=False)
        console.print(SEPARATOR, highlight=False)
    if response.total_count > len(response.hits):
        console.print(f"... {response.total_count - len(response.hits)} more not shown", highlight=False)
    console.print(f">> took {response.took_ms / 1000:.6f}s", highlight=False)


def run_prompt(
    console: Console,
    service: SearchService,
    limit: int,
    *,
    explain: bool = False,
    read_line: Callable[[str], str] | None = None,
) -> int:
    """Read queries until end of input; return the number of queries run."""
    reader = read_line if read_line is not None else console.input
    executed = 0
    while True:
        try:
            line = reader(PROMPT)
        except (EOFError, KeyboardInterrupt):
            console.print()
            break
        if not line.strip():
            continue
        try:
            print_response(console, service, line, limit, explain=explain)
        except QueryTooLongError as exc:
            console.print(f"Query rejected: {exc}", markup=False, highlight=False)
            continue
        executed += 1
    return executed


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the search CLI."""
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    console = Console(highlight=False, soft_wrap=True)
    error_console = Console(stderr=True, highlight=False, soft_wrap=True)

    try:
        settings = resolve_settings(args)
    except ValidationError as exc:
        error_console.print(f"Invalid configuration:\n{exc}", markup=False)
        return 2

    if settings.data_file is None:
        parser.error("--datafile is required (or set ABSTRACT_SEARCH_DATA_FILE)")

    configure_logging(settings.log_level, json_output=settings.log_json)
    if settings.tracing_enabled:
        init_tracing()

    console.print(f"Loading data file: {settings.data_file}", markup=False)
    try:
        result = load_index(settings.data_file, settings)
    except FeedError as exc:
        logger.error("Index build failed: %s", exc)
        error_console.print(f"Failed to load {exc.path}: {exc.reason}", markup=False)
        return 1

    console.print(f"Parsed and indexed {result.index.size()} entries", highlight=False)
    console.print(f">> took {result.duration_s:.3f}s", highlight=False)
    if not result.complete:
        error_console.print(
            f"Warning: {result.documents_skipped} records were skipped (first: {result.errors[0]})",
            markup=False,
        )

    service = SearchService(result.index, max_query_length=settings.max_query_length)
    status = 0
    if args.query is not None:
        try:
            print_response(console, service, args.query, settings.result_limit, explain=args.explain)
        except QueryTooLongError as exc:
            error_console.print(f"Query rejected: {exc}", markup=False)
            status = 2
    else:
        run_prompt(console, service, settings.result_limit, explain=args.explain)

    if args.metrics:
        console.print(get_metrics().decode("utf-8"), markup=False)
    return status


if __name__ == "__main__":
    sys.exit(main())
