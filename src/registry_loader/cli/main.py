"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Optional, Sequence

from registry_loader.errors import ConfigError, RegistryLoaderError
from registry_loader.models.config import LoaderConfig


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="registry-loader",
        description="Load MCP server registry import batches into a relational store",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to loader config YAML",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (default: from config, INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # load
    load_parser = subparsers.add_parser("load", help="Map and load an import batch")
    load_parser.add_argument(
        "--input",
        required=True,
        help="Path or http(s) URL of the JSON array of records",
    )
    load_parser.add_argument(
        "--scoring",
        default=None,
        help="Path or URL of the shared scoring block (JSON object with 'scoring', or array)",
    )
    load_parser.add_argument("--db", type=Path, default=None, help="Path to SQLite database")
    load_parser.add_argument("--batch-size", type=int, default=None, help="Rows per transaction")
    load_parser.add_argument("--limit", type=int, default=None, help="Only load the first N records")
    load_parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip the post-run validation summary",
    )

    # validate
    validate_parser = subparsers.add_parser("validate", help="Aggregate checks over loaded rows")
    validate_parser.add_argument("--db", type=Path, default=None, help="Path to SQLite database")
    validate_parser.add_argument("--top", type=int, default=None, help="Number of top groups to show")
    validate_parser.add_argument("--group-by", type=str, default=None, help="Column for top-N grouping")

    # map
    map_parser = subparsers.add_parser("map", help="Preview mapped rows without loading")
    map_parser.add_argument("--input", required=True, help="Path or http(s) URL of records")
    map_parser.add_argument("--scoring", default=None, help="Path or URL of the shared scoring block")
    map_parser.add_argument("--limit", type=int, default=None, help="Only map the first N records")
    map_parser.add_argument("--output", type=Path, default=None, help="Write mapped rows to file")
    map_parser.add_argument(
        "--types-only",
        action="store_true",
        help="Show server/hosting type mapping per distinct type hint",
    )

    # analyze
    analyze_parser = subparsers.add_parser("analyze", help="Report over-long input fields")
    analyze_parser.add_argument("--input", required=True, help="Path or http(s) URL of records")
    analyze_parser.add_argument(
        "--threshold",
        type=int,
        default=100,
        help="Report fields with values longer than this (default: 100)",
    )

    # store
    store_parser = subparsers.add_parser("store", help="Query loaded rows")
    store_parser.add_argument("action", choices=["list", "count", "get"], help="What to show")
    store_parser.add_argument("--db", type=Path, default=None, help="Path to SQLite database")
    store_parser.add_argument("--name", type=str, default=None, help="mcp_name (for get)")
    store_parser.add_argument("--limit", type=int, default=20, help="Max rows for list (default: 20)")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except ConfigError as e:
        raise SystemExit(str(e))
    _configure_logging(config.log_level)

    handlers = {
        "load": _run_load,
        "validate": _run_validate,
        "map": _run_map,
        "analyze": _run_analyze,
        "store": _run_store,
    }
    try:
        handlers[args.command](args, config)
    except RegistryLoaderError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)


def _load_config(args: argparse.Namespace) -> LoaderConfig:
    """Config file, then environment, then flags."""
    config = LoaderConfig.from_yaml(args.config) if args.config else LoaderConfig()
    config = config.with_env()
    return config.with_overrides(
        db_path=getattr(args, "db", None),
        batch_size=getattr(args, "batch_size", None),
        top_n=getattr(args, "top", None),
        group_by=getattr(args, "group_by", None),
        log_level=args.log_level,
    )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _run_load(args: argparse.Namespace, config: LoaderConfig) -> None:
    """Run load command."""
    from registry_loader.pipeline import run_load

    outcome = run_load(
        config,
        args.input,
        scoring_source=args.scoring,
        limit=args.limit,
        validate=not args.no_validate,
    )
    _print_load_summary(outcome.result)
    if outcome.report is not None:
        print()
        print(outcome.report.render())


def _print_load_summary(result) -> None:
    """Print run totals and the rows that failed."""
    print(f"\n--- Load summary: {result.total} records ---")
    print(f"  Inserted: {result.inserted}")
    print(f"  Skipped duplicates: {result.skipped}")
    print(f"  Failed: {result.failed}")
    print(f"  Success rate: {result.success_rate:.1f}%")
    print(
        f"  Total time: {result.elapsed_seconds:.1f}s "
        f"(avg: {result.throughput:.1f} rows/sec)"
    )
    if result.batches_rolled_back:
        print(f"  Batches rolled back: {result.batches_rolled_back}")
    if result.failures:
        print("  Failures:")
        for failure in result.failures:
            print(f"    {failure.key}: {failure.reason}")


def _run_validate(args: argparse.Namespace, config: LoaderConfig) -> None:
    """Run validate command."""
    from registry_loader.reporting import ValidationReporter
    from registry_loader.store import SQLiteServerStore

    store = SQLiteServerStore(config.db_path, timeout=config.busy_timeout)
    try:
        report = ValidationReporter(store).report(top_n=config.top_n, group_by=config.group_by)
    except ValueError as e:
        raise SystemExit(str(e))
    print(report.render())


def _run_map(args: argparse.Namespace, config: LoaderConfig) -> None:
    """Run map command."""
    from registry_loader.pipeline import map_records

    rows = map_records(args.input, scoring_source=args.scoring, limit=args.limit)

    if args.types_only:
        seen: dict[Optional[str], tuple[str, str]] = {}
        for row in rows:
            seen.setdefault(row.mcp_server_type_json, (row.server_type.value, row.hosting_type.value))
        for hints, (server_type, hosting_type) in seen.items():
            print(f"{hints}: server_type={server_type}, hosting_type={hosting_type}")
        counts = Counter(row.server_type.value for row in rows)
        print(f"\n--- {len(rows)} rows: " + ", ".join(f"{k}={v}" for k, v in counts.most_common()) + " ---")
        return

    output = json.dumps([row.insert_values() for row in rows], indent=2, default=str)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote {len(rows)} mapped rows to {args.output}")
    else:
        print(output)


def _run_analyze(args: argparse.Namespace, config: LoaderConfig) -> None:
    """Run analyze command."""
    from registry_loader.input_reader import read_records
    from registry_loader.reporting import analyze_field_lengths

    records = read_records(args.input)
    stats = analyze_field_lengths(records, threshold=args.threshold)
    if not stats:
        print(f"No field values over {args.threshold} characters in {len(records)} records.")
        return
    print(f"Fields with values over {args.threshold} characters ({len(records)} records):")
    for s in stats:
        limit = f", limit {s.declared_limit} ({s.over_limit} over)" if s.declared_limit else ""
        print(f"  {s.name}: max {s.max_length} in {s.longest_record}; {s.over_threshold} over threshold{limit}")


def _run_store(args: argparse.Namespace, config: LoaderConfig) -> None:
    """Run store command."""
    from registry_loader.store import SQLiteServerStore

    store = SQLiteServerStore(config.db_path, timeout=config.busy_timeout)
    if args.action == "count":
        print(store.count())
    elif args.action == "get":
        if not args.name:
            raise SystemExit("store get requires --name")
        row = store.get(args.name)
        if row is None:
            raise SystemExit(f"No server named {args.name!r}")
        print(json.dumps(row.model_dump(mode="json"), indent=2))
    else:
        rows = store.list_rows(limit=args.limit)
        print(json.dumps([r.model_dump(mode="json") for r in rows], indent=2))


if __name__ == "__main__":
    main()
