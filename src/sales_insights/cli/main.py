"""Main CLI entry point."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config YAML (source + thresholds)",
    )
    parser.add_argument(
        "--source",
        default=None,
        choices=["json", "csv", "http"],
        help="Where to read the raw collections from (default: json)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory with accounts/reps/targets/deals/activities files (json, csv)",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Base URL serving <collection>.json files (http)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write JSON result to file (default: stdout)",
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(prog="sales-insights", description="Read-only sales CRM analytics")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (e.g. INFO, DEBUG)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # query
    query_parser = subparsers.add_parser("query", help="Run one analytics query")
    query_parser.add_argument("endpoint", help="Endpoint name, e.g. summary or pipeline-by-month")
    query_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter (repeatable), e.g. --param months=6",
    )
    _add_source_args(query_parser)

    # endpoints
    subparsers.add_parser("endpoints", help="List available query endpoints")

    # clean-report
    report_parser = subparsers.add_parser("clean-report", help="Show how many records survived cleaning")
    _add_source_args(report_parser)

    args = parser.parse_args(argv)

    from sales_insights.logging_config import configure_logging

    configure_logging(level=args.log_level)

    if args.command == "query":
        _run_query(args)
    elif args.command == "endpoints":
        _run_endpoints(args)
    elif args.command == "clean-report":
        _run_clean_report(args)
    else:
        parser.print_help()


def _build_config(args: argparse.Namespace):
    """Config file (if any), then SALES_INSIGHTS_* env vars, then command-line flags."""
    from sales_insights.config import AnalyticsConfig

    config = AnalyticsConfig.from_yaml(args.config) if args.config else AnalyticsConfig()
    config = AnalyticsConfig.from_env(config)
    overrides = {
        key: value
        for key, value in (("source", args.source), ("data_dir", args.data_dir), ("base_url", args.base_url))
        if value is not None
    }
    if overrides:
        config = AnalyticsConfig.model_validate({**config.model_dump(), **overrides})
    return config


def _load(args: argparse.Namespace):
    from sales_insights.errors import LoaderError
    from sales_insights.pipeline import load_store

    try:
        return load_store(_build_config(args))
    except LoaderError as e:
        print(f"Failed to load data: {e}", file=sys.stderr)
        raise SystemExit(1)
    except ValueError as e:
        raise SystemExit(str(e))


def _parse_params(pairs: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise SystemExit(f"Invalid --param {pair!r}. Use KEY=VALUE.")
        params[key.strip()] = value
    return params


def _emit(data, output: Optional[Path]) -> None:
    text = json.dumps(data, indent=2, default=str)
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"Wrote result to {output}", file=sys.stderr)
    else:
        print(text)


def _run_query(args: argparse.Namespace) -> None:
    """Run query command."""
    from sales_insights.errors import UnknownEndpointError
    from sales_insights.query import QueryService

    params = _parse_params(args.param)
    store, _ = _load(args)
    service = QueryService(store, _build_config(args))
    try:
        result = service.handle(args.endpoint, params)
    except UnknownEndpointError as e:
        raise SystemExit(str(e))
    _emit(result, args.output)
    if result.get("status") != "ok":
        raise SystemExit(1)


def _run_endpoints(args: argparse.Namespace) -> None:
    """Run endpoints command."""
    from sales_insights.query import QueryService
    from sales_insights.store import CanonicalStore

    for name in QueryService(CanonicalStore.build()).endpoints():
        print(name)


def _run_clean_report(args: argparse.Namespace) -> None:
    """Run clean-report command."""
    _, report = _load(args)
    _emit(report.as_dict(), args.output)


if __name__ == "__main__":
    main()
