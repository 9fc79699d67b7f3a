"""Main CLI entry point."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from govcon_finder.config import DiscoveryConfig

if TYPE_CHECKING:
    from govcon_finder.models.query import DiscoveryResult, OpportunityQuery


def _add_query_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--sort-by",
        default="deadline",
        choices=["deadline", "value", "postedDate"],
        help="Sort key (default: deadline)",
    )
    parser.add_argument(
        "--order",
        default="asc",
        choices=["asc", "desc"],
        help="Sort direction (default: asc)",
    )
    parser.add_argument("--set-aside", default=None, help="Set-aside category, e.g. SDVOSB ('all' disables)")
    parser.add_argument("--min-value", type=float, default=None, help="Minimum numeric value")
    parser.add_argument("--search", default="", help="Case-insensitive match on title, agency, or NAICS")
    parser.add_argument(
        "--include-all",
        action="store_true",
        help="Query without a NAICS filter and keep listings matching known contractor codes",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write JSON result to file (default: stdout)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="govcon-finder",
        description="Federal contracting opportunity discovery for contractor NAICS codes",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path (overrides config)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # discover
    discover_parser = subparsers.add_parser("discover", help="Find opportunities (cache first, then SAM.gov)")
    _add_query_arguments(discover_parser)
    discover_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Bypass the cache freshness check and fetch live",
    )

    # sync
    sync_parser = subparsers.add_parser("sync", help="Force a live fetch and rewrite the cache")
    sync_parser.add_argument(
        "--include-all",
        action="store_true",
        help="Wildcard search instead of per-code queries",
    )

    # cache
    cache_parser = subparsers.add_parser("cache", help="Inspect the opportunity cache")
    cache_parser.add_argument(
        "action",
        choices=["list", "count", "status"],
        help="List cached opportunities, show count, or show last sync",
    )
    cache_parser.add_argument("--naics", default="", help="NAICS prefix filter (list)")
    cache_parser.add_argument("--search", default="", help="Text filter (list)")
    cache_parser.add_argument("--type", dest="notice_type", default="", help="Notice type filter (list)")
    cache_parser.add_argument("--limit", type=int, default=200, help="Max rows (list, capped at 500)")
    cache_parser.add_argument(
        "--include-expired",
        action="store_true",
        help="Include rows past their deadline (list)",
    )

    # contractors
    contractors_parser = subparsers.add_parser("contractors", help="Manage contractor NAICS codes")
    contractors_parser.add_argument("action", choices=["add", "list", "codes"])
    contractors_parser.add_argument("--name", type=str, help="Contractor name (for add)")
    contractors_parser.add_argument("--naics", type=str, help="NAICS code (for add)")

    return parser


def load_config(config_path: Optional[Path], db_path: Optional[Path]) -> DiscoveryConfig:
    config = DiscoveryConfig.from_yaml(config_path) if config_path else DiscoveryConfig.from_env()
    if db_path is not None:
        config = config.model_copy(update={"db_path": db_path})
    return config


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.config, args.db)

    if args.command == "discover":
        _run_discover(args, config)
    elif args.command == "sync":
        _run_sync(args, config)
    elif args.command == "cache":
        _run_cache(args, config)
    elif args.command == "contractors":
        _run_contractors(args, config)
    else:
        parser.print_help()


def _emit(payload: object, output: Optional[Path]) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"Wrote results to {output}", file=sys.stderr)
    else:
        print(text)


def _discover(config: DiscoveryConfig, query: "OpportunityQuery") -> "DiscoveryResult":
    from govcon_finder.errors import ConfigurationError
    from govcon_finder.pipeline import DiscoveryService

    try:
        return asyncio.run(DiscoveryService(config).discover(query))
    except ConfigurationError as e:
        raise SystemExit(str(e))


def _run_discover(args: argparse.Namespace, config: DiscoveryConfig) -> None:
    """Run discover command."""
    from govcon_finder.models.query import OpportunityQuery

    query = OpportunityQuery(
        sort_by=args.sort_by,
        sort_order=args.order,
        set_aside=args.set_aside,
        min_value=args.min_value,
        search=args.search,
        force_refresh=args.refresh,
        include_all=args.include_all,
    )
    result = _discover(config, query)
    _emit(result.model_dump(mode="json"), args.output)


def _run_sync(args: argparse.Namespace, config: DiscoveryConfig) -> None:
    """Run sync command: forced live fetch, summary to stdout."""
    from govcon_finder.models.query import OpportunityQuery

    result = _discover(config, OpportunityQuery(force_refresh=True, include_all=args.include_all))
    print(
        f"Synced {result.total_found} opportunities for {result.code_count} NAICS code(s)"
        + (" (wildcard)" if result.wildcard_mode else "")
    )


def _run_cache(args: argparse.Namespace, config: DiscoveryConfig) -> None:
    """Run cache command."""
    from govcon_finder.pipeline import utc_now
    from govcon_finder.store import OpportunityCache

    cache = OpportunityCache(config.db_path)
    if args.action == "list":
        opps, total = cache.query(
            now=utc_now(),
            code_prefix=args.naics,
            search=args.search,
            notice_type=args.notice_type,
            active_only=not args.include_expired,
            limit=args.limit,
        )
        _emit({"total": total, "opportunities": [o.model_dump(mode="json") for o in opps]}, None)
    elif args.action == "count":
        print(cache.count())
    elif args.action == "status":
        last = cache.last_sync()
        if last is None:
            print("Never synced")
            return
        age_hours = (utc_now() - last.synced_at).total_seconds() / 3600
        state = "fresh" if age_hours < config.freshness_hours else "stale"
        print(f"Last sync {last.synced_at.isoformat()} ({age_hours:.1f}h ago, {state}): {last.count} opportunities")


def _run_contractors(args: argparse.Namespace, config: DiscoveryConfig) -> None:
    """Run contractors command."""
    from govcon_finder.store import ContractorStore

    store = ContractorStore(config.db_path)
    if args.action == "add":
        if not args.name:
            raise SystemExit("contractors add requires --name")
        contractor = store.add(args.name, args.naics)
        print(f"Added contractor {contractor.name} (NAICS {contractor.naics_code or 'none'}, id={contractor.id})")
    elif args.action == "list":
        for c in store.list_all():
            print(f"  [{c.naics_code or '-'}] {c.name}")
    elif args.action == "codes":
        print(",".join(store.distinct_codes()))


if __name__ == "__main__":
    main()
