# main.py

"""Entry point for the buying_list price tracker CLI."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.models.shopping_item import AlertCondition

logger = logging.getLogger("buying_list.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="buying_list",
        description="Track prices of a shopping list across online stores.",
    )
    parser.add_argument(
        "--data",
        default=None,
        dest="data_path",
        help="Path to the data file (default: data/buying-list-data.json).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show all items and their sources.")

    p = sub.add_parser("add-item", help="Add an item to the list.")
    p.add_argument("name")
    p.add_argument("-c", "--category", default=None)
    p.add_argument(
        "-p",
        "--priority",
        choices=["low", "medium", "high"],
        default="medium",
    )
    p.add_argument(
        "-t", "--tags", default="", help="Comma-separated tags.",
    )

    p = sub.add_parser("add-source", help="Attach a store page to an item.")
    p.add_argument("item_id")
    p.add_argument("url")
    p.add_argument("-n", "--name", default="")
    p.add_argument(
        "-s",
        "--selector",
        action="append",
        default=[],
        dest="selectors",
        help="CSS selector for the price (repeatable).",
    )
    p.add_argument("--currency", default=None)

    p = sub.add_parser(
        "update", help="Fetch current prices (all, one item or one source).",
    )
    p.add_argument("item_id", nargs="?", default=None)
    p.add_argument("source_id", nargs="?", default=None)

    p = sub.add_parser("set-price", help="Record a price manually.")
    p.add_argument("item_id")
    p.add_argument("source_id")
    p.add_argument("price")

    p = sub.add_parser("compare", help="Compare prices across sources.")
    p.add_argument("item_id")

    p = sub.add_parser("history", help="Show price history.")
    p.add_argument("item_id")
    p.add_argument("--source", default=None, dest="source_id")
    p.add_argument("--days", type=int, default=30)

    p = sub.add_parser("stats", help="Price statistics for one source.")
    p.add_argument("item_id")
    p.add_argument("source_id")

    p = sub.add_parser("recommend", help="Buy or wait recommendation.")
    p.add_argument("item_id")

    p = sub.add_parser("alert", help="Manage price alerts.")
    alert_sub = p.add_subparsers(dest="alert_action", required=True)
    a = alert_sub.add_parser("add")
    a.add_argument("item_id")
    a.add_argument("source_id")
    a.add_argument("price")
    a.add_argument(
        "--condition",
        choices=[c.value for c in AlertCondition],
        default=AlertCondition.BELOW.value,
    )
    for action in ("remove", "toggle"):
        a = alert_sub.add_parser(action)
        a.add_argument("item_id")
        a.add_argument("alert_id")

    p = sub.add_parser("watch", help="Update prices periodically.")
    p.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between updates (default: from settings).",
    )

    p = sub.add_parser("extract", help="Extract a price from one page.")
    p.add_argument("url", nargs="?", default=None)
    p.add_argument("--file", default=None, dest="file_path")
    p.add_argument(
        "-s", "--selector", action="append", default=[], dest="selectors",
    )

    sub.add_parser("health", help="Check connectivity of every source.")

    p = sub.add_parser("export", help="Export all data as JSON.")
    p.add_argument("-o", "--output", default=None)

    p = sub.add_parser("import", help="Replace all data from a JSON export.")
    p.add_argument("path")

    return parser


def _dispatch(args: argparse.Namespace) -> int:
    """Run the selected sub-command and return its exit code."""
    from src.cli import runner
    from src.services.price_service import PriceService

    if args.command == "extract":
        return runner.cmd_extract(args.url, args.file_path, args.selectors)

    store = runner.open_store(args.data_path)

    if args.command == "list":
        return runner.cmd_list(store)
    if args.command == "add-item":
        tags = [t.strip() for t in args.tags.split(",") if t.strip()]
        return runner.cmd_add_item(
            store, args.name, args.category, args.priority, tags,
        )
    if args.command == "health":
        return asyncio.run(runner.run_health_check(store))
    if args.command == "export":
        return runner.cmd_export(store, args.output)
    if args.command == "import":
        return runner.cmd_import(store, args.path)

    service = PriceService(store)
    try:
        if args.command == "add-source":
            return asyncio.run(runner.cmd_add_source(
                service, args.item_id, args.url, args.name,
                args.selectors, args.currency,
            ))
        if args.command == "update":
            return asyncio.run(
                runner.cmd_update(service, args.item_id, args.source_id)
            )
        if args.command == "set-price":
            return asyncio.run(runner.cmd_set_price(
                service, args.item_id, args.source_id, args.price,
            ))
        if args.command == "compare":
            return runner.cmd_compare(service, args.item_id)
        if args.command == "history":
            return runner.cmd_history(
                service, args.item_id, args.source_id, args.days,
            )
        if args.command == "stats":
            return runner.cmd_stats(service, args.item_id, args.source_id)
        if args.command == "recommend":
            return runner.cmd_recommend(service, args.item_id)
        if args.command == "alert":
            if args.alert_action == "add":
                return asyncio.run(runner.cmd_alert(
                    service, "add", args.item_id, args.source_id,
                    args.price, args.condition,
                ))
            return asyncio.run(runner.cmd_alert(
                service, args.alert_action, args.item_id, args.alert_id,
                None, AlertCondition.BELOW.value,
            ))
        if args.command == "watch":
            try:
                return asyncio.run(runner.run_watch(service, args.interval))
            except KeyboardInterrupt:
                logger.info("Watch interrupted by user")
                return 0
    finally:
        service.close()
    return 2


def main() -> None:
    """Parse arguments and run one sub-command."""
    log_file = setup_logging()
    logger.info("buying_list starting, log file: %s", log_file)

    args = _build_parser().parse_args()
    try:
        exit_code = _dispatch(args)
    except Exception:
        logger.critical("Fatal error in %s", args.command, exc_info=True)
        raise
    finally:
        logger.info("buying_list shutting down")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
