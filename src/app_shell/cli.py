import argparse
import json
import logging
import sys

from src.api.deps import (
    get_admin_store,
    get_auth_adapter,
    get_ingestion_service,
    get_reporting_service,
    get_rules,
    get_settings,
)
from src.components.analytics import ReportQuery, run_get_stats
from src.components.auth import CreateAdminInput, run_create_admin
from src.core.ports.storage import StoreIOError

logger = logging.getLogger("cli")


def handle_create_admin(args: argparse.Namespace) -> int:
    result = run_create_admin(
        CreateAdminInput(
            username=args.username,
            password=args.password,
            name=args.name,
            role=args.role,
        ),
        get_admin_store(),
        get_auth_adapter(),
    )
    if not result.success or result.admin is None:
        logger.error("Could not create admin: %s", result.error)
        return 1

    print(f"Admin '{result.admin.username}' created (id={result.admin.id}).")
    return 0


def handle_prune(args: argparse.Namespace) -> int:
    removed = get_ingestion_service().prune()
    print(f"Pruned {removed} expired records.")
    return 0


def handle_stats(args: argparse.Namespace) -> int:
    analytics = get_rules().analytics
    days = analytics.default_days if args.days is None else args.days
    if not 1 <= days <= analytics.max_days:
        logger.error("--days must be between 1 and %d", analytics.max_days)
        return 2

    report = run_get_stats(ReportQuery(days=days), reporting=get_reporting_service())
    print(json.dumps(report.to_json_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="UPNVJ Dashboard Analytics CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # create-admin
    admin_parser = subparsers.add_parser("create-admin", help="Provision a dashboard admin")
    admin_parser.add_argument("username", help="Login name")
    admin_parser.add_argument("--password", required=True, help="Initial password")
    admin_parser.add_argument("--name", help="Display name (defaults to username)")
    admin_parser.add_argument(
        "--role", default="admin", choices=["admin", "superadmin"], help="Admin role"
    )

    # prune
    subparsers.add_parser("prune", help="Drop expired analytics records")

    # stats
    stats_parser = subparsers.add_parser("stats", help="Print headline stats as JSON")
    stats_parser.add_argument(
        "--days", type=int, default=None, help="Trailing window in days (default: default_days)"
    )

    return parser


HANDLERS = {
    "create-admin": handle_create_admin,
    "prune": handle_prune,
    "stats": handle_stats,
}


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        return 1

    try:
        return HANDLERS[args.command](args)
    except StoreIOError as e:
        logger.error("Store error: %s", e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
