# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from settlepy import app
from settlepy.config import configure_logging
from settlepy.domain.model import TableKind
from settlepy.domain.settlement import GenerationOutcome, Period
from settlepy.ui.report import (
    render_backups,
    render_checks,
    render_ingest_report,
    render_migration_report,
    render_restore,
    render_settlement_report,
    render_unpaid_summary,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ledger import and settlement tooling")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate = subparsers.add_parser("migrate", help="Import every CSV/Excel file of a directory")
    migrate.add_argument("--input", type=Path, required=True, help="Directory with source files")
    migrate.add_argument("--seed", action="store_true", help="Insert reference seed data first")
    migrate.add_argument("--clear", action="store_true", help="Delete ledger data first")
    migrate.add_argument("--dry-run", action="store_true", help="Validate only, write nothing")
    migrate.add_argument("--report", type=Path, help="Write the text report to this file")

    import_ = subparsers.add_parser("import", help="Import one file as a given table kind")
    import_.add_argument("--file", type=Path, required=True, help="CSV or Excel file")
    import_.add_argument(
        "--table",
        required=True,
        choices=[kind.value for kind in TableKind],
        help="Table kind of the file",
    )
    import_.add_argument("--sheet", type=str, help="Only read this workbook sheet")
    import_.add_argument("--dry-run", action="store_true", help="Validate only, write nothing")
    import_.add_argument("--report", type=Path, help="Write the text report to this file")

    subparsers.add_parser("seed", help="Insert reference seed data")

    clear = subparsers.add_parser("clear", help="Delete all ledger and settlement rows")
    clear.add_argument("--confirm", action="store_true", help="Required to actually delete")

    subparsers.add_parser("test", help="Check the row store connection")

    settlement = subparsers.add_parser(
        "generate-settlement", help="Generate the settlement of one month"
    )
    settlement.add_argument("--month", type=str, required=True, help="Period as YYYY-MM")
    settlement.add_argument(
        "--force", action="store_true", help="Rebuild the items of an existing draft"
    )

    for command, text in (
        ("backup", "Snapshot every table"),
        ("rollback", "Restore a snapshot after validating it"),
        ("validate-backup", "Verify snapshot checksums"),
    ):
        sub = subparsers.add_parser(command, help=text)
        sub.add_argument("--name", type=str, required=True, help="Backup name")

    subparsers.add_parser("list-backups", help="List stored snapshots")
    subparsers.add_parser("unpaid-summary", help="Summarise unpaid settlement items")

    return parser.parse_args(list(argv))


def _validate_args(args: argparse.Namespace) -> None:
    if args.command == "generate-settlement":
        Period.parse(args.month)
    elif args.command == "clear" and not args.confirm:
        raise ValueError("clear requires --confirm")
    elif args.command in {"backup", "rollback", "validate-backup"} and not args.name.strip():
        raise ValueError("Backup name must not be empty")


def _emit(text: str, report_path: Path | None = None) -> None:
    print(text)
    if report_path is not None:
        report_path.write_text(text + "\n", encoding="utf-8")
        log.info("Report written to %s", report_path)


def _dispatch(args: argparse.Namespace) -> int:  # noqa: C901, PLR0911
    command = args.command
    if command == "migrate":
        result = app.migrate(args.input, seed=args.seed, clear=args.clear, dry_run=args.dry_run)
        _emit(render_migration_report(result), args.report)
        return 0
    if command == "import":
        outcomes = app.import_file(
            args.file, TableKind(args.table), sheet=args.sheet, dry_run=args.dry_run
        )
        _emit(render_ingest_report(outcomes), args.report)
        return 0
    if command == "seed":
        counts = app.seed()
        print(", ".join(f"{table}={count}" for table, count in counts.items()))
        return 0
    if command == "clear":
        removed = app.clear_data(confirm=args.confirm)
        print(f"Deleted {sum(removed.values())} rows")
        return 0
    if command == "test":
        return 0 if app.check_connection() else EXIT_FAILURE
    if command == "generate-settlement":
        report = app.generate_settlement(args.month, force=args.force)
        print(render_settlement_report(report))
        return EXIT_FAILURE if report.result.outcome is GenerationOutcome.LOCKED else 0
    if command == "backup":
        snapshot = app.backup(args.name)
        print(
            f"Backup {snapshot.name}: {snapshot.table_count} tables, "
            f"{snapshot.total_records} records"
        )
        return 0
    if command == "rollback":
        restored = app.rollback(args.name)
        print(render_restore(restored))
        return 0 if restored.success else EXIT_FAILURE
    if command == "validate-backup":
        checks = app.validate_backup(args.name)
        print(render_checks(args.name, checks))
        return 0 if all(check.passed for check in checks) else EXIT_FAILURE
    if command == "list-backups":
        print(render_backups(app.list_backups()))
        return 0
    if command == "unpaid-summary":
        print(render_unpaid_summary(app.unpaid_summary()))
        return 0
    raise ValueError(f"Unsupported command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate_args(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        exit_code = _dispatch(parsed_args)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(EXIT_FAILURE)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
