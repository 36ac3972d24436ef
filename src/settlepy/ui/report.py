"""Plain-text renderings of command results."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from settlepy.app import ImportOutcome, MigrationResult, SettlementReport
    from settlepy.domain.backup import RestoreResult, Snapshot, TableCheck
    from settlepy.domain.diagnostics import Issue
    from settlepy.domain.settlement import MemberTotal, UnpaidSummary

RULE = "-" * 60


def _won(amount: int) -> str:
    return f"{amount:,}"


def _issue_lines(title: str, issues: Sequence[Issue]) -> list[str]:
    if not issues:
        return []
    lines = [f"  {title} ({len(issues)}):"]
    lines.extend(f"    [{issue.kind}] {issue.describe()}" for issue in issues)
    return lines


def render_ingest_report(outcomes: Iterable[ImportOutcome]) -> str:
    """Counts per source table followed by every error and warning."""

    lines: list[str] = ["Ingest report", RULE]
    for outcome in outcomes:
        summary = outcome.validation.summary
        status = "OK" if outcome.success else "FAILED"
        mode = " (dry run)" if outcome.dry_run else ""
        lines.append(f"{outcome.source} -> {outcome.kind}: {status}{mode}")
        lines.append(
            f"  rows: total={summary.total} accepted={summary.success} "
            f"errors={summary.error} warnings={summary.warning} skipped={summary.skipped}"
        )
        if outcome.insert is not None:
            lines.append(
                f"  inserted={outcome.insert.inserted_count} "
                f"rejected={len(outcome.insert.errors)}"
            )
            lines.extend(
                f"    record {error.index}: {error.error}" for error in outcome.insert.errors
            )
        if outcome.created_references:
            created = ", ".join(f"{kind}:{token}" for kind, token in outcome.created_references)
            lines.append(f"  created references: {created}")
        lines.extend(_issue_lines("errors", outcome.validation.errors))
        lines.extend(_issue_lines("warnings", outcome.validation.warnings))
    return "\n".join(lines)


def render_migration_report(result: MigrationResult) -> str:
    lines = [render_ingest_report(result.imports), RULE]
    succeeded = sum(1 for outcome in result.imports if outcome.success)
    lines.append(f"Succeeded: {succeeded}/{len(result.imports)} tables")
    if result.cleared:
        lines.append(f"Cleared rows: {sum(result.cleared.values())}")
    if result.seeded:
        lines.append(f"Seeded rows: {sum(result.seeded.values())}")
    if result.skipped:
        lines.append(f"Skipped (unknown kind): {', '.join(result.skipped)}")
    for failure in result.failures:
        lines.append(f"Failed: {failure.source}: {failure.error}")
    return "\n".join(lines)


def _total_lines(totals: Iterable[MemberTotal]) -> list[str]:
    return [
        f"  {total.name:<12} items={total.items:>3} before={_won(total.before_withholding):>12} "
        f"tax={_won(total.withholding_tax):>10} after={_won(total.after_withholding):>12}"
        for total in totals
    ]


def render_settlement_report(report: SettlementReport) -> str:
    result = report.result
    lines = [f"Settlement {result.period}: {result.outcome}"]
    if result.settlement is not None:
        lines.append(f"  id={result.settlement.id} status={result.settlement.status}")
    if result.written:
        lines.append(f"  sources={result.source_count} items={len(result.items)}")
    lines.extend(_total_lines(report.totals))
    return "\n".join(lines)


def render_unpaid_summary(summary: UnpaidSummary) -> str:
    lines = ["Unpaid settlement items", RULE]
    lines.extend(_total_lines(summary.by_member))
    for source_type, amount in summary.by_source_type.items():
        lines.append(f"  {source_type:<10} {_won(amount):>12}")
    total = summary.total
    lines.append(f"Total unpaid: {_won(total.after_withholding)} ({total.items} items)")
    return "\n".join(lines)


def render_checks(name: str, checks: Sequence[TableCheck]) -> str:
    lines = [f"Backup {name}"]
    lines.extend(
        f"  {check.table:<18} {check.status} rows={check.rows}" for check in checks
    )
    failed = sum(1 for check in checks if not check.passed)
    lines.append("Integrity OK" if not failed else f"Integrity FAILED ({failed} tables)")
    return "\n".join(lines)


def render_restore(result: RestoreResult) -> str:
    if not result.success:
        return render_checks(result.name, result.checks) + "\nRestore aborted"
    restored = sum(result.restored.values())
    return f"Restored backup {result.name}: {restored} records"


def render_backups(snapshots: Sequence[Snapshot]) -> str:
    if not snapshots:
        return "No backups found"
    return "\n".join(
        f"{snapshot.name:<24} {snapshot.timestamp:%Y-%m-%d %H:%M:%S} "
        f"tables={snapshot.table_count} records={snapshot.total_records}"
        for snapshot in snapshots
    )
