"""
National Record Audit Tool — independent chain integrity verification.

Reads the journal database directly, recomputes every hash and reports
how many transitions of each kind the chain holds.

Usage:
    congress-dao-audit
    congress-dao-audit --database-url sqlite:///national_record.db
    congress-dao-audit --verbose --limit 20
"""

from __future__ import annotations

import argparse
import sys
import time

from rich.console import Console
from rich.table import Table

from congress_dao.config import settings
from congress_dao.ledger.models import LedgerEntryType
from congress_dao.ledger.service import LedgerService

console = Console()


def _summary_table(service: LedgerService) -> Table:
    table = Table(title="Entries by type")
    table.add_column("Type", style="green")
    table.add_column("Count", justify="right")
    counts = service.count_by_type()
    for entry_type in LedgerEntryType:
        table.add_row(entry_type.value, str(counts.get(entry_type.value, 0)))
    return table


def _listing_table(service: LedgerService, limit: int) -> Table:
    table = Table(title=f"Latest {limit} entries", show_lines=True)
    table.add_column("Seq", style="cyan", justify="right")
    table.add_column("Logical time", justify="right")
    table.add_column("Type", style="green")
    table.add_column("Author", style="yellow")
    table.add_column("Hash", style="dim")
    for entry in reversed(service.get_latest_entries(limit=limit)):
        table.add_row(
            str(entry.sequence_number),
            str(entry.logical_time),
            entry.entry_type,
            entry.author_principal,
            entry.entry_hash[:16] + "...",
        )
    return table


def run_audit(database_url: str, verbose: bool = False, limit: int = 50) -> bool:
    """
    Verify the hash chain at ``database_url`` and print a report.

    Args:
        database_url: SQLAlchemy connection string.
        verbose: Also print the per-type summary and the latest entries.
        limit: How many entries the verbose listing shows.

    Returns:
        True if the chain is intact.
    """
    console.print("\n[bold blue]═══ National Record Integrity Audit ═══[/bold blue]\n")

    service = LedgerService(database_url)
    if not service.has_schema():
        console.print("  Chain: [bold red]✗ INVALID[/bold red] (no journal table in this database)")
        return False

    count = service.get_entry_count()
    console.print(f"  Entries in journal: [bold]{count}[/bold]")

    started = time.perf_counter()
    report = service.verify_chain()
    elapsed = time.perf_counter() - started

    if report.valid:
        console.print(
            f"  Chain: [bold green]✓ VALID[/bold green] "
            f"({report.entries_verified} entries in {elapsed:.3f}s)"
        )
    else:
        console.print(f"  Chain: [bold red]✗ INVALID[/bold red] at position {report.entries_verified}")
        console.print(f"  Reason: {report.message}")

    if verbose:
        console.print(_summary_table(service))
        console.print(_listing_table(service, limit))

    console.print("\n[bold blue]═══ Audit Complete ═══[/bold blue]\n")
    return report.valid


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Congress DAO National Record auditor")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy connection string (defaults to .env settings)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show summary and listing")
    parser.add_argument("--limit", type=int, default=50, help="Entries in the verbose listing")
    args = parser.parse_args(argv)

    is_valid = run_audit(
        args.database_url or settings.database_url_sync,
        verbose=args.verbose,
        limit=args.limit,
    )
    sys.exit(0 if is_valid else 1)


if __name__ == "__main__":
    main()
