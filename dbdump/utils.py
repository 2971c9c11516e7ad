"""
Utility functions for dbdump.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .models import Classification, DumpResult, TableInfo


SIZE_UNITS = ["KB", "MB", "GB", "TB"]


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, log_settings.get('level', 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def format_bytes(size: int) -> str:
    """Format a byte count as a human-readable string (1024 based)."""
    unit = 1024
    if size < unit:
        return f"{size} B"

    div, exp = unit, 0
    n = size // unit
    while n >= unit and exp < len(SIZE_UNITS) - 1:
        div *= unit
        exp += 1
        n //= unit

    return f"{size / div:.1f} {SIZE_UNITS[exp]}"


def print_dry_run_info(
    classification: Classification,
    output_file: str,
    reasons: Optional[dict[str, str]] = None
) -> None:
    """Print what a dump would do without running it."""
    reasons = reasons or {}
    logging.info("DRY RUN MODE - No data will be dumped")
    logging.info(f"Would dump structure for {classification.total} table(s)")

    if classification.excluded:
        logging.info(f"Would exclude data for {len(classification.excluded)} table(s):")
        for table in classification.excluded:
            rule = reasons.get(table)
            if rule and rule != table:
                logging.info(f"  - {table} (pattern '{rule}')")
            else:
                logging.info(f"  - {table}")
    else:
        logging.info("No tables excluded, all data would be dumped")

    logging.info(f"Would create dump file: {output_file}")


def print_table_list(database: str, tables: list[TableInfo], excluded: set[str]) -> None:
    """Print table sizes, marking tables whose data would be excluded."""
    print(f"\nTables in database '{database}':\n")
    print(f"   {'Table Name':<40} {'Size':>12} {'Rows':>15}")
    print("-" * 73)

    for info in tables:
        marker = "x" if info.name in excluded else " "
        print(f" {marker} {info.name:<40} {info.size_display:>12} {info.row_count:>15}")

    print(f"\nTotal: {len(tables)} tables, {len(excluded)} with data excluded (x)\n")


def print_summary(result: DumpResult) -> None:
    """Log a summary after a completed dump."""
    logging.info("=" * 50)
    logging.info("DUMP COMPLETE")
    logging.info(f"File: {result.output_file} ({result.file_size_display})")
    logging.info(f"Duration: {result.duration:.1f}s")
    if result.excluded_tables:
        logging.info(
            f"Excluded {len(result.excluded_tables)} table(s) (data only, structure preserved)"
        )
