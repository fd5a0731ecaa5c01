"""
Human-readable formatting for the import summary
"""

from typing import List
from ingestion.statistics import ImportStatistics

BYTES_PER_KILOBYTE = 1024
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60
RULE = "=" * 59


def format_duration(seconds: float) -> str:
    """``1h 2m 3.00s``, ``2m 3.00s`` or ``3.00s``"""
    seconds = max(0.0, seconds)
    hours = int(seconds // SECONDS_PER_HOUR)
    minutes = int((seconds % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE)
    secs = seconds % SECONDS_PER_MINUTE

    if hours > 0:
        return f"{hours}h {minutes}m {secs:.2f}s"
    if minutes > 0:
        return f"{minutes}m {secs:.2f}s"
    return f"{secs:.2f}s"


def format_bytes(num_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB"]
    value = float(max(num_bytes, 0))
    power = 0

    while value >= BYTES_PER_KILOBYTE and power < len(units) - 1:
        value /= BYTES_PER_KILOBYTE
        power += 1

    return f"{round(value, 2):g} {units[power]}"


def format_number(number: float, decimals: int = 2) -> str:
    return f"{number:,.{decimals}f}"


def render_summary(stats: ImportStatistics, dry_run: bool = False, error_log_path: str = "") -> str:
    """Summary table plus warnings, ready to print"""
    rows = [
        ("Total Products Processed", format_number(stats.total_processed, 0)),
        ("Successful Imports", format_number(stats.successful_imports, 0)),
        ("Failed Validations", format_number(stats.failed_validations, 0)),
        ("Success Rate", f"{format_number(stats.success_rate())}%"),
        ("Total Duration", format_duration(stats.duration())),
        ("Memory Used", format_bytes(stats.memory_used())),
        ("Average Time per Product", f"{format_number(stats.average_time_per_item())}ms"),
    ]
    width = max(len(label) for label, _ in rows)

    lines: List[str] = ["", RULE, "IMPORT SUMMARY".center(len(RULE)), RULE, ""]
    lines.append(f"{'Metric'.ljust(width)} | Value")
    lines.append(f"{'-' * width}-+-{'-' * 20}")
    lines.extend(f"{label.ljust(width)} | {value}" for label, value in rows)

    if dry_run:
        lines += ["", "DRY RUN MODE: No data was saved to the database"]

    if stats.failed_validations > 0:
        lines += ["", f"{stats.failed_validations} products failed validation"]
        if error_log_path:
            lines.append(f"Check {error_log_path} for details")

    if stats.successful_imports > 0:
        lines += ["", "Import completed successfully"]

    lines += ["", RULE]
    return "\n".join(lines)
