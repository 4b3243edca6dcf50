"""Render result records as CSV, JSON or a rich table."""

import csv
import io
import json
from enum import Enum

from rich.markup import escape
from rich.table import Table

from peercompat.core.models import OUTPUT_COLUMNS, Priority, ResultRecord, RunSummary


class OutputFormat(str, Enum):
    """Supported report formats."""

    CSV = "csv"
    TABLE = "table"
    JSON = "json"


PRIORITY_STYLES = {
    Priority.MUST_UPGRADE: "red",
    Priority.OPTIONAL_UPGRADE: "yellow",
    Priority.KEEP: "green",
    Priority.UNKNOWN: "dim",
}


def render_csv(records: list[ResultRecord]) -> str:
    """Render records as CSV with the fixed output header."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    for record in records:
        writer.writerow(record.as_row())
    return buffer.getvalue()


def render_json(records: list[ResultRecord], summary: RunSummary | None = None) -> str:
    """Render records (and the run summary, if any) as JSON."""
    rows = []
    for record in records:
        row = dict(zip(OUTPUT_COLUMNS, record.as_row()))
        row["isDevDependency"] = record.is_dev
        row["priority"] = record.recommendation.priority.value
        if record.compatibility is not None:
            row["compatibleVersions"] = record.compatibility.compatible_versions
            row["nonContiguousWindow"] = record.compatibility.has_gap()
        rows.append(row)

    result_data: dict[str, object] = {"results": rows, "total": len(rows)}
    if summary is not None:
        result_data["summary"] = summary.model_dump()
    return json.dumps(result_data, indent=2)


def build_table(records: list[ResultRecord], title: str = "Compatibility") -> Table:
    """Build a rich table of the most relevant columns."""
    table = Table(title=title)
    table.add_column("Package", style="cyan")
    table.add_column("Dev", style="blue")
    table.add_column("Current", style="green")
    table.add_column("Latest")
    table.add_column("Compatible")
    table.add_column("Peer")
    table.add_column("Distance")
    table.add_column("Recommendation", style="bold")
    table.add_column("Note")

    for record in records:
        if record.earliest_compat == record.latest_compat:
            compat = record.latest_compat
        else:
            compat = f"{record.earliest_compat} - {record.latest_compat}"
        style = PRIORITY_STYLES[record.recommendation.priority]
        table.add_row(
            escape(record.name),
            "Yes" if record.is_dev else "No",
            escape(record.current),
            escape(record.latest),
            escape(compat),
            escape(record.peer_display),
            record.distance,
            f"[{style}]{escape(record.recommendation.display)}[/{style}]",
            escape(record.note),
        )
    return table
