"""CSV export of pages and issues."""
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.parse import quote

import pandas as pd

# Prepended to CSV downloads
UTF8_BOM = "\ufeff"


@dataclass(frozen=True)
class ExportColumn:
    key: str
    header: str
    formatter: Optional[Callable[[Any], str]] = None

    def cell(self, row: Dict[str, Any]) -> str:
        value = row.get(self.key)
        if self.formatter:
            value = self.formatter(value)
        return "" if value is None else str(value)


def generate_csv(rows: Sequence[Dict[str, Any]], columns: Sequence[ExportColumn]) -> str:
    """
    Render rows as CSV under the columns' headers.

    Cells are written as text, so integer columns with gaps stay integers
    and None becomes an empty cell. No trailing newline.
    """
    df = pd.DataFrame(
        [[col.cell(row) for col in columns] for row in rows],
        columns=[col.header for col in columns],
        dtype=object,
    )
    text = df.to_csv(index=False, lineterminator="\n")
    return text[:-1] if text.endswith("\n") else text


def format_date_for_export(value: Any) -> str:
    """ISO date (YYYY-MM-DD) of a datetime or ISO string; empty when missing."""
    if not value:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def format_boolean_for_export(value: Optional[bool]) -> str:
    if value is None:
        return ""
    return "Yes" if value else "No"


PAGES_EXPORT_COLUMNS: List[ExportColumn] = [
    ExportColumn("url", "URL"),
    ExportColumn("title", "Title"),
    ExportColumn("meta_description", "Meta Description"),
    ExportColumn("word_count", "Word Count"),
    ExportColumn("http_status", "HTTP Status"),
    ExportColumn("load_time_ms", "Load Time (ms)"),
    ExportColumn("depth", "Depth"),
    ExportColumn("is_indexable", "Indexable", format_boolean_for_export),
]

ISSUES_EXPORT_COLUMNS: List[ExportColumn] = [
    ExportColumn("page_url", "Page URL"),
    ExportColumn("issue_type", "Issue Type"),
    ExportColumn("severity", "Severity"),
    ExportColumn("description", "Description"),
    ExportColumn("created_at", "Created At", format_date_for_export),
]




def export_filename(project_name: str, suffix: str) -> str:
    """ASCII filename: ``My "Best" Site`` + ``pages`` -> ``my-best-site-pages.csv``"""
    slug = re.sub(r"\s+", "-", project_name.strip().lower())
    slug = re.sub(r"[^a-z0-9-]+", "", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-") or "project"
    return f"{slug}-{suffix}.csv"


def content_disposition(project_name: str, suffix: str) -> str:
    """Attachment header with an ASCII fallback and the RFC 5987 UTF-8 name."""
    utf8_name = "-".join(project_name.split() or ["project"]) + f"-{suffix}.csv"
    return (
        f'attachment; filename="{export_filename(project_name, suffix)}"; '
        f"filename*=UTF-8''{quote(utf8_name, safe='')}"
    )
