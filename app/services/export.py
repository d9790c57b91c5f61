"""CSV serialisation of orphan page details."""

import csv
import io
from datetime import date
from typing import Iterable, Optional

from app.models.orphan_response import PageDetails

CSV_HEADER = (
    "ID",
    "Type",
    "URL",
    "Title",
    "Published Date",
    "Modified Date",
    "Categories",
    "Tags",
    "Author",
)


def build_csv(rows: Iterable[PageDetails]) -> str:
    """Return a CSV document with a header row and one line per orphan page."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow(
            [
                row.id,
                row.type,
                row.url,
                row.title,
                row.published,
                row.modified,
                row.categories,
                row.tags,
                row.author,
            ]
        )
    return buffer.getvalue()


def csv_filename(today: Optional[date] = None) -> str:
    return f"orphan-pages-{(today or date.today()).isoformat()}.csv"
