from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Dict, Iterable, List, Optional

ISSUE_COLUMNS = ["Summary", "Issue key", "Status", "Assignee", "Original Estimate", "Created"]


def issue_row(
    key: str,
    status: str = "Open",
    assignee: str = "Alice",
    estimate: Optional[int] = None,
    created: str = "1/Jan/23 09:00 AM",
    summary: str = "",
) -> Dict[str, str]:
    return {
        "Summary": summary or f"Work on {key}",
        "Issue key": key,
        "Status": status,
        "Assignee": assignee,
        "Original Estimate": "" if estimate is None else str(estimate),
        "Created": created,
    }


def issues_csv(rows: Iterable[Dict[str, str]], columns: List[str] = ISSUE_COLUMNS) -> str:
    handle = io.StringIO()
    writer = csv.DictWriter(handle, fieldnames=columns, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return handle.getvalue()


def write_issues(path: Path, rows: Iterable[Dict[str, str]], columns: List[str] = ISSUE_COLUMNS) -> Path:
    path.write_text(issues_csv(rows, columns), encoding="utf-8")
    return path


EXAMPLE_ROWS = [
    issue_row("KEY-1", "Open", "Alice", 3600, "1/Jan/23 09:00 AM"),
    issue_row("KEY-2", "Closed", "Bob", None, "2/Jan/23 09:00 AM"),
    issue_row("KEY-3", "Open", "Alice", 28800, "3/Jan/23 09:00 AM"),
]
