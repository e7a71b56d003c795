"""Rendering of resolution results as tables, JSON and CSV."""
from __future__ import annotations

import csv
import json
import logging
from typing import Dict, List, Optional

from constants import Constants

from .engine import ResolutionState

logger = logging.getLogger(__name__)

_RULE_WIDTH = 88
_ROW_FORMAT = "%-30s | %-25s | %s"


def _rows(entries) -> List[Dict[str, str]]:
    return [e.as_row() for e in sorted(entries, key=lambda e: e.module_id)]


def resolved_rows(state: ResolutionState) -> List[Dict[str, str]]:
    """Resolved modules as ``module_id``/``group_id``/``version`` dicts, sorted by module id."""
    return _rows(state.resolved.values())


def unresolved_rows(state: ResolutionState) -> List[Dict[str, str]]:
    """Unresolved modules in the same shape as resolved_rows."""
    return _rows(state.unresolved.values())


def format_table(title: str, rows: List[Dict[str, str]]) -> List[str]:
    """Render one fixed-width table as a list of lines."""
    heading = f" {title} "
    lines = [
        heading.center(_RULE_WIDTH, "="),
        _ROW_FORMAT % tuple(Constants.TABLE_COLUMNS),
        "-" * _RULE_WIDTH,
    ]
    for row in rows:
        lines.append(_ROW_FORMAT % (row["module_id"], row["group_id"], row["version"]))
    return lines


def print_results(state: ResolutionState, log: Optional[logging.Logger] = None) -> None:
    """Log the resolved and unresolved tables at INFO."""
    log = log or logger
    log.info("")
    for line in format_table("Resolved Modules", resolved_rows(state)):
        log.info(line)
    log.info("")
    for line in format_table("Unresolved Modules", unresolved_rows(state)):
        log.info(line)
    log.info("")


def _records(state: ResolutionState) -> List[Dict[str, Optional[str]]]:
    records: List[Dict[str, Optional[str]]] = []
    for row in resolved_rows(state):
        records.append({**row, "status": "resolved", "reason": None})
    for entry in sorted(state.unresolved.values(), key=lambda e: e.module_id):
        records.append({**entry.as_row(), "status": "unresolved", "reason": entry.reason})
    return records


def export_json(state: ResolutionState, path: str) -> None:
    """Write resolved and unresolved modules to a JSON file.

    Raises:
        OSError: if the file cannot be written.
    """
    data = {
        "resolved": resolved_rows(state),
        "unresolved": [
            {**e.as_row(), "reason": e.reason}
            for e in sorted(state.unresolved.values(), key=lambda e: e.module_id)
        ],
    }
    with open(path, "w", encoding="utf-8") as file:
        json.dump(data, file, ensure_ascii=False, indent=4)
    logger.info("JSON file has been successfully exported at: %s", path)


def export_csv(state: ResolutionState, path: str) -> None:
    """Write one CSV row per module with a resolved/unresolved status column.

    Raises:
        OSError: if the file cannot be written.
    """
    headers = ["module_id", "group_id", "version", "status", "reason"]
    with open(path, "w", newline="", encoding="utf-8") as file:
        writer = csv.writer(file)
        writer.writerow(headers)
        for record in _records(state):
            writer.writerow(["" if record[h] is None else record[h] for h in headers])
    logger.info("CSV file has been successfully exported at: %s", path)
