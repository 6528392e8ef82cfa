"""CSV and JSON renderings of audit log entries."""

import csv
import io
import json
from collections.abc import Iterable
from enum import Enum

from backoffice.audit.models import AuditLogEntry

CSV_HEADER = ("Timestamp", "User ID", "User Role", "Action", "Details", "IP Address", "Session ID")


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


def to_csv(entries: Iterable[AuditLogEntry]) -> str:
    """Render entries as CSV with every data field quoted."""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for entry in entries:
        writer.writerow(
            [
                entry.timestamp.isoformat(),
                entry.user_id,
                entry.user_role,
                entry.action,
                json.dumps(entry.details, separators=(",", ":"), default=str),
                entry.ip_address or "",
                entry.session_id or "",
            ]
        )
    return buffer.getvalue()


def to_json(entries: Iterable[AuditLogEntry]) -> str:
    """Render entries as an indented JSON array with camelCase keys."""
    payload = [
        {
            "id": str(entry.id),
            "timestamp": entry.timestamp.isoformat(),
            "userId": entry.user_id,
            "userRole": entry.user_role,
            "action": entry.action,
            "details": entry.details,
            "ipAddress": entry.ip_address,
            "userAgent": entry.user_agent,
            "sessionId": entry.session_id,
        }
        for entry in entries
    ]
    return json.dumps(payload, indent=2, default=str)


def render(entries: Iterable[AuditLogEntry], format: ExportFormat | str) -> str:
    """Render entries in ``format``. Raises ValueError for unknown formats."""
    format = ExportFormat(format)
    if format is ExportFormat.CSV:
        return to_csv(entries)
    return to_json(entries)
