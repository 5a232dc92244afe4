"""Export formatter: prompt records to a downloadable payload.

Pure functions: the same records, format and export timestamp always give
the same payload. Nothing here touches the database.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from app.core.exceptions import ExportFormatError
from app.export.markdown_exporter import MarkdownExporter
from app.export.timestamps import as_utc, iso_millis

FILENAME_PREFIX = "prompt-vault-export"
CSV_HEADER = ["Title", "Content", "Tags", "Folder", "Favorite", "Created At"]


class ExportFormat(StrEnum):
    JSON = "json"
    CSV = "csv"
    MARKDOWN = "markdown"


_FORMAT_ALIASES = {
    "json": ExportFormat.JSON,
    "csv": ExportFormat.CSV,
    "markdown": ExportFormat.MARKDOWN,
    "md": ExportFormat.MARKDOWN,
}

_MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.CSV: "text/csv",
    ExportFormat.MARKDOWN: "text/markdown",
}

_EXTENSIONS = {
    ExportFormat.JSON: "json",
    ExportFormat.CSV: "csv",
    ExportFormat.MARKDOWN: "md",
}


@dataclass(frozen=True)
class ExportPayload:
    content: str
    media_type: str
    filename: str


def resolve_format(requested: str | None) -> ExportFormat:
    """Map a ``format`` query value to an ExportFormat (default json).

    Raises:
        ExportFormatError: for anything other than json, csv, markdown or md
    """
    fmt = _FORMAT_ALIASES.get(requested or "json")
    if fmt is None:
        raise ExportFormatError(requested)
    return fmt


def build_export_record(prompt, folder_name: str | None) -> dict:
    """Flatten a Prompt row plus its folder name into a JSON-ready dict."""
    return {
        "id": str(prompt.id),
        "user_id": prompt.user_id,
        "folder_id": str(prompt.folder_id) if prompt.folder_id else None,
        "title": prompt.title,
        "content": prompt.content,
        "tags": list(prompt.tags or []),
        "is_favorite": bool(prompt.is_favorite),
        "created_at": as_utc(prompt.created_at).isoformat(),
        "updated_at": as_utc(prompt.updated_at).isoformat(),
        "folder": {"name": folder_name} if folder_name is not None else None,
    }


def export_filename(fmt: ExportFormat, exported_at: datetime) -> str:
    return f"{FILENAME_PREFIX}-{as_utc(exported_at).date().isoformat()}.{_EXTENSIONS[fmt]}"


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _folder_name(record: dict) -> str:
    folder = record.get("folder") or {}
    return folder.get("name") or ""


def render_json(records: list[dict]) -> str:
    return json.dumps(records, indent=2, ensure_ascii=False)


def render_csv(records: list[dict]) -> str:
    """One header row, then one row per prompt.

    Text fields are always quoted with embedded quotes doubled; Favorite is
    a bare Yes/No and Created At a UTC timestamp with milliseconds.
    """
    lines = [",".join(CSV_HEADER)]
    for record in records:
        row = [
            _quote(record["title"]),
            _quote(record["content"]),
            _quote(", ".join(record.get("tags") or [])),
            _quote(_folder_name(record)),
            "Yes" if record.get("is_favorite") else "No",
            iso_millis(record["created_at"]),
        ]
        lines.append(",".join(row))
    return "\n".join(lines)


def render_markdown(records: list[dict], exported_at: datetime) -> str:
    return MarkdownExporter().render(records, exported_at)


def render_export(records: list[dict], fmt: ExportFormat | str, exported_at: datetime) -> ExportPayload:
    """Render ``records`` in ``fmt`` and pick the media type and filename."""
    if not isinstance(fmt, ExportFormat):
        fmt = resolve_format(fmt)

    if fmt is ExportFormat.JSON:
        content = render_json(records)
    elif fmt is ExportFormat.CSV:
        content = render_csv(records)
    else:
        content = render_markdown(records, exported_at)

    return ExportPayload(
        content=content,
        media_type=_MEDIA_TYPES[fmt],
        filename=export_filename(fmt, exported_at),
    )
