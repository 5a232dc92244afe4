"""Prompt export (JSON, CSV, Markdown)."""

from app.export.formatter import (
    ExportFormat,
    ExportPayload,
    build_export_record,
    render_export,
    resolve_format,
)

__all__ = [
    "ExportFormat",
    "ExportPayload",
    "build_export_record",
    "render_export",
    "resolve_format",
]
