"""Markdown rendering of a prompt export via Jinja2.

The template keeps one block per prompt: heading, raw content, then the
optional tags, folder and favorite lines, the created date and a rule.
"""

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from app.export.timestamps import parse_timestamp

MARKDOWN_TEMPLATE_DIR = Path(__file__).parent / "templates"


def _inline_code(value: str) -> str:
    return f"`{value}`"


def _us_date(value) -> str:
    """Render M/D/YYYY (UTC), e.g. 1/5/2026."""
    dt = parse_timestamp(value)
    return f"{dt.month}/{dt.day}/{dt.year}"


class MarkdownExporter:
    """Export a list of prompt records as a single Markdown document."""

    def __init__(self):
        self.env = Environment(
            loader=FileSystemLoader(str(MARKDOWN_TEMPLATE_DIR)),
            autoescape=False,  # Markdown should NOT be escaped
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["inline_code"] = _inline_code
        self.env.filters["us_date"] = _us_date

    def render(self, records: list[dict], exported_at: datetime) -> str:
        template = self.env.get_template("export.md.j2")
        return template.render(records=records, exported_at=exported_at)
