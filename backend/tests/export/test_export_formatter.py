"""Tests for the export formatter.

Pure functions: no DB access, deterministic for a fixed export timestamp.
"""

import csv
import io
import json
import uuid
from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from app.core.exceptions import ExportFormatError
from app.export import ExportFormat, build_export_record, render_export, resolve_format

pytestmark = pytest.mark.unit

EXPORTED_AT = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


@pytest.fixture
def records():
    return [
        {
            "title": "A",
            "content": "B",
            "tags": ["x"],
            "is_favorite": True,
            "created_at": "2026-01-05T10:30:00.123456+00:00",
            "folder": {"name": "F"},
        }
    ]


class TestResolveFormat:
    @pytest.mark.parametrize(
        "requested,expected",
        [
            (None, ExportFormat.JSON),
            ("json", ExportFormat.JSON),
            ("csv", ExportFormat.CSV),
            ("markdown", ExportFormat.MARKDOWN),
            ("md", ExportFormat.MARKDOWN),
        ],
    )
    def test_accepted_formats(self, requested, expected):
        assert resolve_format(requested) is expected

    @pytest.mark.parametrize("requested", ["xml", "JSON", "pdf", " csv"])
    def test_rejects_unknown_format(self, requested):
        with pytest.raises(ExportFormatError) as exc_info:
            resolve_format(requested)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid format. Use json, csv, or md"


class TestJsonExport:
    def test_preserves_fields(self, records):
        payload = render_export(records, "json", EXPORTED_AT)

        assert payload.media_type == "application/json"
        assert payload.filename == "prompt-vault-export-2026-10-17.json"
        assert json.loads(payload.content) == records

    def test_is_pretty_printed(self, records):
        payload = render_export(records, ExportFormat.JSON, EXPORTED_AT)
        assert payload.content.startswith("[\n  {\n")

    def test_keeps_non_ascii(self):
        payload = render_export([{"title": "Café ☕"}], "json", EXPORTED_AT)
        assert "Café ☕" in payload.content


class TestCsvExport:
    def test_header_and_row(self, records):
        payload = render_export(records, "csv", EXPORTED_AT)

        lines = payload.content.split("\n")
        assert lines[0] == "Title,Content,Tags,Folder,Favorite,Created At"
        assert lines[1] == '"A","B","x","F",Yes,2026-01-05T10:30:00.123Z'
        assert payload.media_type == "text/csv"
        assert payload.filename == "prompt-vault-export-2026-10-17.csv"

    def test_escapes_double_quotes_and_parses_back(self, records):
        records[0]["content"] = 'He said "hi"'
        payload = render_export(records, "csv", EXPORTED_AT)

        assert '"He said ""hi"""' in payload.content
        rows = list(csv.reader(io.StringIO(payload.content)))
        assert rows[1][1] == 'He said "hi"'

    def test_escapes_quotes_in_tags_and_folder(self, records):
        records[0]["tags"] = ['say "x"', "y"]
        records[0]["folder"] = {"name": 'The "Best"'}
        rows = list(csv.reader(io.StringIO(render_export(records, "csv", EXPORTED_AT).content)))

        assert rows[1][2] == 'say "x", y'
        assert rows[1][3] == 'The "Best"'

    def test_multiline_content_round_trips(self, records):
        records[0]["content"] = "line one\nline two"
        rows = list(csv.reader(io.StringIO(render_export(records, "csv", EXPORTED_AT).content)))
        assert rows[1][1] == "line one\nline two"

    def test_no_folder_and_not_favorite(self, records):
        records[0]["folder"] = None
        records[0]["is_favorite"] = False
        payload = render_export(records, "csv", EXPORTED_AT)
        assert payload.content.split("\n")[1] == '"A","B","x","",No,2026-01-05T10:30:00.123Z'

    def test_empty_list_is_header_only(self):
        payload = render_export([], "csv", EXPORTED_AT)
        assert payload.content == "Title,Content,Tags,Folder,Favorite,Created At"


class TestMarkdownExport:
    def test_full_document(self, records):
        payload = render_export(records, "md", EXPORTED_AT)

        assert payload.content == (
            "# Prompt Vault Export\n\n"
            "Exported on 10/17/2026\n\n"
            "Total Prompts: 1\n\n"
            "---\n\n"
            "## A\n\n"
            "B\n\n"
            "**Tags:** `x`\n\n"
            "**Folder:** F\n\n"
            "⭐ **Favorite**\n\n"
            "*Created: 1/5/2026*\n\n"
            "---\n\n"
        )
        assert payload.media_type == "text/markdown"
        assert payload.filename == "prompt-vault-export-2026-10-17.md"

    def test_optional_lines_are_omitted(self, records):
        records[0].update(tags=[], folder=None, is_favorite=False)
        content = render_export(records, "markdown", EXPORTED_AT).content

        assert "**Tags:**" not in content
        assert "**Folder:**" not in content
        assert "Favorite" not in content
        assert "## A\n\nB\n\n*Created: 1/5/2026*\n\n---\n\n" in content

    def test_multiple_tags_are_inline_code(self, records):
        records[0]["tags"] = ["a", "b"]
        content = render_export(records, "md", EXPORTED_AT).content
        assert "**Tags:** `a`, `b`\n" in content

    def test_counts_prompts(self, records):
        content = render_export(records * 3, "md", EXPORTED_AT).content
        assert "Total Prompts: 3\n" in content
        assert content.count("## A") == 3


class TestBuildExportRecord:
    def test_flattens_prompt_row(self):
        prompt_id = uuid.uuid4()
        folder_id = uuid.uuid4()
        created = datetime(2026, 1, 5, 10, 30)  # naive, as SQLite returns it
        prompt = SimpleNamespace(
            id=prompt_id,
            user_id="user_1",
            folder_id=folder_id,
            title="A",
            content="B",
            tags=["x"],
            is_favorite=True,
            created_at=created,
            updated_at=created,
        )

        record = build_export_record(prompt, "F")

        assert record == {
            "id": str(prompt_id),
            "user_id": "user_1",
            "folder_id": str(folder_id),
            "title": "A",
            "content": "B",
            "tags": ["x"],
            "is_favorite": True,
            "created_at": "2026-01-05T10:30:00+00:00",
            "updated_at": "2026-01-05T10:30:00+00:00",
            "folder": {"name": "F"},
        }

    def test_without_folder(self):
        now = datetime.now(UTC)
        prompt = SimpleNamespace(
            id=uuid.uuid4(), user_id="u", folder_id=None, title="t", content="c",
            tags=[], is_favorite=False, created_at=now, updated_at=now,
        )
        record = build_export_record(prompt, None)
        assert record["folder"] is None
        assert record["folder_id"] is None
