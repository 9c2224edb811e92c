"""Tests for engine/export.py: clipboard first, file as fallback."""
from __future__ import annotations

import json

from engine.export import (
    DETAIL_POLYLINES_FILENAME,
    SEGMENTS_FILENAME,
    export_collection,
    save_json_file,
    unique_path,
)


DATA = [{"id": "a", "code": "A"}]


class TestExportCollection:
    def test_clipboard(self, tmp_path):
        copied = []
        result = export_collection(DATA, SEGMENTS_FILENAME, tmp_path, copied.append)
        assert result.ok
        assert result.channel == "clipboard"
        assert result.message == "JSON copied to clipboard."
        assert json.loads(copied[0]) == DATA
        assert list(tmp_path.iterdir()) == []

    def test_clipboard_failure_falls_back_to_file(self, tmp_path, caplog):
        def refuse(_text):
            raise RuntimeError("clipboard denied")

        result = export_collection(DATA, SEGMENTS_FILENAME, tmp_path, refuse)
        assert result.ok
        assert result.channel == "file"
        assert result.path == tmp_path / SEGMENTS_FILENAME
        assert json.loads(result.path.read_text(encoding="utf-8")) == DATA
        assert "Clipboard copy failed" in caplog.text

    def test_no_clipboard(self, tmp_path):
        result = export_collection([], DETAIL_POLYLINES_FILENAME, tmp_path)
        assert result.channel == "file"
        assert result.path.name == "wheel-polylines.json"
        assert result.path.read_text(encoding="utf-8") == "[]"

    def test_indent(self, tmp_path):
        copied = []
        export_collection(DATA, SEGMENTS_FILENAME, tmp_path, copied.append, indent=4)
        assert '\n    {' in copied[0]


class TestSaveJsonFile:
    def test_never_overwrites(self, tmp_path):
        first = save_json_file(DATA, tmp_path, "segments.json")
        second = save_json_file([], tmp_path, "segments.json")
        assert first.path.name == "segments.json"
        assert second.path.name == "segments (1).json"
        assert json.loads(first.path.read_text(encoding="utf-8")) == DATA
        assert unique_path(tmp_path, "segments.json").name == "segments (2).json"

    def test_creates_directory(self, tmp_path):
        result = save_json_file(DATA, tmp_path / "a" / "b", "out.json")
        assert result.ok
        assert result.message == f"Saved out.json to {tmp_path / 'a' / 'b'}"

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        result = save_json_file(DATA, blocker / "sub", "out.json")
        assert not result.ok
        assert result.channel == ""
        assert result.message.startswith("Could not save out.json")
