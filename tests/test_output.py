"""Tests for output stages."""

import json
import sqlite3

import pytest

from crawlkit.frontier import CrawlTask
from crawlkit.output import EchoStage, JsonLinesStage, SqliteStage


class TestJsonLinesStage:
    def test_creates_file_and_directory(self, tmp_path):
        """Should create output file and parent directories."""
        output_file = tmp_path / "subdir" / "output.jsonl"
        with JsonLinesStage(output_file) as stage:
            stage.process({"url": "http://example.com"}, None)

        assert output_file.exists()

    def test_writes_jsonl_format(self, tmp_path):
        """Should write valid JSONL format."""
        output_file = tmp_path / "output.jsonl"
        with JsonLinesStage(output_file) as stage:
            stage.process({"url": "http://example.com/1"}, None)
            stage.process({"url": "http://example.com/2"}, None)

        lines = output_file.read_text().strip().split("\n")
        assert len(lines) == 2
        assert json.loads(lines[0]) == {"url": "http://example.com/1"}
        assert json.loads(lines[1]) == {"url": "http://example.com/2"}

    def test_returns_record_for_next_stage(self, tmp_path):
        """The stage should pass the record on unchanged."""
        record = {"url": "http://example.com"}
        with JsonLinesStage(tmp_path / "out.jsonl") as stage:
            assert stage.process(record, None) is record

    def test_include_content_false_excludes_content(self, tmp_path):
        """include_content=False should exclude content field."""
        output_file = tmp_path / "output.jsonl"
        record = {"url": "http://example.com", "content": "Hello"}
        with JsonLinesStage(output_file, include_content=False) as stage:
            stage.process(record, None)

        content = json.loads(output_file.read_text().strip())
        assert "content" not in content
        assert record["content"] == "Hello"

    def test_unicode_preserved(self, tmp_path):
        """Non-ASCII text should be written as is."""
        output_file = tmp_path / "output.jsonl"
        with JsonLinesStage(output_file) as stage:
            stage.process({"text": "こんにちは"}, None)

        assert "こんにちは" in output_file.read_text(encoding="utf-8")

    def test_count_property(self, tmp_path):
        """count property should return number of written records."""
        with JsonLinesStage(tmp_path / "output.jsonl") as stage:
            assert stage.count == 0
            stage.process({"id": 1}, None)
            stage.process({"id": 2}, None)
            assert stage.count == 2

    def test_write_without_open_raises(self, tmp_path):
        """Should raise RuntimeError if used before open()."""
        stage = JsonLinesStage(tmp_path / "output.jsonl")
        with pytest.raises(RuntimeError):
            stage.process({"url": "http://example.com"}, None)

    def test_flushes_after_each_write(self, tmp_path):
        """Should flush after each write for real-time updates."""
        output_file = tmp_path / "output.jsonl"
        with JsonLinesStage(output_file) as stage:
            stage.process({"url": "http://example.com/1"}, None)
            assert "example.com/1" in output_file.read_text()


class TestSqliteStage:
    def test_persists_records(self, tmp_path):
        """Records should be stored as JSON rows."""
        db_path = tmp_path / "out" / "results.db"
        stage = SqliteStage(db_path)
        stage.open(None)
        stage.process({"url": "http://example.com/1", "title": "One"}, None)
        stage.process({"url": "http://example.com/2", "title": "Two"}, None)
        stage.close()

        conn = sqlite3.connect(db_path)
        rows = conn.execute("SELECT url, data FROM records ORDER BY id").fetchall()
        conn.close()

        assert [url for url, _ in rows] == ["http://example.com/1", "http://example.com/2"]
        assert json.loads(rows[1][1]) == {"url": "http://example.com/2", "title": "Two"}

    def test_url_falls_back_to_current_task(self, tmp_path):
        """Without a url field the current task URL should be stored."""
        class Handle:
            current = CrawlTask(url="http://example.com/listing")

        db_path = tmp_path / "results.db"
        stage = SqliteStage(db_path)
        stage.open(None)
        stage.process({"title": "No url"}, Handle())
        stage.close()

        conn = sqlite3.connect(db_path)
        (url,) = conn.execute("SELECT url FROM records").fetchone()
        conn.close()
        assert url == "http://example.com/listing"

    def test_custom_table(self, tmp_path):
        """Records should go to the configured table."""
        db_path = tmp_path / "results.db"
        stage = SqliteStage(db_path, table="posts")
        stage.open(None)
        stage.process({"id": 1}, None)
        stage.close()

        conn = sqlite3.connect(db_path)
        (count,) = conn.execute("SELECT COUNT(*) FROM posts").fetchone()
        conn.close()
        assert count == 1

    def test_rejects_bad_table_name(self, tmp_path):
        """An invalid table name should raise ValueError."""
        with pytest.raises(ValueError):
            SqliteStage(tmp_path / "results.db", table="records; DROP TABLE x")

    def test_write_without_open_raises(self, tmp_path):
        """Writing before open should raise RuntimeError."""
        with pytest.raises(RuntimeError):
            SqliteStage(tmp_path / "results.db").process({}, None)


class TestEchoStage:
    def test_prints_json(self, capsys):
        """Each record should be printed as JSON."""
        record = {"title": "Hello", "author": None}
        assert EchoStage().process(record, None) is record
        out = capsys.readouterr().out.strip()
        assert json.loads(out) == record
