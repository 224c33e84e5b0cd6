"""Output stages: terminal echo, JSON Lines and SQLite."""

import json
import sqlite3
import time
from pathlib import Path
from typing import TextIO

import typer

from .pipeline import Stage


def _dumps(record: dict) -> str:
    return json.dumps(record, ensure_ascii=False, default=str)


def _record_url(record: dict, crawler) -> str | None:
    if record.get("url"):
        return str(record["url"])
    if crawler is not None and crawler.current is not None:
        return crawler.current.url
    return None


class EchoStage(Stage):
    """Print each record as one JSON line."""

    def process(self, record, crawler):
        typer.echo(_dumps(record))
        return record


class JsonLinesStage(Stage):
    """Streams records to a JSON Lines file, one flush per record."""

    def __init__(
        self,
        output_path: str | Path,
        include_content: bool = True,
    ):
        self.output_path = Path(output_path)
        self.include_content = include_content
        self._file: TextIO | None = None
        self._count = 0

    def open(self, crawler=None):
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.output_path, "w", encoding="utf-8")
        self._count = 0

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "JsonLinesStage":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def process(self, record, crawler):
        if self._file is None:
            raise RuntimeError("JsonLinesStage must be opened before writing")

        output = record
        if not self.include_content and "content" in record:
            output = {k: v for k, v in record.items() if k != "content"}

        self._file.write(_dumps(output) + "\n")
        self._file.flush()
        self._count += 1
        return record

    @property
    def count(self) -> int:
        """Number of records written."""
        return self._count


class SqliteStage(Stage):
    """Persists records as JSON documents in a SQLite table."""

    def __init__(self, db_path: str | Path, table: str = "records"):
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self.db_path = Path(db_path)
        self.table = table
        self.conn: sqlite3.Connection | None = None

    def open(self, crawler=None):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                id INTEGER PRIMARY KEY,
                url TEXT,
                data TEXT NOT NULL,
                stored_at REAL NOT NULL
            )
        """)
        self.conn.commit()

    def close(self):
        if self.conn is not None:
            self.conn.commit()
            self.conn.close()
            self.conn = None

    def process(self, record, crawler):
        if self.conn is None:
            raise RuntimeError("SqliteStage must be opened before writing")

        self.conn.execute(
            f"INSERT INTO {self.table} (url, data, stored_at) VALUES (?, ?, ?)",
            (_record_url(record, crawler), _dumps(record), time.time()),
        )
        self.conn.commit()
        return record
