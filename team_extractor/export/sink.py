# team_extractor/export/sink.py
"""
Output sinks for emitted records.

Every emission (person, page-level email, or a terminal "no data" record)
is one OutputRecord; sinks serialize it with OutputRecord.to_dict(), i.e.
the camelCase record shape:

  companyDomain, companyUrl, sourceUrl, name, title, email, profileUrl,
  linkedinUrl, twitterUrl, githubUrl, blueskyUrl, emailsOnPage,
  extractedAt, notes

Sinks are called from concurrent visit handlers and must be thread-safe.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import IO, Any, Protocol

from team_extractor.models import OutputRecord


class RecordSink(Protocol):
    def emit(self, record: OutputRecord) -> None: ...


class MemorySink:
    """Collects records in a list (tests, programmatic use)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[OutputRecord] = []

    def emit(self, record: OutputRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[OutputRecord]:
        with self._lock:
            return list(self._records)

    def dicts(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self.records]


class JsonlSink:
    """One JSON object per line, appended under a lock and flushed per record."""

    def __init__(self, target: str | Path | IO[str]) -> None:
        self._lock = threading.Lock()
        if isinstance(target, (str, Path)):
            self._fh: IO[str] = Path(target).open("a", encoding="utf-8")
            self._owns = True
        else:
            self._fh = target
            self._owns = False
        self.count = 0

    def emit(self, record: OutputRecord) -> None:
        line = json.dumps(record.to_dict(), ensure_ascii=False)
        with self._lock:
            self._fh.write(line + "\n")
            self._fh.flush()
            self.count += 1

    def close(self) -> None:
        with self._lock:
            if self._owns:
                self._fh.close()

    def __enter__(self) -> JsonlSink:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["RecordSink", "MemorySink", "JsonlSink"]
