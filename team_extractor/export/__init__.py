# team_extractor/export/__init__.py
from __future__ import annotations

from .sink import JsonlSink, MemorySink, RecordSink

__all__ = ["RecordSink", "MemorySink", "JsonlSink"]
