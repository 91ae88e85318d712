# team_extractor/__init__.py
"""
Team page extractor.

Given company homepages, find the pages that list people (team, leadership,
about), extract names, titles, emails and social links from them, and emit
one JSON record per person, per page-level email, or per dead end.

Public API:
  - load_config(data) -> ExtractorConfig
  - TeamPageCrawler(config, driver, sink, ...).run() -> int
  - StaticPageDriver, BoundedFetcher: the default HTTP page driver
  - MemorySink, JsonlSink: record sinks
"""

from __future__ import annotations

from .config import ExtractorConfig, load_config, load_input_file
from .crawl.browser import StaticPageDriver
from .crawl.runner import TeamPageCrawler
from .exceptions import ConfigError, ExtractorError, LlmError, NavigationFailure, TransportError
from .export.sink import JsonlSink, MemorySink
from .fetch.client import BoundedFetcher
from .models import Anchor, Candidate, OutputRecord, Person

__all__ = [
    "ExtractorConfig",
    "load_config",
    "load_input_file",
    "TeamPageCrawler",
    "StaticPageDriver",
    "BoundedFetcher",
    "MemorySink",
    "JsonlSink",
    "Anchor",
    "Candidate",
    "Person",
    "OutputRecord",
    "ExtractorError",
    "TransportError",
    "NavigationFailure",
    "LlmError",
    "ConfigError",
]

__version__ = "0.1.0"
