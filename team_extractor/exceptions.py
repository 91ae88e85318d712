# team_extractor/exceptions.py
"""
Shared exception classes used across the codebase.

Most of these never escape a single page visit: transport and parse failures
are recovered where they happen (skip that fetch / that input unit), and a
navigation failure becomes a terminal "no data" record for the visit.
"""

from __future__ import annotations


class ExtractorError(Exception):
    """Base class for errors raised by team_extractor."""


class TransportError(ExtractorError):
    """
    Raised when a bounded network fetch fails.

    Examples:
        - connect/read timeout
        - non-2xx HTTP status
        - response (or decompressed response) larger than the byte cap
    """


class ParseError(ExtractorError):
    """Raised when a fetched document cannot be decoded (bad gzip, bad JSON)."""


class NavigationFailure(ExtractorError):
    """Raised by a page driver when a page cannot be loaded."""


class LlmError(ExtractorError):
    """Raised when the text-generation call fails, times out, or is misconfigured."""


class ConfigError(ExtractorError):
    """Raised for invalid or missing run configuration (e.g. no start URLs)."""


__all__ = [
    "ExtractorError",
    "TransportError",
    "ParseError",
    "NavigationFailure",
    "LlmError",
    "ConfigError",
]
