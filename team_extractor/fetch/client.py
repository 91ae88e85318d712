# team_extractor/fetch/client.py
from __future__ import annotations

import codecs
import logging
import os
import time
from dataclasses import dataclass

import httpx

from team_extractor.exceptions import TransportError

log = logging.getLogger(__name__)

# --------------------------------------------------------------------------------------------------
# Module configuration
# --------------------------------------------------------------------------------------------------

FETCH_USER_AGENT = os.getenv(
    "FETCH_USER_AGENT",
    "Mozilla/5.0 (compatible; TeamExtractor/0.1; +https://example.invalid/bot)",
)

CONNECT_TIMEOUT_S = float(os.getenv("FETCH_CONNECT_TIMEOUT_S", "5.0"))
READ_TIMEOUT_S = float(os.getenv("FETCH_READ_TIMEOUT_S", "15.0"))
MAX_REDIRECTS = int(os.getenv("FETCH_MAX_REDIRECTS", "5"))

FETCH_ACCEPT = os.getenv("FETCH_ACCEPT", "text/html, application/xml;q=0.9, */*;q=0.8")
FETCH_MAX_READ_BYTES = int(os.getenv("FETCH_MAX_READ_BYTES", str(2_000_000)))  # 2 MB cap

_CHUNK_SIZE = 64 * 1024

_clock = time.monotonic


# --------------------------------------------------------------------------------------------------
# Results
# --------------------------------------------------------------------------------------------------


@dataclass
class FetchResult:
    status: int
    url: str
    effective_url: str
    content_type: str | None
    body: bytes
    encoding: str | None = None  # charset from Content-Type, when declared

    @property
    def text(self) -> str:
        enc = self.encoding or "utf-8"
        try:
            codecs.lookup(enc)
        except LookupError:
            enc = "utf-8"
        return self.body.decode(enc, errors="replace")


# --------------------------------------------------------------------------------------------------
# Client
# --------------------------------------------------------------------------------------------------


class BoundedFetcher:
    """
    Small wrapper around httpx for size- and time-bounded GETs.

    Every call has a hard timeout and a byte cap; the body is streamed and the
    request is aborted as soon as the cap is exceeded. Anything that is not a
    complete 2xx response within those bounds raises TransportError:

      - connect/read timeout, DNS or socket errors
      - non-2xx status (after redirects)
      - body larger than max_bytes
    """

    def __init__(
        self,
        *,
        user_agent: str | None = None,
        proxy_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.user_agent = user_agent or FETCH_USER_AGENT
        kwargs: dict = {}
        if proxy_url:
            kwargs["proxy"] = proxy_url
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.Client(
            headers={"User-Agent": self.user_agent, "Accept": FETCH_ACCEPT},
            timeout=httpx.Timeout(READ_TIMEOUT_S, connect=CONNECT_TIMEOUT_S),
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            **kwargs,
        )

    # ---- core fetch ------------------------------------------------------------------

    def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        max_bytes: int | None = None,
    ) -> FetchResult:
        cap = FETCH_MAX_READ_BYTES if max_bytes is None else int(max_bytes)
        req_timeout = (
            httpx.Timeout(timeout, connect=min(CONNECT_TIMEOUT_S, timeout))
            if timeout is not None
            else httpx.USE_CLIENT_DEFAULT
        )
        # httpx timeouts are per read; this bounds the whole transfer
        deadline = _clock() + (timeout if timeout is not None else READ_TIMEOUT_S)

        try:
            with self._client.stream("GET", url, timeout=req_timeout) as resp:
                status = int(resp.status_code)
                if not 200 <= status < 300:
                    raise TransportError(f"HTTP {status} for {url}")

                declared = resp.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > cap:
                    raise TransportError(f"Response too large ({declared} bytes > {cap}) for {url}")

                buf = bytearray()
                for chunk in resp.iter_bytes(_CHUNK_SIZE):
                    buf.extend(chunk)
                    if len(buf) > cap:
                        raise TransportError(f"Response exceeded {cap} bytes for {url}")
                    if _clock() > deadline:
                        raise TransportError(f"Timeout fetching {url}: deadline exceeded")

                return FetchResult(
                    status=status,
                    url=url,
                    effective_url=str(resp.url),
                    content_type=resp.headers.get("Content-Type"),
                    body=bytes(buf),
                    encoding=resp.charset_encoding,
                )
        except httpx.TimeoutException as exc:
            raise TransportError(f"Timeout fetching {url}: {type(exc).__name__}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request failed for {url}: {type(exc).__name__}: {exc}") from exc
        except (httpx.InvalidURL, UnicodeError, ValueError) as exc:
            # bad port, bad IDNA label, unparseable URL taken from remote content
            raise TransportError(f"Invalid URL {url!r}: {exc}") from exc

    def fetch(
        self,
        url: str,
        *,
        timeout: float | None = None,
        max_bytes: int | None = None,
    ) -> bytes:
        """Body-only convenience form of get()."""
        return self.get(url, timeout=timeout, max_bytes=max_bytes).body

    # ----------------------------------------------------------------------------------
    # Context manager
    # ----------------------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BoundedFetcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "BoundedFetcher",
    "FetchResult",
    "FETCH_USER_AGENT",
    "FETCH_MAX_READ_BYTES",
]
