# team_extractor/config.py
"""
Run configuration.

Environment variables (optionally from a project-root .env) provide the
defaults; an actor-style input mapping with camelCase keys (the same shape
the CLI reads from --input) overrides them. Numeric knobs are clamped to
their allowed ranges here, so the crawl layer can trust the values.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from team_extractor.crawl.navigation import FALLBACK_TEAM_PATHS, MAX_CANDIDATES_LIMIT
from team_extractor.crawl.urls import normalize_start
from team_extractor.exceptions import ConfigError
from team_extractor.utils import clamp

log = logging.getLogger(__name__)


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name, str(default)).strip()
    try:
        return int(v)
    except ValueError as err:
        raise ConfigError(f"Environment variable {name} must be an integer; got {v!r}") from err


def _getenv_float(name: str, default: float) -> float:
    v = os.getenv(name, str(default)).strip()
    try:
        return float(v)
    except ValueError as err:
        raise ConfigError(f"Environment variable {name} must be a number; got {v!r}") from err


def _getenv_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


def _getenv_list_str(name: str, default_csv: str) -> list[str]:
    raw = os.getenv(name, default_csv).strip()
    return [tok for tok in (t.strip() for t in raw.split(",")) if tok]


def _parse_bool(raw: str) -> bool:
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off", ""}:
        return False
    # Fallback: any other non-empty value -> True
    return True


def _getenv_bool(name: str, default: bool) -> bool:
    """
    Read a loosely-typed boolean from the environment.

    Treats "1", "true", "yes", "on" (case-insensitive) as True;
    "0", "false", "no", "off", "" as False. If unset, returns default.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return _parse_bool(raw)


# Load .env from project root if present
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env", override=False)

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
LLM_MAX_CHARS_RANGE = (5_000, 200_000)
MAX_DISCOVERY_PAGES_LIMIT = 10


@dataclass(frozen=True)
class ExtractorConfig:
    start_urls: tuple[str, ...]
    max_companies: int
    max_team_page_candidates: int = 3
    max_concurrency: int = 5
    try_expand_menus: bool = True
    use_sitemap_fallback: bool = True
    use_depth2_discovery: bool = True
    max_discovery_pages_per_company: int = 2
    use_llm: bool = False
    openai_api_key: str | None = field(default=None, repr=False)
    openai_model: str = DEFAULT_OPENAI_MODEL
    llm_max_chars: int = 40_000
    role_include_keywords: tuple[str, ...] = ()
    proxy_url: str | None = field(default=None, repr=False)
    debug_log: bool = False

    navigation_timeout_s: float = 60.0
    sitemap_timeout_s: float = 15.0
    llm_timeout_s: float = 60.0
    max_sitemaps_to_fetch: int = 2
    fallback_paths: tuple[str, ...] = FALLBACK_TEAM_PATHS

    @property
    def llm_enabled(self) -> bool:
        return bool(self.use_llm and self.openai_api_key)

    @property
    def allow_discovery(self) -> bool:
        return self.use_depth2_discovery and self.max_discovery_pages_per_company > 0


# ---------------------------------------------------------------------------
# Input coercion
# ---------------------------------------------------------------------------


def _as_int(value: Any, default: int, *, zero_is_unset: bool = True) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        n = int(float(value))
    except (TypeError, ValueError):
        return default
    if n == 0 and zero_is_unset:
        return default
    return n


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return _parse_bool(value)
    return bool(value)


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _proxy_url_from(proxy_cfg: Any) -> str | None:
    """Pull one proxy URL out of an opaque proxy configuration mapping."""
    if isinstance(proxy_cfg, str):
        return _as_str(proxy_cfg)
    if not isinstance(proxy_cfg, Mapping):
        return None
    url = _as_str(proxy_cfg.get("proxyUrl"))
    if url:
        return url
    urls = proxy_cfg.get("proxyUrls")
    if isinstance(urls, Sequence) and not isinstance(urls, str) and urls:
        return _as_str(urls[0])
    return None


def _start_urls(raw: Any) -> list[str]:
    if isinstance(raw, (str, Mapping)):
        raw = [raw]
    if not isinstance(raw, Sequence):
        return []
    return [u for u in (normalize_start(v) for v in raw) if u]


def load_config(data: Mapping[str, Any] | None = None) -> ExtractorConfig:
    """Build an ExtractorConfig from an input mapping (camelCase keys) over env defaults."""
    data = dict(data or {})

    start_urls = _start_urls(data.get("startUrls"))
    if not start_urls:
        env_urls = _getenv_list_str("START_URLS", "")
        start_urls = [u for u in (normalize_start(v) for v in env_urls) if u]
    if not start_urls:
        raise ConfigError('Input "startUrls" is required.')

    max_companies = min(_as_int(data.get("maxCompanies"), len(start_urls)), len(start_urls))
    max_candidates = clamp(
        _as_int(data.get("maxTeamPageCandidates"), _getenv_int("MAX_TEAM_PAGE_CANDIDATES", 3)),
        1,
        MAX_CANDIDATES_LIMIT,
    )
    max_discovery = clamp(
        _as_int(
            data.get("maxDiscoveryPagesPerCompany"),
            _getenv_int("MAX_DISCOVERY_PAGES_PER_COMPANY", 2),
            zero_is_unset=False,
        ),
        0,
        MAX_DISCOVERY_PAGES_LIMIT,
    )
    llm_max_chars = clamp(
        _as_int(data.get("llmMaxChars"), _getenv_int("LLM_MAX_CHARS", 40_000)),
        *LLM_MAX_CHARS_RANGE,
    )

    role_keywords = data.get("roleIncludeKeywords")
    if role_keywords is None:
        role_keywords = _getenv_list_str("ROLE_INCLUDE_KEYWORDS", "")
    elif isinstance(role_keywords, str):
        role_keywords = [role_keywords]

    cfg = ExtractorConfig(
        start_urls=tuple(start_urls),
        max_companies=max(1, max_companies),
        max_team_page_candidates=max_candidates,
        max_concurrency=max(
            1, _as_int(data.get("maxConcurrency"), _getenv_int("MAX_CONCURRENCY", 5))
        ),
        try_expand_menus=_as_bool(
            data.get("tryExpandMenus"), _getenv_bool("TRY_EXPAND_MENUS", True)
        ),
        use_sitemap_fallback=_as_bool(
            data.get("useSitemapFallback"), _getenv_bool("USE_SITEMAP_FALLBACK", True)
        ),
        use_depth2_discovery=_as_bool(
            data.get("useDepth2Discovery"), _getenv_bool("USE_DEPTH2_DISCOVERY", True)
        ),
        max_discovery_pages_per_company=max_discovery,
        use_llm=_as_bool(data.get("useLlm"), _getenv_bool("USE_LLM", False)),
        openai_api_key=_as_str(data.get("openaiApiKey"))
        or _as_str(os.getenv("OPENAI_API_KEY")),
        openai_model=_as_str(data.get("openaiModel"))
        or _getenv_str("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
        llm_max_chars=llm_max_chars,
        role_include_keywords=tuple(
            k for k in (str(s or "").strip().lower() for s in role_keywords) if k
        ),
        proxy_url=_proxy_url_from(data.get("proxyConfiguration"))
        or _as_str(os.getenv("PROXY_URL")),
        debug_log=_as_bool(data.get("debugLog"), _getenv_bool("DEBUG_LOG", False)),
        navigation_timeout_s=_getenv_float("NAVIGATION_TIMEOUT_SECONDS", 60.0),
        sitemap_timeout_s=_getenv_float("SITEMAP_TIMEOUT_SECONDS", 15.0),
        llm_timeout_s=_getenv_float("LLM_TIMEOUT_SECONDS", 60.0),
    )

    if cfg.use_llm and not cfg.openai_api_key:
        log.warning("useLlm=true but no OpenAI API key was provided; skipping LLM.")
    return cfg


def load_input_file(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read an input mapping from a JSON or YAML (.yaml/.yml) file."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigError(f"Cannot read input file {p}: {err}") from err

    try:
        if p.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as err:
        raise ConfigError(f"Input file {p} is not valid: {err}") from err

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Input file {p} must contain a mapping at the top level")
    return data


__all__ = [
    "ROOT",
    "ExtractorConfig",
    "load_config",
    "load_input_file",
    "DEFAULT_OPENAI_MODEL",
]
