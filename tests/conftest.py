# tests/conftest.py
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure project root importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Environment knobs read by load_config(); cleared so a developer's shell/.env
# cannot change test outcomes.
_CONFIG_ENV_VARS = (
    "START_URLS",
    "MAX_TEAM_PAGE_CANDIDATES",
    "MAX_DISCOVERY_PAGES_PER_COMPANY",
    "MAX_CONCURRENCY",
    "LLM_MAX_CHARS",
    "ROLE_INCLUDE_KEYWORDS",
    "TRY_EXPAND_MENUS",
    "USE_SITEMAP_FALLBACK",
    "USE_DEPTH2_DISCOVERY",
    "USE_LLM",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "PROXY_URL",
    "DEBUG_LOG",
    "NAVIGATION_TIMEOUT_SECONDS",
    "SITEMAP_TIMEOUT_SECONDS",
    "LLM_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def _clean_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


TEAM_PAGE_HTML = """
<html>
  <head><title>Our Team</title></head>
  <body>
    <section class="team">
      <div class="team-member">
        <h3>Jane Doe</h3>
        <p class="role">Chief Executive Officer</p>
        <a href="https://www.linkedin.com/in/janedoe">LinkedIn</a>
        <a href="/team/jane-doe">Read bio</a>
        <a href="mailto:jane@example.com">Email</a>
      </div>
      <div class="team-member">
        <h3>John Smith</h3>
        <p>Head of Engineering</p>
      </div>
    </section>
  </body>
</html>
"""


@pytest.fixture
def team_page_html() -> str:
    """Two person cards: Jane (title class, socials, mailto) and John (title by line)."""
    return TEAM_PAGE_HTML
