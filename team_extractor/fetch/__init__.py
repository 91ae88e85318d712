# team_extractor/fetch/__init__.py
"""
Bounded HTTP fetching and sitemap discovery.

  - BoundedFetcher, FetchResult: size/time-capped httpx GETs
  - discover_team_urls_from_sitemaps: robots.txt → sitemap(s) → team-like URLs
"""

from .client import BoundedFetcher, FetchResult
from .sitemap import discover_team_urls_from_sitemaps

__all__ = ["BoundedFetcher", "FetchResult", "discover_team_urls_from_sitemaps"]
