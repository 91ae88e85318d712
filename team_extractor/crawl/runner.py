# team_extractor/crawl/runner.py
"""
Per-company crawl: HOME → {TEAM, DISCOVER} → TEAM.

HOME
    Rank the homepage anchors (expanding a hamburger menu when nothing
    ranks), merge with conventional path guesses, top up from sitemaps,
    then enqueue each candidate as TEAM, or as DISCOVER when it only has an
    about-like signal and the discovery budget allows. No candidates at all
    → one terminal record.
DISCOVER
    Extract people and emails. People → emit and mark the company satisfied.
    Emails only (no role filter) → emit them and mark satisfied. Otherwise
    look for explicit team links on this page and enqueue them as TEAM, or
    emit a terminal record.
TEAM
    Same as DISCOVER, with the LLM fallback when no people were found; no
    further links are followed.

Failures: a HOME visit that cannot load retries the next homepage variant;
anything else ends the visit with one "Request failed" record.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from team_extractor.config import ExtractorConfig
from team_extractor.exceptions import ExtractorError, LlmError
from team_extractor.export.sink import RecordSink
from team_extractor.extract.ai_people import (
    OpenAITextGenerator,
    TextGenerator,
    extract_people_with_llm,
)
from team_extractor.extract.dom import PageSnapshot
from team_extractor.extract.emails import harvest_emails
from team_extractor.extract.heuristics import DEFAULT_TABLES, HeuristicTables
from team_extractor.extract.merge import extract_people, merge_people_by_name_title
from team_extractor.fetch.client import BoundedFetcher
from team_extractor.fetch.sitemap import discover_team_urls_from_sitemaps
from team_extractor.models import Anchor, Candidate, OutputRecord, Person
from team_extractor.utils import utc_now_iso

from .browser import LoadedPage, PageDriver, try_expand_navigation
from .frontier import RequestQueue, run_frontier
from .navigation import (
    MAX_CANDIDATES_LIMIT,
    build_fallback_candidates,
    is_about_signal,
    is_team_signal,
    merge_anchors,
    rank_about_page_candidates,
    rank_team_page_candidates,
)
from .registry import EmissionRegistry
from .states import DiscoverVisit, HomeVisit, Label, TeamVisit, Visit, ensure_transition
from .urls import company_identity, homepage_variants, normalize_start

log = logging.getLogger(__name__)

NOTE_NO_CANDIDATES = "No team/about/leadership link candidates found on homepage."
NOTE_DISCOVER_EMAILS = "No people detected on discover page; emitting page-level emails."
NOTE_DISCOVER_EMPTY = "Discover page yielded no people/emails and no team links."
NOTE_TEAM_EMAILS = "No people detected; emitting page-level emails."
NOTE_TEAM_EMPTY = "No people/emails detected on this candidate page."


def _dedupe_candidates(groups: Iterable[Iterable[Candidate]], limit: int) -> list[Candidate]:
    out: list[Candidate] = []
    seen: set[str] = set()
    for group in groups:
        for c in group:
            if len(out) >= limit:
                return out
            if not c.url or c.url in seen:
                continue
            seen.add(c.url)
            out.append(c)
    return out


def include_by_role(title: str | None, keywords: Sequence[str]) -> bool:
    if not keywords:
        return True
    if not title:
        return False
    t = title.lower()
    return any(k in t for k in keywords)


class TeamPageCrawler:
    def __init__(
        self,
        config: ExtractorConfig,
        driver: PageDriver,
        sink: RecordSink,
        *,
        fetcher: BoundedFetcher | None = None,
        generator: TextGenerator | None = None,
        registry: EmissionRegistry | None = None,
        queue: RequestQueue | None = None,
        tables: HeuristicTables = DEFAULT_TABLES,
    ) -> None:
        self.config = config
        self.driver = driver
        self.sink = sink
        self.fetcher = fetcher
        self.registry = registry or EmissionRegistry()
        self.queue = queue or RequestQueue()
        self.tables = tables
        if generator is None and config.llm_enabled:
            generator = OpenAITextGenerator(config.openai_api_key or "")
        self.generator = generator
        self._handlers = {
            HomeVisit: self._handle_home,
            DiscoverVisit: self._handle_discover,
            TeamVisit: self._handle_team,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def seed(self, start_urls: Iterable[object] | None = None) -> int:
        urls = list(start_urls) if start_urls is not None else list(self.config.start_urls)
        seeded = 0
        for raw in urls[: self.config.max_companies]:
            url = normalize_start(raw)
            if url is None:
                log.warning("Skipping invalid start URL: %r", raw)
                continue
            variants = tuple(homepage_variants(url))
            if self.queue.add(HomeVisit(url=variants[0], start_url=url, variants=variants)):
                seeded += 1
        return seeded

    def run(self, start_urls: Iterable[object] | None = None) -> int:
        seeded = self.seed(start_urls)
        log.info("Seeded %d compan%s", seeded, "y" if seeded == 1 else "ies")
        return run_frontier(self.queue, self.handle, self.config.max_concurrency)

    def handle(self, visit: Visit) -> None:
        """Process one visit. Never raises; failures become records."""
        try:
            self._handlers[type(visit)](visit)
        except ExtractorError as exc:
            log.debug("%s visit failed for %s: %s", visit.label.value, visit.url, exc)
            self._on_failure(visit, exc)
        except Exception as exc:
            log.exception("Unexpected error in %s visit for %s", visit.label.value, visit.url)
            self._on_failure(visit, exc)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _enqueue(self, src: Label, visit: Visit, *, forefront: bool = False) -> bool:
        ensure_transition(src, visit.label)
        return self.queue.add(visit, forefront=forefront)

    def _open(self, url: str) -> LoadedPage:
        return self.driver.open(url)

    def _people(self, snapshot: PageSnapshot) -> list[Person]:
        people = extract_people(snapshot, self.tables)
        return self._role_filter(people)

    def _role_filter(self, people: Iterable[Person]) -> list[Person]:
        kws = self.config.role_include_keywords
        return [p for p in people if include_by_role(p.title, kws)]

    def _record(
        self,
        *,
        company_domain: str | None,
        company_url: str | None,
        source_url: str | None,
        notes: str,
        emails_on_page: Sequence[str] = (),
        extracted_at: str | None = None,
        email: str | None = None,
    ) -> OutputRecord:
        return OutputRecord(
            company_domain=company_domain,
            company_url=company_url,
            source_url=source_url,
            extracted_at=extracted_at or utc_now_iso(),
            notes=notes,
            email=email,
            emails_on_page=list(emails_on_page),
        )

    @staticmethod
    def _person_notes(visit: DiscoverVisit | TeamVisit, person: Person) -> str:
        parts = []
        if visit.discovered_from:
            parts.append(f"discoveredFrom={visit.discovered_from}")
        if visit.discovery_score is not None:
            parts.append(f"discoveryScore={visit.discovery_score}")
        if visit.discovery_text:
            parts.append(f"discoveryText={visit.discovery_text}")
        if person.source:
            parts.append(f"personSource={person.source}")
        return "; ".join(parts)

    def _emit_people(
        self,
        visit: DiscoverVisit | TeamVisit,
        people: list[Person],
        source_url: str,
        emails: list[str],
        extracted_at: str,
    ) -> None:
        domain = visit.company_domain
        self.registry.mark_satisfied(domain)
        for p in people:
            if not self.registry.claim_person(domain, p.identity_key()):
                continue
            self.sink.emit(
                OutputRecord.for_person(
                    p,
                    company_domain=domain,
                    company_url=visit.company_url,
                    source_url=source_url,
                    extracted_at=extracted_at,
                    emails_on_page=list(emails),
                    notes=self._person_notes(visit, p),
                )
            )

    def _emit_emails(
        self,
        visit: DiscoverVisit | TeamVisit,
        source_url: str,
        emails: list[str],
        extracted_at: str,
        note: str,
    ) -> None:
        domain = visit.company_domain
        self.registry.mark_satisfied(domain)
        for e in emails:
            if not self.registry.claim_email(domain, e):
                continue
            self.sink.emit(
                self._record(
                    company_domain=domain,
                    company_url=visit.company_url,
                    source_url=source_url,
                    notes=note,
                    emails_on_page=emails,
                    extracted_at=extracted_at,
                    email=e,
                )
            )

    # ------------------------------------------------------------------
    # HOME
    # ------------------------------------------------------------------

    def _home_candidates(
        self, page: LoadedPage, company_url: str, company_domain: str
    ) -> tuple[list[Candidate], list[Anchor]]:
        cfg = self.config
        n = cfg.max_team_page_candidates

        anchors = self.driver.collect_anchors(page)
        ranked = rank_team_page_candidates(anchors, company_url, n)

        if cfg.try_expand_menus and not ranked and try_expand_navigation(self.driver, page):
            anchors = merge_anchors(anchors, self.driver.collect_anchors(page))
            ranked = rank_team_page_candidates(anchors, company_url, n)

        fallback = build_fallback_candidates(company_url, n, paths=cfg.fallback_paths)
        candidates = _dedupe_candidates([ranked, fallback], n)

        if cfg.use_sitemap_fallback and len(candidates) < n and self.fetcher is not None:
            urls = discover_team_urls_from_sitemaps(
                self.fetcher,
                company_url,
                company_domain,
                cfg.max_sitemaps_to_fetch,
                timeout=cfg.sitemap_timeout_s,
            )
            sitemap_ranked = rank_team_page_candidates(
                [Anchor(href=u, text="sitemap") for u in urls], company_url, n
            )
            candidates = _dedupe_candidates([candidates, sitemap_ranked], n)

        return candidates, anchors

    def _handle_home(self, visit: HomeVisit) -> None:
        cfg = self.config
        page = self._open(visit.url)
        try:
            loaded_url = page.final_url or visit.url
            company_url, company_domain = company_identity(loaded_url)
            candidates, anchors = self._home_candidates(page, company_url, company_domain)
        finally:
            self.driver.close(page)

        if not candidates:
            self.sink.emit(
                self._record(
                    company_domain=company_domain,
                    company_url=company_url,
                    source_url=loaded_url,
                    notes=NOTE_NO_CANDIDATES,
                )
            )
            return

        has_team_signal = any(is_team_signal(c) for c in candidates)
        max_discovery = cfg.max_discovery_pages_per_company
        discovery_queued = 0
        queued: set[str] = set()

        for c in candidates:
            wants_discover = (
                cfg.allow_discovery
                and discovery_queued < max_discovery
                and is_about_signal(c)
                and not is_team_signal(c)
            )
            kwargs = dict(
                url=c.url,
                company_domain=company_domain,
                company_url=company_url,
                discovered_from=loaded_url,
                discovery_score=c.score,
                discovery_text=c.text,
            )
            nxt: Visit = DiscoverVisit(**kwargs) if wants_discover else TeamVisit(**kwargs)
            self._enqueue(Label.HOME, nxt)
            queued.add(c.url)
            if wants_discover:
                discovery_queued += 1

        if cfg.allow_discovery and not has_team_signal and discovery_queued < max_discovery:
            about = rank_about_page_candidates(
                anchors, company_url, min(max_discovery * 3, MAX_CANDIDATES_LIMIT)
            )
            for c in about:
                if discovery_queued >= max_discovery:
                    break
                if c.url in queued:
                    continue
                queued.add(c.url)
                discovery_queued += 1
                self._enqueue(
                    Label.HOME,
                    DiscoverVisit(
                        url=c.url,
                        company_domain=company_domain,
                        company_url=company_url,
                        discovered_from=loaded_url,
                        discovery_score=c.score,
                        discovery_text=c.text,
                    ),
                )

        log.info(
            "Queued %d candidate page(s) for %s (discover=%d)",
            len(candidates),
            company_domain or loaded_url,
            discovery_queued,
        )

    # ------------------------------------------------------------------
    # DISCOVER
    # ------------------------------------------------------------------

    def _handle_discover(self, visit: DiscoverVisit) -> None:
        cfg = self.config
        if self.registry.is_satisfied(visit.company_domain):
            log.debug(
                "Skipping discover page for %s (already satisfied): %s",
                visit.company_domain,
                visit.url,
            )
            return

        page = self._open(visit.url)
        try:
            source_url = page.final_url or visit.url
            extracted_at = utc_now_iso()
            snapshot = self.driver.snapshot(page)
            emails = harvest_emails(snapshot)
            people = self._people(snapshot)

            if people:
                self._emit_people(visit, people, source_url, emails, extracted_at)
                return
            if emails and not cfg.role_include_keywords:
                self._emit_emails(visit, source_url, emails, extracted_at, NOTE_DISCOVER_EMAILS)
                return

            n = cfg.max_team_page_candidates
            ranked = rank_team_page_candidates(
                self.driver.collect_anchors(page), source_url, min(n * 3, MAX_CANDIDATES_LIMIT)
            )
            to_queue = _dedupe_candidates([[c for c in ranked if is_team_signal(c)]], n)
        finally:
            self.driver.close(page)

        for c in to_queue:
            self._enqueue(
                Label.DISCOVER,
                TeamVisit(
                    url=c.url,
                    company_domain=visit.company_domain,
                    company_url=visit.company_url,
                    discovered_from=source_url,
                    discovery_score=c.score,
                    discovery_text=c.text,
                ),
            )

        if not to_queue:
            self.sink.emit(
                self._record(
                    company_domain=visit.company_domain,
                    company_url=visit.company_url,
                    source_url=source_url,
                    notes=NOTE_DISCOVER_EMPTY,
                    emails_on_page=emails,
                    extracted_at=extracted_at,
                )
            )

    # ------------------------------------------------------------------
    # TEAM
    # ------------------------------------------------------------------

    def _llm_people(
        self, snapshot: PageSnapshot, source_url: str, emails: list[str]
    ) -> list[Person]:
        cfg = self.config
        try:
            found = extract_people_with_llm(
                self.generator,
                url=source_url,
                html=snapshot.html,
                text=snapshot.text,
                page_emails=emails,
                model=cfg.openai_model,
                max_chars=cfg.llm_max_chars,
                timeout=cfg.llm_timeout_s,
            )
        except LlmError as exc:
            log.debug("LLM extraction failed for %s: %s", source_url, exc)
            return []
        return self._role_filter(merge_people_by_name_title(found))

    def _handle_team(self, visit: TeamVisit) -> None:
        cfg = self.config
        if self.registry.is_satisfied(visit.company_domain):
            log.debug(
                "Skipping team candidate for %s (already satisfied): %s",
                visit.company_domain,
                visit.url,
            )
            return

        page = self._open(visit.url)
        try:
            source_url = page.final_url or visit.url
            extracted_at = utc_now_iso()
            snapshot = self.driver.snapshot(page)
        finally:
            self.driver.close(page)

        emails = harvest_emails(snapshot)
        people = self._people(snapshot)
        if not people and cfg.llm_enabled and self.generator is not None:
            people = self._llm_people(snapshot, source_url, emails)

        if people:
            self._emit_people(visit, people, source_url, emails, extracted_at)
            return
        if emails and not cfg.role_include_keywords:
            self._emit_emails(visit, source_url, emails, extracted_at, NOTE_TEAM_EMAILS)
            return

        self.sink.emit(
            self._record(
                company_domain=visit.company_domain,
                company_url=visit.company_url,
                source_url=source_url,
                notes=NOTE_TEAM_EMPTY,
                emails_on_page=emails,
                extracted_at=extracted_at,
            )
        )

    # ------------------------------------------------------------------
    # Failures
    # ------------------------------------------------------------------

    def _on_failure(self, visit: Visit, exc: BaseException) -> None:
        if isinstance(visit, HomeVisit):
            nxt = visit.variant_index + 1
            if nxt < len(visit.variants):
                retry = HomeVisit(
                    url=visit.variants[nxt],
                    start_url=visit.start_url,
                    variants=visit.variants,
                    variant_index=nxt,
                )
                if self._enqueue(Label.HOME, retry, forefront=True):
                    log.warning(
                        "HOME failed; retrying variant %d/%d: %s",
                        nxt + 1,
                        len(visit.variants),
                        retry.url,
                    )
                    return
            company_url, company_domain = company_identity(visit.start_url)
        else:
            company_url, company_domain = visit.company_url, visit.company_domain

        message = str(exc) or type(exc).__name__
        self.sink.emit(
            self._record(
                company_domain=company_domain,
                company_url=company_url,
                source_url=visit.url,
                notes=f"Request failed ({visit.label.value}): {message}",
            )
        )


__all__ = [
    "TeamPageCrawler",
    "include_by_role",
    "NOTE_NO_CANDIDATES",
    "NOTE_DISCOVER_EMAILS",
    "NOTE_DISCOVER_EMPTY",
    "NOTE_TEAM_EMAILS",
    "NOTE_TEAM_EMPTY",
]
