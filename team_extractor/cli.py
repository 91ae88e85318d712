# team_extractor/cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from team_extractor.config import ExtractorConfig, load_config, load_input_file
from team_extractor.crawl.browser import StaticPageDriver
from team_extractor.crawl.runner import TeamPageCrawler
from team_extractor.exceptions import ConfigError, ExtractorError
from team_extractor.export.sink import JsonlSink
from team_extractor.extract.emails import harvest_emails
from team_extractor.extract.merge import extract_people
from team_extractor.fetch.client import BoundedFetcher

log = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=_LOG_FORMAT)
    logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def _input_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """
    Build the input mapping: --input file first, then explicit flags on top.
    """
    data: dict[str, Any] = load_input_file(args.input) if args.input else {}

    if args.urls:
        data["startUrls"] = list(args.urls)
    if args.max_companies is not None:
        data["maxCompanies"] = args.max_companies
    if args.max_candidates is not None:
        data["maxTeamPageCandidates"] = args.max_candidates
    if args.concurrency is not None:
        data["maxConcurrency"] = args.concurrency
    if args.max_discovery is not None:
        data["maxDiscoveryPagesPerCompany"] = args.max_discovery
    if args.roles:
        data["roleIncludeKeywords"] = list(args.roles)
    if args.use_llm:
        data["useLlm"] = True
    if args.model:
        data["openaiModel"] = args.model
    if args.no_sitemap:
        data["useSitemapFallback"] = False
    if args.no_discovery:
        data["useDepth2Discovery"] = False
    if args.no_menus:
        data["tryExpandMenus"] = False
    if args.proxy:
        data["proxyConfiguration"] = {"proxyUrl": args.proxy}
    if args.debug:
        data["debugLog"] = True
    return data


def _run_crawl(cfg: ExtractorConfig, output: str | None) -> int:
    sink = JsonlSink(output) if output else JsonlSink(sys.stdout)
    try:
        with BoundedFetcher(proxy_url=cfg.proxy_url) as fetcher:
            driver = StaticPageDriver(fetcher, timeout=cfg.navigation_timeout_s)
            crawler = TeamPageCrawler(cfg, driver, sink, fetcher=fetcher)
            handled = crawler.run()
            stats = crawler.registry.stats()
    finally:
        sink.close()

    log.info(
        "Done: %d visits, %d records (%d people, %d emails, %d companies satisfied)",
        handled,
        sink.count,
        stats["persons"],
        stats["emails"],
        stats["satisfied"],
    )
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    _configure_logging(args.debug)
    try:
        cfg = load_config(_input_from_args(args))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if cfg.debug_log:
        _configure_logging(True)
    return _run_crawl(cfg, args.output)


def _cmd_extract(args: argparse.Namespace) -> int:
    """
    Run the in-page extractors against one URL, without crawling. Useful for
    checking why a known team page yields nothing.
    """
    _configure_logging(args.debug)
    with BoundedFetcher() as fetcher:
        driver = StaticPageDriver(fetcher)
        try:
            page = driver.open(args.url)
        except ExtractorError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        snapshot = driver.snapshot(page)

    people = extract_people(snapshot)
    payload = {
        "url": page.final_url,
        "emails": harvest_emails(snapshot),
        "people": [
            {
                "name": p.name,
                "title": p.title,
                "email": p.email,
                "profileUrl": p.profile_url,
                "linkedinUrl": p.linkedin_url,
                "source": p.source,
            }
            for p in people
        ],
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="team-extractor",
        description="Find company team/leadership pages and extract people and contact emails.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Crawl start URLs and write one JSON record per line.",
    )
    run_parser.add_argument("urls", nargs="*", help="Company homepages or bare domains.")
    run_parser.add_argument(
        "--input",
        help="JSON or YAML input file (startUrls, maxCompanies, ...). Flags override it.",
    )
    run_parser.add_argument(
        "-o",
        "--output",
        help="Append JSONL records to this file (default: stdout).",
    )
    run_parser.add_argument("--max-companies", type=int, default=None)
    run_parser.add_argument(
        "--max-candidates",
        type=int,
        default=None,
        help="Team page candidates per company, 1-10 (default: 3).",
    )
    run_parser.add_argument(
        "--max-discovery",
        type=int,
        default=None,
        help="About-style discovery pages per company, 0-10 (default: 2).",
    )
    run_parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Visits in flight at once (default: 5).",
    )
    run_parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        default=[],
        help="Only emit people whose title contains this keyword (repeatable).",
    )
    run_parser.add_argument(
        "--use-llm",
        action="store_true",
        help="Ask the LLM when heuristics find nobody (needs OPENAI_API_KEY).",
    )
    run_parser.add_argument("--model", default=None, help="LLM model name.")
    run_parser.add_argument("--proxy", default=None, help="HTTP(S) proxy URL.")
    run_parser.add_argument("--no-sitemap", action="store_true", help="Skip sitemap fallback.")
    run_parser.add_argument(
        "--no-discovery", action="store_true", help="Skip about-page discovery."
    )
    run_parser.add_argument(
        "--no-menus", action="store_true", help="Do not try to expand navigation menus."
    )
    run_parser.add_argument("--debug", action="store_true", help="Verbose logging.")
    run_parser.set_defaults(func=_cmd_run)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Print people and emails found on a single page.",
    )
    extract_parser.add_argument("url")
    extract_parser.add_argument("--debug", action="store_true")
    extract_parser.set_defaults(func=_cmd_extract)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    func = getattr(args, "func", None)
    if func is None:
        parser.error("no command specified")
        return 1

    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
