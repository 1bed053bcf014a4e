"""
Job search extraction.

Builds the search query URL, waits for either result-container layout,
scrolls once to trigger lazy loading, and parses the rendered result
cards into JobListing records.
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Union
from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..constants import (
    BASE_URL,
    JOB_SEARCH_URL,
    JOB_VIEW_URL,
    MAX_SEARCH_RESULTS,
    POST_NAVIGATION_DELAY,
    REMOTE_WORKPLACE_TYPE,
    RESULTS_CONTAINER_TIMEOUT_MS,
    RESULTS_SETTLE_DELAY,
)
from ..errors import InvalidInputError, NavigationError
from ..infrastructure.timing_evasion import Pacer
from ..intelligence.selector_library import MarkerRegistry, default_markers
from ..models import JobListing, SearchFilters, SearchResult
from .payload import parse_job_id
from .text import first_text, parse_document, select_first

logger = logging.getLogger(__name__)


def build_search_url(
    keywords: str,
    location: Optional[str] = None,
    filters: Optional[SearchFilters] = None,
) -> str:
    """
    Build the job search URL.

    Args:
        keywords: Search keywords
        location: Free-text location
        filters: Optional filters (time posted, experience level, remote)

    Returns:
        Absolute search URL
    """
    filters = filters or SearchFilters()
    params = [("keywords", keywords)]
    if location:
        params.append(("location", location))
    if filters.time_posted:
        params.append(("f_TPR", filters.time_posted.value))
    if filters.experience_levels:
        params.append(("f_E", ",".join(level.value for level in filters.experience_levels)))
    if filters.remote:
        params.append(("f_WT", REMOTE_WORKPLACE_TYPE))
    return f"{JOB_SEARCH_URL}?{urlencode(params)}"


def normalize_job_link(href: Optional[str], job_id: Optional[str] = None) -> Optional[str]:
    """
    Resolve a card link against the site origin and drop its query string.

    Links that carry the job only as ?currentJobId= are rewritten to the
    canonical /jobs/view/<id>/ URL.
    """
    if not href or not href.strip():
        return None
    absolute = urljoin(BASE_URL + "/", href.strip())
    parts = urlsplit(absolute)

    if "/jobs/view/" not in parts.path:
        job_id = job_id or parse_job_id(absolute)
        if job_id:
            return JOB_VIEW_URL.format(job_id=job_id)

    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def _card_job_id(card: Tag, link: Optional[str]) -> Optional[str]:
    for attr in ("data-job-id", "data-occludable-job-id", "data-entity-urn"):
        value = card.get(attr)
        if not value:
            inner = card.select_one(f"[{attr}]")
            value = inner.get(attr) if inner is not None else None
        if value:
            value = str(value).rsplit(":", 1)[-1]
            if value.isdigit():
                return value
    return parse_job_id(link)


def _posted_at(card: Tag, markers: MarkerRegistry) -> Optional[Union[date, datetime]]:
    element = select_first(card, markers.get("search.card_time"))
    if element is None:
        return None
    value = element.get("datetime")
    if not value:
        return None
    value = str(value).strip()
    try:
        # A bare date stays a date; a timestamp keeps its time of day
        if "T" not in value and " " not in value:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def parse_listing(card: Tag, markers: MarkerRegistry = default_markers) -> Optional[JobListing]:
    """
    Parse one result card.

    Returns:
        JobListing, or None if the title or the link cannot be located
    """
    title = first_text(card, markers.get("search.card_title"))

    link_element = select_first(card, markers.get("search.card_link"))
    href = link_element.get("href") if link_element is not None else None
    job_id = _card_job_id(card, href)
    link = normalize_job_link(href, job_id)

    if not title or not link:
        return None

    return JobListing(
        title=title,
        url=link,
        job_id=job_id,
        company=first_text(card, markers.get("search.card_company")),
        location=first_text(card, markers.get("search.card_location")),
        posted_at=_posted_at(card, markers),
    )


def _find_cards(soup: BeautifulSoup, markers: MarkerRegistry) -> List[Tag]:
    """Cards in document order; nested matches of several fallbacks count once."""
    cards = soup.select(markers.group("search.card"))
    outermost = []
    seen = set()
    for card in cards:
        if any(id(parent) in seen for parent in card.parents):
            continue
        seen.add(id(card))
        outermost.append(card)
    return outermost


def parse_search_results(
    html: str,
    markers: MarkerRegistry = default_markers,
    limit: int = MAX_SEARCH_RESULTS,
) -> tuple[List[JobListing], int]:
    """
    Parse the rendered results page.

    Returns:
        (first `limit` listings in document order, total valid listings)
    """
    soup = parse_document(html)
    listings = []
    skipped = 0
    for card in _find_cards(soup, markers):
        listing = parse_listing(card, markers)
        if listing is None:
            skipped += 1
            continue
        listings.append(listing)

    if skipped:
        logger.debug(f"Skipped {skipped} result cards without title or link")
    return listings[:limit], len(listings)


class JobSearcher:
    """
    Runs job searches through an authenticated session.

    Usage:
        searcher = JobSearcher(session)
        result = await searcher.search("software engineer", "Remote",
                                       SearchFilters(remote=True))
    """

    def __init__(self, session, markers: Optional[MarkerRegistry] = None, pacer: Optional[Pacer] = None):
        self.session = session
        self.markers = markers or session.markers
        self.pacer = pacer or session.pacer

    async def search(
        self,
        keywords: str,
        location: Optional[str] = None,
        filters: Optional[SearchFilters] = None,
    ) -> SearchResult:
        """
        Search for jobs.

        Args:
            keywords: Search keywords (required)
            location: Free-text location
            filters: Optional search filters

        Returns:
            SearchResult with at most 25 listings

        Raises:
            InvalidInputError: If keywords are empty
            NotAuthenticatedError: If the session is not logged in
            NavigationError: If the results never rendered
        """
        keywords = (keywords or "").strip()
        if not keywords:
            raise InvalidInputError("Search keywords are required")
        location = (location or "").strip() or None

        page = self.session.require_authenticated()
        search_url = build_search_url(keywords, location, filters)

        await self.session.navigate(search_url)
        await self.pacer.delay(*POST_NAVIGATION_DELAY, reason="after search navigation")

        try:
            await page.wait_for_selector(
                self.markers.group("search.container"), timeout=RESULTS_CONTAINER_TIMEOUT_MS
            )
        except PlaywrightTimeoutError as e:
            raise NavigationError(
                "Job search results did not load: no results container appeared "
                f"within {RESULTS_CONTAINER_TIMEOUT_MS // 1000}s",
                url=search_url,
            ) from e
        except PlaywrightError as e:
            raise NavigationError(f"Job search results did not load: {e}", url=search_url) from e

        try:
            await self.session.simulator.scroll_to_fraction(page, 0.5)
            await self.pacer.delay(*RESULTS_SETTLE_DELAY, reason="results settle")
            html = await page.content()
        except PlaywrightError as e:
            raise NavigationError(f"Could not read search results: {e}", url=search_url) from e

        listings, total_found = parse_search_results(html, self.markers)
        logger.info(f"Found {total_found} jobs for {keywords!r}, returning {len(listings)}")

        return SearchResult(jobs=listings, total_found=total_found, search_url=search_url)
