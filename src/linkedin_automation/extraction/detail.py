"""
Job detail extraction.

A detail record is produced by an ordered chain of pure strategies, each a
function (payload, soup) -> Optional[JobDetails]:

1. extract_from_payload   - the intercepted structured API response
2. extract_from_document  - fixed structural markers in the rendered page
3. extract_by_heuristics  - longest plausible text block, only when the
                            description is still missing or too short

The first strategy to produce a record wins. Every strategy is isolated:
an exception is logged and recorded, and the next strategy runs.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError

from ..constants import (
    DETAIL_SETTLE_DELAY,
    EMPLOYMENT_TYPE_KEYWORDS,
    EXPANDABLE_TEXT_MIN_LENGTH,
    MAX_COMPANY_DESCRIPTION_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MIN_DESCRIPTION_LENGTH,
    PARAGRAPH_TEXT_MIN_LENGTH,
    PAYLOAD_OBSERVATION_TIMEOUT_MS,
    WORK_ARRANGEMENT_KEYWORDS,
)
from ..errors import ExtractionError, InvalidInputError, NavigationError
from ..infrastructure.timing_evasion import Pacer
from ..intelligence.selector_library import MarkerRegistry, default_markers
from ..models import (
    CompanyProfile,
    DetailResult,
    ExtractionAttempt,
    ExtractionStrategy,
    JobDetails,
)
from .payload import (
    company_profile_from,
    employment_type_from,
    find_company,
    is_job_posting_response,
    parse_job_id,
    work_arrangement_from,
)
from .text import clean_text, element_text, first_text, parse_document, select_first, truncate

logger = logging.getLogger(__name__)


_FOLLOWERS = re.compile(r"([\d][\d,.]*\s*[KkMm]?)\s+followers", re.IGNORECASE)
_INFO_SEPARATORS = re.compile(r"\s*[·•\n]\s*")


# =============================================================================
# Strategies
# =============================================================================

def extract_from_payload(
    payload: Optional[Dict[str, Any]],
    soup: BeautifulSoup,
    markers: MarkerRegistry = default_markers,
) -> Optional[JobDetails]:
    """
    Strategy 1: map the structured job posting payload.

    Returns:
        JobDetails, or None if no payload was observed or it has no "data"
    """
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict) or not data:
        return None

    description = data.get("description")
    if isinstance(description, dict):
        description = description.get("text")

    company = find_company(payload.get("included"))
    profile = company_profile_from(company)

    return JobDetails(
        title=element_title(data.get("title")),
        company=profile.name,
        location=element_title(data.get("formattedLocation")),
        description=clean_text(description if isinstance(description, str) else ""),
        work_arrangement=work_arrangement_from(data),
        employment_type=employment_type_from(data),
        company_profile=profile,
        extraction_method=ExtractionStrategy.STRUCTURED_RESPONSE,
    )


def element_title(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return " ".join(value.split()) or None


def _preference_values(soup: BeautifulSoup, markers: MarkerRegistry) -> List[str]:
    values = []
    for selector in markers.get("detail.preferences"):
        for element in soup.select(selector):
            text = element_text(element)
            if text:
                values.append(text)
    return values


def _match_keyword(values: List[str], keywords) -> Optional[str]:
    for value in values:
        for keyword in keywords:
            if keyword.lower() in value.lower():
                return keyword
    return None


def _company_box_profile(soup: BeautifulSoup, markers: MarkerRegistry) -> CompanyProfile:
    box = select_first(soup, markers.get("detail.company_box"))
    if box is None:
        return CompanyProfile()

    profile = CompanyProfile(name=first_text(box, markers.get("detail.company_name")))

    followers_text = first_text(box, markers.get("detail.company_followers")) or ""
    match = _FOLLOWERS.search(followers_text)
    if match:
        profile.follower_count = match.group(1).strip()

    info = first_text(box, markers.get("detail.company_info"), multiline=True) or ""
    for part in _INFO_SEPARATORS.split(info):
        part = part.strip()
        if not part:
            continue
        if "employees" in part.lower():
            profile.size = profile.size or part
        elif "on linkedin" not in part.lower() and profile.industry is None:
            profile.industry = part

    description = first_text(box, markers.get("detail.company_description"), multiline=True)
    profile.description = truncate(description, MAX_COMPANY_DESCRIPTION_LENGTH) or None
    return profile


def extract_from_document(
    payload: Optional[Dict[str, Any]],
    soup: BeautifulSoup,
    markers: MarkerRegistry = default_markers,
) -> Optional[JobDetails]:
    """
    Strategy 2: query structural markers of the rendered job view.

    Returns:
        JobDetails, or None if no marker resolved to any content
    """
    preferences = _preference_values(soup, markers)
    profile = _company_box_profile(soup, markers)

    details = JobDetails(
        title=first_text(soup, markers.get("detail.title")),
        company=first_text(soup, markers.get("detail.company")) or profile.name,
        location=first_text(soup, markers.get("detail.location")),
        description=first_text(soup, markers.get("detail.description"), multiline=True) or "",
        work_arrangement=_match_keyword(preferences, WORK_ARRANGEMENT_KEYWORDS),
        employment_type=_match_keyword(preferences, EMPLOYMENT_TYPE_KEYWORDS),
        company_profile=profile,
        extraction_method=ExtractionStrategy.DOCUMENT_QUERY,
    )
    if not details.has_content():
        return None
    return details


def _longest_text(soup: BeautifulSoup, selectors: List[str], min_length: int) -> Optional[str]:
    best = None
    for selector in selectors:
        for element in soup.select(selector):
            text = element_text(element, multiline=True)
            if text and len(text) > min_length and (best is None or len(text) > len(best)):
                best = text
    return best


def extract_by_heuristics(
    payload: Optional[Dict[str, Any]],
    soup: BeautifulSoup,
    markers: MarkerRegistry = default_markers,
) -> Optional[JobDetails]:
    """
    Strategy 3: pick the longest plausible description block.

    Expandable text blocks over 100 characters are preferred; generic
    text-direction paragraphs over 500 characters are the last resort.

    Returns:
        JobDetails carrying only a description, or None
    """
    description = _longest_text(
        soup, markers.get("detail.expandable_text"), EXPANDABLE_TEXT_MIN_LENGTH
    )
    if description is None:
        description = _longest_text(
            soup, markers.get("detail.paragraph_text"), PARAGRAPH_TEXT_MIN_LENGTH
        )
    if description is None:
        return None
    return JobDetails(description=description, extraction_method=ExtractionStrategy.HEURISTIC_SWEEP)


def _run_strategy(
    strategy: ExtractionStrategy,
    func,
    payload: Optional[Dict[str, Any]],
    soup: BeautifulSoup,
    markers: MarkerRegistry,
    attempts: List[ExtractionAttempt],
) -> Optional[JobDetails]:
    try:
        result = func(payload, soup, markers)
    except Exception as e:
        logger.warning(f"Extraction strategy {strategy.value} failed: {e}")
        attempts.append(ExtractionAttempt(strategy, succeeded=False, error=str(e)))
        return None
    attempts.append(ExtractionAttempt(strategy, succeeded=result is not None))
    return result


def run_strategy_chain(
    payload: Optional[Dict[str, Any]],
    soup: BeautifulSoup,
    markers: MarkerRegistry = default_markers,
) -> Tuple[Optional[JobDetails], List[ExtractionAttempt]]:
    """
    Run the strategies in priority order.

    A structured payload record ends the chain. Otherwise the document
    record is kept and, if its description is missing or shorter than the
    minimum, the heuristic sweep supplies one.

    Returns:
        (details or None, attempt diagnostics)
    """
    attempts: List[ExtractionAttempt] = []

    details = _run_strategy(
        ExtractionStrategy.STRUCTURED_RESPONSE, extract_from_payload, payload, soup, markers, attempts
    )
    if details is not None:
        return details, attempts

    details = _run_strategy(
        ExtractionStrategy.DOCUMENT_QUERY, extract_from_document, payload, soup, markers, attempts
    )

    if details is None or len(details.description) < MIN_DESCRIPTION_LENGTH:
        swept = _run_strategy(
            ExtractionStrategy.HEURISTIC_SWEEP, extract_by_heuristics, payload, soup, markers, attempts
        )
        if swept is not None:
            if details is None:
                details = swept
            elif len(swept.description) > len(details.description):
                details.description = swept.description
                details.extraction_method = ExtractionStrategy.HEURISTIC_SWEEP

    return details, attempts


# =============================================================================
# Extractor
# =============================================================================

class JobDetailExtractor:
    """
    Fetches one job posting through an authenticated session.

    Usage:
        extractor = JobDetailExtractor(session)
        result = await extractor.fetch("https://www.linkedin.com/jobs/view/123/")
        print(result.details.title, result.details.extraction_method)
    """

    def __init__(
        self,
        session,
        markers: Optional[MarkerRegistry] = None,
        pacer: Optional[Pacer] = None,
        observation_timeout_ms: int = PAYLOAD_OBSERVATION_TIMEOUT_MS,
    ):
        self.session = session
        self.markers = markers or session.markers
        self.pacer = pacer or session.pacer
        self.observation_timeout_ms = observation_timeout_ms

    async def fetch(self, job_url: str) -> DetailResult:
        """
        Navigate to a job posting and extract its detail record.

        Args:
            job_url: Job posting URL (/jobs/view/<id> or ?currentJobId=<id>)

        Returns:
            DetailResult with the record and per-strategy diagnostics

        Raises:
            InvalidInputError: If the URL is empty
            NotAuthenticatedError: If the session is not logged in
            NavigationError: If the page could not be loaded
            ExtractionError: If no strategy resolved any field
        """
        if not job_url or not job_url.strip():
            raise InvalidInputError("Job URL is required")
        job_url = job_url.strip()

        page = self.session.require_authenticated()
        job_id = parse_job_id(job_url)
        if job_id is None:
            logger.info(f"No job id in {job_url}; structured response interception skipped")

        payload, html = await self._load(page, job_url, job_id)
        soup = parse_document(html)

        details, attempts = run_strategy_chain(payload, soup, self.markers)
        if details is None or not details.has_content():
            raise ExtractionError(f"Could not extract any job details from {job_url}")

        details.description = truncate(details.description, MAX_DESCRIPTION_LENGTH)
        details.job_id = job_id
        details.url = job_url

        logger.info(
            f"Extracted job details via {details.extraction_method.value} "
            f"(description {len(details.description)} chars)"
        )
        return DetailResult(details=details, attempts=attempts)

    async def _load(self, page, job_url: str, job_id: Optional[str]) -> Tuple[Optional[Dict[str, Any]], str]:
        """Navigate with the response observer installed; return (payload, html)."""
        observed = asyncio.Event()
        captured = []

        def on_response(response):
            if captured or job_id is None:
                return
            if response.ok and is_job_posting_response(response.url, job_id):
                captured.append(response)
                observed.set()

        page.on("response", on_response)
        try:
            await self.session.navigate(job_url)
            await self.pacer.delay(*DETAIL_SETTLE_DELAY, reason="detail settle")

            payload = None
            if job_id is not None:
                payload = await self._await_payload(observed, captured)

            try:
                html = await page.content()
            except PlaywrightError as e:
                raise NavigationError(f"Could not read job page: {e}", url=job_url) from e
            return payload, html
        finally:
            page.remove_listener("response", on_response)

    async def _await_payload(self, observed: asyncio.Event, captured: list) -> Optional[Dict[str, Any]]:
        if not observed.is_set():
            try:
                await asyncio.wait_for(observed.wait(), timeout=self.observation_timeout_ms / 1000.0)
            except asyncio.TimeoutError:
                logger.debug("No structured job payload observed")
                return None

        try:
            payload = await asyncio.wait_for(
                captured[0].json(), timeout=self.observation_timeout_ms / 1000.0
            )
        except asyncio.TimeoutError:
            logger.warning("Structured job payload body did not arrive in time")
            return None
        except (PlaywrightError, ValueError) as e:
            logger.warning(f"Structured job payload was not readable: {e}")
            return None

        if not isinstance(payload, dict):
            return None
        logger.debug("Captured structured job payload")
        return payload
