"""
LinkedIn automation facade.

The command surface for callers (CLI, tool servers, scripts). Owns one
LinkedInSession, serializes operations on it, and converts every fault
into a uniform envelope:

    {"success": bool, "message": str, ...operation-specific fields}

No method raises to the caller.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

from .config import Config
from .errors import LinkedInAutomationError, NotAuthenticatedError
from .extraction.detail import JobDetailExtractor
from .extraction.search import JobSearcher
from .models import Credentials, SearchFilters
from .session import CredentialsRequired, LinkedInSession

logger = logging.getLogger(__name__)


def _failure(message: str, error_type: str = "error", **extra) -> Dict[str, Any]:
    result = {"success": False, "message": message, "errorType": error_type}
    result.update(extra)
    return result


class LinkedInAutomation:
    """
    Orchestrates login, job search and job detail retrieval.

    Usage:
        automation = LinkedInAutomation(Config.from_env())
        result = await automation.login()
        if result["success"]:
            jobs = await automation.search_jobs("python developer", "Berlin",
                                                {"timePosted": "week"})
        await automation.cleanup()
    """

    def __init__(self, config: Optional[Config] = None, session: Optional[LinkedInSession] = None):
        """
        Initialize the facade. No browser is started until the first call.

        Args:
            config: Application configuration; loaded from the environment if omitted
            session: Pre-built session (tests inject one with fake browser parts)
        """
        self.config = config or (session.config if session else Config.from_env())
        self.session = session or LinkedInSession(self.config)
        self.searcher = JobSearcher(self.session)
        self.extractor = JobDetailExtractor(self.session)
        self._lock = asyncio.Lock()

    def has_saved_session(self) -> bool:
        """True if a cookie file or a populated browser profile exists."""
        if self.session.cookie_store.exists():
            return True
        profile = self.config.user_data_dir
        return profile.is_dir() and any(profile.iterdir())

    async def login(self, email: Optional[str] = None, password: Optional[str] = None) -> Dict[str, Any]:
        """
        Log in, restoring the saved session when possible.

        Args:
            email: Login email; falls back to LINKEDIN_EMAIL
            password: Login password; falls back to LINKEDIN_PASSWORD

        Returns:
            Envelope with success, message, needsManualVerification, verified
        """
        async with self._lock:
            credentials = Credentials.from_env(email, password)

            if credentials is None and not self.has_saved_session():
                logger.warning("Login requested without credentials or saved session")
                return CredentialsRequired().to_dict()

            try:
                outcome = await self.session.authenticate(credentials)
            except Exception as e:
                logger.exception(f"Unexpected login failure: {e}")
                return _failure(f"Login error: {e}")
            return outcome.to_dict()

    async def search_jobs(
        self,
        keywords: str,
        location: Optional[str] = None,
        filters: Optional[Union[SearchFilters, Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Search for jobs. Requires a prior successful login.

        Args:
            keywords: Search keywords
            location: Free-text location
            filters: SearchFilters or a dict with timePosted, experienceLevel, remote

        Returns:
            Envelope with jobs, searchUrl and totalFound
        """
        async with self._lock:
            if not self.session.is_authenticated:
                return NotAuthenticatedError().to_dict()
            try:
                if not isinstance(filters, SearchFilters):
                    filters = SearchFilters.from_dict(filters)
                result = await self.searcher.search(keywords, location, filters)
            except LinkedInAutomationError as e:
                logger.error(f"Job search failed: {e}")
                return e.to_dict()
            except Exception as e:
                logger.exception(f"Unexpected job search failure: {e}")
                return _failure(f"Error searching jobs: {e}")

            envelope = result.to_dict()
            envelope["message"] = f"Found {result.total_found} jobs"
            return envelope

    async def get_job_details(self, job_url: str) -> Dict[str, Any]:
        """
        Get detailed information about one job posting.

        Args:
            job_url: Full job posting URL

        Returns:
            Envelope with details and extractionMethod
        """
        async with self._lock:
            if not self.session.is_authenticated:
                return NotAuthenticatedError().to_dict()
            try:
                result = await self.extractor.fetch(job_url)
            except LinkedInAutomationError as e:
                logger.error(f"Job detail extraction failed: {e}")
                return e.to_dict()
            except Exception as e:
                logger.exception(f"Unexpected job detail failure: {e}")
                return _failure(f"Error getting job details: {e}")
            return result.to_dict()

    async def cleanup(self) -> Dict[str, Any]:
        """
        Close the browser. Safe to call at any time, including while another
        operation is waiting: it does not take the operation lock.
        """
        await self.session.cleanup()
        return {"success": True, "message": "Browser closed"}

    async def __aenter__(self) -> "LinkedInAutomation":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()
