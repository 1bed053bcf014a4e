"""LinkedIn job search automation over a persistent Playwright browser session."""

__version__ = "0.1.0"

from linkedin_automation.automation import LinkedInAutomation
from linkedin_automation.session import (
    LinkedInSession,
    LoginOutcome,
    Authenticated,
    CheckpointRequired,
    CredentialRejected,
    Indeterminate,
    CredentialsRequired,
    LoginError,
    classify_post_submit,
)
from linkedin_automation.models import (
    Credentials,
    SessionState,
    TimePosted,
    ExperienceLevel,
    SearchFilters,
    JobListing,
    CompanyProfile,
    JobDetails,
    ExtractionStrategy,
    ExtractionAttempt,
    SearchResult,
    DetailResult,
)
from linkedin_automation.errors import (
    LinkedInAutomationError,
    AuthenticationError,
    CredentialRejectedError,
    CheckpointRequiredError,
    CredentialsRequiredError,
    IndeterminateLoginError,
    NavigationError,
    NavigationTimeoutError,
    NotAuthenticatedError,
    ExtractionError,
    InvalidInputError,
)
from linkedin_automation.config import Config, settings
from linkedin_automation.browser_config import BrowserConfig

# Extraction pipeline
from linkedin_automation.extraction import (
    JobSearcher,
    JobDetailExtractor,
    build_search_url,
    parse_job_id,
    truncate,
)

# Infrastructure
from linkedin_automation.infrastructure import (
    Pacer,
    TimingProfile,
    PlaywrightLauncher,
)
from linkedin_automation.intelligence import MarkerRegistry
from linkedin_automation.utils import CookieStore

__all__ = [
    "LinkedInAutomation",
    "LinkedInSession",
    "LoginOutcome",
    "Authenticated",
    "CheckpointRequired",
    "CredentialRejected",
    "Indeterminate",
    "CredentialsRequired",
    "LoginError",
    "classify_post_submit",
    "Credentials",
    "SessionState",
    "TimePosted",
    "ExperienceLevel",
    "SearchFilters",
    "JobListing",
    "CompanyProfile",
    "JobDetails",
    "ExtractionStrategy",
    "ExtractionAttempt",
    "SearchResult",
    "DetailResult",
    "LinkedInAutomationError",
    "AuthenticationError",
    "CredentialRejectedError",
    "CheckpointRequiredError",
    "CredentialsRequiredError",
    "IndeterminateLoginError",
    "NavigationError",
    "NavigationTimeoutError",
    "NotAuthenticatedError",
    "ExtractionError",
    "InvalidInputError",
    "Config",
    "settings",
    "BrowserConfig",
    "JobSearcher",
    "JobDetailExtractor",
    "build_search_url",
    "parse_job_id",
    "truncate",
    "Pacer",
    "TimingProfile",
    "PlaywrightLauncher",
    "MarkerRegistry",
    "CookieStore",
]
