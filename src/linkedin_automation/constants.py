# src/linkedin_automation/constants.py
"""Centralized constants for LinkedIn automation.

This module contains URLs, timeouts and extraction bounds used across
multiple modules. For user-configurable settings, see config.py and
browser_config.py. Selectors live in intelligence/selector_library.py.
"""

# =============================================================================
# Target URLs
# =============================================================================

BASE_URL = "https://www.linkedin.com"

# Landing page that only resolves for an authenticated session
FEED_URL = f"{BASE_URL}/feed/"

LOGIN_URL = f"{BASE_URL}/login"

JOB_SEARCH_URL = f"{BASE_URL}/jobs/search/"

JOB_VIEW_URL = f"{BASE_URL}/jobs/view/{{job_id}}/"

# Internal API path serving the structured job posting payload
JOB_POSTING_API_PATH = "/voyager/api/jobs/jobPostings/{job_id}"


# =============================================================================
# Timeouts (milliseconds)
# =============================================================================

NAVIGATION_TIMEOUT_MS = 30000

# Wait for the login form fields to become interactive
LOGIN_FORM_TIMEOUT_MS = 10000

# Shared timeout for the post-submit signal race
POST_SUBMIT_TIMEOUT_MS = 30000

# Wait for either search result container to render
RESULTS_CONTAINER_TIMEOUT_MS = 15000

# Extra observation window for the structured payload after navigation settles
PAYLOAD_OBSERVATION_TIMEOUT_MS = 5000


# =============================================================================
# Pacing bounds (milliseconds, before the pacing multiplier)
# =============================================================================

PRE_NAVIGATION_DELAY = (300, 900)
POST_NAVIGATION_DELAY = (2000, 3000)
PRE_TYPE_DELAY = (500, 1500)
BETWEEN_FIELDS_DELAY = (300, 800)
PRE_SUBMIT_DELAY = (500, 1000)
POST_SUBMIT_DELAY = (2000, 3000)
RESULTS_SETTLE_DELAY = (1000, 2000)
DETAIL_SETTLE_DELAY = (1500, 2500)


# =============================================================================
# Extraction bounds
# =============================================================================

# Search results returned per query
MAX_SEARCH_RESULTS = 25

# Job description bound before the ellipsis marker is appended
MAX_DESCRIPTION_LENGTH = 5000

# Company description bound
MAX_COMPANY_DESCRIPTION_LENGTH = 500

ELLIPSIS = "..."

# Descriptions shorter than this after the document query trigger the sweep
MIN_DESCRIPTION_LENGTH = 50

# Minimum text length for an expandable text block to count as a description
EXPANDABLE_TEXT_MIN_LENGTH = 100

# Minimum text length for a generic text-direction paragraph (last resort)
PARAGRAPH_TEXT_MIN_LENGTH = 500

# Sentinel for best-effort fields that could not be located
UNKNOWN = "unknown"


# =============================================================================
# Search filter wire values
# =============================================================================

# f_WT value selecting remote jobs
REMOTE_WORKPLACE_TYPE = "2"

# Workplace type urn suffixes used by the structured payload
WORKPLACE_TYPES = {
    "1": "On-site",
    "2": "Remote",
    "3": "Hybrid",
}

WORK_ARRANGEMENT_KEYWORDS = ("Remote", "Hybrid", "On-site")

EMPLOYMENT_TYPE_KEYWORDS = (
    "Full-time",
    "Part-time",
    "Contract",
    "Temporary",
    "Internship",
    "Volunteer",
)
