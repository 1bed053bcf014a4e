"""
Structured response parsing for job postings.

LinkedIn's job view page fetches the posting from an internal API
(/voyager/api/jobs/jobPostings/<id>). When that response is captured it is
the most reliable source for a detail record: the posting lives under
"data" and related entities (the hiring organization) under "included",
tagged by "$type".
"""

import logging
import re
from typing import Any, Dict, List, Optional

from ..constants import (
    JOB_POSTING_API_PATH,
    MAX_COMPANY_DESCRIPTION_LENGTH,
    WORKPLACE_TYPES,
)
from ..models import CompanyProfile
from .text import clean_text, single_line, truncate

logger = logging.getLogger(__name__)

_JOB_ID_PATTERNS = (
    re.compile(r"/jobs/view/(\d+)"),
    re.compile(r"[?&]currentJobId=(\d+)"),
)

COMPANY_TYPE_SUFFIX = ".Company"


def parse_job_id(url: Optional[str]) -> Optional[str]:
    """
    Parse the numeric job id from a job locator.

    Supports /jobs/view/<id> and ?currentJobId=<id>.

    Returns:
        The id as a string, or None if the locator carries none
    """
    if not url:
        return None
    for pattern in _JOB_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def is_job_posting_response(url: str, job_id: str) -> bool:
    """True if a response URL is the structured payload for this job."""
    path = JOB_POSTING_API_PATH.format(job_id=job_id)
    # The id must not continue as a longer id
    index = url.find(path)
    if index < 0:
        return False
    tail = url[index + len(path):index + len(path) + 1]
    return not tail.isdigit()


def format_count(value: Any) -> Optional[str]:
    """Format an integer count with thousands separators ("12,345")."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return f"{int(value):,}"
    except (TypeError, ValueError):
        return None


def _text_of(value: Any) -> Optional[str]:
    """Text of a plain string or a {"text": ...} attributed-text object."""
    if isinstance(value, dict):
        value = value.get("text")
    if isinstance(value, str):
        return value
    return None


def find_company(included: Any) -> Optional[Dict[str, Any]]:
    """Locate the organization entity in the included-items collection."""
    if not isinstance(included, list):
        return None
    for item in included:
        if isinstance(item, dict) and str(item.get("$type", "")).endswith(COMPANY_TYPE_SUFFIX):
            return item
    return None


def work_arrangement_from(data: Dict[str, Any]) -> Optional[str]:
    """Resolve the work arrangement from workplaceTypes or workRemoteAllowed."""
    for urn in data.get("workplaceTypes") or []:
        code = str(urn).rsplit(":", 1)[-1]
        if code in WORKPLACE_TYPES:
            return WORKPLACE_TYPES[code]

    remote = data.get("workRemoteAllowed")
    if remote is True:
        return WORKPLACE_TYPES["2"]
    if remote is False:
        return WORKPLACE_TYPES["1"]
    return None


def employment_type_from(data: Dict[str, Any]) -> Optional[str]:
    formatted = data.get("formattedEmploymentStatus")
    if isinstance(formatted, str) and formatted.strip():
        return formatted.strip()

    status = data.get("employmentStatus")
    if isinstance(status, str) and status.strip():
        # urn:li:fs_employmentStatus:FULL_TIME -> Full-time
        code = status.rsplit(":", 1)[-1]
        return code.replace("_", "-").capitalize()
    return None


def _staff_size(company: Dict[str, Any]) -> Optional[str]:
    count = format_count(company.get("staffCount"))
    if count:
        return f"{count} employees"

    staff_range = company.get("staffCountRange")
    if isinstance(staff_range, dict):
        start = format_count(staff_range.get("start"))
        end = format_count(staff_range.get("end"))
        if start and end:
            return f"{start}-{end} employees"
        if start:
            return f"{start}+ employees"
    return None


def _industries(company: Dict[str, Any]) -> Optional[str]:
    raw: List[Any] = company.get("industries") or company.get("companyIndustries") or []
    names = []
    for item in raw:
        if isinstance(item, dict):
            item = item.get("localizedName") or item.get("name")
        if isinstance(item, str) and item.strip():
            names.append(item.strip())
    return ", ".join(names) or None


def company_profile_from(company: Optional[Dict[str, Any]]) -> CompanyProfile:
    """Map an included organization entity to a CompanyProfile."""
    if not company:
        return CompanyProfile()

    following = company.get("followingInfo") or {}
    description = clean_text(_text_of(company.get("description")))

    return CompanyProfile(
        name=single_line(company.get("name")) or None,
        size=_staff_size(company),
        follower_count=format_count(following.get("followerCount")),
        industry=_industries(company),
        description=truncate(description, MAX_COMPANY_DESCRIPTION_LENGTH) or None,
    )
