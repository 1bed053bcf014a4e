"""Data models for LinkedIn automation."""

import os
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

from .constants import UNKNOWN
from .errors import InvalidInputError


@dataclass(frozen=True)
class Credentials:
    """Login credentials. Supplied per attempt and never persisted."""

    identifier: str
    secret: str = field(repr=False)

    def __repr__(self) -> str:
        return f"Credentials(identifier={self.identifier!r}, secret='***')"

    @classmethod
    def from_env(
        cls,
        identifier: Optional[str] = None,
        secret: Optional[str] = None,
    ) -> Optional["Credentials"]:
        """Build credentials, each field falling back to the environment.

        Args:
            identifier: Login email; LINKEDIN_EMAIL when omitted
            secret: Login password; LINKEDIN_PASSWORD when omitted

        Returns:
            Credentials, or None if either field is still missing
        """
        identifier = identifier or os.getenv("LINKEDIN_EMAIL")
        secret = secret or os.getenv("LINKEDIN_PASSWORD")
        if not identifier or not secret:
            return None
        return cls(identifier=identifier, secret=secret)


class SessionState(str, Enum):
    """States of the login state machine."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    SESSION_CHECK = "session_check"
    AT_CREDENTIAL_FORM = "at_credential_form"
    SUBMITTING = "submitting"
    AUTHENTICATED = "authenticated"
    CHECKPOINT_REQUIRED = "checkpoint_required"
    CREDENTIAL_REJECTED = "credential_rejected"
    INDETERMINATE = "indeterminate"


class TimePosted(str, Enum):
    """Time-posted buckets (f_TPR values)."""

    PAST_24_HOURS = "r86400"
    PAST_WEEK = "r604800"
    PAST_MONTH = "r2592000"


class ExperienceLevel(str, Enum):
    """Experience levels (f_E values)."""

    INTERNSHIP = "1"
    ENTRY = "2"
    ASSOCIATE = "3"
    MID_SENIOR = "4"
    DIRECTOR = "5"
    EXECUTIVE = "6"


_TIME_POSTED_ALIASES = {
    "24h": TimePosted.PAST_24_HOURS,
    "day": TimePosted.PAST_24_HOURS,
    "past_24_hours": TimePosted.PAST_24_HOURS,
    "week": TimePosted.PAST_WEEK,
    "past_week": TimePosted.PAST_WEEK,
    "month": TimePosted.PAST_MONTH,
    "past_month": TimePosted.PAST_MONTH,
}

_EXPERIENCE_ALIASES = {
    "internship": ExperienceLevel.INTERNSHIP,
    "entry": ExperienceLevel.ENTRY,
    "associate": ExperienceLevel.ASSOCIATE,
    "mid_senior": ExperienceLevel.MID_SENIOR,
    "mid-senior": ExperienceLevel.MID_SENIOR,
    "director": ExperienceLevel.DIRECTOR,
    "executive": ExperienceLevel.EXECUTIVE,
}


def _parse_time_posted(value: Any) -> Optional[TimePosted]:
    if value in (None, ""):
        return None
    if isinstance(value, TimePosted):
        return value
    text = str(value).strip().lower()
    if text in _TIME_POSTED_ALIASES:
        return _TIME_POSTED_ALIASES[text]
    try:
        return TimePosted(text)
    except ValueError:
        raise InvalidInputError(
            f"Invalid timePosted filter: {value!r} "
            f"(expected r86400, r604800, r2592000, 24h, week or month)"
        )


def _parse_experience_levels(value: Any) -> tuple[ExperienceLevel, ...]:
    if value in (None, ""):
        return ()
    if isinstance(value, ExperienceLevel):
        return (value,)
    if isinstance(value, (list, tuple)):
        items = list(value)
    else:
        items = str(value).split(",")

    levels = []
    for item in items:
        if isinstance(item, ExperienceLevel):
            levels.append(item)
            continue
        text = str(item).strip().lower()
        if not text:
            continue
        if text in _EXPERIENCE_ALIASES:
            levels.append(_EXPERIENCE_ALIASES[text])
            continue
        try:
            levels.append(ExperienceLevel(text))
        except ValueError:
            raise InvalidInputError(
                f"Invalid experienceLevel filter: {item!r} (expected 1-6)"
            )
    return tuple(dict.fromkeys(levels))


@dataclass(frozen=True)
class SearchFilters:
    """Optional search filters."""

    time_posted: Optional[TimePosted] = None
    experience_levels: tuple[ExperienceLevel, ...] = ()
    remote: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "SearchFilters":
        """Build filters from a caller-supplied mapping.

        Accepts camelCase wire keys (timePosted, experienceLevel, remote)
        as well as snake_case.
        """
        if not data:
            return cls()

        time_posted = data.get("timePosted", data.get("time_posted"))
        experience = data.get(
            "experienceLevel",
            data.get("experience_level", data.get("experience_levels")),
        )
        remote = data.get("remote", False)
        if isinstance(remote, str):
            remote = remote.strip().lower() in ("1", "true", "yes", "on")

        return cls(
            time_posted=_parse_time_posted(time_posted),
            experience_levels=_parse_experience_levels(experience),
            remote=bool(remote),
        )


@dataclass(frozen=True)
class JobListing:
    """One search result. Immutable once returned."""

    title: str
    url: str
    job_id: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    posted_at: Optional[Union[date, datetime]] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the "unknown" sentinel for absent fields."""
        return {
            "id": self.job_id or UNKNOWN,
            "title": self.title,
            "company": self.company or UNKNOWN,
            "location": self.location or UNKNOWN,
            "link": self.url,
            "postedTime": self.posted_at.isoformat() if self.posted_at else UNKNOWN,
        }


@dataclass
class CompanyProfile:
    """Organization details attached to a job posting."""

    name: Optional[str] = None
    size: Optional[str] = None
    follower_count: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(
            (self.name, self.size, self.follower_count, self.industry, self.description)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name or UNKNOWN,
            "size": self.size or UNKNOWN,
            "followers": self.follower_count or UNKNOWN,
            "industry": self.industry or UNKNOWN,
            "description": self.description or "",
        }


class ExtractionStrategy(str, Enum):
    """Fallback strategies of the detail pipeline, in priority order."""

    STRUCTURED_RESPONSE = "structured_response"
    DOCUMENT_QUERY = "document_query"
    HEURISTIC_SWEEP = "heuristic_sweep"


@dataclass
class ExtractionAttempt:
    """Diagnostics for one strategy run. Never persisted."""

    strategy: ExtractionStrategy
    succeeded: bool
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "succeeded": self.succeeded,
            "error": self.error,
        }


@dataclass
class JobDetails:
    """Detailed record for one job posting.

    Every field is optional: a missing field never fails the record.
    """

    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    description: str = ""
    work_arrangement: Optional[str] = None
    employment_type: Optional[str] = None
    company_profile: CompanyProfile = field(default_factory=CompanyProfile)
    job_id: Optional[str] = None
    url: Optional[str] = None
    extraction_method: Optional[ExtractionStrategy] = None

    def has_content(self) -> bool:
        """True if any field was resolved."""
        return bool(
            self.title
            or self.company
            or self.location
            or self.description
            or self.work_arrangement
            or not self.company_profile.is_empty()
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "jobId": self.job_id,
            "url": self.url,
            "title": self.title or UNKNOWN,
            "company": self.company or UNKNOWN,
            "location": self.location or UNKNOWN,
            "workplaceType": self.work_arrangement or UNKNOWN,
            "employmentType": self.employment_type or UNKNOWN,
            "description": self.description,
            "companyInfo": self.company_profile.to_dict(),
            "extractionMethod": self.extraction_method.value if self.extraction_method else None,
        }


@dataclass
class SearchResult:
    """Result of a job search."""

    jobs: list[JobListing]
    total_found: int
    search_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "jobs": [job.to_dict() for job in self.jobs],
            "searchUrl": self.search_url,
            "totalFound": self.total_found,
        }


@dataclass
class DetailResult:
    """Result of a job detail fetch."""

    details: JobDetails
    attempts: list[ExtractionAttempt] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "details": self.details.to_dict(),
            "extractionMethod": (
                self.details.extraction_method.value
                if self.details.extraction_method
                else None
            ),
            "attempts": [attempt.to_dict() for attempt in self.attempts],
        }
