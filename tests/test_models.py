"""Tests for data models and errors."""

from datetime import date, datetime

import pytest

from linkedin_automation.errors import (
    CheckpointRequiredError,
    InvalidInputError,
    NavigationTimeoutError,
    NotAuthenticatedError,
)
from linkedin_automation.models import (
    CompanyProfile,
    Credentials,
    DetailResult,
    ExperienceLevel,
    ExtractionAttempt,
    ExtractionStrategy,
    JobDetails,
    JobListing,
    SearchFilters,
    TimePosted,
)


class TestCredentials:
    """Tests for Credentials."""

    def test_repr_masks_secret(self):
        """Test the secret never appears in the repr."""
        credentials = Credentials("jane@example.com", "hunter2")

        assert "hunter2" not in repr(credentials)
        assert "jane@example.com" in repr(credentials)

    def test_from_env(self, monkeypatch):
        """Test credentials are read from the environment."""
        monkeypatch.setenv("LINKEDIN_EMAIL", "env@example.com")
        monkeypatch.setenv("LINKEDIN_PASSWORD", "pw")

        assert Credentials.from_env() == Credentials("env@example.com", "pw")

    @pytest.mark.parametrize("email,password,expected", [
        ("arg@example.com", None, Credentials("arg@example.com", "envpass")),
        (None, "argpass", Credentials("env@example.com", "argpass")),
        ("arg@example.com", "argpass", Credentials("arg@example.com", "argpass")),
    ])
    def test_from_env_fills_each_field(self, monkeypatch, email, password, expected):
        """Test explicit values win and only missing fields come from the environment."""
        monkeypatch.setenv("LINKEDIN_EMAIL", "env@example.com")
        monkeypatch.setenv("LINKEDIN_PASSWORD", "envpass")

        assert Credentials.from_env(email, password) == expected

    def test_from_env_argument_with_partial_env(self, monkeypatch):
        """Test a given email combines with a password from the environment."""
        monkeypatch.setenv("LINKEDIN_PASSWORD", "envpass")

        assert Credentials.from_env("arg@example.com") == Credentials("arg@example.com", "envpass")

    def test_from_env_incomplete(self, monkeypatch):
        """Test a missing password yields no credentials."""
        monkeypatch.setenv("LINKEDIN_EMAIL", "env@example.com")

        assert Credentials.from_env() is None


class TestSearchFilters:
    """Tests for SearchFilters parsing."""

    def test_camel_case_wire_keys(self):
        """Test the wire format keys."""
        filters = SearchFilters.from_dict(
            {"timePosted": "r86400", "experienceLevel": "2,4", "remote": True}
        )

        assert filters.time_posted == TimePosted.PAST_24_HOURS
        assert filters.experience_levels == (ExperienceLevel.ENTRY, ExperienceLevel.MID_SENIOR)
        assert filters.remote is True

    def test_aliases(self):
        """Test friendly aliases and snake_case keys."""
        filters = SearchFilters.from_dict(
            {"time_posted": "week", "experience_level": ["entry", "director", "entry"], "remote": "yes"}
        )

        assert filters.time_posted == TimePosted.PAST_WEEK
        assert filters.experience_levels == (ExperienceLevel.ENTRY, ExperienceLevel.DIRECTOR)
        assert filters.remote is True

    def test_empty(self):
        """Test missing filters."""
        assert SearchFilters.from_dict(None) == SearchFilters()
        assert SearchFilters.from_dict({"timePosted": None}) == SearchFilters()

    @pytest.mark.parametrize("data", [
        {"timePosted": "yesterday"},
        {"experienceLevel": "7"},
    ])
    def test_invalid(self, data):
        """Test unknown values raise InvalidInputError."""
        with pytest.raises(InvalidInputError):
            SearchFilters.from_dict(data)


class TestJobListing:
    """Tests for JobListing serialization."""

    def test_to_dict(self):
        """Test the listing envelope."""
        listing = JobListing(
            title="Engineer",
            url="https://www.linkedin.com/jobs/view/1/",
            job_id="1",
            company="Acme",
            posted_at=datetime(2024, 5, 1, 14, 30),
        )

        assert listing.to_dict() == {
            "id": "1",
            "title": "Engineer",
            "company": "Acme",
            "location": "unknown",
            "link": "https://www.linkedin.com/jobs/view/1/",
            "postedTime": "2024-05-01T14:30:00",
        }

    def test_date_only_posted_time(self):
        """Test a bare posting date serializes without a time of day."""
        listing = JobListing(title="Engineer", url="https://x", posted_at=date(2024, 5, 1))

        assert listing.to_dict()["postedTime"] == "2024-05-01"

    def test_immutable(self):
        """Test listings cannot be modified after being returned."""
        listing = JobListing(title="Engineer", url="https://x")

        with pytest.raises(AttributeError):
            listing.title = "Other"


class TestJobDetails:
    """Tests for JobDetails."""

    def test_has_content(self):
        """Test content detection across fields."""
        assert JobDetails().has_content() is False
        assert JobDetails(description="text").has_content() is True
        assert JobDetails(company_profile=CompanyProfile(industry="Retail")).has_content() is True

    def test_detail_result_envelope(self):
        """Test unresolved fields serialize as unknown."""
        details = JobDetails(
            title="Engineer",
            extraction_method=ExtractionStrategy.DOCUMENT_QUERY,
        )
        attempts = [
            ExtractionAttempt(ExtractionStrategy.STRUCTURED_RESPONSE, succeeded=False),
            ExtractionAttempt(ExtractionStrategy.DOCUMENT_QUERY, succeeded=True),
        ]

        result = DetailResult(details, attempts).to_dict()

        assert result["success"] is True
        assert result["extractionMethod"] == "document_query"
        assert result["details"]["company"] == "unknown"
        assert result["details"]["description"] == ""
        assert result["details"]["companyInfo"]["followers"] == "unknown"
        assert [a["succeeded"] for a in result["attempts"]] == [False, True]


class TestErrors:
    """Tests for error envelopes."""

    def test_checkpoint_envelope(self):
        """Test checkpoint errors flag manual verification."""
        result = CheckpointRequiredError("verify").to_dict()

        assert result == {
            "success": False,
            "message": "verify",
            "errorType": "checkpoint_required",
            "needsManualVerification": True,
        }

    def test_timeout_is_navigation_error(self):
        """Test timeouts keep their URL and kind."""
        error = NavigationTimeoutError("slow", url="https://x")

        assert error.url == "https://x"
        assert error.to_dict()["errorType"] == "timeout"

    def test_not_authenticated_default_message(self):
        """Test the default message."""
        assert NotAuthenticatedError().message == "Not logged in. Please log in first."
