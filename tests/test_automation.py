"""End-to-end tests for the LinkedInAutomation facade against a fake browser."""

import json

import pytest

from linkedin_automation.automation import LinkedInAutomation
from linkedin_automation.constants import FEED_URL, JOB_SEARCH_URL, LOGIN_URL
from linkedin_automation.infrastructure.timing_evasion import Pacer
from linkedin_automation.session import LinkedInSession

from conftest import FakeResponse

SEARCH_HTML = """
<html><body>
<ul class="jobs-search__results-list">
  <li class="jobs-search-results__list-item" data-occludable-job-id="3901">
    <a class="job-card-list__title" href="/jobs/view/3901/?refId=abc&trk=xyz">Senior Software Engineer</a>
    <span class="job-card-container__primary-description">Acme Corp</span>
    <span class="job-card-container__metadata-item">Remote</span>
    <time datetime="2024-05-01">1 week ago</time>
  </li>
  <li class="jobs-search-results__list-item">
    <span class="job-card-list__title">Backend Engineer (no link)</span>
    <span class="job-card-container__primary-description">Nolink Inc</span>
  </li>
  <li class="jobs-search-results__list-item" data-occludable-job-id="3902">
    <a class="job-card-list__title" href="https://www.linkedin.com/jobs/view/3902/">Platform Engineer</a>
  </li>
</ul>
</body></html>
"""

DETAIL_HTML = """
<html><body>
  <h1 class="job-details-jobs-unified-top-card__job-title">Data Engineer</h1>
  <div class="job-details-jobs-unified-top-card__company-name"><a>Globex</a></div>
  <div class="job-details-jobs-unified-top-card__primary-description-container">
    <span class="tvm__text">Austin, TX</span>
  </div>
  <div class="job-details-fit-level-preferences">
    <button>Hybrid</button><button>Full-time</button>
  </div>
  <div id="job-details">
    <p>Build and operate streaming pipelines for our analytics platform.</p>
    <p>Work with Python, Kafka and Spark.</p>
  </div>
</body></html>
"""


@pytest.fixture
def automation(config, launcher):
    session = LinkedInSession(config, pacer=Pacer.instant(), launcher=launcher)
    automation = LinkedInAutomation(config, session=session)
    automation.extractor.observation_timeout_ms = 10
    return automation


class TestLogin:
    """Tests for the login envelope."""

    @pytest.mark.asyncio
    async def test_no_credentials_and_no_session(self, automation, launcher):
        """Test login fails without navigating when nothing can authenticate."""
        result = await automation.login()

        assert result["success"] is False
        assert "LINKEDIN_EMAIL" in result["message"]
        assert launcher.launch_count == 0

    @pytest.mark.asyncio
    async def test_environment_credentials(self, automation, launcher, monkeypatch):
        """Test credentials fall back to the environment."""
        monkeypatch.setenv("LINKEDIN_EMAIL", "env@example.com")
        monkeypatch.setenv("LINKEDIN_PASSWORD", "from-env")

        result = await automation.login()

        assert result["success"] is True
        assert result["verified"] is True
        assert launcher.page.typed["#username"] == "env@example.com"

    @pytest.mark.asyncio
    async def test_given_email_overrides_environment(self, automation, launcher, monkeypatch):
        """Test a given email is kept while the password comes from the environment."""
        monkeypatch.setenv("LINKEDIN_EMAIL", "env@example.com")
        monkeypatch.setenv("LINKEDIN_PASSWORD", "envpass")

        result = await automation.login("arg@example.com", None)

        assert result["success"] is True
        assert launcher.page.typed["#username"] == "arg@example.com"
        assert launcher.page.typed["#password"] == "envpass"

    @pytest.mark.asyncio
    async def test_given_email_with_environment_password_only(self, automation, launcher, monkeypatch):
        """Test a given email combines with LINKEDIN_PASSWORD when LINKEDIN_EMAIL is unset."""
        monkeypatch.setenv("LINKEDIN_PASSWORD", "envpass")

        result = await automation.login("arg@example.com")

        assert result["success"] is True
        assert launcher.launch_count == 1
        assert launcher.page.typed["#username"] == "arg@example.com"
        assert launcher.page.typed["#password"] == "envpass"

    @pytest.mark.asyncio
    async def test_saved_session_without_credentials(self, automation, launcher, config):
        """Test a saved session restores without any credentials."""
        config.cookies_path.write_text(json.dumps([
            {"name": "li_at", "value": "abc", "domain": ".www.linkedin.com", "path": "/"},
        ]))

        result = await automation.login()

        assert result["success"] is True
        assert result["sessionRestored"] is True
        assert launcher.page.goto_calls == [FEED_URL]

    @pytest.mark.asyncio
    async def test_checkpoint_then_restore(self, automation, site, launcher):
        """Test a checkpoint needs manual action, after which login restores."""
        site.post_submit_url = "https://www.linkedin.com/checkpoint/challenge/AgF"

        first = await automation.login("jane@example.com", "pw")

        assert first["success"] is False
        assert first["needsManualVerification"] is True

        # The operator completes the challenge in the browser window
        site.logged_in = True
        launcher.page.goto_calls.clear()

        second = await automation.login("jane@example.com", "pw")

        assert second["success"] is True
        assert second["sessionRestored"] is True
        assert LOGIN_URL not in launcher.page.goto_calls

    @pytest.mark.asyncio
    async def test_rejected_credentials_envelope(self, automation, site):
        """Test rejected credentials return the site's error text."""
        site.post_submit_url = "https://www.linkedin.com/checkpoint/lg/login-submit"
        site.post_submit_html = (
            '<html><body><div id="error-for-password">Wrong password.</div></body></html>'
        )

        result = await automation.login("jane@example.com", "bad")

        assert result == {
            "success": False,
            "message": "Login failed: Wrong password.",
            "needsManualVerification": False,
            "verified": False,
            "errorType": "credential_rejected",
        }


class TestSearchJobs:
    """Tests for the search envelope."""

    @pytest.mark.asyncio
    async def test_requires_login(self, automation, launcher):
        """Test search before login fails fast without a browser."""
        result = await automation.search_jobs("software engineer")

        assert result["success"] is False
        assert result["errorType"] == "not_authenticated"
        assert launcher.launch_count == 0

    @pytest.mark.asyncio
    async def test_skips_listings_without_link(self, automation, site, launcher):
        """Test three cards, one without a link, yield two listings."""
        site.pages[JOB_SEARCH_URL] = SEARCH_HTML
        await automation.login("jane@example.com", "pw")

        result = await automation.search_jobs("software engineer", "Remote", {"remote": True})

        assert result["success"] is True
        assert result["totalFound"] == 2
        assert [job["title"] for job in result["jobs"]] == [
            "Senior Software Engineer",
            "Platform Engineer",
        ]
        first = result["jobs"][0]
        assert first["id"] == "3901"
        assert first["company"] == "Acme Corp"
        assert first["link"] == "https://www.linkedin.com/jobs/view/3901/"
        assert first["postedTime"] == "2024-05-01"
        assert result["jobs"][1]["company"] == "unknown"
        assert "f_WT=2" in result["searchUrl"]
        assert "location=Remote" in result["searchUrl"]
        # Scrolled once to trigger lazy loading
        assert len(launcher.page.evaluated) == 1

    @pytest.mark.asyncio
    async def test_missing_results_container(self, automation, launcher):
        """Test a page without either results layout fails descriptively."""
        await automation.login("jane@example.com", "pw")

        result = await automation.search_jobs("software engineer")

        assert result["success"] is False
        assert result["errorType"] == "navigation"
        assert "results" in result["message"]

    @pytest.mark.asyncio
    async def test_empty_keywords(self, automation, launcher):
        """Test empty keywords are rejected before navigating."""
        await automation.login("jane@example.com", "pw")
        calls = list(launcher.page.goto_calls)

        result = await automation.search_jobs("   ")

        assert result["errorType"] == "invalid_input"
        assert launcher.page.goto_calls == calls

    @pytest.mark.asyncio
    async def test_invalid_filter(self, automation):
        """Test an unknown time-posted value is rejected."""
        await automation.login("jane@example.com", "pw")

        result = await automation.search_jobs("python", filters={"timePosted": "decade"})

        assert result["success"] is False
        assert result["errorType"] == "invalid_input"


class TestGetJobDetails:
    """Tests for the detail envelope."""

    @pytest.mark.asyncio
    async def test_document_strategy_without_payload(self, automation, site):
        """Test details come from page structure when no payload is observed."""
        site.pages["https://www.linkedin.com/jobs/view/4001"] = DETAIL_HTML
        await automation.login("jane@example.com", "pw")

        result = await automation.get_job_details("https://www.linkedin.com/jobs/view/4001/")

        assert result["success"] is True
        assert result["extractionMethod"] == "document_query"
        details = result["details"]
        assert details["title"] == "Data Engineer"
        assert details["company"] == "Globex"
        assert details["location"] == "Austin, TX"
        assert details["workplaceType"] == "Hybrid"
        assert details["employmentType"] == "Full-time"
        assert details["description"].startswith("Build and operate streaming pipelines")
        assert details["jobId"] == "4001"

    @pytest.mark.asyncio
    async def test_payload_strategy(self, automation, site, launcher):
        """Test an observed structured payload wins over the page structure."""
        url = "https://www.linkedin.com/jobs/view/4001/"
        site.pages["https://www.linkedin.com/jobs/view/4001"] = DETAIL_HTML
        site.responses[url] = [
            FakeResponse(
                "https://www.linkedin.com/voyager/api/jobs/jobPostings/4001?decorationId=x",
                {
                    "data": {
                        "title": "Staff Data Engineer",
                        "formattedLocation": "Remote, US",
                        "description": {"text": "Own the data platform."},
                        "workRemoteAllowed": True,
                    },
                    "included": [],
                },
            )
        ]
        await automation.login("jane@example.com", "pw")

        result = await automation.get_job_details(url)

        assert result["extractionMethod"] == "structured_response"
        assert result["details"]["title"] == "Staff Data Engineer"
        assert result["details"]["location"] == "Remote, US"
        assert launcher.page.listeners["response"] == []

    @pytest.mark.asyncio
    async def test_stalled_payload_body_falls_back(self, automation, site, launcher):
        """Test a payload whose body never arrives falls back to the page structure."""
        url = "https://www.linkedin.com/jobs/view/4001/"
        site.pages["https://www.linkedin.com/jobs/view/4001"] = DETAIL_HTML
        site.responses[url] = [
            FakeResponse(
                "https://www.linkedin.com/voyager/api/jobs/jobPostings/4001",
                {"data": {"title": "Never read"}},
                stalled=True,
            )
        ]
        await automation.login("jane@example.com", "pw")

        result = await automation.get_job_details(url)

        assert result["success"] is True
        assert result["extractionMethod"] == "document_query"
        assert result["details"]["title"] == "Data Engineer"
        assert launcher.page.listeners["response"] == []

    @pytest.mark.asyncio
    async def test_requires_login(self, automation):
        """Test details before login fail with not_authenticated."""
        result = await automation.get_job_details("https://www.linkedin.com/jobs/view/1/")

        assert result == {
            "success": False,
            "message": "Not logged in. Please log in first.",
            "errorType": "not_authenticated",
        }

    @pytest.mark.asyncio
    async def test_empty_page_is_extraction_failure(self, automation):
        """Test a page with nothing extractable fails the operation."""
        await automation.login("jane@example.com", "pw")

        result = await automation.get_job_details("https://www.linkedin.com/jobs/view/999/")

        assert result["success"] is False
        assert result["errorType"] == "extraction"


class TestCleanup:
    """Tests for cleanup."""

    @pytest.mark.asyncio
    async def test_cleanup_is_always_safe(self, automation, launcher):
        """Test cleanup before and after use."""
        assert (await automation.cleanup())["success"] is True

        await automation.login("jane@example.com", "pw")
        await automation.cleanup()
        await automation.cleanup()

        assert automation.session.is_authenticated is False
        result = await automation.search_jobs("python")
        assert result["errorType"] == "not_authenticated"
