"""
Browser configuration for the controlled LinkedIn browsing surface.

This module provides a validated Pydantic configuration model for the
persistent Chromium profile: launch flags, client-identification headers,
fixed viewport and the stealth (automation-signal masking) switches.
"""
from typing import Dict, List, Literal

from pydantic import BaseModel, Field


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)

DEFAULT_EXTRA_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}

DEFAULT_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--no-first-run",
    "--no-default-browser-check",
    "--window-size=1920,1080",
]


class BrowserConfig(BaseModel):
    """
    Configuration for the persistent Playwright browser context.

    All fields are validated by Pydantic to ensure type safety and valid values.
    """

    headless: bool = Field(
        default=False,
        description="Run browser in headless mode (no visible UI)"
    )

    slow_mo: int = Field(
        default=100,
        description="Milliseconds Playwright waits between low-level operations",
        ge=0,
        le=5000
    )

    stealth_mode: bool = Field(
        default=True,
        description="Inject scripts masking automation signals (navigator.webdriver etc.)"
    )

    timeout: int = Field(
        default=30000,
        description="Navigation timeout in milliseconds",
        ge=1000,
        le=300000
    )

    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="domcontentloaded",
        description="When to consider navigation complete"
    )

    viewport_width: int = Field(default=1920, ge=320)
    viewport_height: int = Field(default=1080, ge=320)

    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Client identification string presented to the site"
    )

    locale: str = Field(default="en-US")

    timezone_id: str = Field(default="America/New_York")

    extra_http_headers: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_EXTRA_HEADERS),
        description="Headers sent with every request"
    )

    launch_args: List[str] = Field(
        default_factory=lambda: list(DEFAULT_LAUNCH_ARGS),
        description="Additional browser launch arguments"
    )

    class Config:
        """Pydantic model configuration."""
        frozen = False
        validate_assignment = True

    @property
    def viewport(self) -> Dict[str, int]:
        """Fixed viewport in Playwright's format."""
        return {"width": self.viewport_width, "height": self.viewport_height}

    @classmethod
    def from_config(cls, config) -> "BrowserConfig":
        """Derive browser settings from the application Config."""
        return cls(headless=config.headless, slow_mo=config.slow_mo_ms)
