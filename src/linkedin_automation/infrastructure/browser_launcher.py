"""
Controlled browsing surface launcher.

Starts a persistent Chromium profile through Playwright with the masking
configuration applied:
- Realistic user agent and Accept/Accept-Language headers
- Automation-detection flags disabled (AutomationControlled blink feature)
- Stealth script injection (navigator.webdriver, plugins, languages, etc.)
- Fixed viewport

The launcher is the only place that touches Playwright's launch API, so the
session manager can be exercised against a fake launcher in tests.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from ..browser_config import BrowserConfig

logger = logging.getLogger(__name__)


# Stealth JavaScript injected before any page script runs.
# These scripts hide automation signals that bot detectors check for
STEALTH_SCRIPTS = {
    "webdriver": """
        // Hide navigator.webdriver
        Object.defineProperty(navigator, 'webdriver', {
            get: () => undefined,
            configurable: true
        });
    """,
    "plugins": """
        // Add realistic plugins array
        Object.defineProperty(navigator, 'plugins', {
            get: () => {
                const plugins = [
                    { name: 'Chrome PDF Plugin', filename: 'internal-pdf-viewer' },
                    { name: 'Chrome PDF Viewer', filename: 'mhjfbmdgcfjbbpaeojofohoefgiehjai' },
                    { name: 'Native Client', filename: 'internal-nacl-plugin' }
                ];
                plugins.item = (index) => plugins[index];
                plugins.namedItem = (name) => plugins.find(p => p.name === name);
                plugins.refresh = () => {};
                return plugins;
            },
            configurable: true
        });
    """,
    "languages": """
        Object.defineProperty(navigator, 'languages', {
            get: () => ['en-US', 'en'],
            configurable: true
        });
    """,
    "chrome_runtime": """
        if (!window.chrome) {
            window.chrome = {};
        }
        if (!window.chrome.runtime) {
            window.chrome.runtime = {
                id: undefined,
                connect: function() {},
                sendMessage: function() {},
                onMessage: { addListener: function() {} },
                onConnect: { addListener: function() {} }
            };
        }
    """,
    "permissions": """
        const originalQuery = window.navigator.permissions.query;
        window.navigator.permissions.query = (parameters) => (
            parameters.name === 'notifications' ?
                Promise.resolve({ state: Notification.permission }) :
                originalQuery(parameters)
        );
    """,
    "hardware_concurrency": """
        Object.defineProperty(navigator, 'hardwareConcurrency', {
            get: () => 8,
            configurable: true
        });
    """,
}

# Combined stealth script for injection
COMBINED_STEALTH_SCRIPT = "\n".join(STEALTH_SCRIPTS.values())


class BrowserLauncher(ABC):
    """Creates and releases the controlled browsing surface."""

    @abstractmethod
    async def launch(self, user_data_dir: Path, config: BrowserConfig):
        """
        Start the browser and return a BrowserContext-like object.

        Args:
            user_data_dir: Directory holding the persistent profile
            config: Browser configuration

        Returns:
            Context exposing pages, new_page(), add_cookies(), cookies(), close()
        """

    @abstractmethod
    async def close(self) -> None:
        """Release everything launch() created. Must be safe to call twice."""


class PlaywrightLauncher(BrowserLauncher):
    """
    Launches a persistent Chromium context with Playwright.

    Usage:
        launcher = PlaywrightLauncher()
        context = await launcher.launch(Path(".profile"), BrowserConfig())
        page = context.pages[0]
        ...
        await launcher.close()
    """

    def __init__(self):
        self._playwright = None
        self._context = None

    async def launch(self, user_data_dir: Path, config: BrowserConfig):
        from playwright.async_api import async_playwright

        logger.info(
            f"Launching persistent chromium profile at {user_data_dir} "
            f"(headless={config.headless})"
        )

        self._playwright = await async_playwright().start()
        try:
            self._context = await self._playwright.chromium.launch_persistent_context(
                str(user_data_dir),
                headless=config.headless,
                slow_mo=config.slow_mo,
                args=config.launch_args,
                ignore_default_args=["--enable-automation"],
                viewport=config.viewport,
                user_agent=config.user_agent,
                locale=config.locale,
                timezone_id=config.timezone_id,
                extra_http_headers=config.extra_http_headers,
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise

        self._context.set_default_navigation_timeout(config.timeout)

        if config.stealth_mode:
            await self._context.add_init_script(COMBINED_STEALTH_SCRIPT)
            logger.debug("Stealth measures applied")

        logger.info("Browser launched successfully")
        return self._context

    async def close(self) -> None:
        if self._context is not None:
            try:
                await self._context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")
            self._context = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self._playwright = None

    @property
    def is_running(self) -> bool:
        return self._context is not None
