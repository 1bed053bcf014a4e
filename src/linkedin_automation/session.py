"""
Session manager for the controlled LinkedIn browsing surface.

Owns the browser lifecycle and runs the login state machine:

    UNINITIALIZED -> INITIALIZING -> SESSION_CHECK
        -> AUTHENTICATED                      (saved session restored)
        -> AT_CREDENTIAL_FORM -> SUBMITTING
            -> AUTHENTICATED | CHECKPOINT_REQUIRED
             | CREDENTIAL_REJECTED | INDETERMINATE

Every terminal state is a LoginOutcome variant. The post-submit decision is
the pure function classify_post_submit(), testable without a browser.

Usage:
    async with LinkedInSession(Config.from_env()) as session:
        outcome = await session.authenticate(Credentials("me@example.com", "..."))
        if outcome.success:
            ...
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Dict, Optional, Type

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .browser_config import BrowserConfig
from .config import Config
from .constants import (
    BETWEEN_FIELDS_DELAY,
    FEED_URL,
    LOGIN_FORM_TIMEOUT_MS,
    LOGIN_URL,
    NAVIGATION_TIMEOUT_MS,
    POST_SUBMIT_DELAY,
    POST_SUBMIT_TIMEOUT_MS,
    PRE_NAVIGATION_DELAY,
    PRE_SUBMIT_DELAY,
    PRE_TYPE_DELAY,
)
from .errors import (
    CheckpointRequiredError,
    CredentialRejectedError,
    CredentialsRequiredError,
    IndeterminateLoginError,
    LinkedInAutomationError,
    NavigationError,
    NavigationTimeoutError,
    NotAuthenticatedError,
)
from .infrastructure.browser_launcher import BrowserLauncher, PlaywrightLauncher
from .infrastructure.timing_evasion import Pacer, create_pacer
from .intelligence.selector_library import MarkerRegistry
from .models import Credentials, SessionState
from .utils.challenge_handler import (
    get_checkpoint_instructions,
    is_authenticated_url,
    is_checkpoint_url,
    is_login_form_url,
)
from .utils.cookie_store import CookieStore
from .utils.human_simulator import HumanSimulator

logger = logging.getLogger(__name__)


# =============================================================================
# Login outcomes
# =============================================================================

@dataclass(frozen=True)
class LoginOutcome:
    """Terminal result of one authenticate() call.

    Failing variants name the error they stand for; their envelope is that
    error's envelope, so login failures and raised failures share one shape.
    """

    success: ClassVar[bool] = False
    state: ClassVar[SessionState] = SessionState.INDETERMINATE
    error: ClassVar[Optional[Type[LinkedInAutomationError]]] = None
    needs_manual_verification: ClassVar[bool] = False

    @property
    def message(self) -> str:
        raise NotImplementedError

    @property
    def error_type(self) -> Optional[str]:
        error = self.to_error()
        return error.kind if error else None

    def to_error(self) -> Optional[LinkedInAutomationError]:
        """The failure as an exception, or None for a successful outcome."""
        if self.error is None:
            return None
        return self.error(self.message)

    def to_dict(self) -> dict:
        error = self.to_error()
        if error is not None:
            result = error.to_dict()
        else:
            result = {"success": self.success, "message": self.message}
        result.setdefault("needsManualVerification", self.needs_manual_verification)
        result["verified"] = False
        return result


@dataclass(frozen=True)
class Authenticated(LoginOutcome):
    """Authenticated area reached (or assumed, when not verified)."""

    success: ClassVar[bool] = True
    state: ClassVar[SessionState] = SessionState.AUTHENTICATED

    restored: bool = False
    verified: bool = True
    url: Optional[str] = None

    @property
    def message(self) -> str:
        if self.restored:
            return "Already logged in (session restored)"
        if self.verified:
            return "Login successful"
        return (
            f"Login submitted; landed on {self.url}. Assuming success, "
            "but the session could not be verified."
        )

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["verified"] = self.verified
        result["sessionRestored"] = self.restored
        return result


@dataclass(frozen=True)
class CheckpointRequired(LoginOutcome):
    """A security checkpoint needs manual verification. Never retried."""

    state: ClassVar[SessionState] = SessionState.CHECKPOINT_REQUIRED
    error: ClassVar[Optional[Type[LinkedInAutomationError]]] = CheckpointRequiredError
    needs_manual_verification: ClassVar[bool] = True

    url: Optional[str] = None

    @property
    def message(self) -> str:
        return get_checkpoint_instructions(self.url)


@dataclass(frozen=True)
class CredentialRejected(LoginOutcome):
    """The site displayed an explicit error for the submitted credentials."""

    state: ClassVar[SessionState] = SessionState.CREDENTIAL_REJECTED
    error: ClassVar[Optional[Type[LinkedInAutomationError]]] = CredentialRejectedError

    reason: str = ""

    @property
    def message(self) -> str:
        return f"Login failed: {self.reason}"


@dataclass(frozen=True)
class Indeterminate(LoginOutcome):
    """Still on the credential form with no error or checkpoint shown."""

    state: ClassVar[SessionState] = SessionState.INDETERMINATE
    error: ClassVar[Optional[Type[LinkedInAutomationError]]] = IndeterminateLoginError

    url: Optional[str] = None

    @property
    def message(self) -> str:
        return (
            "Login could not be confirmed: still on the login form with no "
            "error shown. Please verify manually in the browser."
        )


@dataclass(frozen=True)
class CredentialsRequired(LoginOutcome):
    """No saved session could be restored and no credentials were given."""

    state: ClassVar[SessionState] = SessionState.SESSION_CHECK
    error: ClassVar[Optional[Type[LinkedInAutomationError]]] = CredentialsRequiredError

    @property
    def message(self) -> str:
        return (
            "Email and password required. Set LINKEDIN_EMAIL and "
            "LINKEDIN_PASSWORD environment variables or pass them as arguments."
        )


@dataclass(frozen=True)
class LoginError(LoginOutcome):
    """A navigation or timeout fault interrupted the login flow."""

    state: ClassVar[SessionState] = SessionState.INDETERMINATE

    reason: str = ""
    fault: Type[LinkedInAutomationError] = NavigationError

    @property
    def message(self) -> str:
        return f"Login error: {self.reason}"

    def to_error(self) -> LinkedInAutomationError:
        return self.fault(self.message)


def classify_post_submit(
    url: str,
    error_text: Optional[str],
    markers: MarkerRegistry,
) -> LoginOutcome:
    """
    Decide the terminal login state from where the browser landed.

    Args:
        url: Page URL after submission settled
        error_text: Text of the login error element, if one is shown
        markers: Structural marker registry (URL patterns)

    Returns:
        LoginOutcome variant
    """
    if is_checkpoint_url(url, markers):
        return CheckpointRequired(url=url)
    if is_authenticated_url(url, markers):
        return Authenticated()
    if error_text and error_text.strip():
        return CredentialRejected(reason=" ".join(error_text.split()))
    if is_login_form_url(url, markers):
        return Indeterminate(url=url)
    return Authenticated(verified=False, url=url)


# =============================================================================
# Session manager
# =============================================================================

class LinkedInSession:
    """
    Owns one controlled browsing surface and its authentication state.

    Features:
    - Idempotent lazy initialization of a persistent browser profile
    - Session restore from saved cookies before touching the login form
    - Per-character credential entry with randomized pacing
    - Explicit terminal states for checkpoints, rejections and ambiguity
    - Cleanup that is safe to call at any time
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        browser_config: Optional[BrowserConfig] = None,
        cookie_store: Optional[CookieStore] = None,
        pacer: Optional[Pacer] = None,
        markers: Optional[MarkerRegistry] = None,
        launcher: Optional[BrowserLauncher] = None,
        post_submit_timeout_ms: int = POST_SUBMIT_TIMEOUT_MS,
    ):
        """
        Initialize the session manager. No browser is started until initialize().

        Args:
            config: Application configuration (paths, pacing, headless)
            browser_config: Browser settings; derived from config if omitted
            cookie_store: Persistent session store; defaults to config.cookies_path
            pacer: Delay source; defaults to config pacing multiplier and profile
            markers: Structural markers; defaults to config.markers_path overrides
            launcher: Browser launcher; defaults to PlaywrightLauncher
            post_submit_timeout_ms: Shared deadline for the post-submit signals
        """
        self.config = config or Config()
        self.browser_config = browser_config or BrowserConfig.from_config(self.config)
        self.cookie_store = cookie_store or CookieStore(self.config.cookies_path)
        self.pacer = pacer or create_pacer(
            self.config.pacing_multiplier, self.config.timing_profile
        )
        self.markers = markers or MarkerRegistry.from_yaml(self.config.markers_path)
        self.simulator = HumanSimulator(self.pacer)
        self._launcher = launcher or PlaywrightLauncher()
        self.post_submit_timeout_ms = post_submit_timeout_ms

        self._context = None
        self._page = None
        self._state = SessionState.UNINITIALIZED
        self._authenticated = False
        self._last_authenticated_at: Optional[datetime] = None
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> "LinkedInSession":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._context is not None

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated and self._page is not None

    @property
    def last_authenticated_at(self) -> Optional[datetime]:
        return self._last_authenticated_at

    @property
    def page(self):
        """The active page. Raises RuntimeError before initialize()."""
        if self._page is None:
            raise RuntimeError("Session is not initialized. Call initialize() first.")
        return self._page

    def require_authenticated(self):
        """
        Get the page of an authenticated session.

        Raises:
            NotAuthenticatedError: If login has not succeeded
        """
        if not self.is_authenticated:
            raise NotAuthenticatedError()
        return self._page

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Start the browsing surface once and load the saved session into it.

        Creates the persistent profile directory if absent. Calling it again
        after success is a no-op.
        """
        async with self._init_lock:
            if self._context is not None:
                return

            self._state = SessionState.INITIALIZING
            user_data_dir = self.config.user_data_dir
            user_data_dir.mkdir(parents=True, exist_ok=True)

            try:
                context = await self._launcher.launch(user_data_dir, self.browser_config)
                page = context.pages[0] if context.pages else await context.new_page()
            except BaseException:
                self._state = SessionState.UNINITIALIZED
                await self._launcher.close()
                raise

            self._context = context
            self._page = page
            await self._load_saved_session()

            self._state = SessionState.SESSION_CHECK
            logger.info("Browser session initialized")

    async def _load_saved_session(self) -> None:
        cookies = self.cookie_store.load()
        if not cookies:
            return
        try:
            await self._context.add_cookies(cookies)
            logger.info(f"Loaded {len(cookies)} saved cookies into browser")
        except PlaywrightError as e:
            # Unusable saved session: continue as a cold start
            logger.warning(f"Failed to load saved cookies: {e}")

    async def save_session(self) -> None:
        """Persist the current cookie snapshot. Failures are logged, not raised."""
        if self._context is None:
            return
        try:
            cookies = await self._context.cookies()
            self.cookie_store.save(cookies)
        except (PlaywrightError, OSError) as e:
            logger.warning(f"Failed to save cookies: {e}")

    async def cleanup(self) -> None:
        """
        Release the browsing surface and reset to UNINITIALIZED.

        Safe to call when never initialized, twice, or from outside the
        flow of an in-progress operation. Never raises.
        """
        had_browser = self._context is not None
        try:
            await self._launcher.close()
        except Exception as e:
            logger.warning(f"Error during browser cleanup: {e}")
        finally:
            self._context = None
            self._page = None
            self._authenticated = False
            self._state = SessionState.UNINITIALIZED

        if had_browser:
            logger.info("Browser session closed")

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def navigate(self, url: str, timeout: int = NAVIGATION_TIMEOUT_MS):
        """
        Navigate the page with pacing, converting faults to NavigationError.

        Raises:
            NavigationTimeoutError: If the page did not load in time
            NavigationError: If the page could not be loaded
        """
        page = self.page
        await self.pacer.delay(*PRE_NAVIGATION_DELAY, reason="before navigation")
        logger.info(f"Navigating to {url}")
        try:
            return await page.goto(
                url, wait_until=self.browser_config.wait_until, timeout=timeout
            )
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(f"Timed out loading {url}", url=url) from e
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {url}: {e}", url=url) from e

    # -------------------------------------------------------------------------
    # Login state machine
    # -------------------------------------------------------------------------

    async def authenticate(self, credentials: Optional[Credentials] = None) -> LoginOutcome:
        """
        Establish an authenticated session.

        Tries the saved session first; credentials are only consumed when the
        authenticated landing page redirects away. Never raises for
        navigation, timeout or browser faults.

        Args:
            credentials: Login credentials, or None to attempt restore only

        Returns:
            LoginOutcome variant
        """
        try:
            await self.initialize()

            outcome = await self._try_restore()
            if outcome is None:
                if credentials is None:
                    outcome = CredentialsRequired()
                else:
                    outcome = await self._submit_credentials(credentials)
        except LinkedInAutomationError as e:
            logger.error(f"Login failed with error: {e}")
            outcome = LoginError(reason=str(e), fault=type(e))
        except PlaywrightTimeoutError as e:
            logger.error(f"Login timed out: {e}")
            outcome = LoginError(reason=str(e), fault=NavigationTimeoutError)
        except (PlaywrightError, OSError) as e:
            logger.error(f"Login failed with error: {e}")
            outcome = LoginError(reason=str(e))

        await self._apply_outcome(outcome)
        return outcome

    async def _try_restore(self) -> Optional[LoginOutcome]:
        self._state = SessionState.SESSION_CHECK
        await self.navigate(FEED_URL)

        if is_authenticated_url(self.page.url, self.markers):
            logger.info("Already logged in (session restored)")
            return Authenticated(restored=True)

        logger.info(f"Saved session not accepted (landed on {self.page.url})")
        return None

    async def _submit_credentials(self, credentials: Credentials) -> LoginOutcome:
        page = self.page
        markers = self.markers

        self._state = SessionState.AT_CREDENTIAL_FORM
        await self.navigate(LOGIN_URL)
        await self.pacer.delay(*PRE_TYPE_DELAY, reason="before typing")

        username_selector = markers.group("login.username")
        password_selector = markers.group("login.password")
        try:
            await page.wait_for_selector(
                username_selector, state="visible", timeout=LOGIN_FORM_TIMEOUT_MS
            )
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(
                "Login form did not become interactive in time", url=page.url
            ) from e

        if not await self.simulator.type_text(page, username_selector, credentials.identifier):
            raise NavigationError("Login identifier field not found", url=page.url)
        await self.pacer.delay(*BETWEEN_FIELDS_DELAY, reason="between fields")

        if not await self.simulator.type_text(
            page, password_selector, credentials.secret, mask_in_logs=True
        ):
            raise NavigationError("Login password field not found", url=page.url)
        await self.pacer.delay(*PRE_SUBMIT_DELAY, reason="before submit")

        self._state = SessionState.SUBMITTING
        # Armed before the click: navigation can complete inside click()
        waiters = await self._start_post_submit_waiters()
        try:
            if not await self.simulator.click_element(page, markers.group("login.submit")):
                raise NavigationError("Login submit button not found", url=page.url)
            signal = await self._await_post_submit_signal(waiters)
        finally:
            await self._cancel_waiters(waiters)
        logger.debug(f"Post-submit signal: {signal or 'none (timed out)'}")

        await self.pacer.delay(*POST_SUBMIT_DELAY, reason="after submit")

        url = page.url
        error_text = await self._read_login_error()
        outcome = classify_post_submit(url, error_text, markers)
        logger.info(f"Login outcome: {type(outcome).__name__} (url={url})")
        return outcome

    async def _start_post_submit_waiters(self) -> Dict[asyncio.Future, str]:
        """Start the navigation, authenticated-marker and checkpoint-marker waits."""
        page = self.page
        timeout = self.post_submit_timeout_ms
        main_frame = page.main_frame

        waiters = {
            asyncio.ensure_future(page.wait_for_event(
                "framenavigated",
                predicate=lambda frame: frame == main_frame,
                timeout=timeout,
            )): "navigation",
            asyncio.ensure_future(page.wait_for_selector(
                self.markers.group("auth.marker"), timeout=timeout
            )): "authenticated_marker",
            asyncio.ensure_future(page.wait_for_selector(
                self.markers.group("checkpoint.marker"), timeout=timeout
            )): "checkpoint_marker",
        }
        # Let each wait register its listener before returning
        await asyncio.sleep(0)
        return waiters

    @staticmethod
    async def _cancel_waiters(waiters: Dict[asyncio.Future, str]) -> None:
        for task in waiters:
            task.cancel()
        await asyncio.gather(*waiters, return_exceptions=True)

    async def _await_post_submit_signal(self, waiters: Dict[asyncio.Future, str]) -> Optional[str]:
        """
        Race the post-submit waiters under one shared deadline.

        Returns:
            Name of the first signal that resolved, or None on timeout.
            A timeout is not a failure: the URL is inspected either way.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.post_submit_timeout_ms / 1000.0
        pending = set(waiters)
        winner = None

        while pending and winner is None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            done, pending = await asyncio.wait(
                pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
            for task in done:
                if not task.cancelled() and task.exception() is None:
                    winner = waiters[task]
                    break

        return winner

    async def _read_login_error(self) -> Optional[str]:
        for selector in self.markers.get("login.error"):
            try:
                element = await self._page.query_selector(selector)
                if element:
                    text = await element.text_content()
                    if text and text.strip():
                        return text.strip()
            except PlaywrightError as e:
                logger.debug(f"Could not read login error {selector}: {e}")
        return None

    async def _apply_outcome(self, outcome: LoginOutcome) -> None:
        if isinstance(outcome, Authenticated):
            self._authenticated = True
            self._last_authenticated_at = datetime.now()
            self._state = SessionState.AUTHENTICATED
            if outcome.verified:
                await self.save_session()
            return

        self._authenticated = False
        if self._context is None:
            self._state = SessionState.UNINITIALIZED
        else:
            self._state = outcome.state
