"""
Persistent session store.

Keeps the authenticated session's cookies across process restarts as a
pretty-printed JSON array of cookie records:

    [{"name": "li_at", "value": "...", "domain": ".linkedin.com",
      "path": "/", "expires": 1767225600, "httpOnly": true, ...}]

Reads are permissive (a missing or corrupt file means "no session"), writes
are atomic (a temp file in the same directory replaced over the target).

Usage:
    from linkedin_automation.utils.cookie_store import CookieStore

    store = CookieStore(".linkedin-cookies.json")
    await context.add_cookies(store.load())
    ...
    store.save(await context.cookies())
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Keys Playwright's BrowserContext.add_cookies() accepts
_COOKIE_KEYS = ("name", "value", "domain", "path", "expires", "httpOnly", "secure", "sameSite")

_SAME_SITE = {
    "strict": "Strict",
    "lax": "Lax",
    "none": "None",
    "no_restriction": "None",
}


def normalize_cookie(cookie: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Reduce a stored cookie record to what add_cookies() accepts.

    Returns:
        Normalized cookie, or None if it lacks a name, value or domain
    """
    if not isinstance(cookie, dict):
        return None
    if not cookie.get("name") or "value" not in cookie or not cookie.get("domain"):
        return None

    normalized = {key: cookie[key] for key in _COOKIE_KEYS if key in cookie}
    normalized.setdefault("path", "/")

    expires = normalized.get("expires")
    if expires is None or not isinstance(expires, (int, float)) or (expires <= 0 and expires != -1):
        normalized["expires"] = -1

    same_site = normalized.pop("sameSite", None)
    if isinstance(same_site, str) and same_site.lower() in _SAME_SITE:
        normalized["sameSite"] = _SAME_SITE[same_site.lower()]

    return normalized


class CookieStore:
    """
    File-backed cookie persistence for one account.

    Features:
    - Permissive load (absence or parse failure -> empty)
    - Atomic, pretty-printed save
    - Cookie normalization for Playwright
    """

    def __init__(self, path: Path):
        """
        Initialize cookie store.

        Args:
            path: JSON file holding the cookie array
        """
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if a saved session file exists."""
        return self.path.exists()

    def load(self) -> List[Dict[str, Any]]:
        """
        Load saved cookies.

        Returns:
            Normalized cookies, or [] if none could be read
        """
        if not self.path.exists():
            logger.debug(f"No saved cookies at {self.path}")
            return []

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load cookies from {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Ignoring cookie file {self.path}: expected a JSON array")
            return []

        cookies = [c for c in (normalize_cookie(item) for item in data) if c is not None]
        if len(cookies) < len(data):
            logger.debug(f"Dropped {len(data) - len(cookies)} malformed cookie records")

        logger.info(f"Loaded {len(cookies)} saved cookies")
        return cookies

    def save(self, cookies: List[Dict[str, Any]]) -> int:
        """
        Persist a cookie snapshot atomically.

        Args:
            cookies: Cookies as returned by BrowserContext.cookies()

        Returns:
            Number of cookies written
        """
        snapshot = list(cookies)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(snapshot, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Saved {len(snapshot)} cookies to {self.path}")
        return len(snapshot)
