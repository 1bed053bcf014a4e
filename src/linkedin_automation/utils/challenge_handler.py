"""
Checkpoint/challenge detection and post-login URL classification.

LinkedIn interrupts automated logins with security checkpoints (email PIN,
CAPTCHA, app approval) that cannot be completed unattended. These helpers
classify the URL the browser lands on so the login state machine can decide
its terminal state, and build the instructions shown to the operator.
"""
import logging
from typing import Optional
from urllib.parse import urlparse

from ..intelligence.selector_library import MarkerRegistry, default_markers

logger = logging.getLogger(__name__)


def _matches(url: str, patterns) -> Optional[str]:
    lowered = (url or "").lower()
    for pattern in patterns:
        if pattern.lower() in lowered:
            return pattern
    return None


def _path(url: str) -> str:
    try:
        return urlparse(url or "").path.lower()
    except ValueError:
        return (url or "").lower()


def is_login_form_url(url: str, markers: MarkerRegistry = default_markers) -> bool:
    """Check if the URL is the credential form (or its failed-submit page)."""
    return _matches(_path(url), markers.get("url.login_form")) is not None


def detect_checkpoint(url: str, markers: MarkerRegistry = default_markers) -> Optional[str]:
    """
    Detect a checkpoint/challenge URL.

    The failed-submit page (/checkpoint/lg/login-submit) is a credential
    form, not a challenge.

    Args:
        url: Current page URL

    Returns:
        Name of the matched pattern, or None
    """
    if is_login_form_url(url, markers):
        return None
    pattern = _matches(url, markers.get("url.checkpoint"))
    if pattern:
        return f"url_pattern:{pattern}"
    return None


def is_checkpoint_url(url: str, markers: MarkerRegistry = default_markers) -> bool:
    """Check if current URL is a checkpoint/challenge."""
    return detect_checkpoint(url, markers) is not None


def is_authenticated_url(url: str, markers: MarkerRegistry = default_markers) -> bool:
    """Check if the URL belongs to the authenticated area."""
    return _matches(_path(url), markers.get("url.authenticated")) is not None


def get_checkpoint_instructions(url: Optional[str] = None) -> str:
    """
    Operator instructions for resolving a checkpoint out of band.

    Args:
        url: Checkpoint URL, if known

    Returns:
        Human-readable message
    """
    message = (
        "Security checkpoint detected. LinkedIn requires manual verification. "
        "Complete the verification in the browser window (or log in manually "
        "once with the same profile), then call login again: the saved session "
        "will be restored."
    )
    if url:
        message += f" Checkpoint URL: {url}"
    return message
