"""
Utilities Package.

Provides the persistent cookie store, checkpoint detection and
human-like interaction simulation.
"""

from .challenge_handler import (
    detect_checkpoint,
    is_checkpoint_url,
    is_authenticated_url,
    is_login_form_url,
    get_checkpoint_instructions,
)

from .human_simulator import (
    HumanSimulator,
    HumanSimulatorConfig,
)

from .cookie_store import (
    CookieStore,
    normalize_cookie,
)

__all__ = [
    # Checkpoint handling
    "detect_checkpoint",
    "is_checkpoint_url",
    "is_authenticated_url",
    "is_login_form_url",
    "get_checkpoint_instructions",
    # Human-like simulation
    "HumanSimulator",
    "HumanSimulatorConfig",
    # Session persistence
    "CookieStore",
    "normalize_cookie",
]
