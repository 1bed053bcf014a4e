"""
Infrastructure Package.

Provides the controlled browsing surface launcher and the human-behavior
timing model.
"""

from .browser_launcher import (
    BrowserLauncher,
    PlaywrightLauncher,
    STEALTH_SCRIPTS,
    COMBINED_STEALTH_SCRIPT,
)
from .timing_evasion import (
    Pacer,
    TimingConfig,
    TimingProfile,
    PROFILE_MULTIPLIERS,
    create_pacer,
    random_delay,
)

__all__ = [
    # Browser launch
    "BrowserLauncher",
    "PlaywrightLauncher",
    "STEALTH_SCRIPTS",
    "COMBINED_STEALTH_SCRIPT",
    # Timing model
    "Pacer",
    "TimingConfig",
    "TimingProfile",
    "PROFILE_MULTIPLIERS",
    "create_pacer",
    "random_delay",
]
