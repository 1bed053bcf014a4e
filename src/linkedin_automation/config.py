from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import os

from .infrastructure.timing_evasion import TimingProfile

load_dotenv()  # Loads variables from .env file


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")


settings = Settings()


@dataclass
class Config:
    """Configuration for LinkedIn automation."""
    # Persistent browser profile directory (created on first launch)
    user_data_dir: Path = Path(".linkedin-browser-data")
    # Cookie file written after a successful login
    cookies_path: Path = Path(".linkedin-cookies.json")
    headless: bool = False
    # Scales every randomized delay; 0 disables pacing
    pacing_multiplier: float = 1.0
    # Optional preset (fast, normal, slow, cautious) scaling the multiplier
    timing_profile: Optional[TimingProfile] = None
    slow_mo_ms: int = 100
    # Optional YAML file overriding structural markers
    markers_path: Optional[Path] = None
    log_level: str = "INFO"

    def __post_init__(self):
        self.user_data_dir = Path(self.user_data_dir).expanduser()
        self.cookies_path = Path(self.cookies_path).expanduser()
        if self.markers_path is not None:
            self.markers_path = Path(self.markers_path).expanduser()
        if self.timing_profile is not None:
            self.timing_profile = TimingProfile(self.timing_profile)
        if self.pacing_multiplier < 0:
            raise ValueError("pacing_multiplier must be >= 0")

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance with values from environment
        """
        markers_path = os.getenv("LINKEDIN_MARKERS_PATH")
        return cls(
            user_data_dir=Path(os.getenv("LINKEDIN_USER_DATA_DIR", ".linkedin-browser-data")),
            cookies_path=Path(os.getenv("LINKEDIN_COOKIES_PATH", ".linkedin-cookies.json")),
            headless=_env_bool("LINKEDIN_HEADLESS", False),
            pacing_multiplier=float(os.getenv("LINKEDIN_PACING_MULTIPLIER", "1.0")),
            timing_profile=os.getenv("LINKEDIN_TIMING_PROFILE") or None,
            slow_mo_ms=int(os.getenv("LINKEDIN_SLOW_MO_MS", "100")),
            markers_path=Path(markers_path) if markers_path else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
