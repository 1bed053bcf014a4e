"""
Structural Marker Registry.

Every selector and URL pattern used against the target site lives here,
grouped by purpose with ordered fallbacks (first entry = preferred marker).
The target's markup changes often; overrides can be loaded from a YAML file
without touching pipeline logic:

    detail.description:
      - "#job-details"
      - ".jobs-description__content"
"""

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


DEFAULT_MARKERS: Dict[str, List[str]] = {
    # --- Login form ---
    "login.username": ["#username"],
    "login.password": ["#password"],
    "login.submit": ['button[type="submit"]'],
    "login.error": [
        "#error-for-password",
        "#error-for-username",
        ".alert-content",
    ],

    # --- Post-submit signals ---
    "auth.marker": [
        "#global-nav",
        "nav.global-nav",
        ".feed-identity-module",
    ],
    "checkpoint.marker": [
        "#captcha-internal",
        "form#email-pin-challenge",
        "#input__email_verification_pin",
        "iframe[src*='challenge']",
    ],

    # --- URL patterns (substring match, lowercase) ---
    "url.authenticated": ["/feed/", "/mynetwork/"],
    "url.checkpoint": ["checkpoint", "challenge"],
    "url.login_form": ["/login", "/uas/login", "/checkpoint/lg/login"],

    # --- Search results (primary layout first, legacy layout second) ---
    "search.container": [
        ".scaffold-layout__list",
        ".jobs-search__results-list",
    ],
    "search.card": [
        ".job-card-container",
        ".jobs-search-results__list-item",
        "li[data-occludable-job-id]",
        ".base-card",
    ],
    "search.card_title": [
        ".job-card-list__title",
        ".job-card-list__title--link",
        ".job-card-container__link",
        ".base-search-card__title",
    ],
    "search.card_link": [
        "a.job-card-list__title",
        "a.job-card-list__title--link",
        "a.job-card-container__link",
        "a.base-card__full-link",
        "a[href*='/jobs/view/']",
    ],
    "search.card_company": [
        ".job-card-container__primary-description",
        ".job-card-container__company-name",
        ".artdeco-entity-lockup__subtitle",
        ".base-search-card__subtitle",
    ],
    "search.card_location": [
        ".job-card-container__metadata-item",
        ".job-search-card__location",
        ".artdeco-entity-lockup__caption",
    ],
    "search.card_time": ["time"],

    # --- Job detail page ---
    "detail.title": [
        ".job-details-jobs-unified-top-card__job-title",
        ".jobs-unified-top-card__job-title",
        ".top-card-layout__title",
        "h1",
    ],
    "detail.company": [
        ".job-details-jobs-unified-top-card__company-name",
        ".jobs-unified-top-card__company-name",
        ".topcard__org-name-link",
    ],
    "detail.location": [
        ".job-details-jobs-unified-top-card__primary-description-container .tvm__text",
        ".job-details-jobs-unified-top-card__bullet",
        ".jobs-unified-top-card__bullet",
        ".topcard__flavor--bullet",
    ],
    "detail.preferences": [
        ".job-details-fit-level-preferences button",
        ".job-details-preferences-and-skills__pill",
        ".job-details-jobs-unified-top-card__job-insight",
    ],
    "detail.description": [
        "#job-details",
        ".jobs-description__content",
        ".jobs-description-content__text",
        ".show-more-less-html__markup",
    ],
    "detail.company_box": [".jobs-company__box"],
    "detail.company_name": [
        ".artdeco-entity-lockup__title",
        ".jobs-company__name",
    ],
    "detail.company_followers": [".artdeco-entity-lockup__subtitle"],
    "detail.company_info": [
        ".jobs-company__inline-information",
        ".t-14.mt5",
    ],
    "detail.company_description": [
        ".jobs-company__company-description",
        ".jobs-company__company-description-text",
    ],
    "detail.expandable_text": ['[data-testid="expandable-text-box"]'],
    "detail.paragraph_text": [
        'p[dir="ltr"]',
        'span[dir="ltr"]',
        'div[dir="ltr"]',
    ],
}


class MarkerRegistry:
    """
    Registry of structural markers keyed by purpose.

    Provides:
    - Ordered fallback selectors per purpose
    - Combined CSS selector groups for "any of" waits
    - YAML overrides for when the target markup changes
    """

    def __init__(self, overrides: Optional[Dict[str, List[str]]] = None):
        """
        Initialize the registry.

        Args:
            overrides: purpose -> selectors replacing the defaults
        """
        self._markers: Dict[str, List[str]] = deepcopy(DEFAULT_MARKERS)
        for purpose, selectors in (overrides or {}).items():
            self.update(purpose, selectors)

    @classmethod
    def from_yaml(cls, path: Optional[Path]) -> "MarkerRegistry":
        """
        Load overrides from a YAML mapping of purpose -> list of selectors.

        A missing or unreadable file yields the default registry.
        """
        if path is None or not Path(path).exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("expected a mapping of purpose -> selectors")
            overrides = data.get("markers", data)
            registry = cls(overrides)
            logger.info(f"Loaded {len(overrides)} marker overrides from {path}")
            return registry
        except Exception as e:
            logger.warning(f"Could not load marker overrides from {path}: {e}")
            return cls()

    def update(self, purpose: str, selectors: Any) -> None:
        """Replace the selectors for a purpose."""
        if isinstance(selectors, str):
            selectors = [selectors]
        cleaned = [str(s).strip() for s in selectors or [] if str(s).strip()]
        if not cleaned:
            raise ValueError(f"No selectors given for marker {purpose!r}")
        self._markers[purpose] = cleaned

    def get(self, purpose: str) -> List[str]:
        """
        Get ordered fallback selectors for a purpose.

        Raises:
            KeyError: If the purpose is unknown
        """
        if purpose not in self._markers:
            raise KeyError(f"Unknown structural marker: {purpose}")
        return list(self._markers[purpose])

    def first(self, purpose: str) -> str:
        """Preferred selector for a purpose."""
        return self.get(purpose)[0]

    def group(self, purpose: str) -> str:
        """All fallbacks joined into one CSS selector group."""
        return ", ".join(self.get(purpose))

    def purposes(self) -> List[str]:
        return sorted(self._markers)

    def to_dict(self) -> Dict[str, List[str]]:
        return deepcopy(self._markers)


default_markers = MarkerRegistry()
