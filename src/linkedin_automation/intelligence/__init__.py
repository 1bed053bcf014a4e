"""
Site Intelligence Package.

Keeps the fragile, version-specific knowledge of the target's markup
(selectors and URL patterns) in one overridable registry.
"""

from .selector_library import MarkerRegistry, DEFAULT_MARKERS, default_markers

__all__ = [
    "MarkerRegistry",
    "DEFAULT_MARKERS",
    "default_markers",
]
