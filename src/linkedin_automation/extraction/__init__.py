"""
Extraction Pipeline.

Search result parsing and the three-strategy job detail chain.
"""

from .search import (
    JobSearcher,
    build_search_url,
    normalize_job_link,
    parse_listing,
    parse_search_results,
)

from .detail import (
    JobDetailExtractor,
    extract_by_heuristics,
    extract_from_document,
    extract_from_payload,
    run_strategy_chain,
)

from .payload import (
    parse_job_id,
    is_job_posting_response,
    format_count,
)

from .text import truncate

__all__ = [
    # Search
    "JobSearcher",
    "build_search_url",
    "normalize_job_link",
    "parse_listing",
    "parse_search_results",
    # Detail
    "JobDetailExtractor",
    "extract_by_heuristics",
    "extract_from_document",
    "extract_from_payload",
    "run_strategy_chain",
    # Structured payload
    "parse_job_id",
    "is_job_posting_response",
    "format_count",
    # Text
    "truncate",
]
