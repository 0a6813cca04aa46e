"""
Query variant planning.

Expands one user query into the ordered list of queries to run against the
search engine. Queries asking for fresh information get time-scoped variants.
"""

from typing import List, Optional, Sequence

from libs.core.exceptions import MissingParameterError

DEFAULT_RECENCY_KEYWORDS = ("latest", "recent", "new")
DEFAULT_RECENCY_SUFFIXES = ("last 24 hours", "today")


def wants_recent_results(query: str, keywords: Sequence[str] = DEFAULT_RECENCY_KEYWORDS) -> bool:
    """Case-insensitive substring check ("news" counts as "new")."""
    lowered = query.lower()
    return any(keyword in lowered for keyword in keywords)


def generate_queries(
    base_query: str,
    keywords: Optional[Sequence[str]] = None,
    suffixes: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Build the query variants for a search.

    The first variant is always base_query unchanged. Recency queries get
    one extra variant per suffix, in order.

    Raises:
        MissingParameterError: if base_query is empty or blank
    """
    if not base_query or not base_query.strip():
        raise MissingParameterError("web_search", "query")

    keywords = DEFAULT_RECENCY_KEYWORDS if keywords is None else keywords
    suffixes = DEFAULT_RECENCY_SUFFIXES if suffixes is None else suffixes

    queries = [base_query]
    if wants_recent_results(base_query, keywords):
        queries.extend(f"{base_query} {suffix}" for suffix in suffixes)
    return queries
