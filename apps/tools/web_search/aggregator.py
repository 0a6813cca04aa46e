"""
Result aggregation and report rendering.

Merges the per-variant result lists into one ranked, URL-unique top-N list
and renders it as the text report returned to the host.
"""

from typing import Iterable, List, Sequence

from apps.tools.web_search.models import EnrichedResult

DEFAULT_TOP_N = 5
MAX_TOPICS = 3


def aggregate(
    result_groups: Iterable[Sequence[EnrichedResult]],
    top_n: int = DEFAULT_TOP_N,
) -> List[EnrichedResult]:
    """
    Flatten, deduplicate by URL, rank and truncate.

    The first occurrence of a URL wins regardless of later scores. The sort is
    stable, so equal scores keep their flattened order.
    """
    seen_urls = set()
    unique = []
    for group in result_groups:
        for result in group:
            if result.url in seen_urls:
                continue
            seen_urls.add(result.url)
            unique.append(result)

    ranked = sorted(unique, key=lambda r: r.relevance_score, reverse=True)
    return ranked[:top_n]


def format_result(index: int, result: EnrichedResult) -> str:
    """Render one numbered result block."""
    lines = [
        f"{index}. {result.title}",
        f"   URL: {result.url}",
        f"   {result.snippet}",
    ]
    if result.metadata.description:
        lines.append(f"   Description: {result.metadata.description}")
    if result.content.code_snippets:
        lines.append(f"   Code Examples: {len(result.content.code_snippets)} found")
    if result.content.headings:
        lines.append(f"   Main Topics: {', '.join(result.content.headings[:MAX_TOPICS])}")
    return "\n".join(lines) + "\n"


def format_report(query: str, results: Sequence[EnrichedResult]) -> str:
    """Render the full report for query."""
    blocks = "\n".join(format_result(i, r) for i, r in enumerate(results, 1))
    return f'Search Results for "{query}":\n\n{blocks}'
