"""
Web Search Tool - Concurrent Search and Page Analysis

1. Expand the query into variants (recency queries get time-scoped ones)
2. Search every variant in parallel through a headless browser
3. Visit every result page in parallel and analyze it
4. Deduplicate by URL, rank by position, keep the top results
5. Render a text report for the host
"""

from .aggregator import aggregate, format_report
from .host import ConsoleHost, ToolHost, ToolUse
from .models import BasicResult, Degraded, EnrichedResult, Extracted
from .page_crawler import PageCrawler
from .pipeline import PipelineResult, SearchPipeline
from .query_planner import generate_queries
from .search_engine import SearchEngineClient
from .tool import ToolOutcome, web_search_tool

__all__ = [
    "web_search_tool",
    "SearchPipeline",
    "PipelineResult",
    "SearchEngineClient",
    "PageCrawler",
    "generate_queries",
    "aggregate",
    "format_report",
    "ToolHost",
    "ToolUse",
    "ToolOutcome",
    "ConsoleHost",
    "BasicResult",
    "EnrichedResult",
    "Extracted",
    "Degraded",
]
