"""
Observability for web search.

Lightweight in-memory metrics for search and page crawl calls. Page crawl
failures are reported here instead of being raised.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional


@dataclass
class SearchMetrics:
    """Metrics for a single search engine query"""
    query: str
    success: bool
    duration_ms: int
    result_count: int = 0
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CrawlMetrics:
    """Metrics for a single page crawl"""
    url: str
    success: bool
    duration_ms: int
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


class MetricsCollector:
    """In-memory metrics aggregator"""

    def __init__(self, retention_hours: int = 24):
        self.retention_hours = retention_hours
        self.searches: List[SearchMetrics] = []
        self.crawls: List[CrawlMetrics] = []

    def record_search(
        self,
        query: str,
        success: bool,
        duration_ms: int,
        result_count: int = 0,
        error: Optional[str] = None,
    ):
        """Record a search engine query"""
        self.searches.append(SearchMetrics(
            query=query,
            success=success,
            duration_ms=duration_ms,
            result_count=result_count,
            error=error,
        ))
        self._cleanup_old_metrics()

    def record_page_crawl(
        self,
        url: str,
        success: bool,
        duration_ms: int,
        error: Optional[str] = None,
    ):
        """Record a page crawl"""
        self.crawls.append(CrawlMetrics(
            url=url,
            success=success,
            duration_ms=duration_ms,
            error=error,
        ))
        self._cleanup_old_metrics()

    def get_crawl_stats(self, hours: int = 24) -> Dict[str, Any]:
        """Get aggregated page crawl statistics"""
        cutoff = datetime.now() - timedelta(hours=hours)
        recent = [c for c in self.crawls if c.timestamp >= cutoff]
        if not recent:
            return {"total_crawls": 0, "failed_crawls": 0, "error_rate": 0.0, "recent_errors": []}

        failed = [c for c in recent if not c.success]
        durations = sorted(c.duration_ms for c in recent)
        p95 = durations[min(int(len(durations) * 0.95), len(durations) - 1)]

        return {
            "total_crawls": len(recent),
            "failed_crawls": len(failed),
            "error_rate": len(failed) / len(recent),
            "avg_duration_ms": sum(durations) / len(durations),
            "p95_duration_ms": p95,
            "recent_errors": [f"{c.url}: {c.error}" for c in failed[-5:] if c.error],
        }

    def get_search_stats(self, hours: int = 24) -> Dict[str, Any]:
        """Get aggregated search statistics"""
        cutoff = datetime.now() - timedelta(hours=hours)
        recent = [s for s in self.searches if s.timestamp >= cutoff]
        if not recent:
            return {}

        return {
            "total_searches": len(recent),
            "failed_searches": sum(1 for s in recent if not s.success),
            "avg_duration_ms": sum(s.duration_ms for s in recent) / len(recent),
            "avg_result_count": sum(s.result_count for s in recent) / len(recent),
        }

    def _cleanup_old_metrics(self):
        """Remove metrics older than retention window"""
        cutoff = datetime.now() - timedelta(hours=self.retention_hours)
        self.searches = [s for s in self.searches if s.timestamp >= cutoff]
        self.crawls = [c for c in self.crawls if c.timestamp >= cutoff]


# Global collector instance
_collector = MetricsCollector()


def get_collector() -> MetricsCollector:
    """Get global metrics collector"""
    return _collector
