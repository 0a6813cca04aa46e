"""
Web search pipeline.

query -> variants -> search (parallel) -> crawl every hit (parallel)
      -> aggregate -> report

One browsing engine is launched per invocation and shared by every session
of both stages. It is released exactly once, after both stages have joined,
whether the search succeeded or not.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from apps.tools.web_search.aggregator import aggregate, format_report
from apps.tools.web_search.browser import BrowsingEngine, launch_engine, release_engine
from apps.tools.web_search.models import BasicResult, EnrichedResult
from apps.tools.web_search.observability import MetricsCollector, get_collector
from apps.tools.web_search.page_crawler import PageCrawler
from apps.tools.web_search.query_planner import generate_queries
from apps.tools.web_search.search_engine import SearchEngineClient
from libs.core.config import Settings, get_settings
from libs.core.exceptions import SearchEngineError

logger = logging.getLogger(__name__)

EngineFactory = Callable[[], Awaitable[BrowsingEngine]]


@dataclass
class PipelineResult:
    """Everything one invocation produced."""
    query: str
    variants: List[str]
    results: List[EnrichedResult] = field(default_factory=list)
    candidates: int = 0
    degraded: int = 0
    elapsed_seconds: float = 0.0

    @property
    def report(self) -> str:
        return format_report(self.query, self.results)


class SearchPipeline:
    """Orchestrates one web search over a shared browsing engine."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine_factory: Optional[EngineFactory] = None,
        collector: Optional[MetricsCollector] = None,
    ):
        self.settings = settings or get_settings()
        self.engine_factory = engine_factory or (lambda: launch_engine(self.settings.browser))
        self.collector = collector or get_collector()

    async def search(self, query: str) -> str:
        """Run the pipeline and return the rendered report."""
        result = await self.run(query)
        return result.report

    async def run(self, query: str) -> PipelineResult:
        """
        Run the pipeline for query.

        Raises:
            MissingParameterError: query is empty (nothing is launched)
            SearchEngineError: any variant's search failed
        """
        search_settings = self.settings.search
        variants = generate_queries(
            query,
            keywords=search_settings.recency_keywords,
            suffixes=search_settings.recency_suffixes,
        )
        logger.info(f"[WebSearch] Query variants: {variants}")

        started = time.monotonic()
        engine = await self.engine_factory()
        try:
            basic_groups = await self._search_variants(engine, variants)
            enriched_groups = await self._crawl_results(engine, basic_groups)
        finally:
            await release_engine(engine)

        results = aggregate(enriched_groups, top_n=search_settings.top_n)
        all_enriched = [r for group in enriched_groups for r in group]
        pipeline_result = PipelineResult(
            query=query,
            variants=variants,
            results=results,
            candidates=len(all_enriched),
            degraded=sum(1 for r in all_enriched if r.degraded),
            elapsed_seconds=time.monotonic() - started,
        )
        logger.info(
            f"[WebSearch] Done: {pipeline_result.candidates} pages crawled "
            f"({pipeline_result.degraded} degraded), {len(results)} results kept "
            f"in {pipeline_result.elapsed_seconds:.1f}s"
        )
        return pipeline_result

    async def _search_variants(
        self, engine: BrowsingEngine, variants: List[str]
    ) -> List[List[BasicResult]]:
        """Stage A: every variant concurrently; any failure is fatal."""
        client = SearchEngineClient(engine, self.settings.search, self.settings.browser)
        outcomes = await asyncio.gather(
            *(self._timed_search(client, variant) for variant in variants),
            return_exceptions=True,
        )

        # Everything has joined; the first failure in variant order wins
        for variant, outcome in zip(variants, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(f"[WebSearch] Search failed for '{variant}': {outcome}")
                raise SearchEngineError(variant, str(outcome) or type(outcome).__name__) from outcome
        return list(outcomes)

    async def _timed_search(self, client: SearchEngineClient, variant: str) -> List[BasicResult]:
        started = time.monotonic()
        try:
            results = await client.search(variant)
        except Exception as e:
            duration_ms = int((time.monotonic() - started) * 1000)
            self.collector.record_search(variant, False, duration_ms, error=str(e))
            raise
        duration_ms = int((time.monotonic() - started) * 1000)
        self.collector.record_search(variant, True, duration_ms, result_count=len(results))
        return results

    async def _crawl_results(
        self, engine: BrowsingEngine, basic_groups: List[List[BasicResult]]
    ) -> List[List[EnrichedResult]]:
        """Stage B: every hit of every variant concurrently; never fails."""
        crawler = PageCrawler(
            engine,
            self.settings.browser,
            score_step=self.settings.search.score_step,
            collector=self.collector,
        )
        tasks = [
            crawler.crawl(result, position)
            for group in basic_groups
            for position, result in enumerate(group)
        ]
        logger.info(f"[WebSearch] Crawling {len(tasks)} result pages")
        enriched = await asyncio.gather(*tasks)

        # Regroup by variant, preserving order
        groups = []
        offset = 0
        for group in basic_groups:
            groups.append(list(enriched[offset:offset + len(group)]))
            offset += len(group)
        return groups
