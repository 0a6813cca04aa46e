"""
Tests for the search pipeline: staging, concurrency, failure policy and
engine lifecycle.
"""

import asyncio

import pytest

from apps.tools.web_search.pipeline import SearchPipeline
from libs.core.exceptions import MissingParameterError, SearchEngineError

from conftest import FakeEngine, FakeSession, page_analysis, serp_entry


@pytest.fixture
def pipeline(settings, engine_factory, collector):
    return SearchPipeline(settings=settings, engine_factory=engine_factory, collector=collector)


class GatedSession(FakeSession):
    """Blocks in submit/open until every expected session of a stage has entered."""

    async def submit(self, selector, text, timeout_ms=None):
        await self.engine.arrive(self.engine.search_gate)
        await super().submit(selector, text, timeout_ms)

    async def open(self, url, timeout_ms=None, wait_until="load"):
        if url in self.engine.crawl_urls:
            await self.engine.arrive(self.engine.crawl_gate)
        await super().open(url, timeout_ms, wait_until)


class GatedEngine(FakeEngine):
    def __init__(self, searches: int, crawl_urls=()):
        super().__init__()
        self.crawl_urls = set(crawl_urls)
        self.search_gate = {"expected": searches, "entered": 0, "event": asyncio.Event()}
        self.crawl_gate = {"expected": len(crawl_urls), "entered": 0, "event": asyncio.Event()}

    async def arrive(self, gate):
        gate["entered"] += 1
        if gate["entered"] >= gate["expected"]:
            gate["event"].set()
        await asyncio.wait_for(gate["event"].wait(), 1)

    async def new_session(self):
        session = GatedSession(self)
        self.sessions.append(session)
        return session


class TestStages:

    @pytest.mark.asyncio
    async def test_plain_query_runs_one_search(self, pipeline, fake_engine):
        fake_engine.serp["weather forecast"] = [
            serp_entry("Forecast", "http://weather.example", "Rain later"),
        ]

        result = await pipeline.run("weather forecast")

        assert fake_engine.submitted_queries == ["weather forecast"]
        assert result.variants == ["weather forecast"]
        assert [r.url for r in result.results] == ["http://weather.example"]

    @pytest.mark.asyncio
    async def test_recency_query_runs_three_searches(self, pipeline, fake_engine):
        result = await pipeline.run("latest AI news")

        assert sorted(fake_engine.submitted_queries) == sorted([
            "latest AI news",
            "latest AI news last 24 hours",
            "latest AI news today",
        ])
        assert result.variants[0] == "latest AI news"

    @pytest.mark.asyncio
    async def test_every_hit_is_crawled(self, pipeline, fake_engine):
        fake_engine.serp["new laptops"] = [
            serp_entry("A", "http://a.example", "a"),
            serp_entry("B", "http://b.example", "b"),
        ]
        fake_engine.serp["new laptops today"] = [
            serp_entry("A again", "http://a.example", "a"),
        ]

        result = await pipeline.run("new laptops")

        crawled = [s.url for s in fake_engine.sessions if s.query is None]
        assert sorted(crawled) == ["http://a.example", "http://a.example", "http://b.example"]
        assert result.candidates == 3

    @pytest.mark.asyncio
    async def test_duplicate_url_keeps_first_variant_score(self, pipeline, fake_engine):
        fake_engine.serp["recent releases"] = [
            serp_entry("Z", "http://z.example", "z"),
            serp_entry("A", "http://example.com/a", "first"),
        ]
        fake_engine.serp["recent releases last 24 hours"] = [
            serp_entry("A", "http://example.com/a", "second"),
        ]

        result = await pipeline.run("recent releases")

        matches = [r for r in result.results if r.url == "http://example.com/a"]
        assert len(matches) == 1
        assert matches[0].snippet == "first"
        assert matches[0].relevance_score == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_top_five_distinct(self, pipeline, fake_engine):
        fake_engine.serp["many"] = [
            serp_entry(f"T{i}", f"http://site.example/{i}", f"s{i}") for i in range(8)
        ]

        result = await pipeline.run("many")

        assert [r.url for r in result.results] == [f"http://site.example/{i}" for i in range(5)]


class TestFailurePolicy:

    @pytest.mark.asyncio
    async def test_dead_page_still_reported(self, pipeline, fake_engine):
        fake_engine.serp["weather forecast"] = [
            serp_entry("Dead", "http://dead.example", "Was here"),
            serp_entry("Alive", "http://alive.example", "Still here"),
        ]
        fake_engine.pages["http://alive.example"] = page_analysis(
            description="Live page", code_snippets=["x"], headings=["H1"]
        )
        fake_engine.page_failures["http://dead.example"] = asyncio.TimeoutError()

        result = await pipeline.run("weather forecast")
        report = result.report

        assert result.degraded == 1
        dead_block, alive_block = report.split("\n\n")[1:3]
        assert dead_block == "1. Dead\n   URL: http://dead.example\n   Was here"
        assert "Description: Live page" in alive_block
        assert "Code Examples: 1 found" in alive_block
        assert "Main Topics: H1" in alive_block

    @pytest.mark.asyncio
    async def test_failed_variant_fails_invocation(self, pipeline, fake_engine):
        fake_engine.serp["latest AI news"] = [serp_entry("A", "http://a.example", "a")]
        fake_engine.search_failures["latest AI news today"] = TimeoutError("Timeout 30000ms exceeded")

        with pytest.raises(SearchEngineError) as exc_info:
            await pipeline.run("latest AI news")

        assert exc_info.value.query == "latest AI news today"
        assert isinstance(exc_info.value.__cause__, TimeoutError)
        # Stage B never started
        assert all(s.query is not None for s in fake_engine.sessions)
        assert fake_engine.close_calls == 1

    @pytest.mark.asyncio
    async def test_missing_query_launches_nothing(self, pipeline, engine_factory, fake_engine):
        with pytest.raises(MissingParameterError):
            await pipeline.run("")

        assert engine_factory.launches == []
        assert fake_engine.sessions_opened == 0


class TestEngineLifecycle:

    @pytest.mark.asyncio
    async def test_engine_released_once_on_success(self, pipeline, engine_factory, fake_engine):
        await pipeline.run("weather forecast")

        assert len(engine_factory.launches) == 1
        assert fake_engine.close_calls == 1
        assert fake_engine.sessions_closed == fake_engine.sessions_opened

    @pytest.mark.asyncio
    async def test_release_failure_does_not_mask_result(self, pipeline, fake_engine):
        fake_engine.serp["weather forecast"] = [serp_entry("A", "http://a.example", "a")]
        fake_engine.close_error = RuntimeError("Browser has been closed")

        result = await pipeline.run("weather forecast")

        assert len(result.results) == 1
        assert fake_engine.close_calls == 1

    @pytest.mark.asyncio
    async def test_release_failure_does_not_mask_search_error(self, pipeline, fake_engine):
        fake_engine.search_failures["weather forecast"] = RuntimeError("net::ERR_CONNECTION_RESET")
        fake_engine.close_error = RuntimeError("Browser has been closed")

        with pytest.raises(SearchEngineError):
            await pipeline.run("weather forecast")

    @pytest.mark.asyncio
    async def test_search_metrics_recorded(self, pipeline, fake_engine, collector):
        fake_engine.serp["weather forecast"] = [serp_entry("A", "http://a.example", "a")]

        await pipeline.run("weather forecast")

        stats = collector.get_search_stats()
        assert stats["total_searches"] == 1
        assert stats["avg_result_count"] == 1
        assert collector.get_crawl_stats()["total_crawls"] == 1


class TestConcurrency:

    @pytest.fixture
    def gated_pipeline(self, settings, collector):
        def build(engine):
            async def factory():
                return engine

            return SearchPipeline(settings=settings, engine_factory=factory, collector=collector)

        return build

    @pytest.mark.asyncio
    async def test_variants_are_searched_together(self, gated_pipeline):
        engine = GatedEngine(searches=3)

        result = await gated_pipeline(engine).run("latest AI news")

        assert engine.search_gate["entered"] == 3
        assert len(result.variants) == 3

    @pytest.mark.asyncio
    async def test_hits_are_crawled_together(self, gated_pipeline):
        urls = ["http://a.example", "http://b.example", "http://c.example"]
        engine = GatedEngine(searches=3, crawl_urls=urls)
        engine.serp["new laptops"] = [
            serp_entry("A", urls[0], "a"),
            serp_entry("B", urls[1], "b"),
        ]
        engine.serp["new laptops today"] = [serp_entry("C", urls[2], "c")]

        result = await gated_pipeline(engine).run("new laptops")

        assert engine.crawl_gate["entered"] == 3
        assert result.candidates == 3
        assert result.degraded == 0
