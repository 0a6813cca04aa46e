"""
Page crawler for search results.

Visits one result URL in its own browsing session and analyzes the page:
metadata from <meta> tags, main text and notable elements, coarse layout.

A page that fails to load or analyze never fails the search. The crawler
returns a Degraded outcome instead, which becomes an EnrichedResult with
empty content that still carries the search engine's title, snippet and score.
"""

import logging
import time
from typing import Optional

from apps.tools.web_search.browser import BrowsingEngine, block_resource_types
from apps.tools.web_search.models import (
    BasicResult,
    Degraded,
    EnrichedResult,
    Extracted,
    PageOutcome,
    relevance_score,
)
from apps.tools.web_search.observability import MetricsCollector, get_collector
from libs.core.config import BrowserSettings
from libs.core.exceptions import PageExtractionError

logger = logging.getLogger(__name__)

PAGE_ANALYSIS_JS = '''() => {
    const text = (el) => (el && el.textContent ? el.textContent.trim() : '');
    const texts = (selector) => Array.from(document.querySelectorAll(selector))
        .map(text)
        .filter(Boolean);
    const meta = (selector) => {
        const el = document.querySelector(selector);
        return el ? el.getAttribute('content') : null;
    };

    const keywords = meta('meta[name="keywords"]');
    const metadata = {
        author: meta('meta[name="author"]'),
        datePublished: meta('meta[property="article:published_time"]'),
        keywords: keywords ? keywords.split(',') : null,
        description: meta('meta[name="description"]'),
    };

    const mainText = text(document.querySelector('main, article, .content, #content'))
        || text(document.body);
    const content = {
        mainText: mainText,
        codeSnippets: texts('pre, code'),
        headings: texts('h1, h2, h3'),
        lists: texts('ul, ol'),
    };

    const pageStructure = {
        hasNavigation: Boolean(document.querySelector('nav, header')),
        hasFooter: Boolean(document.querySelector('footer')),
        hasSidebar: Boolean(document.querySelector('aside, .sidebar, #sidebar')),
        sections: Array.from(document.querySelectorAll('section'))
            .map((el) => el.getAttribute('class') || el.getAttribute('id') || 'unnamed-section'),
    };

    return { metadata, content, pageStructure };
}'''


class PageCrawler:
    """Turns a BasicResult into an EnrichedResult by visiting its page."""

    def __init__(
        self,
        engine: BrowsingEngine,
        browser_settings: Optional[BrowserSettings] = None,
        score_step: float = 0.1,
        collector: Optional[MetricsCollector] = None,
    ):
        self.engine = engine
        self.browser_settings = browser_settings or BrowserSettings()
        self.score_step = score_step
        self.collector = collector or get_collector()

    async def crawl(self, result: BasicResult, position_index: int) -> EnrichedResult:
        """
        Visit result.url and attach the page analysis.

        Never raises for page-level failures.

        Args:
            result: The search engine result to visit
            position_index: Zero-based rank within its query variant's results

        Returns:
            EnrichedResult scored 1 - position_index * score_step
        """
        started = time.monotonic()
        outcome = await self.analyze(result.url)
        duration_ms = int((time.monotonic() - started) * 1000)

        if isinstance(outcome, Degraded):
            self.collector.record_page_crawl(result.url, False, duration_ms, error=outcome.error)
        else:
            self.collector.record_page_crawl(result.url, True, duration_ms)

        score = relevance_score(position_index, self.score_step)
        return EnrichedResult.from_outcome(result, score, outcome)

    async def analyze(self, url: str) -> PageOutcome:
        """Load url in a fresh session and run the page analysis."""
        session = None
        try:
            session = await self.engine.new_session()
            await session.install_request_filter(
                block_resource_types(self.browser_settings.blocked_resource_types)
            )
            await session.open(
                url,
                timeout_ms=self.browser_settings.page_timeout_ms,
                wait_until="domcontentloaded",
            )
            raw = await session.extract(PAGE_ANALYSIS_JS)
            if not isinstance(raw, dict):
                raise ValueError(f"unexpected analysis result: {type(raw).__name__}")
            outcome = Extracted.from_raw(raw)
            logger.debug(
                f"[PageCrawler] Analyzed {url}: {len(outcome.content.main_text)} chars, "
                f"{len(outcome.content.headings)} headings"
            )
            return outcome
        except Exception as e:
            error = PageExtractionError(url, str(e) or type(e).__name__)
            logger.warning(f"[PageCrawler] {error.message}")
            return Degraded(url=url, error=error.error)
        finally:
            if session is not None:
                await self._close_session(session, url)

    async def _close_session(self, session, url: str) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"[PageCrawler] Error closing session for {url}: {e}")
