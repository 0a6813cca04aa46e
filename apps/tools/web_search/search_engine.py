"""
Search engine client.

Types a query into the search engine like a user would and reads the
organic results off the page. Pages behind the results are not visited here.
"""

import logging
from typing import List, Optional

from apps.tools.web_search.browser import BrowsingEngine, block_resource_types
from apps.tools.web_search.models import BasicResult
from libs.core.config import BrowserSettings, SearchSettings

logger = logging.getLogger(__name__)

# Returns [{title, url, snippet}] for result blocks that have all three elements
SERP_EXTRACTION_JS = '''(selectors) => {
    const results = [];
    document.querySelectorAll(selectors.result).forEach((element) => {
        const titleElement = element.querySelector(selectors.title);
        const linkElement = element.querySelector(selectors.link);
        const snippetElement = element.querySelector(selectors.snippet);
        if (!titleElement || !linkElement || !snippetElement) {
            return;
        }
        results.push({
            title: titleElement.textContent || '',
            url: linkElement.getAttribute('href') || '',
            snippet: snippetElement.textContent || '',
        });
    });
    return results;
}'''


class SearchEngineClient:
    """Runs one query variant against the configured search engine."""

    def __init__(
        self,
        engine: BrowsingEngine,
        search_settings: Optional[SearchSettings] = None,
        browser_settings: Optional[BrowserSettings] = None,
    ):
        self.engine = engine
        self.search_settings = search_settings or SearchSettings()
        self.browser_settings = browser_settings or BrowserSettings()

    async def search(self, query: str) -> List[BasicResult]:
        """
        Search for query and return the basic results in page order.

        Navigation, timeout and extraction errors propagate to the caller.
        """
        settings = self.search_settings
        logger.info(f"[SearchEngine] Searching: {query}")

        session = await self.engine.new_session()
        try:
            await session.install_request_filter(
                block_resource_types(self.browser_settings.blocked_resource_types)
            )
            await session.open(
                settings.landing_url,
                timeout_ms=self.browser_settings.search_timeout_ms,
            )
            await session.submit(
                settings.input_selector,
                query,
                timeout_ms=self.browser_settings.search_timeout_ms,
            )
            raw_results = await session.extract(
                SERP_EXTRACTION_JS,
                {
                    "result": settings.result_selector,
                    "title": settings.title_selector,
                    "link": settings.link_selector,
                    "snippet": settings.snippet_selector,
                },
            )
        finally:
            await session.close()

        results = []
        for raw in raw_results or []:
            result = BasicResult.from_raw(raw)
            if result is not None:
                results.append(result)

        logger.info(f"[SearchEngine] Found {len(results)} results for: {query}")
        return results
