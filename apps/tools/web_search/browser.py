"""
Browsing capability for web search.

A BrowsingEngine is the single shared browser for one search invocation.
Every task gets its own BrowsingSession (isolated context + one page), so
sessions are never shared between concurrent tasks.

The Playwright implementation is the production one; tests drive the same
interface with a deterministic fake.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

from apps.tools.web_search.browser_factory import get_default_user_agent, launch_browser
from libs.core.config import BrowserSettings
from libs.core.exceptions import ResourceLifecycleError

logger = logging.getLogger(__name__)

# resource_type -> True to let the request through
RequestFilter = Callable[[str], bool]


def block_resource_types(resource_types: Iterable[str]) -> RequestFilter:
    """Request filter aborting the given resource classes and allowing everything else."""
    blocked = frozenset(resource_types)

    def allow(resource_type: str) -> bool:
        return resource_type not in blocked

    return allow


class BrowsingSession(ABC):
    """One isolated page, used by exactly one task."""

    @abstractmethod
    async def install_request_filter(self, allow: RequestFilter) -> None:
        """Install a filter for every request made by this session."""

    @abstractmethod
    async def open(self, url: str, timeout_ms: Optional[int] = None, wait_until: str = "load") -> None:
        """Navigate to url. Raises on navigation failure or timeout."""

    @abstractmethod
    async def submit(self, selector: str, text: str, timeout_ms: Optional[int] = None) -> None:
        """Type text into the input at selector, press Enter and wait for the navigation."""

    @abstractmethod
    async def extract(self, script: str, arg: Any = None) -> Any:
        """Run an extraction script in the page and return its result."""

    @abstractmethod
    async def close(self) -> None:
        """Release the session."""


class BrowsingEngine(ABC):
    """Shared browser instance; read-only once launched."""

    @abstractmethod
    async def new_session(self) -> BrowsingSession:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


class PlaywrightSession(BrowsingSession):
    """BrowsingSession backed by a Playwright BrowserContext and Page."""

    def __init__(self, context, page):
        self.context = context
        self.page = page

    async def install_request_filter(self, allow: RequestFilter) -> None:
        async def handle(route):
            if allow(route.request.resource_type):
                await route.continue_()
            else:
                await route.abort()

        await self.page.route("**/*", handle)

    async def open(self, url: str, timeout_ms: Optional[int] = None, wait_until: str = "load") -> None:
        await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def submit(self, selector: str, text: str, timeout_ms: Optional[int] = None) -> None:
        await self.page.locator(selector).fill(text, timeout=timeout_ms)
        async with self.page.expect_navigation(timeout=timeout_ms):
            await self.page.keyboard.press("Enter")

    async def extract(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)

    async def close(self) -> None:
        # Closing the context closes its page
        await self.context.close()


class PlaywrightEngine(BrowsingEngine):
    """BrowsingEngine backed by one launched Playwright browser."""

    def __init__(self, playwright, browser, user_agent: Optional[str] = None):
        self.playwright = playwright
        self.browser = browser
        self.user_agent = user_agent

    async def new_session(self) -> PlaywrightSession:
        context = await self.browser.new_context(user_agent=self.user_agent)
        try:
            page = await context.new_page()
        except Exception:
            await context.close()
            raise
        return PlaywrightSession(context, page)

    async def close(self) -> None:
        try:
            await self.browser.close()
        finally:
            await self.playwright.stop()


async def launch_engine(settings: BrowserSettings) -> PlaywrightEngine:
    """Start Playwright and launch the configured browser."""
    from playwright.async_api import async_playwright

    playwright = await async_playwright().start()
    try:
        browser = await launch_browser(
            playwright,
            engine=settings.engine,
            headless=settings.headless,
            args=settings.launch_args,
        )
    except Exception:
        await playwright.stop()
        raise
    return PlaywrightEngine(
        playwright,
        browser,
        user_agent=get_default_user_agent(settings.engine),
    )


async def release_engine(engine: BrowsingEngine) -> None:
    """
    Close the shared engine.

    A failure here is logged and never raised, so it cannot replace the
    outcome of the search that used the engine.
    """
    try:
        await engine.close()
        logger.debug("[Browser] Engine released")
    except Exception as e:
        error = ResourceLifecycleError(f"Failed to release browsing engine: {e}")
        logger.error(f"[Browser] {error.message}")
