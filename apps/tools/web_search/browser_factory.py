"""
Centralized browser factory for consistent browser configuration.

Usage:
    from apps.tools.web_search.browser_factory import launch_browser

    browser = await launch_browser(playwright, engine="chromium", headless=True)
"""

import logging
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserType, Playwright

logger = logging.getLogger(__name__)

SUPPORTED_ENGINES = ("chromium", "firefox")

# Firefox rejects these Chromium switches
CHROMIUM_ONLY_ARGS = {
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
    "--disable-extensions",
}


def get_browser_type(playwright: "Playwright", engine: str = "chromium") -> "BrowserType":
    """
    Get the browser type for an engine name.

    Unknown engine names fall back to chromium.
    """
    engine = engine.lower()
    if engine == "firefox":
        logger.debug("[BrowserFactory] Using Firefox browser engine")
        return playwright.firefox
    if engine not in SUPPORTED_ENGINES:
        logger.warning(f"[BrowserFactory] Unknown engine '{engine}', using chromium")
    logger.debug("[BrowserFactory] Using Chromium browser engine")
    return playwright.chromium


async def launch_browser(
    playwright: "Playwright",
    engine: str = "chromium",
    headless: bool = True,
    args: Optional[List[str]] = None,
    **kwargs,
) -> "Browser":
    """
    Launch a browser with consistent configuration.

    Args:
        playwright: Playwright instance
        engine: "chromium" or "firefox"
        headless: Run in headless mode (default: True)
        args: Additional browser args (Chromium-specific args are filtered for Firefox)
        **kwargs: Additional launch options

    Returns:
        Browser instance
    """
    browser_type = get_browser_type(playwright, engine)
    is_chromium = engine.lower() != "firefox"

    if args and not is_chromium:
        args = [a for a in args if a not in CHROMIUM_ONLY_ARGS and not a.startswith("--js-flags")]

    launch_kwargs = {"headless": headless, **kwargs}
    if args:
        launch_kwargs["args"] = args

    logger.info(f"[BrowserFactory] Launching {engine} browser (headless={headless})")
    return await browser_type.launch(**launch_kwargs)


def get_default_user_agent(engine: str = "chromium") -> str:
    """Get a default desktop user agent string for the engine."""
    if engine.lower() == "firefox":
        return "Mozilla/5.0 (X11; Linux x86_64; rv:120.0) Gecko/20100101 Firefox/120.0"
    return "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
