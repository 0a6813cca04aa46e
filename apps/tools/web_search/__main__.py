"""
Command-line entry point.

Usage:
    python -m apps.tools.web_search "latest python release"
    python -m apps.tools.web_search --confirm --engine firefox "rust async runtimes"
"""

import argparse
import asyncio
import sys

from apps.tools.web_search.host import ConsoleHost, ToolUse
from apps.tools.web_search.pipeline import SearchPipeline
from apps.tools.web_search.tool import ToolOutcome, web_search_tool
from libs.core.config import get_settings
from libs.core.logging_config import setup_logging


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Search the web and summarize the top results")
    parser.add_argument("query", nargs="?", default="", help="What to search for")
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Ask before launching the browser",
    )
    parser.add_argument(
        "--engine",
        choices=["chromium", "firefox"],
        help="Browser engine (default from BROWSER__ENGINE)",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default from LOG_LEVEL)",
    )
    args = parser.parse_args(argv)

    settings = get_settings().model_copy(deep=True)
    if args.engine:
        settings.browser.engine = args.engine
    if args.headed:
        settings.browser.headless = False

    setup_logging(level=args.log_level or settings.log_level, log_to_file=False)

    host = ConsoleHost(auto_approve=not args.confirm)
    block = ToolUse(name="web_search", params={"query": args.query})
    outcome = asyncio.run(web_search_tool(block, host, SearchPipeline(settings=settings)))

    if outcome in (ToolOutcome.FAILED, ToolOutcome.MISSING_PARAMETER):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
