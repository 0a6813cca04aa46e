"""
Pytest fixtures for web search tests.

FakeEngine stands in for the headless browser: search results are scripted
per query, page analyses per URL, and failures per query or URL. It counts
sessions so tests can check that nothing was launched or leaked.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Repository root on sys.path so `apps` and `libs` import without installing
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apps.tools.web_search.browser import BrowsingEngine, BrowsingSession  # noqa: E402
from apps.tools.web_search.host import ToolHost  # noqa: E402
from apps.tools.web_search.observability import MetricsCollector  # noqa: E402
from libs.core.config import Settings  # noqa: E402


def serp_entry(title: str, url: str, snippet: str) -> Dict[str, str]:
    return {"title": title, "url": url, "snippet": snippet}


def page_analysis(
    description: Optional[str] = None,
    main_text: str = "Body text",
    code_snippets: Optional[List[str]] = None,
    headings: Optional[List[str]] = None,
    has_navigation: bool = True,
) -> Dict[str, Any]:
    """Shape returned by the in-page analysis script."""
    return {
        "metadata": {
            "author": None,
            "datePublished": None,
            "keywords": None,
            "description": description,
        },
        "content": {
            "mainText": main_text,
            "codeSnippets": code_snippets or [],
            "headings": headings or [],
            "lists": [],
        },
        "pageStructure": {
            "hasNavigation": has_navigation,
            "hasFooter": False,
            "hasSidebar": False,
            "sections": [],
        },
    }


class FakeSession(BrowsingSession):
    def __init__(self, engine: "FakeEngine"):
        self.engine = engine
        self.request_filter = None
        self.url: Optional[str] = None
        self.query: Optional[str] = None
        self.open_calls: List[Dict[str, Any]] = []
        self.closed = False

    async def install_request_filter(self, allow):
        if self.url is not None:
            raise AssertionError("request filter installed after navigation")
        self.request_filter = allow

    async def open(self, url, timeout_ms=None, wait_until="load"):
        self.url = url
        self.open_calls.append({"url": url, "timeout_ms": timeout_ms, "wait_until": wait_until})
        if url in self.engine.page_failures:
            raise self.engine.page_failures[url]

    async def submit(self, selector, text, timeout_ms=None):
        self.query = text
        self.engine.submitted_queries.append(text)
        if text in self.engine.search_failures:
            raise self.engine.search_failures[text]

    async def extract(self, script, arg=None):
        if self.query is not None:
            return self.engine.serp.get(self.query, [])
        if self.url in self.engine.extract_failures:
            raise self.engine.extract_failures[self.url]
        return self.engine.pages.get(self.url, page_analysis())

    async def close(self):
        self.closed = True
        self.engine.sessions_closed += 1


class FakeEngine(BrowsingEngine):
    def __init__(self):
        self.serp: Dict[str, List[Dict[str, str]]] = {}
        self.pages: Dict[str, Dict[str, Any]] = {}
        self.search_failures: Dict[str, Exception] = {}
        self.page_failures: Dict[str, Exception] = {}
        self.extract_failures: Dict[str, Exception] = {}
        self.submitted_queries: List[str] = []
        self.sessions: List[FakeSession] = []
        self.sessions_closed = 0
        self.close_calls = 0
        self.close_error: Optional[Exception] = None

    @property
    def sessions_opened(self) -> int:
        return len(self.sessions)

    async def new_session(self):
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    async def close(self):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class RecordingHost(ToolHost):
    def __init__(self, approve: bool = True):
        self.approve = approve
        self.approval_messages: List[str] = []
        self.partial_messages: List[str] = []
        self.results: List[str] = []
        self.errors: List[tuple] = []
        self.mistakes = 0
        self.resets = 0

    async def ask_approval(self, kind, message):
        self.approval_messages.append(message)
        return self.approve

    async def ask_partial(self, kind, message):
        self.partial_messages.append(message)

    async def push_tool_result(self, text):
        self.results.append(text)

    async def handle_error(self, stage, error):
        self.errors.append((stage, error))

    async def say_missing_param_error(self, tool_name, param_name):
        self.mistakes += 1
        return await super().say_missing_param_error(tool_name, param_name)

    def reset_mistake_count(self):
        self.resets += 1


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def collector():
    return MetricsCollector()


@pytest.fixture
def engine_factory(fake_engine):
    """Counts launches; always hands out the same fake engine."""
    launches = []

    async def factory():
        launches.append(fake_engine)
        return fake_engine

    factory.launches = launches
    return factory


@pytest.fixture
def host():
    return RecordingHost()
