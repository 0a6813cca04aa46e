"""Custom exceptions for the web search pipeline."""

from typing import Any, Optional


class WebSearchError(Exception):
    """Base exception for the web search pipeline."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class MissingParameterError(WebSearchError):
    """A required tool parameter was absent or blank."""

    def __init__(
        self,
        tool: str,
        param: str,
        context: Optional[dict[str, Any]] = None,
    ):
        message = f"Missing value for required parameter '{param}' of {tool}"
        super().__init__(message, context)
        self.tool = tool
        self.param = param


class SearchEngineError(WebSearchError):
    """
    Search engine stage failed for one query variant.

    Fatal to the whole invocation: no partial report is produced.
    """

    def __init__(
        self,
        query: str,
        error: str,
        context: Optional[dict[str, Any]] = None,
    ):
        message = f"Search failed for '{query}': {error}"
        super().__init__(message, context)
        self.query = query
        self.error = error


class PageExtractionError(WebSearchError):
    """Navigation or extraction failed for a single result page."""

    def __init__(
        self,
        url: str,
        error: str,
        context: Optional[dict[str, Any]] = None,
    ):
        message = f"Could not analyze {url}: {error}"
        super().__init__(message, context)
        self.url = url
        self.error = error


class ResourceLifecycleError(WebSearchError):
    """Releasing the shared browsing engine failed."""

    pass
