"""
Web search data models.

- BasicResult: a raw search engine hit (title, url, snippet)
- PageMetadata / PageContent / PageStructure: what the page analysis finds
- Extracted / Degraded: the two possible outcomes of crawling one page
- EnrichedResult: BasicResult + score + page analysis
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class BasicResult:
    """A single search engine result."""
    title: str
    url: str
    snippet: str

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> Optional["BasicResult"]:
        """Build from an extracted SERP entry. Returns None if any field is missing or blank."""
        title = (raw.get("title") or "").strip()
        url = (raw.get("url") or "").strip()
        snippet = (raw.get("snippet") or "").strip()
        if not (title and url and snippet):
            return None
        return cls(title=title, url=url, snippet=snippet)


@dataclass
class PageMetadata:
    """Metadata from <meta> tags. Absent tags stay None."""
    author: Optional[str] = None
    date_published: Optional[str] = None
    keywords: Optional[List[str]] = None
    description: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Optional[Dict[str, Any]]) -> "PageMetadata":
        raw = raw or {}
        keywords = raw.get("keywords")
        if keywords is not None:
            keywords = [k.strip() for k in keywords if k and k.strip()]
        return cls(
            author=raw.get("author") or None,
            date_published=raw.get("datePublished") or None,
            keywords=keywords or None,
            description=raw.get("description") or None,
        )


@dataclass
class PageContent:
    """Main text and notable elements of a page."""
    main_text: str = ""
    code_snippets: List[str] = field(default_factory=list)
    headings: List[str] = field(default_factory=list)
    lists: List[str] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Optional[Dict[str, Any]]) -> "PageContent":
        raw = raw or {}
        return cls(
            main_text=raw.get("mainText") or "",
            code_snippets=list(raw.get("codeSnippets") or []),
            headings=list(raw.get("headings") or []),
            lists=list(raw.get("lists") or []),
        )


@dataclass
class PageStructure:
    """Coarse layout of a page."""
    has_navigation: bool = False
    has_footer: bool = False
    has_sidebar: bool = False
    sections: List[str] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Optional[Dict[str, Any]]) -> "PageStructure":
        raw = raw or {}
        return cls(
            has_navigation=bool(raw.get("hasNavigation")),
            has_footer=bool(raw.get("hasFooter")),
            has_sidebar=bool(raw.get("hasSidebar")),
            sections=list(raw.get("sections") or []),
        )


@dataclass
class Extracted:
    """Page analysis succeeded."""
    metadata: PageMetadata
    content: PageContent
    page_structure: PageStructure

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Extracted":
        """Build from the dict returned by the in-page analysis script."""
        return cls(
            metadata=PageMetadata.from_raw(raw.get("metadata")),
            content=PageContent.from_raw(raw.get("content")),
            page_structure=PageStructure.from_raw(raw.get("pageStructure")),
        )


@dataclass
class Degraded:
    """Page could not be loaded or analyzed; defaults are used."""
    url: str
    error: str


PageOutcome = Union[Extracted, Degraded]


def relevance_score(position_index: int, step: float = 0.1) -> float:
    """Positional score within the originating variant's result list."""
    return 1 - (position_index * step)


@dataclass
class EnrichedResult:
    """A search result with its page analysis attached."""
    title: str
    url: str
    snippet: str
    relevance_score: float
    metadata: PageMetadata = field(default_factory=PageMetadata)
    content: PageContent = field(default_factory=PageContent)
    page_structure: PageStructure = field(default_factory=PageStructure)
    degraded: bool = False

    @classmethod
    def from_outcome(
        cls,
        result: BasicResult,
        score: float,
        outcome: PageOutcome,
    ) -> "EnrichedResult":
        if isinstance(outcome, Extracted):
            return cls(
                title=result.title,
                url=result.url,
                snippet=result.snippet,
                relevance_score=score,
                metadata=outcome.metadata,
                content=outcome.content,
                page_structure=outcome.page_structure,
            )
        return cls(
            title=result.title,
            url=result.url,
            snippet=result.snippet,
            relevance_score=score,
            degraded=True,
        )
