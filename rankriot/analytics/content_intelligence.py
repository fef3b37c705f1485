"""Content intelligence: thin content, missing metadata, duplicates and similar pages.

All functions are pure and work on already-crawled page rows. A page row is
any object exposing the ``pages`` columns as attributes (ORM ``Page``
instances in the API).
"""
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from rankriot.core.config import settings


@dataclass
class ContentIntelligenceThresholds:
    """Word-count and similarity thresholds."""

    thin_content_words: int = 300
    critical_thin_content_words: int = 100
    similarity_threshold: float = 0.7

    @classmethod
    def from_settings(cls) -> "ContentIntelligenceThresholds":
        return cls(
            thin_content_words=settings.thin_content_words,
            critical_thin_content_words=settings.critical_thin_content_words,
            similarity_threshold=settings.similarity_threshold,
        )


DEFAULT_THRESHOLDS = ContentIntelligenceThresholds()


@dataclass
class PageBasic:
    id: Any
    url: str
    title: Optional[str] = None

    @classmethod
    def from_page(cls, page: Any) -> "PageBasic":
        return cls(id=page.id, url=page.url, title=page.title)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": str(self.id), "url": self.url, "title": self.title}


@dataclass
class ThinContentPage(PageBasic):
    word_count: Optional[int] = None

    @classmethod
    def from_page(cls, page: Any) -> "ThinContentPage":
        return cls(id=page.id, url=page.url, title=page.title, word_count=page.word_count)

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "word_count": self.word_count}


@dataclass
class Keyword:
    word: str
    count: int = 0

    @classmethod
    def parse(cls, raw: Any) -> Optional["Keyword"]:
        """Build a keyword from a stored ``{"word", "count"}`` object."""
        if isinstance(raw, Keyword):
            return raw
        if isinstance(raw, dict) and raw.get("word"):
            return cls(word=str(raw["word"]), count=int(raw.get("count") or 0))
        if isinstance(raw, str) and raw:
            return cls(word=raw)
        return None


@dataclass
class PageWithKeywords(PageBasic):
    keywords: Optional[List[Keyword]] = None

    @classmethod
    def from_page(cls, page: Any) -> "PageWithKeywords":
        keywords = None
        if page.keywords is not None:
            keywords = [k for k in (Keyword.parse(raw) for raw in page.keywords) if k]
        return cls(id=page.id, url=page.url, title=page.title, keywords=keywords)


@dataclass
class DuplicateGroup:
    value: str
    pages: List[PageBasic]

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "pages": [p.to_dict() for p in self.pages]}


@dataclass
class SimilarContentGroup:
    # Highest pairwise similarity in the group, as an integer percentage
    similarity: int
    pages: List[PageBasic]

    def to_dict(self) -> Dict[str, Any]:
        return {"similarity": self.similarity, "pages": [p.to_dict() for p in self.pages]}


@dataclass
class ContentSummary:
    critical: int = 0
    warnings: int = 0
    passed: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "critical": self.critical,
            "warnings": self.warnings,
            "passed": self.passed,
            "total": self.total,
        }


@dataclass
class ContentIntelligenceData:
    thin_content: List[ThinContentPage] = field(default_factory=list)
    missing_meta_descriptions: List[PageBasic] = field(default_factory=list)
    missing_titles: List[PageBasic] = field(default_factory=list)
    duplicate_titles: List[DuplicateGroup] = field(default_factory=list)
    duplicate_descriptions: List[DuplicateGroup] = field(default_factory=list)
    similar_content: List[SimilarContentGroup] = field(default_factory=list)
    summary: ContentSummary = field(default_factory=ContentSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "thin_content": [p.to_dict() for p in self.thin_content],
            "missing_meta_descriptions": [p.to_dict() for p in self.missing_meta_descriptions],
            "missing_titles": [p.to_dict() for p in self.missing_titles],
            "duplicate_titles": [g.to_dict() for g in self.duplicate_titles],
            "duplicate_descriptions": [g.to_dict() for g in self.duplicate_descriptions],
            "similar_content": [g.to_dict() for g in self.similar_content],
            "summary": self.summary.to_dict(),
        }


def _as_percent(fraction: float) -> int:
    # Round half up
    return int(math.floor(fraction * 100 + 0.5))


def calculate_keyword_similarity(
    keywords1: Optional[Sequence[Keyword]],
    keywords2: Optional[Sequence[Keyword]],
) -> float:
    """
    Jaccard similarity between two keyword sets (case-insensitive words).

    Returns:
        Value between 0 and 1; 0 when either list is missing or empty
    """
    if not keywords1 or not keywords2:
        return 0.0

    set1 = {k.word.lower() for k in keywords1}
    set2 = {k.word.lower() for k in keywords2}
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)


def find_duplicates(
    pages: Iterable[Any],
    get_value: Callable[[Any], Optional[str]],
) -> List[DuplicateGroup]:
    """
    Group pages sharing the same trimmed, lower-cased value.

    Empty values are ignored. Only groups with more than one page are kept.
    The group's display value is the first page's title, falling back to the
    normalized value. Largest groups come first.
    """
    groups: Dict[str, List[PageBasic]] = {}
    for page in pages:
        raw = get_value(page)
        value = raw.strip().lower() if raw else ""
        if value:
            groups.setdefault(value, []).append(PageBasic.from_page(page))

    duplicates = [
        DuplicateGroup(value=group[0].title or value, pages=group)
        for value, group in groups.items()
        if len(group) > 1
    ]
    duplicates.sort(key=lambda g: len(g.pages), reverse=True)
    return duplicates


def find_similar_content(
    pages: Sequence[PageWithKeywords],
    threshold: float = DEFAULT_THRESHOLDS.similarity_threshold,
) -> List[SimilarContentGroup]:
    """
    Find pages whose keyword sets overlap at or above ``threshold``.

    Every pair is compared once. A matching pair joins the first existing
    group that already holds either page, otherwise it starts a new group.
    """
    groups: List[SimilarContentGroup] = []

    for i in range(len(pages)):
        for j in range(i + 1, len(pages)):
            first, second = pages[i], pages[j]
            similarity = calculate_keyword_similarity(first.keywords, second.keywords)
            if similarity < threshold:
                continue

            percent = _as_percent(similarity)
            existing = next(
                (
                    g for g in groups
                    if any(p.id in (first.id, second.id) for p in g.pages)
                ),
                None,
            )
            if existing is None:
                groups.append(SimilarContentGroup(
                    similarity=percent,
                    pages=[PageBasic.from_page(first), PageBasic.from_page(second)],
                ))
                continue

            member_ids = {p.id for p in existing.pages}
            for page in (first, second):
                if page.id not in member_ids:
                    existing.pages.append(PageBasic.from_page(page))
                    member_ids.add(page.id)
            existing.similarity = max(existing.similarity, percent)

    groups.sort(key=lambda g: g.similarity, reverse=True)
    return groups


def _extra_pages(groups: Iterable[Any]) -> int:
    return sum(len(g.pages) - 1 for g in groups)


def calculate_summary(
    data: ContentIntelligenceData,
    thresholds: ContentIntelligenceThresholds = DEFAULT_THRESHOLDS,
    total_pages: Optional[int] = None,
) -> ContentSummary:
    """
    Count critical findings and warnings.

    Missing titles and pages under the critical word count are critical.
    Other thin pages, missing descriptions and every extra page in a
    duplicate or similar-content group are warnings.

    ``passed`` is the number of pages with no finding when ``total_pages``
    is known, otherwise it mirrors ``total``.
    """
    critical_thin = sum(
        1 for p in data.thin_content
        if (p.word_count or 0) < thresholds.critical_thin_content_words
    )
    critical = len(data.missing_titles) + critical_thin

    warnings = len(data.thin_content) - critical_thin
    warnings += len(data.missing_meta_descriptions)
    warnings += _extra_pages(data.duplicate_titles)
    warnings += _extra_pages(data.duplicate_descriptions)
    warnings += _extra_pages(data.similar_content)

    total = critical + warnings

    if total_pages is None:
        passed = max(0, total)
    else:
        flagged = {p.id for p in data.thin_content}
        flagged.update(p.id for p in data.missing_meta_descriptions)
        flagged.update(p.id for p in data.missing_titles)
        for group in data.duplicate_titles + data.duplicate_descriptions + data.similar_content:
            flagged.update(p.id for p in group.pages)
        passed = max(0, total_pages - len(flagged))

    return ContentSummary(critical=critical, warnings=warnings, passed=passed, total=total)


def build_content_intelligence(
    pages: Sequence[Any],
    thresholds: Optional[ContentIntelligenceThresholds] = None,
) -> ContentIntelligenceData:
    """Derive the full content intelligence report from a project's page rows."""
    thresholds = thresholds or ContentIntelligenceThresholds.from_settings()

    thin = [
        ThinContentPage.from_page(p) for p in pages
        if p.word_count is not None and p.word_count < thresholds.thin_content_words
    ]
    thin.sort(key=lambda p: p.word_count)

    data = ContentIntelligenceData(
        thin_content=thin,
        missing_meta_descriptions=[PageBasic.from_page(p) for p in pages if not p.meta_description],
        missing_titles=[PageBasic.from_page(p) for p in pages if not p.title],
        duplicate_titles=find_duplicates(pages, lambda p: p.title),
        duplicate_descriptions=find_duplicates(pages, lambda p: p.meta_description),
        similar_content=find_similar_content(
            [PageWithKeywords.from_page(p) for p in pages if p.keywords is not None],
            thresholds.similarity_threshold,
        ),
    )
    data.summary = calculate_summary(data, thresholds, total_pages=len(pages))
    return data
