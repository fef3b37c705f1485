"""Technical health: status codes, redirects, broken links, slow/large and non-indexable pages."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from rankriot.core.config import settings

STATUS_CATEGORIES = ("2xx", "3xx", "4xx", "5xx")


@dataclass
class TechnicalHealthThresholds:
    slow_page_ms: int = 3000
    large_page_bytes: int = 2 * 1024 * 1024

    @classmethod
    def from_settings(cls) -> "TechnicalHealthThresholds":
        return cls(slow_page_ms=settings.slow_page_ms, large_page_bytes=settings.large_page_bytes)


DEFAULT_TECHNICAL_THRESHOLDS = TechnicalHealthThresholds()


@dataclass
class StatusDistribution:
    category: str
    count: int
    pages: List[Dict[str, Any]]


@dataclass
class BrokenLink:
    id: Any
    source_page_id: Any
    source_url: str
    source_title: Optional[str]
    destination_url: str
    http_status: Optional[int]
    anchor_text: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "source_page_id": str(self.source_page_id) if self.source_page_id else None,
            "source_url": self.source_url,
            "source_title": self.source_title,
            "destination_url": self.destination_url,
            "http_status": self.http_status,
            "anchor_text": self.anchor_text,
        }


@dataclass
class TechnicalHealthSummary:
    critical: int = 0
    warnings: int = 0
    passed: int = 0


@dataclass
class TechnicalHealthData:
    status_distribution: List[StatusDistribution] = field(default_factory=list)
    redirect_pages: List[Dict[str, Any]] = field(default_factory=list)
    broken_links: List[BrokenLink] = field(default_factory=list)
    slow_pages: List[Dict[str, Any]] = field(default_factory=list)
    large_pages: List[Dict[str, Any]] = field(default_factory=list)
    non_indexable_pages: List[Dict[str, Any]] = field(default_factory=list)
    summary: TechnicalHealthSummary = field(default_factory=TechnicalHealthSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status_distribution": [
                {"category": d.category, "count": d.count, "pages": d.pages}
                for d in self.status_distribution
            ],
            "redirect_pages": self.redirect_pages,
            "broken_links": [link.to_dict() for link in self.broken_links],
            "slow_pages": self.slow_pages,
            "large_pages": self.large_pages,
            "non_indexable_pages": self.non_indexable_pages,
            "summary": {
                "critical": self.summary.critical,
                "warnings": self.summary.warnings,
                "passed": self.summary.passed,
            },
        }


def _page_ref(page: Any, **extra) -> Dict[str, Any]:
    return {"id": str(page.id), "url": page.url, "title": page.title, **extra}


def categorize_http_status(status: Optional[int]) -> str:
    """Bucket an HTTP status; a missing status counts as a server error."""
    if not status:
        return "5xx"
    if 200 <= status < 300:
        return "2xx"
    if 300 <= status < 400:
        return "3xx"
    if 400 <= status < 500:
        return "4xx"
    return "5xx"


def build_status_distribution(pages: Sequence[Any]) -> List[StatusDistribution]:
    """Pages per status bucket, in bucket order, lowest status first; empty buckets dropped."""
    buckets: Dict[str, List[Any]] = {category: [] for category in STATUS_CATEGORIES}
    for page in pages:
        buckets[categorize_http_status(page.http_status)].append(page)

    distribution = []
    for category in STATUS_CATEGORIES:
        members = sorted(buckets[category], key=lambda p: p.http_status or 0)
        if members:
            distribution.append(StatusDistribution(
                category=category,
                count=len(members),
                pages=[_page_ref(p, http_status=p.http_status) for p in members],
            ))
    return distribution


def find_redirect_pages(pages: Sequence[Any]) -> List[Dict[str, Any]]:
    return [
        _page_ref(p, redirect_url=p.redirect_url, http_status=p.http_status)
        for p in pages
        if p.redirect_url
    ]


def find_slow_pages(pages: Sequence[Any], threshold: int = DEFAULT_TECHNICAL_THRESHOLDS.slow_page_ms) -> List[Dict[str, Any]]:
    """Pages loading slower than ``threshold`` ms, slowest first."""
    slow = [p for p in pages if p.load_time_ms and p.load_time_ms > threshold]
    slow.sort(key=lambda p: p.load_time_ms, reverse=True)
    return [
        _page_ref(p, load_time_ms=p.load_time_ms, first_byte_time_ms=p.first_byte_time_ms)
        for p in slow
    ]


def find_large_pages(pages: Sequence[Any], threshold: int = DEFAULT_TECHNICAL_THRESHOLDS.large_page_bytes) -> List[Dict[str, Any]]:
    """Pages heavier than ``threshold`` bytes, largest first."""
    large = [p for p in pages if p.size_bytes and p.size_bytes > threshold]
    large.sort(key=lambda p: p.size_bytes, reverse=True)
    return [_page_ref(p, size_bytes=p.size_bytes) for p in large]


def find_non_indexable_pages(pages: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Pages search engines will not index as-is.

    Reason precedence: noindex, then canonical_mismatch, then not_indexable.
    """
    results = []
    for page in pages:
        canonical_mismatch = bool(page.canonical_url) and page.canonical_url != page.url
        if not (page.is_indexable is False or page.has_robots_noindex is True or canonical_mismatch):
            continue

        if page.has_robots_noindex:
            reason = "noindex"
        elif canonical_mismatch:
            reason = "canonical_mismatch"
        else:
            reason = "not_indexable"
        results.append(_page_ref(page, reason=reason, canonical_url=page.canonical_url))
    return results


def build_broken_links(links: Sequence[Any], pages: Sequence[Any]) -> List[BrokenLink]:
    """Attach source page url/title to each broken link."""
    pages_by_id = {page.id: page for page in pages}
    broken = []
    for link in links:
        source = pages_by_id.get(link.source_page_id)
        broken.append(BrokenLink(
            id=link.id,
            source_page_id=link.source_page_id,
            source_url=source.url if source else "",
            source_title=source.title if source else None,
            destination_url=link.destination_url,
            http_status=link.http_status,
            anchor_text=link.anchor_text,
        ))
    return broken


def calculate_technical_health_summary(data: TechnicalHealthData) -> TechnicalHealthSummary:
    """
    4xx/5xx pages, broken links and not_indexable pages are critical.
    Other non-indexable reasons, redirects, slow and large pages are warnings.
    """
    critical = sum(d.count for d in data.status_distribution if d.category in ("4xx", "5xx"))
    critical += len(data.broken_links)

    warnings = 0
    for page in data.non_indexable_pages:
        if page["reason"] == "not_indexable":
            critical += 1
        else:
            warnings += 1

    warnings += len(data.redirect_pages) + len(data.slow_pages) + len(data.large_pages)

    # Rough score out of 100
    passed = max(0, 100 - critical - warnings)
    return TechnicalHealthSummary(critical=critical, warnings=warnings, passed=passed)


def build_technical_health(
    pages: Sequence[Any],
    broken_links: Sequence[Any],
    thresholds: Optional[TechnicalHealthThresholds] = None,
) -> TechnicalHealthData:
    """Build the technical health report from page rows and broken link rows."""
    thresholds = thresholds or TechnicalHealthThresholds.from_settings()
    data = TechnicalHealthData(
        status_distribution=build_status_distribution(pages),
        redirect_pages=find_redirect_pages(pages),
        broken_links=build_broken_links(broken_links, pages),
        slow_pages=find_slow_pages(pages, thresholds.slow_page_ms),
        large_pages=find_large_pages(pages, thresholds.large_page_bytes),
        non_indexable_pages=find_non_indexable_pages(pages),
    )
    data.summary = calculate_technical_health_summary(data)
    return data
