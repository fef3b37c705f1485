"""SEO health score for a single page, and the simplified per-project average."""
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from rankriot.analytics.media_analysis import is_missing_alt, normalize_image

_SCHEME = re.compile(r"^https?://")


@dataclass
class SeoCheck:
    type: str  # critical | warning | passed
    message: str


@dataclass
class PageSeoScore:
    score: int
    issues: List[SeoCheck] = field(default_factory=list)

    def count(self, check_type: str) -> int:
        return sum(1 for issue in self.issues if issue.type == check_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "label": score_label(self.score),
            "critical": self.count("critical"),
            "warnings": self.count("warning"),
            "passed": self.count("passed"),
            "issues": [{"type": i.type, "message": i.message} for i in self.issues],
        }


def _normalize_url(url: str) -> str:
    return _SCHEME.sub("", url).rstrip("/")


def _list_length(value: Any) -> int:
    return len(value) if isinstance(value, list) else 0


def _has_content(value: Any) -> bool:
    return bool(value) and isinstance(value, (dict, list))


def calculate_page_seo_score(page: Any) -> PageSeoScore:
    """
    Score a page out of 100 by deducting points per failed check.

    Title -20 missing, -15 under 30 chars, -5 over 70. Meta description -15
    missing, -10 under 70, -5 over 165. H1 -15 missing, -5 multiple. No H2 -5.
    Noindex or not indexable -10. Canonical pointing elsewhere -5. HTTP 4xx/5xx
    -10, 3xx -5. One point per image without alt, at most 5. No Open Graph -3.
    """
    issues: List[SeoCheck] = []
    score = 100

    title = page.title
    if not title:
        issues.append(SeoCheck("critical", "Missing page title"))
        score -= 20
    elif len(title) < 30:
        issues.append(SeoCheck("critical", "Title is too short (< 30 chars)"))
        score -= 15
    elif len(title) > 70:
        issues.append(SeoCheck("warning", "Title is too long (> 70 chars)"))
        score -= 5
    elif 50 <= len(title) <= 60:
        issues.append(SeoCheck("passed", "Title length is optimal"))
    else:
        issues.append(SeoCheck("passed", "Title is present"))

    description = page.meta_description
    if not description:
        issues.append(SeoCheck("critical", "Missing meta description"))
        score -= 15
    elif len(description) < 70:
        issues.append(SeoCheck("critical", "Meta description is too short (< 70 chars)"))
        score -= 10
    elif len(description) > 165:
        issues.append(SeoCheck("warning", "Meta description is too long (> 165 chars)"))
        score -= 5
    elif 120 <= len(description) <= 155:
        issues.append(SeoCheck("passed", "Meta description length is optimal"))
    else:
        issues.append(SeoCheck("passed", "Meta description is present"))

    h1_count = _list_length(page.h1s)
    if h1_count == 0:
        issues.append(SeoCheck("critical", "Missing H1 heading"))
        score -= 15
    elif h1_count > 1:
        issues.append(SeoCheck("warning", f"Multiple H1 headings ({h1_count})"))
        score -= 5
    else:
        issues.append(SeoCheck("passed", "Single H1 heading present"))

    h2_count = _list_length(page.h2s)
    if h2_count == 0:
        issues.append(SeoCheck("warning", "No H2 headings found"))
        score -= 5
    else:
        issues.append(SeoCheck("passed", f"{h2_count} H2 heading(s) present"))

    if page.has_robots_noindex:
        issues.append(SeoCheck("warning", "Page is set to noindex"))
        score -= 10
    elif page.is_indexable is False:
        issues.append(SeoCheck("warning", "Page is not indexable"))
        score -= 10
    else:
        issues.append(SeoCheck("passed", "Page is indexable"))

    if page.canonical_url:
        if _normalize_url(page.canonical_url) != _normalize_url(page.url):
            issues.append(SeoCheck("warning", "Canonical URL differs from page URL"))
            score -= 5
        else:
            issues.append(SeoCheck("passed", "Canonical URL matches page URL"))

    status = page.http_status
    if status and status >= 400:
        issues.append(SeoCheck("critical", f"HTTP status error ({status})"))
        score -= 10
    elif status and status >= 300:
        issues.append(SeoCheck("warning", f"Page redirects ({status})"))
        score -= 5
    elif status == 200:
        issues.append(SeoCheck("passed", "HTTP status OK (200)"))

    images = [img for img in (normalize_image(raw) for raw in (page.images or [])) if img]
    if images:
        missing_alt = sum(1 for img in images if is_missing_alt(img))
        if missing_alt:
            issues.append(SeoCheck("warning", f"{missing_alt} image(s) missing alt text"))
            score -= min(5, missing_alt)
        else:
            issues.append(SeoCheck("passed", "All images have alt text"))

    if _has_content(page.open_graph):
        issues.append(SeoCheck("passed", "Open Graph tags present"))
    else:
        issues.append(SeoCheck("warning", "Missing Open Graph tags"))
        score -= 3

    if _has_content(page.twitter_card):
        issues.append(SeoCheck("passed", "Twitter Card tags present"))
    if _has_content(page.structured_data):
        issues.append(SeoCheck("passed", "Structured data present"))

    return PageSeoScore(score=max(0, score), issues=issues)


def score_label(score: int) -> str:
    if score >= 80:
        return "good"
    if score >= 60:
        return "needs work"
    return "poor"


def _simplified_score(page: Any) -> int:
    score = 100
    if not page.title:
        score -= 20
    if not page.meta_description:
        score -= 15
    h1_count = _list_length(page.h1s)
    if h1_count == 0:
        score -= 15
    elif h1_count > 1:
        score -= 5
    return max(0, score)


def calculate_snapshot_seo_score(pages: Sequence[Any]) -> int:
    """Rounded average of the simplified score (title, description, H1) over pages; 0 when empty."""
    if not pages:
        return 0
    average = sum(_simplified_score(p) for p in pages) / len(pages)
    return int(math.floor(average + 0.5))
