"""Media analysis: image counts and alt-text coverage."""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass
class PageWithImages:
    id: Any
    url: str
    title: Optional[str]
    images: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def image_count(self) -> int:
        return len(self.images)

    @property
    def missing_alt_count(self) -> int:
        return sum(1 for img in self.images if is_missing_alt(img))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "url": self.url,
            "title": self.title,
            "image_count": self.image_count,
            "missing_alt_count": self.missing_alt_count,
        }


def is_missing_alt(image: Dict[str, Any]) -> bool:
    alt = image.get("alt")
    return not alt or not str(alt).strip()


def normalize_image(raw: Any) -> Optional[Dict[str, Any]]:
    if isinstance(raw, dict):
        return {"src": raw.get("src") or "", "alt": raw.get("alt")}
    if isinstance(raw, str):
        return {"src": raw, "alt": None}
    return None


def parse_images_from_pages(pages: Sequence[Any]) -> List[PageWithImages]:
    """Read the stored ``images`` JSON of each page row."""
    parsed = []
    for page in pages:
        images = [img for img in (normalize_image(raw) for raw in (page.images or [])) if img]
        parsed.append(PageWithImages(id=page.id, url=page.url, title=page.title, images=images))
    return parsed


def calculate_alt_text_coverage(pages: Sequence[PageWithImages]) -> Dict[str, int]:
    """Image totals and alt coverage percent (100 when there are no images)."""
    total = sum(p.image_count for p in pages)
    missing = sum(p.missing_alt_count for p in pages)
    with_alt = total - missing
    percent = int(math.floor(with_alt / total * 100 + 0.5)) if total else 100
    return {"total": total, "with_alt": with_alt, "missing": missing, "percent": percent}


def find_images_missing_alt(pages: Sequence[PageWithImages]) -> List[Dict[str, Any]]:
    return [
        {
            "page_id": str(page.id),
            "page_url": page.url,
            "page_title": page.title,
            "image_src": img["src"],
        }
        for page in pages
        for img in page.images
        if is_missing_alt(img)
    ]


def get_pages_by_image_count(pages: Sequence[PageWithImages], limit: int = 10) -> List[PageWithImages]:
    with_images = [p for p in pages if p.image_count > 0]
    with_images.sort(key=lambda p: p.image_count, reverse=True)
    return with_images[:limit]


def get_pages_with_missing_alt(pages: Sequence[PageWithImages]) -> List[PageWithImages]:
    missing = [p for p in pages if p.missing_alt_count > 0]
    missing.sort(key=lambda p: p.missing_alt_count, reverse=True)
    return missing


def calculate_media_analysis_summary(
    pages_with_missing_alt: Sequence[PageWithImages],
    alt_coverage_percent: int,
    pages_with_most_images: Sequence[PageWithImages],
) -> Dict[str, int]:
    """
    Pages missing more than 5 alt texts are critical, 1 to 5 are warnings.

    Coverage below 50% adds one critical per 10 points under 50; coverage
    below 80% adds one warning per 10 points under 80.
    """
    critical = 0
    warnings = 0
    for page in pages_with_missing_alt:
        if page.missing_alt_count > 5:
            critical += 1
        elif page.missing_alt_count > 0:
            warnings += 1

    if alt_coverage_percent < 50:
        critical += (50 - alt_coverage_percent) // 10
    elif alt_coverage_percent < 80:
        warnings += (80 - alt_coverage_percent) // 10

    passed = max(0, len(pages_with_most_images) - critical - warnings)
    return {"critical": critical, "warnings": warnings, "passed": passed}


def build_media_analysis(pages: Sequence[Any], list_limit: int = 10) -> Dict[str, Any]:
    """Build the media analysis report from page rows that have stored images."""
    parsed = parse_images_from_pages([p for p in pages if p.images is not None])
    coverage = calculate_alt_text_coverage(parsed)
    most_images = get_pages_by_image_count(parsed, list_limit)
    missing_alt_pages = get_pages_with_missing_alt(parsed)

    return {
        "total_images": coverage["total"],
        "images_with_alt": coverage["with_alt"],
        "images_missing_alt": coverage["missing"],
        "alt_coverage_percent": coverage["percent"],
        "pages_with_most_images": [p.to_dict() for p in most_images],
        "images_missing_alt_list": find_images_missing_alt(parsed),
        "pages_with_missing_alt": [p.to_dict() for p in missing_alt_pages],
        "summary": calculate_media_analysis_summary(missing_alt_pages, coverage["percent"], most_images),
    }
