"""Site architecture: crawl depth, orphan pages and internal link counts."""
import math
from typing import Any, Dict, List, Optional, Sequence

from rankriot.core.config import settings

DEEP_PAGE_THRESHOLD = 4


def _depth(page: Any) -> int:
    return page.depth if page.depth is not None else 0


def _page_ref(page: Any) -> Dict[str, Any]:
    return {"id": str(page.id), "url": page.url, "title": page.title}


def calculate_depth_distribution(pages: Sequence[Any]) -> List[Dict[str, Any]]:
    """Pages grouped by depth (missing depth counts as 0), shallowest first."""
    by_depth: Dict[int, List[Any]] = {}
    for page in pages:
        by_depth.setdefault(_depth(page), []).append(page)

    return [
        {
            "depth": depth,
            "count": len(members),
            "pages": [
                {**_page_ref(p), "depth": p.depth}
                for p in sorted(members, key=lambda p: p.url)
            ],
        }
        for depth, members in sorted(by_depth.items())
    ]


def find_orphan_pages(pages: Sequence[Any], internal_links: Sequence[Any]) -> List[Dict[str, Any]]:
    """Pages with no inbound internal link. The homepage (depth 0) is never an orphan."""
    linked = {
        link.destination_page_id for link in internal_links
        if link.destination_page_id is not None
    }
    return [
        _page_ref(page) for page in pages
        if page.id not in linked and _depth(page) > 0
    ]


def find_deep_pages(pages: Sequence[Any], threshold: int = DEEP_PAGE_THRESHOLD) -> List[Dict[str, Any]]:
    deep = [page for page in pages if _depth(page) >= threshold]
    deep.sort(key=_depth, reverse=True)
    return [{**_page_ref(p), "depth": p.depth} for p in deep]


def calculate_link_stats(pages: Sequence[Any], internal_links: Sequence[Any]) -> List[Dict[str, Any]]:
    """Inbound and outbound internal link counts for every page."""
    inbound = {page.id: 0 for page in pages}
    outbound = {page.id: 0 for page in pages}

    for link in internal_links:
        outbound[link.source_page_id] = outbound.get(link.source_page_id, 0) + 1
        if link.destination_page_id:
            inbound[link.destination_page_id] = inbound.get(link.destination_page_id, 0) + 1

    return [
        {
            **_page_ref(page),
            "inbound_count": inbound.get(page.id, 0),
            "outbound_count": outbound.get(page.id, 0),
        }
        for page in pages
    ]


def get_pages_by_link_count(stats: Sequence[Dict[str, Any]], order: str = "most", limit: int = 10) -> List[Dict[str, Any]]:
    """Top ``limit`` pages by total (inbound + outbound) links; ``order`` is "most" or "fewest"."""
    def total(stat):
        return stat["inbound_count"] + stat["outbound_count"]

    return sorted(stats, key=total, reverse=(order == "most"))[:limit]


def calculate_site_architecture_summary(data: Dict[str, Any]) -> Dict[str, Any]:
    distribution = data["depth_distribution"]
    total_pages = sum(d["count"] for d in distribution)
    depth_sum = sum(d["depth"] * d["count"] for d in distribution)
    avg_depth = depth_sum / total_pages if total_pages else 0

    return {
        "total_pages": total_pages,
        "avg_depth": math.floor(avg_depth * 10 + 0.5) / 10,
        "max_depth": max((d["depth"] for d in distribution), default=0),
        "orphan_count": len(data["orphan_pages"]),
        "deep_page_count": len(data["deep_pages"]),
    }


def build_site_architecture(
    pages: Sequence[Any],
    internal_links: Sequence[Any],
    deep_page_threshold: Optional[int] = None,
    list_limit: Optional[int] = None,
) -> Dict[str, Any]:
    """Build the site architecture report from page rows and internal link rows."""
    threshold = deep_page_threshold if deep_page_threshold is not None else settings.deep_page_threshold
    limit = list_limit if list_limit is not None else settings.dashboard_list_limit

    link_stats = calculate_link_stats(pages, internal_links)
    data = {
        "depth_distribution": calculate_depth_distribution(pages),
        "orphan_pages": find_orphan_pages(pages, internal_links),
        "deep_pages": find_deep_pages(pages, threshold),
        "pages_with_most_links": get_pages_by_link_count(link_stats, "most", limit),
        "pages_with_fewest_links": get_pages_by_link_count(link_stats, "fewest", limit),
    }
    data["summary"] = calculate_site_architecture_summary(data)
    return data
