"""Unit tests for technical health"""
from rankriot.analytics.technical_health import (
    TechnicalHealthThresholds,
    build_broken_links,
    build_status_distribution,
    build_technical_health,
    categorize_http_status,
    find_large_pages,
    find_non_indexable_pages,
    find_slow_pages,
)


class TestStatusCategories:
    """Tests for HTTP status bucketing"""

    def test_categories(self):
        """Test each status range maps to its bucket"""
        assert categorize_http_status(200) == "2xx"
        assert categorize_http_status(301) == "3xx"
        assert categorize_http_status(404) == "4xx"
        assert categorize_http_status(503) == "5xx"

    def test_missing_status_is_server_error(self):
        """Test pages the crawler could not fetch count as 5xx"""
        assert categorize_http_status(None) == "5xx"
        assert categorize_http_status(0) == "5xx"

    def test_distribution_drops_empty_buckets(self, make_page):
        """Test the distribution lists only buckets with pages, in order"""
        pages = [
            make_page("https://example.com/gone", http_status=410),
            make_page("https://example.com/", http_status=200),
            make_page("https://example.com/missing", http_status=404),
        ]

        distribution = build_status_distribution(pages)

        assert [d.category for d in distribution] == ["2xx", "4xx"]
        assert [p["http_status"] for p in distribution[1].pages] == [404, 410]


class TestPerformance:
    """Tests for slow and large page detection"""

    def test_slow_pages_sorted_slowest_first(self, make_page):
        """Test only pages over the threshold are listed, slowest first"""
        pages = [
            make_page("https://example.com/a", load_time_ms=3100),
            make_page("https://example.com/b", load_time_ms=1200),
            make_page("https://example.com/c", load_time_ms=5000),
        ]
        assert [p["url"] for p in find_slow_pages(pages, 3000)] == ["https://example.com/c", "https://example.com/a"]

    def test_large_pages(self, make_page):
        """Test only pages heavier than the threshold are listed"""
        pages = [
            make_page("https://example.com/a", size_bytes=3 * 1024 * 1024),
            make_page("https://example.com/b", size_bytes=1024),
        ]
        large = find_large_pages(pages, 2 * 1024 * 1024)
        assert len(large) == 1
        assert large[0]["size_bytes"] == 3 * 1024 * 1024


class TestNonIndexable:
    """Tests for non-indexable page reasons"""

    def test_reason_precedence(self, make_page):
        """Test noindex wins over a canonical mismatch"""
        pages = [
            make_page("https://example.com/a", has_robots_noindex=True, canonical_url="https://example.com/b"),
            make_page("https://example.com/c", canonical_url="https://example.com/"),
            make_page("https://example.com/d", is_indexable=False),
            make_page("https://example.com/e", canonical_url="https://example.com/e"),
        ]

        reasons = {p["url"]: p["reason"] for p in find_non_indexable_pages(pages)}

        assert reasons == {
            "https://example.com/a": "noindex",
            "https://example.com/c": "canonical_mismatch",
            "https://example.com/d": "not_indexable",
        }


class TestBrokenLinks:
    """Tests for broken link enrichment"""

    def test_source_page_attached(self, make_page, make_link):
        """Test broken links carry the source page url and title"""
        source = make_page("https://example.com/blog", title="Blog")
        link = make_link(source.id, "https://example.com/old", http_status=404, is_broken=True)
        orphan_link = make_link(make_page("https://other.example.com/").id, "https://example.com/x")

        broken = build_broken_links([link, orphan_link], [source])

        assert broken[0].source_url == "https://example.com/blog"
        assert broken[0].source_title == "Blog"
        assert broken[0].to_dict()["http_status"] == 404
        assert broken[1].source_url == ""


class TestBuildTechnicalHealth:
    """Tests for the full technical report"""

    def test_summary(self, make_page, make_link):
        """Test critical and warning counts across every check"""
        home = make_page("https://example.com/", load_time_ms=4000)
        pages = [
            home,
            make_page("https://example.com/moved", http_status=301, redirect_url="https://example.com/new"),
            make_page("https://example.com/missing", http_status=404),
            make_page("https://example.com/hidden", is_indexable=False),
            make_page("https://example.com/dup", canonical_url="https://example.com/"),
        ]
        links = [make_link(home.id, "https://example.com/missing", http_status=404, is_broken=True)]

        data = build_technical_health(pages, links, TechnicalHealthThresholds(slow_page_ms=3000))
        report = data.to_dict()

        # 404 page, broken link, not indexable
        assert report["summary"]["critical"] == 3
        # canonical mismatch, redirect, slow page
        assert report["summary"]["warnings"] == 3
        assert report["summary"]["passed"] == 94
        assert report["broken_links"][0]["source_url"] == "https://example.com/"

    def test_empty_project(self):
        """Test an empty project scores a full pass"""
        report = build_technical_health([], [], TechnicalHealthThresholds()).to_dict()
        assert report["status_distribution"] == []
        assert report["summary"] == {"critical": 0, "warnings": 0, "passed": 100}
