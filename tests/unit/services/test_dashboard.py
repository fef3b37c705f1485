"""Unit tests for dashboard views"""
import pytest
from datetime import datetime, timezone
from uuid import uuid4

from rankriot.analytics.export import UTF8_BOM
from rankriot.db.models import Page, Project, Scan
from rankriot.exceptions import ProjectAccessError
from rankriot.services import dashboard


class TestOverview:
    """Tests for the project overview"""

    async def test_counts(self, test_db_session, project, crawl):
        """Test headline counts only include unfixed issues and broken links"""
        overview = await dashboard.get_project_overview(test_db_session, project)

        assert overview["pages_count"] == 3
        assert overview["issues_count"] == 3
        assert overview["broken_links_count"] == 1
        assert overview["latest_scan"]["id"] == crawl["scan"].id
        assert len(overview["scan_history"]) == 1

    async def test_recent_issues_carry_page(self, test_db_session, project, crawl):
        """Test recent issues include their page and display level"""
        overview = await dashboard.get_project_overview(test_db_session, project)

        issues = {i["issue_type"]: i for i in overview["recent_issues"]}
        assert set(issues) == {"http_error", "thin_content", "missing_meta"}
        assert issues["http_error"]["page"]["url"] == "https://example.com/old-offer"
        assert issues["http_error"]["level"] == "critical"
        assert issues["thin_content"]["level"] == "warning"

    async def test_empty_project(self, test_db_session, project):
        """Test a project that was never scanned"""
        overview = await dashboard.get_project_overview(test_db_session, project)
        assert overview["latest_scan"] is None
        assert overview["recent_issues"] == []


class TestUserDashboard:
    """Tests for the signed-in user's dashboard"""

    async def test_recent_projects_and_totals(self, test_db_session, profile, project, crawl):
        """Test totals cover the five newest projects and scans carry their project name"""
        older = [
            Project(
                user_id=profile.id,
                name=f"Older {day}",
                url=f"https://older-{day}.example.com",
                created_at=datetime(2020, 1, day, tzinfo=timezone.utc),
            )
            for day in range(1, 6)
        ]
        test_db_session.add_all(older)
        test_db_session.add(Project(user_id=uuid4(), name="Someone else", url="https://else.example.com"))
        await test_db_session.flush()
        oldest = older[0]
        test_db_session.add(Page(project_id=oldest.id, url="https://older-1.example.com/"))
        test_db_session.add(Scan(
            project_id=oldest.id,
            status="completed",
            started_at=datetime(2026, 3, 5, tzinfo=timezone.utc),
        ))
        await test_db_session.commit()

        view = await dashboard.get_user_dashboard(test_db_session, profile.id)

        assert view["projects_count"] == 6
        assert [p["name"] for p in view["recent_projects"]] == [
            "Example Store", "Older 5", "Older 4", "Older 3", "Older 2",
        ]
        assert view["issues_count"] == 3
        assert view["pages_count"] == 3
        assert [s["id"] for s in view["recent_scans"]] == [crawl["scan"].id]
        assert view["recent_scans"][0]["project_name"] == "Example Store"

    async def test_no_projects(self, test_db_session, profile):
        """Test a new user gets empty lists and zero totals"""
        view = await dashboard.get_user_dashboard(test_db_session, profile.id)
        assert view == {
            "recent_projects": [],
            "projects_count": 0,
            "issues_count": 0,
            "pages_count": 0,
            "recent_scans": [],
        }


class TestAnalyticsViews:
    """Tests for the analytics views over stored crawl results"""

    async def test_content_intelligence(self, test_db_session, project, crawl):
        """Test thin pages and missing metadata are reported"""
        report = await dashboard.get_content_intelligence(test_db_session, project)

        assert [p["url"] for p in report["thin_content"]] == ["https://example.com/about"]
        assert [p["url"] for p in report["missing_titles"]] == ["https://example.com/old-offer"]
        assert len(report["missing_meta_descriptions"]) == 2

    async def test_technical_health(self, test_db_session, project, crawl):
        """Test broken links carry their source page"""
        report = await dashboard.get_technical_health(test_db_session, project)

        assert report["broken_links"][0]["source_url"] == "https://example.com/about"
        categories = {d["category"]: d["count"] for d in report["status_distribution"]}
        assert categories == {"2xx": 2, "4xx": 1}

    async def test_site_architecture(self, test_db_session, project, crawl):
        """Test only internal links count towards the architecture"""
        report = await dashboard.get_site_architecture(test_db_session, project)

        assert report["orphan_pages"] == []
        assert report["summary"]["max_depth"] == 2
        stats = {p["url"]: p for p in report["pages_with_most_links"]}
        assert stats["https://example.com/"]["outbound_count"] == 1

    async def test_media_analysis(self, test_db_session, project, crawl):
        """Test only pages with stored images are analysed"""
        report = await dashboard.get_media_analysis(test_db_session, project)

        assert report["total_images"] == 2
        assert report["images_missing_alt"] == 1
        assert report["alt_coverage_percent"] == 50


class TestPages:
    """Tests for the pages table and page detail"""

    async def test_list_and_search(self, test_db_session, project, crawl):
        """Test pagination and URL/title search"""
        first_page = await dashboard.list_pages(test_db_session, project, page=1, page_size=2)
        assert first_page["total"] == 3
        assert [p.url for p in first_page["items"]] == ["https://example.com/", "https://example.com/about"]

        found = await dashboard.list_pages(test_db_session, project, search="ABOUT")
        assert [p.url for p in found["items"]] == ["https://example.com/about"]

    async def test_search_wildcards_are_literal(self, test_db_session, project, crawl):
        """Test % and _ in a search only match themselves"""
        test_db_session.add(Page(
            project_id=project.id,
            url="https://example.com/summer_sale",
            title="Save 50% today",
        ))
        await test_db_session.commit()

        for term in ("%", "_"):
            found = await dashboard.list_pages(test_db_session, project, search=term)
            assert [p.url for p in found["items"]] == ["https://example.com/summer_sale"]
            assert found["total"] == 1

    async def test_page_detail(self, test_db_session, project, crawl):
        """Test the detail view joins score, issues and links"""
        detail = await dashboard.get_page_detail(test_db_session, project, crawl["about"].id)

        assert detail["page"]["url"] == "https://example.com/about"
        assert detail["display"]["path"] == "/about"
        assert detail["seo_score"]["score"] < 100
        assert len(detail["issues"]) == 2
        assert [l["destination_url"] for l in detail["outgoing_links"]] == ["https://example.com/old-offer"]
        assert [l["source_url"] for l in detail["incoming_links"]] == ["https://example.com/"]

    async def test_unknown_page(self, test_db_session, project, crawl):
        """Test pages outside the project are not found"""
        with pytest.raises(ProjectAccessError) as exc_info:
            await dashboard.get_page_detail(test_db_session, project, uuid4())
        assert exc_info.value.error_code.code == "PROJECT_005"


class TestExports:
    """Tests for CSV exports"""

    async def test_pages_csv(self, test_db_session, project, crawl):
        """Test the pages export has a BOM, header and one row per page"""
        content = await dashboard.export_pages_csv(test_db_session, project)

        assert content.startswith(UTF8_BOM + "URL,Title")
        assert len(content.split("\n")) == 4

    async def test_issues_csv(self, test_db_session, project, crawl):
        """Test fixed issues are left out of the export"""
        content = await dashboard.export_issues_csv(test_db_session, project)

        lines = content[len(UTF8_BOM):].split("\n")
        assert lines[0] == "Page URL,Issue Type,Severity,Description,Created At"
        assert len(lines) == 4
        assert not any("missing_alt" in line for line in lines)
