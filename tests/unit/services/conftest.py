"""Fixtures for service tests backed by the in-memory database"""
import pytest
from datetime import datetime, timezone

from rankriot.db.models import Issue, Page, PageLink, Project, Scan


@pytest.fixture
async def project(test_db_session, profile):
    """SEO project owned by the signed-in user"""
    row = Project(
        user_id=profile.id,
        name="Example Store",
        url="https://example.com",
        project_type="seo",
        scan_frequency="weekly",
    )
    test_db_session.add(row)
    await test_db_session.commit()
    await test_db_session.refresh(row)
    return row


@pytest.fixture
async def crawl(test_db_session, project):
    """One finished scan with three pages, links and issues"""
    scan = Scan(
        project_id=project.id,
        scan_type="full",
        status="completed",
        pages_scanned=3,
        issues_found=3,
        started_at=datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc),
        completed_at=datetime(2026, 3, 2, 8, 5, tzinfo=timezone.utc),
    )
    test_db_session.add(scan)
    await test_db_session.flush()

    home = Page(
        project_id=project.id,
        url="https://example.com/",
        title="Example Store - Home",
        meta_description="Shop the example store",
        h1s=["Welcome"],
        word_count=650,
        http_status=200,
        depth=0,
        is_indexable=True,
        images=[{"src": "/hero.jpg", "alt": "Hero"}, {"src": "/logo.png", "alt": ""}],
    )
    about = Page(
        project_id=project.id,
        url="https://example.com/about",
        title="About us",
        meta_description=None,
        h1s=["About"],
        word_count=80,
        http_status=200,
        depth=1,
        is_indexable=True,
    )
    old = Page(
        project_id=project.id,
        url="https://example.com/old-offer",
        title=None,
        http_status=404,
        depth=2,
        is_indexable=False,
    )
    test_db_session.add_all([home, about, old])
    await test_db_session.flush()

    test_db_session.add_all([
        PageLink(project_id=project.id, source_page_id=home.id, destination_page_id=about.id,
                 destination_url=about.url, link_type="internal", anchor_text="About", is_broken=False),
        PageLink(project_id=project.id, source_page_id=about.id, destination_page_id=old.id,
                 destination_url=old.url, link_type="internal", anchor_text="Offer",
                 http_status=404, is_broken=True),
        PageLink(project_id=project.id, source_page_id=home.id, destination_url="https://partner.example.org/",
                 link_type="external", is_broken=False),
    ])
    test_db_session.add_all([
        Issue(project_id=project.id, scan_id=scan.id, page_id=old.id, issue_type="http_error",
              severity="critical", description="Page returns 404"),
        Issue(project_id=project.id, scan_id=scan.id, page_id=about.id, issue_type="thin_content",
              severity="medium", description="Thin content"),
        Issue(project_id=project.id, scan_id=scan.id, page_id=about.id, issue_type="missing_meta",
              severity="high", description="Missing meta description"),
        Issue(project_id=project.id, scan_id=scan.id, page_id=home.id, issue_type="missing_alt",
              severity="low", description="Image missing alt", is_fixed=True),
    ])
    await test_db_session.commit()

    return {"scan": scan, "home": home, "about": about, "old": old}
