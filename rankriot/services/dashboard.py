"""Read-side dashboard views over crawl results.

Callers must pass a project that already passed the ownership check; every
query here is filtered by that project's id. The user dashboard is filtered
by the signed-in user's id instead.
"""
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.analytics.content_intelligence import build_content_intelligence
from rankriot.analytics.export import (
    ISSUES_EXPORT_COLUMNS,
    PAGES_EXPORT_COLUMNS,
    UTF8_BOM,
    generate_csv,
)
from rankriot.analytics.formatting import (
    format_bytes,
    format_load_time,
    severity_level,
    severity_style,
    truncate_url,
)
from rankriot.analytics.media_analysis import build_media_analysis
from rankriot.analytics.seo_score import calculate_page_seo_score
from rankriot.analytics.site_architecture import build_site_architecture
from rankriot.analytics.technical_health import build_technical_health
from rankriot.core.config import settings
from rankriot.db.enums import LinkType
from rankriot.db.models import AuditResult, Issue, Page, PageLink, Project, Scan
from rankriot.errors import ErrorCodeDictionary
from rankriot.exceptions import ProjectAccessError
from rankriot.utils.database import count_rows, fetch_all, model_to_dict


RECENT_ISSUES_LIMIT = 5
RECENT_PROJECTS_LIMIT = 5
RECENT_SCANS_LIMIT = 5


def _issue_with_page(issue: Issue, page_url: Optional[str], page_title: Optional[str]) -> Dict[str, Any]:
    level = severity_level(issue.severity)
    return {
        **model_to_dict(issue),
        "page": {"url": page_url, "title": page_title},
        "level": level,
        "style": severity_style(level),
    }


async def _project_pages(db: AsyncSession, project_id: UUID, *criteria):
    return await fetch_all(db, select(Page).where(Page.project_id == project_id, *criteria))


async def get_project_overview(db: AsyncSession, project: Project) -> Dict[str, Any]:
    """Headline counts, latest scan, recent unfixed issues and scan history"""
    pages_count = await count_rows(db, Page, Page.project_id == project.id)
    issues_count = await count_rows(db, Issue, Issue.project_id == project.id, Issue.is_fixed == False)  # noqa: E712
    broken_links_count = await count_rows(db, PageLink, PageLink.project_id == project.id, PageLink.is_broken == True)  # noqa: E712

    scans = await fetch_all(
        db,
        select(Scan)
        .where(Scan.project_id == project.id)
        .order_by(Scan.started_at.desc().nulls_last(), Scan.created_at.desc())
        .limit(settings.dashboard_list_limit),
    )

    result = await db.execute(
        select(Issue, Page.url, Page.title)
        .outerjoin(Page, Page.id == Issue.page_id)
        .where(Issue.project_id == project.id, Issue.is_fixed == False)  # noqa: E712
        .order_by(Issue.created_at.desc())
        .limit(RECENT_ISSUES_LIMIT)
    )
    recent_issues = [_issue_with_page(issue, url, title) for issue, url, title in result.all()]

    return {
        "project": model_to_dict(project),
        "pages_count": pages_count,
        "issues_count": issues_count,
        "broken_links_count": broken_links_count,
        "latest_scan": model_to_dict(scans[0]) if scans else None,
        "recent_issues": recent_issues,
        "scan_history": [model_to_dict(scan) for scan in scans],
    }


async def get_user_dashboard(db: AsyncSession, user_id: UUID) -> Dict[str, Any]:
    """
    Landing view for a signed-in user.

    Issue, page and scan figures cover the most recent projects only, the
    same set shown in the recent projects list.
    """
    projects = await fetch_all(
        db,
        select(Project)
        .where(Project.user_id == user_id)
        .order_by(Project.created_at.desc())
        .limit(RECENT_PROJECTS_LIMIT),
    )
    projects_count = await count_rows(db, Project, Project.user_id == user_id)
    project_ids = [project.id for project in projects]

    issues_count = 0
    pages_count = 0
    recent_scans = []
    if project_ids:
        issues_count = await count_rows(db, Issue, Issue.project_id.in_(project_ids), Issue.is_fixed == False)  # noqa: E712
        pages_count = await count_rows(db, Page, Page.project_id.in_(project_ids))
        result = await db.execute(
            select(Scan, Project.name)
            .join(Project, Project.id == Scan.project_id)
            .where(Scan.project_id.in_(project_ids))
            .order_by(Scan.started_at.desc().nulls_last(), Scan.created_at.desc())
            .limit(RECENT_SCANS_LIMIT)
        )
        recent_scans = [{**model_to_dict(scan), "project_name": name} for scan, name in result.all()]

    return {
        "recent_projects": [model_to_dict(project) for project in projects],
        "projects_count": projects_count,
        "issues_count": issues_count,
        "pages_count": pages_count,
        "recent_scans": recent_scans,
    }


async def get_content_intelligence(db: AsyncSession, project: Project) -> Dict[str, Any]:
    pages = await _project_pages(db, project.id)
    return build_content_intelligence(pages).to_dict()


async def get_technical_health(db: AsyncSession, project: Project) -> Dict[str, Any]:
    pages = await _project_pages(db, project.id)
    broken_links = await fetch_all(
        db,
        select(PageLink).where(
            PageLink.project_id == project.id,
            PageLink.is_broken == True,  # noqa: E712
        ),
    )
    return build_technical_health(pages, broken_links).to_dict()


async def get_site_architecture(db: AsyncSession, project: Project) -> Dict[str, Any]:
    pages = await _project_pages(db, project.id)
    internal_links = await fetch_all(
        db,
        select(PageLink).where(
            PageLink.project_id == project.id,
            PageLink.link_type == LinkType.INTERNAL.value,
        ),
    )
    return build_site_architecture(pages, internal_links)


async def get_media_analysis(db: AsyncSession, project: Project) -> Dict[str, Any]:
    pages = await _project_pages(db, project.id, Page.images.isnot(None))
    return build_media_analysis(pages, settings.dashboard_list_limit)


async def get_latest_audit_result(db: AsyncSession, project: Project) -> Optional[Dict[str, Any]]:
    """Most recent audit written by the crawler for an audit project"""
    result = await db.execute(
        select(AuditResult)
        .where(AuditResult.project_id == project.id)
        .order_by(AuditResult.created_at.desc())
        .limit(1)
    )
    audit = result.scalar_one_or_none()
    return model_to_dict(audit) if audit else None


async def list_pages(
    db: AsyncSession,
    project: Project,
    page: int = 1,
    page_size: int = 50,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    """Pages of a project ordered by URL, optionally filtered by URL/title substring"""
    criteria = [Page.project_id == project.id]
    if search:
        term = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{term}%"
        criteria.append(or_(
            Page.url.ilike(pattern, escape="\\"),
            Page.title.ilike(pattern, escape="\\"),
        ))

    total = await count_rows(db, Page, *criteria)
    items = await fetch_all(
        db,
        select(Page)
        .where(*criteria)
        .order_by(Page.url)
        .offset((page - 1) * page_size)
        .limit(page_size),
    )
    return {"items": items, "total": total, "page": page, "page_size": page_size}


async def get_page_detail(db: AsyncSession, project: Project, page_id: UUID) -> Dict[str, Any]:
    """Page row, SEO health score, its issues and its inbound/outbound links"""
    result = await db.execute(
        select(Page).where(Page.id == page_id, Page.project_id == project.id)
    )
    page = result.scalar_one_or_none()
    if page is None:
        raise ProjectAccessError(entity_id=page_id, error_code=ErrorCodeDictionary.PROJECT_005)

    issues = await fetch_all(
        db,
        select(Issue)
        .where(Issue.project_id == project.id, Issue.page_id == page.id)
        .order_by(Issue.created_at.desc()),
    )
    outgoing = await fetch_all(
        db,
        select(PageLink).where(
            PageLink.project_id == project.id,
            PageLink.source_page_id == page.id,
        ),
    )
    incoming = await db.execute(
        select(PageLink, Page.url)
        .join(Page, Page.id == PageLink.source_page_id)
        .where(
            PageLink.project_id == project.id,
            PageLink.destination_url == page.url,
        )
    )

    return {
        "page": model_to_dict(page),
        "display": {
            "path": truncate_url(page.url),
            "size": format_bytes(page.size_bytes),
            "load_time": format_load_time(page.load_time_ms),
        },
        "seo_score": calculate_page_seo_score(page).to_dict(),
        "issues": [_issue_with_page(issue, page.url, page.title) for issue in issues],
        "outgoing_links": [model_to_dict(link) for link in outgoing],
        "incoming_links": [
            {**model_to_dict(link), "source_url": source_url}
            for link, source_url in incoming.all()
        ],
    }


async def export_pages_csv(db: AsyncSession, project: Project) -> str:
    """Pages ordered by URL as CSV text with a UTF-8 BOM"""
    pages = await fetch_all(
        db,
        select(Page).where(Page.project_id == project.id).order_by(Page.url),
    )
    rows = [model_to_dict(p) for p in pages]
    return UTF8_BOM + generate_csv(rows, PAGES_EXPORT_COLUMNS)


async def export_issues_csv(db: AsyncSession, project: Project) -> str:
    """Unfixed issues, newest first, as CSV text with a UTF-8 BOM"""
    result = await db.execute(
        select(Issue, Page.url)
        .outerjoin(Page, Page.id == Issue.page_id)
        .where(Issue.project_id == project.id, Issue.is_fixed == False)  # noqa: E712
        .order_by(Issue.created_at.desc())
    )
    rows = [
        {
            "page_url": page_url or "",
            "issue_type": issue.issue_type,
            "severity": issue.severity,
            "description": issue.description,
            "created_at": issue.created_at,
        }
        for issue, page_url in result.all()
    ]
    return UTF8_BOM + generate_csv(rows, ISSUES_EXPORT_COLUMNS)
