"""Project management and dashboard routes"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.analytics.export import content_disposition
from rankriot.core.auth import get_current_user
from rankriot.core.database import get_db
from rankriot.schemas.pages import PageListResponse
from rankriot.schemas.projects import (
    ProjectCreate,
    ProjectCreateResponse,
    ProjectResponse,
    ProjectUpdate,
    ScanStartResponse,
)
from rankriot.services import dashboard
from rankriot.services import projects as project_service
from rankriot.utils.responses import format_success_response

router = APIRouter(prefix="/projects", tags=["projects"])


def _csv_response(project_name: str, suffix: str, content: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": content_disposition(project_name, suffix)},
    )


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """List the signed-in user's projects, newest first."""
    return await project_service.list_projects(db, current_user)


@router.post("", response_model=ProjectCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Create a project and start its first scan.

    Re-submitting a URL already tracked with the same project type updates
    and rescans that project instead (200).

    Returns:
        Project id, whether it already existed, and whether the scan failed to start
    """
    result = await project_service.create_project(db, current_user, project_data)
    body = ProjectCreateResponse(
        id=result.project.id,
        existing=result.existing,
        message=result.message,
        scan_failed=result.scan_failed,
    )
    if result.existing:
        return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump(mode="json"))
    return body


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    return await project_service.get_owned_project(db, project_id, current_user)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    project_data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    return await project_service.update_project(db, current_user, project_id, project_data)


@router.delete("/{project_id}")
async def delete_project(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Delete a project together with its scans, pages, issues and links."""
    await project_service.delete_project(db, current_user, project_id)
    return format_success_response("Project deleted", data={"id": str(project_id)})


@router.post("/{project_id}/scan", response_model=ScanStartResponse)
async def start_scan(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Start an SEO crawl.

    The crawler runs asynchronously; results appear in the dashboard views
    once it has written them.
    """
    result = await project_service.start_scan(db, current_user, project_id)
    return ScanStartResponse(scan_id=result.scan_id, message="Scan started successfully")


@router.post("/{project_id}/audit", response_model=ScanStartResponse)
async def start_audit(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Start a website audit of an audit project."""
    result = await project_service.start_audit(db, current_user, project_id)
    return ScanStartResponse(scan_id=result.scan_id, message="Audit started successfully")


@router.get("/{project_id}/overview")
async def get_overview(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    project = await project_service.get_owned_project(db, project_id, current_user)
    return await dashboard.get_project_overview(db, project)


@router.get("/{project_id}/content-intelligence")
async def get_content_intelligence(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Thin content, missing/duplicate titles and meta, similar content."""
    project = await project_service.get_owned_project(db, project_id, current_user)
    return await dashboard.get_content_intelligence(db, project)


@router.get("/{project_id}/technical-health")
async def get_technical_health(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Status codes, broken links, redirects, slow/large and non-indexable pages."""
    project = await project_service.get_owned_project(db, project_id, current_user)
    return await dashboard.get_technical_health(db, project)


@router.get("/{project_id}/site-architecture")
async def get_site_architecture(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    project = await project_service.get_owned_project(db, project_id, current_user)
    return await dashboard.get_site_architecture(db, project)


@router.get("/{project_id}/media-analysis")
async def get_media_analysis(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    project = await project_service.get_owned_project(db, project_id, current_user)
    return await dashboard.get_media_analysis(db, project)


@router.get("/{project_id}/audit-results")
async def get_audit_results(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Latest audit result of an audit project (null until the first audit finishes)."""
    project = await project_service.get_owned_project(db, project_id, current_user)
    return {"audit": await dashboard.get_latest_audit_result(db, project)}


@router.get("/{project_id}/pages", response_model=PageListResponse)
async def list_pages(
    project_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    search: Optional[str] = Query(None, description="Substring of the URL or title"),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    project = await project_service.get_owned_project(db, project_id, current_user)
    return await dashboard.list_pages(db, project, page=page, page_size=page_size, search=search)


@router.get("/{project_id}/pages/{page_id}")
async def get_page_detail(
    project_id: UUID,
    page_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Page row with its SEO health score, issues and links."""
    project = await project_service.get_owned_project(db, project_id, current_user)
    return await dashboard.get_page_detail(db, project, page_id)


@router.get("/{project_id}/export/pages.csv")
async def export_pages(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    project = await project_service.get_owned_project(db, project_id, current_user)
    content = await dashboard.export_pages_csv(db, project)
    return _csv_response(project.name, "pages", content)


@router.get("/{project_id}/export/issues.csv")
async def export_issues(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    project = await project_service.get_owned_project(db, project_id, current_user)
    content = await dashboard.export_issues_csv(db, project)
    return _csv_response(project.name, "issues", content)
