"""Project CRUD and scan triggers.

Every query is scoped to the signed-in user; a project owned by someone else
is reported exactly like a missing one.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.core.billing.plans import can_create_project, get_plan_limits
from rankriot.db.enums import ProjectType, ScanFrequency
from rankriot.db.models import Project, Scan
from rankriot.errors import ErrorCodeDictionary
from rankriot.exceptions import PlanLimitError, ProjectAccessError, ProjectTypeError
from rankriot.schemas.projects import ProjectCreate, ProjectUpdate
from rankriot.services.crawler import CrawlerClient, ScanTriggerResult, trigger_scan_quietly
from rankriot.services.subscriptions import get_user_plan
from rankriot.utils.database import count_rows, fetch_all
from rankriot.utils.urls import normalize_project_url

logger = logging.getLogger(__name__)


@dataclass
class ProjectCreateResult:
    project: Project
    existing: bool
    scan_failed: bool

    @property
    def message(self) -> str:
        if self.existing:
            return "Project updated and new scan started"
        return "Project created and scan started"


def user_uuid(current_user: dict) -> UUID:
    """Owner id of the signed-in user"""
    try:
        return UUID(str(current_user["user_id"]))
    except (KeyError, ValueError):
        raise ProjectAccessError()


def _default_scan_frequency(project_type: str, requested: Optional[ScanFrequency]) -> Optional[str]:
    if project_type != ProjectType.SEO.value:
        return None
    return (requested or ScanFrequency.WEEKLY).value


async def list_projects(db: AsyncSession, current_user: dict) -> List[Project]:
    """The user's projects, newest first"""
    return await fetch_all(
        db,
        select(Project)
        .where(Project.user_id == user_uuid(current_user))
        .order_by(Project.created_at.desc()),
    )


async def get_owned_project(db: AsyncSession, project_id: UUID, current_user: dict) -> Project:
    """
    Load a project owned by the signed-in user.

    Raises:
        ProjectAccessError: missing or owned by someone else
    """
    result = await db.execute(
        select(Project).where(
            Project.id == project_id,
            Project.user_id == user_uuid(current_user),
        )
    )
    project = result.scalar_one_or_none()
    if project is None:
        raise ProjectAccessError(entity_id=project_id)
    return project


async def create_project(db: AsyncSession, current_user: dict, data: ProjectCreate) -> ProjectCreateResult:
    """
    Create a project and start its first scan.

    Re-submitting a URL the user already tracks with the same project type
    updates that project and rescans it instead of creating a duplicate.
    The project is saved even when the scan cannot be started; the result
    reports that with ``scan_failed``.

    Raises:
        PlanLimitError: the plan's project limit is reached
    """
    owner_id = user_uuid(current_user)
    url = normalize_project_url(data.url)
    project_type = data.project_type.value
    scan_frequency = _default_scan_frequency(project_type, data.scan_frequency)

    result = await db.execute(
        select(Project).where(
            Project.user_id == owner_id,
            Project.url == url,
            Project.project_type == project_type,
        )
    )
    project = result.scalars().first()
    existing = project is not None

    if existing:
        project.name = data.name
        project.description = data.description or ""
        project.scan_frequency = scan_frequency
        project.updated_at = datetime.now(timezone.utc)
    else:
        plan = await get_user_plan(db, owner_id)
        projects_count = await count_rows(db, Project, Project.user_id == owner_id)
        if not can_create_project(plan, projects_count):
            raise PlanLimitError(plan=plan, limit=get_plan_limits(plan)["max_projects"])

        project = Project(
            user_id=owner_id,
            name=data.name,
            url=url,
            description=data.description or "",
            project_type=project_type,
            scan_frequency=scan_frequency,
            notification_email=current_user.get("email"),
        )
        db.add(project)

    await db.commit()
    await db.refresh(project)
    logger.info(f"{'Updated' if existing else 'Created'} {project_type} project {project.id} for user {owner_id}")

    triggered = await trigger_scan_quietly(
        project.id,
        current_user.get("email"),
        audit=project_type == ProjectType.AUDIT.value,
        client=CrawlerClient(),
    )
    return ProjectCreateResult(project=project, existing=existing, scan_failed=not triggered)


async def update_project(db: AsyncSession, current_user: dict, project_id: UUID, data: ProjectUpdate) -> Project:
    """Update the editable fields; scan frequency only applies to SEO projects"""
    project = await get_owned_project(db, project_id, current_user)
    changes = data.model_dump(exclude_unset=True)

    if "name" in changes and changes["name"] is not None:
        project.name = changes["name"]
    if "url" in changes and changes["url"] is not None:
        project.url = normalize_project_url(changes["url"])
    if "description" in changes:
        project.description = changes["description"]
    if "notification_email" in changes:
        project.notification_email = changes["notification_email"]
    if "scan_frequency" in changes and project.project_type == ProjectType.SEO.value:
        frequency = changes["scan_frequency"]
        project.scan_frequency = frequency.value if frequency else None

    project.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(project)
    return project


async def delete_project(db: AsyncSession, current_user: dict, project_id: UUID) -> None:
    """Delete a project with its scans, pages, issues and links"""
    project = await get_owned_project(db, project_id, current_user)
    await db.delete(project)
    await db.commit()
    logger.info(f"Deleted project {project_id}")


async def _start(db: AsyncSession, current_user: dict, project_id: UUID, audit: bool) -> ScanTriggerResult:
    project = await get_owned_project(db, project_id, current_user)

    if audit and project.project_type != ProjectType.AUDIT.value:
        raise ProjectTypeError(ErrorCodeDictionary.PROJECT_003, entity_id=project_id)
    if not audit and project.project_type != ProjectType.SEO.value:
        raise ProjectTypeError(ErrorCodeDictionary.PROJECT_002, entity_id=project_id)

    async with CrawlerClient() as crawler:
        result = await crawler.start_scan(project.id, current_user.get("email"), audit=audit)

    project.last_scan_at = datetime.now(timezone.utc)
    await db.commit()
    return result


async def start_scan(db: AsyncSession, current_user: dict, project_id: UUID) -> ScanTriggerResult:
    """Start an SEO crawl of an SEO project"""
    return await _start(db, current_user, project_id, audit=False)


async def start_audit(db: AsyncSession, current_user: dict, project_id: UUID) -> ScanTriggerResult:
    """Start a website audit of an audit project"""
    return await _start(db, current_user, project_id, audit=True)


async def get_owned_scan(db: AsyncSession, current_user: dict, project_id: UUID, scan_id: UUID) -> Scan:
    """Load a scan of a project the user owns"""
    await get_owned_project(db, project_id, current_user)
    result = await db.execute(
        select(Scan).where(Scan.id == scan_id, Scan.project_id == project_id)
    )
    scan = result.scalar_one_or_none()
    if scan is None:
        raise ProjectAccessError(entity_id=scan_id, error_code=ErrorCodeDictionary.PROJECT_004)
    return scan


async def delete_scan(db: AsyncSession, current_user: dict, project_id: UUID, scan_id: UUID) -> None:
    """Delete one scan (and its issues and snapshots) from the history"""
    scan = await get_owned_scan(db, current_user, project_id, scan_id)
    await db.delete(scan)
    await db.commit()
    logger.info(f"Deleted scan {scan_id} of project {project_id}")
