"""Scan history, snapshot and comparison routes"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.core.auth import get_current_user
from rankriot.core.database import get_db
from rankriot.schemas.scans import ScanResponse, SnapshotCreate
from rankriot.services import projects as project_service
from rankriot.services import snapshots
from rankriot.utils.responses import format_success_response

router = APIRouter(prefix="/scans", tags=["scans"])


@router.get("/{project_id}", response_model=List[ScanResponse])
async def list_scans(
    project_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Scan history of a project, most recent first."""
    await project_service.get_owned_project(db, project_id, current_user)
    return await snapshots.list_scans(db, project_id, limit=limit)


@router.get("/{project_id}/compare")
async def compare_scans(
    project_id: UUID,
    scan1: UUID = Query(..., description="Baseline scan"),
    scan2: UUID = Query(..., description="Scan compared against the baseline"),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Compare two scans of the same project.

    Returns:
        Metrics of both scans and the issue/page changes between them
    """
    await project_service.get_owned_project(db, project_id, current_user)
    return await snapshots.compare_scans(db, project_id, scan1, scan2)


@router.post("/{project_id}/snapshot", status_code=status.HTTP_201_CREATED)
async def create_snapshot(
    project_id: UUID,
    snapshot_data: SnapshotCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Record the project's current metrics against a finished scan."""
    await project_service.get_owned_project(db, project_id, current_user)
    data = await snapshots.create_snapshot(db, project_id, snapshot_data.scan_id)
    return {"success": True, "snapshot": data}


@router.get("/{project_id}/snapshot")
async def list_snapshots(
    project_id: UUID,
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    await project_service.get_owned_project(db, project_id, current_user)
    return {"snapshots": await snapshots.list_snapshots(db, project_id, limit=limit)}


@router.delete("/{project_id}/{scan_id}")
async def delete_scan(
    project_id: UUID,
    scan_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Delete one scan and its issues and snapshots."""
    await project_service.delete_scan(db, current_user, project_id, scan_id)
    return format_success_response("Scan deleted", data={"id": str(scan_id)})
