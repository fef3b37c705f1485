"""Pydantic schemas for scans and scan snapshots"""
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ScanResponse(BaseModel):
    """Scan history row"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    scan_type: Optional[str] = None
    status: Optional[str] = None
    pages_scanned: Optional[int] = None
    links_scanned: Optional[int] = None
    issues_found: Optional[int] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class SnapshotCreate(BaseModel):
    """Request to snapshot a finished scan"""
    scan_id: UUID = Field(..., alias="scanId", description="Scan to snapshot")

    model_config = ConfigDict(populate_by_name=True)


class SnapshotResponse(BaseModel):
    """Stored snapshot"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    scan_id: UUID
    snapshot_data: Dict[str, Any]
    created_at: Optional[datetime] = None
