"""Pydantic schemas for project requests and responses"""
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rankriot.db.enums import ProjectType, ScanFrequency


class ProjectCreate(BaseModel):
    """Request to create (or re-submit) a project"""
    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    url: str = Field(..., min_length=1, description="Website URL; https:// is added when no scheme is given")
    description: Optional[str] = None
    project_type: ProjectType = Field(default=ProjectType.SEO, description="'seo' or 'audit'")
    scan_frequency: Optional[ScanFrequency] = Field(None, description="SEO projects only; defaults to weekly")

    @field_validator('name', 'url')
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Name and URL are required')
        return v


class ProjectUpdate(BaseModel):
    """Request to update a project; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    url: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    scan_frequency: Optional[ScanFrequency] = None
    notification_email: Optional[str] = None


class ProjectResponse(BaseModel):
    """Project row"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    url: str
    description: Optional[str] = None
    project_type: Optional[str] = None
    scan_frequency: Optional[str] = None
    notification_email: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    last_scan_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectCreateResponse(BaseModel):
    """Result of POST /projects"""
    id: UUID
    existing: bool
    message: str
    scan_failed: bool = False


class ScanStartResponse(BaseModel):
    """Result of starting a scan or audit"""
    success: bool = True
    scan_id: Optional[str] = None
    message: str
