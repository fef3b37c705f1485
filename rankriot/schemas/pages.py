"""Pydantic schemas for crawled pages"""
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PageSummary(BaseModel):
    """Page row as listed in the pages table"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str
    title: Optional[str] = None
    meta_description: Optional[str] = None
    word_count: Optional[int] = None
    http_status: Optional[int] = None
    load_time_ms: Optional[float] = None
    size_bytes: Optional[int] = None
    depth: Optional[int] = None
    is_indexable: Optional[bool] = None


class PageListResponse(BaseModel):
    """One page of the pages table"""
    items: List[PageSummary]
    total: int
    page: int
    page_size: int
