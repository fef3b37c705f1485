"""Database models for the RankRiot dashboard.

The tables are created and owned by the managed database; these models only
describe them so the API can query them. Column names match the managed
schema exactly.
"""
from sqlalchemy import (
    Column, Integer, BigInteger, String, Text, DateTime, Boolean, Float,
    ForeignKey, JSON, Uuid, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from rankriot.core.database import Base


class Profile(Base):
    """User profile (one row per managed-auth user)"""
    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True)
    email = Column(String, nullable=True)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    settings = Column(JSON, default=lambda: {})

    # Billing
    paddle_customer_id = Column(String, nullable=True)
    paddle_subscription_id = Column(String, nullable=True)
    subscription_tier = Column(String, nullable=True)
    subscription_status = Column(String, nullable=True)
    subscription_period_end = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_profiles_paddle_subscription_id", "paddle_subscription_id"),
    )


class Project(Base):
    """A tracked website owned by a user"""
    __tablename__ = "projects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    url = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    project_type = Column(String, nullable=True, default="seo")
    scan_frequency = Column(String, nullable=True)
    notification_email = Column(String, nullable=True)
    settings = Column(JSON, default=lambda: {})
    last_scan_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("Profile", back_populates="projects")
    scans = relationship("Scan", back_populates="project", cascade="all, delete-orphan")
    pages = relationship("Page", back_populates="project", cascade="all, delete-orphan")
    issues = relationship("Issue", back_populates="project", cascade="all, delete-orphan")
    page_links = relationship("PageLink", back_populates="project", cascade="all, delete-orphan")
    backlinks = relationship("Backlink", cascade="all, delete-orphan")
    keywords = relationship("Keyword", cascade="all, delete-orphan")
    competitors = relationship("Competitor", cascade="all, delete-orphan")
    audit_results = relationship("AuditResult", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_projects_user_id", "user_id"),
        Index("idx_projects_user_url_type", "user_id", "url", "project_type"),
    )


class Scan(Base):
    """A crawl job run by the external crawler"""
    __tablename__ = "scans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    scan_type = Column(String, nullable=True)
    status = Column(String, nullable=True)
    pages_scanned = Column(Integer, nullable=True)
    links_scanned = Column(Integer, nullable=True)
    issues_found = Column(Integer, nullable=True)
    summary_stats = Column(JSON(none_as_null=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    last_progress_update = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="scans")
    snapshots = relationship("ScanSnapshot", back_populates="scan", cascade="all, delete-orphan")
    issues = relationship("Issue", back_populates="scan", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_scans_project_id", "project_id"),
        Index("idx_scans_started_at", "project_id", "started_at"),
    )


class ScanSnapshot(Base):
    """Point-in-time aggregate of a scan's metrics"""
    __tablename__ = "scan_snapshots"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    scan_id = Column(Uuid(as_uuid=True), ForeignKey("scans.id", ondelete="CASCADE"), nullable=False)
    snapshot_data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    scan = relationship("Scan", back_populates="snapshots")


class Page(Base):
    """A crawled page"""
    __tablename__ = "pages"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    url = Column(Text, nullable=False)

    # Metadata
    title = Column(Text, nullable=True)
    title_length = Column(Integer, nullable=True)
    meta_description = Column(Text, nullable=True)
    meta_description_length = Column(Integer, nullable=True)
    canonical_url = Column(Text, nullable=True)
    h1s = Column(JSON(none_as_null=True), nullable=True)
    h2s = Column(JSON(none_as_null=True), nullable=True)
    h3s = Column(JSON(none_as_null=True), nullable=True)
    h4s = Column(JSON(none_as_null=True), nullable=True)
    h5s = Column(JSON(none_as_null=True), nullable=True)
    h6s = Column(JSON(none_as_null=True), nullable=True)
    keywords = Column(JSON(none_as_null=True), nullable=True)
    images = Column(JSON(none_as_null=True), nullable=True)
    open_graph = Column(JSON(none_as_null=True), nullable=True)
    twitter_card = Column(JSON(none_as_null=True), nullable=True)
    structured_data = Column(JSON(none_as_null=True), nullable=True)
    schema_types = Column(JSON(none_as_null=True), nullable=True)
    word_count = Column(Integer, nullable=True)

    # Technical
    http_status = Column(Integer, nullable=True)
    redirect_url = Column(Text, nullable=True)
    content_type = Column(String, nullable=True)
    content_length = Column(Integer, nullable=True)
    size_bytes = Column(BigInteger, nullable=True)
    load_time_ms = Column(Float, nullable=True)
    first_byte_time_ms = Column(Float, nullable=True)
    css_count = Column(Integer, nullable=True)
    js_count = Column(Integer, nullable=True)
    depth = Column(Integer, nullable=True)
    crawl_priority = Column(Integer, nullable=True)

    # Indexability
    is_indexable = Column(Boolean, nullable=True)
    has_robots_noindex = Column(Boolean, nullable=True)
    has_robots_nofollow = Column(Boolean, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="pages")

    __table_args__ = (
        Index("idx_pages_project_id", "project_id"),
        Index("idx_pages_project_url", "project_id", "url"),
    )


class Issue(Base):
    """A persisted SEO problem for a page, found by a scan"""
    __tablename__ = "issues"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    scan_id = Column(Uuid(as_uuid=True), ForeignKey("scans.id", ondelete="CASCADE"), nullable=False)
    page_id = Column(Uuid(as_uuid=True), ForeignKey("pages.id", ondelete="CASCADE"), nullable=False)
    issue_type = Column(String, nullable=False)
    severity = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    details = Column(JSON(none_as_null=True), nullable=True)
    is_fixed = Column(Boolean, default=False)
    fixed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="issues")
    scan = relationship("Scan", back_populates="issues")

    __table_args__ = (
        Index("idx_issues_project_fixed", "project_id", "is_fixed"),
        Index("idx_issues_scan_id", "scan_id"),
        Index("idx_issues_page_id", "page_id"),
    )


class PageLink(Base):
    """A link found on a crawled page"""
    __tablename__ = "page_links"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    source_page_id = Column(Uuid(as_uuid=True), ForeignKey("pages.id", ondelete="CASCADE"), nullable=False)
    destination_page_id = Column(Uuid(as_uuid=True), ForeignKey("pages.id", ondelete="SET NULL"), nullable=True)
    destination_url = Column(Text, nullable=False)
    link_type = Column(String, nullable=False)
    anchor_text = Column(Text, nullable=True)
    http_status = Column(Integer, nullable=True)
    is_broken = Column(Boolean, nullable=True)
    is_followed = Column(Boolean, nullable=True)
    rel_attributes = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="page_links")

    __table_args__ = (
        Index("idx_page_links_project_type", "project_id", "link_type"),
        Index("idx_page_links_project_broken", "project_id", "is_broken"),
        Index("idx_page_links_source", "source_page_id"),
    )


class Backlink(Base):
    """An inbound link from another domain"""
    __tablename__ = "backlinks"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    page_id = Column(Uuid(as_uuid=True), ForeignKey("pages.id", ondelete="SET NULL"), nullable=True)
    source_url = Column(Text, nullable=False)
    source_domain = Column(String, nullable=False)
    anchor_text = Column(Text, nullable=True)
    domain_authority = Column(Float, nullable=True)
    is_followed = Column(Boolean, nullable=True)
    first_seen_at = Column(DateTime(timezone=True), nullable=True)
    last_seen_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Keyword(Base):
    """A tracked keyword"""
    __tablename__ = "keywords"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    target_page_id = Column(Uuid(as_uuid=True), ForeignKey("pages.id", ondelete="SET NULL"), nullable=True)
    keyword = Column(Text, nullable=False)
    search_volume = Column(Integer, nullable=True)
    difficulty = Column(Float, nullable=True)
    current_ranking = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Competitor(Base):
    """A competitor domain tracked for a project"""
    __tablename__ = "competitors"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    domain = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AuditResult(Base):
    """Website audit output written by the crawler for audit projects"""
    __tablename__ = "audit_results"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True)
    scan_id = Column(Uuid(as_uuid=True), ForeignKey("scans.id", ondelete="CASCADE"), nullable=True)
    overall_score = Column(Float, nullable=True)
    completeness_score = Column(Float, nullable=True)
    conversion_score = Column(Float, nullable=True)
    modernization_score = Column(Float, nullable=True)
    performance_score = Column(Float, nullable=True)
    found_pages = Column(JSON(none_as_null=True), nullable=True)
    missing_pages = Column(JSON(none_as_null=True), nullable=True)
    design_analysis = Column(JSON(none_as_null=True), nullable=True)
    modern_standards = Column(JSON(none_as_null=True), nullable=True)
    performance_metrics = Column(JSON(none_as_null=True), nullable=True)
    recommendations = Column(JSON(none_as_null=True), nullable=True)
    tech_stack = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PaddleWebhook(Base):
    """Processed Paddle webhook events (idempotency log)"""
    __tablename__ = "paddle_webhooks"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(String, nullable=False)
    event_type = Column(String, nullable=False)
    payload = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("event_id", name="uniq_paddle_webhooks_event_id"),
    )
