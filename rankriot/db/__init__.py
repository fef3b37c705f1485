"""Database models and enums"""

from rankriot.db.enums import (
    PlanId, SubscriptionStatus, ProjectType, ScanFrequency, ScanStatus,
    IssueSeverity, LinkType,
)
from rankriot.db.models import (
    Profile, Project, Scan, ScanSnapshot, Page, Issue, PageLink,
    Backlink, Keyword, Competitor, AuditResult, PaddleWebhook,
)

__all__ = [
    # Enums
    "PlanId", "SubscriptionStatus", "ProjectType", "ScanFrequency", "ScanStatus",
    "IssueSeverity", "LinkType",
    # Models
    "Profile", "Project", "Scan", "ScanSnapshot", "Page", "Issue", "PageLink",
    "Backlink", "Keyword", "Competitor", "AuditResult", "PaddleWebhook",
]
