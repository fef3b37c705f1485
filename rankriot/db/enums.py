"""Database model enumerations"""
import enum


class PlanId(str, enum.Enum):
    """Subscription tiers"""
    FREE = "free"
    STARTER = "starter"
    PRO = "pro"
    BUSINESS = "business"


class SubscriptionStatus(str, enum.Enum):
    """Subscription status as stored on the profile"""
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    PAUSED = "paused"
    TRIALING = "trialing"


class ProjectType(str, enum.Enum):
    """Project type: ongoing SEO tracking or a one-off website audit"""
    SEO = "seo"
    AUDIT = "audit"


class ScanFrequency(str, enum.Enum):
    """How often the crawler re-scans an SEO project"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ScanStatus(str, enum.Enum):
    """Scan lifecycle as written by the crawler"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class IssueSeverity(str, enum.Enum):
    """Issue severity levels"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LinkType(str, enum.Enum):
    """Link classification"""
    INTERNAL = "internal"
    EXTERNAL = "external"
