"""Error code dictionary - user-facing error messages with remediation hints."""
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional

from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    ERROR = "error"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ErrorCode:
    """
    Standardized error code with a user-facing message.

    Attributes:
        code: Unique error code identifier (e.g., PROJECT_001)
        message: Message shown to the user as-is
        remediation_steps: List of steps the user can take
        severity: Error severity level
    """

    code: str
    message: str
    remediation_steps: List[str]
    severity: str = ErrorSeverity.ERROR.value

    def to_dict(self) -> Dict[str, str]:
        """Convert error code to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "remediation_steps": self.remediation_steps,
            "severity": self.severity,
        }


class ErrorCodeDictionary:
    """
    Catalog of every error the API reports to users.

    Messages are written for the dashboard; they are displayed without
    further formatting.
    """

    # Project ownership and type (PROJECT_*)
    PROJECT_001: ClassVar[ErrorCode] = ErrorCode(
        code="PROJECT_001",
        message="Project not found or you do not have permission to access it",
        remediation_steps=[
            "Check the project id",
            "Make sure you are signed in with the account that owns the project",
        ],
    )

    PROJECT_002: ClassVar[ErrorCode] = ErrorCode(
        code="PROJECT_002",
        message="This action is only available for SEO projects. Use Run Audit for audit projects.",
        remediation_steps=["Use the audit endpoint for audit projects"],
    )

    PROJECT_003: ClassVar[ErrorCode] = ErrorCode(
        code="PROJECT_003",
        message="This action is only available for audit projects. Use Start Scan for SEO projects.",
        remediation_steps=["Use the scan endpoint for SEO projects"],
    )

    PROJECT_004: ClassVar[ErrorCode] = ErrorCode(
        code="PROJECT_004",
        message="Scan not found for this project",
        remediation_steps=["Check the scan id", "Reload the scan history"],
    )

    PROJECT_005: ClassVar[ErrorCode] = ErrorCode(
        code="PROJECT_005",
        message="Page not found for this project",
        remediation_steps=["Check the page id", "Run a new scan if the page was removed"],
    )

    # Plan limits (PLAN_*)
    PLAN_001: ClassVar[ErrorCode] = ErrorCode(
        code="PLAN_001",
        message="You have reached the project limit for your plan",
        remediation_steps=[
            "Delete a project you no longer need",
            "Upgrade your plan to track more websites",
        ],
        severity=ErrorSeverity.WARNING.value,
    )

    # Crawler service (CRAWLER_*)
    CRAWLER_001: ClassVar[ErrorCode] = ErrorCode(
        code="CRAWLER_001",
        message="Server configuration error: CRAWLER_API_URL not set",
        remediation_steps=["Set CRAWLER_API_URL in the server environment"],
        severity=ErrorSeverity.CRITICAL.value,
    )

    CRAWLER_002: ClassVar[ErrorCode] = ErrorCode(
        code="CRAWLER_002",
        message="Could not connect to the scanning service. Please check your network connection and try again.",
        remediation_steps=["Try again in a few minutes"],
    )

    CRAWLER_003: ClassVar[ErrorCode] = ErrorCode(
        code="CRAWLER_003",
        message="The request timed out. The scanning service might be experiencing high load.",
        remediation_steps=["Try again in a few minutes"],
    )

    CRAWLER_004: ClassVar[ErrorCode] = ErrorCode(
        code="CRAWLER_004",
        message="Failed to start scan. Please try again later.",
        remediation_steps=["Try again later"],
    )

    # Webhooks (WEBHOOK_*)
    WEBHOOK_001: ClassVar[ErrorCode] = ErrorCode(
        code="WEBHOOK_001",
        message="Invalid signature",
        remediation_steps=["Check PADDLE_WEBHOOK_SECRET matches the notification destination"],
    )

    _ERROR_REGISTRY: ClassVar[Dict[str, ErrorCode]] = {}

    @classmethod
    def _build_registry(cls) -> Dict[str, ErrorCode]:
        """Build error code registry from class attributes."""
        if not cls._ERROR_REGISTRY:
            for attr_name in dir(cls):
                if not attr_name.startswith("_"):
                    attr = getattr(cls, attr_name)
                    if isinstance(attr, ErrorCode):
                        cls._ERROR_REGISTRY[attr.code] = attr
        return cls._ERROR_REGISTRY

    @classmethod
    def get_error(cls, code: str) -> Optional[ErrorCode]:
        """Get error code by code string (e.g. "CRAWLER_002"), or None."""
        return cls._build_registry().get(code)

    @classmethod
    def get_errors_by_category(cls, category: str) -> List[ErrorCode]:
        """Get errors by category prefix (e.g. 'PROJECT', 'CRAWLER')."""
        prefix = category.upper()
        return [
            error
            for error in cls._build_registry().values()
            if error.code.startswith(prefix)
        ]
