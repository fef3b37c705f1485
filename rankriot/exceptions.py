"""Custom exceptions for the RankRiot API"""
from typing import Optional, Dict, Any
from uuid import UUID

from rankriot.errors import ErrorCode, ErrorCodeDictionary


class RankRiotError(Exception):
    """Base exception for errors reported to dashboard users"""

    def __init__(
        self,
        error_code: ErrorCode,
        entity_id: Optional[UUID] = None,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        self.error_code = error_code
        self.entity_id = entity_id
        self.context = context or {}
        self.message = message or error_code.message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "code": self.error_code.code,
            "message": self.message,
            "remediation_steps": self.error_code.remediation_steps,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "context": self.context,
        }


class ProjectAccessError(RankRiotError):
    """Project (or one of its scans/pages) is missing or owned by someone else"""

    def __init__(self, entity_id: Optional[UUID] = None, error_code: ErrorCode = ErrorCodeDictionary.PROJECT_001, **kwargs):
        super().__init__(error_code, entity_id=entity_id, **kwargs)


class ProjectTypeError(RankRiotError):
    """SEO action requested on an audit project or vice versa"""
    pass


class PlanLimitError(RankRiotError):
    """Subscription plan does not allow the action"""

    def __init__(self, plan: str, limit: int, **kwargs):
        super().__init__(
            ErrorCodeDictionary.PLAN_001,
            context={"plan": plan, "limit": limit},
            **kwargs,
        )


class CrawlerError(RankRiotError):
    """The external crawler could not start the scan"""
    pass


class CrawlerConfigurationError(CrawlerError):
    """CRAWLER_API_URL is not configured"""

    def __init__(self, **kwargs):
        super().__init__(ErrorCodeDictionary.CRAWLER_001, **kwargs)


class CrawlerUnavailableError(CrawlerError):
    """Network failure reaching the crawler"""

    def __init__(self, **kwargs):
        super().__init__(ErrorCodeDictionary.CRAWLER_002, **kwargs)


class CrawlerTimeoutError(CrawlerError):
    """Crawler did not answer within the client timeout"""

    def __init__(self, **kwargs):
        super().__init__(ErrorCodeDictionary.CRAWLER_003, **kwargs)


class CrawlerResponseError(CrawlerError):
    """Crawler answered with an error or a non-JSON body"""

    def __init__(self, status_code: Optional[int] = None, **kwargs):
        self.status_code = status_code
        super().__init__(ErrorCodeDictionary.CRAWLER_004, **kwargs)


class WebhookSignatureError(RankRiotError):
    """Paddle-Signature header is missing or does not match"""

    def __init__(self, **kwargs):
        super().__init__(ErrorCodeDictionary.WEBHOOK_001, **kwargs)
