"""Client for the external crawler service"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from uuid import UUID

import httpx

from rankriot.core.config import settings
from rankriot.exceptions import (
    CrawlerError,
    CrawlerConfigurationError,
    CrawlerUnavailableError,
    CrawlerTimeoutError,
    CrawlerResponseError,
)

logger = logging.getLogger(__name__)


@dataclass
class ScanTriggerResult:
    """Crawler acknowledgement of a started scan"""
    scan_id: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)


def _error_message(body: Any, action: str) -> str:
    """Pick the most useful message out of a crawler error body."""
    default = f"Failed to start {action}. Please try again later."
    if not isinstance(body, dict):
        return default
    if body.get("message"):
        return str(body["message"])
    error = body.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict) and error.get("code"):
        return f"Error: {error['code']}"
    return default


class CrawlerClient:
    """
    Starts scans on the crawler service.

    The crawler runs the scan asynchronously and writes its results to the
    shared database; this client only asks it to start.

    Usage:
        async with CrawlerClient() as crawler:
            result = await crawler.start_scan(project_id, email)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.crawler_api_url) or ""
        self.base_url = self.base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.crawler_timeout_seconds
        self.transport = transport
        self.client = None

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={"Content-Type": "application/json"},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()

    async def start_scan(self, project_id: UUID, email: Optional[str], audit: bool = False) -> ScanTriggerResult:
        """
        Ask the crawler to scan a project.

        Args:
            project_id: Project to scan
            email: Address the crawler notifies when the scan finishes
            audit: Run a website audit instead of an SEO crawl

        Returns:
            ScanTriggerResult with the crawler's scan id when it reports one

        Raises:
            CrawlerConfigurationError: CRAWLER_API_URL is not set
            CrawlerTimeoutError: No answer within the timeout
            CrawlerUnavailableError: Network failure
            CrawlerResponseError: Non-JSON answer or an error status
        """
        service = "audit" if audit else "scanning"
        action = "audit" if audit else "scan"

        if not self.is_configured:
            raise CrawlerConfigurationError(entity_id=project_id)

        endpoint = "/api/scan/audit" if audit else "/api/scan"
        url = f"{self.base_url}{endpoint}"
        payload = {"project_id": str(project_id), "email": email}

        try:
            response = await self.client.post(url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"{action.capitalize()} request timed out for project {project_id}: {e}")
            raise CrawlerTimeoutError(
                entity_id=project_id,
                message=f"The request timed out. The {service} service might be experiencing high load.",
            )
        except httpx.TransportError as e:
            logger.error(f"Network error when initiating {action} for project {project_id}: {e}")
            raise CrawlerUnavailableError(
                entity_id=project_id,
                message=f"Could not connect to the {service} service. Please check your network connection and try again.",
            )

        content_type = response.headers.get("content-type", "")
        body = None
        if "application/json" in content_type:
            try:
                body = response.json()
            except ValueError:
                body = None
        if body is None:
            logger.error(f"Received non-JSON response from crawler ({response.status_code}): {response.text[:500]}")
            raise CrawlerResponseError(
                status_code=response.status_code,
                entity_id=project_id,
                message=f"We couldn't connect to the {service} service. Our team has been notified.",
            )

        if not response.is_success:
            logger.error(f"Error triggering {action} for project {project_id}: {body}")
            raise CrawlerResponseError(
                status_code=response.status_code,
                entity_id=project_id,
                message=_error_message(body, action),
            )

        scan_id = None
        if isinstance(body, dict):
            data = body.get("data")
            if isinstance(data, dict) and data.get("scan_id"):
                scan_id = str(data["scan_id"])
            elif body.get("id"):
                scan_id = str(body["id"])

        logger.info(f"{action.capitalize()} triggered for project {project_id}: scan_id={scan_id}")
        return ScanTriggerResult(scan_id=scan_id, raw=body if isinstance(body, dict) else {"data": body})


async def trigger_scan_quietly(
    project_id: UUID,
    email: Optional[str],
    audit: bool = False,
    client: Optional[CrawlerClient] = None,
) -> bool:
    """
    Start a scan without failing the caller.

    Used right after a project is created or re-submitted: the project is
    saved either way, so crawler errors are logged and reported as False.
    """
    crawler = client or CrawlerClient()
    if not crawler.is_configured:
        logger.error("CRAWLER_API_URL is not set; skipping scan trigger")
        return False

    try:
        async with crawler:
            await crawler.start_scan(project_id, email, audit=audit)
        return True
    except CrawlerError as e:
        logger.warning(f"Scan trigger failed for project {project_id}: {e.message}")
        return False
