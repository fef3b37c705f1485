"""Scan snapshots and scan-to-scan comparison"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rankriot.analytics.seo_score import calculate_snapshot_seo_score
from rankriot.db.enums import IssueSeverity
from rankriot.db.models import Issue, Page, PageLink, Scan, ScanSnapshot
from rankriot.errors import ErrorCodeDictionary
from rankriot.exceptions import ProjectAccessError
from rankriot.utils.database import count_rows, fetch_all

logger = logging.getLogger(__name__)

SEVERITIES = [s.value for s in IssueSeverity]


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _severity_counts(severities: List[Optional[str]]) -> Dict[str, int]:
    """Count issues per severity; unknown severities are ignored, missing ones count as low"""
    counts = {severity: 0 for severity in SEVERITIES}
    for severity in severities:
        key = (severity or IssueSeverity.LOW.value).lower()
        if key in counts:
            counts[key] += 1
    return counts


def _stored(metrics: Dict[str, Any], key: str, legacy_key: str) -> int:
    """Snapshot metric by its camelCase key, accepting the snake_case spelling too"""
    return metrics.get(key) or metrics.get(legacy_key) or 0


async def _get_project_scan(db: AsyncSession, project_id: UUID, scan_id: UUID) -> Scan:
    result = await db.execute(
        select(Scan).where(Scan.id == scan_id, Scan.project_id == project_id)
    )
    scan = result.scalar_one_or_none()
    if scan is None:
        raise ProjectAccessError(entity_id=scan_id, error_code=ErrorCodeDictionary.PROJECT_004)
    return scan


async def create_snapshot(db: AsyncSession, project_id: UUID, scan_id: UUID) -> Dict[str, Any]:
    """
    Record the project's current metrics against a scan.

    Issue counts cover every unfixed issue of the project at snapshot time,
    not only the issues found by this scan.

    Raises:
        ProjectAccessError: scan does not belong to the project
    """
    scan = await _get_project_scan(db, project_id, scan_id)

    result = await db.execute(
        select(Issue.severity).where(
            Issue.project_id == project_id,
            Issue.is_fixed == False,  # noqa: E712
        )
    )
    issue_counts = _severity_counts(list(result.scalars().all()))

    total_pages = await count_rows(db, Page, Page.project_id == project_id)
    indexable_pages = await count_rows(db, Page, Page.project_id == project_id, Page.is_indexable == True)  # noqa: E712
    broken_links = await count_rows(db, PageLink, PageLink.project_id == project_id, PageLink.is_broken == True)  # noqa: E712
    pages = await fetch_all(db, select(Page).where(Page.project_id == project_id))

    # camelCase keys, matching existing scan_snapshots rows
    snapshot_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "metrics": {
            "totalPages": total_pages,
            "indexablePages": indexable_pages,
            "brokenLinks": broken_links,
            "avgSeoScore": calculate_snapshot_seo_score(pages),
        },
        "issues": {"total": sum(issue_counts.values()), **issue_counts},
        "scan": {
            "id": str(scan.id),
            "status": scan.status,
            "pagesScanned": scan.pages_scanned,
            "issuesFound": scan.issues_found,
            "startedAt": _isoformat(scan.started_at),
            "completedAt": _isoformat(scan.completed_at),
        },
    }

    db.add(ScanSnapshot(scan_id=scan.id, snapshot_data=snapshot_data))
    await db.commit()
    logger.info(f"Saved snapshot for scan {scan_id} of project {project_id}")
    return snapshot_data


async def list_snapshots(db: AsyncSession, project_id: UUID, limit: int = 12) -> List[Dict[str, Any]]:
    """Latest snapshots of a project's scans, newest first"""
    result = await db.execute(
        select(ScanSnapshot, Scan.started_at, Scan.completed_at)
        .join(Scan, Scan.id == ScanSnapshot.scan_id)
        .where(Scan.project_id == project_id)
        .order_by(ScanSnapshot.created_at.desc())
        .limit(limit)
    )
    return [
        {
            "id": snapshot.id,
            "scan_id": snapshot.scan_id,
            "snapshot_data": snapshot.snapshot_data,
            "created_at": snapshot.created_at,
            "scan": {"started_at": started_at, "completed_at": completed_at},
        }
        for snapshot, started_at, completed_at in result.all()
    ]


async def _scan_metrics(db: AsyncSession, project_id: UUID, scan: Scan) -> Dict[str, int]:
    """Metrics of one scan: from its snapshot when present, else from the scan row and its issues"""
    result = await db.execute(
        select(Issue.severity).where(Issue.project_id == project_id, Issue.scan_id == scan.id)
    )
    severities = list(result.scalars().all())
    counts = {severity: severities.count(severity) for severity in SEVERITIES}
    total_issues = len(severities)

    result = await db.execute(
        select(ScanSnapshot.snapshot_data)
        .where(ScanSnapshot.scan_id == scan.id)
        .order_by(ScanSnapshot.created_at.desc())
        .limit(1)
    )
    data = result.scalar_one_or_none()

    if data:
        metrics = data.get("metrics") or {}
        issues = data.get("issues") or {}
        warning_issues = (issues.get("high") or 0) + (issues.get("medium") or 0)
        return {
            "total_pages": _stored(metrics, "totalPages", "total_pages"),
            "total_issues": issues.get("total") or total_issues,
            "critical_issues": issues.get("critical") or counts["critical"],
            "warning_issues": warning_issues or counts["high"] + counts["medium"],
            "broken_links": _stored(metrics, "brokenLinks", "broken_links"),
            "avg_score": _stored(metrics, "avgSeoScore", "avg_seo_score"),
        }

    return {
        "total_pages": scan.pages_scanned or 0,
        "total_issues": scan.issues_found or total_issues,
        "critical_issues": counts["critical"],
        "warning_issues": counts["high"] + counts["medium"],
        "broken_links": 0,
        "avg_score": 0,
    }


async def compare_scans(db: AsyncSession, project_id: UUID, scan1_id: UUID, scan2_id: UUID) -> Dict[str, Any]:
    """
    Compare two scans of the same project (scan1 is the baseline).

    Raises:
        ProjectAccessError: either scan does not belong to the project
    """
    scan1 = await _get_project_scan(db, project_id, scan1_id)
    scan2 = await _get_project_scan(db, project_id, scan2_id)

    metrics1 = await _scan_metrics(db, project_id, scan1)
    metrics2 = await _scan_metrics(db, project_id, scan2)

    return {
        "scan1": {"id": scan1.id, "date": scan1.started_at, "metrics": metrics1},
        "scan2": {"id": scan2.id, "date": scan2.started_at, "metrics": metrics2},
        "changes": {
            "new_issues": max(0, metrics2["total_issues"] - metrics1["total_issues"]),
            "fixed_issues": max(0, metrics1["total_issues"] - metrics2["total_issues"]),
            "new_pages": max(0, metrics2["total_pages"] - metrics1["total_pages"]),
            "removed_pages": max(0, metrics1["total_pages"] - metrics2["total_pages"]),
        },
    }


async def list_scans(db: AsyncSession, project_id: UUID, limit: int = 50) -> List[Scan]:
    """Scan history of a project, most recent first"""
    return await fetch_all(
        db,
        select(Scan)
        .where(Scan.project_id == project_id)
        .order_by(Scan.started_at.desc().nulls_last(), Scan.created_at.desc())
        .limit(limit),
    )
