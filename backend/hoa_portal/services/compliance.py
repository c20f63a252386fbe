"""Compliance issue status machine."""

from datetime import date
from typing import Optional

from fastapi import status

from hoa_portal.core.errors import ServiceError
from hoa_portal.models.compliance import ComplianceIssue
from hoa_portal.models.enums import ComplianceStatus

ALLOWED_TRANSITIONS: dict[ComplianceStatus, set[ComplianceStatus]] = {
    ComplianceStatus.OPEN: {
        ComplianceStatus.IN_PROGRESS,
        ComplianceStatus.ESCALATED,
        ComplianceStatus.RESOLVED,
    },
    ComplianceStatus.IN_PROGRESS: {ComplianceStatus.ESCALATED, ComplianceStatus.RESOLVED},
    ComplianceStatus.ESCALATED: {ComplianceStatus.IN_PROGRESS, ComplianceStatus.RESOLVED},
    ComplianceStatus.RESOLVED: set(),
}


def can_transition(current: ComplianceStatus, new: ComplianceStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


def transition_issue(
    issue: ComplianceIssue,
    new_status: ComplianceStatus,
    notes: Optional[str] = None,
    today: Optional[date] = None,
) -> ComplianceStatus:
    """Move an issue to a new status. Returns the previous status."""
    old_status = issue.status
    if not can_transition(old_status, new_status):
        raise ServiceError(
            f"Cannot change compliance issue from {old_status.value} to {new_status.value}",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    issue.status = new_status
    if new_status == ComplianceStatus.RESOLVED:
        issue.resolved_date = today or date.today()
        if notes:
            issue.resolution_notes = notes
    return old_status
