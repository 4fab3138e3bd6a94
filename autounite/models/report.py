from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from autounite.utils.constants import ReportStatus


@dataclass
class Report:
    """
    An owner's complaint about a renter for one rental. Admins move it from
    PENDING (optionally through IN_REVIEW) to RESOLVED or DISMISSED.
    """
    id: str
    rental_id: str
    renter_id: str
    owner_id: str
    reason: str
    description: str
    severity: str
    created_at: datetime
    status: str = ReportStatus.PENDING
    admin_id: Optional[str] = None
    resolution: Optional[str] = None
    penalty_applied: bool = False
    processed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    def is_pending(self) -> bool:
        return self.status == ReportStatus.PENDING

    def is_in_review(self) -> bool:
        return self.status == ReportStatus.IN_REVIEW

    def is_open(self) -> bool:
        return self.is_pending() or self.is_in_review()

    def mark_as_in_review(self, admin_id: str, now: datetime) -> None:
        self.status = ReportStatus.IN_REVIEW
        self.admin_id = admin_id
        self.updated_at = now

    def resolve(self, admin_id: str, resolution: str, apply_penalty: bool, now: datetime) -> None:
        self.status = ReportStatus.RESOLVED
        self.admin_id = admin_id
        self.resolution = resolution
        self.penalty_applied = apply_penalty
        self.processed_at = now
        self.updated_at = now

    def dismiss(self, admin_id: str, resolution: str, now: datetime) -> None:
        self.status = ReportStatus.DISMISSED
        self.admin_id = admin_id
        self.resolution = resolution
        self.penalty_applied = False
        self.processed_at = now
        self.updated_at = now

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rental_id": self.rental_id,
            "renter_id": self.renter_id,
            "owner_id": self.owner_id,
            "admin_id": self.admin_id,
            "reason": self.reason,
            "description": self.description,
            "severity": self.severity,
            "status": self.status,
            "resolution": self.resolution,
            "penalty_applied": self.penalty_applied,
            "created_at": self.created_at.isoformat(),
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
        }
