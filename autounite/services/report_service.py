"""Owner reports against renters and their administrative processing."""

from __future__ import annotations

import logging
from typing import Optional

from autounite.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    RentalNotFoundError,
    ReportNotFoundError,
)
from autounite.models.report import Report
from autounite.models.store import Store
from autounite.services import common
from autounite.utils.constants import REPORT_PENALTY_BLOCK_DAYS, ReportSeverity, ReportStatus

logger = logging.getLogger(__name__)

SEVERITIES = (ReportSeverity.LOW, ReportSeverity.MEDIUM, ReportSeverity.HIGH, ReportSeverity.CRITICAL)


class ReportService:

    def __init__(self, store: Optional[Store] = None, notifier=None, clock=None):
        self.store = store or common._store()
        self.notifier = notifier or common._notifier()
        self.clock = clock or common._clock()

    def _notify(self, user_id: str, title: str, message: str, related_id: str) -> None:
        try:
            self.notifier.notify(user_id, title, message, related_id=related_id)
        except Exception:
            logger.warning("Notification %r to user %s failed", title, user_id, exc_info=True)

    # --------------- queries ---------------
    def get_report(self, report_id: str) -> Report:
        report = self.store.get_report(report_id)
        if report is None:
            raise ReportNotFoundError(f"Error: report with ID '{report_id}' not found")
        return report

    def get_report_by_rental(self, rental_id: str) -> Report:
        report = self.store.find_report_by_rental(rental_id)
        if report is None:
            raise ReportNotFoundError(f"Error: no report for rental '{rental_id}'")
        return report

    def get_owner_reports(self, owner_id: str, page: int = 1, limit: int = 10) -> dict:
        return common.paginate(self.store.find_reports(owner_id=owner_id), page, limit)

    def get_all_reports(self, status: Optional[str] = None, page: int = 1, limit: int = 10) -> dict:
        return common.paginate(self.store.find_reports(status=status), page, limit)

    # --------------- commands ---------------
    def create_report(self, rental_id: str, reason: str, description: str = "",
                      severity: str = ReportSeverity.MEDIUM) -> Report:
        """
        File a report about the renter of `rental_id`. Each rental can be
        reported once, and every report counts against the renter's discount.
        """
        reason = (reason or "").strip()
        severity = (severity or ReportSeverity.MEDIUM).upper()
        if not reason:
            raise InvalidArgumentError("A reason is required")
        if severity not in SEVERITIES:
            raise InvalidArgumentError(f"Severity must be one of {', '.join(SEVERITIES)}")

        with self.store.transaction():
            rental = self.store.get_rental(rental_id)
            if rental is None:
                raise RentalNotFoundError(f"Error: rental with ID '{rental_id}' not found")
            if self.store.find_report_by_rental(rental.id):
                raise ConflictError("This rental has already been reported")

            report = Report(
                id=common.new_id(),
                rental_id=rental.id,
                renter_id=rental.renter_id,
                owner_id=rental.owner_id,
                reason=reason,
                description=(description or "").strip(),
                severity=severity,
                created_at=self.clock.now(),
            )
            self.store.save_report(report)

            renter = self.store.get_user(rental.renter_id)
            if renter is not None:
                renter.increase_report_count()
                renter.updated_at = report.created_at
                self.store.save_user(renter)

        logger.info("Report %s filed for rental %s (%s)", report.id, rental.id, severity)
        self._notify(report.renter_id, "You have been reported",
                     f"The owner reported an issue with your rental: {reason}.", related_id=report.id)
        for admin in self.store.find_admins():
            self._notify(admin.id, "New report to review",
                         f"A {severity.lower()} severity report was filed: {reason}.", related_id=report.id)
        return report

    def mark_in_review(self, report_id: str, admin_id: str) -> Report:
        report = self.get_report(report_id)
        if not report.is_pending():
            raise InvalidStateError("Only pending reports can be taken into review")
        report.mark_as_in_review(admin_id, self.clock.now())
        return self.store.save_report(report)

    def process_report(self, report_id: str, admin_id: str, resolution: str, apply_penalty: bool = False) -> Report:
        """
        Close an open report. With `apply_penalty` the report is RESOLVED and the
        renter is blocked for 7 days; otherwise it is DISMISSED.
        """
        resolution = (resolution or "").strip()
        if not resolution:
            raise InvalidArgumentError("A resolution is required")

        now = self.clock.now()
        with self.store.transaction():
            report = self.get_report(report_id)
            if not report.is_open():
                raise InvalidStateError("This report has already been processed")

            if apply_penalty:
                report.resolve(admin_id, resolution, True, now)
                renter = self.store.get_user(report.renter_id)
                if renter is not None:
                    renter.block(REPORT_PENALTY_BLOCK_DAYS, now)
                    renter.updated_at = now
                    self.store.save_user(renter)
            else:
                report.dismiss(admin_id, resolution, now)
            self.store.save_report(report)

        logger.info("Report %s processed: %s", report.id, report.status)
        if report.status == ReportStatus.RESOLVED:
            renter_msg = (f"Your report was resolved with a penalty: your account is blocked for "
                          f"{REPORT_PENALTY_BLOCK_DAYS} days. {resolution}")
        else:
            renter_msg = f"The report against you was dismissed. {resolution}"
        self._notify(report.renter_id, "Report processed", renter_msg, related_id=report.id)
        self._notify(report.owner_id, "Report processed",
                     f"Your report was {report.status.lower()}. {resolution}", related_id=report.id)
        return report
