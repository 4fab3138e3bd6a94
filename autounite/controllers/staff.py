from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from ..services.notification_service import NotificationService
from ..services.report_service import ReportService
from ..services.user_service import UserService
from ..services.vehicle_service import VehicleService
from ..utils.constants import Role
from ..utils.decorators import role_required

bp = Blueprint("staff", __name__, url_prefix="/staff")


@bp.post("/users/<user_id>/verify")
@role_required(Role.ADMIN)
def verify_user(user_id):
    return jsonify(UserService().verify_user(user_id).to_dict())


@bp.post("/users/<user_id>/unblock")
@role_required(Role.ADMIN)
def unblock_user(user_id):
    return jsonify(UserService().unblock_user(user_id).to_dict())


@bp.post("/vehicles/<vehicle_id>/verify")
@role_required(Role.ADMIN)
def verify_vehicle(vehicle_id):
    """Approve a listing: the vehicle becomes VERIFIED and open for booking."""
    return jsonify(VehicleService().verify_vehicle(vehicle_id).to_dict())


@bp.get("/reports")
@role_required(Role.ADMIN)
def all_reports():
    page = ReportService().get_all_reports(
        status=(request.args.get("status") or "").upper() or None,
        page=request.args.get("page", 1),
        limit=request.args.get("limit", 10),
    )
    page["items"] = [rp.to_dict() for rp in page["items"]]
    return jsonify(page)


@bp.post("/reports/<report_id>/review")
@role_required(Role.ADMIN)
def take_report(report_id):
    return jsonify(ReportService().mark_in_review(report_id, g.user.id).to_dict())


@bp.post("/reports/<report_id>/process")
@role_required(Role.ADMIN)
def process_report(report_id):
    data = request.get_json(silent=True) or {}
    report = ReportService().process_report(
        report_id, g.user.id, data.get("resolution"), apply_penalty=bool(data.get("apply_penalty")),
    )
    return jsonify(report.to_dict())


@bp.post("/reminders")
@role_required(Role.ADMIN)
def send_reminders():
    """Trigger the return reminders by hand (normally run from cron)."""
    return jsonify({"sent": NotificationService().send_reminder_notifications()})
