from flask import Blueprint, g, jsonify, request

from ..exceptions import ForbiddenError
from ..services.rental_service import RentalService
from ..services.report_service import ReportService
from ..utils.constants import Role
from ..utils.decorators import login_required, role_required

bp = Blueprint("reports", __name__, url_prefix="/reports")


def _check_party(report):
    if g.user.is_admin() or g.user.id in (report.owner_id, report.renter_id):
        return report
    raise ForbiddenError("You are not allowed to see this report")


@bp.post("")
@role_required(Role.OWNER)
def create_report():
    data = request.get_json(silent=True) or {}
    rental = RentalService().get_rental(data.get("rental_id"))
    if rental.owner_id != g.user.id:
        raise ForbiddenError("Only the vehicle owner can report this rental")
    report = ReportService().create_report(
        rental.id,
        reason=data.get("reason"),
        description=data.get("description") or "",
        severity=data.get("severity") or "MEDIUM",
    )
    return jsonify(report.to_dict()), 201


@bp.get("/mine")
@role_required(Role.OWNER)
def my_reports():
    page = ReportService().get_owner_reports(
        g.user.id, page=request.args.get("page", 1), limit=request.args.get("limit", 10),
    )
    page["items"] = [rp.to_dict() for rp in page["items"]]
    return jsonify(page)


@bp.get("/<report_id>")
@login_required
def report_detail(report_id):
    return jsonify(_check_party(ReportService().get_report(report_id)).to_dict())


@bp.get("/rental/<rental_id>")
@login_required
def report_for_rental(rental_id):
    return jsonify(_check_party(ReportService().get_report_by_rental(rental_id)).to_dict())
