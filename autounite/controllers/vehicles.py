from flask import Blueprint, g, jsonify, request

from ..exceptions import ForbiddenError, InvalidArgumentError
from ..services.common import parse_datetime
from ..services.rental_service import RentalService
from ..services.vehicle_service import VehicleService
from ..utils.constants import Role
from ..utils.decorators import login_required, role_required

bp = Blueprint("vehicles", __name__, url_prefix="/vehicles")


def _owned_vehicle(service: VehicleService, vehicle_id: str):
    v = service.get_vehicle(vehicle_id)
    if v.owner_id != g.user.id and not g.user.is_admin():
        raise ForbiddenError("You do not own this vehicle")
    return v


@bp.post("")
@role_required(Role.OWNER)
def create_vehicle():
    vehicle = VehicleService().create_vehicle(g.user.id, request.get_json(silent=True) or {})
    return jsonify(vehicle.to_dict()), 201


@bp.get("/mine")
@role_required(Role.OWNER)
def my_vehicles():
    page = VehicleService().get_owner_vehicles(
        g.user.id, page=request.args.get("page", 1), limit=request.args.get("limit", 10),
    )
    page["items"] = [v.to_dict() for v in page["items"]]
    return jsonify(page)


@bp.get("/<vehicle_id>")
@login_required
def vehicle_detail(vehicle_id):
    return jsonify(VehicleService().get_vehicle(vehicle_id).to_dict())


@bp.patch("/<vehicle_id>/availability")
@login_required
def set_availability(vehicle_id):
    service = VehicleService()
    _owned_vehicle(service, vehicle_id)
    data = request.get_json(silent=True) or {}
    if not isinstance(data.get("is_available"), bool):
        raise InvalidArgumentError("is_available must be true or false")
    return jsonify(service.update_availability(vehicle_id, data["is_available"]).to_dict())


@bp.delete("/<vehicle_id>")
@login_required
def delete_vehicle(vehicle_id):
    service = VehicleService()
    _owned_vehicle(service, vehicle_id)
    service.delete_vehicle(vehicle_id)
    return jsonify({"message": "Vehicle deleted"})


@bp.get("/<vehicle_id>/availability")
@login_required
def availability(vehicle_id):
    """?start_date=...&end_date=... answers whether the range is free and what blocks it."""
    start = parse_datetime(request.args.get("start_date"), "start_date")
    end = parse_datetime(request.args.get("end_date"), "end_date")
    return jsonify(RentalService().check_vehicle_availability(vehicle_id, start, end).to_dict())


@bp.get("/<vehicle_id>/calendar")
@login_required
def calendar(vehicle_id):
    ranges = VehicleService().availability_calendar(vehicle_id)
    return jsonify([{"start": s, "end": e} for s, e in ranges])
