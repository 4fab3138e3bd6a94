from flask import Blueprint, g, jsonify, request

from ..exceptions import ForbiddenError, InvalidArgumentError
from ..services.common import parse_datetime, to_float_safe
from ..services.rental_service import RentalService
from ..utils.constants import Role
from ..utils.decorators import login_required, role_required

bp = Blueprint("rentals", __name__, url_prefix="/rentals")


def _rental_for(rental_id: str, *parties: str):
    """
    Load a rental the current user may act on.
    `parties` names which side ('renter', 'owner') is allowed; admins always are.
    """
    service = RentalService()
    rental = service.get_rental(rental_id)
    if g.user.is_admin():
        return service, rental
    allowed = (("renter" in parties and rental.renter_id == g.user.id)
               or ("owner" in parties and rental.owner_id == g.user.id))
    if not allowed:
        raise ForbiddenError("You are not allowed to act on this rental")
    return service, rental


def _view(rental):
    """Only the renter sees the payment verification code."""
    return rental.to_dict(include_code=rental.renter_id == g.user.id)


@bp.post("")
@role_required(Role.RENTER)
def create_rental():
    data = request.get_json(silent=True) or {}
    if not data.get("vehicle_id"):
        raise InvalidArgumentError("vehicle_id is required")
    amount = data.get("counteroffer_amount")
    if amount is not None and to_float_safe(amount) is None:
        raise InvalidArgumentError("counteroffer_amount must be a number")
    rental = RentalService().create_rental(
        renter_id=g.user.id,
        vehicle_id=data["vehicle_id"],
        start_date=parse_datetime(data.get("start_date"), "start_date"),
        end_date=parse_datetime(data.get("end_date"), "end_date"),
        notes=data.get("notes"),
        counteroffer_amount=to_float_safe(amount),
    )
    return jsonify(_view(rental)), 201


@bp.get("")
@login_required
def my_rentals():
    """Rentals of the current user; ?role=renter|owner narrows the side, ?status filters."""
    args = request.args
    page = RentalService().get_user_rentals(
        g.user.id,
        role=args.get("role") or None,
        status=(args.get("status") or "").upper() or None,
        page=args.get("page", 1),
        limit=args.get("limit", 10),
    )
    page["items"] = [_view(r) for r in page["items"]]
    return jsonify(page)


@bp.get("/<rental_id>")
@login_required
def rental_detail(rental_id):
    _, rental = _rental_for(rental_id, "renter", "owner")
    return jsonify(_view(rental))


@bp.post("/<rental_id>/counteroffer")
@login_required
def counteroffer(rental_id):
    service, _ = _rental_for(rental_id, "renter")
    data = request.get_json(silent=True) or {}
    amount = to_float_safe(data.get("amount"))
    if amount is None:
        raise InvalidArgumentError("amount must be a number")
    return jsonify(_view(service.submit_counter_offer(rental_id, amount)))


@bp.post("/<rental_id>/counteroffer/accept")
@login_required
def accept_counteroffer(rental_id):
    service, _ = _rental_for(rental_id, "owner")
    return jsonify(_view(service.accept_counter_offer(rental_id)))


@bp.post("/<rental_id>/counteroffer/reject")
@login_required
def reject_counteroffer(rental_id):
    service, _ = _rental_for(rental_id, "owner")
    return jsonify(_view(service.reject_counter_offer(rental_id)))


@bp.post("/<rental_id>/verify-payment")
@login_required
def verify_payment(rental_id):
    """The owner types in the code the renter shows at pickup."""
    service, _ = _rental_for(rental_id, "owner")
    data = request.get_json(silent=True) or {}
    return jsonify(_view(service.verify_payment(rental_id, str(data.get("verification_code") or ""))))


@bp.post("/<rental_id>/extend")
@login_required
def extend(rental_id):
    service, _ = _rental_for(rental_id, "renter")
    data = request.get_json(silent=True) or {}
    new_end = parse_datetime(data.get("end_date"), "end_date")
    return jsonify(_view(service.extend_rental(rental_id, new_end)))


@bp.post("/<rental_id>/complete")
@login_required
def complete(rental_id):
    service, _ = _rental_for(rental_id, "owner")
    data = request.get_json(silent=True) or {}
    return_date = parse_datetime(data["return_date"], "return_date") if data.get("return_date") else None
    return jsonify(_view(service.complete_rental(rental_id, return_date)))


@bp.post("/<rental_id>/cancel")
@login_required
def cancel(rental_id):
    service, _ = _rental_for(rental_id, "renter", "owner")
    return jsonify(_view(service.cancel_rental(rental_id)))
