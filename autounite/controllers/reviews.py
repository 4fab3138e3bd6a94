from flask import Blueprint, g, jsonify, request

from ..exceptions import ForbiddenError
from ..services.rental_service import RentalService
from ..services.review_service import ReviewService
from ..utils.decorators import login_required

bp = Blueprint("reviews", __name__, url_prefix="/reviews")


@bp.post("/vehicle")
@login_required
def review_vehicle():
    """Renter reviews the vehicle of a completed rental."""
    data = request.get_json(silent=True) or {}
    rental = RentalService().get_rental(data.get("rental_id"))
    if rental.renter_id != g.user.id:
        raise ForbiddenError("Only the renter can review the vehicle")
    review = ReviewService().create_vehicle_review(rental.id, data.get("rating"), data.get("comment") or "")
    return jsonify(review.to_dict()), 201


@bp.post("/renter")
@login_required
def review_renter():
    """Owner reviews the renter of a completed rental."""
    data = request.get_json(silent=True) or {}
    rental = RentalService().get_rental(data.get("rental_id"))
    if rental.owner_id != g.user.id:
        raise ForbiddenError("Only the owner can review the renter")
    review = ReviewService().create_renter_review(rental.id, data.get("rating"), data.get("comment") or "")
    return jsonify(review.to_dict()), 201


@bp.get("/vehicle/<vehicle_id>")
@login_required
def vehicle_reviews(vehicle_id):
    page = ReviewService().get_vehicle_reviews(
        vehicle_id, page=request.args.get("page", 1), limit=request.args.get("limit", 10),
    )
    page["items"] = [rv.to_dict() for rv in page["items"]]
    return jsonify(page)


@bp.get("/renter/<renter_id>")
@login_required
def renter_reviews(renter_id):
    page = ReviewService().get_renter_reviews(
        renter_id, page=request.args.get("page", 1), limit=request.args.get("limit", 10),
    )
    page["items"] = [rv.to_dict() for rv in page["items"]]
    return jsonify(page)


@bp.get("/<review_id>")
@login_required
def review_detail(review_id):
    return jsonify(ReviewService().get_review(review_id).to_dict())
