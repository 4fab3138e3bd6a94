from flask import Blueprint, jsonify

from ..services import common

bp = Blueprint("views", __name__)


@bp.get("/")
def home():
    """Health check with a quick look at the store."""
    store = common._store()
    return jsonify({
        "service": "autounite",
        "status": "ok",
        "users": len(store.users),
        "vehicles": len(store.vehicles),
        "rentals": len(store.rentals),
    })
