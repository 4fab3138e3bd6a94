from flask import Blueprint, g, jsonify, request, session

from ..services.user_service import UserService
from ..utils.decorators import login_required

bp = Blueprint("auth", __name__, url_prefix="/auth")


@bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    user = UserService().register_user(
        email=data.get("email"),
        password=data.get("password"),
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        role=data.get("role") or "RENTER",
        phone_number=data.get("phone_number") or "",
    )
    return jsonify(user.to_dict()), 201


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    user = UserService().authenticate((data.get("email") or "").strip(), data.get("password") or "")

    session.clear()
    session["uid"] = user.id
    session["role"] = user.role
    return jsonify(user.to_dict())


@bp.post("/logout")
def logout():
    session.clear()
    return jsonify({"message": "Logged out"})


@bp.get("/me")
@login_required
def me():
    return jsonify(g.user.to_dict())
