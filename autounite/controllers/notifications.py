from flask import Blueprint, g, jsonify, request

from ..services.notification_service import NotificationService
from ..utils.decorators import login_required

bp = Blueprint("notifications", __name__, url_prefix="/notifications")


@bp.get("")
@login_required
def inbox():
    only_unread = (request.args.get("unread") or "").lower() in ("1", "true", "yes")
    page = NotificationService().get_user_notifications(
        g.user.id,
        page=request.args.get("page", 1),
        limit=request.args.get("limit", 10),
        only_unread=only_unread,
    )
    page["items"] = [n.to_dict() for n in page["items"]]
    return jsonify(page)


@bp.get("/unread-count")
@login_required
def unread_count():
    return jsonify({"unread": NotificationService().get_unread_count(g.user.id)})


@bp.post("/<notification_id>/read")
@login_required
def mark_read(notification_id):
    return jsonify(NotificationService().mark_as_read(notification_id, g.user.id).to_dict())


@bp.post("/read-all")
@login_required
def mark_all_read():
    return jsonify({"updated": NotificationService().mark_all_as_read(g.user.id)})


@bp.delete("/<notification_id>")
@login_required
def delete(notification_id):
    NotificationService().delete_notification(notification_id, g.user.id)
    return jsonify({"message": "Notification deleted"})
