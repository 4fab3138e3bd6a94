"""In-app notifications plus outbound delivery through a pluggable sender."""

from __future__ import annotations

import logging
from typing import Optional

from autounite.exceptions import ForbiddenError, NotificationNotFoundError, UserNotFoundError
from autounite.models.notification import Notification
from autounite.models.store import Store
from autounite.services import common
from autounite.utils.constants import REMINDER_WINDOW, RentalStatus
from autounite.utils.filters import fmt_local

logger = logging.getLogger(__name__)


class LogSender:
    """Default outbound channel: writes the message to the log instead of sending mail."""

    def send(self, user, title: str, message: str) -> None:
        logger.info("Notify %s <%s>: %s | %s", user.id, user.email, title, message)


class NotificationService:
    """Stores each notification for the user's inbox and forwards it to `sender`."""

    def __init__(self, store: Optional[Store] = None, sender=None, clock=None):
        self.store = store or common._store()
        self.sender = sender or LogSender()
        self.clock = clock or common._clock()

    def notify(self, user_id: str, title: str, message: str, related_id: Optional[str] = None) -> Notification:
        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(f"Error: user with ID '{user_id}' not found")

        notification = Notification(
            id=common.new_id(),
            user_id=user_id,
            title=title,
            message=message,
            related_id=related_id,
            created_at=self.clock.now(),
        )
        self.store.save_notification(notification)
        self.sender.send(user, title, message)
        return notification

    # --------------- inbox ---------------
    def get_user_notifications(self, user_id: str, page: int = 1, limit: int = 10, only_unread: bool = False) -> dict:
        items = self.store.find_notifications_by_user(user_id, only_unread=only_unread)
        return common.paginate(items, page, limit)

    def _owned(self, notification_id: str, user_id: str) -> Notification:
        n = self.store.get_notification(notification_id)
        if n is None:
            raise NotificationNotFoundError()
        if n.user_id != user_id:
            raise ForbiddenError("You are not allowed to access this notification")
        return n

    def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        n = self._owned(notification_id, user_id)
        n.mark_as_read()
        return self.store.save_notification(n)

    def mark_all_as_read(self, user_id: str) -> int:
        with self.store.transaction():
            unread = self.store.find_notifications_by_user(user_id, only_unread=True)
            for n in unread:
                n.mark_as_read()
                self.store.save_notification(n)
        return len(unread)

    def delete_notification(self, notification_id: str, user_id: str) -> None:
        self._owned(notification_id, user_id)
        self.store.delete_notification(notification_id)

    def get_unread_count(self, user_id: str) -> int:
        return len(self.store.find_notifications_by_user(user_id, only_unread=True))

    # --------------- scheduled ---------------
    def send_reminder_notifications(self) -> int:
        """
        Remind renters whose ACTIVE rental ends within the next 24 hours.
        Meant to be run periodically (cron); returns how many reminders went out.
        """
        now = self.clock.now()
        sent = 0
        for rental in self.store.find_rentals_by_status(RentalStatus.ACTIVE):
            if not (now <= rental.end_date <= now + REMINDER_WINDOW):
                continue
            vehicle = self.store.get_vehicle(rental.vehicle_id)
            if self.store.get_user(rental.renter_id) is None or vehicle is None:
                continue
            self.notify(
                rental.renter_id,
                "Return reminder",
                f"Your rental of {vehicle.label} ends on {fmt_local(rental.end_date)}. "
                f"Please return the vehicle on time to avoid penalties.",
                related_id=rental.id,
            )
            sent += 1
        return sent
