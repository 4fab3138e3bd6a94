from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Notification:
    id: str
    user_id: str
    title: str
    message: str
    created_at: datetime
    related_id: Optional[str] = None  # rental, vehicle or report the message is about
    is_read: bool = False

    def mark_as_read(self) -> None:
        self.is_read = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "related_id": self.related_id,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }
