import logging
from typing import Optional

from .api import BurrowApi
from .schemas import Notification, NotificationPage, PaginationInfo
from .state import Slice

logger = logging.getLogger(__name__)


class NotificationsSlice(Slice):
    """In-app notifications, one page at a time. Changes apply after the server confirms."""

    name = "notifications"

    def __init__(self, api: BurrowApi):
        super().__init__()
        self.api = api
        self.notifications: list[Notification] = []
        self.pagination: Optional[PaginationInfo] = None
        self.unread_count = 0

    def fetch(self, page: int = 1) -> bool:
        if not self._require_login(self.api):
            return False

        def apply(data):
            result = NotificationPage.model_validate(data or {})
            self.notifications = result.notifications
            self.pagination = result.pagination
            # unread count covers the loaded page only
            self.unread_count = sum(1 for n in self.notifications if not n.is_read)
        return self.run("fetchNotifications", lambda: self.api.list_notifications(page), apply)

    def mark_all_read(self) -> bool:
        if not self._require_login(self.api):
            return False

        def apply(_):
            self.notifications = [n.model_copy(update={"is_read": True}) for n in self.notifications]
            self.unread_count = 0
        return self.run("markAsRead", self.api.mark_notifications_read, apply)

    def delete(self, notification_id: str) -> bool:
        if not self._require_login(self.api):
            return False

        def apply(_):
            gone = next((n for n in self.notifications if n.id == notification_id), None)
            if gone is not None and not gone.is_read:
                self.unread_count = max(0, self.unread_count - 1)
            self.notifications = [n for n in self.notifications if n.id != notification_id]
        return self.run("deleteNotification", lambda: self.api.delete_notification(notification_id), apply)

    def clear_read(self) -> bool:
        if not self._require_login(self.api):
            return False

        def apply(_):
            before = len(self.notifications)
            self.notifications = [n for n in self.notifications if not n.is_read]
            logger.debug("Cleared %d read notification(s)", before - len(self.notifications))
        return self.run("clearRead", self.api.clear_read_notifications, apply)

    def reset(self) -> None:
        super().reset()
        self.notifications = []
        self.pagination = None
        self.unread_count = 0
