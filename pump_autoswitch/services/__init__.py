"""pump-autoswitch application services."""

from .notification_service import NotificationService

__all__ = [
    "NotificationService",
]
