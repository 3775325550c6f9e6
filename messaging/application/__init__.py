"""Application layer: the notification service façade."""

from .service import NotificationService

__all__ = ["NotificationService"]
