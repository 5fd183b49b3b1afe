# ===========================================================
# notifications/utils.py
# ===========================================================

import logging

from .models import Notification

logger = logging.getLogger(__name__)


def send_notification(user_id, type, title, message, metadata=None):
    """Create an unread notification for ``user_id``."""
    notification = Notification.objects.create(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        metadata=metadata or {},
    )
    logger.info(f"Notification '{type}' sent to user {user_id}")
    return notification
