"""
Notifications module - Outbound email pipeline and its audit log.
"""

from app.modules.notifications.models import EmailLog, EmailType

__all__ = ["EmailLog", "EmailType"]
