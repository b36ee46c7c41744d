"""
Announcements module - School-wide notices with targeted audiences.
"""

from app.modules.announcements.models import Announcement, AnnouncementPriority, AnnouncementStatus

__all__ = ["Announcement", "AnnouncementPriority", "AnnouncementStatus"]
