"""
Classes module - Class sections, their teacher and capacity.
"""

from app.modules.classes.models import GRADE_LEVELS, SchoolClass
from app.modules.classes.repository import ClassRepository

__all__ = ["GRADE_LEVELS", "SchoolClass", "ClassRepository"]
