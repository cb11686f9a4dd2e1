"""
ORM models. Importing this package registers every table on Base.metadata.
"""

from school_api.models.user import User
from school_api.models.school import Course, Student, Teacher

__all__ = ["User", "Student", "Teacher", "Course"]
