"""Course catalog module.

Note: Router is not exported here to avoid circular imports.
Import directly from invested.courses.router when needed.
"""

from .models import Course, Lesson


__all__ = ["Course", "Lesson"]
