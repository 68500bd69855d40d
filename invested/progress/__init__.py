"""Course progress tracking module.

Provides:
- Course enrollment management
- Lesson completion ledger
- Transactional course progress recalculation
"""

from .models import CompletionRecord, Enrollment


__all__ = [
    "CompletionRecord",
    "Enrollment",
]
