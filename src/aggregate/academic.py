from __future__ import annotations

from typing import Iterable

import numpy as np

from src.normalize.schema import EducationRecord
from src.normalize.values import coerce_float


def _grade_or_zero(record: EducationRecord) -> float:
    grade = coerce_float(getattr(record, "grade", None))
    return grade if grade is not None else 0.0


def compute_academic_score(records: Iterable[EducationRecord]) -> float:
    """Simple mean of every education grade; 0.0 when there is no history.

    Unreadable grades count as 0.0 instead of being dropped, so one bad row
    lowers the mean rather than silently inflating it.
    """

    grades = np.array([_grade_or_zero(record) for record in records], dtype=float)
    if grades.size == 0:
        return 0.0
    return float(np.mean(grades))
