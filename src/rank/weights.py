from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

TOTAL_POINTS = 100
CRITERIA = ("gender", "course", "city", "income", "academic")
CATEGORICAL_CRITERIA = ("gender", "course", "city")


@dataclass(frozen=True, slots=True)
class MatchPoints:
    """Points awarded per criterion; a full match across all criteria is worth 100."""

    gender: int
    course: int
    city: int
    income: int
    academic: int

    def __post_init__(self) -> None:
        for field_name in CRITERIA:
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Match points '{field_name}' must be an integer.")
            if value < 0 or value > TOTAL_POINTS:
                raise ValueError(f"Match points '{field_name}' must be between 0 and {TOTAL_POINTS}.")

        total = sum(getattr(self, field_name) for field_name in CRITERIA)
        if total != TOTAL_POINTS:
            raise ValueError(f"Match points must sum to {TOTAL_POINTS} (received {total}).")

    @classmethod
    def baseline(cls) -> MatchPoints:
        return cls(gender=35, course=30, city=15, income=15, academic=5)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> MatchPoints:
        values = payload or {}
        baseline = cls.baseline()
        resolved: dict[str, int] = {}
        for field_name in CRITERIA:
            raw = values.get(field_name, getattr(baseline, field_name))
            try:
                numeric = float(raw)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Match points '{field_name}' must be a whole number.") from exc
            if not math.isfinite(numeric) or not numeric.is_integer():
                raise ValueError(f"Match points '{field_name}' must be a whole number.")
            resolved[field_name] = int(numeric)
        return cls(**resolved)

    def to_dict(self) -> dict[str, int]:
        return {field_name: getattr(self, field_name) for field_name in CRITERIA}
