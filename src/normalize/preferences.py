from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from src.normalize.values import coerce_float, coerce_text

ANY_GENDER = "Any"

# Storage key first, then accepted aliases.
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "gender": ("preferred_gender", "gender"),
    "courses": ("preferred_courses", "courses"),
    "cities": ("preferred_cities", "cities"),
    "max_income_lpa": ("max_family_income_lpa", "maxIncomeLpa", "max_income_lpa"),
    "min_academic_pct": ("min_academic_percentage", "minAcademicPct", "min_academic_pct"),
}


def _lookup(payload: Mapping[str, Any], field_name: str) -> Any:
    for key in _FIELD_KEYS[field_name]:
        if key in payload:
            return payload[key]
    return None


def _normalize_gender(value: Any) -> str | None:
    text = coerce_text(value)
    if text is None or text == ANY_GENDER:
        return None
    return text


def _normalize_choices(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        text = coerce_text(value)
        return (text,) if text else ()
    if isinstance(value, Iterable):
        choices: list[str] = []
        for item in value:
            text = coerce_text(item)
            if text and text not in choices:
                choices.append(text)
        return tuple(choices)
    return ()


@dataclass(frozen=True, slots=True)
class TrustPreferences:
    """Canonical trust preferences; None or () always means "no constraint"."""

    gender: str | None = None
    courses: tuple[str, ...] = ()
    cities: tuple[str, ...] = ()
    max_income_lpa: float | None = None
    min_academic_pct: float | None = None

    @classmethod
    def unconstrained(cls) -> TrustPreferences:
        return cls()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> TrustPreferences:
        if not payload:
            return cls.unconstrained()
        return cls(
            gender=_normalize_gender(_lookup(payload, "gender")),
            courses=_normalize_choices(_lookup(payload, "courses")),
            cities=_normalize_choices(_lookup(payload, "cities")),
            max_income_lpa=coerce_float(_lookup(payload, "max_income_lpa")),
            min_academic_pct=coerce_float(_lookup(payload, "min_academic_pct")),
        )

    @property
    def is_unconstrained(self) -> bool:
        return (
            self.gender is None
            and not self.courses
            and not self.cities
            and self.max_income_lpa is None
            and self.min_academic_pct is None
        )

    def gender_matches(self, gender: str | None) -> bool:
        return self.gender is None or gender == self.gender

    def course_matches(self, course_name: str | None) -> bool:
        return not self.courses or course_name in self.courses

    def city_matches(self, city: str | None) -> bool:
        return not self.cities or city in self.cities

    def income_matches(self, family_income_lpa: float) -> bool:
        return self.max_income_lpa is None or family_income_lpa <= self.max_income_lpa

    def academic_matches(self, academic_score: float) -> bool:
        return self.min_academic_pct is None or academic_score >= self.min_academic_pct

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "preferred_gender": self.gender or ANY_GENDER,
            "preferred_courses": list(self.courses),
            "preferred_cities": list(self.cities),
        }
        if self.max_income_lpa is not None:
            payload["max_family_income_lpa"] = self.max_income_lpa
        if self.min_academic_pct is not None:
            payload["min_academic_percentage"] = self.min_academic_pct
        return payload
