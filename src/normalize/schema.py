from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

APPLICATION_STATUSES = ("submitted", "partially_approved", "closed", "rejected")


@dataclass(slots=True)
class EducationRecord:
    qualification: Optional[str] = None
    grade: Optional[float] = None
    year_of_passing: Optional[int] = None


@dataclass(slots=True)
class FamilyMember:
    relation: Optional[str] = None
    monthly_income: Optional[float] = None


@dataclass(slots=True)
class Application:
    """One funding request plus the student fields the matcher compares against."""

    application_id: str
    student_user_id: Optional[str] = None
    course_name: Optional[str] = None
    gender: Optional[str] = None
    city: Optional[str] = None
    created_at: Optional[datetime] = None
    status: str = "submitted"
    amount_requested: Optional[float] = None
    amount_approved: Optional[float] = None
    academic_year: Optional[str] = None
    full_name: Optional[str] = None
    education: list[EducationRecord] = field(default_factory=list)
    family_members: list[FamilyMember] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ApplicationAggregate:
    application_id: str
    academic_score: float
    family_income_lpa: float
