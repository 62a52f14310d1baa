from __future__ import annotations

from typing import Iterable

from src.normalize.schema import FamilyMember
from src.normalize.values import coerce_float

MONTHS_PER_YEAR = 12
RUPEES_PER_LAKH = 100_000


def _income_or_zero(member: FamilyMember) -> float:
    income = coerce_float(getattr(member, "monthly_income", None))
    if income is None or income < 0.0:
        return 0.0
    return income


def compute_family_income_lpa(members: Iterable[FamilyMember]) -> float:
    """Household income in lakhs per annum: sum(monthly) * 12 / 100000."""

    monthly_total = sum(_income_or_zero(member) for member in members)
    return monthly_total * MONTHS_PER_YEAR / RUPEES_PER_LAKH
