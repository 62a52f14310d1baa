"""Per-application academic and household-income aggregates."""

from src.aggregate.academic import compute_academic_score
from src.aggregate.financial import compute_family_income_lpa
from src.normalize.schema import Application, ApplicationAggregate


def build_application_aggregate(application: Application) -> ApplicationAggregate:
    return ApplicationAggregate(
        application_id=application.application_id,
        academic_score=compute_academic_score(application.education),
        family_income_lpa=compute_family_income_lpa(application.family_members),
    )


__all__ = [
    "build_application_aggregate",
    "compute_academic_score",
    "compute_family_income_lpa",
]
