from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from src.aggregate import build_application_aggregate
from src.normalize.preferences import TrustPreferences
from src.normalize.schema import Application, ApplicationAggregate
from src.rank.weights import CATEGORICAL_CRITERIA, CRITERIA, MatchPoints

logger = logging.getLogger(__name__)

SUB_SCORE_COLUMNS = tuple(f"{criterion}_points" for criterion in CRITERIA)
MATCH_FLAG_COLUMNS = tuple(f"{criterion}_match" for criterion in CRITERIA)
SCORED_COLUMNS = [
    "application_id",
    "full_name",
    "gender",
    "course_name",
    "city",
    "status",
    "amount_requested",
    "created_at",
    *SUB_SCORE_COLUMNS,
    *MATCH_FLAG_COLUMNS,
    "total_score",
    "academic_score",
    "family_income_lpa",
]


@dataclass(frozen=True, slots=True)
class MatchResult:
    application_id: str
    matches: dict[str, bool]
    sub_scores: dict[str, int]
    total_score: int
    academic_score: float
    family_income_lpa: float

    @property
    def passes_categorical(self) -> bool:
        return all(self.matches[criterion] for criterion in CATEGORICAL_CRITERIA)

    @property
    def passes_all(self) -> bool:
        return all(self.matches.values())

    def to_dict(self) -> dict[str, object]:
        return {
            "application_id": self.application_id,
            "total_score": self.total_score,
            "sub_scores": dict(self.sub_scores),
            "academic_score": self.academic_score,
            "family_income_lpa": self.family_income_lpa,
        }


def evaluate_criteria(
    application: Application,
    aggregate: ApplicationAggregate,
    preferences: TrustPreferences,
) -> dict[str, bool]:
    """Pass/fail per criterion; an unconstrained criterion always passes."""

    return {
        "gender": preferences.gender_matches(application.gender),
        "course": preferences.course_matches(application.course_name),
        "city": preferences.city_matches(application.city),
        "income": preferences.income_matches(aggregate.family_income_lpa),
        "academic": preferences.academic_matches(aggregate.academic_score),
    }


def score_match(
    application: Application,
    aggregate: ApplicationAggregate,
    preferences: TrustPreferences,
    points: MatchPoints | None = None,
) -> MatchResult:
    active_points = points or MatchPoints.baseline()
    matches = evaluate_criteria(application, aggregate, preferences)
    sub_scores = {
        criterion: getattr(active_points, criterion) if matches[criterion] else 0
        for criterion in CRITERIA
    }
    return MatchResult(
        application_id=application.application_id,
        matches=matches,
        sub_scores=sub_scores,
        total_score=sum(sub_scores.values()),
        academic_score=aggregate.academic_score,
        family_income_lpa=aggregate.family_income_lpa,
    )


def _scored_row(application: Application, result: MatchResult) -> dict[str, object]:
    row: dict[str, object] = {
        "application_id": application.application_id,
        "full_name": application.full_name,
        "gender": application.gender,
        "course_name": application.course_name,
        "city": application.city,
        "status": application.status,
        "amount_requested": application.amount_requested,
        "created_at": application.created_at,
        "total_score": result.total_score,
        "academic_score": result.academic_score,
        "family_income_lpa": result.family_income_lpa,
    }
    for criterion in CRITERIA:
        row[f"{criterion}_points"] = result.sub_scores[criterion]
        row[f"{criterion}_match"] = result.matches[criterion]
    return row


def score_candidates(
    applications: Iterable[Application],
    preferences: TrustPreferences,
    points: MatchPoints | None = None,
) -> tuple[pd.DataFrame, list[str]]:
    """Score every application against one trust.

    Returns the scored frame and the ids of applications that could not be
    scored. A failure while aggregating or scoring one application is logged
    and skipped so the rest of the queue is still ranked.
    """

    rows: list[dict[str, object]] = []
    skipped_ids: list[str] = []
    for application in applications:
        try:
            aggregate = build_application_aggregate(application)
            result = score_match(application, aggregate, preferences, points)
        except Exception:
            application_id = str(getattr(application, "application_id", "<unknown>"))
            logger.exception("Failed to score application %s; skipping.", application_id)
            skipped_ids.append(application_id)
            continue
        rows.append(_scored_row(application, result))

    scored_df = pd.DataFrame(rows, columns=SCORED_COLUMNS)
    return scored_df, skipped_ids
