from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import pandas as pd

from src.normalize.preferences import TrustPreferences
from src.normalize.schema import Application
from src.rank.stage1_filter import apply_hard_filter
from src.rank.stage2_match import score_candidates
from src.rank.stage3_order import order_matches
from src.rank.weights import CRITERIA, MatchPoints

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RankingRun:
    ranked_df: pd.DataFrame
    excluded_df: pd.DataFrame
    skipped_ids: list[str] = field(default_factory=list)

    def to_records(self) -> list[dict[str, Any]]:
        return ranked_records(self.ranked_df)


def _resolve_preferences(preferences: TrustPreferences | Mapping[str, Any] | None) -> TrustPreferences:
    if isinstance(preferences, TrustPreferences):
        return preferences
    return TrustPreferences.from_mapping(preferences)


def ranked_records(ranked_df: pd.DataFrame) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for _, row in ranked_df.iterrows():
        records.append(
            {
                "application_id": row["application_id"],
                "total_score": int(row["total_score"]),
                "sub_scores": {criterion: int(row[f"{criterion}_points"]) for criterion in CRITERIA},
                "academic_score": float(row["academic_score"]),
                "family_income_lpa": float(row["family_income_lpa"]),
            }
        )
    return records


def run_ranking(
    preferences: TrustPreferences | Mapping[str, Any] | None,
    applications: Iterable[Application],
    *,
    hard_filter: bool = False,
    statuses: Iterable[str] | None = None,
    limit: int | None = None,
    points: MatchPoints | None = None,
) -> RankingRun:
    """Score, optionally hard-filter, order and limit one trust's candidates.

    `statuses` restricts candidates to those lifecycle statuses before scoring.
    Missing preferences mean every criterion is unconstrained.
    """

    active_preferences = _resolve_preferences(preferences)
    candidates = list(applications)
    if statuses is not None:
        allowed = set(statuses)
        candidates = [application for application in candidates if application.status in allowed]

    scored_df, skipped_ids = score_candidates(candidates, active_preferences, points)

    if hard_filter:
        included_df, excluded_df = apply_hard_filter(scored_df)
    else:
        included_df = scored_df
        excluded_df = scored_df.iloc[0:0].assign(reasons=pd.Series(dtype=object))

    ranked_df = order_matches(included_df, limit=limit)
    logger.info(
        "Ranked %d of %d candidates (hard_filter=%s, excluded=%d, skipped=%d).",
        len(ranked_df),
        len(candidates),
        hard_filter,
        len(excluded_df),
        len(skipped_ids),
    )
    return RankingRun(ranked_df=ranked_df, excluded_df=excluded_df, skipped_ids=skipped_ids)


def rank_applications_df(
    preferences: TrustPreferences | Mapping[str, Any] | None,
    applications: Iterable[Application],
    *,
    hard_filter: bool = False,
    statuses: Iterable[str] | None = None,
    limit: int | None = None,
) -> pd.DataFrame:
    return run_ranking(
        preferences,
        applications,
        hard_filter=hard_filter,
        statuses=statuses,
        limit=limit,
    ).ranked_df


def rank_applications(
    preferences: TrustPreferences | Mapping[str, Any] | None,
    applications: Iterable[Application],
    *,
    hard_filter: bool = False,
    statuses: Iterable[str] | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    return run_ranking(
        preferences,
        applications,
        hard_filter=hard_filter,
        statuses=statuses,
        limit=limit,
    ).to_records()
