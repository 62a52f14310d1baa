from __future__ import annotations

import pandas as pd
import pytest

from src.normalize.preferences import TrustPreferences
from src.normalize.schema import Application, EducationRecord, FamilyMember
from src.rank.stage1_filter import apply_hard_filter
from src.rank.stage2_match import score_candidates


def _application(application_id: str, **overrides: object) -> Application:
    fields: dict[str, object] = {
        "gender": "Female",
        "course_name": "CS",
        "city": "Delhi",
        "education": [EducationRecord(grade=85.0)],
        "family_members": [FamilyMember(monthly_income=25000.0)],
    }
    fields.update(overrides)
    return Application(application_id=application_id, **fields)  # type: ignore[arg-type]


PREFERENCES = TrustPreferences.from_mapping(
    {
        "preferred_gender": "Female",
        "preferred_courses": ["CS"],
        "preferred_cities": ["Delhi"],
        "max_family_income_lpa": 5,
        "min_academic_percentage": 75,
    }
)


def test_apply_hard_filter_emits_reason_codes_for_each_criterion() -> None:
    applications = [
        _application("eligible"),
        _application("gender", gender="Male"),
        _application("course", course_name="Arts"),
        _application("city", city="Mumbai"),
        _application("income", family_members=[FamilyMember(monthly_income=60000.0)]),
        _application("academic", education=[EducationRecord(grade=60.0)]),
    ]
    scored_df, _ = score_candidates(applications, PREFERENCES)

    included_df, excluded_df = apply_hard_filter(scored_df)
    reasons_by_id = {row["application_id"]: row["reasons"] for _, row in excluded_df.iterrows()}

    assert included_df["application_id"].tolist() == ["eligible"]
    assert "reasons" not in included_df.columns
    assert reasons_by_id == {
        "gender": ["GENDER_MISMATCH"],
        "course": ["COURSE_NOT_PREFERRED"],
        "city": ["CITY_NOT_PREFERRED"],
        "income": ["INCOME_ABOVE_MAX"],
        "academic": ["ACADEMIC_BELOW_MIN"],
    }


def test_apply_hard_filter_collects_multiple_reasons() -> None:
    scored_df, _ = score_candidates(
        [
            _application(
                "multi",
                gender="Male",
                course_name="Arts",
                city="Pune",
                education=[],
                family_members=[FamilyMember(monthly_income=100000.0)],
            )
        ],
        PREFERENCES,
    )

    included_df, excluded_df = apply_hard_filter(scored_df)

    assert included_df.empty
    assert excluded_df.iloc[0]["reasons"] == [
        "GENDER_MISMATCH",
        "COURSE_NOT_PREFERRED",
        "CITY_NOT_PREFERRED",
        "INCOME_ABOVE_MAX",
        "ACADEMIC_BELOW_MIN",
    ]


def test_empty_history_fails_a_real_minimum_but_passes_no_minimum() -> None:
    no_history = _application("no-history", education=[])
    strict_df, _ = score_candidates([no_history], PREFERENCES)
    open_df, _ = score_candidates([no_history], TrustPreferences.from_mapping({"preferred_gender": "Female"}))

    strict_included, _ = apply_hard_filter(strict_df)
    open_included, _ = apply_hard_filter(open_df)

    assert strict_included.empty
    assert open_included["application_id"].tolist() == ["no-history"]


def test_apply_hard_filter_requires_match_columns() -> None:
    with pytest.raises(ValueError):
        apply_hard_filter(pd.DataFrame([{"application_id": "x", "total_score": 100}]))
