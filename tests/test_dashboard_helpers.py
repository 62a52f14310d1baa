from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from app.helpers import (
    explain_match_row,
    format_amount_inr,
    format_income_lpa,
    load_saved_preferences,
    reasons_to_text,
    save_preferences,
)
from src.normalize.preferences import TrustPreferences


def test_explain_match_row_lists_earned_points_first_then_misses() -> None:
    row = pd.Series(
        {
            "gender_points": 0,
            "gender_match": False,
            "course_points": 30,
            "course_match": True,
            "city_points": 15,
            "city_match": True,
            "income_points": 15,
            "income_match": True,
            "academic_points": 0,
            "academic_match": False,
        }
    )

    assert explain_match_row(row) == [
        "Course is on the preferred list (+30)",
        "City is on the preferred list (+15)",
        "Household income within ceiling (+15)",
        "Gender differs from preference",
        "Academic average below minimum",
    ]
    assert explain_match_row(row, include_misses=False)[-1] == "Household income within ceiling (+15)"


def test_formatters_handle_missing_values() -> None:
    assert format_income_lpa(1.8) == "1.80 LPA"
    assert format_income_lpa(None) == "Unknown"
    assert format_amount_inr(125000) == "₹125,000"
    assert format_amount_inr("bad") == "Unknown"


def test_reasons_to_text_joins_codes() -> None:
    assert reasons_to_text(["GENDER_MISMATCH", "CITY_NOT_PREFERRED"]) == "GENDER_MISMATCH, CITY_NOT_PREFERRED"
    assert reasons_to_text(None) == ""


def test_saved_preferences_reload_as_stored_preferences(tmp_path: Path) -> None:
    path = tmp_path / "data" / "trust_preferences.json"
    preferences = TrustPreferences.from_mapping(
        {
            "preferred_gender": "Female",
            "preferred_courses": ["B.Tech", "MBBS"],
            "preferred_cities": ["Pune"],
            "max_family_income_lpa": 4.5,
            "min_academic_percentage": 70,
        }
    )

    save_preferences(preferences, path)

    assert load_saved_preferences(path) == preferences
    assert list(path.parent.glob("*.tmp")) == []


def test_saved_unconstrained_preferences_reload_unconstrained(tmp_path: Path) -> None:
    path = tmp_path / "trust_preferences.json"

    save_preferences(TrustPreferences.unconstrained(), path)

    reloaded = load_saved_preferences(path)
    assert reloaded is not None
    assert reloaded.is_unconstrained


def test_load_saved_preferences_missing_and_malformed(tmp_path: Path) -> None:
    path = tmp_path / "trust_preferences.json"
    assert load_saved_preferences(path) is None

    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_saved_preferences(path)
