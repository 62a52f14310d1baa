from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

from src.io.records import write_json_atomic
from src.normalize.preferences import TrustPreferences
from src.normalize.values import coerce_float

_CRITERION_LABELS = [
    ("gender", "Gender matches preference", "Gender differs from preference"),
    ("course", "Course is on the preferred list", "Course not on the preferred list"),
    ("city", "City is on the preferred list", "City not on the preferred list"),
    ("income", "Household income within ceiling", "Household income above ceiling"),
    ("academic", "Academic average meets minimum", "Academic average below minimum"),
]


def format_income_lpa(value: Any) -> str:
    income = coerce_float(value)
    if income is None:
        return "Unknown"
    return f"{max(income, 0.0):.2f} LPA"


def format_amount_inr(value: Any) -> str:
    amount = coerce_float(value)
    if amount is None:
        return "Unknown"
    return f"₹{max(amount, 0.0):,.0f}"


def explain_match_row(row: pd.Series, *, include_misses: bool = True) -> list[str]:
    """Human-readable reasons for a scored row, highest-value criteria first."""

    earned: list[tuple[float, str]] = []
    missed: list[str] = []
    for criterion, hit_label, miss_label in _CRITERION_LABELS:
        points = coerce_float(row.get(f"{criterion}_points")) or 0.0
        if bool(row.get(f"{criterion}_match")):
            earned.append((points, f"{hit_label} (+{points:.0f})"))
        elif include_misses:
            missed.append(miss_label)

    ranked = [label for _, label in sorted(earned, key=lambda item: item[0], reverse=True)]
    return ranked + missed


def reasons_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(item) for item in value if str(item).strip())
    return str(value)


def save_preferences(preferences: TrustPreferences, path: Path) -> None:
    write_json_atomic(preferences.to_dict(), path)


def load_saved_preferences(path: Path) -> TrustPreferences | None:
    """Preferences saved from the dashboard, or None when nothing was saved yet."""

    if not path.exists():
        return None
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Saved preferences at '{path}' must be a JSON object.")
    return TrustPreferences.from_mapping(payload)
