from __future__ import annotations

import pandas as pd

REASON_CODES = {
    "gender_match": "GENDER_MISMATCH",
    "course_match": "COURSE_NOT_PREFERRED",
    "city_match": "CITY_NOT_PREFERRED",
    "income_match": "INCOME_ABOVE_MAX",
    "academic_match": "ACADEMIC_BELOW_MIN",
}


def _row_reasons(row: pd.Series) -> list[str]:
    reasons: list[str] = []
    for column, code in REASON_CODES.items():
        if not bool(row.get(column, True)):
            reasons.append(code)
    return reasons


def apply_hard_filter(scored_df: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Split scored applications into (included, excluded-with-reasons).

    Every criterion gates inclusion, the numeric income and academic cutoffs
    as well as gender, course and city.
    """

    missing = [column for column in REASON_CODES if column not in scored_df.columns]
    if missing:
        raise ValueError(f"Hard filter requires match columns: {', '.join(missing)}.")

    with_reasons_df = scored_df.copy()
    with_reasons_df["reasons"] = pd.Series(
        [_row_reasons(row) for _, row in with_reasons_df.iterrows()],
        index=with_reasons_df.index,
        dtype=object,
    )

    is_excluded = with_reasons_df["reasons"].map(bool).astype(bool)
    excluded_df = with_reasons_df[is_excluded].copy()
    included_df = with_reasons_df[~is_excluded].drop(columns=["reasons"]).copy()

    return included_df, excluded_df
