from __future__ import annotations

import pandas as pd

SORT_COLUMNS = ["total_score", "family_income_lpa", "_created_sort", "application_id"]
SORT_ASCENDING = [False, True, True, True]


def order_matches(scored_df: pd.DataFrame, limit: int | None = None) -> pd.DataFrame:
    """Best fit first, then neediest household, then oldest submission.

    The limit is applied after sorting.
    """

    if limit is not None and limit < 0:
        raise ValueError("limit must be a non-negative integer.")
    for column in ("total_score", "family_income_lpa", "application_id"):
        if column not in scored_df.columns:
            raise ValueError(f"Ordering requires a '{column}' column.")

    ordered_df = scored_df.copy()
    ordered_df["_created_sort"] = pd.to_datetime(ordered_df.get("created_at"), errors="coerce", utc=True)
    ordered_df = ordered_df.sort_values(
        by=SORT_COLUMNS,
        ascending=SORT_ASCENDING,
        na_position="last",
        kind="mergesort",
    ).drop(columns=["_created_sort"])

    if limit is not None:
        ordered_df = ordered_df.head(limit)
    return ordered_df.reset_index(drop=True)
