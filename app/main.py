from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pandas as pd
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import (
    explain_match_row,
    format_amount_inr,
    format_income_lpa,
    load_saved_preferences,
    reasons_to_text,
    save_preferences,
)
from src.io.records import RankingInput, parse_ranking_input
from src.normalize.preferences import ANY_GENDER, TrustPreferences
from src.rank.pipeline import run_ranking
from src.review.queues import ALL_VIEW, ReviewView, candidates_for_view, review_stats

DATA_DIR = ROOT_DIR / "data"
DEFAULT_INPUT_PATH = DATA_DIR / "ranking_input.json"
PREFERENCES_PATH = DATA_DIR / "trust_preferences.json"
GENDER_OPTIONS = [ANY_GENDER, "Female", "Male", "Other"]


def _ensure_session_state() -> None:
    st.session_state.setdefault("ranking_input", None)
    st.session_state.setdefault("ranked_df", None)
    st.session_state.setdefault("excluded_df", None)
    st.session_state.setdefault("skipped_ids", [])


def _load_input_payload(uploaded: Any) -> RankingInput | None:
    if uploaded is not None:
        return parse_ranking_input(json.loads(uploaded.getvalue().decode("utf-8")))
    if DEFAULT_INPUT_PATH.exists():
        return parse_ranking_input(json.loads(DEFAULT_INPUT_PATH.read_text(encoding="utf-8")))
    return None


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _preferences_from_widgets(stored: TrustPreferences) -> TrustPreferences:
    with st.sidebar:
        st.header("Trust Preferences")
        current_gender = stored.gender or ANY_GENDER
        gender_options = GENDER_OPTIONS if current_gender in GENDER_OPTIONS else [*GENDER_OPTIONS, current_gender]
        gender = st.selectbox("preferred gender", gender_options, index=gender_options.index(current_gender))
        courses = st.text_input("preferred courses (comma separated)", value=", ".join(stored.courses))
        cities = st.text_input("preferred cities (comma separated)", value=", ".join(stored.cities))
        max_income = st.text_input(
            "max family income (LPA)",
            value="" if stored.max_income_lpa is None else f"{stored.max_income_lpa:g}",
        )
        min_academic = st.text_input(
            "min academic percentage",
            value="" if stored.min_academic_pct is None else f"{stored.min_academic_pct:g}",
        )

    return TrustPreferences.from_mapping(
        {
            "preferred_gender": gender,
            "preferred_courses": _split_csv(courses),
            "preferred_cities": _split_csv(cities),
            "max_family_income_lpa": max_income,
            "min_academic_percentage": min_academic,
        }
    )


def main() -> None:
    st.set_page_config(page_title="Trust Match Dashboard", layout="wide")
    _ensure_session_state()
    st.title("Trust Match Dashboard")

    uploaded = st.file_uploader("Ranking input (JSON)", type=["json"])
    try:
        ranking_input = _load_input_payload(uploaded)
    except (ValueError, UnicodeDecodeError) as exc:
        st.error(f"Could not read ranking input: {exc}")
        ranking_input = None
    if ranking_input is None:
        st.info(f"Upload a ranking input or place one at {DEFAULT_INPUT_PATH}.")
        return
    st.session_state.ranking_input = ranking_input

    try:
        stored_preferences = load_saved_preferences(PREFERENCES_PATH)
    except ValueError as exc:
        st.error(f"Could not read saved preferences: {exc}")
        stored_preferences = None
    if stored_preferences is None:
        stored_preferences = TrustPreferences.from_mapping(ranking_input.preferences)
    preferences = _preferences_from_widgets(stored_preferences)
    with st.sidebar:
        if st.button("Save preferences"):
            save_preferences(preferences, PREFERENCES_PATH)
            st.success(f"Saved to {PREFERENCES_PATH}")
        if preferences.is_unconstrained:
            st.caption("No preferences set: every application scores 100.")

    view_col, filter_col, limit_col = st.columns(3)
    view = view_col.selectbox("Review queue", [*(view.value for view in ReviewView), ALL_VIEW], index=0)
    hard_filter = filter_col.checkbox("Only show matching applications", value=False)
    limit = int(limit_col.number_input("Limit (0 = no limit)", min_value=0, value=0, step=10))

    if ranking_input.trust_user_id is not None:
        stats = review_stats(ranking_input.applications, ranking_input.approvals, ranking_input.trust_user_id)
        pending_col, approved_col, rejected_col, requested_col, granted_col = st.columns(5)
        pending_col.metric("Pending", stats.pending)
        approved_col.metric("Approved", stats.approved)
        rejected_col.metric("Rejected", stats.rejected)
        requested_col.metric("Pending requested", format_amount_inr(stats.total_requested))
        granted_col.metric("Approved amount", format_amount_inr(stats.total_approved))

    if st.button("Rank applications", type="primary"):
        try:
            candidates = candidates_for_view(
                ranking_input.applications,
                ranking_input.approvals,
                ranking_input.trust_user_id,
                view,
            )
        except ValueError as exc:
            st.error(str(exc))
            return
        run = run_ranking(
            preferences,
            candidates,
            hard_filter=hard_filter,
            limit=limit or None,
        )
        st.session_state.ranked_df = run.ranked_df
        st.session_state.excluded_df = run.excluded_df
        st.session_state.skipped_ids = run.skipped_ids
        st.success(f"Ranked {len(run.ranked_df)} applications, excluded {len(run.excluded_df)}.")
        if run.skipped_ids:
            st.warning(f"Skipped unreadable applications: {', '.join(run.skipped_ids)}")

    ranked_df: pd.DataFrame | None = st.session_state.ranked_df
    if isinstance(ranked_df, pd.DataFrame):
        display_df = ranked_df.copy()
        display_df["income"] = display_df["family_income_lpa"].apply(format_income_lpa)
        display_df["requested"] = display_df["amount_requested"].apply(format_amount_inr)
        table_columns = [
            "application_id",
            "full_name",
            "course_name",
            "city",
            "gender",
            "total_score",
            "academic_score",
            "income",
            "requested",
            "created_at",
        ]
        st.subheader(f"Ranked Applications ({len(display_df)} shown)")
        st.dataframe(display_df[table_columns], use_container_width=True)

        st.subheader("Why ranked")
        for _, row in display_df.iterrows():
            label = str(row.get("full_name") or row.get("application_id"))
            with st.expander(f"{label} ({int(row['total_score'])})"):
                for explanation in explain_match_row(row):
                    st.write(f"- {explanation}")

    excluded_df: pd.DataFrame | None = st.session_state.excluded_df
    if isinstance(excluded_df, pd.DataFrame) and not excluded_df.empty:
        st.subheader("Excluded Applications")
        excluded_view = excluded_df.copy()
        excluded_view["reasons_text"] = excluded_view["reasons"].apply(reasons_to_text)
        st.dataframe(
            excluded_view[["application_id", "full_name", "total_score", "reasons_text"]],
            use_container_width=True,
        )


if __name__ == "__main__":
    main()
