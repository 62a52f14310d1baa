from __future__ import annotations

import json
from pathlib import Path

import pytest

from scripts.rank_applications import main, rank_from_input
from src.io.records import parse_ranking_input


def _payload() -> dict[str, object]:
    return {
        "trust_user_id": "trust-1",
        "preferences": {
            "preferred_gender": "Female",
            "preferred_courses": ["CS"],
            "preferred_cities": ["Delhi"],
            "max_family_income_lpa": 5,
            "min_academic_percentage": 75,
        },
        "applications": [
            {
                "id": "A",
                "gender": "Female",
                "current_course_name": "CS",
                "address": {"city": "Delhi"},
                "created_at": "2025-07-01T10:00:00Z",
                "status": "submitted",
                "total_amount_requested": 60000,
                "education_history": [{"grade": 85}],
                "family_members": [{"monthly_income": 25000}],
            },
            {
                "id": "B",
                "gender": "Male",
                "current_course_name": "CS",
                "address": {"city": "Delhi"},
                "created_at": "2025-07-01T09:00:00Z",
                "status": "submitted",
                "total_amount_requested": 40000,
                "education_history": [{"grade": 85}],
                "family_members": [{"monthly_income": 25000}],
            },
            {
                "id": "decided",
                "gender": "Female",
                "current_course_name": "CS",
                "address": {"city": "Delhi"},
                "created_at": "2025-06-01T09:00:00Z",
                "status": "partially_approved",
                "total_amount_requested": 50000,
                "education_history": [{"grade": 95}],
                "family_members": [],
            },
        ],
        "approvals": [
            {"application_id": "decided", "trust_user_id": "trust-1", "status": "approved", "approved_amount": 20000},
            {"application_id": "A", "trust_user_id": "trust-2", "status": "approved", "approved_amount": 10000},
        ],
    }


def test_rank_from_input_pending_view_score_all() -> None:
    report = rank_from_input(parse_ranking_input(_payload()))

    assert report["candidate_count"] == 2
    assert [result["application_id"] for result in report["results"]] == ["A", "B"]
    assert [result["total_score"] for result in report["results"]] == [100, 65]
    assert report["results"][0]["total_amount_approved"] == 10000.0
    assert report["results"][0]["remaining_amount"] == 50000.0
    assert report["excluded"] == {}


def test_rank_from_input_hard_filter_reports_exclusions() -> None:
    report = rank_from_input(parse_ranking_input(_payload()), hard_filter=True, view="all")

    assert [result["application_id"] for result in report["results"]] == ["decided", "A"]
    assert report["excluded"] == {"B": ["GENDER_MISMATCH"]}


def test_rank_from_input_requires_trust_for_review_views() -> None:
    payload = _payload()
    payload["trust_user_id"] = None

    with pytest.raises(ValueError):
        rank_from_input(parse_ranking_input(payload), view="pending")


def test_main_writes_report_file(tmp_path: Path) -> None:
    input_path = tmp_path / "input.json"
    output_path = tmp_path / "out" / "ranked.json"
    input_path.write_text(json.dumps(_payload()), encoding="utf-8")

    exit_code = main(["--input", str(input_path), "--output", str(output_path), "--view", "approved"])

    persisted = json.loads(output_path.read_text(encoding="utf-8"))
    assert exit_code == 0
    assert persisted["view"] == "approved"
    assert [result["application_id"] for result in persisted["results"]] == ["decided"]


def test_main_prints_to_stdout_with_limit(tmp_path: Path, capsys) -> None:  # noqa: ANN001
    input_path = tmp_path / "input.json"
    input_path.write_text(json.dumps(_payload()), encoding="utf-8")

    exit_code = main(["--input", str(input_path), "--view", "all", "--limit", "1"])

    printed = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [result["application_id"] for result in printed["results"]] == ["decided"]


def test_rank_from_input_reports_review_stats() -> None:
    report = rank_from_input(parse_ranking_input(_payload()))

    assert report["stats"] == {
        "pending": 2,
        "approved": 1,
        "rejected": 0,
        "total_requested": 100000.0,
        "total_approved": 20000.0,
    }


def test_rank_from_input_without_trust_has_no_stats() -> None:
    payload = _payload()
    payload["trust_user_id"] = None

    report = rank_from_input(parse_ranking_input(payload), view="all")

    assert report["stats"] is None
    assert report["candidate_count"] == 3


def test_rank_from_input_ignores_duplicate_application_rows() -> None:
    payload = _payload()
    duplicate = dict(payload["applications"][0])
    duplicate["total_amount_requested"] = 999999
    payload["applications"].append(duplicate)

    report = rank_from_input(parse_ranking_input(payload), view="all")

    by_id = {result["application_id"]: result for result in report["results"]}
    assert report["candidate_count"] == 3
    assert by_id["A"]["remaining_amount"] == 50000.0
