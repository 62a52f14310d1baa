from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4

import pandas as pd

from src.normalize.schema import Application, EducationRecord, FamilyMember
from src.normalize.values import coerce_float, coerce_text
from src.review.queues import Approval

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RankingInput:
    trust_user_id: str | None
    preferences: dict[str, Any] | None
    applications: list[Application] = field(default_factory=list)
    approvals: list[Approval] = field(default_factory=list)
    points: dict[str, Any] | None = None


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _coerce_int(value: Any) -> int | None:
    numeric = coerce_float(value)
    if numeric is None:
        return None
    return int(numeric)


def coerce_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(timestamp):
        return None
    if timestamp.tzinfo is None:
        timestamp = timestamp.tz_localize("UTC")
    return timestamp.tz_convert("UTC").to_pydatetime()


def _as_rows(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def education_from_mapping(payload: Mapping[str, Any]) -> EducationRecord:
    return EducationRecord(
        qualification=coerce_text(_first(payload, "qualification", "qualification_level", "course_name")),
        grade=coerce_float(_first(payload, "grade", "percentage")),
        year_of_passing=_coerce_int(_first(payload, "year_of_passing", "year")),
    )


def family_member_from_mapping(payload: Mapping[str, Any]) -> FamilyMember:
    return FamilyMember(
        relation=coerce_text(payload.get("relation")),
        monthly_income=coerce_float(payload.get("monthly_income")),
    )


def _resolve_city(payload: Mapping[str, Any]) -> str | None:
    city = coerce_text(payload.get("city"))
    if city is not None:
        return city
    address = payload.get("address")
    if isinstance(address, Mapping):
        return coerce_text(address.get("city"))
    return None


def application_from_mapping(payload: Mapping[str, Any]) -> Application:
    """Build an Application from a storage row; unreadable fields become None."""

    application_id = coerce_text(_first(payload, "application_id", "id"))
    if application_id is None:
        raise ValueError("Application row is missing an 'id'.")

    return Application(
        application_id=application_id,
        student_user_id=coerce_text(payload.get("student_user_id")),
        course_name=coerce_text(_first(payload, "current_course_name", "course_name")),
        gender=coerce_text(payload.get("gender")),
        city=_resolve_city(payload),
        created_at=coerce_timestamp(payload.get("created_at")),
        status=coerce_text(payload.get("status")) or "submitted",
        amount_requested=coerce_float(_first(payload, "total_amount_requested", "amount_requested")),
        amount_approved=coerce_float(_first(payload, "total_amount_approved", "amount_approved")),
        academic_year=coerce_text(payload.get("academic_year")),
        full_name=coerce_text(payload.get("full_name")),
        education=[
            education_from_mapping(row)
            for row in _as_rows(_first(payload, "education_history", "education"))
        ],
        family_members=[family_member_from_mapping(row) for row in _as_rows(payload.get("family_members"))],
    )


def approval_from_mapping(payload: Mapping[str, Any]) -> Approval:
    return Approval(
        application_id=str(payload["application_id"]),
        trust_user_id=str(payload["trust_user_id"]),
        status=coerce_text(payload.get("status")) or "",
        approved_amount=coerce_float(payload.get("approved_amount")),
    )


def _applications_from_rows(rows: list[Mapping[str, Any]]) -> list[Application]:
    """Parse application rows, keeping the first row for each id."""

    applications: list[Application] = []
    seen_ids: set[str] = set()
    for index, row in enumerate(rows):
        try:
            application = application_from_mapping(row)
        except Exception:
            logger.exception("Skipping unreadable application row %d.", index)
            continue
        if application.application_id in seen_ids:
            logger.warning(
                "Skipping application row %d: duplicate id %s.",
                index,
                application.application_id,
            )
            continue
        seen_ids.add(application.application_id)
        applications.append(application)
    return applications


def parse_ranking_input(payload: Mapping[str, Any]) -> RankingInput:
    preferences = payload.get("preferences")
    points = payload.get("points")
    return RankingInput(
        trust_user_id=coerce_text(payload.get("trust_user_id")),
        preferences=dict(preferences) if isinstance(preferences, Mapping) else None,
        applications=_applications_from_rows(_as_rows(payload.get("applications"))),
        approvals=[approval_from_mapping(row) for row in _as_rows(payload.get("approvals"))],
        points=dict(points) if isinstance(points, Mapping) else None,
    )


def load_ranking_input(path: Path) -> RankingInput:
    if not path.exists():
        raise FileNotFoundError(f"Ranking input not found at '{path}'.")
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError(f"Ranking input at '{path}' must be a JSON object.")
    return parse_ranking_input(payload)


def write_json_atomic(payload: Any, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.parent / f"{output_path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
