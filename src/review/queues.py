from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from src.normalize.schema import Application
from src.normalize.values import coerce_float

ALL_VIEW = "all"


class ReviewView(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: str | ReviewView | None) -> ReviewView:
        if value is None:
            return cls.PENDING
        if isinstance(value, ReviewView):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown review view '{value}'.") from exc


@dataclass(frozen=True, slots=True)
class Approval:
    """One trust's decision on one application."""

    application_id: str
    trust_user_id: str
    status: str
    approved_amount: float | None = None


def _decisions_for_trust(approvals: Iterable[Approval], trust_user_id: str) -> dict[str, str]:
    decisions: dict[str, str] = {}
    for approval in approvals:
        if approval.trust_user_id == trust_user_id:
            decisions[approval.application_id] = approval.status
    return decisions


def select_for_review(
    applications: Iterable[Application],
    approvals: Iterable[Approval],
    trust_user_id: str,
    view: str | ReviewView | None = ReviewView.PENDING,
) -> list[Application]:
    """Pick the applications shown in one trust's review queue.

    Pending excludes anything this trust already decided on and fully funded
    (closed) applications; approvals by other trusts do not hide an application.
    """

    active_view = ReviewView.parse(view)
    decisions = _decisions_for_trust(approvals, trust_user_id)

    if active_view is ReviewView.PENDING:
        return [
            application
            for application in applications
            if application.application_id not in decisions and application.status != "closed"
        ]
    return [
        application
        for application in applications
        if decisions.get(application.application_id) == active_view.value
    ]


def candidates_for_view(
    applications: Iterable[Application],
    approvals: Iterable[Approval],
    trust_user_id: str | None,
    view: str | ReviewView | None,
) -> list[Application]:
    """Resolve a queue name, where ALL_VIEW skips the per-trust pre-filter."""

    if view == ALL_VIEW:
        return list(applications)
    if trust_user_id is None:
        raise ValueError("Review views other than 'all' require a trust_user_id in the input.")
    return select_for_review(applications, approvals, trust_user_id, view)


@dataclass(frozen=True, slots=True)
class ReviewStats:
    pending: int
    approved: int
    rejected: int
    total_requested: float
    total_approved: float

    def to_dict(self) -> dict[str, float | int]:
        return {
            "pending": self.pending,
            "approved": self.approved,
            "rejected": self.rejected,
            "total_requested": self.total_requested,
            "total_approved": self.total_approved,
        }


def review_stats(
    applications: Iterable[Application],
    approvals: Iterable[Approval],
    trust_user_id: str,
) -> ReviewStats:
    """Queue counters for one trust.

    Pending counts and requested totals follow the pending queue; approved and
    rejected counts and the approved total come from this trust's decisions.
    """

    approval_rows = list(approvals)
    pending = select_for_review(applications, approval_rows, trust_user_id, ReviewView.PENDING)
    own_rows = [approval for approval in approval_rows if approval.trust_user_id == trust_user_id]
    approved_rows = [approval for approval in own_rows if approval.status == ReviewView.APPROVED.value]

    return ReviewStats(
        pending=len(pending),
        approved=len(approved_rows),
        rejected=sum(1 for approval in own_rows if approval.status == ReviewView.REJECTED.value),
        total_requested=sum(coerce_float(application.amount_requested) or 0.0 for application in pending),
        total_approved=sum(coerce_float(approval.approved_amount) or 0.0 for approval in approved_rows),
    )


def total_approved_amount(application: Application, approvals: Iterable[Approval]) -> float:
    approved_sum = 0.0
    for approval in approvals:
        if approval.application_id != application.application_id or approval.status != "approved":
            continue
        approved_sum += coerce_float(approval.approved_amount) or 0.0
    legacy_amount = coerce_float(application.amount_approved) or 0.0
    return max(approved_sum, legacy_amount)


def remaining_amount(application: Application, approvals: Iterable[Approval]) -> float:
    requested = coerce_float(application.amount_requested) or 0.0
    return max(requested - total_approved_amount(application, approvals), 0.0)
