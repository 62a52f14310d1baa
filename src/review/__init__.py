"""Trust review queues applied before ranking."""

from src.review.queues import (
    ALL_VIEW,
    Approval,
    ReviewStats,
    ReviewView,
    candidates_for_view,
    remaining_amount,
    review_stats,
    select_for_review,
    total_approved_amount,
)

__all__ = [
    "ALL_VIEW",
    "Approval",
    "ReviewStats",
    "ReviewView",
    "candidates_for_view",
    "remaining_amount",
    "review_stats",
    "select_for_review",
    "total_approved_amount",
]
