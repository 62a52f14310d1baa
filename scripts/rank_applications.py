from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.io.records import RankingInput, load_ranking_input, write_json_atomic
from src.rank.pipeline import run_ranking
from src.rank.weights import MatchPoints
from src.review.queues import (
    ALL_VIEW,
    ReviewView,
    candidates_for_view,
    remaining_amount,
    review_stats,
    total_approved_amount,
)

logger = logging.getLogger("rank_applications")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rank scholarship applications for one trust.")
    parser.add_argument("--input", type=Path, required=True, help="JSON export with preferences and applications.")
    parser.add_argument("--output", type=Path, default=None, help="Write ranked JSON here instead of stdout.")
    parser.add_argument(
        "--hard-filter",
        action="store_true",
        help="Drop applications failing any preference instead of ranking them lower.",
    )
    parser.add_argument(
        "--view",
        choices=(*(view.value for view in ReviewView), ALL_VIEW),
        default=ReviewView.PENDING.value,
        help="Review queue to rank. Defaults to pending.",
    )
    parser.add_argument("--limit", type=int, default=None, help="Keep only the top N results.")
    return parser.parse_args(argv)


def rank_from_input(
    ranking_input: RankingInput,
    *,
    hard_filter: bool = False,
    view: str = ReviewView.PENDING.value,
    limit: int | None = None,
) -> dict[str, Any]:
    candidates = candidates_for_view(
        ranking_input.applications,
        ranking_input.approvals,
        ranking_input.trust_user_id,
        view,
    )
    run = run_ranking(
        ranking_input.preferences,
        candidates,
        hard_filter=hard_filter,
        limit=limit,
        points=MatchPoints.from_mapping(ranking_input.points),
    )

    by_id = {application.application_id: application for application in candidates}
    results = run.to_records()
    for result in results:
        application = by_id[result["application_id"]]
        result["total_amount_approved"] = total_approved_amount(application, ranking_input.approvals)
        result["remaining_amount"] = remaining_amount(application, ranking_input.approvals)

    stats = None
    if ranking_input.trust_user_id is not None:
        stats = review_stats(
            ranking_input.applications,
            ranking_input.approvals,
            ranking_input.trust_user_id,
        ).to_dict()

    return {
        "stats": stats,
        "trust_user_id": ranking_input.trust_user_id,
        "view": view,
        "hard_filter": hard_filter,
        "candidate_count": len(candidates),
        "results": results,
        "excluded": {
            str(row["application_id"]): list(row["reasons"]) for _, row in run.excluded_df.iterrows()
        },
        "skipped_ids": run.skipped_ids,
    }


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    ranking_input = load_ranking_input(args.input)
    report = rank_from_input(
        ranking_input,
        hard_filter=args.hard_filter,
        view=args.view,
        limit=args.limit,
    )

    if args.output is not None:
        write_json_atomic(report, args.output)
        logger.info("Wrote %d ranked applications to %s", len(report["results"]), args.output)
    else:
        print(json.dumps(report, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
