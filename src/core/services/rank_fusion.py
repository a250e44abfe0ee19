"""Reciprocal Rank Fusion (RRF) of independently ranked result lists.

Each list contributes ``1 / (k + rank)`` to every item it contains, and the
contributions are summed across lists. Only rank positions matter, so lists
scored on incomparable scales (cosine similarity, bm25, ...) fuse cleanly.
"""

from collections.abc import Sequence

from ..domain import FusedResult, RankedResult

DEFAULT_RRF_K = 60


def fuse_ranks(
    ranked_lists: Sequence[Sequence[RankedResult]],
    k: int = DEFAULT_RRF_K,
) -> list[FusedResult]:
    """Fuse ranked lists into one list ordered by RRF score.

    Args:
        ranked_lists: Lists of results, each ranked 1..n by its own signal.
        k: RRF constant. Larger values flatten the advantage of top ranks.

    Returns:
        Fused results, highest score first. Ties keep the order in which the
        items were first seen.
    """
    if k < 0:
        raise ValueError("k must be non-negative")

    fused: dict[str, FusedResult] = {}

    for list_index, results in enumerate(ranked_lists):
        for result in results:
            entry = fused.get(result.item_id)
            if entry is None:
                entry = fused[result.item_id] = FusedResult(item_id=result.item_id, score=0.0)
            entry.score += 1.0 / (k + result.rank)
            if result.score is not None:
                entry.source_scores[list_index] = result.score

    return sorted(fused.values(), key=lambda entry: entry.score, reverse=True)
