"""Ranked and fused retrieval results."""

from dataclasses import dataclass, field


@dataclass
class RankedResult:
    """One entry of a ranked list returned by a retrieval signal.

    Attributes:
        item_id: Chunk identifier.
        rank: 1-based position within its own list.
        score: Native score of the signal (cosine similarity, bm25, ...).
    """

    item_id: str
    rank: int
    score: float | None = None

    def __post_init__(self) -> None:
        if self.rank < 1:
            raise ValueError(f"rank must be 1 or greater, got {self.rank}")


@dataclass
class FusedResult:
    """An item after Reciprocal Rank Fusion.

    Attributes:
        item_id: Chunk identifier.
        score: Accumulated fusion score.
        source_scores: Native score per input list, keyed by list index.
    """

    item_id: str
    score: float
    source_scores: dict[int, float] = field(default_factory=dict)
