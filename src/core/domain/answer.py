"""Structured answer models returned by the query entry point."""

from dataclasses import dataclass, field
from typing import Any

from .document import Metadata


@dataclass(frozen=True)
class Citation:
    """A claimed grounding of the answer in a retrieved document.

    Attributes:
        source_id: Id of the cited document.
        page_number: Page as a string, or None when not known.
    """

    source_id: str
    page_number: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"source_id": self.source_id, "page_number": self.page_number}


@dataclass
class StructuredAnswer:
    """Answer produced for one query.

    Attributes:
        answer: Concise answer text.
        reasoning: Explanation derived from the context.
        conditions: Named conditions or values found in the context.
        citations: Validated, deduplicated citations.
        logic_evaluation: Annotations from the rule checks.
    """

    answer: str
    reasoning: str
    conditions: Metadata = field(default_factory=dict)
    citations: list[Citation] = field(default_factory=list)
    logic_evaluation: str = "N/A"

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "reasoning": self.reasoning,
            "conditions": dict(self.conditions),
            "citations": [citation.to_dict() for citation in self.citations],
            "logic_evaluation": self.logic_evaluation,
        }
