"""Grounded answer synthesis over retrieved chunks."""

import json
import logging
import re
from typing import Any

from ..domain import Chunk, Citation, Metadata, StructuredAnswer
from ..domain.exceptions import GenerationFormatError
from ..ports.llm_port import LLMPort
from .answer_rules import DEFAULT_RULES, AnswerFacts, AnswerRule, evaluate_rules
from .prompts import build_answer_prompt

logger = logging.getLogger(__name__)

NO_CONTEXT_ANSWER = (
    "I could not find relevant information in the provided documents to answer this question."
)
NO_CONTEXT_REASONING = "No relevant document chunks were retrieved based on the query and filters."
MISSING_ANSWER = "I could not find a direct answer in the provided context."
MISSING_REASONING = "No specific reasoning could be extracted."

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def build_context(chunks: list[Chunk]) -> str:
    """Render chunks as citable context lines, separated by blank lines.

    Each line reads ``[Source ID: <document id>, Page: <page>] <content>``;
    absent parts are omitted.
    """
    lines = []
    for chunk in chunks:
        refs = []
        if chunk.document_id:
            refs.append(f"Source ID: {chunk.document_id}")
        if chunk.page_number:
            refs.append(f"Page: {chunk.page_number}")
        lines.append(f"[{', '.join(refs)}] {chunk.content}" if refs else chunk.content)
    return "\n\n".join(lines)


def parse_response(raw: str) -> dict[str, Any]:
    """Parse model output into a JSON object.

    A surrounding Markdown code fence is tolerated.

    Raises:
        GenerationFormatError: The output is not a JSON object.
    """
    text = (raw or "").strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise GenerationFormatError(
            "Model returned malformed JSON. Please try again.",
            cause=e,
            context={"response_preview": text[:200]},
        ) from e

    if not isinstance(parsed, dict):
        raise GenerationFormatError(
            "Model response is not a JSON object.",
            context={"response_type": type(parsed).__name__},
        )
    return parsed


def validate_citations(raw_citations: Any, retrieved: list[Chunk]) -> list[Citation]:
    """Keep only citations of documents that were actually retrieved.

    Page numbers are stringified. Duplicates (same source and page) are
    dropped, keeping the first occurrence.
    """
    if not isinstance(raw_citations, list):
        if raw_citations:
            logger.warning("Ignoring citations that are not a list: %r", raw_citations)
        return []

    retrieved_ids = {chunk.document_id for chunk in retrieved}
    citations: list[Citation] = []
    seen: set[tuple[str, str | None]] = set()

    for raw in raw_citations:
        source_id = raw.get("source_id") if isinstance(raw, dict) else None
        if not source_id or str(source_id) not in retrieved_ids:
            logger.warning("Model referenced an invalid or non-retrieved source_id: %s", source_id)
            continue

        page = raw.get("page_number")
        citation = Citation(source_id=str(source_id), page_number=str(page) if page else None)
        key = (citation.source_id, citation.page_number)
        if key not in seen:
            seen.add(key)
            citations.append(citation)

    return citations


def _coerce_conditions(raw_conditions: Any) -> Metadata:
    if not isinstance(raw_conditions, dict):
        return {}
    conditions: Metadata = {}
    for key, value in raw_conditions.items():
        if value is None or isinstance(value, (str, int, float, bool)):
            conditions[str(key)] = value
        else:
            conditions[str(key)] = json.dumps(value)
    return conditions


def empty_context_answer() -> StructuredAnswer:
    """Answer returned when retrieval produced no context at all."""
    return StructuredAnswer(
        answer=NO_CONTEXT_ANSWER,
        reasoning=NO_CONTEXT_REASONING,
        conditions={},
        citations=[],
        logic_evaluation="N/A",
    )


class AnswerSynthesizer:
    """Turns retrieved chunks into a structured, cited answer."""

    def __init__(
        self,
        llm: LLMPort,
        temperature: float = 0.1,
        rules: tuple[AnswerRule, ...] = DEFAULT_RULES,
    ) -> None:
        """Initialize the synthesizer.

        Args:
            llm: Generation model adapter.
            temperature: Sampling temperature for generation.
            rules: Checks run over every generated answer.
        """
        self.llm = llm
        self.temperature = temperature
        self.rules = rules

    def answer(self, query: str, ordered_chunks: list[Chunk]) -> StructuredAnswer:
        """Answer ``query`` from ``ordered_chunks`` only.

        Args:
            query: Normalised user question.
            ordered_chunks: Retrieved chunks, most relevant first.

        Returns:
            The structured answer. Without context no model call is made.

        Raises:
            GenerationFormatError: The model output could not be parsed.
            LLMError: The model call itself failed.
        """
        context = build_context(ordered_chunks)
        if not context:
            logger.warning("No relevant context found for query: %r", query)
            return empty_context_answer()

        logger.debug("Generating answer from %d chunks...", len(ordered_chunks))
        raw = self.llm.generate(
            build_answer_prompt(query, context),
            temperature=self.temperature,
            json_output=True,
        )
        output = parse_response(raw)

        citations = validate_citations(output.get("citations"), ordered_chunks)
        conditions = _coerce_conditions(output.get("conditions"))
        answer_text = output.get("answer")
        reasoning = output.get("reasoning")

        facts = AnswerFacts(
            answer=str(answer_text) if answer_text else "",
            conditions=conditions,
            citations=citations,
        )
        logic_evaluation = evaluate_rules(facts, self.rules)
        logger.info("Answer generated with %d citations (%s)", len(citations), logic_evaluation)

        return StructuredAnswer(
            answer=str(answer_text) if answer_text else MISSING_ANSWER,
            reasoning=str(reasoning) if reasoning else MISSING_REASONING,
            conditions=conditions,
            citations=citations,
            logic_evaluation=logic_evaluation,
        )
