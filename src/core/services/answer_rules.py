"""Declarative checks over a generated answer.

Each rule is a named predicate over the answer facts plus the message shown
when it fires. Rules are independent and evaluated in declaration order.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..domain import Citation, Metadata

NO_RULES_TRIGGERED = "No specific rules triggered."

_DURATION = re.compile(r"\d+\s*(month|year)s?", re.IGNORECASE)


@dataclass
class AnswerFacts:
    """Facts the rules are evaluated against."""

    answer: str
    conditions: Metadata = field(default_factory=dict)
    citations: list[Citation] = field(default_factory=list)


@dataclass(frozen=True)
class AnswerRule:
    """A named predicate and the message produced when it holds."""

    name: str
    predicate: Callable[[AnswerFacts], bool]
    message: str

    def matches(self, facts: AnswerFacts) -> bool:
        return self.predicate(facts)


def _contains_all(*terms: str) -> Callable[[AnswerFacts], bool]:
    def predicate(facts: AnswerFacts) -> bool:
        text = facts.answer.lower()
        return all(term in text for term in terms)

    return predicate


def _mentions_waiting_period(facts: AnswerFacts) -> bool:
    return "waiting period" in facts.answer.lower() and bool(_DURATION.search(facts.answer))


DEFAULT_RULES: tuple[AnswerRule, ...] = (
    AnswerRule(
        name="coverage_affirmative",
        predicate=_contains_all("cover", "yes"),
        message="Policy likely provides coverage based on answer.",
    ),
    AnswerRule(
        name="waiting_period_identified",
        predicate=_mentions_waiting_period,
        message="Specific waiting period mentioned in the answer.",
    ),
)


def evaluate_rules(facts: AnswerFacts, rules: Sequence[AnswerRule] = DEFAULT_RULES) -> str:
    """Run every rule and summarise the ones that fired.

    Returns:
        Messages of the triggered rules joined with ``"; "``, or
        ``NO_RULES_TRIGGERED`` when none fired.
    """
    messages = [rule.message for rule in rules if rule.matches(facts)]
    return "; ".join(messages) if messages else NO_RULES_TRIGGERED
