from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from macrocal.core.models import ClassificationResult

Predicate = Callable[[str], bool]


def any_of(*keywords: str) -> Predicate:
    return lambda text: any(k in text for k in keywords)


def all_of(*predicates: Predicate) -> Predicate:
    return lambda text: all(p(text) for p in predicates)


def either(*predicates: Predicate) -> Predicate:
    return lambda text: any(p(text) for p in predicates)


@dataclass(frozen=True)
class Rule:
    """Maps lower-cased text matching ``predicate`` to ``result``."""

    predicate: Predicate
    result: ClassificationResult

    def matches(self, text: str) -> bool:
        return self.predicate(text)


# Order matters: rules overlap, and the first match wins.
RULES: tuple[Rule, ...] = (
    Rule(
        either(
            any_of("fomc", "federal reserve meeting"),
            all_of(any_of("fed"), any_of("meeting", "decision")),
        ),
        ClassificationResult("monetary", "High", "🏛️", "FOMC Meeting"),
    ),
    Rule(
        any_of("cpi", "consumer price index"),
        ClassificationResult("inflation", "High", "💹", "Consumer Price Index (CPI)"),
    ),
    Rule(
        any_of("ppi", "producer price index"),
        ClassificationResult("inflation", "High", "💹", "Producer Price Index (PPI)"),
    ),
    Rule(
        any_of("jolts", "job openings"),
        ClassificationResult("employment", "High", "🧾", "JOLTS Job Openings Report"),
    ),
    Rule(
        either(
            any_of("non-farm", "nonfarm"),
            all_of(any_of("payroll"), any_of("job")),
        ),
        ClassificationResult("employment", "High", "🧾", "Non-Farm Payrolls Report"),
    ),
    Rule(
        any_of("retail sales"),
        ClassificationResult("growth", "High", "🛍️", "Retail Sales Report"),
    ),
    Rule(
        any_of("michigan", "consumer sentiment"),
        ClassificationResult(
            "consumer", "Medium", "📊", "University of Michigan Consumer Sentiment"
        ),
    ),
    Rule(
        any_of("consumer confidence", "conference board"),
        ClassificationResult("consumer", "Medium", "📊", "Consumer Confidence Index"),
    ),
    Rule(
        any_of("gdp", "gross domestic product"),
        ClassificationResult("growth", "High", "📊", "GDP Report"),
    ),
    Rule(
        any_of("ism", "purchasing managers"),
        ClassificationResult("growth", "Medium", "🏭", "ISM Manufacturing Report"),
    ),
)

UNCLASSIFIED = ClassificationResult("other", "Low", "📌", None)


def classify(text: str, rules: tuple[Rule, ...] = RULES) -> ClassificationResult:
    """Map free text to the first matching economic event type.

    Matching is a case-insensitive substring test, so short keywords such as
    "fed" or "ism" also fire inside longer words. Text that matches no rule
    yields ``UNCLASSIFIED`` whose ``event_name`` is None.
    """
    lowered = (text or "").lower()
    for rule in rules:
        if rule.matches(lowered):
            return rule.result
    return UNCLASSIFIED
