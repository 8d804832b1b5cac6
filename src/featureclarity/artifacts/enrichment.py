from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from ..constants import ASSUMPTION_CATEGORIES, RISK_CATEGORIES, Likelihood, Limits, Severity

if TYPE_CHECKING:
    from ..analyze.schema_contract import AnalysisResult

ASSUMPTIONS = "implicitAssumptions"
RISKS = "systemRiskScenarios"
UX_PROBLEMS = "predictedUxProblems"

CATEGORY_DEFAULT_SEVERITY: Dict[str, Severity] = {
    "behavioral": Severity.MEDIUM,
    "technical": Severity.HIGH,
    "business": Severity.MEDIUM,
    "ux": Severity.LOW,
    "failureStates": Severity.HIGH,
    "permissionConflicts": Severity.HIGH,
    "emptyDataScenarios": Severity.MEDIUM,
    "concurrencyIssues": Severity.HIGH,
    "userMisusePatterns": Severity.MEDIUM,
}

CATEGORY_LABELS: Dict[str, str] = {
    "behavioral": "Behavioral assumption",
    "technical": "Technical assumption",
    "business": "Business assumption",
    "ux": "UX assumption",
    "failureStates": "Failure state",
    "permissionConflicts": "Permission conflict",
    "emptyDataScenarios": "Empty data scenario",
    "concurrencyIssues": "Concurrency issue",
    "userMisusePatterns": "User misuse pattern",
    UX_PROBLEMS: "Predicted UX problem",
}

SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2}
_BY_RANK = {rank: severity for severity, rank in SEVERITY_RANK.items()}


@dataclass(frozen=True)
class EnrichedItem:
    group: str
    category: str
    text: str
    severity: str
    likelihood: Likelihood
    detail: str
    derived: bool

    @property
    def severity_rank(self) -> int:
        """Rank for ordering; unrecognised severities sit with Medium as neutral."""
        normalized = normalize_severity(self.severity)
        if normalized is None:
            return SEVERITY_RANK[Severity.MEDIUM]
        return SEVERITY_RANK[normalized]

    @property
    def is_high(self) -> bool:
        return normalize_severity(self.severity) == Severity.HIGH

    @property
    def is_risk(self) -> bool:
        return self.group in (RISKS, UX_PROBLEMS)


@dataclass
class ClarityReport:
    items: List[EnrichedItem]
    ranked_items: List[EnrichedItem]
    top_critical_risks: List[EnrichedItem]
    ambiguity_score: int
    rework_probability: int
    severity_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def high_count(self) -> int:
        return sum(1 for item in self.items if item.is_high)


def normalize_severity(value: str) -> Optional[Severity]:
    lowered = (value or "").strip().lower()
    for severity in Severity:
        if severity.value.lower() == lowered:
            return severity
    return None


def derive_severity(default: Severity, text: str, index: int) -> Severity:
    """
    Severity = category default shifted by -1, 0 or +1.

    The shift is (len(text) + index) % 3 - 1, clamped to Low..High.
    """
    shift = (len(text.strip()) + index) % 3 - 1
    rank = max(0, min(2, SEVERITY_RANK[default] + shift))
    return _BY_RANK[rank]


def derive_likelihood(text: str, index: int) -> Likelihood:
    if (len(text.strip()) // 10 + index) % 2 == 0:
        return Likelihood.HIGH
    return Likelihood.LOW


def _derived_items(group: str, categories: Tuple[str, ...], lists: Dict[str, List[str]]) -> List[EnrichedItem]:
    items: List[EnrichedItem] = []
    for category in categories:
        for index, text in enumerate(lists.get(category) or []):
            default = CATEGORY_DEFAULT_SEVERITY[category]
            items.append(
                EnrichedItem(
                    group=group,
                    category=category,
                    text=text,
                    severity=derive_severity(default, text, index).value,
                    likelihood=derive_likelihood(text, index),
                    detail=CATEGORY_LABELS[category],
                    derived=True,
                )
            )
    return items


def enrich(result: "AnalysisResult", top_n: int = Limits.TOP_CRITICAL_RISKS) -> ClarityReport:
    """Derive display metadata from an analysis result. Pure and deterministic."""
    risks = result.system_risk_scenarios.model_dump(by_alias=True)
    assumptions = result.implicit_assumptions.model_dump(by_alias=True)

    ux_items: List[EnrichedItem] = []
    for index, problem in enumerate(result.predicted_ux_problems):
        normalized = normalize_severity(problem.severity)
        ux_items.append(
            EnrichedItem(
                group=UX_PROBLEMS,
                category=UX_PROBLEMS,
                text=problem.problem,
                severity=normalized.value if normalized else problem.severity,
                likelihood=derive_likelihood(problem.problem, index),
                detail=problem.description,
                derived=False,
            )
        )

    items = (
        _derived_items(RISKS, RISK_CATEGORIES, risks)
        + ux_items
        + _derived_items(ASSUMPTIONS, ASSUMPTION_CATEGORIES, assumptions)
    )

    # sorted() is stable, so equal severities keep category order.
    ranked = sorted(items, key=lambda item: item.severity_rank, reverse=True)
    top_critical = [item for item in items if item.is_risk and item.is_high][: max(int(top_n), 0)]

    total = len(items)
    high = sum(1 for item in items if item.is_high)

    counts = {severity.value: 0 for severity in Severity}
    for item in items:
        normalized = normalize_severity(item.severity)
        if normalized is not None:
            counts[normalized.value] += 1

    return ClarityReport(
        items=items,
        ranked_items=ranked,
        top_critical_risks=top_critical,
        ambiguity_score=ambiguity_score(total, high),
        rework_probability=rework_probability(total, high),
        severity_counts=counts,
    )


def ambiguity_score(total_items: int, high_count: int) -> int:
    """min(100, 5 * total + 10 * high)."""
    return min(Limits.MAX_AMBIGUITY_SCORE, 5 * total_items + 10 * high_count)


def rework_probability(total_items: int, high_count: int) -> int:
    """Percent: min(95, 10 + 3 * total + 15 * high)."""
    return min(Limits.MAX_REWORK_PROBABILITY, 10 + 3 * total_items + 15 * high_count)
