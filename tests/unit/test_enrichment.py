from __future__ import annotations

import pytest

from featureclarity.analyze.schema_contract import AnalysisResult
from featureclarity.artifacts.enrichment import (
    RISKS,
    UX_PROBLEMS,
    ambiguity_score,
    derive_likelihood,
    derive_severity,
    enrich,
    normalize_severity,
    rework_probability,
)
from featureclarity.constants import Likelihood, Severity


def _result(payload: dict) -> AnalysisResult:
    return AnalysisResult.model_validate(payload)


def test_enrichment_is_deterministic(analysis_payload: dict) -> None:
    result = _result(analysis_payload)

    first = enrich(result)
    second = enrich(result)

    assert [(i.text, i.severity, i.likelihood) for i in first.items] == [
        (i.text, i.severity, i.likelihood) for i in second.items
    ]
    assert [i.text for i in first.top_critical_risks] == [i.text for i in second.top_critical_risks]
    assert first.ambiguity_score == second.ambiguity_score
    assert first.rework_probability == second.rework_probability


def test_derive_severity_shifts_from_category_default() -> None:
    # len("abc") == 3: (3 + 0) % 3 - 1 == -1
    assert derive_severity(Severity.HIGH, "abc", 0) == Severity.MEDIUM
    # (3 + 1) % 3 - 1 == 0
    assert derive_severity(Severity.HIGH, "abc", 1) == Severity.HIGH
    # (3 + 2) % 3 - 1 == +1, clamped at High
    assert derive_severity(Severity.HIGH, "abc", 2) == Severity.HIGH
    assert derive_severity(Severity.LOW, "abc", 0) == Severity.LOW
    assert derive_severity(Severity.LOW, "abc", 2) == Severity.MEDIUM


def test_derive_likelihood() -> None:
    assert derive_likelihood("short", 0) == Likelihood.HIGH
    assert derive_likelihood("short", 1) == Likelihood.LOW
    assert derive_likelihood("x" * 10, 0) == Likelihood.LOW


def test_items_follow_category_order(analysis_payload: dict) -> None:
    report = enrich(_result(analysis_payload))

    groups = [item.group for item in report.items]
    assert groups[:3] == [RISKS, RISKS, RISKS]
    assert groups[3:5] == [UX_PROBLEMS, UX_PROBLEMS]
    assert [item.category for item in report.items[:3]] == [
        "failureStates",
        "emptyDataScenarios",
        "concurrencyIssues",
    ]
    assert report.total_items == 8


def test_ranked_items_sort_by_severity_stably(analysis_payload: dict) -> None:
    report = enrich(_result(analysis_payload))

    ranks = [item.severity_rank for item in report.ranked_items]
    assert ranks == sorted(ranks, reverse=True)
    highs = [item.text for item in report.ranked_items if item.is_high]
    assert highs == [item.text for item in report.items if item.is_high]


def test_top_critical_risks_only_include_risks_and_ux_problems(analysis_payload: dict) -> None:
    report = enrich(_result(analysis_payload))

    assert 0 < len(report.top_critical_risks) <= 3
    assert all(item.is_high and item.is_risk for item in report.top_critical_risks)
    assert [item.text for item in report.top_critical_risks] == [
        "Reset email never arrives",
        "Account has no verified email",
        "Two reset links requested back to back",
    ]


def test_ux_problem_keeps_model_severity_and_description(analysis_payload: dict) -> None:
    analysis_payload["predictedUxProblems"][0]["severity"] = "high"
    analysis_payload["predictedUxProblems"][1]["severity"] = "Severe"

    report = enrich(_result(analysis_payload))
    ux = [item for item in report.items if item.group == UX_PROBLEMS]

    assert ux[0].severity == "High"
    assert ux[0].derived is False
    assert ux[0].detail == "Users land on an error page with no way forward."
    assert ux[1].severity == "Severe"
    assert ux[1].is_high is False
    assert ux[1].severity_rank == 1


def test_empty_result_has_floor_scores() -> None:
    report = enrich(
        _result(
            {
                "executiveSummary": "",
                "implicitAssumptions": {},
                "systemRiskScenarios": {},
                "predictedUxProblems": [],
                "nextActions": [],
            }
        )
    )

    assert report.items == []
    assert report.top_critical_risks == []
    assert report.ambiguity_score == 0
    assert report.rework_probability == 10


@pytest.mark.parametrize(
    ("total", "high", "ambiguity", "rework"),
    [(2, 2, 30, 46), (10, 3, 80, 85), (30, 10, 100, 95)],
)
def test_score_formulas(total: int, high: int, ambiguity: int, rework: int) -> None:
    assert ambiguity_score(total, high) == ambiguity
    assert rework_probability(total, high) == rework


def test_normalize_severity() -> None:
    assert normalize_severity(" medium ") == Severity.MEDIUM
    assert normalize_severity("Critical") is None
    assert normalize_severity("") is None


def test_top_critical_falls_through_to_ux_problems(analysis_payload: dict) -> None:
    analysis_payload["systemRiskScenarios"] = {}

    report = enrich(_result(analysis_payload))

    assert [item.text for item in report.top_critical_risks] == ["Expired link dead end"]


def test_severity_counts(analysis_payload: dict) -> None:
    report = enrich(_result(analysis_payload))

    assert report.severity_counts == {"High": 6, "Medium": 0, "Low": 2}
    assert report.high_count == 6
