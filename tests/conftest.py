from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest


@pytest.fixture(params=["asyncio"])
def anyio_backend(request):
    """Restrict anyio tests to asyncio only (trio is not installed)."""
    return request.param


@pytest.fixture
def analysis_payload() -> dict:
    """A well-formed analysis result in wire (camelCase) form."""
    return {
        "executiveSummary": "Password reset is underspecified around token expiry.",
        "implicitAssumptions": {
            "behavioral": ["Users check their email promptly"],
            "technical": ["Email delivery is reliable"],
            "business": [],
            "ux": ["Users understand the reset link is single-use"],
        },
        "systemRiskScenarios": {
            "failureStates": ["Reset email never arrives"],
            "permissionConflicts": [],
            "emptyDataScenarios": ["Account has no verified email"],
            "concurrencyIssues": ["Two reset links requested back to back"],
            "userMisusePatterns": [],
        },
        "predictedUxProblems": [
            {
                "problem": "Expired link dead end",
                "severity": "High",
                "description": "Users land on an error page with no way forward.",
            },
            {
                "problem": "Unclear confirmation",
                "severity": "Low",
                "description": "No message confirms the email was sent.",
            },
        ],
        "nextActions": ["Define token expiry", "Design the expired-link state"],
    }
