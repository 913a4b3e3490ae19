"""Cross-module progress summaries for the employee dashboard."""
from __future__ import annotations

from typing import Any

from quiz_api.services.session_store import SessionStore


def build_progress(store: SessionStore, employee_id: str) -> dict[str, Any]:
    """
    Summarize an employee's quiz results.
    Only the latest finished attempt of each module counts towards the
    averages; ``totalAttempts`` counts every attempt, running ones included.
    """
    completions = store.list_completions(employee_id)
    percentages = [s.score.percentage for s in completions if s.score is not None]
    passed = sum(1 for s in completions if s.score is not None and s.score.passed)

    average = 0
    if percentages:
        # half-up, like the per-attempt percentage
        average = (2 * sum(percentages) + len(percentages)) // (2 * len(percentages))

    return {
        "employeeId": employee_id,
        "completedModules": len(completions),
        "passedModules": passed,
        "averagePercentage": average,
        "totalAttempts": store.count_attempts(employee_id),
    }
