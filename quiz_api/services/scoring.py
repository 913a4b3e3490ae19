"""Quiz scoring."""
from __future__ import annotations

from typing import Mapping, Sequence

from quiz_api.domain import Answer, Question, Score


def percentage_half_up(correct: int, total: int) -> int:
    """Integer percentage, rounding .5 upwards."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def is_correct(question: Question, answer: Answer | None) -> bool:
    """Exact, case-sensitive comparison with the correct answer."""
    if answer is None:
        return False
    return answer.value == question.correct_answer


def score(
    questions: Sequence[Question],
    answers: Mapping[str, Answer],
    pass_threshold: int,
) -> Score:
    """
    Score a set of answers against the questions they belong to.

    Unanswered questions count as incorrect and stay in the denominator.
    Pure: no clock, no store, same inputs give the same Score.
    """
    total = len(questions)
    correct = sum(
        1 for question in questions if is_correct(question, answers.get(question.id))
    )
    percentage = percentage_half_up(correct, total)
    return Score(
        correct=correct,
        total=total,
        percentage=percentage,
        passed=percentage >= pass_threshold,
    )
