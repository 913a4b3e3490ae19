from datetime import datetime, timezone

from quiz_api.domain import Answer, Question
from quiz_api.services.scoring import percentage_half_up, score

ANSWERED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _answers(**values: str) -> dict[str, Answer]:
    return {
        qid: Answer(question_id=qid, value=value, answered_at=ANSWERED_AT)
        for qid, value in values.items()
    }


def _by_id(**values: str) -> dict[str, Answer]:
    # question ids are "1", "2", "3"; keyword names are q1, q2, q3
    return _answers(**{k.lstrip("q"): v for k, v in values.items()})


def test_all_correct_passes(questions: list[Question]) -> None:
    answers = _by_id(
        q1="A JavaScript function that returns JSX", q2="True", q3="useState"
    )
    result = score(questions, answers, 70)
    assert (result.correct, result.total, result.percentage, result.passed) == (3, 3, 100, True)


def test_one_of_three_fails(questions: list[Question]) -> None:
    answers = _by_id(q1="A CSS class", q2="True", q3="useEffect")
    result = score(questions, answers, 70)
    assert (result.correct, result.total, result.percentage, result.passed) == (1, 3, 33, False)


def test_unanswered_questions_count_against_total(questions: list[Question]) -> None:
    result = score(questions, _by_id(q2="True"), 70)
    assert result.correct == 1
    assert result.total == 3
    assert result.percentage == 33

    empty = score(questions, {}, 0)
    assert empty.correct == 0
    assert empty.percentage == 0
    assert empty.passed is True


def test_comparison_is_case_sensitive(questions: list[Question]) -> None:
    result = score(questions, _by_id(q2="true", q3="usestate"), 70)
    assert result.correct == 0


def test_answers_outside_question_set_are_ignored(questions: list[Question]) -> None:
    result = score(questions, _answers(**{"99": "True", "2": "True"}), 70)
    assert result.correct == 1
    assert result.total == 3


def test_percentage_rounds_half_up() -> None:
    assert percentage_half_up(1, 8) == 13  # 12.5
    assert percentage_half_up(5, 8) == 63  # 62.5
    assert percentage_half_up(2, 3) == 67
    assert percentage_half_up(1, 3) == 33
    assert percentage_half_up(0, 0) == 0


def test_threshold_is_inclusive() -> None:
    questions = [
        Question(id=str(i), text=f"Q{i}", kind="true_false", correct_answer="True")
        for i in range(10)
    ]
    answers = _answers(**{str(i): "True" for i in range(7)})
    assert score(questions, answers, 70).passed is True
    assert score(questions, answers, 71).passed is False


def test_score_is_deterministic_and_pure(questions: list[Question]) -> None:
    answers = _by_id(q1="A CSS class", q3="useState")
    before = dict(answers)
    assert score(questions, answers, 70) == score(questions, answers, 70)
    assert answers == before
