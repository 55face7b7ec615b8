"""Tests for quiz grading and attempt summaries."""

from __future__ import annotations

import pytest

from lesson_engine.data_models import Quiz
from lesson_engine.errors import EmptyQuizError
from lesson_engine.learning.quiz import QuizGrader
from lesson_engine.learning.reporting import format_quiz_attempt


@pytest.fixture
def quiz_grader(fixed_clock):
    return QuizGrader(id_factory=lambda: "attempt-1", clock=fixed_clock)


def test_three_correct_and_one_blank_scores_75(quiz_grader, sample_quiz):
    attempt = quiz_grader.grade(
        sample_quiz,
        {"q1": "Paris", "q2": "Rome", "q3": "Madrid"},
        student_id="s1",
    )

    assert attempt.score == 75
    assert attempt.id == "attempt-1"
    assert attempt.quiz_id == "quiz-geo-1"
    assert attempt.quiz_title == "European Capitals"
    assert attempt.student_id == "s1"
    assert attempt.timestamp == "2024-09-23T10:30:00+00:00"
    assert [answer.is_correct for answer in attempt.answers] == [True, True, True, False]
    assert attempt.answers[3].question_id == "q4"
    assert attempt.answers[3].student_answer == ""


def test_comparison_is_exact_and_case_sensitive(quiz_grader, sample_quiz):
    attempt = quiz_grader.grade(
        sample_quiz,
        {"q1": "paris", "q2": "Rome ", "q3": "Madrid", "q4": "Berlin"},
        student_id="s1",
    )

    assert [answer.is_correct for answer in attempt.answers] == [False, False, True, True]
    assert attempt.score == 50


def test_unknown_question_ids_are_ignored(quiz_grader, sample_quiz):
    attempt = quiz_grader.grade(
        sample_quiz,
        {"q1": "Paris", "q99": "Atlantis"},
        student_id="s1",
    )

    assert len(attempt.answers) == 4
    assert attempt.score == 25


def test_grading_does_not_mutate_the_quiz(quiz_grader, sample_quiz):
    before = sample_quiz.model_dump()

    quiz_grader.grade(sample_quiz, {"q1": "Paris"}, student_id="s1")

    assert sample_quiz.model_dump() == before


def test_empty_quiz_is_rejected(quiz_grader):
    with pytest.raises(EmptyQuizError):
        quiz_grader.grade(Quiz(id="empty", title="Nothing"), {}, student_id="s1")


def test_default_attempt_ids_are_unique(sample_quiz):
    grader = QuizGrader()

    first = grader.grade(sample_quiz, {}, student_id="s1")
    second = grader.grade(sample_quiz, {}, student_id="s1")

    assert first.id != second.id
    assert first.score == 0


def test_attempt_payload_matches_storage_shape(quiz_grader, sample_quiz):
    attempt = quiz_grader.grade(sample_quiz, {"q1": "Paris"}, student_id="s1")

    payload = attempt.to_payload()

    assert set(payload) == {
        "id",
        "quizId",
        "quizTitle",
        "studentId",
        "timestamp",
        "score",
        "answers",
    }
    assert payload["answers"][0] == {
        "questionId": "q1",
        "studentAnswer": "Paris",
        "isCorrect": True,
    }


def test_format_quiz_attempt_lists_focus_areas(quiz_grader, sample_quiz):
    attempt = quiz_grader.grade(
        sample_quiz,
        {"q1": "Paris", "q2": "Milan", "q3": "Madrid"},
        student_id="s1",
    )

    summary = format_quiz_attempt(attempt, sample_quiz)

    assert "Score: 2/4 (50%)" in summary
    assert "- Q2: incorrect" in summary
    assert "- Q4: unanswered" in summary
    assert "Focus areas: Italy; Germany" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
