from __future__ import annotations

from typing import Dict, List, Optional

from lesson_engine.data_models import AdventureHistoryEntry, Quiz, StudentQuizAttempt

_METRIC_LABELS = {
    "first_try": "first-try accuracy",
    "completion": "completion rate",
}


def format_quiz_attempt(attempt: StudentQuizAttempt, quiz: Optional[Quiz] = None) -> str:
    """Summarize a quiz attempt; with the quiz at hand, list the topics to review."""
    correct = sum(1 for answer in attempt.answers if answer.is_correct)
    lines: List[str] = [
        f"Quiz: {attempt.quiz_title}",
        f"Score: {correct}/{len(attempt.answers)} ({attempt.score}%)",
    ]
    for idx, answer in enumerate(attempt.answers, start=1):
        if answer.is_correct:
            status = "correct"
        elif not answer.student_answer:
            status = "unanswered"
        else:
            status = "incorrect"
        lines.append(f"- Q{idx}: {status}")

    if quiz is not None:
        questions: Dict[str, str] = {
            question.id: question.topic or question.question[:50] for question in quiz.questions
        }
        focus = [
            questions[answer.question_id]
            for answer in attempt.answers
            if not answer.is_correct and answer.question_id in questions
        ]
        if focus:
            lines.append("Focus areas: " + "; ".join(dict.fromkeys(focus)))
    return "\n".join(lines)


def format_adventure_result(entry: AdventureHistoryEntry) -> str:
    """Summarize a completed adventure with both scoring metrics."""
    label = _METRIC_LABELS.get(entry.scoring_metric, entry.scoring_metric)
    return "\n".join(
        [
            f"Adventure: {entry.title}",
            f"Score: {entry.score}% ({label})",
            f"First-try accuracy: {entry.first_try_accuracy}%",
            f"Completion rate: {entry.completion_rate}%",
            f"Completed at: {entry.completed_at}",
        ]
    )
