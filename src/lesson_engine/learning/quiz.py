from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Mapping

from lesson_engine.data_models import Quiz, QuizAnswerRecord, StudentQuizAttempt
from lesson_engine.errors import EmptyQuizError
from lesson_engine.learning.scoring import percentage

logger = logging.getLogger(__name__)


class QuizGrader:
    """Score a learner's multiple-choice submission into an immutable attempt record."""

    def __init__(
        self,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def grade(
        self,
        quiz: Quiz,
        submitted_answers: Mapping[str, str],
        *,
        student_id: str,
    ) -> StudentQuizAttempt:
        """
        Compare each submitted option with the question's `correct_answer`.

        Matching is exact and case-sensitive. Questions without an answer are
        recorded with an empty `student_answer` and count as incorrect.
        Answers keyed by ids that are not in the quiz are ignored.
        """
        if not quiz.questions:
            raise EmptyQuizError(f"Quiz {quiz.id!r} has no questions.")

        known_ids = {question.id for question in quiz.questions}
        unknown = [key for key in submitted_answers if key not in known_ids]
        if unknown:
            logger.debug("Ignoring answers for unknown question ids: %s", unknown)

        records: List[QuizAnswerRecord] = []
        correct = 0
        for question in quiz.questions:
            submitted = submitted_answers.get(question.id) or ""
            is_correct = bool(submitted) and submitted == question.correct_answer
            if is_correct:
                correct += 1
            records.append(
                QuizAnswerRecord(
                    question_id=question.id,
                    student_answer=submitted,
                    is_correct=is_correct,
                )
            )

        attempt = StudentQuizAttempt(
            id=self._id_factory(),
            quiz_id=quiz.id,
            quiz_title=quiz.title,
            student_id=student_id,
            timestamp=self._clock().isoformat(),
            score=percentage(correct, len(quiz.questions)),
            answers=records,
        )
        logger.info(
            "Graded quiz %s for %s: %d/%d (%d%%)",
            quiz.id,
            student_id,
            correct,
            len(quiz.questions),
            attempt.score,
        )
        return attempt
