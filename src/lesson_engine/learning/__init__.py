from .adventure import (
    AdventureAttemptState,
    AdventureEngine,
    AdventureStatus,
    NodeResult,
    NodeStatus,
    SubmissionResult,
)
from .grading import GradeResult, Grader
from .quiz import QuizGrader
from .reporting import format_adventure_result, format_quiz_attempt

__all__ = [
    "AdventureAttemptState",
    "AdventureEngine",
    "AdventureStatus",
    "GradeResult",
    "Grader",
    "NodeResult",
    "NodeStatus",
    "QuizGrader",
    "SubmissionResult",
    "format_adventure_result",
    "format_quiz_attempt",
]
