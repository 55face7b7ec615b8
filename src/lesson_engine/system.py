from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Mapping, Optional

from lesson_engine.config import Settings, load_settings
from lesson_engine.data_models import LessonPlan, ParsedContent, Quiz, StudentQuizAttempt
from lesson_engine.learning import AdventureEngine, Grader, QuizGrader
from lesson_engine.parsing import ContentParser
from lesson_engine.utils.logging import configure_logging

logger = logging.getLogger(__name__)


class LessonSystem:
    """
    Facade wiring the parser, grader, quiz grader and adventure engines from one `Settings`.

    Parameters
    ----------
    settings : Settings
        Parser conventions, grading policy, adventure scoring metric and logging
        options, usually loaded from config/default.yaml via `load_settings()`.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        configure_logging(settings.logging)
        self.parser = ContentParser(settings.parser)
        self.grader = Grader(settings.grading)
        self.quiz_grader = QuizGrader()
        logger.debug("Lesson system ready for %s", settings.project_name)

    @classmethod
    def from_config(cls, config_path: Optional[Path] = None) -> "LessonSystem":
        """Build a system from `config_path`, or from config/default.yaml when it can be found."""
        return cls(load_settings(config_path))

    def parse(self, source_text: str) -> List[ParsedContent]:
        return self.parser.parse(source_text)

    def parse_lesson_plan(self, plan: LessonPlan) -> List[ParsedContent]:
        return self.parser.parse_lesson_plan(plan)

    def new_adventure(self) -> AdventureEngine:
        """Return a fresh engine for one learner's play-through of one module."""
        return AdventureEngine(grader=self.grader, scoring=self.settings.scoring)

    def grade_quiz(
        self, quiz: Quiz, answers: Mapping[str, str], *, student_id: str
    ) -> StudentQuizAttempt:
        return self.quiz_grader.grade(quiz, answers, student_id=student_id)
