from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from lesson_engine.config.schema import GradingConfig
from lesson_engine.data_models import (
    AdventureInteraction,
    CategorizationAnswer,
    CategorizationInteraction,
    ChoiceAnswer,
    ChoiceInteraction,
    FillInTheBlankAnswer,
    FillInTheBlankInteraction,
    FindTheMistakeAnswer,
    FindTheMistakeInteraction,
    MatchingAnswer,
    MatchingInteraction,
    NodeAnswer,
    OrderingAnswer,
    OrderingInteraction,
    ParsedContent,
)
from lesson_engine.data_models.content import INTERACTIVE_SEGMENT_TYPES
from lesson_engine.errors import TypeMismatchError


@dataclass(frozen=True)
class GradeResult:
    correct: bool
    feedback: str = ""


def normalize(text: str) -> str:
    """Trim and case-fold free text for lenient comparison."""
    return text.strip().casefold()


class Grader:
    """
    Pure correctness checks for every interaction kind.

    `grade` never mutates its inputs and has no hidden state beyond the
    comparison policy, so the same interaction/answer pair always grades the
    same way.
    """

    def __init__(self, config: GradingConfig | None = None):
        self.config = config or GradingConfig()
        self._graders: Dict[str, Callable[[AdventureInteraction, NodeAnswer], GradeResult]] = {
            "CHOICE": self._grade_choice,
            "FILL_IN_THE_BLANK": self._grade_fill_in_the_blank,
            "MATCHING": self._grade_matching,
            "FIND_THE_MISTAKE": self._grade_find_the_mistake,
            "ORDERING": self._grade_ordering,
            "CATEGORIZATION": self._grade_categorization,
        }

    @property
    def supported_types(self) -> frozenset:
        return frozenset(self._graders)

    def grade(self, interaction: AdventureInteraction, answer: NodeAnswer) -> GradeResult:
        """Grade `answer` against `interaction`, rejecting answers of the wrong kind."""
        answer_type = getattr(answer, "type", None)
        if answer_type != interaction.type:
            raise TypeMismatchError(interaction.type, answer_type or type(answer).__name__)
        return self._graders[interaction.type](interaction, answer)

    def grade_segment(self, segment: ParsedContent, answer: NodeAnswer) -> GradeResult:
        """Grade an answer to an interactive segment produced by the content parser."""
        if not isinstance(segment, INTERACTIVE_SEGMENT_TYPES):
            raise TypeMismatchError("interactive segment", segment.type)
        return self.grade(segment.to_interaction(), answer)

    def _compare(self, submitted: str, expected: str, case_sensitive: bool) -> bool:
        if case_sensitive:
            return submitted == expected
        return normalize(submitted) == normalize(expected)

    def _grade_choice(self, interaction: ChoiceInteraction, answer: ChoiceAnswer) -> GradeResult:
        submitted = answer.choice.strip()
        for choice in interaction.choices:
            if choice.text.strip() == submitted:
                return GradeResult(correct=choice.is_correct, feedback=choice.feedback)
        return GradeResult(correct=False)

    def _grade_fill_in_the_blank(
        self, interaction: FillInTheBlankInteraction, answer: FillInTheBlankAnswer
    ) -> GradeResult:
        accepted = [interaction.answer]
        if interaction.word_bank:
            accepted.append(interaction.word_bank[0])
        submitted = normalize(answer.text)
        correct = any(submitted == normalize(candidate) for candidate in accepted)
        return GradeResult(correct=correct, feedback=interaction.feedback)

    def _grade_matching(self, interaction: MatchingInteraction, answer: MatchingAnswer) -> GradeResult:
        case_sensitive = self.config.case_sensitive_matching
        if len(answer.pairs) != len(interaction.pairs):
            return GradeResult(correct=False, feedback=interaction.feedback)

        # Normalized lookup only for keys that stay unique after folding; terms
        # such as "CO" and "Co" must be matched by their exact spelling.
        folded: Dict[str, List[str]] = {}
        for term in answer.pairs:
            folded.setdefault(normalize(term), []).append(term)

        def submitted_key(term: str) -> Optional[str]:
            if term in answer.pairs:
                return term
            if case_sensitive:
                return None
            candidates = folded.get(normalize(term), [])
            return candidates[0] if len(candidates) == 1 else None

        used = set()
        correct = True
        for pair in interaction.pairs:
            key = submitted_key(pair.term)
            if (
                key is None
                or key in used
                or not self._compare(answer.pairs[key], pair.definition, case_sensitive)
            ):
                correct = False
                break
            used.add(key)
        return GradeResult(correct=correct, feedback=interaction.feedback)

    def _grade_find_the_mistake(
        self, interaction: FindTheMistakeInteraction, answer: FindTheMistakeAnswer
    ) -> GradeResult:
        correct = self._compare(
            answer.correction, interaction.correction, self.config.case_sensitive_mistake
        )
        return GradeResult(correct=correct, feedback=interaction.feedback)

    def _grade_ordering(self, interaction: OrderingInteraction, answer: OrderingAnswer) -> GradeResult:
        return GradeResult(
            correct=list(answer.items) == list(interaction.ordering_items),
            feedback=interaction.feedback,
        )

    def _grade_categorization(
        self, interaction: CategorizationInteraction, answer: CategorizationAnswer
    ) -> GradeResult:
        correct = all(
            answer.assignments.get(entry.item) == entry.category
            for entry in interaction.categorization_items
        )
        return GradeResult(correct=correct, feedback=interaction.feedback)
