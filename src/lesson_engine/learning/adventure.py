from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Tuple

from pydantic import Field

from lesson_engine.config.schema import ScoringConfig
from lesson_engine.data_models import (
    AdventureHistoryEntry,
    AdventureNode,
    InteractiveAdventure,
    NodeAnswer,
)
from lesson_engine.data_models.base import FrozenRecord
from lesson_engine.errors import EmptyAdventureError, InvalidStateError, NotStartedError
from lesson_engine.learning.grading import Grader
from lesson_engine.learning.scoring import percentage
from lesson_engine.utils.logging import get_logger

logger = get_logger(__name__)


class AdventureStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class NodeStatus(str, Enum):
    UNANSWERED = "unanswered"
    CORRECT = "correct"
    INCORRECT_RETRY = "incorrect_retry"


class NodeResult(FrozenRecord):
    stage: int
    correct: bool = False
    attempts_used: int = Field(0, ge=0)


class AdventureAttemptState(FrozenRecord):
    """Snapshot of one learner's progress through one adventure."""

    module_id: str
    title: str
    current_stage_index: int = Field(0, ge=0)
    current_node_status: NodeStatus = NodeStatus.UNANSWERED
    per_node_results: List[NodeResult] = Field(default_factory=list)
    completed: bool = False

    def first_try_accuracy(self, total_nodes: int) -> int:
        """Percentage of nodes answered correctly on the first attempt."""
        first_try = sum(
            1 for result in self.per_node_results if result.correct and result.attempts_used == 1
        )
        return percentage(first_try, total_nodes)

    def completion_rate(self, total_nodes: int) -> int:
        """Percentage of nodes eventually answered correctly."""
        return percentage(sum(1 for result in self.per_node_results if result.correct), total_nodes)


class SubmissionResult(FrozenRecord):
    correct: bool
    feedback: str
    stage: int
    attempts_used: int
    completed: bool
    state: AdventureAttemptState
    history_entry: Optional[AdventureHistoryEntry] = None


class AdventureEngine:
    """
    State machine driving a single play-through of an `InteractiveAdventure`.

    The engine moves from not started, through in progress (one node at a
    time), to completed. A correct answer advances to the next node; an
    incorrect one keeps the learner on the same node and counts the attempt.
    Retries are unlimited; capping them is up to the caller.

    Every transition computes a fresh `AdventureAttemptState` and swaps it in
    with a single assignment, and failed calls leave the state untouched. The
    engine is not thread-safe: hosts serving many learners keep one engine
    per (learner, module) and serialise calls against it.

    Examples
    --------
    >>> engine = AdventureEngine()
    >>> engine.start(adventure, module_id="mod-1")  # doctest: +SKIP
    >>> engine.submit_answer(ChoiceAnswer(choice="Paris")).correct  # doctest: +SKIP
    True
    """

    def __init__(
        self,
        grader: Grader | None = None,
        scoring: ScoringConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.grader = grader or Grader()
        self.scoring = scoring or ScoringConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._adventure: InteractiveAdventure | None = None
        self._nodes: Tuple[AdventureNode, ...] = ()
        self._state: AdventureAttemptState | None = None
        self._history: AdventureHistoryEntry | None = None

    @property
    def status(self) -> AdventureStatus:
        if self._state is None:
            return AdventureStatus.NOT_STARTED
        if self._state.completed:
            return AdventureStatus.COMPLETED
        return AdventureStatus.IN_PROGRESS

    @property
    def state(self) -> AdventureAttemptState | None:
        return self._state

    @property
    def adventure(self) -> InteractiveAdventure | None:
        return self._adventure

    @property
    def current_node(self) -> AdventureNode | None:
        if self.status is not AdventureStatus.IN_PROGRESS:
            return None
        return self._nodes[self._state.current_stage_index]

    @property
    def total_nodes(self) -> int:
        return len(self._nodes)

    @property
    def history_entry(self) -> AdventureHistoryEntry | None:
        """Summary produced when the last node is resolved; None until then."""
        return self._history

    def start(self, adventure: InteractiveAdventure, module_id: str) -> AdventureAttemptState:
        if self._state is not None:
            raise InvalidStateError(
                f"Adventure {self._state.module_id!r} is already {self.status.value}."
            )
        if not adventure.nodes:
            raise EmptyAdventureError(f"Adventure {adventure.title!r} has no nodes.")

        nodes = tuple(sorted(adventure.nodes, key=lambda node: node.stage))
        state = AdventureAttemptState(module_id=module_id, title=adventure.title)
        self._adventure, self._nodes, self._state = adventure, nodes, state
        logger.info("adventure_started", module_id=module_id, nodes=len(nodes))
        return state

    def submit_answer(self, answer: NodeAnswer) -> SubmissionResult:
        """Grade `answer` against the active node and advance on success."""
        state = self._state
        if state is None:
            raise NotStartedError("No adventure has been started.")
        if state.completed:
            raise InvalidStateError(f"Adventure {state.module_id!r} is already completed.")

        node = self._nodes[state.current_stage_index]
        grade = self.grader.grade(node.interaction, answer)

        results = list(state.per_node_results)
        attempts = 1
        if results and results[-1].stage == node.stage and not results[-1].correct:
            attempts += results.pop().attempts_used
        results.append(NodeResult(stage=node.stage, correct=grade.correct, attempts_used=attempts))

        if grade.correct:
            next_index = state.current_stage_index + 1
            completed = next_index >= len(self._nodes)
            next_state = AdventureAttemptState(
                module_id=state.module_id,
                title=state.title,
                current_stage_index=next_index,
                current_node_status=NodeStatus.CORRECT if completed else NodeStatus.UNANSWERED,
                per_node_results=results,
                completed=completed,
            )
        else:
            completed = False
            next_state = AdventureAttemptState(
                module_id=state.module_id,
                title=state.title,
                current_stage_index=state.current_stage_index,
                current_node_status=NodeStatus.INCORRECT_RETRY,
                per_node_results=results,
                completed=False,
            )
            logger.debug(
                "adventure_incorrect_answer",
                module_id=state.module_id,
                stage=node.stage,
                attempts_used=attempts,
            )

        history = self._build_history(next_state) if completed else None
        self._state = next_state
        if history is not None:
            self._history = history
            logger.info(
                "adventure_completed",
                module_id=history.module_id,
                score=history.score,
                first_try_accuracy=history.first_try_accuracy,
                completion_rate=history.completion_rate,
            )

        return SubmissionResult(
            correct=grade.correct,
            feedback=grade.feedback,
            stage=node.stage,
            attempts_used=attempts,
            completed=completed,
            state=next_state,
            history_entry=history,
        )

    def _build_history(self, state: AdventureAttemptState) -> AdventureHistoryEntry:
        total = len(self._nodes)
        first_try = state.first_try_accuracy(total)
        completion = state.completion_rate(total)
        metric = self.scoring.primary_metric
        return AdventureHistoryEntry(
            module_id=state.module_id,
            title=state.title,
            completed_at=self._clock().isoformat(),
            score=first_try if metric == "first_try" else completion,
            first_try_accuracy=first_try,
            completion_rate=completion,
            scoring_metric=metric,
        )
