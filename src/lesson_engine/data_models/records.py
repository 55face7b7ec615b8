from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field, validator

from .base import FrozenRecord, RecordModel
from .interactions import AdventureInteraction


class AdventureNode(FrozenRecord):
    """One scene of an adventure with exactly one interaction."""

    stage: int = Field(ge=0)
    scene_description: str
    scene_visual_prompt: str = ""
    interaction: AdventureInteraction


class InteractiveAdventure(FrozenRecord):
    """Generated adventure: a title and its nodes in play order."""

    title: str
    nodes: List[AdventureNode] = Field(default_factory=list)

    @validator("nodes")
    def validate_stage_order(cls, value: List[AdventureNode]) -> List[AdventureNode]:
        stages = [node.stage for node in value]
        if any(later <= earlier for earlier, later in zip(stages, stages[1:])):
            raise ValueError("node stages must be strictly increasing")
        return value


class FinalAssessmentQuestion(RecordModel):
    question: str
    answer: str


class AdventureModule(RecordModel):
    """Teacher-authored module metadata an adventure is generated from."""

    id: str
    topic: str
    prompt: str = ""
    source_text: Optional[str] = None
    age_group: str = ""
    stages: int = Field(0, ge=0)
    learning_objectives: List[str] = Field(default_factory=list)
    final_assessment_question: Optional[FinalAssessmentQuestion] = None
    teacher_id: Optional[str] = None
    teacher_name: Optional[str] = None


ScoringMetric = Literal["first_try", "completion"]


class AdventureHistoryEntry(FrozenRecord):
    """Terminal summary written once an adventure is completed."""

    module_id: str
    title: str
    completed_at: str
    score: int = Field(ge=0, le=100)
    first_try_accuracy: int = Field(ge=0, le=100)
    completion_rate: int = Field(ge=0, le=100)
    scoring_metric: ScoringMetric = "first_try"


class QuizQuestion(RecordModel):
    """Multiple-choice question graded by exact option text."""

    id: str
    question: str
    options: List[str]
    correct_answer: str
    topic: str = ""

    @validator("options")
    def validate_options(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("quiz question must include at least one option")
        return value


class Quiz(RecordModel):
    id: str
    title: str
    topic: str = ""
    questions: List[QuizQuestion] = Field(default_factory=list)
    source_text: Optional[str] = None


class QuizAnswerRecord(FrozenRecord):
    question_id: str
    student_answer: str
    is_correct: bool


class StudentQuizAttempt(FrozenRecord):
    id: str
    quiz_id: str
    quiz_title: str
    student_id: str
    timestamp: str
    score: int = Field(ge=0, le=100)
    answers: List[QuizAnswerRecord]


class LessonPlanActivity(RecordModel):
    duration: int = Field(0, ge=0)  # minutes
    activity: str
    description: str = ""
    image_prompt: Optional[str] = None


class LessonAssessment(RecordModel):
    method: str = ""
    description: str = ""


class Differentiation(RecordModel):
    support: str = ""
    challenge: str = ""


class LessonPlan(RecordModel):
    """Generated lesson outline whose activity texts may embed interactive markup."""

    title: str
    topic: str = ""
    learning_objectives: List[str] = Field(default_factory=list)
    key_vocabulary: List[str] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)
    lesson_activities: List[LessonPlanActivity] = Field(default_factory=list)
    assessment: Optional[LessonAssessment] = None
    differentiation: Optional[Differentiation] = None
    source_text: Optional[str] = None
