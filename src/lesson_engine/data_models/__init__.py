from .content import (
    CategorizationSegment,
    FillInBlankSegment,
    FindTheMistakeSegment,
    MatchingSegment,
    McqSegment,
    OrderingSegment,
    ParsedContent,
    TextSegment,
)
from .interactions import (
    AdventureChoice,
    AdventureInteraction,
    CategorizationAnswer,
    CategorizationInteraction,
    CategorizationItem,
    ChoiceAnswer,
    ChoiceInteraction,
    FillInTheBlankAnswer,
    FillInTheBlankInteraction,
    FindTheMistakeAnswer,
    FindTheMistakeInteraction,
    MatchingAnswer,
    MatchingInteraction,
    MatchingPair,
    NodeAnswer,
    OrderingAnswer,
    OrderingInteraction,
)
from .records import (
    AdventureHistoryEntry,
    AdventureModule,
    AdventureNode,
    InteractiveAdventure,
    LessonPlan,
    LessonPlanActivity,
    Quiz,
    QuizAnswerRecord,
    QuizQuestion,
    StudentQuizAttempt,
)

__all__ = [
    "AdventureChoice",
    "AdventureHistoryEntry",
    "AdventureInteraction",
    "AdventureModule",
    "AdventureNode",
    "CategorizationAnswer",
    "CategorizationInteraction",
    "CategorizationItem",
    "CategorizationSegment",
    "ChoiceAnswer",
    "ChoiceInteraction",
    "FillInBlankSegment",
    "FillInTheBlankAnswer",
    "FillInTheBlankInteraction",
    "FindTheMistakeAnswer",
    "FindTheMistakeInteraction",
    "FindTheMistakeSegment",
    "InteractiveAdventure",
    "LessonPlan",
    "LessonPlanActivity",
    "MatchingAnswer",
    "MatchingInteraction",
    "MatchingPair",
    "MatchingSegment",
    "McqSegment",
    "NodeAnswer",
    "OrderingAnswer",
    "OrderingInteraction",
    "OrderingSegment",
    "ParsedContent",
    "Quiz",
    "QuizAnswerRecord",
    "QuizQuestion",
    "StudentQuizAttempt",
    "TextSegment",
]
