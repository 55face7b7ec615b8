from __future__ import annotations

import random
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field

from .base import FrozenRecord
from .interactions import (
    AdventureChoice,
    CategorizationInteraction,
    CategorizationItem,
    ChoiceInteraction,
    FillInTheBlankInteraction,
    FindTheMistakeInteraction,
    MatchingInteraction,
    MatchingPair,
    OrderingInteraction,
    shuffled,
)


class TextSegment(FrozenRecord):
    """Plain prose; also the fail-open shape for anything the parser cannot read."""

    type: Literal["text"] = "text"
    id: str
    value: str

    def learner_view(self) -> dict:
        return {"type": self.type, "id": self.id, "value": self.value}


class FillInBlankSegment(FrozenRecord):
    type: Literal["fill_in_blank"] = "fill_in_blank"
    id: str
    before: str
    after: str
    answer: str
    word_bank: Optional[List[str]] = None

    def learner_view(self, rng: Optional[random.Random] = None) -> dict:
        return {
            "type": self.type,
            "id": self.id,
            "before": self.before,
            "after": self.after,
            "wordBank": shuffled(self.word_bank, rng) if self.word_bank else None,
        }

    def to_interaction(self) -> FillInTheBlankInteraction:
        return FillInTheBlankInteraction(
            sentence_with_answer=f"{self.before}{{{self.answer}}}{self.after}",
            word_bank=self.word_bank,
        )


class McqSegment(FrozenRecord):
    """Multiple-choice question; `answer` is the literal text of the correct option."""

    type: Literal["mcq"] = "mcq"
    id: str
    question: str
    options: List[str]
    answer: str

    def learner_view(self) -> dict:
        return {
            "type": self.type,
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
        }

    def to_interaction(self) -> ChoiceInteraction:
        return ChoiceInteraction(
            choices=[
                AdventureChoice(text=option, is_correct=option == self.answer)
                for option in self.options
            ]
        )


class MatchingSegment(FrozenRecord):
    type: Literal["matching"] = "matching"
    id: str
    instruction: str
    pairs: List[MatchingPair]

    def learner_view(self, rng: Optional[random.Random] = None) -> dict:
        return {
            "type": self.type,
            "id": self.id,
            "instruction": self.instruction,
            "terms": [pair.term for pair in self.pairs],
            "definitions": shuffled([pair.definition for pair in self.pairs], rng),
        }

    def to_interaction(self) -> MatchingInteraction:
        return MatchingInteraction(instruction=self.instruction, pairs=self.pairs)


class OrderingSegment(FrozenRecord):
    """Items in source order, which is the correct order; `learner_view` shuffles them."""

    type: Literal["ordering"] = "ordering"
    id: str
    instruction: str
    ordering_items: List[str]
    already_ordered: bool = True

    def learner_view(self, rng: Optional[random.Random] = None) -> dict:
        return {
            "type": self.type,
            "id": self.id,
            "instruction": self.instruction,
            "orderingItems": shuffled(self.ordering_items, rng),
        }

    def to_interaction(self) -> OrderingInteraction:
        return OrderingInteraction(
            instruction=self.instruction, ordering_items=self.ordering_items
        )


class FindTheMistakeSegment(FrozenRecord):
    type: Literal["find_the_mistake"] = "find_the_mistake"
    id: str
    statement: str
    mistake: str
    correction: str

    def learner_view(self) -> dict:
        return {"type": self.type, "id": self.id, "statement": self.statement}

    def to_interaction(self) -> FindTheMistakeInteraction:
        return FindTheMistakeInteraction(
            statement=self.statement, correction=self.correction
        )


class CategorizationSegment(FrozenRecord):
    type: Literal["categorization"] = "categorization"
    id: str
    instruction: str
    categories: List[str]
    categorization_items: List[CategorizationItem]

    def learner_view(self) -> dict:
        return {
            "type": self.type,
            "id": self.id,
            "instruction": self.instruction,
            "categories": list(self.categories),
            "items": [entry.item for entry in self.categorization_items],
        }

    def to_interaction(self) -> CategorizationInteraction:
        return CategorizationInteraction(
            instruction=self.instruction,
            categories=self.categories,
            categorization_items=self.categorization_items,
        )


ParsedContent = Annotated[
    Union[
        TextSegment,
        FillInBlankSegment,
        McqSegment,
        MatchingSegment,
        OrderingSegment,
        FindTheMistakeSegment,
        CategorizationSegment,
    ],
    Field(discriminator="type"),
]

INTERACTIVE_SEGMENT_TYPES = (
    FillInBlankSegment,
    McqSegment,
    MatchingSegment,
    OrderingSegment,
    FindTheMistakeSegment,
    CategorizationSegment,
)
