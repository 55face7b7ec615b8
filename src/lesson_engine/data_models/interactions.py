from __future__ import annotations

import random
import re
from typing import Annotated, Dict, List, Literal, Optional, Sequence, Union

from pydantic import Field, model_validator, validator

from .base import FrozenRecord

PLACEHOLDER_RE = re.compile(r"\{([^{}]*)\}")


def shuffled(items: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """Copy of `items` in random order, for views that must not leak the stored answer order."""
    return (rng or random).sample(list(items), len(items))

InteractionType = Literal[
    "CHOICE",
    "FILL_IN_THE_BLANK",
    "MATCHING",
    "FIND_THE_MISTAKE",
    "ORDERING",
    "CATEGORIZATION",
]


class AdventureChoice(FrozenRecord):
    """One selectable option of a CHOICE interaction."""

    text: str
    is_correct: bool = False
    feedback: str = ""


class MatchingPair(FrozenRecord):
    term: str
    definition: str


class CategorizationItem(FrozenRecord):
    item: str
    category: str


class ChoiceInteraction(FrozenRecord):
    """Pick one option; each option carries its own feedback."""

    type: Literal["CHOICE"] = "CHOICE"
    choices: List[AdventureChoice]

    @validator("choices")
    def validate_choices(cls, value: List[AdventureChoice]) -> List[AdventureChoice]:
        if not value:
            raise ValueError("CHOICE interaction must include at least one choice")
        if not any(choice.is_correct for choice in value):
            raise ValueError("CHOICE interaction must mark at least one choice as correct")
        return value

    def learner_view(self) -> dict:
        return {"type": self.type, "choices": [choice.text for choice in self.choices]}


class FillInTheBlankInteraction(FrozenRecord):
    """Sentence with a single `{answer}` placeholder and an optional word bank.

    When a word bank is present its first entry is the correct answer, so
    `learner_view` shuffles the bank.
    """

    type: Literal["FILL_IN_THE_BLANK"] = "FILL_IN_THE_BLANK"
    sentence_with_answer: str
    word_bank: Optional[List[str]] = None
    feedback: str = ""

    @validator("sentence_with_answer")
    def validate_placeholder(cls, value: str) -> str:
        placeholders = PLACEHOLDER_RE.findall(value)
        if len(placeholders) != 1:
            raise ValueError("sentenceWithAnswer must contain exactly one {placeholder}")
        if not placeholders[0].strip():
            raise ValueError("sentenceWithAnswer placeholder must not be empty")
        return value

    @validator("word_bank")
    def validate_word_bank(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is not None and not value:
            raise ValueError("wordBank, when given, must not be empty")
        return value

    @property
    def answer(self) -> str:
        return PLACEHOLDER_RE.search(self.sentence_with_answer).group(1)

    @property
    def before(self) -> str:
        return self.sentence_with_answer[: PLACEHOLDER_RE.search(self.sentence_with_answer).start()]

    @property
    def after(self) -> str:
        return self.sentence_with_answer[PLACEHOLDER_RE.search(self.sentence_with_answer).end():]

    def learner_view(self, rng: Optional[random.Random] = None) -> dict:
        return {
            "type": self.type,
            "before": self.before,
            "after": self.after,
            "wordBank": shuffled(self.word_bank, rng) if self.word_bank else None,
        }


class MatchingInteraction(FrozenRecord):
    type: Literal["MATCHING"] = "MATCHING"
    instruction: str = ""
    pairs: List[MatchingPair]
    feedback: str = ""

    @validator("pairs")
    def validate_pairs(cls, value: List[MatchingPair]) -> List[MatchingPair]:
        if not value:
            raise ValueError("MATCHING interaction must include at least one pair")
        terms = [pair.term for pair in value]
        if len(set(terms)) != len(terms):
            raise ValueError("MATCHING terms must be unique")
        return value

    def learner_view(self, rng: Optional[random.Random] = None) -> dict:
        return {
            "type": self.type,
            "instruction": self.instruction,
            "terms": [pair.term for pair in self.pairs],
            "definitions": shuffled([pair.definition for pair in self.pairs], rng),
        }


class FindTheMistakeInteraction(FrozenRecord):
    """Incorrect statement the learner must rewrite as `correction`."""

    type: Literal["FIND_THE_MISTAKE"] = "FIND_THE_MISTAKE"
    statement: str
    correction: str
    feedback: str = ""

    def learner_view(self) -> dict:
        return {"type": self.type, "statement": self.statement}


class OrderingInteraction(FrozenRecord):
    """Items stored in the correct order; `learner_view` shuffles them."""

    type: Literal["ORDERING"] = "ORDERING"
    instruction: str = ""
    ordering_items: List[str]
    feedback: str = ""

    @validator("ordering_items")
    def validate_items(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("ORDERING interaction must include at least one item")
        return value

    def learner_view(self, rng: Optional[random.Random] = None) -> dict:
        return {
            "type": self.type,
            "instruction": self.instruction,
            "orderingItems": shuffled(self.ordering_items, rng),
        }


class CategorizationInteraction(FrozenRecord):
    type: Literal["CATEGORIZATION"] = "CATEGORIZATION"
    instruction: str = ""
    categories: List[str]
    categorization_items: List[CategorizationItem]
    feedback: str = ""

    @model_validator(mode="after")
    def validate_categories(self) -> "CategorizationInteraction":
        if not self.categories:
            raise ValueError("CATEGORIZATION interaction must declare at least one category")
        if not self.categorization_items:
            raise ValueError("CATEGORIZATION interaction must include at least one item")
        items = [entry.item for entry in self.categorization_items]
        if len(set(items)) != len(items):
            raise ValueError("CATEGORIZATION items must be unique")
        known = set(self.categories)
        for entry in self.categorization_items:
            if entry.category not in known:
                raise ValueError(
                    f"Item {entry.item!r} references undefined category {entry.category!r}"
                )
        return self

    def learner_view(self) -> dict:
        return {
            "type": self.type,
            "instruction": self.instruction,
            "categories": list(self.categories),
            "items": [entry.item for entry in self.categorization_items],
        }


AdventureInteraction = Annotated[
    Union[
        ChoiceInteraction,
        FillInTheBlankInteraction,
        MatchingInteraction,
        FindTheMistakeInteraction,
        OrderingInteraction,
        CategorizationInteraction,
    ],
    Field(discriminator="type"),
]


# Learner submissions, one shape per interaction kind.


class ChoiceAnswer(FrozenRecord):
    type: Literal["CHOICE"] = "CHOICE"
    choice: str


class FillInTheBlankAnswer(FrozenRecord):
    type: Literal["FILL_IN_THE_BLANK"] = "FILL_IN_THE_BLANK"
    text: str


class MatchingAnswer(FrozenRecord):
    """Submitted `term -> definition` pairings."""

    type: Literal["MATCHING"] = "MATCHING"
    pairs: Dict[str, str]


class FindTheMistakeAnswer(FrozenRecord):
    type: Literal["FIND_THE_MISTAKE"] = "FIND_THE_MISTAKE"
    correction: str


class OrderingAnswer(FrozenRecord):
    type: Literal["ORDERING"] = "ORDERING"
    items: List[str]


class CategorizationAnswer(FrozenRecord):
    """Submitted `item -> category` assignments."""

    type: Literal["CATEGORIZATION"] = "CATEGORIZATION"
    assignments: Dict[str, str]


NodeAnswer = Annotated[
    Union[
        ChoiceAnswer,
        FillInTheBlankAnswer,
        MatchingAnswer,
        FindTheMistakeAnswer,
        OrderingAnswer,
        CategorizationAnswer,
    ],
    Field(discriminator="type"),
]
