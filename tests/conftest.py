"""Shared fixtures for lesson engine tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from lesson_engine.data_models import (
    AdventureChoice,
    AdventureNode,
    ChoiceInteraction,
    FillInTheBlankInteraction,
    InteractiveAdventure,
    OrderingInteraction,
    Quiz,
    QuizQuestion,
)


@pytest.fixture
def fixed_clock():
    """Clock returning a constant timestamp."""
    moment = datetime(2024, 9, 23, 10, 30, tzinfo=timezone.utc)
    return lambda: moment


@pytest.fixture
def capital_choice():
    """CHOICE interaction with one correct and one incorrect option."""
    return ChoiceInteraction(
        choices=[
            AdventureChoice(text="Paris", is_correct=True, feedback="Yes, Paris is the capital."),
            AdventureChoice(
                text="London", is_correct=False, feedback="London is the capital of the UK."
            ),
        ]
    )


@pytest.fixture
def sample_adventure(capital_choice):
    """Three-node adventure mixing CHOICE, FILL_IN_THE_BLANK and ORDERING."""
    return InteractiveAdventure(
        title="Journey Through Nature",
        nodes=[
            AdventureNode(
                stage=1,
                scene_description="A signpost asks for the capital of France.",
                scene_visual_prompt="A wooden signpost in a forest",
                interaction=capital_choice,
            ),
            AdventureNode(
                stage=2,
                scene_description="A talking plant explains how it eats.",
                scene_visual_prompt="A smiling sunflower",
                interaction=FillInTheBlankInteraction(
                    sentence_with_answer="Plants use {photosynthesis} to make food.",
                    feedback="Photosynthesis turns light into food.",
                ),
            ),
            AdventureNode(
                stage=3,
                scene_description="Arrange the life cycle to open the gate.",
                scene_visual_prompt="A stone gate with carvings",
                interaction=OrderingInteraction(
                    instruction="Put the stages in order.",
                    ordering_items=["Seed", "Sprout", "Flower"],
                    feedback="Seeds sprout before they flower.",
                ),
            ),
        ],
    )


@pytest.fixture
def sample_quiz():
    """Four-question geography quiz."""
    return Quiz(
        id="quiz-geo-1",
        title="European Capitals",
        topic="Geography",
        questions=[
            QuizQuestion(
                id="q1",
                question="What is the capital of France?",
                options=["Paris", "Lyon", "Nice", "Lille"],
                correct_answer="Paris",
                topic="France",
            ),
            QuizQuestion(
                id="q2",
                question="What is the capital of Italy?",
                options=["Milan", "Rome", "Turin", "Naples"],
                correct_answer="Rome",
                topic="Italy",
            ),
            QuizQuestion(
                id="q3",
                question="What is the capital of Spain?",
                options=["Madrid", "Seville", "Valencia", "Bilbao"],
                correct_answer="Madrid",
                topic="Spain",
            ),
            QuizQuestion(
                id="q4",
                question="What is the capital of Germany?",
                options=["Munich", "Hamburg", "Berlin", "Cologne"],
                correct_answer="Berlin",
                topic="Germany",
            ),
        ],
    )
