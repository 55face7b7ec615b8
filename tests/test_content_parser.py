"""Tests for turning generated lesson markup into typed segments."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from lesson_engine.config.schema import ParserConfig
from lesson_engine.data_models import (
    CategorizationSegment,
    FillInBlankSegment,
    FindTheMistakeSegment,
    LessonPlan,
    MatchingSegment,
    McqSegment,
    OrderingSegment,
    TextSegment,
)
from lesson_engine.data_models.records import LessonAssessment, LessonPlanActivity
from lesson_engine.parsing import ContentParser, parse


@pytest.fixture
def parser():
    return ContentParser()


def test_fill_in_blank_sentence(parser):
    """A braced placeholder splits the sentence into before/answer/after."""
    segments = parser.parse("Plants use {photosynthesis} to make food.")

    assert segments == [
        FillInBlankSegment(
            id="fill_in_blank-1",
            before="Plants use ",
            after=" to make food.",
            answer="photosynthesis",
        )
    ]
    assert segments[0].word_bank is None


def test_fill_in_blank_with_word_bank_keeps_source_order(parser):
    """The word bank line is attached in source order and consumed."""
    source = "The {sun} is a star.\nWord bank: sun, moon, comet\nNext line."

    segments = parser.parse(source)

    assert [segment.type for segment in segments] == ["fill_in_blank", "text"]
    assert segments[0].word_bank == ["sun", "moon", "comet"]
    assert segments[1] == TextSegment(id="text-3", value="Next line.")


def test_custom_word_bank_label():
    """Word bank labels come from the parser configuration."""
    parser = ContentParser(ParserConfig(word_bank_labels=["Choices"]))

    segments = parser.parse("The {sun} rises.\nchoices: sun | moon")

    assert len(segments) == 1
    assert segments[0].word_bank == ["sun", "moon"]


def test_inline_mcq_with_answer_letter(parser):
    """A question, lettered options and an Answer line become an mcq segment."""
    source = (
        "Question: What is the capital of France?\n"
        "A) Paris\n"
        "B) London\n"
        "Answer: A\n"
    )

    segments = parser.parse(source)

    assert segments == [
        McqSegment(
            id="mcq-1",
            question="What is the capital of France?",
            options=["Paris", "London"],
            answer="Paris",
        )
    ]


def test_inline_mcq_with_checkbox_marks(parser):
    """A checked option is the answer; the answer is the option text, not its index."""
    source = "Q1: Which planet is largest?\n- [ ] Mars\n- [x] Jupiter\n- [ ] Venus\n"

    (segment,) = parser.parse(source)

    assert isinstance(segment, McqSegment)
    assert segment.options == ["Mars", "Jupiter", "Venus"]
    assert segment.answer == "Jupiter"


def test_inline_mcq_with_star_marker(parser):
    segments = parser.parse("Question: 2 + 2?\nA) 3\nB) 4 *\nC) 5")

    assert segments[0].answer == "4"


def test_bold_options_keep_their_full_text(parser):
    """Markdown bold around an option is unwrapped, not read as a correct-answer star."""
    source = "Question: Capital of France?\n- **Paris**\n- London\nAnswer: A"

    (segment,) = parser.parse(source)

    assert segment.options == ["Paris", "London"]
    assert segment.answer == "Paris"


def test_star_marker_needs_a_space_before_it(parser):
    (segment,) = parser.parse("Question: Which is a wildcard?\nA) glob*\nB) regex *\nC) literal")

    assert segment.options == ["glob*", "regex", "literal"]
    assert segment.answer == "regex"


def test_mcq_with_two_marked_options_degrades_to_text(parser):
    """Ambiguous answers fail open to text instead of raising."""
    source = "Question: Pick one\n- [x] Red\n- [x] Blue\n"

    segments = parser.parse(source)

    assert segments == [TextSegment(id="text-1", value=source)]


def test_matching_block(parser):
    source = (
        "[MATCHING]\n"
        "Instruction: Match each term to its definition.\n"
        "- Photosynthesis :: Making food from light\n"
        "- Respiration :: Releasing energy from food\n"
        "[/MATCHING]\n"
    )

    (segment,) = parser.parse(source)

    assert isinstance(segment, MatchingSegment)
    assert segment.id == "matching-1"
    assert segment.instruction == "Match each term to its definition."
    assert [(pair.term, pair.definition) for pair in segment.pairs] == [
        ("Photosynthesis", "Making food from light"),
        ("Respiration", "Releasing energy from food"),
    ]


def test_ordering_block_is_tagged_as_already_ordered(parser):
    source = (
        "[ORDERING]\n"
        "Instruction: Put the life cycle in order.\n"
        "1. Seed\n"
        "2. Sprout\n"
        "3. Flower\n"
        "[/ORDERING]"
    )

    (segment,) = parser.parse(source)

    assert isinstance(segment, OrderingSegment)
    assert segment.ordering_items == ["Seed", "Sprout", "Flower"]
    assert segment.already_ordered is True


def test_categorization_block(parser):
    source = (
        "[CATEGORIZATION]\n"
        "Instruction: Sort the animals.\n"
        "Categories: Mammal | Bird\n"
        "- Dog :: Mammal\n"
        "- Eagle :: Bird\n"
        "[/CATEGORIZATION]\n"
    )

    (segment,) = parser.parse(source)

    assert isinstance(segment, CategorizationSegment)
    assert segment.categories == ["Mammal", "Bird"]
    assert [(entry.item, entry.category) for entry in segment.categorization_items] == [
        ("Dog", "Mammal"),
        ("Eagle", "Bird"),
    ]


def test_categorization_without_declared_categories_derives_them(parser):
    source = "[CATEGORIZATION]\n- Oak :: Tree\n- Rose :: Flower\n- Pine :: Tree\n[/CATEGORIZATION]\n"

    (segment,) = parser.parse(source)

    assert segment.categories == ["Tree", "Flower"]


def test_categorization_with_undefined_category_degrades_to_text(parser):
    source = "[CATEGORIZATION]\nCategories: Mammal\n- Eagle :: Bird\n[/CATEGORIZATION]\n"

    assert parser.parse(source) == [TextSegment(id="text-1", value=source)]


def test_categorization_with_duplicate_item_degrades_to_text(parser, caplog):
    source = (
        "[CATEGORIZATION]\n"
        "Categories: Fruit | Vegetable\n"
        "- Tomato :: Fruit\n"
        "- Tomato :: Vegetable\n"
        "[/CATEGORIZATION]\n"
    )

    with caplog.at_level("WARNING"):
        segments = parser.parse(source)

    assert segments == [TextSegment(id="text-1", value=source)]
    assert "duplicate item 'Tomato'" in caplog.text


def test_find_the_mistake_block_with_spaced_marker(parser):
    source = (
        "[Find the Mistake]\n"
        "Statement: The sun revolves around the Earth.\n"
        "Mistake: sun revolves around the Earth\n"
        "Correction: The Earth revolves around the Sun.\n"
        "[/FIND_THE_MISTAKE]\n"
    )

    (segment,) = parser.parse(source)

    assert segment == FindTheMistakeSegment(
        id="find_the_mistake-1",
        statement="The sun revolves around the Earth.",
        mistake="sun revolves around the Earth",
        correction="The Earth revolves around the Sun.",
    )


def test_mcq_block(parser):
    source = "[MCQ]\nQuestion: Largest ocean?\nA) Atlantic\nB) Pacific\nAnswer: Pacific\n[/MCQ]\n"

    (segment,) = parser.parse(source)

    assert isinstance(segment, McqSegment)
    assert segment.answer == "Pacific"


def test_segments_interleave_with_text_and_keep_line_based_ids(parser):
    source = (
        "Intro paragraph.\n"
        "\n"
        "[ORDERING]\n"
        "1. A\n"
        "2. B\n"
        "[/ORDERING]\n"
        "Outro {blank} here.\n"
        "The end."
    )

    segments = parser.parse(source)

    assert [(segment.type, segment.id) for segment in segments] == [
        ("text", "text-1"),
        ("ordering", "ordering-3"),
        ("fill_in_blank", "fill_in_blank-7"),
        ("text", "text-8"),
    ]
    assert segments[0].value == "Intro paragraph.\n\n"
    assert segments[-1].value == "The end."


def test_ids_are_stable_across_reparses(parser):
    source = "Plants use {photosynthesis}.\n[ORDERING]\n1. A\n[/ORDERING]\n"

    assert parser.parse(source) == parser.parse(source)


def test_id_prefix_is_applied():
    segments = parse("Plants use {photosynthesis}.", id_prefix="lesson-4")

    assert segments[0].id == "lesson-4-fill_in_blank-1"


def test_empty_input_yields_single_empty_text_segment(parser):
    assert parser.parse("") == [TextSegment(id="text-1", value="")]


@pytest.mark.parametrize(
    "source",
    [
        "Just a sentence.",
        "Line one\nLine two\n\nLine four\n",
        "   \n\t\n",
        "[note] This is a remark, not a block.",
        "Question: what happens next?\nNobody knows.",
        "Two blanks {here} and {there}.",
        "Unbalanced { brace",
        "Nested {{braces}} stay text",
        "- a bullet\n- another bullet\n",
        "Answer: 42\nWord bank: a, b",
        "Ünïcödé text with émojis 🌱",
    ],
)
def test_unmarked_input_fails_open_to_single_text_segment(parser, source):
    """Without recognised markers the whole input comes back as one text segment."""
    segments = parser.parse(source)

    assert segments == [TextSegment(id="text-1", value=source)]


def test_unclosed_block_keeps_opener_as_text(parser, caplog):
    source = "[MATCHING]\n- a :: b\n"

    with caplog.at_level("WARNING"):
        segments = parser.parse(source)

    assert segments == [TextSegment(id="text-1", value=source)]
    assert "never closed" in caplog.text


def test_nested_block_recovers_inner_block(parser):
    """A nested opener invalidates the outer block but parsing continues."""
    source = "[MATCHING]\n[ORDERING]\n1. A\n[/ORDERING]\n[/MATCHING]\n"

    segments = parser.parse(source)

    assert [segment.type for segment in segments] == ["text", "ordering", "text"]
    assert segments[0].value == "[MATCHING]\n"
    assert segments[1].id == "ordering-2"
    assert segments[2].value == "[/MATCHING]\n"


def test_malformed_block_body_is_kept_verbatim_and_parsing_continues(parser):
    source = (
        "[MATCHING]\n"
        "Instruction: Match.\n"
        "- no separator here\n"
        "[/MATCHING]\n"
        "Plants use {photosynthesis}.\n"
    )

    segments = parser.parse(source)

    assert segments[0] == TextSegment(
        id="text-1",
        value="[MATCHING]\nInstruction: Match.\n- no separator here\n[/MATCHING]\n",
    )
    assert segments[1].type == "fill_in_blank"


def test_learner_view_hides_answers(parser):
    source = (
        "Plants use {photosynthesis}.\n"
        "Question: Capital of France?\nA) Paris\nB) Rome\nAnswer: A\n"
        "[FIND_THE_MISTAKE]\nStatement: Fish fly.\nMistake: fly\nCorrection: Fish swim.\n[/FIND_THE_MISTAKE]\n"
    )

    views = [segment.learner_view() for segment in parser.parse(source)]

    assert all("answer" not in view for view in views)
    assert "correction" not in views[2] and "mistake" not in views[2]
    assert views[1]["options"] == ["Paris", "Rome"]


def test_segments_are_immutable(parser):
    (segment,) = parser.parse("Plants use {photosynthesis}.")

    with pytest.raises(ValidationError):
        segment.answer = "something else"


def test_parse_lesson_plan_prefixes_ids_per_activity(parser):
    plan = LessonPlan(
        title="Plants",
        lesson_activities=[
            LessonPlanActivity(duration=5, activity="Warm-up", description="Read the passage."),
            LessonPlanActivity(
                duration=10,
                activity="Practice",
                description="Plants use {photosynthesis} to make food.",
            ),
            LessonPlanActivity(duration=5, activity="Break", description="   "),
        ],
        assessment=LessonAssessment(
            method="Exit ticket", description="Question: 2 + 2?\nA) 3\nB) 4 *"
        ),
    )

    segments = parser.parse_lesson_plan(plan)

    assert [segment.id for segment in segments] == [
        "activity-1-text-1",
        "activity-2-fill_in_blank-1",
        "assessment-mcq-1",
    ]
    assert segments[2].answer == "4"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
