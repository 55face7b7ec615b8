from __future__ import annotations

from typing import Iterable, List

from lesson_engine.data_models import (
    CategorizationSegment,
    FillInBlankSegment,
    FindTheMistakeSegment,
    MatchingSegment,
    McqSegment,
    OrderingSegment,
    ParsedContent,
    Quiz,
    TextSegment,
)


def _block(kind: str, body: List[str]) -> str:
    return "\n".join([f"[{kind}]", *body, f"[/{kind}]"]) + "\n"


def _entries(values: List[str]) -> str:
    """Join list entries with `|`; a lone entry keeps a trailing `|` so commas inside it survive."""
    joined = " | ".join(values)
    return joined + " |" if len(values) == 1 else joined


def segment_to_markup(segment: ParsedContent) -> str:
    """Render one segment in the markup `ContentParser` reads back."""
    if isinstance(segment, TextSegment):
        return segment.value
    if isinstance(segment, FillInBlankSegment):
        lines = [f"{segment.before}{{{segment.answer}}}{segment.after}"]
        if segment.word_bank:
            lines.append("Word bank: " + _entries(segment.word_bank))
        return "\n".join(lines) + "\n"
    if isinstance(segment, McqSegment):
        body = [f"Question: {segment.question}"]
        for idx, option in enumerate(segment.options):
            body.append(f"{chr(65 + idx)}) {option}")
        body.append(f"Answer: {chr(65 + segment.options.index(segment.answer))}")
        return _block("MCQ", body)
    if isinstance(segment, MatchingSegment):
        body = [f"Instruction: {segment.instruction}"]
        body.extend(f"- {pair.term} :: {pair.definition}" for pair in segment.pairs)
        return _block("MATCHING", body)
    if isinstance(segment, OrderingSegment):
        body = [f"Instruction: {segment.instruction}"]
        body.extend(f"{idx}. {item}" for idx, item in enumerate(segment.ordering_items, start=1))
        return _block("ORDERING", body)
    if isinstance(segment, FindTheMistakeSegment):
        body = [f"Statement: {segment.statement}"]
        if segment.mistake:
            body.append(f"Mistake: {segment.mistake}")
        body.append(f"Correction: {segment.correction}")
        return _block("FIND_THE_MISTAKE", body)
    if isinstance(segment, CategorizationSegment):
        body = [
            f"Instruction: {segment.instruction}",
            "Categories: " + _entries(segment.categories),
        ]
        body.extend(
            f"- {entry.item} :: {entry.category}" for entry in segment.categorization_items
        )
        return _block("CATEGORIZATION", body)
    raise TypeError(f"Unsupported segment type: {type(segment).__name__}")


def segments_to_markup(segments: Iterable[ParsedContent]) -> str:
    """Join rendered segments, starting every interactive segment on its own line."""
    output = ""
    for segment in segments:
        rendered = segment_to_markup(segment)
        if not isinstance(segment, TextSegment) and output and not output.endswith("\n"):
            output += "\n"
        output += rendered
    return output


def quiz_to_markup(quiz: Quiz) -> str:
    """Convert a Quiz into lesson markup with one MCQ block per question."""
    title = f"{quiz.title}"
    count = len(quiz.questions)
    title += f" - {count} Question{'s' if count != 1 else ''}"

    parts: List[str] = [f"# {title}\n", "\n"]
    for idx, question in enumerate(quiz.questions):
        parts.append(f"## Question {idx + 1}\n")
        body = [f"Question: {question.question}"]
        for choice_idx, option in enumerate(question.options):
            body.append(f"{chr(65 + choice_idx)}) {option}")
        if question.correct_answer in question.options:
            body.append(f"Answer: {chr(65 + question.options.index(question.correct_answer))}")
        parts.append(_block("MCQ", body))
        parts.append("\n")
    return "".join(parts)
