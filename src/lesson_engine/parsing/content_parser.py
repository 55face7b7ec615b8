from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from lesson_engine.config.schema import ParserConfig
from lesson_engine.data_models import (
    CategorizationItem,
    CategorizationSegment,
    FillInBlankSegment,
    FindTheMistakeSegment,
    LessonPlan,
    MatchingPair,
    MatchingSegment,
    McqSegment,
    OrderingSegment,
    ParsedContent,
    TextSegment,
)
from lesson_engine.errors import MalformedContentError

logger = logging.getLogger(__name__)

FILL_RE = re.compile(r"^(?P<before>[^{}]*)\{(?P<answer>[^{}]*\S[^{}]*)\}(?P<after>[^{}]*)$")
QUESTION_RE = re.compile(
    r"^\s*(?:\*\*)?\s*(?:question|q)\s*\d*\s*[:.)]\s*(?:\*\*)?\s*(?P<text>\S.*?)\s*$",
    re.IGNORECASE,
)
OPTION_RE = re.compile(
    r"^\s*(?:(?P<letter>[A-Za-z])[.)]|[-*+])\s+"
    r"(?:\[(?P<mark>[ xX])\]\s*)?"
    r"(?P<text>.*?)(?:\s+(?P<flag>\((?i:correct)\)|\*))?\s*$"
)
ANSWER_RE = re.compile(
    r"^\s*(?:\*\*)?\s*(?:correct\s+)?answer\s*(?:\*\*)?\s*[:=]\s*(?:\*\*)?\s*(?P<value>.+?)\s*(?:\*\*)?\s*$",
    re.IGNORECASE,
)
OPEN_RE = re.compile(r"^\s*\[(?P<kind>[A-Za-z][A-Za-z _-]*)\]\s*$")
CLOSE_RE = re.compile(r"^\s*\[/(?P<kind>[A-Za-z][A-Za-z _-]*)\]\s*$")
FIELD_RE = re.compile(r"^\s*(?:\*\*)?(?P<key>[A-Za-z][A-Za-z ]*?)(?:\*\*)?\s*:\s*(?P<value>.*?)\s*$")
ITEM_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?P<text>.+?)\s*$")
PAIR_SEPARATOR = "::"
BOLD_RE = re.compile(r"^\*\*(?P<inner>.+)\*\*$")

BLOCK_KINDS: Dict[str, str] = {
    "MCQ": "mcq",
    "MULTIPLE_CHOICE": "mcq",
    "MATCHING": "matching",
    "ORDERING": "ordering",
    "CATEGORIZATION": "categorization",
    "FIND_THE_MISTAKE": "find_the_mistake",
}


def _block_kind(raw: str) -> Optional[str]:
    return BLOCK_KINDS.get(re.sub(r"[\s-]+", "_", raw.strip()).upper())


def _strip_bold(text: str) -> str:
    bold = BOLD_RE.match(text)
    return bold.group("inner").strip() if bold else text


def split_entries(raw: str) -> List[str]:
    """Split a word bank or category list on `|` when present, otherwise on commas."""
    separator = "|" if "|" in raw else ","
    return [entry.strip() for entry in raw.split(separator) if entry.strip()]


@dataclass
class _BlockBody:
    fields: Dict[str, str] = field(default_factory=dict)
    items: List[Tuple[int, str]] = field(default_factory=list)
    options: List[Tuple[int, re.Match]] = field(default_factory=list)


class ContentParser:
    """
    Turn generated lesson text into an ordered list of typed segments.

    Parsing is line oriented and never raises: anything that is not a
    recognised construct, or a construct that turns out to be malformed, is
    kept verbatim as a `text` segment. Segment ids are derived from the kind
    and the 1-based starting line, so re-parsing identical input yields
    identical ids.

    Recognised constructs
    ---------------------
    - A line holding exactly one ``{answer}`` placeholder, optionally followed by
      a ``Word bank: a, b, c`` line, becomes a ``fill_in_blank`` segment.
    - ``Question: ...`` followed by two or more option lines (``A) ...``,
      ``- [x] ...``) and an optional ``Answer: B`` line becomes an ``mcq`` segment.
    - ``[MATCHING]``, ``[ORDERING]``, ``[CATEGORIZATION]``, ``[FIND_THE_MISTAKE]``
      and ``[MCQ]`` blocks closed by the matching ``[/KIND]`` line.

    Examples
    --------
    >>> parser = ContentParser()
    >>> [segment.type for segment in parser.parse("Plants use {photosynthesis} to make food.")]
    ['fill_in_blank']
    """

    def __init__(self, config: ParserConfig | None = None):
        self.config = config or ParserConfig()
        labels = "|".join(re.escape(label) for label in self.config.word_bank_labels)
        self._word_bank_re = re.compile(
            rf"^\s*(?:\*\*)?\s*(?:{labels})\s*(?:\*\*)?\s*:\s*(?P<entries>.*?)\s*$",
            re.IGNORECASE,
        )

    def parse(self, source_text: str, id_prefix: str | None = None) -> List[ParsedContent]:
        """Parse `source_text` into segments; the result is never empty."""
        lines = source_text.splitlines(keepends=True)
        segments: List[ParsedContent] = []
        pending: List[str] = []
        pending_start = 1

        def make_id(kind: str, line_no: int) -> str:
            base = f"{kind}-{line_no}"
            return f"{id_prefix}-{base}" if id_prefix else base

        def flush_text() -> None:
            if pending:
                segments.append(
                    TextSegment(id=make_id("text", pending_start), value="".join(pending))
                )
                pending.clear()

        index = 0
        while index < len(lines):
            line_no = index + 1
            segment, consumed = self._match_at(lines, index, make_id)
            if segment is None:
                if not pending:
                    pending_start = line_no
                pending.extend(lines[index : index + consumed])
            else:
                flush_text()
                segments.append(segment)
            index += consumed

        flush_text()
        if not segments:
            segments.append(TextSegment(id=make_id("text", 1), value=source_text))
        return segments

    def parse_lesson_plan(self, plan: LessonPlan) -> List[ParsedContent]:
        """Parse every activity description and the assessment description of a lesson plan."""
        segments: List[ParsedContent] = []
        for idx, activity in enumerate(plan.lesson_activities, start=1):
            if activity.description.strip():
                segments.extend(self.parse(activity.description, id_prefix=f"activity-{idx}"))
        if plan.assessment and plan.assessment.description.strip():
            segments.extend(self.parse(plan.assessment.description, id_prefix="assessment"))
        return segments

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def _match_at(self, lines: Sequence[str], index: int, make_id) -> Tuple[Optional[ParsedContent], int]:
        """Return the segment starting at `index` (or None for plain text) and the lines consumed."""
        content = lines[index].rstrip("\r\n")
        line_no = index + 1

        opener = OPEN_RE.match(content)
        if opener and _block_kind(opener.group("kind")):
            return self._match_block(lines, index, _block_kind(opener.group("kind")), make_id)

        if QUESTION_RE.match(content):
            segment, consumed = self._match_inline_mcq(lines, index, make_id)
            if segment is not None:
                return segment, consumed

        fill = FILL_RE.match(content)
        if fill:
            word_bank = None
            consumed = 1
            if index + 1 < len(lines):
                bank = self._word_bank_re.match(lines[index + 1].rstrip("\r\n"))
                if bank:
                    word_bank = split_entries(bank.group("entries")) or None
                    consumed = 2
            segment = FillInBlankSegment(
                id=make_id("fill_in_blank", line_no),
                before=fill.group("before"),
                after=fill.group("after"),
                answer=fill.group("answer"),
                word_bank=word_bank,
            )
            return segment, consumed

        if "{" in content or "}" in content:
            logger.debug("Line %d has unbalanced or repeated braces; keeping as text", line_no)
        return None, 1

    # ------------------------------------------------------------------ #
    # Multiple choice
    # ------------------------------------------------------------------ #

    def _match_inline_mcq(self, lines: Sequence[str], index: int, make_id) -> Tuple[Optional[ParsedContent], int]:
        question = QUESTION_RE.match(lines[index].rstrip("\r\n")).group("text")
        cursor = index + 1
        options: List[Tuple[int, re.Match]] = []
        while cursor < len(lines):
            option = OPTION_RE.match(lines[cursor].rstrip("\r\n"))
            if not option or not option.group("text"):
                break
            options.append((cursor + 1, option))
            cursor += 1
        if len(options) < 2:
            return None, 1

        answer_value = None
        if cursor < len(lines):
            answer = ANSWER_RE.match(lines[cursor].rstrip("\r\n"))
            if answer:
                answer_value = answer.group("value")
                cursor += 1

        try:
            segment = self._build_mcq(make_id("mcq", index + 1), question, options, answer_value, index + 1)
        except MalformedContentError as exc:
            logger.warning("Keeping malformed question as text: %s", exc)
            return None, cursor - index
        return segment, cursor - index

    @staticmethod
    def _build_mcq(
        segment_id: str,
        question: str,
        options: List[Tuple[int, re.Match]],
        answer_value: Optional[str],
        line_no: int,
    ) -> McqSegment:
        if not question:
            raise MalformedContentError("mcq", line_no, "missing question")
        if len(options) < 2:
            raise MalformedContentError("mcq", line_no, "needs at least two options")

        texts = [_strip_bold(match.group("text")) for _, match in options]
        labels = [
            (match.group("letter") or chr(65 + position)).upper()
            for position, (_, match) in enumerate(options)
        ]
        if answer_value is not None:
            cleaned = answer_value.strip().rstrip(".)")
            if cleaned.upper() in labels and len(cleaned) == 1:
                correct = [labels.index(cleaned.upper())]
            else:
                folded = answer_value.strip().casefold()
                correct = [pos for pos, text in enumerate(texts) if text.casefold() == folded]
        else:
            correct = [
                pos
                for pos, (_, match) in enumerate(options)
                if (match.group("mark") or "").lower() == "x" or match.group("flag")
            ]
        if len(correct) != 1:
            raise MalformedContentError(
                "mcq", line_no, f"expected exactly one correct option, found {len(correct)}"
            )
        return McqSegment(id=segment_id, question=question, options=texts, answer=texts[correct[0]])

    # ------------------------------------------------------------------ #
    # Blocks
    # ------------------------------------------------------------------ #

    def _match_block(self, lines: Sequence[str], index: int, kind: str, make_id) -> Tuple[Optional[ParsedContent], int]:
        line_no = index + 1
        closer_index = None
        for cursor in range(index + 1, len(lines)):
            content = lines[cursor].rstrip("\r\n")
            nested = OPEN_RE.match(content)
            if nested and _block_kind(nested.group("kind")):
                logger.warning(
                    "Keeping %s opener at line %d as text: nested block at line %d",
                    kind,
                    line_no,
                    cursor + 1,
                )
                return None, 1
            closer = CLOSE_RE.match(content)
            if closer and _block_kind(closer.group("kind")):
                if _block_kind(closer.group("kind")) != kind:
                    logger.warning(
                        "Keeping %s opener at line %d as text: mismatched closer at line %d",
                        kind,
                        line_no,
                        cursor + 1,
                    )
                    return None, 1
                closer_index = cursor
                break
        if closer_index is None:
            logger.warning("Keeping %s opener at line %d as text: block never closed", kind, line_no)
            return None, 1

        consumed = closer_index - index + 1
        body = self._read_body(lines, index + 1, closer_index, mcq=kind == "mcq")
        builders = {
            "mcq": self._build_mcq_block,
            "matching": self._build_matching,
            "ordering": self._build_ordering,
            "categorization": self._build_categorization,
            "find_the_mistake": self._build_find_the_mistake,
        }
        try:
            segment = builders[kind](make_id(kind, line_no), body, line_no)
        except MalformedContentError as exc:
            logger.warning("Keeping malformed block as text: %s", exc)
            return None, consumed
        return segment, consumed

    @staticmethod
    def _read_body(lines: Sequence[str], start: int, stop: int, mcq: bool) -> _BlockBody:
        body = _BlockBody()
        for cursor in range(start, stop):
            content = lines[cursor].rstrip("\r\n")
            if not content.strip():
                continue
            if mcq:
                option = OPTION_RE.match(content)
                if option and option.group("text"):
                    body.options.append((cursor + 1, option))
                    continue
            item = ITEM_RE.match(content)
            if item:
                body.items.append((cursor + 1, item.group("text")))
                continue
            entry = FIELD_RE.match(content)
            if entry:
                body.fields[entry.group("key").strip().lower()] = entry.group("value")
                continue
            logger.debug("Ignoring unrecognised block line %d: %r", cursor + 1, content)
        return body

    def _build_mcq_block(self, segment_id: str, body: _BlockBody, line_no: int) -> McqSegment:
        return self._build_mcq(
            segment_id,
            body.fields.get("question", ""),
            body.options,
            body.fields.get("answer") or body.fields.get("correct answer"),
            line_no,
        )

    @staticmethod
    def _split_pair(kind: str, item_line: int, text: str) -> Tuple[str, str]:
        left, separator, right = text.partition(PAIR_SEPARATOR)
        if not separator or not left.strip() or not right.strip():
            raise MalformedContentError(kind, item_line, f"expected 'left {PAIR_SEPARATOR} right'")
        return left.strip(), right.strip()

    def _build_matching(self, segment_id: str, body: _BlockBody, line_no: int) -> MatchingSegment:
        pairs: List[MatchingPair] = []
        seen = set()
        for item_line, text in body.items:
            term, definition = self._split_pair("matching", item_line, text)
            if term in seen:
                raise MalformedContentError("matching", item_line, f"duplicate term {term!r}")
            seen.add(term)
            pairs.append(MatchingPair(term=term, definition=definition))
        if not pairs:
            raise MalformedContentError("matching", line_no, "no pairs")
        return MatchingSegment(
            id=segment_id, instruction=body.fields.get("instruction", ""), pairs=pairs
        )

    @staticmethod
    def _build_ordering(segment_id: str, body: _BlockBody, line_no: int) -> OrderingSegment:
        items = [text for _, text in body.items]
        if not items:
            raise MalformedContentError("ordering", line_no, "no items")
        return OrderingSegment(
            id=segment_id,
            instruction=body.fields.get("instruction", ""),
            ordering_items=items,
            already_ordered=True,
        )

    def _build_categorization(self, segment_id: str, body: _BlockBody, line_no: int) -> CategorizationSegment:
        declared = split_entries(body.fields.get("categories", ""))
        entries: List[CategorizationItem] = []
        seen = set()
        for item_line, text in body.items:
            item, category = self._split_pair("categorization", item_line, text)
            if item in seen:
                raise MalformedContentError("categorization", item_line, f"duplicate item {item!r}")
            seen.add(item)
            if declared and category not in declared:
                raise MalformedContentError(
                    "categorization", item_line, f"undefined category {category!r}"
                )
            entries.append(CategorizationItem(item=item, category=category))
        if not entries:
            raise MalformedContentError("categorization", line_no, "no items")
        categories = declared or list(dict.fromkeys(entry.category for entry in entries))
        return CategorizationSegment(
            id=segment_id,
            instruction=body.fields.get("instruction", ""),
            categories=categories,
            categorization_items=entries,
        )

    @staticmethod
    def _build_find_the_mistake(segment_id: str, body: _BlockBody, line_no: int) -> FindTheMistakeSegment:
        statement = body.fields.get("statement", "")
        correction = body.fields.get("correction", "")
        if not statement or not correction:
            raise MalformedContentError("find_the_mistake", line_no, "needs Statement and Correction")
        return FindTheMistakeSegment(
            id=segment_id,
            statement=statement,
            mistake=body.fields.get("mistake", ""),
            correction=correction,
        )


def parse(source_text: str, id_prefix: str | None = None) -> List[ParsedContent]:
    """Parse with the default parser configuration."""
    return ContentParser().parse(source_text, id_prefix=id_prefix)
