from .content_parser import ContentParser, parse
from .markup import quiz_to_markup, segment_to_markup, segments_to_markup
from .records import (
    clean_json_payload,
    load_adventure,
    load_adventure_module,
    load_lesson_plan,
    load_quiz,
)

__all__ = [
    "ContentParser",
    "clean_json_payload",
    "load_adventure",
    "load_adventure_module",
    "load_lesson_plan",
    "load_quiz",
    "parse",
    "quiz_to_markup",
    "segment_to_markup",
    "segments_to_markup",
]
