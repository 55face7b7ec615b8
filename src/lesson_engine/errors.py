from __future__ import annotations


class LessonEngineError(Exception):
    """Base class for every error raised by the lesson engine."""


class MalformedContentError(LessonEngineError):
    """A span of generated markup could not be turned into an interactive segment.

    Raised by the block parsers and always recovered inside `ContentParser.parse`,
    which keeps the offending span as plain text.
    """

    def __init__(self, kind: str, line_no: int, reason: str):
        super().__init__(f"{kind} at line {line_no}: {reason}")
        self.kind = kind
        self.line_no = line_no
        self.reason = reason


class InvalidStateError(LessonEngineError):
    """Operation attempted on an adventure that is terminal or not yet started."""


class NotStartedError(InvalidStateError):
    """An answer was submitted before any adventure was started."""


class TypeMismatchError(LessonEngineError, TypeError):
    """Answer payload shape does not agree with the interaction being graded."""

    def __init__(self, expected: str, received: str):
        super().__init__(f"Expected a {expected} answer, received {received}.")
        self.expected = expected
        self.received = received


class EmptyAdventureError(LessonEngineError, ValueError):
    """An adventure with no nodes cannot be played."""


class EmptyQuizError(LessonEngineError, ValueError):
    """A quiz with no questions cannot be graded."""


class InvalidRecordError(LessonEngineError, ValueError):
    """A generated JSON record could not be decoded or validated."""
