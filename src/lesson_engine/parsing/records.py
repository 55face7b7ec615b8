from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from lesson_engine.data_models import AdventureModule, InteractiveAdventure, LessonPlan, Quiz
from lesson_engine.errors import InvalidRecordError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)
RawRecord = Union[str, bytes, Mapping[str, Any]]


def clean_json_payload(raw: str) -> str:
    """Strip a surrounding markdown code fence (optionally tagged `json`) from generated output."""
    text = raw.strip()
    if text.startswith("```"):
        fence_end = text.find("```", 3)
        if fence_end != -1:
            text = text[3:fence_end].strip()
        else:
            text = text[3:].strip()
        if text.lower().startswith("json"):
            text = text[4:].strip()
    return text


def load_record(model: Type[RecordT], raw: RawRecord) -> RecordT:
    """Decode a generated record and validate it against `model`."""
    name = model.__name__
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        cleaned = clean_json_payload(text)
        try:
            payload = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            logger.error("Failed to decode %s payload: %s", name, cleaned)
            raise InvalidRecordError(f"{name} payload is not valid JSON.") from exc
    else:
        payload = dict(raw)

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        logger.error("%s payload validation failed: %s", name, exc)
        raise InvalidRecordError(f"{name} payload has an invalid structure: {exc}") from exc


def load_adventure(raw: RawRecord) -> InteractiveAdventure:
    return load_record(InteractiveAdventure, raw)


def load_quiz(raw: RawRecord) -> Quiz:
    return load_record(Quiz, raw)


def load_lesson_plan(raw: RawRecord) -> LessonPlan:
    return load_record(LessonPlan, raw)


def load_adventure_module(raw: RawRecord) -> AdventureModule:
    return load_record(AdventureModule, raw)
