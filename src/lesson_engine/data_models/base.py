from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """Base for records exchanged with the content generator and the storage layer.

    Attributes are snake_case in Python and camelCase on the wire; either spelling
    is accepted on input and unknown keys are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict:
        """Dump to the camelCase JSON shape consumed by the UI and storage layers."""
        return self.model_dump(mode="json", by_alias=True)


class FrozenRecord(RecordModel):
    """Immutable record: created once and only read afterwards."""

    model_config = ConfigDict(frozen=True)
