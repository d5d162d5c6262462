"""Shared configuration for document and form schemas.

Stored documents use camelCase keys; Python code uses snake_case attributes.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base for documents read back from the store."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Stored nulls fall back to field defaults instead of failing validation."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class FormModel(BaseModel):
    """Base for typed form data. ``None`` means the field was not supplied."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept datetimes, dates and ISO strings; naive values are taken as UTC.

    Empty strings mean "not supplied".
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if len(value) == 10:
            value = date.fromisoformat(value)
        else:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise ValueError(f"Invalid timestamp: {value!r}")
