"""
Product event contract as seen by the notification service.

Mirrors the product service's wire shape: ``event_type``, ``product_id``,
``name`` (created events only) and an RFC 3339 UTC ``timestamp``. A body that
does not match is a decode failure; the consumer requeues it.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator, model_validator

_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)


class EventDecodeError(ValueError):
    """Message body is not a valid product event"""


class ProductEventType(str, Enum):
    PRODUCT_CREATED = "product_created"
    PRODUCT_DELETED = "product_deleted"


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class ProductEvent(BaseModel):
    """Product event received from the product service"""

    model_config = ConfigDict(frozen=True)

    event_type: ProductEventType
    product_id: int = Field(..., gt=0, strict=True)
    name: Optional[str] = None
    timestamp: AwareDatetime

    @field_validator("timestamp", mode="before")
    @classmethod
    def require_rfc3339_string(cls, v: Any) -> Any:
        if not isinstance(v, str) or not _RFC3339.fullmatch(v):
            raise ValueError("timestamp must be an RFC 3339 string with a UTC offset")
        return v

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def check_name_matches_event_type(self) -> "ProductEvent":
        if self.event_type is ProductEventType.PRODUCT_CREATED:
            if not self.name:
                raise ValueError("product_created events require a name")
        elif self.name is not None:
            raise ValueError("product_deleted events must not carry a name")
        return self

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)

    @classmethod
    def from_message(cls, body: bytes) -> "ProductEvent":
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise EventDecodeError(f"unmarshal event: {e}") from e

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


__all__ = [
    "EventDecodeError",
    "ProductEvent",
    "ProductEventType",
    "format_timestamp",
]
