"""
Product Service Event Schemas
=============================

Wire contract for the product events published to the broker.

The body is a flat JSON object with exactly four fields::

    {"event_type": "product_created", "product_id": 7,
     "name": "Widget", "timestamp": "2026-01-01T00:00:00Z"}

``name`` is only present on ``product_created``; it is omitted entirely
(not null, not empty) on ``product_deleted``. There is no version field:
consumers must agree on this exact shape.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

CONTENT_TYPE_JSON = "application/json"

# ==============================================
# EVENT TYPES
# ==============================================


class ProductEventType(str, Enum):
    PRODUCT_CREATED = "product_created"
    PRODUCT_DELETED = "product_deleted"


# ==============================================
# TIMESTAMPS
# ==============================================

_last_timestamp: Optional[datetime] = None


def next_event_timestamp() -> datetime:
    """Current UTC time, never earlier than the previous value handed out by this process."""
    global _last_timestamp
    now = datetime.now(timezone.utc)
    if _last_timestamp is not None and now < _last_timestamp:
        now = _last_timestamp
    _last_timestamp = now
    return now


def format_timestamp(value: datetime) -> str:
    """RFC 3339 in UTC with a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# ==============================================
# PRODUCT EVENT
# ==============================================


class ProductEvent(BaseModel):
    """Immutable fact describing a completed product mutation"""

    model_config = ConfigDict(frozen=True)

    event_type: ProductEventType
    product_id: int = Field(..., gt=0, strict=True)
    name: Optional[str] = None
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
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
    def created(cls, product_id: int, name: str) -> "ProductEvent":
        return cls(
            event_type=ProductEventType.PRODUCT_CREATED,
            product_id=product_id,
            name=name,
            timestamp=next_event_timestamp(),
        )

    @classmethod
    def deleted(cls, product_id: int) -> "ProductEvent":
        return cls(
            event_type=ProductEventType.PRODUCT_DELETED,
            product_id=product_id,
            timestamp=next_event_timestamp(),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation; ``name`` is dropped when absent."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_message(self) -> bytes:
        return json.dumps(self.to_payload(), ensure_ascii=False).encode("utf-8")
