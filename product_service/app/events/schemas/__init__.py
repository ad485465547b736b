"""
Product Service Event Schemas
=============================

Event contract shared with consumers over the broker.
"""

from .event_schemas import (
    CONTENT_TYPE_JSON,
    ProductEvent,
    ProductEventType,
    format_timestamp,
    next_event_timestamp,
)

__all__ = [
    "ProductEvent",
    "ProductEventType",
    # Constants
    "CONTENT_TYPE_JSON",
    # Utility functions
    "format_timestamp",
    "next_event_timestamp",
]
