"""JSON helpers for paper data and overlay objects."""

from .serialization import (
    OVERLAY_FORMAT_VERSION,
    SerializationError,
    deserialize_overlays,
    load_overlays,
    load_paper,
    save_overlays,
    serialize_overlays,
)

__all__ = [
    "OVERLAY_FORMAT_VERSION",
    "SerializationError",
    "deserialize_overlays",
    "load_overlays",
    "load_paper",
    "save_overlays",
    "serialize_overlays",
]
