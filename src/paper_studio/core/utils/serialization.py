"""
Serialization Utilities

to/from JSON helpers for paper data and overlay objects. Storage itself
belongs to the host application; these helpers only define the file
formats and validate what comes back in.

Overlay file format::

    {"version": 1, "overlays": [{"id": ..., "kind": "image", ...}, ...]}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List

from ..models.overlays import OverlayObject
from ..models.paper import PaperData

logger = logging.getLogger(__name__)

OVERLAY_FORMAT_VERSION = 1


class SerializationError(Exception):
    """Stored data could not be parsed."""
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Overlay Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_overlays(overlays: Iterable[OverlayObject]) -> dict[str, Any]:
    """
    Serialize overlays, preserving their order (z-order).

    Args:
        overlays: Overlay objects in z-order

    Returns:
        Dictionary suitable for JSON serialization
    """
    return {
        "version": OVERLAY_FORMAT_VERSION,
        "overlays": [o.to_dict() for o in overlays],
    }


def deserialize_overlays(data: dict[str, Any]) -> List[OverlayObject]:
    """
    Deserialize overlays from serialize_overlays() output.

    Raises:
        SerializationError: If the payload or any overlay is invalid
    """
    if not isinstance(data, dict):
        raise SerializationError(f"Expected object, got {type(data).__name__}")
    version = data.get("version")
    if version != OVERLAY_FORMAT_VERSION:
        raise SerializationError(f"Unsupported overlay format version: {version!r}")

    overlays: List[OverlayObject] = []
    seen: set[str] = set()
    for i, item in enumerate(data.get("overlays", [])):
        try:
            overlay = OverlayObject.from_dict(item)
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Invalid overlay at index {i}: {e}") from e
        if overlay.id in seen:
            raise SerializationError(f"Duplicate overlay id: {overlay.id!r}")
        seen.add(overlay.id)
        overlays.append(overlay)
    return overlays


def save_overlays(overlays: Iterable[OverlayObject], path: Path) -> None:
    """Write overlays to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = serialize_overlays(overlays)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.debug(f"Saved {len(payload['overlays'])} overlays to {path}")


def load_overlays(path: Path) -> List[OverlayObject]:
    """
    Read overlays from a JSON file.

    Raises:
        SerializationError: If the file cannot be read or parsed
    """
    data = _read_json(path)
    overlays = deserialize_overlays(data)
    logger.debug(f"Loaded {len(overlays)} overlays from {path}")
    return overlays


# ─────────────────────────────────────────────────────────────────────────────
# Paper Serialization
# ─────────────────────────────────────────────────────────────────────────────

def load_paper(path: Path) -> PaperData:
    """
    Read paper data from a JSON file (camelCase editor format).

    Raises:
        SerializationError: If the file cannot be read or parsed
    """
    data = _read_json(path)
    try:
        return PaperData.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise SerializationError(f"Invalid paper data in {path}: {e}") from e


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SerializationError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SerializationError(f"{path} is not valid JSON: {e}") from e
