"""
Snapshot helpers.

Audit entries and notification payloads store plain JSON values,
so entities are flattened through `snapshot_of` before they leave
the domain.
"""
import dataclasses
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_primitive(value: Any) -> Any:
    """Recursively convert a value into JSON-compatible primitives."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_primitive(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(k): to_primitive(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_primitive(v) for v in value]
    return value


def snapshot_of(entity: Any) -> Dict[str, Any]:
    """
    Flatten a domain dataclass into a JSON-compatible dict.

    Args:
        entity: Frozen domain dataclass instance

    Returns:
        Dictionary of primitive values
    """
    if not dataclasses.is_dataclass(entity):
        raise TypeError(f"Cannot snapshot {type(entity).__name__}")
    return to_primitive(entity)
