"""
textdelta.formats — Convert between changes and their wire form.

A change travels as a JSON array of operation records:

    {"insert": "text"[, "attributes": {...}]}
    {"retain": 5[, "attributes": {...}]}
    {"delete": 5}

Supported conversions:
    • Python records (list of dicts) ↔ Change
    • JSON strings ↔ Change

Records matching none of the three shapes are dropped (logged), or
rejected with MalformedRecordError when serialization.strict is set.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from .attributes import AttributePolicy
from .config import get_config
from .core import Change, Delete, Insert, Operation, OpKind, Retain
from .errors import InvalidOperationError, MalformedRecordError

LOGGER = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  SINGLE OPERATIONS
# ═══════════════════════════════════════════════════════════════════

def operation_to_python(op: Operation) -> dict[str, Any]:
    """Convert one operation to its record."""
    if op.kind is OpKind.INSERT:
        record: dict[str, Any] = {"insert": op.content}
    elif op.kind is OpKind.RETAIN:
        record = {"retain": op.length}
    elif op.kind is OpKind.DELETE:
        return {"delete": op.length}
    else:
        raise TypeError(f"Unknown operation type: {type(op)}")
    if op.attributes is not None:
        record["attributes"] = dict(op.attributes)
    return record


def _is_length(value: Any) -> bool:
    # JSON true is not a length
    return isinstance(value, int) and not isinstance(value, bool)


def operation_from_python(record: Any) -> Optional[Operation]:
    """
    Convert one record back to an operation.

    Returns None for anything that is not exactly one of the three
    record shapes (wrong value types, negative lengths, attributes that
    are not a mapping, non-dict records).
    """
    if not isinstance(record, Mapping):
        return None
    attributes = record.get("attributes")
    if attributes is not None and not isinstance(attributes, Mapping):
        return None

    try:
        if isinstance(record.get("insert"), str):
            return Insert(record["insert"], attributes)
        if _is_length(record.get("retain")):
            return Retain(record["retain"], attributes)
        if _is_length(record.get("delete")):
            return Delete(record["delete"])
    except InvalidOperationError:
        return None
    return None


# ═══════════════════════════════════════════════════════════════════
#  PYTHON RECORDS ↔ CHANGE
# ═══════════════════════════════════════════════════════════════════

def to_python(change: Change) -> list[dict[str, Any]]:
    """Convert a change to a list of plain records."""
    return [operation_to_python(op) for op in change]


def from_python(records: Iterable[Any], policy: Optional[AttributePolicy] = None) -> Change:
    """
    Convert a list of records to a change.

    Records go through the normal append path, so the result is
    normalised (adjacent mergeable records are fused, empty ones vanish).
    """
    settings = get_config().serialization
    change = Change(policy=policy)
    for index, record in enumerate(records):
        op = operation_from_python(record)
        if op is None:
            if settings.strict:
                raise MalformedRecordError(
                    f"record {index} is not an insert, retain or delete: {record!r}",
                    record=record,
                    index=index,
                )
            if settings.warn_on_drop:
                LOGGER.warning("Dropping unrecognized operation record %d: %r", index, record)
            continue
        change.add(op)
    return change


# ═══════════════════════════════════════════════════════════════════
#  JSON STRINGS ↔ CHANGE
# ═══════════════════════════════════════════════════════════════════

def from_json(text: str, policy: Optional[AttributePolicy] = None) -> Change:
    """Parse a JSON array of operation records into a change."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise MalformedRecordError(
            f"expected a JSON array of operations, got {type(data).__name__}",
            record=data,
            index=-1,
        )
    return from_python(data, policy=policy)


def to_json(change: Change, **kwargs) -> str:
    """Convert a change to a JSON string."""
    return json.dumps(to_python(change), **kwargs)
