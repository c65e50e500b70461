"""
textdelta.attributes — the attribute policy.

Formatting (bold, link target, heading level, ...) rides on Insert and
Retain operations as a flat mapping of string keys to scalar values.
The change algebra never interprets those values itself; it asks an
AttributePolicy to compare, combine and undo them.

The default policy follows the usual rich-text delta conventions:

    compose({"bold": True}, {"italic": True})      → {"bold": True, "italic": True}
    compose({"bold": True}, {"bold": None})        → {"bold": None}
    invert({"bold": True}, {})                     → {"bold": None}
    invert({"bold": True}, {"bold": False})        → {"bold": False}

A value of None is a real entry ("clear this format"), distinct from
an absent key.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

Attributes = dict[str, Any]

_ABSENT = object()


def _same_value(a: Any, b: Any) -> bool:
    """Type-aware value equality.

    bool is a subclass of int in Python (True == 1), but a JSON ``true``
    and a JSON ``1`` are different formats, so the bool check comes first.
    """
    if (type(a) is bool) != (type(b) is bool):
        return False
    if a is None or b is None:
        return a is b
    return a == b


def attributes_equal(a: Optional[Mapping[str, Any]], b: Optional[Mapping[str, Any]]) -> bool:
    """True when both mappings hold exactly the same key/value pairs.

    None and an empty mapping are both "no attributes".
    """
    a = a or {}
    b = b or {}
    if len(a) != len(b):
        return False
    for key, value in a.items():
        other = b.get(key, _ABSENT)
        if other is _ABSENT or not _same_value(value, other):
            return False
    return True


def compose_attributes(
    a: Optional[Mapping[str, Any]],
    b: Optional[Mapping[str, Any]],
) -> Optional[Attributes]:
    """Combine a prior attribute set ``a`` with a newer one ``b``.

    Keys in ``b`` win; keys only in ``a`` are kept.  None values are
    kept: on a Retain they clear the format (Insert drops them itself).
    """
    a = a or {}
    b = b or {}
    result: Attributes = dict(b)
    for key, value in a.items():
        if key not in b:
            result[key] = value
    return result or None


def invert_attributes(
    attr: Optional[Mapping[str, Any]],
    base: Optional[Mapping[str, Any]],
) -> Optional[Attributes]:
    """Attribute set that undoes ``attr`` on text that carried ``base``."""
    attr = attr or {}
    base = base or {}
    inverted: Attributes = {}
    for key, value in base.items():
        if key in attr and not _same_value(value, attr[key]):
            inverted[key] = value
    for key, value in attr.items():
        if key not in base and value is not None:
            inverted[key] = None
    return inverted or None


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return frozenset((k, _freeze(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return (type(value) is bool, value)


def hash_attributes(a: Optional[Mapping[str, Any]]) -> int:
    """Order-independent hash; equal mappings hash equal."""
    if not a:
        return hash(None)
    return hash(frozenset((key, _freeze(value)) for key, value in a.items()))


@dataclass(frozen=True, slots=True)
class AttributePolicy:
    """
    The attribute functions the change algebra consumes.

    Swap any of them to change how formatting merges without touching
    the algebra:

        policy = AttributePolicy(compose=lambda a, b: dict(b or a or {}) or None)
        change = Change(policy=policy)

    ``equal`` decides which neighbours Change.add fuses and how two
    Changes compare.  A bare operation has no policy, so Insert/Retain
    always compare with attributes_equal and hash with hash_attributes.
    """
    equal: Callable[..., bool] = attributes_equal
    compose: Callable[..., Optional[Attributes]] = compose_attributes
    invert: Callable[..., Optional[Attributes]] = invert_attributes


DEFAULT_POLICY = AttributePolicy()


__all__ = [
    "Attributes",
    "AttributePolicy",
    "DEFAULT_POLICY",
    "attributes_equal",
    "compose_attributes",
    "invert_attributes",
    "hash_attributes",
]
