"""
textdelta.core — a text-change algebra
======================================

§1  OPERATIONS
──────────────

A change to a run of characters is written as an ordered list of
operations, each one of:

    Insert(content, attributes)   write new characters
    Retain(n, attributes)         step over n existing characters,
                                  optionally re-stamping their formatting
    Delete(n)                     remove n existing characters

Walking a change left to right, Retain and Delete consume characters of
the document the change is applied to; Insert consumes nothing.  A
document itself is just a change made only of Inserts:

    "Hello World"                     →  [Insert("Hello World")]
    replace "World" with "Earth"      →  [Retain(6), Insert("Earth"), Delete(5)]


§2  NORMAL FORM
───────────────

Changes are only ever built through Change.add, which keeps them in
normal form:

    • empty operations are never stored
    • adjacent Deletes are fused
    • adjacent Inserts (or Retains) with equal attributes are fused
    • an Insert landing right after a Delete is moved in front of it

so two changes that do the same thing with the same formatting compare
equal.  Change.__add__ is the one exception (§6).


§3  COMPOSITION
───────────────

compose(A, B) is the single change equivalent to applying A, then B:

    apply(apply(doc, A), B) == apply(doc, compose(A, B))

Two cursors walk A and B in lock-step.  B's Inserts pass through, A's
Deletes pass through, everything else is consumed in chunks of
min(remaining in A, remaining in B) and merged pairwise:

    A chunk    B chunk     emitted
    ───────    ───────     ───────────────────────────────
    Retain     Retain      Retain   (attributes composed)
    Insert     Retain      Insert   (attributes composed)
    Retain     Delete      Delete
    Insert     Delete      nothing  (text born and killed)

Composition is associative, and an attribute-less Retain spanning the
whole document is a right identity once trailing Retains are chopped.


§4  INVERSION
─────────────

invert(A, base) is the change that takes apply(base, A) back to base.
Inserts become Deletes, plain Retains stay, and Deletes / attributed
Retains look at slice(base, offset, offset + n) to recover the text or
formatting they destroyed.


§5  SLICING
───────────

slice(start, end) extracts the operations covering [start, end) of a
change, splitting operations at the boundaries.


§6  CONCATENATION
─────────────────

A + B splices the two operation lists without fusing across the seam.
Changes built this way may hold, say, two adjacent Inserts with equal
formatting.  Kept for compatibility with stored data that relies on it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from itertools import groupby
from typing import Any, ClassVar, Optional, Union

from .attributes import (
    DEFAULT_POLICY,
    AttributePolicy,
    Attributes,
    attributes_equal,
    hash_attributes,
)
from .config import get_config
from .errors import ApplyError, InvalidOperationError, SliceRangeError

LOGGER = logging.getLogger(__name__)

# 2^53 - 1: the cursor's "infinite" length once it runs off the end
MAX_LENGTH = 9007199254740991


# ═══════════════════════════════════════════════════════════════════
#  OPERATIONS
# ═══════════════════════════════════════════════════════════════════

class OpKind(Enum):
    """The three kinds of operation.  The set is closed."""
    INSERT = auto()
    RETAIN = auto()
    DELETE = auto()


def _check_length(length: Any, name: str) -> None:
    # bool is an int subclass, but Retain(True) is always a bug
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidOperationError(
            f"{name} length must be an int, got {type(length).__name__}",
            reason="invalid_length",
            value=length,
        )
    if length < 0:
        raise InvalidOperationError(
            f"{name} length must be non-negative, got {length}",
            reason="negative_length",
            value=length,
        )


def _check_attributes(attributes: Any, drop_null: bool = False) -> Optional[Attributes]:
    if attributes is None:
        return None
    if not isinstance(attributes, Mapping):
        raise InvalidOperationError(
            f"attributes must be a mapping, got {type(attributes).__name__}",
            reason="invalid_attributes",
            value=attributes,
        )
    for key in attributes:
        if not isinstance(key, str):
            raise InvalidOperationError(
                f"attribute keys must be strings, got {key!r}",
                reason="invalid_attributes",
                value=attributes,
            )
    attributes = dict(attributes)
    if drop_null:
        attributes = {key: value for key, value in attributes.items() if value is not None}
    # {} and None both mean "no formatting"; keep just one of them
    return attributes or None


class TextOperation:
    """Base class for operations.  Not instantiated directly."""
    __slots__ = ()

    kind: ClassVar[OpKind]

    @property
    def is_empty(self) -> bool:
        return self.length == 0


@dataclass(frozen=True, slots=True)
class Insert(TextOperation):
    """
    New text, optionally formatted.

    A None value means "clear this format", which new text has no use
    for, so such keys are dropped on construction.

    Examples:
        Insert("hello")
        Insert("link", {"href": "https://example.com"})
    """
    content: str
    attributes: Optional[Attributes] = None

    kind: ClassVar[OpKind] = OpKind.INSERT

    def __post_init__(self) -> None:
        if not isinstance(self.content, str):
            raise InvalidOperationError(
                f"Insert content must be a str, got {type(self.content).__name__}",
                reason="invalid_content",
                value=self.content,
            )
        object.__setattr__(self, "attributes", _check_attributes(self.attributes, drop_null=True))

    @property
    def length(self) -> int:
        return len(self.content)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Insert):
            return NotImplemented
        return self.content == other.content and attributes_equal(self.attributes, other.attributes)

    def __hash__(self) -> int:
        return hash((OpKind.INSERT, self.content, hash_attributes(self.attributes)))

    def __repr__(self) -> str:
        if self.attributes is None:
            return f"Insert({self.content!r})"
        return f"Insert({self.content!r}, {self.attributes!r})"


@dataclass(frozen=True, slots=True)
class Retain(TextOperation):
    """
    Keep ``length`` characters, re-stamping ``attributes`` onto them if given.

    Examples:
        Retain(5)
        Retain(5, {"bold": True})
        Retain(5, {"bold": None})     # clear bold
    """
    length: int
    attributes: Optional[Attributes] = None

    kind: ClassVar[OpKind] = OpKind.RETAIN

    def __post_init__(self) -> None:
        _check_length(self.length, "Retain")
        object.__setattr__(self, "attributes", _check_attributes(self.attributes))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Retain):
            return NotImplemented
        return self.length == other.length and attributes_equal(self.attributes, other.attributes)

    def __hash__(self) -> int:
        return hash((OpKind.RETAIN, self.length, hash_attributes(self.attributes)))

    def __repr__(self) -> str:
        if self.attributes is None:
            return f"Retain({self.length})"
        return f"Retain({self.length}, {self.attributes!r})"


@dataclass(frozen=True, slots=True)
class Delete(TextOperation):
    """Remove ``length`` characters."""
    length: int

    kind: ClassVar[OpKind] = OpKind.DELETE

    def __post_init__(self) -> None:
        _check_length(self.length, "Delete")

    @property
    def attributes(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"Delete({self.length})"


Operation = Union[Insert, Retain, Delete]


# ═══════════════════════════════════════════════════════════════════
#  OPERATION CURSOR
# ═══════════════════════════════════════════════════════════════════

class OpCursor:
    """
    Forward-only reader over a sequence of operations.

    The cursor is just (index, offset) into an immutable tuple.  Callers
    pull chunks of whatever size they need and the cursor splits the
    underlying operations to fit:

        cursor = OpCursor([Insert("hello"), Retain(3)])
        cursor.consume(2)       → Insert("he")
        cursor.peek_remaining() → 3
        cursor.consume()        → Insert("llo")
        cursor.consume(10)      → Retain(3)
        cursor.has_next         → False

    Once exhausted, peek_remaining() reports MAX_LENGTH so callers can
    take min() against it without special cases, and consume(n) hands
    back Retain(n): everything past the end of a change is implicitly
    retained.  Bound such calls with an explicit length (or check
    has_next first); an unbounded consume() on an exhausted cursor
    returns Retain(MAX_LENGTH) as an end-of-stream marker.
    """
    __slots__ = ("_ops", "_index", "_offset")

    def __init__(self, ops: Iterable[Operation]):
        self._ops: tuple[Operation, ...] = tuple(ops)
        self._index = 0
        self._offset = 0

    @property
    def has_next(self) -> bool:
        return self.peek_remaining() < MAX_LENGTH

    def peek(self) -> Optional[Operation]:
        """The operation currently under the cursor, or None."""
        if self._index >= len(self._ops):
            return None
        return self._ops[self._index]

    def peek_kind(self) -> Optional[OpKind]:
        op = self.peek()
        return None if op is None else op.kind

    def peek_remaining(self) -> int:
        """Units of the current operation not yet consumed."""
        if self._index < len(self._ops):
            return self._ops[self._index].length - self._offset
        return MAX_LENGTH

    def consume(self, length: Optional[int] = None) -> Operation:
        """Take up to ``length`` units of the current operation (all of it if None)."""
        if length is not None and length < 0:
            raise InvalidOperationError(
                f"cannot consume a negative length ({length})",
                reason="negative_length",
                value=length,
            )
        if self._index >= len(self._ops):
            return Retain(MAX_LENGTH if length is None else length)

        op = self._ops[self._index]
        offset = self._offset
        remaining = op.length - offset
        if length is None or length >= remaining:
            length = remaining
            self._index += 1
            self._offset = 0
        else:
            self._offset += length

        if op.kind is OpKind.INSERT:
            return Insert(op.content[offset:offset + length], op.attributes)
        if op.kind is OpKind.RETAIN:
            return Retain(length, op.attributes)
        if op.kind is OpKind.DELETE:
            return Delete(length)
        raise TypeError(f"Unknown operation type: {type(op)}")

    def remainder(self) -> list[Operation]:
        """Everything not yet consumed.  The cursor does not move."""
        if not self.has_next:
            return []
        if self._offset == 0:
            return list(self._ops[self._index:])
        index, offset = self._index, self._offset
        head = self.consume()
        rest = list(self._ops[self._index:])
        self._index, self._offset = index, offset
        return [head] + rest

    def __repr__(self) -> str:
        return f"OpCursor(index={self._index}, offset={self._offset}, ops={len(self._ops)})"


# ═══════════════════════════════════════════════════════════════════
#  CHANGE
# ═══════════════════════════════════════════════════════════════════

class Change:
    """
    An ordered, normalised list of operations.

    Either a document (Inserts only) or an edit against one.  Build it
    in document order with the append primitives:

        edit = Change().retain(6).insert("there ").delete(5).insert("Earth")
        doc = Change().insert("Hello World")
        doc.compose(edit).to_raw_string()   → "Hello there Earth"

    compose / invert / slice never modify their inputs and always return
    a fresh Change carrying the same attribute policy.  Appending to a
    Change from several threads at once is not supported.
    """
    __slots__ = ("_ops", "_raw", "policy")

    def __init__(
        self,
        ops: Optional[Iterable[Operation]] = None,
        *,
        policy: Optional[AttributePolicy] = None,
    ):
        self._ops: list[Operation] = []
        self._raw: Optional[str] = None
        self.policy = policy or DEFAULT_POLICY
        if ops is not None:
            self.add_all(ops)

    @classmethod
    def _spliced(cls, ops: list[Operation], policy: AttributePolicy) -> Change:
        # bypasses add(); only for __add__
        change = cls(policy=policy)
        change._ops = ops
        return change

    # ── building ─────────────────────────────────────────────────

    def add(self, op: Operation) -> Change:
        """Append ``op``, fusing it with the last operation where possible."""
        if not isinstance(op, TextOperation):
            raise InvalidOperationError(
                f"expected an operation, got {type(op).__name__}",
                reason="invalid_operation",
                value=op,
            )
        if op.is_empty:
            return self
        self._raw = None

        if self._ops:
            last = self._ops[-1]
            if last.kind is OpKind.DELETE and op.kind is OpKind.DELETE:
                self._ops[-1] = Delete(last.length + op.length)
                return self
            if self.policy.equal(last.attributes, op.attributes):
                if last.kind is OpKind.INSERT and op.kind is OpKind.INSERT:
                    self._ops[-1] = Insert(last.content + op.content, last.attributes)
                    return self
                if last.kind is OpKind.DELETE and op.kind is OpKind.INSERT:
                    # Inserts sort before a Delete at the same position
                    self._ops.pop()
                    self.add(op)
                    self._ops.append(last)
                    return self
                if last.kind is OpKind.RETAIN and op.kind is OpKind.RETAIN:
                    self._ops[-1] = Retain(last.length + op.length, last.attributes)
                    return self

        self._ops.append(op)
        return self

    def add_all(self, ops: Iterable[Operation]) -> Change:
        for op in ops:
            self.add(op)
        return self

    def insert(self, content: str, attributes: Optional[Mapping[str, Any]] = None) -> Change:
        return self.add(Insert(content, attributes))

    def retain(self, length: int, attributes: Optional[Mapping[str, Any]] = None) -> Change:
        return self.add(Retain(length, attributes))

    def delete(self, length: int) -> Change:
        return self.add(Delete(length))

    # ── inspection ───────────────────────────────────────────────

    @property
    def ops(self) -> tuple[Operation, ...]:
        return tuple(self._ops)

    @property
    def length(self) -> int:
        """Sum of every operation's length."""
        return sum(op.length for op in self._ops)

    @property
    def is_document(self) -> bool:
        """True when the change holds only Inserts."""
        return all(op.kind is OpKind.INSERT for op in self._ops)

    def to_raw_string(self) -> str:
        """The text of every Insert, in order.  Cached until the next append."""
        if self._raw is None:
            self._raw = "".join(op.content for op in self._ops if op.kind is OpKind.INSERT)
        return self._raw

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._ops)

    def __eq__(self, other: object) -> bool:
        """Same operations, attributes compared by the left operand's policy."""
        if not isinstance(other, Change):
            return NotImplemented
        if len(self._ops) != len(other._ops):
            return False
        equal = self.policy.equal
        for mine, theirs in zip(self._ops, other._ops):
            if mine.kind is not theirs.kind or mine.length != theirs.length:
                return False
            if mine.kind is OpKind.INSERT and mine.content != theirs.content:
                return False
            if not equal(mine.attributes, theirs.attributes):
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Change({self._ops!r})"

    def __add__(self, other: Change) -> Change:
        """Splice ``other`` after this change without fusing across the seam."""
        if not isinstance(other, Change):
            return NotImplemented
        return Change._spliced(self._ops + other._ops, self.policy)

    # ── algebra ──────────────────────────────────────────────────

    def slice(self, start: int = 0, end: Optional[int] = None) -> Change:
        """Operations covering the half-open range [start, end)."""
        total = self.length
        if start < 0 or start > total or (end is not None and not start <= end <= total):
            raise SliceRangeError(
                f"slice [{start}, {end}) outside change of length {total}",
                start=start,
                end=end,
                length=total,
            )

        result = Change(policy=self.policy)
        cursor = OpCursor(self._ops)
        index = 0
        while (end is None or index < end) and cursor.has_next:
            if index < start:
                op = cursor.consume(start - index)
            else:
                op = cursor.consume(None if end is None else end - index)
                result.add(op)
            index += op.length
        return result

    def compose(self, other: Change) -> Change:
        """The single change equivalent to applying ``self`` and then ``other``."""
        settings = get_config().compose
        policy = self.policy
        this_iter = OpCursor(self._ops)
        other_iter = OpCursor(other._ops)
        result = Change(policy=policy)

        # A plain leading Retain in `other` leaves the Inserts it covers untouched.
        first_other = other_iter.peek()
        if (
            settings.leading_retain_fast_path
            and first_other is not None
            and first_other.kind is OpKind.RETAIN
            and first_other.attributes is None
        ):
            first_left = first_other.length
            while this_iter.peek_kind() is OpKind.INSERT and this_iter.peek_remaining() <= first_left:
                first_left -= this_iter.peek_remaining()
                result.add(this_iter.consume())
            if first_other.length - first_left > 0:
                other_iter.consume(first_other.length - first_left)

        while this_iter.has_next or other_iter.has_next:
            if other_iter.peek_kind() is OpKind.INSERT:
                result.add(other_iter.consume())
            elif this_iter.peek_kind() is OpKind.DELETE:
                result.add(this_iter.consume())
            else:
                length = min(this_iter.peek_remaining(), other_iter.peek_remaining())
                this_op = this_iter.consume(length)
                other_op = other_iter.consume(length)
                if other_op.kind is OpKind.RETAIN and other_op.length > 0:
                    attributes = policy.compose(this_op.attributes, other_op.attributes)
                    # Insert drops None values itself; a Retain keeps them
                    if this_op.kind is OpKind.RETAIN:
                        new_op: Operation = Retain(length, attributes)
                    else:
                        new_op = Insert(this_op.content, attributes)
                    result.add(new_op)

                    # rest of `other` is an implicit retain: copy the rest of `self`
                    if (
                        settings.remainder_shortcut
                        and not other_iter.has_next
                        and result._ops[-1] == new_op
                    ):
                        result.add_all(this_iter.remainder())
                        LOGGER.debug("compose: %d + %d ops -> %d ops (shortcut)",
                                     len(self._ops), len(other._ops), len(result._ops))
                        return result.chop()
                elif other_op.kind is OpKind.DELETE and this_op.kind is OpKind.RETAIN:
                    result.add(other_op)

        LOGGER.debug("compose: %d + %d ops -> %d ops",
                     len(self._ops), len(other._ops), len(result._ops))
        return result.chop()

    def chop(self) -> Change:
        """Drop one trailing attribute-less Retain, in place."""
        if self._ops:
            last = self._ops[-1]
            if last.kind is OpKind.RETAIN and not last.attributes:
                self._ops.pop()
                self._raw = None
        return self

    def invert(self, base: Change) -> Change:
        """
        The change that undoes ``self``, given the ``base`` document it was applied to.

            edited = base.compose(change)
            edited.compose(change.invert(base)) == base
        """
        policy = self.policy
        inverted = Change(policy=policy)
        offset = 0
        for op in self._ops:
            if op.kind is OpKind.INSERT:
                inverted.delete(op.length)
            elif op.kind is OpKind.RETAIN and op.attributes is None:
                inverted.retain(op.length)
                offset += op.length
            else:
                for base_op in base.slice(offset, offset + op.length):
                    if op.kind is OpKind.DELETE:
                        inverted.add(base_op)
                    else:
                        inverted.retain(base_op.length, policy.invert(op.attributes, base_op.attributes))
                offset += op.length

        LOGGER.debug("invert: %d ops against base of length %d -> %d ops",
                     len(self._ops), base.length, len(inverted._ops))
        return inverted.chop()


# ═══════════════════════════════════════════════════════════════════
#  APPLY (plain text)
# ═══════════════════════════════════════════════════════════════════

def apply(text: str, change: Change) -> str:
    """
    Apply ``change`` to plain ``text``; formatting is ignored.

        apply("Hello World", Change().retain(6).insert("Earth").delete(5))
            → "Hello Earth"

    Text beyond the last Retain/Delete is kept (implicit trailing retain).
    """
    pieces: list[str] = []
    position = 0
    for op in change:
        if op.kind is OpKind.INSERT:
            pieces.append(op.content)
            continue
        if position + op.length > len(text):
            raise ApplyError(
                f"{op!r} at {position} runs past the end of a {len(text)}-character text",
                position=position,
                text_length=len(text),
            )
        if op.kind is OpKind.RETAIN:
            pieces.append(text[position:position + op.length])
        position += op.length
    pieces.append(text[position:])
    return "".join(pieces)


# ═══════════════════════════════════════════════════════════════════
#  DIFF (two plain texts → change)
# ═══════════════════════════════════════════════════════════════════

def _common_prefix(a: str, b: str) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def _common_suffix(a: str, b: str, limit: int) -> int:
    i = 0
    while i < limit and a[-1 - i] == b[-1 - i]:
        i += 1
    return i


def _edit_script(a: str, b: str) -> list[OpKind]:
    """
    Insert/delete/keep trace between ``a`` and ``b``, one entry per character.

    Unit-cost edit distance without substitution (a substitution is a
    Delete plus an Insert here).  Full table, so O(len(a)·len(b)) time
    and memory: meant for the changed middle of two texts, not whole books.
    """
    m, n = len(a), len(b)
    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for j in range(1, n + 1):
        dp[0][j] = j
    for i in range(1, m + 1):
        dp[i][0] = i

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if a[i - 1] == b[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = min(dp[i - 1][j], dp[i][j - 1]) + 1

    # Trace back
    script: list[OpKind] = []
    i, j = m, n
    while i > 0 or j > 0:
        if i > 0 and j > 0 and a[i - 1] == b[j - 1] and dp[i][j] == dp[i - 1][j - 1]:
            script.append(OpKind.RETAIN)
            i -= 1
            j -= 1
        elif i > 0 and dp[i][j] == dp[i - 1][j] + 1:
            script.append(OpKind.DELETE)
            i -= 1
        else:
            script.append(OpKind.INSERT)
            j -= 1

    script.reverse()
    return script


def diff(before: str, after: str, policy: Optional[AttributePolicy] = None) -> Change:
    """
    Minimum character-level change turning ``before`` into ``after``.

        apply(before, diff(before, after)) == after
    """
    prefix = _common_prefix(before, after)
    suffix = _common_suffix(before, after, min(len(before), len(after)) - prefix)
    a = before[prefix:len(before) - suffix]
    b = after[prefix:len(after) - suffix]

    change = Change(policy=policy)
    change.retain(prefix)
    j = 0
    for kind, run in groupby(_edit_script(a, b)):
        count = sum(1 for _ in run)
        if kind is OpKind.RETAIN:
            change.retain(count)
            j += count
        elif kind is OpKind.DELETE:
            change.delete(count)
        else:
            change.insert(b[j:j + count])
            j += count

    LOGGER.debug("diff: %d -> %d chars, %d changed in the middle, %d ops",
                 len(before), len(after), max(len(a), len(b)), len(change.ops))
    return change.chop()


__all__ = [
    "MAX_LENGTH",
    "OpKind",
    "TextOperation",
    "Insert",
    "Retain",
    "Delete",
    "Operation",
    "OpCursor",
    "Change",
    "apply",
    "diff",
]
