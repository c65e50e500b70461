"""
Text-Change Algebra
===================

Edits to a run of characters as ordered lists of Insert / Retain /
Delete operations, with the algorithms a rich-text editor needs to
record, merge and undo them.

    doc  = Change().insert("Hello World")
    edit = Change().retain(6).insert("there ").delete(5).insert("Earth")

    doc.compose(edit).to_raw_string()          → "Hello there Earth"
    undo = edit.invert(doc)
    doc.compose(edit).compose(undo) == doc     → True

The algebra is:
  • Normalised (equal edits build equal changes)
  • Associative under compose
  • Invertible given the document an edit was applied to
  • Serialisable as plain JSON records
"""

from textdelta.attributes import (
    AttributePolicy,
    DEFAULT_POLICY,
    attributes_equal,
    compose_attributes,
    invert_attributes,
    hash_attributes,
)
from textdelta.core import (
    # Operations
    MAX_LENGTH,
    OpKind,
    TextOperation,
    Insert,
    Retain,
    Delete,
    # Algebra
    OpCursor,
    Change,
    apply,
    diff,
)
from textdelta.errors import (
    DeltaError, InvalidOperationError, SliceRangeError, ApplyError, MalformedRecordError,
)
from textdelta.formats import (
    from_json, to_json, from_python, to_python,
    operation_from_python, operation_to_python,
)

__version__ = "0.1.0"
__all__ = [
    "AttributePolicy", "DEFAULT_POLICY",
    "attributes_equal", "compose_attributes", "invert_attributes", "hash_attributes",
    "MAX_LENGTH", "OpKind", "TextOperation", "Insert", "Retain", "Delete",
    "OpCursor", "Change", "apply", "diff",
    "DeltaError", "InvalidOperationError", "SliceRangeError", "ApplyError",
    "MalformedRecordError",
    "from_json", "to_json", "from_python", "to_python",
    "operation_from_python", "operation_to_python",
]
