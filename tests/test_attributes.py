"""
Tests for the attribute policy: equality, composition, inversion,
hashing, and injecting a custom policy into the algebra.
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from textdelta.attributes import (
    AttributePolicy, DEFAULT_POLICY,
    attributes_equal, compose_attributes, invert_attributes, hash_attributes,
)
from textdelta.core import Change, Insert, Retain, Delete


# ═══════════════════════════════════════════════════════════════════
#  §1  EQUALITY
# ═══════════════════════════════════════════════════════════════════

class TestEquality:

    @pytest.mark.parametrize("a,b,expected", [
        (None, None, True),
        (None, {}, True),
        ({"bold": True}, {"bold": True}, True),
        ({"bold": True, "color": "red"}, {"color": "red", "bold": True}, True),
        ({"bold": None}, {}, False),
        ({"bold": None}, {"bold": None}, True),
        ({"bold": True}, {"bold": 1}, False),
        ({"size": 1}, {"size": 1.0}, True),
        ({"bold": True}, {"italic": True}, False),
        ({"bold": True}, {"bold": True, "italic": True}, False),
    ])
    def test_attributes_equal(self, a, b, expected):
        assert attributes_equal(a, b) is expected
        assert attributes_equal(b, a) is expected


# ═══════════════════════════════════════════════════════════════════
#  §2  COMPOSITION
# ═══════════════════════════════════════════════════════════════════

class TestCompose:

    def test_union(self):
        assert compose_attributes({"bold": True}, {"italic": True}) == {"bold": True, "italic": True}

    def test_newer_wins(self):
        result = compose_attributes({"color": "red", "bold": True}, {"color": "blue"})
        assert result == {"color": "blue", "bold": True}

    def test_null_kept(self):
        assert compose_attributes({"bold": True}, {"bold": None}) == {"bold": None}

    def test_null_dropped_by_insert(self):
        attributes = compose_attributes({"bold": True}, {"bold": None})
        assert Insert("x", attributes).attributes is None
        attributes = compose_attributes({"bold": None, "color": "red"}, None)
        assert Insert("x", attributes).attributes == {"color": "red"}

    def test_empty_is_none(self):
        assert compose_attributes(None, None) is None
        assert compose_attributes({}, {}) is None

    def test_inputs_untouched(self):
        a, b = {"bold": True}, {"bold": None}
        compose_attributes(a, b)
        assert a == {"bold": True}
        assert b == {"bold": None}


# ═══════════════════════════════════════════════════════════════════
#  §3  INVERSION
# ═══════════════════════════════════════════════════════════════════

class TestInvert:

    @pytest.mark.parametrize("attr,base,expected", [
        ({"bold": True}, None, {"bold": None}),
        ({"bold": True}, {"bold": False}, {"bold": False}),
        ({"bold": True}, {"bold": True}, None),
        ({"bold": None}, None, None),
        ({"bold": None}, {"bold": True}, {"bold": True}),
        (None, {"bold": True}, None),
        ({"color": "blue"}, {"color": "red", "bold": True}, {"color": "red"}),
    ])
    def test_invert(self, attr, base, expected):
        assert invert_attributes(attr, base) == expected

    def test_compose_then_invert_restores_base(self):
        base = {"bold": True, "color": "red"}
        attr = {"color": "blue", "italic": True}
        applied = Insert("x", compose_attributes(base, attr)).attributes
        undo = invert_attributes(attr, base)
        assert undo == {"color": "red", "italic": None}
        assert Insert("x", compose_attributes(applied, undo)).attributes == base


# ═══════════════════════════════════════════════════════════════════
#  §4  HASHING
# ═══════════════════════════════════════════════════════════════════

class TestHash:

    def test_order_independent(self):
        a = {"bold": True, "color": "red", "size": 3}
        b = {"size": 3, "color": "red", "bold": True}
        assert hash_attributes(a) == hash_attributes(b)

    def test_none_and_empty(self):
        assert hash_attributes(None) == hash_attributes({})

    def test_unhashable_values(self):
        a = hash_attributes({"tags": ["x", "y"], "meta": {"k": 1}})
        b = hash_attributes({"meta": {"k": 1}, "tags": ["x", "y"]})
        assert a == b

    def test_deterministic(self):
        attrs = {"bold": True, "link": "https://example.com"}
        assert hash_attributes(attrs) == hash_attributes(dict(attrs))


# ═══════════════════════════════════════════════════════════════════
#  §5  CUSTOM POLICY
# ═══════════════════════════════════════════════════════════════════

def _replace(a, b):
    # newer formatting replaces older outright
    return dict(b) if b else None


class TestPolicy:

    def test_default(self):
        assert Change().policy is DEFAULT_POLICY
        assert DEFAULT_POLICY.compose is compose_attributes

    def test_custom_compose(self):
        policy = AttributePolicy(compose=_replace)
        first = Change(policy=policy).retain(2, {"bold": True})
        result = first.compose(Change().retain(2, {"italic": True}))
        assert result.ops == (Retain(2, {"italic": True}),)
        assert result.policy is policy

    def test_two_argument_compose(self):
        policy = AttributePolicy(compose=lambda a, b: dict(b or a or {}) or None)
        first = Change(policy=policy).retain(2, {"bold": True})
        result = first.compose(Change().retain(2, {"italic": True}))
        assert result.ops == (Retain(2, {"italic": True}),)

        doc = Change(policy=policy).insert("ab", {"bold": True})
        result = doc.compose(Change().retain(2, {"bold": None}))
        assert result.ops == (Insert("ab"),)

    def test_custom_equality_drives_change_comparison(self):
        lenient = AttributePolicy(equal=lambda a, b: True)
        assert Change(policy=lenient).insert("a", {"bold": True}) == Change().insert("a")
        assert Change().insert("a") != Change(policy=lenient).insert("a", {"bold": True})
        assert Change(policy=lenient).retain(1) != Change().delete(1)
        assert Change(policy=lenient).insert("a") != Change().insert("b")

    def test_operations_keep_strict_equality(self):
        loose = AttributePolicy(equal=lambda a, b: (a or {}) == (b or {}))
        assert Change(policy=loose).insert("a", {"bold": True}) == Change().insert("a", {"bold": 1})
        assert Insert("a", {"bold": True}) != Insert("a", {"bold": 1})

    def test_no_hash_field(self):
        assert not hasattr(DEFAULT_POLICY, "hash")

    def test_custom_equality_drives_fusing(self):
        policy = AttributePolicy(equal=lambda a, b: True)
        change = Change(policy=policy).insert("a", {"bold": True}).insert("b")
        assert change.ops == (Insert("ab", {"bold": True}),)

    def test_custom_equality_drives_reordering(self):
        policy = AttributePolicy(equal=lambda a, b: True)
        change = Change(policy=policy).delete(1).insert("x", {"bold": True})
        assert change.ops == (Insert("x", {"bold": True}), Delete(1))

    def test_custom_invert(self):
        policy = AttributePolicy(invert=lambda attr, base: {"restored": True})
        doc = Change().insert("abc")
        undo = Change(policy=policy).retain(3, {"bold": True}).invert(doc)
        assert undo.ops == (Retain(3, {"restored": True}),)

    def test_policy_inherited(self):
        policy = AttributePolicy(compose=_replace)
        doc = Change(policy=policy).insert("Hello")
        assert doc.slice(1, 3).policy is policy
        assert doc.compose(Change().retain(2)).policy is policy
        assert Change().delete(2).invert(doc).policy is DEFAULT_POLICY
        assert (doc + Change()).policy is policy

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_POLICY.compose = _replace
