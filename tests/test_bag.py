"""Tests for the Bag record type."""

import copy as _copy
import pickle as _pickle

import pytest as _pytest

import docmerge.bag as bag


class TestBagMapping:
    """Bag behaves as an ordered, string-keyed mutable mapping."""

    def test_construct_from_mapping_and_keywords(self) -> None:
        """Positional mapping and keyword fields are both stored, in order."""
        doc = bag.Bag({"a": 1}, b=2)
        assert list(doc) == ["a", "b"]
        assert doc["a"] == 1
        assert doc["b"] == 2

    def test_construct_from_pairs(self) -> None:
        """An iterable of pairs is accepted like dict()."""
        doc = bag.Bag([("x", 1), ("y", 2)])
        assert dict(doc) == {"x": 1, "y": 2}

    def test_empty(self) -> None:
        """A new Bag has no fields."""
        assert len(bag.Bag()) == 0

    def test_non_string_key_rejected(self) -> None:
        """Keys must be strings."""
        doc = bag.Bag()
        with _pytest.raises(TypeError, match="keys must be strings"):
            doc[1] = "one"  # type: ignore[index]

    def test_delete(self) -> None:
        """del removes a key."""
        doc = bag.Bag(a=1, b=2)
        del doc["a"]
        assert list(doc) == ["b"]

    def test_contains(self) -> None:
        """Membership checks keys exactly."""
        doc = bag.Bag(Name="x")
        assert "Name" in doc
        assert "name" not in doc


class TestBagAttributes:
    """Public keys are reachable as attributes."""

    def test_attribute_read(self) -> None:
        """doc.name reads doc['name']."""
        assert bag.Bag(name="Ada").name == "Ada"

    def test_attribute_write_creates_key(self) -> None:
        """Assigning an attribute adds a key."""
        doc = bag.Bag()
        doc.role = "admin"
        assert doc["role"] == "admin"

    def test_attribute_delete(self) -> None:
        """Deleting an attribute removes the key."""
        doc = bag.Bag(role="admin")
        del doc.role
        assert "role" not in doc

    def test_missing_attribute_raises(self) -> None:
        """Unknown names raise AttributeError, not KeyError."""
        with _pytest.raises(AttributeError):
            _ = bag.Bag().missing

    def test_private_attribute_rejected(self) -> None:
        """Underscore names are not fields."""
        doc = bag.Bag()
        with _pytest.raises(AttributeError):
            doc._secret = 1
        with _pytest.raises(AttributeError):
            _ = doc._secret


class TestBagEquality:
    """Equality, hashing and copying."""

    def test_equal_to_dict(self) -> None:
        """A Bag equals any mapping with the same content."""
        assert bag.Bag(a=1) == {"a": 1}
        assert bag.Bag(a=1) != {"a": 2}

    def test_not_hashable(self) -> None:
        """Bags are mutable and cannot be hashed."""
        with _pytest.raises(TypeError):
            hash(bag.Bag())

    def test_pickle_roundtrip(self) -> None:
        """Bags survive pickling."""
        doc = bag.Bag(a=1, nested=bag.Bag(b=2))
        restored = _pickle.loads(_pickle.dumps(doc))
        assert restored == doc
        assert isinstance(restored["nested"], bag.Bag)

    def test_deepcopy_is_independent(self) -> None:
        """A deep copy does not share nested bags."""
        doc = bag.Bag(nested=bag.Bag(b=2))
        clone = _copy.deepcopy(doc)
        clone["nested"]["b"] = 3
        assert doc["nested"]["b"] == 2

    def test_repr(self) -> None:
        """repr shows the content."""
        assert repr(bag.Bag(a=1)) == "Bag({'a': 1})"


class TestToDict:
    """Bag.to_dict() converts nested bags to plain dicts."""

    def test_nested_conversion(self) -> None:
        """Bags inside lists and bags become dicts."""
        doc = bag.Bag(a=bag.Bag(b=1), items=[bag.Bag(c=2), 3])
        plain = doc.to_dict()
        assert plain == {"a": {"b": 1}, "items": [{"c": 2}, 3]}
        assert type(plain["a"]) is dict
        assert type(plain["items"][0]) is dict

    def test_tuples_stay_tuples(self) -> None:
        """Tuples are rebuilt as tuples."""
        plain = bag.Bag(t=(bag.Bag(x=1),)).to_dict()
        assert plain == {"t": ({"x": 1},)}
        assert type(plain["t"]) is tuple
