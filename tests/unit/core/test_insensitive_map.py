import copy
from enum import Enum

import pytest

from insensitivemap import InsensitiveMap, InvalidModeValueError, KeyNotFoundError


class Field(str, Enum):
    FOO_BAR = "FOO_BAR"


# ==========================================================
# Set / get
# ==========================================================
@pytest.mark.unit
def test_basic_insertion_and_lookup():
    im = InsensitiveMap()
    im["Foo Bar"] = 1

    assert im["Foo Bar"] == 1
    assert im["foo_bar"] == 1
    assert im["FOO BAR"] == 1
    assert im.get("fOo_BaR") == 1

    assert "foo_bar" in im
    assert "Foo Bar" in im
    assert im.has_key("FOO_BAR")
    assert "foo-bar" not in im


@pytest.mark.unit
def test_enum_keys_interchangeable_with_strings():
    im = InsensitiveMap()
    im["Foo Bar"] = 1
    assert im[Field.FOO_BAR] == 1

    im[Field.FOO_BAR] = 2
    assert im["foo bar"] == 2
    assert list(im) == [Field.FOO_BAR]


@pytest.mark.unit
def test_last_write_wins_on_original_key():
    im = InsensitiveMap()
    im["Foo"] = 1
    im["FOO"] = 2

    assert len(im) == 1
    assert im["foo"] == 2
    assert list(im.keys()) == ["FOO"]
    assert im.lookup_key("foo") == "FOO"
    assert im.to_dict() == {"FOO": 2}


@pytest.mark.unit
def test_same_spelling_keeps_position():
    im = InsensitiveMap()
    im["A"] = 1
    im["B"] = 2
    im["A"] = 3

    assert list(im.items()) == [("A", 3), ("B", 2)]


@pytest.mark.unit
def test_new_spelling_moves_key_to_end():
    im = InsensitiveMap()
    im["A"] = 1
    im["B"] = 2
    im["a"] = 3

    assert list(im.items()) == [("B", 2), ("a", 3)]


@pytest.mark.unit
def test_non_textual_keys_are_untouched():
    im = InsensitiveMap()
    im[1] = "one"
    im[(1, "A")] = "tuple"

    assert im[1] == "one"
    assert im[(1, "A")] == "tuple"
    assert (1, "a") not in im


@pytest.mark.unit
def test_missing_key_raises_key_error():
    im = InsensitiveMap({"a": 1})
    with pytest.raises(KeyError):
        im["b"]
    assert im.get("b") is None
    assert im.get("b", 5) == 5


@pytest.mark.unit
def test_store_alias():
    im = InsensitiveMap()
    im.store("Some Key", 1)
    assert im["some_key"] == 1


# ==========================================================
# Defaults
# ==========================================================
@pytest.mark.unit
def test_default_value_on_miss():
    im = InsensitiveMap(default=0)
    assert im["missing"] == 0
    assert "missing" not in im
    assert im.get("missing") is None


@pytest.mark.unit
def test_default_none_is_a_real_default():
    im = InsensitiveMap(default=None)
    assert im["missing"] is None


@pytest.mark.unit
def test_default_factory_stores_value():
    im = InsensitiveMap(default_factory=list)
    im["Tags"].append("x")
    im["TAGS"].append("y")

    assert im["tags"] == ["x", "y"]
    assert list(im) == ["Tags"]


@pytest.mark.unit
def test_default_factory_result_is_wrapped():
    im = InsensitiveMap(default_factory=dict)
    im["Section"]["Inner Key"] = 1
    assert isinstance(im["section"], InsensitiveMap)
    assert im["section"]["inner_key"] == 1


@pytest.mark.unit
def test_default_and_default_factory_are_exclusive():
    with pytest.raises(ValueError, match="Only one of"):
        InsensitiveMap(default=1, default_factory=list)

    im = InsensitiveMap(default=1)
    im.default_factory = list
    assert im.default is None
    assert im["x"] == []

    im.default = 5
    assert im.default_factory is None
    assert im["y"] == 5


@pytest.mark.unit
def test_default_factory_must_be_callable():
    with pytest.raises(TypeError, match="default_factory must be callable"):
        InsensitiveMap(default_factory=42)


# ==========================================================
# Deletion
# ==========================================================
@pytest.mark.unit
def test_delitem_any_spelling():
    im = InsensitiveMap({"Key One": 1, "KeyTwo": 2})
    del im["key_one"]

    assert "Key One" not in im
    assert im.lookup_key("key one") == "key one"
    assert im["keytwo"] == 2

    with pytest.raises(KeyError):
        del im["key_one"]


@pytest.mark.unit
def test_delete_returns_value_or_none():
    im = InsensitiveMap({"X": 100})
    assert im.delete("x") == 100
    assert "X" not in im
    assert len(im) == 0

    # absent key is a no-op
    assert im.delete("x") is None
    assert im.delete("x", handler=lambda k: f"no {k}") == "no x"


@pytest.mark.unit
def test_pop():
    im = InsensitiveMap({"X": 100})
    assert im.pop("x") == 100
    assert "X" not in im
    assert im.pop("missing", 999) == 999
    assert im.pop("missing", None) is None

    with pytest.raises(KeyError):
        im.pop("missing_no_default")


@pytest.mark.unit
def test_popitem_and_shift():
    im = InsensitiveMap({"A": 1, "B": 2, "C": 3})

    assert im.popitem() == ("C", 3)
    assert "c" not in im
    assert im.shift() == ("A", 1)
    assert "a" not in im
    assert list(im) == ["B"]

    im.clear()
    with pytest.raises(KeyError):
        im.shift()


@pytest.mark.unit
def test_clear_resets_registry():
    im = InsensitiveMap({"A": 1})
    im.clear()
    assert len(im) == 0
    assert "a" not in im
    im["a"] = 2
    assert list(im) == ["a"]


@pytest.mark.unit
def test_setdefault():
    im = InsensitiveMap({"Name": "x"})
    assert im.setdefault("NAME", "y") == "x"
    assert im.setdefault("Other Key", {"A": 1})["a"] == 1
    assert list(im) == ["Name", "Other Key"]


# ==========================================================
# Bulk reads
# ==========================================================
@pytest.mark.unit
def test_fetch():
    im = InsensitiveMap({"Foo": 1}, default=0)
    assert im.fetch("FOO") == 1
    assert im.fetch("bar", 5) == 5
    assert im.fetch("bar", handler=lambda k: k.upper()) == "BAR"

    # defaults are ignored by a required fetch
    with pytest.raises(KeyNotFoundError, match="key not found"):
        im.fetch("bar")

    with pytest.raises(KeyError):
        im.fetch("bar")


@pytest.mark.unit
def test_values_at():
    im = InsensitiveMap({"A": 1, "B b": 2})
    assert im.values_at("a", "b_B", "c") == [1, 2, None]

    im.default = -1
    assert im.values_at("C", "a") == [-1, 1]


@pytest.mark.unit
def test_assoc():
    im = InsensitiveMap({"Foo Bar": 1})
    assert im.assoc("foo_bar") == ("Foo Bar", 1)
    assert im.assoc("nope") is None


# ==========================================================
# Mode
# ==========================================================
@pytest.mark.unit
def test_safe_mode_flag():
    im = InsensitiveMap()
    assert im.is_safe_mode() is False
    assert im.set_safe_mode(True) is True
    assert im.safe is True
    assert im.is_safe_mode() is True


@pytest.mark.unit
@pytest.mark.parametrize("value", [1, 0, "true", None])
def test_safe_mode_rejects_non_bool(value):
    im = InsensitiveMap()
    with pytest.raises(InvalidModeValueError, match="Safe mode must be True or False"):
        im.safe = value
    assert im.safe is False

    with pytest.raises(TypeError):
        InsensitiveMap(safe=value)


# ==========================================================
# Mapping protocol
# ==========================================================
@pytest.mark.unit
def test_iteration_and_size(nested_map):
    assert list(nested_map) == ["Content Type", "Server", "Routes", 3]
    assert len(nested_map) == 4
    assert bool(nested_map)
    assert not InsensitiveMap()


@pytest.mark.unit
def test_equality_as_mapping_content():
    im = InsensitiveMap({"A": 1, "b": 2})
    assert im == {"A": 1, "b": 2}
    assert im == InsensitiveMap({"b": 2, "A": 1})
    assert im != {"a": 1, "b": 2}


@pytest.mark.unit
def test_repr_names_class():
    assert repr(InsensitiveMap({"A": 1})) == "InsensitiveMap({'A': 1})"


@pytest.mark.unit
def test_from_pairs():
    im = InsensitiveMap.from_pairs([("Key One", 1), ("Nested", {"X Y": 2})], Extra=3)
    assert im["key_one"] == 1
    assert im["nested"]["x_y"] == 2
    assert im["EXTRA"] == 3


@pytest.mark.unit
def test_fromkeys():
    im = InsensitiveMap.fromkeys(["A b", "C"], 0)
    assert isinstance(im, InsensitiveMap)
    assert im["a_b"] == 0
    assert im["c"] == 0


# ==========================================================
# Duplication
# ==========================================================
@pytest.mark.unit
def test_copy_has_independent_registry():
    im = InsensitiveMap({"A": 1}, safe=True, default=0)
    dup = im.copy()

    dup["B"] = 2
    dup["a"] = 10

    assert list(im) == ["A"]
    assert im["a"] == 1
    assert "b" not in im
    assert dup.safe is True
    assert dup["missing"] == 0
    assert isinstance(copy.copy(im), InsensitiveMap)


@pytest.mark.unit
def test_copy_shares_nested_values():
    im = InsensitiveMap({"Nested": {"A": 1}})
    dup = im.copy()
    assert dup["nested"] is im["nested"]


@pytest.mark.unit
def test_deepcopy_is_fully_independent():
    im = InsensitiveMap({"Nested": {"A": [1, 2]}})
    dup = copy.deepcopy(im)

    dup["nested"]["a"].append(3)
    dup["NESTED"]["b"] = 2

    assert im["nested"]["a"] == [1, 2]
    assert "b" not in im["nested"]
    assert dup["nested"]["A"] == [1, 2, 3]
    assert im.default is None
    with pytest.raises(KeyError):
        dup["missing"]


# ==========================================================
# Replacement and conversion
# ==========================================================
@pytest.mark.unit
def test_replace_rebuilds_registry():
    im = InsensitiveMap({"Old": 1})
    im.replace({"New Key": 2, "other": {"Inner": 3}})

    assert list(im) == ["New Key", "other"]
    assert "old" not in im
    assert im["new_key"] == 2
    assert im["OTHER"]["inner"] == 3
    assert im.safe is False


@pytest.mark.unit
def test_replace_adopts_safe_mode():
    im = InsensitiveMap()
    im.replace(InsensitiveMap({"A": 1}, safe=True))
    assert im.safe is True

    # plain mappings do not carry a mode
    im.replace({"B": 2})
    assert im.safe is True


@pytest.mark.unit
def test_replace_adopts_defaults():
    im = InsensitiveMap(default=1)
    im.replace(InsensitiveMap({"A": 1}, default_factory=list))
    assert im.default_factory is list
    assert im["tags"] == []

    # plain mappings leave the fallback alone
    im.replace({"B": 2})
    assert im.default_factory is list

    im.replace(InsensitiveMap({"C": 3}))
    assert im.default_factory is None
    with pytest.raises(KeyError):
        im["missing"]


@pytest.mark.unit
def test_replace_keeps_last_spelling():
    im = InsensitiveMap()
    im.replace({"Foo": 1, "foo": 2})
    assert len(im) == 1
    assert list(im.items()) == [("foo", 2)]


@pytest.mark.unit
def test_to_dict_top_level_only(nested_map):
    plain = nested_map.to_dict()
    assert type(plain) is dict
    assert list(plain) == ["Content Type", "Server", "Routes", 3]
    assert isinstance(plain["Server"], InsensitiveMap)
    assert nested_map.sensitive() == plain


@pytest.mark.unit
def test_to_dict_deep(nested_map, nested_source):
    plain = nested_map.to_dict(deep=True)
    assert plain == nested_source
    assert type(plain["Server"]) is dict
    assert all(type(r) is dict for r in plain["Routes"])
