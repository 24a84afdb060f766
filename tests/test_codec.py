import dataclasses
from concurrent.futures import ThreadPoolExecutor

import orjson
import pydantic
import pytest
from pyrsistent import PMap, PSet, PVector, pmap, pset, pvector

import immutransit
from immutransit import Codec, CodecConfig, OrderedMap, OrderedSet, UnregisterableType


@pytest.fixture
def codec():
    return Codec()


def roundtrip(codec, data):
    return codec.from_json(codec.to_json(data))


@pytest.mark.parametrize(
    "data",
    [
        pmap({"abc": "def"}),
        pmap({1: 2}),
        pmap({1: pmap({"X": "Y", "A": "B"}), 2: pmap({"a": 1, "b": 2, "c": 3})}),
        pvector([1, 2, 3, 4, 5]),
        pvector(range(100)),
        pmap({pvector([1, 2]): pvector([1, 2, 3, 4, 5])}),
        pset([1, "two", 3.5]),
        OrderedMap([("b", 1), ("a", 2)]),
        OrderedSet(["z", "a", "m"]),
    ],
    ids=[
        "map",
        "map-numeric-keys",
        "maps-in-maps",
        "list",
        "long-list",
        "lists-in-maps",
        "set",
        "ordered-map",
        "ordered-set",
    ],
)
def test_roundtrip(codec, data):
    result = roundtrip(codec, data)
    assert result == data
    assert type(result) is type(data)


def test_ordered_map_keeps_order(codec):
    data = OrderedMap([(2, "a"), (3, "b"), (1, "c")])
    result = roundtrip(codec, data)
    assert list(result.keys()) == [2, 3, 1]
    assert list(result.values()) == ["a", "b", "c"]


def test_ordered_set_keeps_order(codec):
    result = roundtrip(codec, OrderedSet([3, 1, 2]))
    assert list(result) == [3, 1, 2]


def test_decode_ordered_set_with_duplicates(codec):
    result = codec.from_json('["~#iOS",[2,1,2]]')
    assert isinstance(result, OrderedSet)
    assert list(result) == [2, 1]


def test_decode_set_with_duplicates(codec):
    result = codec.from_json('["~#iS",[1,1]]')
    assert isinstance(result, PSet)
    assert result == pset([1])


def test_decode_ordered_map_with_repeated_key(codec):
    result = codec.from_json('["~#iOM",["a",1,"b",2,"a",3]]')
    assert isinstance(result, OrderedMap)
    assert list(result.items()) == [("a", 3), ("b", 2)]


def test_decode_map_with_repeated_key(codec):
    assert codec.from_json('["~#iM",["a",1,"a",2]]') == pmap({"a": 2})


def test_list_keeps_order(codec):
    result = roundtrip(codec, pvector(["c", "a", "b"]))
    assert list(result) == ["c", "a", "b"]


@pytest.mark.parametrize("empty", [pmap(), OrderedMap(), pvector(), pset(), OrderedSet()])
def test_empty_containers(codec, empty):
    result = roundtrip(codec, empty)
    assert result == empty
    assert len(result) == 0
    assert type(result) is type(empty)


def test_nested_mixed(codec):
    data = pmap(
        {
            "list": pvector([pset([1]), OrderedMap({"k": pvector()})]),
            "ordered": OrderedSet([pvector([1, 2]), pvector([3])]),
        }
    )
    result = roundtrip(codec, data)
    assert result == data
    assert isinstance(result["list"][0], PSet)
    assert isinstance(result["list"][1], OrderedMap)
    assert isinstance(result["ordered"], OrderedSet)


def test_wire_tags(codec):
    assert codec.to_json(pmap({"a": 1})) == '["~#iM",["a",1]]'
    assert codec.to_json(OrderedMap({"a": 1})) == '["~#iOM",["a",1]]'
    assert codec.to_json(pvector([1, 2])) == '["~#iL",[1,2]]'
    assert codec.to_json(pset([1])) == '["~#iS",[1]]'
    assert codec.to_json(OrderedSet([2, 1])) == '["~#iOS",[2,1]]'
    assert codec.to_json(len) == '["~#_",null]'


def test_map_representation_is_flat(codec):
    tag, rep = orjson.loads(codec.to_json(OrderedMap([("x", 1), ("y", pvector([2]))])))
    assert tag == "~#iOM"
    assert rep == ["x", 1, "y", ["~#iL", [2]]]


def test_native_list_becomes_pvector(codec):
    # ideally it wouldn't, but bare JSON arrays carry no type
    result = roundtrip(codec, [1, 2, 3])
    assert result == pvector([1, 2, 3])
    assert isinstance(result, PVector)


def test_native_tuple_becomes_pvector(codec):
    assert roundtrip(codec, (1, "a")) == pvector([1, "a"])


def test_native_dict_becomes_pmap(codec):
    # ideally it wouldn't, but bare JSON objects carry no type
    result = roundtrip(codec, {"a": 1, "b": "c"})
    assert result == pmap({"a": 1, "b": "c"})
    assert isinstance(result, PMap)


def test_native_nesting_becomes_persistent(codec):
    result = roundtrip(codec, {"a": [1, {"b": 2}]})
    assert isinstance(result["a"], PVector)
    assert isinstance(result["a"][1], PMap)


def test_dict_with_non_str_keys(codec):
    assert codec.to_json({1: "a"}).startswith('["~#iM"')
    assert roundtrip(codec, {1: "a"}) == pmap({1: "a"})


def test_native_sets_become_psets(codec):
    assert roundtrip(codec, {1, 2}) == pset([1, 2])
    assert roundtrip(codec, frozenset(["x"])) == pset(["x"])


def test_functions_become_none(codec):
    def abc():
        pass

    result = roundtrip(codec, pmap({"a": abc, "b": 1, "c": lambda: None}))
    assert len(result) == 3
    assert result["a"] is None
    assert result["b"] == 1
    assert result["c"] is None


def test_builtin_callables_become_none(codec):
    assert roundtrip(codec, pvector([len, 1])) == pvector([None, 1])


def test_unknown_type_raises(codec):
    with pytest.raises(UnregisterableType):
        codec.to_json(pmap({"x": object()}))


def test_unknown_type_is_not_implemented(codec):
    with pytest.raises(NotImplementedError, match="unrecognized object"):
        codec.to_json(object())


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def to_map(self):
        return {"x": self.x, "y": self.y}


def test_to_map_fallback(codec):
    assert codec.to_json(Point(3, 4)).startswith('["~#iM"')
    assert roundtrip(codec, Point(3, 4)) == pmap({"x": 3, "y": 4})


def test_to_map_fallback_is_filtered(codec):
    result = roundtrip(codec.with_filter(lambda v, k: k != "y"), Point(3, 4))
    assert result == pmap({"x": 3})


def test_from_json_accepts_bytes(codec):
    assert codec.from_json(b'["~#iL",[1]]') == pvector([1])


def test_unicode(codec):
    data = pmap({"ключ": "値", "emoji": "🙂"})
    assert roundtrip(codec, data) == data


def test_module_level_codec():
    data = pmap({"a": pvector([1])})
    assert immutransit.from_json(immutransit.to_json(data)) == data
    assert immutransit.transit.records == pmap()


def test_with_filter_leaves_parent_untouched(codec):
    filtered = codec.with_filter(lambda v, k: k != "b")
    data = pmap({"a": 1, "b": 2})

    assert roundtrip(filtered, data) == pmap({"a": 1})
    assert roundtrip(codec, data) == data
    assert codec.config.predicate is None
    assert filtered is not codec


def test_with_filter_none_clears(codec):
    filtered = codec.with_filter(lambda v, k: False)
    assert roundtrip(filtered, pmap({"a": 1})) == pmap()
    assert roundtrip(filtered.with_filter(None), pmap({"a": 1})) == pmap({"a": 1})


def test_config_is_frozen(codec):
    with pytest.raises(dataclasses.FrozenInstanceError):
        codec.config.predicate = None  # type: ignore[misc]


def test_config_validates_callables():
    with pytest.raises(pydantic.ValidationError):
        CodecConfig(predicate=42)  # type: ignore[arg-type]


def test_config_defaults():
    config = CodecConfig()
    assert config.records == pmap()
    assert config.predicate is None


def test_repr(codec):
    assert repr(codec) == "Codec(records=[], filtered=False)"


def test_shared_codec_across_threads(codec):
    data = [pmap({"i": i, "l": pvector(range(i))}) for i in range(50)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda d: roundtrip(codec, d), data))
    assert results == data
