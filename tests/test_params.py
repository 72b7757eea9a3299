"""Tests for params normalisation."""

import json
import weakref
from collections import OrderedDict
from dataclasses import dataclass, field

import pytest

from jsonrpc_http.jsonrpc import encode
from jsonrpc_http.params import is_composite, params


@dataclass
class Person:
    name: str
    age: int
    country: str


@dataclass
class Drink:
    name: str
    ingredients: list[str] = field(default_factory=list)


@dataclass
class Empty:
    pass


class Opaque:
    pass


ALEX = Person("Alex", 35, "Germany")


def wire(value):
    return encode(value).decode()


class TestOmission:
    def test_no_args_omits_params(self):
        assert params() is None

    def test_single_none_is_wrapped(self):
        assert params(None) == [None]

    def test_two_nones(self):
        assert params(None, None) == [None, None]


class TestScalars:
    @pytest.mark.parametrize("value", [123, 1.23, True, False, "Alex", 0, ""])
    def test_single_scalar_wrapped(self, value):
        assert params(value) == [value]

    def test_bytes_are_not_a_sequence(self):
        assert params(b"raw") == [b"raw"]

    def test_unclassifiable_object_wrapped(self):
        obj = Opaque()
        assert params(obj) == [obj]


class TestComposites:
    def test_list_passthrough(self):
        value = [1, 2, 3]
        assert params(value) is value

    def test_tuple_passthrough(self):
        assert params((1, 2)) == (1, 2)

    def test_dict_passthrough(self):
        named = {"name": "Alex", "age": 35}
        assert params(named) is named

    def test_other_mapping_passthrough(self):
        named = OrderedDict(age=35, name="Alex")
        assert params(named) is named

    def test_dataclass_passthrough(self):
        assert params(ALEX) is ALEX
        assert wire(params(ALEX)) == '{"name":"Alex","age":35,"country":"Germany"}'

    def test_set_is_composite(self):
        assert is_composite({1})
        assert params(frozenset()) == frozenset()

    def test_dataclass_type_is_not_composite(self):
        assert not is_composite(Person)
        assert params(Person) == [Person]

    def test_empty_containers_sent_literally(self):
        assert wire(params([])) == "[]"
        assert wire(params({})) == "{}"
        assert wire(params(Empty())) == "{}"

    def test_list_of_empty_objects(self):
        assert wire(params([Empty(), Empty()])) == "[{},{}]"

    def test_single_struct_in_list_stays_listed(self):
        assert wire(params([ALEX])) == '[{"name":"Alex","age":35,"country":"Germany"}]'


class TestReferences:
    def test_reference_is_followed(self):
        ref = weakref.ref(ALEX)
        assert params(ref) is ALEX

    def test_reference_to_mapping(self):
        class Named(dict):
            pass

        named = Named(name="Alex")
        assert params(weakref.ref(named)) is named

    def test_dead_reference_becomes_null(self):
        obj = Empty()
        ref = weakref.ref(obj)
        del obj
        assert params(ref) == [None]


class TestManyArgs:
    def test_mixed_args_always_listed(self):
        assert params("Alex", 35, True, None, 2.34) == ["Alex", 35, True, None, 2.34]

    def test_multiple_structs(self):
        drink = Drink("Cuba Libre", ["rum", "cola"])
        assert wire(params(ALEX, drink)) == (
            '[{"name":"Alex","age":35,"country":"Germany"},'
            '{"name":"Cuba Libre","ingredients":["rum","cola"]}]'
        )

    def test_composites_are_not_unwrapped_when_many(self):
        assert params([1], {"a": 1}) == [[1], {"a": 1}]


def test_nested_struct_encodes_as_object():
    @dataclass
    class Properties:
        distance: int
        color: str

    @dataclass
    class Planet:
        name: str
        properties: Properties

    mars = Planet("Mars", Properties(54600000, "red"))
    assert json.loads(wire(params(mars))) == {
        "name": "Mars",
        "properties": {"distance": 54600000, "color": "red"},
    }
