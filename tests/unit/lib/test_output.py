from dataclasses import dataclass

from agency.lib.output import to_jsonable


@dataclass
class _Row:
    id: str
    count: int


def test_dataclass_becomes_dict():
    assert to_jsonable(_Row("a", 1)) == {"id": "a", "count": 1}


def test_list_of_dataclasses():
    assert to_jsonable([_Row("a", 1), _Row("b", 2)]) == [
        {"id": "a", "count": 1},
        {"id": "b", "count": 2},
    ]


def test_plain_values_pass_through():
    assert to_jsonable({"id": "a"}) == {"id": "a"}
    assert to_jsonable("text") == "text"
