import pytest

from es_mcp.engine.handlers import esql_rows, shape_esql_result
from es_mcp.models import EsqlResultFormat

JSON = EsqlResultFormat.JSON
VALUE = EsqlResultFormat.VALUE


def test_esql_rows():
    response = {
        "columns": [{"name": "host", "type": "keyword"}, {"name": "count", "type": "long"}],
        "values": [["a", 1], ["b", 2]],
    }
    assert esql_rows(response) == [{"host": "a", "count": 1}, {"host": "b", "count": 2}]


def test_esql_rows_empty():
    assert esql_rows({"columns": [{"name": "x", "type": "long"}], "values": []}) == []


@pytest.mark.parametrize(
    "rows,expected",
    [
        ({"a": 42}, 42),
        ({"a": 1, "b": 2}, {"a": 1, "b": 2}),
        ([{"a": 1}, {"a": 2}], [{"a": 1}, {"a": 2}]),
        ([{"count": 7}], 7),
        ({}, {}),
        ([], []),
    ],
)
def test_value_format(rows, expected):
    assert shape_esql_result(rows, VALUE) == expected


@pytest.mark.parametrize(
    "rows,expected",
    [
        ({"a": 42}, {"a": 42}),
        ([{"a": 1}], {"a": 1}),
        ([{"a": 1}, {"a": 2}], [{"a": 1}, {"a": 2}]),
    ],
)
def test_json_format(rows, expected):
    assert shape_esql_result(rows, JSON) == expected
