"""ES|QL result shaping, shared by the `esql` tool and ES|QL custom tools."""

from typing import Any

from ...models import EsqlResultFormat


def esql_rows(response: dict[str, Any]) -> list[dict[str, Any]]:
    """Convert an ES|QL `{columns, values}` response to a list of objects."""
    names = [column["name"] for column in response.get("columns", [])]
    return [dict(zip(names, row)) for row in response.get("values", [])]


def shape_esql_result(rows: Any, format: EsqlResultFormat = EsqlResultFormat.JSON) -> Any:
    """Shape ES|QL rows for output.

    - JSON: a single row is returned as an object, other results unchanged.
    - VALUE: additionally, a single object with a single property is reduced to
      that property's value. Any other shape is returned as with JSON.
    """
    result = rows
    if isinstance(result, list) and len(result) == 1:
        result = result[0]

    if format == EsqlResultFormat.VALUE and isinstance(result, dict) and len(result) == 1:
        return next(iter(result.values()))

    return result
