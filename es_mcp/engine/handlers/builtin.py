"""Built-in tool handlers.

Handles:
- list_indices: List indices matching a pattern
- get_mappings: Get the field mappings of an index
- search: Run a query DSL search
- esql: Run an ES|QL query
- get_shards: List shards of all or one index
"""

from typing import Any

from ...elasticsearch import ElasticsearchClient, read_json
from .base import ToolResult
from .esql import esql_rows


async def handle_list_indices(params: dict[str, Any], client: ElasticsearchClient) -> ToolResult:
    """List indices matching `index_pattern`, with health, status and doc count."""
    response = await read_json(client.cat_indices(params["index_pattern"]))

    indices = [
        {
            "index": entry.get("index"),
            "health": entry.get("health"),
            "status": entry.get("status"),
            "docs_count": entry.get("docs.count"),
        }
        for entry in response
    ]
    return ToolResult(data=indices, summary=f"Found {len(indices)} indices:")


async def handle_get_mappings(params: dict[str, Any], client: ElasticsearchClient) -> ToolResult:
    index = params["index"]
    response = await read_json(client.get_mapping(index))

    # Keyed by concrete index name, which differs from `index` for aliases
    mappings = {name: body.get("mappings", {}) for name, body in response.items()}
    if len(mappings) == 1:
        mappings = next(iter(mappings.values()))
    return ToolResult(data=mappings, summary=f"Mappings for index {index}:")


def text_fields(mappings: dict[str, Any]) -> list[str]:
    """Names of the top-level `text` fields of the indices in a mapping response."""
    fields: dict[str, None] = {}
    for body in mappings.values():
        properties = body.get("mappings", {}).get("properties", {})
        for name, field in properties.items():
            if field.get("type") == "text":
                fields[name] = None
    return list(fields)


def highlighted_document(hit: dict[str, Any]) -> dict[str, Any]:
    """A hit's highlighted fields (fragments joined), then its other source fields."""
    highlights = hit.get("highlight") or {}
    document = {
        f"{field} (highlighted)": " ... ".join(fragments)
        for field, fragments in highlights.items()
        if fragments
    }
    for field, value in (hit.get("_source") or {}).items():
        if field not in highlights:
            document[field] = value
    return document


async def handle_search(params: dict[str, Any], client: ElasticsearchClient) -> ToolResult:
    """Search `index` with `query_body`, optionally limiting returned fields.

    Matches in the text fields of the index are always highlighted, unless
    the query body asks for its own highlighting.

    Returns:
        ToolResult with the documents and aggregations, if any
    """
    index = params["index"]
    body = dict(params["query_body"])
    fields = params.get("fields")
    if fields:
        body["_source"] = fields

    if "highlight" not in body:
        mappings = await read_json(client.get_mapping(index))
        highlight_fields = text_fields(mappings)
        if highlight_fields:
            body["highlight"] = {
                "fields": {name: {} for name in highlight_fields},
                "pre_tags": ["<em>"],
                "post_tags": ["</em>"],
            }

    response = await read_json(client.search(index, body))

    hits = response.get("hits", {})
    total = hits.get("total", {})
    total_value = total.get("value", 0) if isinstance(total, dict) else total
    documents = [highlighted_document(hit) for hit in hits.get("hits", [])]

    data: dict[str, Any] = {"documents": documents}
    if "aggregations" in response:
        data["aggregations"] = response["aggregations"]

    return ToolResult(
        data=data,
        summary=(
            f"Total results: {total_value}, showing {len(documents)} "
            f"from position {body.get('from', 0)}."
        ),
    )


async def handle_esql(params: dict[str, Any], client: ElasticsearchClient) -> ToolResult:
    response = await read_json(client.esql_query(params["query"]))
    rows = esql_rows(response)
    return ToolResult(data=rows, summary=f"Found {len(rows)} rows:")


async def handle_get_shards(params: dict[str, Any], client: ElasticsearchClient) -> ToolResult:
    response = await read_json(client.cat_shards(params.get("index")))
    return ToolResult(data=response, summary=f"Found {len(response)} shards:")
