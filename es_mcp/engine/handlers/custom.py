"""Custom tool handlers.

Custom tools are declared in the configuration file. Their arguments are not
interpolated here: ES|QL tools send them as named query parameters, search
template tools as template parameters, and Elasticsearch does the binding.
"""

from typing import Any

from ...elasticsearch import ElasticsearchClient, read_json
from ...models import EsqlTool, SearchTemplateTool
from .base import HandlerFunc, ToolResult
from .esql import esql_rows, shape_esql_result


async def run_esql_tool(
    tool: EsqlTool, params: dict[str, Any], client: ElasticsearchClient
) -> ToolResult:
    """Run the tool's query with `params` bound to its `?name` placeholders."""
    esql_params = [{name: value} for name, value in params.items()]
    response = await read_json(client.esql_query(tool.query, esql_params))
    return ToolResult(data=shape_esql_result(esql_rows(response), tool.format))


async def run_search_template_tool(
    tool: SearchTemplateTool, params: dict[str, Any], client: ElasticsearchClient
) -> ToolResult:
    """Render the template with `params` and return the search response as is."""
    response = await read_json(client.search_template(tool.request_body(params)))
    return ToolResult(data=response)


def custom_tool_handler(tool: EsqlTool | SearchTemplateTool) -> HandlerFunc:
    """Bind a configured tool to its handler."""
    if isinstance(tool, EsqlTool):

        async def handle(params: dict[str, Any], client: ElasticsearchClient) -> ToolResult:
            return await run_esql_tool(tool, params, client)

    else:

        async def handle(params: dict[str, Any], client: ElasticsearchClient) -> ToolResult:
            return await run_search_template_tool(tool, params, client)

    return handle
