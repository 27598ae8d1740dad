"""Base infrastructure for tool handlers.

Each handler receives the validated call arguments and the Elasticsearch
client resolved for the request, and returns a ToolResult.
"""

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Coroutine

if TYPE_CHECKING:
    from ...elasticsearch import ElasticsearchClient


@dataclass
class ToolResult:
    """Result of a tool call.

    `data` is rendered as JSON text (strings are sent as is), preceded by an
    optional human-readable `summary` line.
    """

    data: Any
    summary: str | None = None

    def to_mcp(self) -> dict[str, Any]:
        content = []
        if self.summary:
            content.append({"type": "text", "text": self.summary})
        content.append({"type": "text", "text": render(self.data)})
        return {"content": content, "isError": False}


def render(data: Any) -> str:
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, default=str)


# Type alias for handler functions
HandlerFunc = Callable[
    [dict[str, Any], "ElasticsearchClient"],
    Coroutine[Any, Any, ToolResult],
]
