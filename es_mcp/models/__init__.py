"""Pydantic models for configuration and tools.

    from es_mcp.models import EsMcpConfig, EsqlTool, SearchTemplateTool
"""

from .config import DEFAULT_ES_URL, EsMcpConfig, Tools
from .enums import BaseToolName, EsqlResultFormat
from .tools import CustomTool, EsqlTool, SearchTemplateTool, ToolAnnotations, ToolBase

__all__ = [
    # Config
    "DEFAULT_ES_URL",
    "EsMcpConfig",
    "Tools",
    # Enums
    "BaseToolName",
    "EsqlResultFormat",
    # Tools
    "CustomTool",
    "EsqlTool",
    "SearchTemplateTool",
    "ToolAnnotations",
    "ToolBase",
]
