"""MCP (Model Context Protocol) protocol layer.

- Tool definitions for tools/list (tool_defs.py)
- Tool argument validation (validation.py)
- JSON-RPC dispatcher shared by the HTTP and stdio transports (transport.py)

Import from the submodules directly, e.g.:
    from es_mcp.mcp.transport import handle_message
"""
