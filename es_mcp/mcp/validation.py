"""Tool argument validation.

Checks call arguments against a tool's input schema: required parameters,
unknown parameters, JSON types and enums. This is not a full JSON schema
validator; Elasticsearch validates the values it receives.
"""

from typing import Any

from ..errors import McpError

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
    "null": (type(None),),
}


def _matches_type(value: Any, json_type: str) -> bool:
    expected = _JSON_TYPES.get(json_type)
    if expected is None:
        return True  # Unknown type keyword: leave it to the backend
    if isinstance(value, bool) and json_type in ("integer", "number"):
        return False
    return isinstance(value, expected)


def validate_arguments(
    tool_name: str, schema: dict[str, Any], arguments: Any
) -> dict[str, Any]:
    """Validate `arguments` and return them with schema defaults applied.

    Raises:
        McpError: invalid params, describing the first problem found
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise McpError.invalid_params(f"Invalid parameter: {tool_name} arguments must be an object")

    properties: dict[str, dict[str, Any]] = schema.get("properties", {})

    unknown = [name for name in arguments if name not in properties]
    if unknown:
        raise McpError.invalid_params(
            f"Invalid parameter: unknown parameter(s) for {tool_name}: {', '.join(unknown)}"
        )

    missing = [name for name in schema.get("required", []) if name not in arguments]
    if missing:
        raise McpError.invalid_params(
            f"Invalid parameter: missing required parameter(s) for {tool_name}: {', '.join(missing)}"
        )

    validated = {}
    for name, prop in properties.items():
        if name not in arguments:
            if "default" in prop:
                validated[name] = prop["default"]
            continue

        value = arguments[name]
        json_type = prop.get("type")
        if json_type is not None:
            types = json_type if isinstance(json_type, list) else [json_type]
            if not any(_matches_type(value, t) for t in types):
                raise McpError.invalid_params(
                    f"Invalid parameter: '{name}' of {tool_name} must be of type {json_type}"
                )
        if "enum" in prop and value not in prop["enum"]:
            raise McpError.invalid_params(
                f"Invalid parameter: '{name}' of {tool_name} must be one of {prop['enum']}"
            )
        validated[name] = value

    return validated
