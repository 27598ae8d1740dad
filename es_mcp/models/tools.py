"""Custom tool models.

A custom tool is declared in the configuration file under `tools.custom` and is
either an ES|QL query or a search template, selected by its `type` field:

    {
      "type": "esql",
      "description": "Count documents of a given kind",
      "query": "FROM logs | WHERE kind == ?kind | STATS count = COUNT(*)",
      "format": "value",
      "parameters": {"kind": {"type": "string", "description": "Document kind"}}
    }
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import EsqlResultFormat


class ToolAnnotations(BaseModel):
    """Behavioral hints attached to a tool definition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    title: str | None = None
    read_only_hint: bool | None = Field(default=None, alias="readOnlyHint")
    destructive_hint: bool | None = Field(default=None, alias="destructiveHint")
    idempotent_hint: bool | None = Field(default=None, alias="idempotentHint")
    open_world_hint: bool | None = Field(default=None, alias="openWorldHint")

    def to_mcp(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ToolBase(BaseModel):
    """Fields shared by every custom tool."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    description: str = Field(..., description="Tool description shown to the model")
    # Parameter name -> JSON schema. Insertion order is kept for display.
    parameters: dict[str, dict[str, Any]] = Field(default_factory=dict)
    annotations: ToolAnnotations | None = None


class EsqlTool(ToolBase):
    """A fixed ES|QL query, parameterized with named `?param` placeholders."""

    type: Literal["esql"] = "esql"
    query: str = Field(..., min_length=1)
    format: EsqlResultFormat = EsqlResultFormat.JSON


class SearchTemplateTool(ToolBase):
    """A stored search template (by id) or an inline template body."""

    type: Literal["search_template"] = "search_template"
    template_id: str | None = None
    template: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _exactly_one_template(self) -> "SearchTemplateTool":
        if (self.template_id is None) == (self.template is None):
            raise ValueError("exactly one of 'template_id' or 'template' must be set")
        return self

    def request_body(self, params: dict[str, Any]) -> dict[str, Any]:
        """Body of a `_search/template` request binding `params` to the template."""
        if self.template_id is not None:
            return {"id": self.template_id, "params": params}
        return {"source": self.template, "params": params}


CustomTool = Annotated[EsqlTool | SearchTemplateTool, Field(discriminator="type")]
