"""MCP tool contract definitions and registry.

Each tool the server exposes is described by a ``ToolContract`` that
specifies its name, description and parameter schema.  The
``TOOL_REGISTRY`` maps tool names → contracts so the server can list
the tools and validate arguments before dispatching.
"""

from __future__ import annotations

from typing import Any

from mcp.types import Tool
from pydantic import BaseModel, Field

from ..core.models import DEFAULT_FORMAT, OutputFormat


# ---------------------------------------------------------------------------
# Parameter & contract models
# ---------------------------------------------------------------------------

class ToolParameter(BaseModel):
    """Schema for a single parameter of a tool."""
    name: str
    type: str                       # JSON-schema type: "string", "integer", ...
    description: str = ""
    required: bool = True
    default: Any = None
    enum: list[str] | None = None   # allowed values (if constrained)

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        return schema


class ToolContract(BaseModel):
    """JSON-schema-style contract for an MCP tool."""
    name: str                       # e.g. "renderMermaid"
    description: str = ""
    parameters: list[ToolParameter] = Field(default_factory=list)

    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
        }

    def to_mcp_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )

    def validate_params(self, params: dict[str, Any]) -> list[str]:
        """Return a list of validation errors (empty = valid)."""
        errors: list[str] = []
        for p in self.parameters:
            if p.required and p.name not in params:
                errors.append(f"Missing required parameter: {p.name}")
                continue
            value = params.get(p.name)
            if value is None:
                continue
            if p.type == "string" and not isinstance(value, str):
                errors.append(f"Parameter '{p.name}' must be a string")
            elif p.enum and value not in p.enum:
                errors.append(
                    f"Parameter '{p.name}' must be one of {p.enum}, "
                    f"got '{value}'"
                )
        return errors


# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------

TOOL_REGISTRY: dict[str, ToolContract] = {}


def register_tool(contract: ToolContract) -> ToolContract:
    """Register a tool contract in the global registry."""
    TOOL_REGISTRY[contract.name] = contract
    return contract


_DIAGRAM = ToolParameter(
    name="diagram",
    type="string",
    description="Mermaid diagram source, e.g. 'graph TD; A-->B;'",
)

VALIDATE_MERMAID = register_tool(ToolContract(
    name="validateMermaid",
    description="Validates a Mermaid diagram and reports whether it is valid",
    parameters=[_DIAGRAM],
))

RENDER_MERMAID = register_tool(ToolContract(
    name="renderMermaid",
    description="Renders a Mermaid diagram to PNG or SVG and returns the image if the diagram is valid",
    parameters=[
        _DIAGRAM,
        ToolParameter(
            name="format",
            type="string",
            description="Output image format",
            required=False,
            default=DEFAULT_FORMAT.value,
            enum=[f.value for f in OutputFormat],
        ),
    ],
))
