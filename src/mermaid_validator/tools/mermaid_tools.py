"""Mermaid tools: validateMermaid and renderMermaid.

Both tools run the diagram through :class:`MermaidRenderer` and turn the
:class:`RenderResult` into MCP content items.  ``execute`` never raises:
anything unexpected becomes a single text item describing the error.
"""

from __future__ import annotations

import logging
from typing import Any, Union

from mcp.types import ImageContent, TextContent

from ..core.models import DEFAULT_FORMAT, OutputFormat, RenderRequest, RenderResult
from ..mermaid_renderer import MermaidRenderer
from .contracts import RENDER_MERMAID, VALIDATE_MERMAID, ToolContract

logger = logging.getLogger(__name__)

Content = Union[TextContent, ImageContent]

VALID_TEXT = "Mermaid diagram is valid"
INVALID_TEXT = "Mermaid diagram is invalid"
DETAILS_HEADER = "Detailed error output:\n"
UNEXPECTED_PREFIX = "Error processing Mermaid diagram: "


def text_content(text: str) -> TextContent:
    return TextContent(type="text", text=text)


def failure_content(error: str, details: str | None = None) -> list[Content]:
    """The error shape shared by both tools."""
    content: list[Content] = [text_content(INVALID_TEXT), text_content(error)]
    if details:
        content.append(text_content(DETAILS_HEADER + details))
    return content


class MermaidTool:
    """Common plumbing for the two Mermaid tools."""

    contract: ToolContract

    def __init__(self, renderer: MermaidRenderer | None = None) -> None:
        self.renderer = renderer or MermaidRenderer()

    @property
    def name(self) -> str:
        return self.contract.name

    async def execute(self, params: dict[str, Any]) -> list[Content]:
        errors = self.contract.validate_params(params)
        if errors:
            return failure_content("; ".join(errors))

        try:
            request = self.parse_request(params)
            result = await self.renderer.invoke(request.diagram, request.format)
            if not result.success:
                return failure_content(result.error or "", result.details)
            return self.success_content(result)
        except Exception as exc:
            logger.exception("%s failed unexpectedly", self.name)
            return [text_content(f"{UNEXPECTED_PREFIX}{exc}")]

    def parse_request(self, params: dict[str, Any]) -> RenderRequest:
        return RenderRequest(diagram=params["diagram"])

    def success_content(self, result: RenderResult) -> list[Content]:
        raise NotImplementedError


class ValidateMermaidTool(MermaidTool):
    """Check a diagram by rendering it; the image itself is thrown away."""

    contract = VALIDATE_MERMAID

    def success_content(self, result: RenderResult) -> list[Content]:
        return [text_content(VALID_TEXT)]


class RenderMermaidTool(MermaidTool):
    """Render a diagram and hand the image back to the client."""

    contract = RENDER_MERMAID

    def parse_request(self, params: dict[str, Any]) -> RenderRequest:
        fmt = OutputFormat(params.get("format") or DEFAULT_FORMAT)
        return RenderRequest(diagram=params["diagram"], format=fmt)

    def success_content(self, result: RenderResult) -> list[Content]:
        return [
            text_content(VALID_TEXT),
            ImageContent(type="image", data=result.encoded, mimeType=result.mime_type),
        ]
