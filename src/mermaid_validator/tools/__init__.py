"""MCP tool contracts and adapters.

contracts      ToolContract / ToolParameter and the TOOL_REGISTRY
mermaid_tools  validateMermaid, renderMermaid
"""

from .contracts import RENDER_MERMAID, TOOL_REGISTRY, VALIDATE_MERMAID, ToolContract, ToolParameter
from .mermaid_tools import MermaidTool, RenderMermaidTool, ValidateMermaidTool

__all__ = [
    "ToolContract",
    "ToolParameter",
    "TOOL_REGISTRY",
    "VALIDATE_MERMAID",
    "RENDER_MERMAID",
    "MermaidTool",
    "ValidateMermaidTool",
    "RenderMermaidTool",
]
