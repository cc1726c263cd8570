"""mcp-mermaid-validator: validate and render Mermaid diagrams over MCP."""

__version__ = "0.6.2"
