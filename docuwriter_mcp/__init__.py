"""DocuWriter.ai MCP server: exposes the DocuWriter.ai API as MCP tools."""

__version__ = "1.0.0"
