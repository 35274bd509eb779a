"""Stipend Calc MCP server."""
