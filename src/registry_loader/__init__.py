"""Tolerant loader for MCP server registry import batches."""

__version__ = "0.1.0"
