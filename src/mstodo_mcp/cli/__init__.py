"""Command-line interface for mstodo-mcp."""
