"""Logging utilities and helpers.

This package provides logging infrastructure for mstodo-mcp:
- formatters: Console (stderr) and JSONL file formatters
- logger_setup: configure_logging() and get_logger()

Import directly from submodules:
    from mstodo_mcp.utils.logging.logger_setup import get_logger
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
