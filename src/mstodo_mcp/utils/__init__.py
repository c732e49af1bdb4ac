"""Shared utilities (file writes, logging setup)."""
