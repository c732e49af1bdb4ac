"""Allow running as ``python -m mstodo_mcp``."""

from mstodo_mcp.cli.main import main

if __name__ == "__main__":
    main()
