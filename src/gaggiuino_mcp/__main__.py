"""Entry point for running the MCP server with `python -m gaggiuino_mcp`."""

from gaggiuino_mcp.server import main

if __name__ == "__main__":
    main()
