"""Run the Gaggiuino MCP server over streamable HTTP.

Host and port come from GAGGIUINO_MCP_HOST and GAGGIUINO_MCP_PORT. Set
GAGGIUINO_MCP_HOST=0.0.0.0 to accept connections from other hosts.
"""

if __name__ == "__main__":
    from gaggiuino_mcp.server import main_http

    main_http()
