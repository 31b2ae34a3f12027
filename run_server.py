#!/usr/bin/env python3
"""Run script for the Gaggiuino MCP server over stdio.

This script can be called from any directory using an absolute path.
It puts the package's src/ directory on the path so it also works from a
plain checkout.

Usage:
    python3 "/absolute/path/to/run_server.py"
    or
    ./run_server.py
"""

import sys
from pathlib import Path

# Use resolve() to handle any symlinks and get the absolute path
project_root = Path(__file__).resolve().parent
sys.path.insert(0, str(project_root / "src"))

if __name__ == "__main__":
    from gaggiuino_mcp.server import main
    main()
