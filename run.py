#!/usr/bin/env python3
"""
APIBank Entry Point

Starts the FastAPI server with the administrative service.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from apibank.api import run_server
from apibank.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting APIBank administration API...")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")

    try:
        run_server(host=config.api_host, port=config.api_port, debug=False)
    except KeyboardInterrupt:
        print("\nShutting down APIBank...")
