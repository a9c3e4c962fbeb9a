#!/usr/bin/env python3
"""
Simple Bank Entry Point

Starts the FastAPI server with host, port and storage taken from the
SIMPLE_BANK_* environment (see simple_bank/config.py).
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from simple_bank.api import run_server
from simple_bank.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("🏦 Starting Simple Bank...")
    print(f"💾 Storage: {config.database_url}")
    print(f"🔒 Row lock timeout: {config.lock_timeout_seconds}s")
    print(f"🌐 API available at: http://localhost:{config.api_port}")
    print(f"📚 Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(debug="--debug" in sys.argv)
    except KeyboardInterrupt:
        print("\n👋 Shutting down Simple Bank...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
