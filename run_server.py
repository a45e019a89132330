#!/usr/bin/env python3
"""
Convenience script to run the web API.

Usage:
    python run_server.py
    python run_server.py --port 8080
    python run_server.py --debug
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from smoothlm.training import configure_logging
from web.app import app

if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Run N-gram Model Web API')
    parser.add_argument('--host', default='127.0.0.1', help='Host to bind to')
    parser.add_argument('--port', type=int, default=5000, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')
    parser.add_argument('--log-level', default='INFO', help='Logging level')

    args = parser.parse_args()
    configure_logging(args.log_level)

    print(f"""
╔═══════════════════════════════════════════════════════╗
║     Smoothed N-gram Language Model API                ║
╠═══════════════════════════════════════════════════════╣
║  Listening on http://{args.host}:{args.port}                 ║
╚═══════════════════════════════════════════════════════╝
    """)

    app.run(host=args.host, port=args.port, debug=args.debug, threaded=True)
