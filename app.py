#!/usr/bin/env python3
"""
Run script for the warranty tracker
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from warranty_tracker import create_app
from warranty_tracker.build import build_database
from warranty_tracker.logger import get_logger

# Run 'python generate_env.py' to create a .env file with a secret key and
# the admin password.

logger = get_logger("warranty_tracker.run")


def parse_arguments():
    parser = argparse.ArgumentParser(description='Warranty and maintenance tracker')
    parser.add_argument('--build-only', action='store_true',
                        help='Create the database tables and admin user, then exit')
    parser.add_argument('--demo-data', action='store_true',
                        help='Insert demo customers, equipment and maintenance orders for the admin user')
    parser.add_argument('--host', default=os.environ.get('FLASK_HOST', '127.0.0.1'),
                        help='Server host (default: FLASK_HOST or 127.0.0.1)')
    parser.add_argument('--port', type=int, default=int(os.environ.get('FLASK_PORT', '5000')),
                        help='Server port (default: FLASK_PORT or 5000)')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    app = create_app()
    build_database(app, demo_data=args.demo_data)

    if args.build_only:
        logger.info("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {args.host}:{args.port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=args.host, port=args.port, use_reloader=use_reloader)
