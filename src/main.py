"""
Main Application Entry Point
===========================

Runs the Genify development server.
"""

import os
import sys

from genify.utils.logging_config import get_logging_config, setup_application_logging

logger = setup_application_logging(to_file=os.environ.get('LOG_TO_FILE', 'true').lower() == 'true')


def main():
    """Main application entry point."""
    from genify.factory import create_app

    # Clean up old logs at startup
    get_logging_config().cleanup_old_logs()

    config_name = os.environ.get('FLASK_ENV', 'development')
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '127.0.0.1')
    debug = os.environ.get('DEBUG', 'true').lower() == 'true'

    logger.info(f"Starting Genify in {config_name} mode")
    logger.info(f"Server will run on {host}:{port}")

    try:
        app = create_app(config_name)
        logger.info("Flask application created successfully")
    except Exception as e:
        logger.error(f"Failed to create Flask application: {e}")
        return 1

    # Streaming responses need a threaded server
    app.run(host=host, port=port, debug=debug, threaded=True, use_reloader=False)
    return 0


if __name__ == '__main__':
    sys.exit(main())
