#!/usr/bin/env python3
"""
GCS Live Map Server - Entry Point

Holds the map session and exposes the event API over HTTP.
"""

import argparse
import signal
import sys
import time
import logging

from ..config import Config, set_config
from ..overlay import MapSession, RecordingSurface
from ..utils.geo import LatLng
from ..utils.logger import EventJournal, setup_logging

# Global instances for signal handling
_api_server = None
_journal = None


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully"""
    logging.info(f"Received signal {signum}, shutting down...")
    shutdown()
    sys.exit(0)


def shutdown():
    global _api_server, _journal

    if _api_server is not None:
        _api_server.stop()
        _api_server = None
    if _journal is not None:
        _journal.stop()
        _journal = None


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="GCS Live Map Server",
        prog="gcs-map-server"
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to configuration file (YAML)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="REST API port (default: from config, 8080)"
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="REST API host (default: from config, 0.0.0.0)"
    )

    parser.add_argument(
        "--journal-dir",
        type=str,
        default=None,
        help="Record applied events to a JSON-lines journal in this directory"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file path"
    )

    return parser.parse_args(argv)


def build_session(config: Config) -> MapSession:
    """Map session on an in-memory surface served to browser clients"""
    surface = RecordingSurface(
        center=LatLng(config.map.center_lat, config.map.center_lng),
        zoom=config.map.initial_zoom,
    )
    return MapSession(surface, config)


def main(argv=None):
    """Main entry point for gcs-map-server"""
    global _api_server, _journal

    args = parse_args(argv)

    # Load configuration
    config = Config.load(args.config)

    # Override config from command line
    if args.port is not None:
        config.interface.rest_port = args.port
    if args.host is not None:
        config.interface.rest_host = args.host
    if args.journal_dir is not None:
        config.interface.journal_dir = args.journal_dir
    if args.log_file is not None:
        config.interface.log_file = args.log_file

    # Setup logging
    log_level = logging.DEBUG if args.verbose else config.interface.log_level
    setup_logging(level=log_level, log_file=config.interface.log_file or None)

    logger = logging.getLogger(__name__)
    logger.info("GCS Live Map Server starting...")

    set_config(config)

    # Setup signal handlers
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if not config.interface.rest_enabled:
        logger.error("REST API disabled in configuration, nothing to serve")
        return 1

    session = build_session(config)

    if config.interface.journal_dir:
        _journal = EventJournal(config.interface.journal_dir)
        _journal.start("gcs-map")

    from .api import create_api_server
    _api_server = create_api_server(
        session,
        port=config.interface.rest_port,
        host=config.interface.rest_host,
        journal=_journal,
    )
    logger.info(f"REST API listening on http://{config.interface.rest_host}:{config.interface.rest_port}")
    logger.info("Server running. Press Ctrl+C to stop.")

    # Main loop - keep alive
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("Shutting down...")
        shutdown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
