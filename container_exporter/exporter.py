"""
Main Container Stats Exporter application.

This module implements the HTTP server that runs a full collection pass on
every scrape and exposes the result in Prometheus format.
"""

import sys
import logging
import signal
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask, Response
from prometheus_client import CONTENT_TYPE_LATEST

from container_exporter import __version__
from container_exporter.collector import ScrapeCollector, render
from container_exporter.config import ExporterConfig
from container_exporter.docker_client import DockerRuntimeClient
from container_exporter.errors import RuntimeUnavailable

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = 'INFO'):
    """Configure root logging to stdout."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def create_app(
    config: ExporterConfig,
    client_factory: Optional[Callable[[], DockerRuntimeClient]] = None
) -> Flask:
    """
    Create the Flask app serving /metrics.

    Args:
        config: Exporter configuration
        client_factory: Optional runtime client factory, defaults to a
            DockerRuntimeClient built from config

    Returns:
        Flask application
    """
    if client_factory is None:
        def client_factory():
            return DockerRuntimeClient(
                config.docker_base_url,
                timeout=config.docker_timeout,
                max_pool_size=config.docker_max_pool_size
            )

    scrape_collector = ScrapeCollector(client_factory)
    app = Flask(__name__)

    @app.route('/metrics')
    def metrics_endpoint():
        """Prometheus metrics endpoint."""
        try:
            result = scrape_collector.scrape()
        except RuntimeUnavailable as e:
            logger.error(f"Scrape failed: {e}")
            return Response("container runtime unavailable\n", status=503, mimetype='text/plain')
        return Response(render(result.registry()), mimetype=CONTENT_TYPE_LATEST)

    return app


def _signal_handler(signum, frame):
    """Handle shutdown signals."""
    logger.info(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def main():
    """Main entry point."""
    load_dotenv()
    config = ExporterConfig()
    configure_logging(config.log_level)

    logger.info(f"Container Stats Exporter v{__version__}")
    logger.info(f"Configuration: host={config.host}, port={config.port}, docker_timeout={config.docker_timeout}s")

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    app = create_app(config)

    logger.info(f"Metrics available at http://{config.host}:{config.port}/metrics")
    try:
        app.run(host=config.host, port=config.port, threaded=True)
    except OSError as e:
        logger.error(f"Failed to start HTTP server: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
