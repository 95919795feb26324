"""
Docker API client for collecting container statistics.

This module wraps the Docker SDK's low-level API to list running containers
and fetch single stats snapshots, translating SDK and transport errors into
the exporter's error types.
"""

import logging
from typing import Any, Dict, List, Optional

import docker
from docker.errors import DockerException, NotFound
from pydantic import ValidationError
from requests.exceptions import RequestException

from container_exporter.errors import RuntimeUnavailable, StatsUnavailable
from container_exporter.models import ContainerRef

logger = logging.getLogger(__name__)


class DockerRuntimeClient:
    """Lists containers and reads their stats from the Docker daemon."""

    def __init__(self, base_url: Optional[str] = None, timeout: int = 60, max_pool_size: int = 64):
        """
        Initialize the Docker client.

        Args:
            base_url: Optional Docker socket URL. If None, uses the environment.
            timeout: HTTP timeout in seconds for every Docker API call.
            max_pool_size: HTTP connections kept to the daemon. Every container
                fetch of a scrape runs concurrently on this one client.

        Raises:
            RuntimeUnavailable: If the client cannot be configured.
        """
        try:
            if base_url:
                self.client = docker.DockerClient(base_url=base_url, timeout=timeout, max_pool_size=max_pool_size)
            else:
                self.client = docker.from_env(timeout=timeout, max_pool_size=max_pool_size)
        except DockerException as e:
            raise RuntimeUnavailable(f"Failed to create Docker client: {e}") from e

    def __enter__(self) -> 'DockerRuntimeClient':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def list_running_containers(self) -> List[ContainerRef]:
        """
        Get the running containers, in the order the daemon returns them.

        Returns:
            List of ContainerRef.

        Raises:
            RuntimeUnavailable: If the daemon is unreachable or the call fails.
        """
        try:
            entries = self.client.api.containers()
        except (DockerException, RequestException) as e:
            raise RuntimeUnavailable(f"Failed to list containers: {e}") from e

        try:
            containers = [
                ContainerRef(id=entry['Id'], names=entry.get('Names') or [])
                for entry in entries
            ]
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise RuntimeUnavailable(f"Malformed container list: {e}") from e
        logger.debug(f"Found {len(containers)} running containers")
        return containers

    def get_stats_snapshot(self, container_id: str) -> Dict[str, Any]:
        """
        Get one stats snapshot for a container.

        Args:
            container_id: Full container ID.

        Returns:
            Decoded JSON stats payload.

        Raises:
            StatsUnavailable: If the stats cannot be fetched or parsed.
        """
        try:
            # stream=False returns a single snapshot
            return self.client.api.stats(container_id, stream=False)
        except NotFound as e:
            raise StatsUnavailable(f"Container {container_id} not found") from e
        except (DockerException, RequestException, ValueError) as e:
            raise StatsUnavailable(f"Failed to get stats for {container_id}: {e}") from e

    def close(self):
        """Close the Docker client connection."""
        self.client.close()
