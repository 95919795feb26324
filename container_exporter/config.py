"""
Configuration for the Container Stats Exporter
"""
import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ExporterConfig(BaseModel):
    """Runtime configuration, read from the environment"""

    model_config = ConfigDict(validate_default=True)

    # HTTP listener
    host: str = Field(
        default_factory=lambda: os.getenv('EXPORTER_HOST', '0.0.0.0')
    )
    port: int = Field(
        default_factory=lambda: os.getenv('EXPORTER_PORT', '9099'),
        gt=0,
        lt=65536
    )

    # Docker daemon; None means docker.from_env()
    docker_base_url: Optional[str] = Field(
        default_factory=lambda: os.getenv('DOCKER_SOCKET_PATH') or None
    )
    docker_timeout: int = Field(
        default_factory=lambda: os.getenv('DOCKER_TIMEOUT', '60'),
        gt=0
    )
    # Connections to the daemon; one per concurrent container fetch
    docker_max_pool_size: int = Field(
        default_factory=lambda: os.getenv('DOCKER_MAX_POOL_SIZE', '64'),
        gt=0
    )

    log_level: str = Field(
        default_factory=lambda: os.getenv('LOG_LEVEL', 'INFO').upper()
    )
