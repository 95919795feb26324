"""
Shared test fixtures for the container stats exporter tests.

This package provides:
- sample_data: Builders for Docker API payloads (container lists, stats)
- mock_runtime: In-memory stand-in for the Docker runtime client
"""

from tests.fixtures import sample_data, mock_runtime
