"""
Container Stats Exporter for Prometheus

Lists the running containers on a host on every scrape, pulls one stats
snapshot per container from the Docker API and exposes CPU, memory and
network usage as labeled Prometheus metrics.
"""

__version__ = "1.0.0"
