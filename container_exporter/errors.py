"""Exceptions raised by the collection pipeline."""


class ExporterError(Exception):
    """Base class for exporter errors."""


class RuntimeUnavailable(ExporterError):
    """The container runtime cannot be reached or cannot list containers.

    Aborts the whole scrape.
    """


class StatsUnavailable(ExporterError):
    """A single container's stats snapshot cannot be fetched or decoded.

    Only that container is left out of the scrape.
    """
