"""
Per-scrape collection pipeline.

Each scrape lists the running containers, fetches one stats snapshot per
container on its own worker thread, and assembles the results into a fresh
CollectorRegistry. Worker threads only build local sample lists; the merge
into metric families happens on the calling thread after every worker has
finished.
"""

import logging
import time
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily, Metric

from container_exporter.docker_client import DockerRuntimeClient
from container_exporter.errors import StatsUnavailable
from container_exporter.metrics import (
    CONTAINER_FAMILIES,
    GATHERING_TIME,
    MetricFamilySpec,
    MetricSample,
    map_stats,
)
from container_exporter.models import SHORT_ID_LENGTH, ContainerRef, StatsSnapshot

logger = logging.getLogger(__name__)


def container_labels(container: ContainerRef) -> Dict[str, str]:
    """
    Build the labels shared by every sample of a container.

    Raises:
        StatsUnavailable: If the runtime handed out a short id or no name.
    """
    if len(container.id) < SHORT_ID_LENGTH:
        raise StatsUnavailable(f"Container id {container.id!r} is shorter than {SHORT_ID_LENGTH} characters")
    if not container.names:
        raise StatsUnavailable(f"Container {container.short_id} has no name")
    return {
        'id': container.short_id,
        'container_name': container.primary_name,
    }


def collect_container(client: DockerRuntimeClient, container: ContainerRef) -> Optional[List[MetricSample]]:
    """
    Fetch, decode and map one container's stats.

    All or nothing: returns the complete labeled sample list, or None when
    the container has to be skipped.

    Args:
        client: Runtime client shared by the scrape
        container: Container to collect

    Returns:
        List of MetricSample, or None on failure
    """
    try:
        payload = client.get_stats_snapshot(container.id)
        snapshot = StatsSnapshot.from_payload(payload)
        labels = container_labels(container)
    except StatsUnavailable as e:
        logger.warning(f"Skipping container {container.id[:SHORT_ID_LENGTH]} {container.names}: {e}")
        return None

    return [
        MetricSample(sample.name, {**labels, **sample.labels}, sample.value)
        for sample in map_stats(snapshot)
    ]


def _build_family(spec: MetricFamilySpec, samples: List[MetricSample]) -> Metric:
    # Samples keep the bare family name, so counters are exposed without a _total suffix
    family = Metric(spec.name, spec.documentation, spec.kind)
    for sample in samples:
        labels = {name: sample.labels[name] for name in spec.labelnames}
        family.add_sample(spec.name, labels, sample.value)
    return family


@dataclass(eq=False)
class ScrapeResult:
    """Samples gathered by one scrape pass, plus its timing"""
    samples: List[MetricSample] = field(default_factory=list)
    duration_ms: float = 0.0
    containers_total: int = 0
    containers_scraped: int = 0

    def collect(self) -> Iterator[Metric]:
        """Yield the metric families of this pass (prometheus_client Collector protocol)."""
        by_family = defaultdict(list)
        for sample in self.samples:
            by_family[sample.name].append(sample)

        for spec in CONTAINER_FAMILIES:
            family_samples = by_family.get(spec.name)
            if not family_samples:
                continue
            yield _build_family(spec, family_samples)

        yield GaugeMetricFamily(GATHERING_TIME.name, GATHERING_TIME.documentation, value=self.duration_ms)

    def registry(self) -> CollectorRegistry:
        """Build a fresh registry holding only this pass."""
        registry = CollectorRegistry(auto_describe=False)
        registry.register(self)
        return registry


class _SingleFamily:
    def __init__(self, family: Metric):
        self.family = family

    def collect(self) -> List[Metric]:
        return [self.family]


def render(registry: CollectorRegistry) -> bytes:
    """
    Render a registry in the Prometheus text format.

    Families are rendered one at a time; a family that fails exposition is
    logged and left out, the rest are still returned.
    """
    output = []
    for family in registry.collect():
        try:
            output.append(generate_latest(_SingleFamily(family)))
        except Exception as e:
            logger.error(f"Skipping metric family {family.name}: {e}")
    return b''.join(output)


class ScrapeCollector:
    """Runs one full collection pass per scrape."""

    def __init__(self, client_factory: Callable[[], DockerRuntimeClient]):
        """
        Args:
            client_factory: Returns a new runtime client; called once per scrape
        """
        self.client_factory = client_factory

    def scrape(self) -> ScrapeResult:
        """
        Collect metrics for every running container.

        Returns:
            ScrapeResult for this pass

        Raises:
            RuntimeUnavailable: If the runtime cannot be reached or listed
        """
        start_time = time.monotonic()
        logger.info("Collecting metrics from docker client...")

        with self.client_factory() as client:
            containers = client.list_running_containers()
            results = self._collect_all(client, containers)

        samples = []
        containers_scraped = 0
        for container_samples in results:
            if container_samples is None:
                continue
            containers_scraped += 1
            samples.extend(container_samples)

        duration_ms = (time.monotonic() - start_time) * 1000.0
        logger.info(
            f"Successfully scraped {containers_scraped}/{len(containers)} containers "
            f"in {duration_ms:.0f} ms"
        )

        return ScrapeResult(
            samples=samples,
            duration_ms=duration_ms,
            containers_total=len(containers),
            containers_scraped=containers_scraped,
        )

    def _collect_all(
        self,
        client: DockerRuntimeClient,
        containers: List[ContainerRef]
    ) -> List[Optional[List[MetricSample]]]:
        """Run collect_container for every container concurrently and join."""
        if not containers:
            return []

        # One worker per container, no cap
        with ThreadPoolExecutor(max_workers=len(containers), thread_name_prefix='container-stats') as executor:
            futures = []
            for container in containers:
                logger.info(f"Getting stats for {container.id[:SHORT_ID_LENGTH]} {container.names}")
                futures.append(executor.submit(collect_container, client, container))
            wait(futures)

        results = []
        for container, future in zip(containers, futures):
            error = future.exception()
            if error is not None:
                logger.error(
                    f"Unexpected error collecting container {container.id[:SHORT_ID_LENGTH]}: {error}",
                    exc_info=error
                )
                results.append(None)
            else:
                results.append(future.result())
        return results
