"""
Prometheus metric definitions and the stats-to-metrics mapping.

Metric families are described here and instantiated per scrape (see
collector.py), so no metric state lives on a global registry.
"""

from typing import Dict, List, NamedTuple, Tuple

from container_exporter.models import StatsSnapshot

COUNTER = 'counter'
GAUGE = 'gauge'

# Labels attached to every container-scoped sample
CONTAINER_LABELS = ('id', 'container_name')


class MetricFamilySpec(NamedTuple):
    name: str
    documentation: str
    kind: str
    labelnames: Tuple[str, ...]


class MetricSample(NamedTuple):
    name: str
    labels: Dict[str, str]
    value: float


def _family(name: str, documentation: str, kind: str, *labelnames: str) -> MetricFamilySpec:
    return MetricFamilySpec(name, documentation, kind, CONTAINER_LABELS + labelnames)


# CPU metrics
# Cumulative CPU time per mode, as reported by the runtime
CPU_USAGE = _family('cpu_usage', 'Total cpu usage in seconds', COUNTER, 'mode', 'cpu')

# Memory metrics
MEMORY_USAGE_BYTES = _family('memory_usage_bytes', 'Total memory usage in bytes', GAUGE, 'type')

# Network metrics - Transmit
NETWORK_TRANSMIT_BYTES = _family(
    'network_transmit_bytes', 'Total bytes transmitted', GAUGE, 'name')
NETWORK_TRANSMIT_PACKETS = _family(
    'network_transmit_packets', 'Total packets transmitted', GAUGE, 'name')
NETWORK_TRANSMIT_DROPPED = _family(
    'network_transmit_dropped_packets', 'Total packets dropped on transmit', GAUGE, 'name')
NETWORK_TRANSMIT_ERRORS = _family(
    'network_transmit_errors', 'Total transmit errors', GAUGE, 'name')

# Network metrics - Receive
NETWORK_RECEIVE_BYTES = _family(
    'network_receive_bytes', 'Total received bytes', GAUGE, 'name')
NETWORK_RECEIVE_PACKETS = _family(
    'network_receive_packets', 'Total received packets', GAUGE, 'name')
NETWORK_RECEIVE_DROPPED = _family(
    'network_receive_dropped_packets', 'Total dropped packets on receive', GAUGE, 'name')
NETWORK_RECEIVE_ERRORS = _family(
    'network_receive_errors', 'Total receive errors', GAUGE, 'name')

# Exporter metrics
# Wall-clock milliseconds spent gathering one scrape
GATHERING_TIME = MetricFamilySpec(
    'process_metrics_gathering_time',
    'Time took gathering metrics from docker',
    GAUGE,
    ()
)

CONTAINER_FAMILIES = (
    CPU_USAGE,
    MEMORY_USAGE_BYTES,
    NETWORK_TRANSMIT_BYTES,
    NETWORK_TRANSMIT_PACKETS,
    NETWORK_TRANSMIT_DROPPED,
    NETWORK_TRANSMIT_ERRORS,
    NETWORK_RECEIVE_BYTES,
    NETWORK_RECEIVE_PACKETS,
    NETWORK_RECEIVE_DROPPED,
    NETWORK_RECEIVE_ERRORS,
)

# (family, NetworkStats attribute)
_NETWORK_FIELDS = (
    (NETWORK_TRANSMIT_BYTES, 'tx_bytes'),
    (NETWORK_TRANSMIT_PACKETS, 'tx_packets'),
    (NETWORK_TRANSMIT_DROPPED, 'tx_dropped'),
    (NETWORK_TRANSMIT_ERRORS, 'tx_errors'),
    (NETWORK_RECEIVE_BYTES, 'rx_bytes'),
    (NETWORK_RECEIVE_PACKETS, 'rx_packets'),
    (NETWORK_RECEIVE_DROPPED, 'rx_dropped'),
    (NETWORK_RECEIVE_ERRORS, 'rx_errors'),
)


def map_stats(snapshot: StatsSnapshot) -> List[MetricSample]:
    """
    Map a stats snapshot to metric samples.

    The samples carry only their metric-specific labels; the caller adds the
    container labels. Values are the snapshot values as-is, so counters stay
    cumulative and rates are left to the scraping system.

    Args:
        snapshot: Decoded stats snapshot

    Returns:
        List of MetricSample
    """
    cpu = snapshot.cpu_stats.cpu_usage
    memory = snapshot.memory_stats

    samples = [
        MetricSample(CPU_USAGE.name, {'mode': 'user', 'cpu': 'all'}, float(cpu.usage_in_usermode)),
        MetricSample(CPU_USAGE.name, {'mode': 'kernel', 'cpu': 'all'}, float(cpu.usage_in_kernelmode)),
        MetricSample(CPU_USAGE.name, {'mode': 'total', 'cpu': 'all'}, float(cpu.total_usage)),
        MetricSample(MEMORY_USAGE_BYTES.name, {'type': 'active'}, float(memory.stat('active_anon'))),
        MetricSample(MEMORY_USAGE_BYTES.name, {'type': 'total'},
                     float(memory.stat('hierarchical_memory_limit'))),
        MetricSample(MEMORY_USAGE_BYTES.name, {'type': 'max'}, float(memory.max_usage)),
        MetricSample(MEMORY_USAGE_BYTES.name, {'type': 'limit'}, float(memory.limit)),
    ]

    for interface, counters in snapshot.networks.items():
        for family, field in _NETWORK_FIELDS:
            samples.append(MetricSample(family.name, {'name': interface}, float(getattr(counters, field))))

    return samples
