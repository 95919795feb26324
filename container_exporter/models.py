"""
Pydantic models for container listings and stats snapshots

Only the fields the exporter maps are modelled. Missing fields and JSON nulls
decode to zero (or an empty mapping), anything of the wrong type fails
validation.
"""
from typing import Any, Dict, List
from pydantic import BaseModel, Field, ValidationError, field_validator

from container_exporter.errors import StatsUnavailable

SHORT_ID_LENGTH = 12


def _none_to_empty(value: Any, empty: Any) -> Any:
    return empty if value is None else value


class ContainerRef(BaseModel):
    """A running container as returned by the container list call"""
    id: str
    names: List[str] = Field(default_factory=list)

    @property
    def short_id(self) -> str:
        return self.id[:SHORT_ID_LENGTH]

    @property
    def primary_name(self) -> str:
        return self.names[0]


class CPUUsage(BaseModel):
    """Cumulative CPU time since container start"""
    usage_in_usermode: int = 0
    usage_in_kernelmode: int = 0
    total_usage: int = 0


class CPUStats(BaseModel):
    cpu_usage: CPUUsage = Field(default_factory=CPUUsage)

    @field_validator('cpu_usage', mode='before')
    @classmethod
    def _default_cpu_usage(cls, value):
        return _none_to_empty(value, {})


class MemoryStats(BaseModel):
    """Memory usage; `stats` holds the raw cgroup memory counters"""
    stats: Dict[str, int] = Field(default_factory=dict)
    max_usage: int = 0
    limit: int = 0

    @field_validator('stats', mode='before')
    @classmethod
    def _default_stats(cls, value):
        return _none_to_empty(value, {})

    def stat(self, key: str) -> int:
        """Return a cgroup memory counter, 0 when the runtime omits it."""
        return self.stats.get(key, 0)


class NetworkStats(BaseModel):
    """Per-interface counters, cumulative since the interface came up"""
    rx_bytes: int = 0
    rx_packets: int = 0
    rx_errors: int = 0
    rx_dropped: int = 0
    tx_bytes: int = 0
    tx_packets: int = 0
    tx_errors: int = 0
    tx_dropped: int = 0


class StatsSnapshot(BaseModel):
    """One point-in-time stats reading for a container"""
    cpu_stats: CPUStats = Field(default_factory=CPUStats)
    memory_stats: MemoryStats = Field(default_factory=MemoryStats)
    networks: Dict[str, NetworkStats] = Field(default_factory=dict)

    @field_validator('cpu_stats', 'memory_stats', 'networks', mode='before')
    @classmethod
    def _default_sections(cls, value):
        return _none_to_empty(value, {})

    @classmethod
    def from_payload(cls, payload: Any) -> 'StatsSnapshot':
        """
        Decode a raw stats payload from the Docker API

        Args:
            payload: Decoded JSON body of a non-streaming stats request

        Returns:
            StatsSnapshot

        Raises:
            StatsUnavailable: If the payload does not have the expected shape
        """
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise StatsUnavailable(f"Malformed stats payload: {e}") from e
