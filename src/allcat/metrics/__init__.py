"""
Metrics Package.

Bandwidth gauges for the copy loop and the HTTP endpoint that publishes them.
The server module (FastAPI/uvicorn) is imported lazily by the CLI, only when
metrics are enabled.
"""

from allcat.metrics.bandwidth import BandwidthMeter
from allcat.metrics.registry import Gauge, MetricsRegistry, bandwidth_lifetime, bandwidth_running, registry

__all__ = [
  "BandwidthMeter",
  "Gauge",
  "MetricsRegistry",
  "bandwidth_lifetime",
  "bandwidth_running",
  "registry",
]
