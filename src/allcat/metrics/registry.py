"""
Metrics Registry.

A small thread-safe gauge registry rendered in the Prometheus text exposition
format. The copy loop updates gauges from the main thread while the metrics
HTTP server reads them from its own thread, so every access goes through the
registry lock.
"""

import math
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class Gauge:
  """A named value that can go up and down."""

  name: str
  help: str
  value: float = 0.0


class MetricsRegistry:
  """
  Holds gauges by name.
  """

  def __init__(self):
    self._gauges: Dict[str, Gauge] = {}
    self._lock = threading.RLock()

  def gauge(self, name: str, help: str) -> Gauge:
    """
    Registers a gauge, or returns the existing one with the same name.

    Args:
        name (str): Metric name (``[a-zA-Z_:][a-zA-Z0-9_:]*``).
        help (str): One-line description shown in ``# HELP``.

    Returns:
        Gauge: The registered gauge.
    """
    with self._lock:
      if name not in self._gauges:
        self._gauges[name] = Gauge(name=name, help=help)
      return self._gauges[name]

  def set(self, name: str, value: float) -> None:
    """Sets the value of a registered gauge."""
    with self._lock:
      self._gauges[name].value = float(value)

  def get(self, name: str) -> Optional[float]:
    with self._lock:
      gauge = self._gauges.get(name)
      return gauge.value if gauge else None

  def reset(self) -> None:
    """Zeroes every gauge, keeping registrations."""
    with self._lock:
      for gauge in self._gauges.values():
        gauge.value = 0.0

  def render(self) -> str:
    """
    Renders all gauges in Prometheus text format, sorted by name.

    Returns:
        str: The exposition document, newline-terminated.
    """
    lines: List[str] = []
    with self._lock:
      for name in sorted(self._gauges):
        gauge = self._gauges[name]
        lines.append(f"# HELP {name} {gauge.help}")
        lines.append(f"# TYPE {name} gauge")
        lines.append(f"{name} {_format_value(gauge.value)}")
    return "\n".join(lines) + "\n" if lines else ""


def _format_value(value: float) -> str:
  if math.isnan(value):
    return "NaN"
  if math.isinf(value):
    return "+Inf" if value > 0 else "-Inf"
  return repr(value)


BANDWIDTH_HELP = "bandwidth of the copy to output process (bytes/second)"

registry = MetricsRegistry()
bandwidth_lifetime = registry.gauge("bandwidth_lifetime_bps", BANDWIDTH_HELP)
bandwidth_running = registry.gauge("bandwidth_running_bps", BANDWIDTH_HELP)
