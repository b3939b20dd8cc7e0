"""
Copy Bandwidth Measurement.

`BandwidthMeter` is fed the size of every chunk copied to the output and keeps
two gauges current:

- lifetime: total bytes divided by the time since the copy started.
- running: bytes over a sliding window of samples taken at a fixed interval
  (10 samples, 1 second apart by default).

Samples are taken by a daemon ticker thread between `start` and `stop`, so the
running rate falls to zero when the input stalls instead of holding the last
value.
"""

import threading
import time
from collections import deque
from typing import Callable, Deque, Optional, Tuple

from allcat.metrics.registry import MetricsRegistry, bandwidth_lifetime, bandwidth_running, registry


class BandwidthMeter:
  """Tracks the bandwidth of one copy operation."""

  def __init__(
    self,
    metrics: MetricsRegistry = registry,
    lifetime_name: str = bandwidth_lifetime.name,
    running_name: str = bandwidth_running.name,
    window: int = 10,
    interval: float = 1.0,
    clock: Callable[[], float] = time.monotonic,
    background: bool = True,
  ):
    """
    Args:
        metrics (MetricsRegistry): Registry holding both gauges.
        lifetime_name (str): Gauge receiving the whole-copy average.
        running_name (str): Gauge receiving the sliding-window rate.
        window (int): Number of intervals in the sliding window.
        interval (float): Seconds between window samples.
        clock (Callable[[], float]): Monotonic time source.
        background (bool): Run the sampling ticker thread. When False, the
            caller drives sampling through `sample`.
    """
    if window < 1:
      raise ValueError("window must be at least 1")
    if interval <= 0:
      raise ValueError("interval must be positive")
    self.metrics = metrics
    self.lifetime_name = lifetime_name
    self.running_name = running_name
    self.interval = interval
    self.background = background
    self._clock = clock
    self._lock = threading.Lock()
    self._start = None
    self._total = 0
    self._samples: Deque[Tuple[float, int]] = deque(maxlen=window + 1)
    self._stopped = threading.Event()
    self._ticker: Optional[threading.Thread] = None

  @property
  def total(self) -> int:
    return self._total

  @property
  def sampling(self) -> bool:
    """True while the ticker thread is running."""
    return self._ticker is not None and self._ticker.is_alive()

  def start(self) -> None:
    """Marks the beginning of the copy. Called implicitly by the first `update`."""
    self.stop()
    with self._lock:
      self._start = self._clock()
      self._total = 0
      self._samples.clear()
      self._samples.append((self._start, 0))

    if self.background:
      self._stopped.clear()
      self._ticker = threading.Thread(target=self._tick, name="allcat-bandwidth", daemon=True)
      self._ticker.start()

  def stop(self) -> None:
    """Stops the ticker thread, leaving the gauges at their last values."""
    self._stopped.set()
    if self._ticker is not None:
      self._ticker.join()
      self._ticker = None

  def update(self, n: int) -> None:
    """
    Records ``n`` more bytes copied and refreshes the lifetime gauge.

    Args:
        n (int): Bytes written by the latest chunk.
    """
    if self._start is None:
      self.start()

    with self._lock:
      self._total += n
      self._set_lifetime(self._clock())

  def sample(self) -> None:
    """
    Takes one window sample and refreshes both gauges.

    The ticker calls this every ``interval`` seconds; it runs whether or not
    bytes arrived since the previous sample.
    """
    with self._lock:
      if self._start is None:
        return
      now = self._clock()
      self._set_lifetime(now)

      self._samples.append((now, self._total))
      oldest_time, oldest_total = self._samples[0]
      span = now - oldest_time
      if span > 0:
        self.metrics.set(self.running_name, (self._total - oldest_total) / span)

  def _set_lifetime(self, now: float) -> None:
    elapsed = now - self._start
    if elapsed > 0:
      self.metrics.set(self.lifetime_name, self._total / elapsed)

  def _tick(self) -> None:
    while not self._stopped.wait(self.interval):
      self.sample()

  def __enter__(self) -> "BandwidthMeter":
    self.start()
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    self.stop()
