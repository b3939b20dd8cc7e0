"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Recording and failing sinks for exercising stages.
- Console capture and metrics registry isolation.
"""

import io
import sys
from pathlib import Path
from typing import List

import pytest
from rich.console import Console

# Add src to path so we can import 'allcat' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from allcat.metrics.registry import registry  # noqa: E402
from allcat.utils.console import reset_console, set_console  # noqa: E402


class RecordingSink:
  """
  Final sink that remembers every write.
  """

  def __init__(self):
    self.writes: List[bytes] = []
    self.closed = 0
    self.flushed = 0

  def write(self, data) -> int:
    self.writes.append(bytes(data))
    return len(data)

  def flush(self) -> None:
    self.flushed += 1

  def close(self) -> None:
    self.closed += 1

  @property
  def data(self) -> bytes:
    return b"".join(self.writes)


class FailingSink(RecordingSink):
  """
  Accepts ``fail_after`` writes, then raises on every further write.
  """

  def __init__(self, fail_after: int = 0, error: Exception = None):
    super().__init__()
    self.fail_after = fail_after
    self.error = error or BrokenPipeError(32, "Broken pipe")

  def write(self, data) -> int:
    if len(self.writes) >= self.fail_after:
      raise self.error
    return super().write(data)


@pytest.fixture
def sink() -> RecordingSink:
  """A fresh recording sink."""
  return RecordingSink()


@pytest.fixture
def failing_sink():
  """Factory fixture building a `FailingSink`."""
  return FailingSink


@pytest.fixture
def captured_console():
  """
  Routes logging and console output into a buffer for the test duration.

  Yields:
      io.StringIO: The buffer receiving rendered log records.
  """
  buffer = io.StringIO()
  set_console(Console(file=buffer, width=200, color_system=None))
  yield buffer
  reset_console()


@pytest.fixture(autouse=True)
def reset_logging():
  """Restores the default stderr console and log level after each test."""
  yield
  reset_console()


@pytest.fixture(autouse=True)
def isolate_metrics_registry():
  """Ensures gauge values set by one test do not leak into another."""
  registry.reset()
  yield
  registry.reset()
