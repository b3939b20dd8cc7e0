"""
Copy Loop.

Moves bytes from a `Source` into the head of the transformation chain, one
chunk per write, feeding an optional `BandwidthMeter`.
"""

from typing import Optional

from allcat.config import DEFAULT_CHUNK_SIZE
from allcat.core.sink import Sink, SinkError
from allcat.metrics.bandwidth import BandwidthMeter
from allcat.sources import Source


class CopyError(OSError):
  """
  Raised when a copy stops early.

  Attributes:
      copied (int): Bytes accepted by the output before the failure.
      cause (OSError): The underlying `SinkError` or `SourceError`.
  """

  def __init__(self, copied: int, cause: OSError):
    super().__init__(str(cause))
    self.copied = copied
    self.cause = cause

  @property
  def output_failed(self) -> bool:
    """True when the output sink failed, which ends the whole run."""
    return isinstance(self.cause, SinkError)


def copy_stream(
  out: Sink,
  source: Source,
  chunk_size: int = DEFAULT_CHUNK_SIZE,
  meter: Optional[BandwidthMeter] = None,
) -> int:
  """
  Copies ``source`` into ``out`` until end of input.

  Args:
      out (Sink): Head of the chain.
      source (Source): Input to drain.
      chunk_size (int): Maximum bytes per read.
      meter (Optional[BandwidthMeter]): Receives the size of every chunk; its
          sampling runs for the duration of the copy.

  Returns:
      int: Total bytes copied.

  Raises:
      CopyError: If reading or writing fails.
  """
  copied = 0
  if meter is not None:
    meter.start()

  try:
    for chunk in source.iter_chunks(chunk_size):
      try:
        n = out.write(chunk)
      except SinkError as e:
        copied += e.accepted
        raise
      except OSError as e:
        raise SinkError(0) from e
      copied += n
      if meter is not None:
        meter.update(n)
  except OSError as e:
    raise CopyError(copied, e) from e
  finally:
    if meter is not None:
      meter.stop()

  return copied
