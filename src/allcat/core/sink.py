"""
Sink Capability and Stage Base Class.

Every point of the output pipeline is a *sink*: something that accepts byte
chunks via ``write`` and can be closed. Transformation stages are sinks that
wrap another sink (the ``inner`` sink) and forward their rewritten output to it,
so stages compose by wrapping.

Failures from an inner sink are reported as `SinkError`, which records how many
input bytes the failing stage had already accepted when the failure happened.
"""

from typing import Protocol, Union, runtime_checkable

BytesLike = Union[bytes, bytearray, memoryview]


@runtime_checkable
class Sink(Protocol):
  """
  Structural type for anything that accepts byte chunks.

  Binary file objects (``sys.stdout.buffer``, ``open(path, "wb")``) satisfy it,
  as does every `Stage`.
  """

  def write(self, data: BytesLike) -> int: ...

  def close(self) -> None: ...


class SinkError(OSError):
  """
  Raised when a write into an inner sink fails.

  Attributes:
      accepted (int): Input bytes logically consumed by the raising sink before
          the failure. Bytes already forwarded are never rolled back.
  """

  def __init__(self, accepted: int, message: str = "inner sink write failed"):
    super().__init__(message)
    self.accepted = accepted

  def __str__(self) -> str:
    cause = self.__cause__
    if cause is not None:
      return f"{self.args[0]}: {cause} ({self.accepted} bytes accepted)"
    return f"{self.args[0]} ({self.accepted} bytes accepted)"


class Stage:
  """
  Base class for transformation stages.

  A stage owns a reference to its inner sink but never closes it on its own:
  `close` is delegated down the chain when the orchestration layer closes the
  outermost sink. Subclasses implement `write` and report the number of input
  bytes consumed, which on success is always ``len(data)``.
  """

  def __init__(self, inner: Sink):
    """
    Args:
        inner (Sink): The next sink in the chain.
    """
    self.inner = inner

  def write(self, data: BytesLike) -> int:
    raise NotImplementedError

  def _emit(self, chunk: bytes, accepted: int, verbatim: bool = False) -> None:
    """
    Forwards all of ``chunk`` to the inner sink, repeating short writes.

    Args:
        chunk: Bytes to forward. Empty chunks are skipped.
        accepted: Input bytes consumed by this stage so far in the current call.
        verbatim: True when ``chunk`` is unmodified input, in which case any
            partial acceptance reported by the inner sink counts as consumed.

    Raises:
        SinkError: If the inner sink fails or stops accepting bytes.
    """
    done = 0
    while done < len(chunk):
      try:
        written = self.inner.write(chunk[done:])
      except OSError as exc:
        partial = (done + getattr(exc, "accepted", 0)) if verbatim else 0
        raise SinkError(accepted + partial) from exc
      if not written:
        raise SinkError(accepted + (done if verbatim else 0), "inner sink accepted no bytes")
      done += written

  def flush(self) -> None:
    flush = getattr(self.inner, "flush", None)
    if flush is not None:
      flush()

  def close(self) -> None:
    """Closes the inner sink. Errors from the inner sink propagate unchanged."""
    self.inner.close()

  def __repr__(self) -> str:
    return f"{type(self).__name__}()"

  def __enter__(self) -> "Stage":
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    self.close()
