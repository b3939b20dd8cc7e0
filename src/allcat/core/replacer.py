"""
Single-Byte Replacement Stage.

Implements both the end-of-line marker (``-E``) and the tab escaper (``-T``):
every occurrence of one separator byte is substituted by a fixed replacement
sequence, all other bytes pass through unchanged.
"""

from allcat.core.fields import split_on_byte
from allcat.core.sink import BytesLike, Sink, Stage

END_MARKER = b"$\n"
TAB_ESCAPE = b"^I"


class ByteReplacer(Stage):
  """
  Replaces a separator byte with a replacement sequence.

  The predicate is a single byte, so no state needs to be carried between
  calls: a chunk boundary can never split a match.
  """

  def __init__(self, inner: Sink, sep: int, replacement: bytes):
    """
    Args:
        inner (Sink): Sink receiving the rewritten stream.
        sep (int): Byte value to replace (e.g. ``ord("\\t")``).
        replacement (bytes): Sequence emitted in place of each separator.
    """
    super().__init__(inner)
    if not 0 <= sep <= 255:
      raise ValueError(f"Separator must be a single byte value, got {sep!r}")
    self.sep = sep
    self.replacement = bytes(replacement)

  def write(self, data: BytesLike) -> int:
    data = bytes(data)
    n = 0

    for field in split_on_byte(data, self.sep):
      if field[-1] != self.sep:
        self._emit(field, n, verbatim=True)
        n += len(field)
        continue

      self._emit(field[:-1], n, verbatim=True)
      n += len(field) - 1
      self._emit(self.replacement, n)
      n += 1

    return n

  def __repr__(self) -> str:
    return f"ByteReplacer(sep={bytes([self.sep])!r}, replacement={self.replacement!r})"


def end_marker(inner: Sink) -> ByteReplacer:
  """Builds the stage that displays ``$`` at the end of each line."""
  return ByteReplacer(inner, ord("\n"), END_MARKER)


def tab_escaper(inner: Sink) -> ByteReplacer:
  """Builds the stage that displays TAB characters as ``^I``."""
  return ByteReplacer(inner, ord("\t"), TAB_ESCAPE)
