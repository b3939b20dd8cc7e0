"""
Line Numbering Stage (``-n`` and ``-b``).

Prefixes lines with a right-justified, six column counter and a TAB. Two
variants exist and are mutually exclusive, so they are modelled as one stage
parameterised by `NumberingMode`:

- ``ALL`` numbers every line.
- ``NONBLANK`` skips empty lines without advancing the counter.

A chunk boundary may fall in the middle of a line. The stage remembers whether
the previous call ended mid-line and, if so, does not number the continuation.
"""

from enum import Enum

from allcat.core.fields import split_lines
from allcat.core.sink import BytesLike, Sink, Stage


class NumberingMode(str, Enum):
  """Which lines receive a number."""

  ALL = "all"
  NONBLANK = "nonblank"


def format_lineno(lineno: int) -> bytes:
  """Renders the prefix written before a numbered line."""
  return b"%6d\t" % lineno


class LineNumberer(Stage):
  """Numbers output lines according to a `NumberingMode`."""

  def __init__(self, inner: Sink, mode: NumberingMode = NumberingMode.ALL):
    """
    Args:
        inner (Sink): Sink receiving numbered output.
        mode (NumberingMode): Numbering variant, fixed for the stage lifetime.
    """
    super().__init__(inner)
    self.mode = NumberingMode(mode)
    self._lineno = 0
    self._suppress = False

  @property
  def lineno(self) -> int:
    """Number given to the most recently numbered line (0 before any)."""
    return self._lineno

  def write(self, data: BytesLike) -> int:
    data = bytes(data)
    n = 0

    for line in split_lines(data):
      suppress = self._suppress
      if self.mode is NumberingMode.NONBLANK and line == b"\n":
        suppress = True

      if not suppress:
        self._lineno += 1
        self._emit(format_lineno(self._lineno), n)

      self._emit(line, n, verbatim=True)
      n += len(line)

      self._suppress = line[-1] != 0x0A

    return n

  def __repr__(self) -> str:
    return f"LineNumberer(mode={self.mode.value!r}, lineno={self._lineno})"
