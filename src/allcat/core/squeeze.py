"""
Blank Line Squeezing Stage (``-s``).

Collapses runs of consecutive empty lines into a single empty line. Whether the
previous line was blank, and whether the previous call stopped in the middle of
a line, are both carried between calls so that runs split across chunks are
squeezed exactly as if they had arrived in one piece.
"""

from allcat.core.fields import split_lines
from allcat.core.sink import BytesLike, Stage


class BlankSqueezer(Stage):
  """Suppresses repeated empty output lines."""

  def __init__(self, inner):
    super().__init__(inner)
    self._last_blank = False
    self._mid_line = False

  def write(self, data: BytesLike) -> int:
    data = bytes(data)
    n = 0

    for line in split_lines(data):
      if line[-1] != 0x0A:
        self._emit(line, n, verbatim=True)
        n += len(line)
        self._last_blank = False
        self._mid_line = True
        continue

      # A lone LF after a partial line terminates that line; it is not blank.
      if line == b"\n" and not self._mid_line:
        if self._last_blank:
          # Squeezed away, but still consumed from the input.
          n += 1
          continue

        self._emit(line, n, verbatim=True)
        n += 1
        self._last_blank = True
        continue

      self._emit(line, n, verbatim=True)
      n += len(line)
      self._last_blank = False
      self._mid_line = False

    return n
