"""
Non-Printable Escaping Stage (``-v``).

Rewrites bytes outside the printable ASCII range using caret and meta notation,
leaving LF and TAB untouched:

=====================  ============================
Byte                   Emitted as
=====================  ============================
0..31 (not LF, TAB)    ``^`` followed by byte + 64
32..126, LF, TAB       unchanged
127                    ``^?``
128..159               ``M-^`` followed by byte - 64
160..254               ``M-`` followed by byte - 128
255                    ``M-^?``
=====================  ============================

Each byte is classified on its own, so the stage is stateless across calls.
"""

from allcat.core.fields import is_nonprint, split_on_nonprint
from allcat.core.sink import BytesLike, Stage

_PASSTHROUGH = (ord("\n"), ord("\t"))


def escape_byte(c: int) -> bytes:
  """
  Returns the display form of a single byte value.

  Args:
      c (int): Byte value in 0..255.

  Returns:
      bytes: The caret/meta notation for ``c``, or ``c`` itself when printable.
  """
  if c < 32 and c not in _PASSTHROUGH:
    return bytes((ord("^"), c + 64))
  if c < 127:
    return bytes((c,))
  if c == 127:
    return b"^?"
  if c < 128 + 32:
    return b"M-^" + bytes((c - 128 + 64,))
  if c == 255:
    return b"M-^?"
  return b"M-" + bytes((c - 128,))


_ESCAPES = tuple(escape_byte(c) for c in range(256))


class NonprintEscaper(Stage):
  """Escapes control and high bytes with ``^`` and ``M-`` notation."""

  def write(self, data: BytesLike) -> int:
    data = bytes(data)
    n = 0

    for field in split_on_nonprint(data):
      c = field[-1]

      if not is_nonprint(c) or c in _PASSTHROUGH:
        self._emit(field, n, verbatim=True)
        n += len(field)
        continue

      self._emit(field[:-1], n, verbatim=True)
      n += len(field) - 1
      self._emit(_ESCAPES[c], n)
      n += 1

    return n
