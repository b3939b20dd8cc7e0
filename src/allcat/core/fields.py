"""
Field Splitting.

Partitions a byte chunk into contiguous spans, each ending exactly on a byte
that matches a predicate (except possibly the last span). Concatenating the
spans always reproduces the input. Splitting is lazy: every function here is a
generator that walks one chunk and performs no I/O.

Examples:
    >>> list(split_lines(b"a\\nb"))
    [b'a\\n', b'b']
    >>> list(split_on_nonprint(b"ab\\x01c"))
    [b'ab\\x01', b'c']
"""

import re
from typing import Callable, Iterator

_NONPRINT = re.compile(rb"[\x00-\x1f\x7f-\xff]")


def is_nonprint(byte: int) -> bool:
  """Returns True for bytes outside the printable ASCII range 32..126."""
  return byte < 32 or byte >= 127


def iter_fields(data: bytes, predicate: Callable[[int], bool]) -> Iterator[bytes]:
  """
  Splits ``data`` after every byte for which ``predicate`` holds.

  Args:
      data (bytes): The chunk to split.
      predicate (Callable[[int], bool]): Classifies a single byte value.

  Yields:
      bytes: Consecutive spans. Empty input yields nothing; input without a
      match yields itself once.
  """
  last = 0
  for i, byte in enumerate(data):
    if predicate(byte):
      yield data[last : i + 1]
      last = i + 1
  if last != len(data):
    yield data[last:]


def split_on_byte(data: bytes, sep: int) -> Iterator[bytes]:
  """
  Splits ``data`` after every occurrence of the byte value ``sep``.

  Equivalent to ``iter_fields(data, lambda c: c == sep)`` but scans with
  ``bytes.find``.
  """
  last = 0
  end = len(data)
  while last < end:
    i = data.find(sep, last)
    if i < 0:
      break
    yield data[last : i + 1]
    last = i + 1
  if last != end:
    yield data[last:]


def split_lines(data: bytes) -> Iterator[bytes]:
  """Splits ``data`` into logical lines, keeping each terminating newline."""
  return split_on_byte(data, 0x0A)


def split_on_nonprint(data: bytes) -> Iterator[bytes]:
  """Splits ``data`` after every byte for which `is_nonprint` holds."""
  last = 0
  for match in _NONPRINT.finditer(data):
    yield data[last : match.end()]
    last = match.end()
  if last != len(data):
    yield data[last:]
