"""
Core Package.

Contains the streaming transformation engine:
- Sink protocol and Stage base class
- Field splitting primitives
- Display stages (end marker, numbering, squeezing, escaping)
- Chain composition
"""

from allcat.core.fields import iter_fields, split_lines, split_on_byte, split_on_nonprint
from allcat.core.nonprint import NonprintEscaper, escape_byte
from allcat.core.numbering import LineNumberer, NumberingMode
from allcat.core.pipeline import build_chain, describe_chain
from allcat.core.replacer import ByteReplacer, end_marker, tab_escaper
from allcat.core.sink import Sink, SinkError, Stage
from allcat.core.squeeze import BlankSqueezer

__all__ = [
  "BlankSqueezer",
  "ByteReplacer",
  "LineNumberer",
  "NonprintEscaper",
  "NumberingMode",
  "Sink",
  "SinkError",
  "Stage",
  "build_chain",
  "describe_chain",
  "end_marker",
  "escape_byte",
  "iter_fields",
  "split_lines",
  "split_on_byte",
  "split_on_nonprint",
  "tab_escaper",
]
