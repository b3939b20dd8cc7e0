"""
Stage Composition.

Builds the transformation chain for a set of display options. The final sink
is wrapped innermost-first, so writes to the returned sink travel:

    tab escaper -> non-printable escaper -> squeezer -> numberer
    -> end-of-line marker -> final sink

Only enabled stages are present; with nothing enabled the final sink itself is
returned.
"""

from typing import TYPE_CHECKING, List

from allcat.core.nonprint import NonprintEscaper
from allcat.core.numbering import LineNumberer
from allcat.core.replacer import end_marker, tab_escaper
from allcat.core.sink import Sink
from allcat.core.squeeze import BlankSqueezer

if TYPE_CHECKING:
  from allcat.config import DisplayOptions


def build_chain(sink: Sink, options: "DisplayOptions") -> Sink:
  """
  Wraps ``sink`` with every stage enabled in ``options``.

  Args:
      sink (Sink): The final destination (file, stdout, buffer).
      options (DisplayOptions): Which stages to enable.

  Returns:
      Sink: The outermost sink. Closing it closes ``sink`` exactly once.
  """
  out = sink

  if options.show_ends:
    out = end_marker(out)

  if options.numbering is not None:
    out = LineNumberer(out, options.numbering)

  if options.squeeze_blank:
    out = BlankSqueezer(out)

  if options.show_nonprinting:
    out = NonprintEscaper(out)

  if options.show_tabs:
    out = tab_escaper(out)

  return out


def describe_chain(out: Sink) -> List[str]:
  """
  Lists the stages of a chain from outermost to innermost.

  Args:
      out (Sink): The outermost sink, as returned by `build_chain`.

  Returns:
      List[str]: ``repr`` of each stage, followed by the final sink's type name.
  """
  names = []
  while hasattr(out, "inner"):
    names.append(repr(out))
    out = out.inner
  names.append(type(out).__name__)
  return names
