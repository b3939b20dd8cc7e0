"""
allcat Package.

A streaming ``cat`` with the classic display modes (``-A``, ``-b``, ``-E``,
``-n``, ``-s``, ``-T``, ``-v``), able to read local files, standard input and
HTTP(S) URLs, and to publish copy bandwidth as Prometheus metrics.

Usage
-----

Simple Byte Rendering
^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import allcat
    allcat.render(b"a\\tb\\n", show_tabs=True, show_ends=True)
    # b'a^Ib$\\n'

Streaming (Core Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import sys
    from allcat import DisplayOptions, build_chain

    out = build_chain(sys.stdout.buffer, DisplayOptions(show_nonprinting=True))
    for chunk in chunks:
        out.write(chunk)
    out.flush()
"""

import io

__version__ = "0.1.0"

from allcat.config import DisplayOptions, RuntimeConfig  # noqa: E402
from allcat.core import NumberingMode, Sink, SinkError, build_chain  # noqa: E402


def render(data: bytes, **flags: bool) -> bytes:
  """
  Transforms a complete byte string in one call.

  This is a convenience wrapper around `build_chain` for small inputs; the
  stages themselves are streaming and hold no buffered input.

  Args:
      data (bytes): Input bytes.
      **flags: Keyword flags accepted by `DisplayOptions.from_flags`
          (e.g. ``show_all=True``, ``number=True``).

  Returns:
      bytes: The transformed output.
  """
  buffer = io.BytesIO()
  out = build_chain(buffer, DisplayOptions.from_flags(**flags))
  out.write(data)
  return buffer.getvalue()


__all__ = [
  "DisplayOptions",
  "NumberingMode",
  "RuntimeConfig",
  "Sink",
  "SinkError",
  "build_chain",
  "render",
  "__version__",
]
