"""CLI handler for ``--list``: directory listings written through the chain."""

import io
import os
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from allcat.core.sink import Sink
from allcat.sources import Entry, SourceError, list_entries
from allcat.utils.console import log_error


def render_listing(entries: List[Entry]) -> str:
  """
  Formats entries as a borderless table: mode, size, modification time, name.

  Args:
      entries: Rows to render, already sorted.

  Returns:
      str: Plain text, one line per entry.
  """
  table = Table(box=None, show_header=False, show_edge=False, pad_edge=False)
  table.add_column("Mode", no_wrap=True)
  table.add_column("Size", justify="right", no_wrap=True)
  table.add_column("Modified", no_wrap=True)
  table.add_column("Name", no_wrap=True)

  for entry in entries:
    table.add_row(entry.mode, str(entry.size), entry.modified_rfc3339, escape(entry.name))

  buffer = io.StringIO()
  Console(file=buffer, width=4096, color_system=None, highlight=False, emoji=False).print(table)
  return "\n".join(line.rstrip() for line in buffer.getvalue().splitlines()) + "\n"


def list_file(out: Sink, name: str) -> bool:
  """
  Writes the listing of ``name`` into the chain.

  Args:
      out: Head of the transformation chain.
      name: Directory or file to list.

  Returns:
      bool: False if the listing could not be produced.

  Raises:
      SinkError: If the output fails.
  """
  try:
    entries = list_entries(name)
  except SourceError as e:
    log_error(escape(str(e)))
    return False

  if entries:
    out.write(os.fsencode(render_listing(entries)))
  return True
