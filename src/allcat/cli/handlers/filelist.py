"""CLI handler for ``-f/--files``: reading input names from a list file."""

import os
from typing import List

from rich.markup import escape

from allcat.cli.handlers.cat import display_name
from allcat.config import RuntimeConfig
from allcat.sources import STDIO_NAMES, SourceError, open_source
from allcat.utils.console import log_error, log_info


def read_file_list(name: str, config: RuntimeConfig) -> List[str]:
  """
  Reads input names, one per line, from a local file, stdin or URL.

  Surrounding whitespace is stripped and blank lines are skipped.

  Args:
      name: Where to read the list from.
      config: Runtime configuration (HTTP settings, chunk size).

  Returns:
      List[str]: The names in order. Empty if the list could not be read.
  """
  try:
    with open_source(name, config.user_agent, config.http_timeout) as source:
      if name not in STDIO_NAMES and source.name != name:
        log_info(f"redirected: {escape(source.name)}")
      data = b"".join(source.iter_chunks(config.chunk_size))
  except SourceError as e:
    log_error(escape(str(e)))
    return []

  lines = data.split(b"\n")
  log_info(f"{escape(display_name(name))}: {len(lines)} lines of files")

  return [os.fsdecode(line.strip()) for line in lines if line.strip()]
