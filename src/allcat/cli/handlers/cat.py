"""
Cat Command Handler.

This module implements the main ``allcat`` action. It orchestrates:
1. Opening the output and wrapping it in the transformation chain.
2. Starting the metrics server (optional).
3. Copying or listing every input in order.
4. Closing the chain exactly once.

Input failures are logged and the run moves on to the next input. An output
failure is terminal: nothing more can be written, so the run stops.
"""

import sys
import time
from typing import List, Optional

import requests
from rich.markup import escape

from allcat.cli.handlers.listing import list_file
from allcat.config import RuntimeConfig
from allcat.core.pipeline import build_chain, describe_chain
from allcat.core.sink import Sink, SinkError
from allcat.metrics.bandwidth import BandwidthMeter
from allcat.sources import STDIO_NAMES, STDOUT_NAMES, SourceError, open_output, open_source
from allcat.transfer import CopyError, copy_stream
from allcat.utils.console import log_error, log_info

MAX_DISPLAY_NAME = 40


def display_name(name: str) -> str:
  """Shortens long input names for log messages."""
  if len(name) > MAX_DISPLAY_NAME:
    return name[:MAX_DISPLAY_NAME] + "…"
  return name


def handle_cat(names: List[str], config: RuntimeConfig) -> int:
  """
  Handles the default command: copy (or list) every input to the output.

  Args:
      names: Input names in order (``-`` for standard input).
      config: Runtime configuration.

  Returns:
      int: Exit code (0 if every input succeeded, 1 otherwise).
  """
  try:
    sink = open_output(config.output)
  except OSError as e:
    log_error(f"could not open output: {escape(str(e))}")
    return 1

  if config.output not in STDOUT_NAMES and sink.name != config.output:
    log_info(f"output redirected: [path]{escape(sink.name)}[/path]")

  out = build_chain(sink, config.display)
  log_info(f"chain: {escape(' -> '.join(describe_chain(out)))}")

  server = None
  if config.metrics and not config.list_mode:
    try:
      server = _start_metrics(config)
    except (OSError, ValueError, RuntimeError) as e:
      log_error(f"could not start metrics server: {escape(str(e))}")
      _close(out)
      return 1

  status = 0
  session = requests.Session()

  try:
    for name in names:
      if config.list_mode:
        ok = list_file(out, name)
      else:
        ok = cat_file(out, name, config, session=session)
      if not ok:
        status = 1

  except SinkError as e:
    log_error(f"write failed: {escape(str(e))}")
    status = 1

  finally:
    if server is not None:
      server.stop()
    session.close()
    if not _close(out):
      status = 1

  return status


def _close(out: Sink) -> bool:
  try:
    out.close()
  except OSError as e:
    log_error(f"closing output: {escape(str(e))}")
    return False
  return True


def cat_file(
  out: Sink,
  name: str,
  config: RuntimeConfig,
  session: Optional[requests.Session] = None,
) -> bool:
  """
  Copies one input into the chain.

  Args:
      out: Head of the transformation chain.
      name: Input name.
      config: Runtime configuration (chunk size, HTTP settings, metrics).
      session: HTTP session reused across inputs.

  Returns:
      bool: False if the input could not be opened or read.

  Raises:
      SinkError: If the output fails.
  """
  try:
    source = open_source(name, config.user_agent, config.http_timeout, session=session)
  except SourceError as e:
    log_error(escape(str(e)))
    return False

  print_name = name
  if name not in STDIO_NAMES and source.name != name:
    log_info(f"redirected: {escape(source.name)}")
    print_name = source.name
  print_name = escape(display_name(print_name))

  meter = BandwidthMeter() if config.metrics else None
  start = time.monotonic()

  with source:
    try:
      n = copy_stream(out, source, config.chunk_size, meter=meter)
    except CopyError as e:
      if e.output_failed:
        raise e.cause
      log_error(escape(str(e)))
      if e.copied > 0:
        log_error(f"{print_name}: {e.copied} bytes copied in {time.monotonic() - start:.3f}s")
      return False

  log_info(f"{print_name}: {n} bytes copied in {time.monotonic() - start:.3f}s")
  return True


def _start_metrics(config: RuntimeConfig):
  """
  Starts the metrics endpoint and announces its URL.

  Returns:
      MetricsServer: The running server.
  """
  from allcat.metrics.server import MetricsServer

  server = MetricsServer(config.metrics_listen)
  server.start()

  msg = f"metrics available at: {server.url}"
  if not config.quiet:
    print(msg, file=sys.stderr)
  log_info(msg)
  return server
