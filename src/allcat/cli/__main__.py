"""
Main Entry Point for allcat CLI.

This module handles argument parsing and dispatches to the command handlers
defined in `allcat.cli.commands`.
"""

import argparse
import sys
from typing import List, Optional

from allcat import __version__
from allcat.cli import commands
from allcat.config import DisplayOptions, RuntimeConfig
from allcat.utils.console import log_error, set_log_level


def build_parser() -> argparse.ArgumentParser:
  """
  Builds the argument parser.

  Returns:
      argparse.ArgumentParser: Parser for the flag set of classic ``cat`` plus
      output, listing and metrics options.
  """
  parser = argparse.ArgumentParser(
    prog="allcat",
    description="Concatenate files, standard input and URLs to standard output.",
  )
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("files", nargs="*", help="Inputs to concatenate ('-' for standard input)")

  # --- Display modes ---
  display = parser.add_argument_group("display")
  display.add_argument("-A", "--show-all", action="store_true", help="equivalent to -vET")
  display.add_argument(
    "-b", "--number-nonblank", action="store_true", help="number nonempty output lines, overrides -n"
  )
  display.add_argument("-E", "--show-ends", action="store_true", help="display $ at end of each line")
  display.add_argument("-n", "--number", action="store_true", help="number all output lines")
  display.add_argument("-s", "--squeeze-blank", action="store_true", help="suppress repeated empty output lines")
  display.add_argument("-T", "--show-tabs", action="store_true", help="display TAB characters as ^I")
  display.add_argument(
    "-v", "--show-nonprinting", action="store_true", help="use ^ and M- notation, except for LFD and TAB"
  )
  display.add_argument("-e", dest="show_all_but_tabs", action="store_true", help="equivalent to -vE")
  display.add_argument("-t", dest="show_all_but_ends", action="store_true", help="equivalent to -vT")
  display.add_argument("-u", dest="ignored", action="store_true", help="(ignored)")

  # --- Input / Output ---
  io_group = parser.add_argument_group("input/output")
  io_group.add_argument("-o", "--output", default=None, help="Specifies which file to write the output to")
  io_group.add_argument("-q", "--quiet", action="store_true", help="If set, suppresses informational output on stderr")
  io_group.add_argument("--list", action="store_true", help="If set, list files instead of catting them")
  io_group.add_argument(
    "-f",
    "--files",
    dest="file_lists",
    action="append",
    default=[],
    metavar="FILE",
    help="Read list of files to output from given file(s)",
  )
  io_group.add_argument("--user-agent", default=None, help="Which User-Agent string to use for HTTP inputs")
  io_group.add_argument("--chunk-size", type=int, default=None, help="Maximum bytes read per write (default: 32768)")

  # --- Metrics ---
  metrics = parser.add_argument_group("metrics")
  metrics.add_argument(
    "--metrics", action="store_true", help="If set, publish metrics to the given metrics-port or metrics-address"
  )
  metrics.add_argument("--metrics-port", type=int, default=None, help="Which port to publish metrics with")
  metrics.add_argument(
    "--metrics-address", default=None, help="Which local address to listen on; overrides metrics-port flag"
  )

  parser.add_argument("--verbose", action="count", default=0, help="Increase log verbosity (repeatable)")
  return parser


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, 1 if any input or the output failed,
      2 for invalid configuration).
  """
  parser = build_parser()
  args = parser.parse_args(argv)

  set_log_level(args.verbose)

  display = DisplayOptions.from_flags(
    show_all=args.show_all,
    number_nonblank=args.number_nonblank,
    show_ends=args.show_ends,
    number=args.number,
    squeeze_blank=args.squeeze_blank,
    show_tabs=args.show_tabs,
    show_nonprinting=args.show_nonprinting,
    show_all_but_tabs=args.show_all_but_tabs,
    show_all_but_ends=args.show_all_but_ends,
  )

  try:
    config = RuntimeConfig.load(
      display=display,
      output=args.output,
      quiet=args.quiet or None,
      list_mode=args.list or None,
      user_agent=args.user_agent,
      chunk_size=args.chunk_size,
      metrics=args.metrics,
      metrics_port=args.metrics_port,
      metrics_address=args.metrics_address,
    )
  except ValueError as e:
    log_error(str(e))
    return 2

  names = list(args.files)
  for file_list in args.file_lists:
    names.extend(commands.read_file_list(file_list, config))

  if not names:
    names.append("-")

  try:
    return commands.handle_cat(names, config)
  except KeyboardInterrupt:
    return 130


if __name__ == "__main__":
  sys.exit(main())
