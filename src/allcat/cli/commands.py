"""
CLI Command Handlers Facade.

Re-exports handlers from `allcat.cli.handlers` so the entry point and tests
have a single module to dispatch through (and to patch).
"""

from allcat.cli.handlers.cat import handle_cat, cat_file
from allcat.cli.handlers.filelist import read_file_list
from allcat.cli.handlers.listing import list_file

__all__ = [
  "cat_file",
  "handle_cat",
  "list_file",
  "read_file_list",
]
