from .cat import handle_cat, cat_file, display_name
from .filelist import read_file_list
from .listing import list_file, render_listing

__all__ = [
  "cat_file",
  "display_name",
  "handle_cat",
  "list_file",
  "read_file_list",
  "render_listing",
]
