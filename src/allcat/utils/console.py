"""
Central Logging and Console Utilities.

This module unifies the application's diagnostic output using the Python
standard `logging` library, backed by `rich` for formatting.

Standard output is reserved for the data stream, so the default console writes
to **stderr**. The console is held behind a proxy so the destination can be
swapped at runtime via `set_console` (tests use this to capture output).

Attributes:
    console (_ConsoleProxy): A global, stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.theme import Theme

# Custom logging level for Success (higher than INFO, lower than WARNING)
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

DEFAULT_LEVEL = logging.WARNING


def _success(self, message, *args, **kwargs):
  """Method injected into Logger to support logger.success()."""
  if self.isEnabledFor(SUCCESS_LEVEL_NUM):
    self._log(SUCCESS_LEVEL_NUM, message, args, **kwargs)


logging.Logger.success = _success

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
  }
)


def _default_console() -> Console:
  return Console(theme=_THEME, stderr=True)


class _ConsoleProxy:
  """
  A Proxy wrapper around `rich.console.Console`.

  All printing operations are forwarded to the backend console. When the
  backend changes, the proxy also reconfigures the root logger so that
  ``logging.info(...)`` writes to the new destination.

  Attributes:
      _backend (Console): The active Rich Console instance.
      _level (int): The root logger threshold.
  """

  def __init__(self) -> None:
    self._backend: Console = _default_console()
    self._level = DEFAULT_LEVEL
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates logging handlers.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def set_level(self, level: int) -> None:
    """
    Changes the threshold of the root logger.

    Args:
        level (int): A `logging` level such as ``logging.INFO``.
    """
    self._level = level
    logging.getLogger().setLevel(level)

  def reset(self) -> None:
    """Resets the proxy to a fresh stderr console at the default level."""
    self._backend = _default_console()
    self._level = DEFAULT_LEVEL
    self._configure_logging()

  @property
  def backend(self) -> Console:
    return self._backend

  def _configure_logging(self) -> None:
    """
    Directs the root logger to the current backend console.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
      if isinstance(handler, RichHandler):
        root_logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )

    root_logger.setLevel(self._level)
    root_logger.addHandler(rich_handler)

  def print(self, *args: Any, **kwargs: Any) -> None:
    """Forwards `print` calls to the active backend."""
    self._backend.print(*args, **kwargs)

  def get_style(self, name: str) -> Style:
    return self._backend.get_style(name)

  def export_text(self, **kwargs: Any) -> str:
    """
    Forwards `export_text` (useful for log capturing).

    Args:
        **kwargs: Options passed to console.export_text.

    Returns:
        str: The captured text output.
    """
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


# Singleton instance exposed to the application.
console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Global helper to inject a specific console instance.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Global helper to reset logging and console to standard error."""
  console.reset()


def get_console() -> Console:
  """
  Retrieves the currently active console backend.

  Returns:
      Console: The active Rich Console.
  """
  return console.backend


def set_log_level(verbosity: int) -> None:
  """
  Maps a ``--verbose`` count onto a logging level.

  Args:
      verbosity (int): 0 for warnings only, 1 for info, 2 or more for debug.
  """
  if verbosity <= 0:
    level = DEFAULT_LEVEL
  elif verbosity == 1:
    level = logging.INFO
  else:
    level = logging.DEBUG
  console.set_level(level)


def log_info(msg: str) -> None:
  """
  Logs an informational message via standard logging.

  Args:
      msg (str): The message content. Can include rich markup like [bold].
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  """
  Logs a success message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})
