"""
Runtime Configuration Store.

Settings are resolved in two layers: defaults from the ``[tool.allcat]`` table
of the nearest ``pyproject.toml``, then explicit CLI arguments on top.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from allcat import __version__
from allcat.core.numbering import NumberingMode

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore

DEFAULT_CHUNK_SIZE = 32 * 1024
DEFAULT_USER_AGENT = f"allcat/{__version__}"


class DisplayOptions(BaseModel):
  """
  Which transformation stages are active for an output stream.
  """

  show_ends: bool = Field(False, description="Display $ at the end of each line (-E).")
  numbering: Optional[NumberingMode] = Field(None, description="Number all (-n) or nonempty (-b) lines.")
  squeeze_blank: bool = Field(False, description="Suppress repeated empty output lines (-s).")
  show_nonprinting: bool = Field(False, description="Use ^ and M- notation, except for LF and TAB (-v).")
  show_tabs: bool = Field(False, description="Display TAB characters as ^I (-T).")

  @classmethod
  def from_flags(
    cls,
    show_all: bool = False,
    number_nonblank: bool = False,
    show_ends: bool = False,
    number: bool = False,
    squeeze_blank: bool = False,
    show_tabs: bool = False,
    show_nonprinting: bool = False,
    show_all_but_tabs: bool = False,
    show_all_but_ends: bool = False,
  ) -> "DisplayOptions":
    """
    Resolves the classic cat flag set into display options.

    Shorthands expand as ``-A`` = ``-vET``, ``-e`` = ``-vE`` and ``-t`` = ``-vT``.
    ``-b`` overrides ``-n``.

    Returns:
        DisplayOptions: The resolved options.
    """
    if show_all:
      show_ends = show_tabs = show_nonprinting = True
    if show_all_but_tabs:
      show_ends = show_nonprinting = True
    if show_all_but_ends:
      show_tabs = show_nonprinting = True

    numbering = None
    if number_nonblank:
      numbering = NumberingMode.NONBLANK
    elif number:
      numbering = NumberingMode.ALL

    return cls(
      show_ends=show_ends,
      numbering=numbering,
      squeeze_blank=squeeze_blank,
      show_nonprinting=show_nonprinting,
      show_tabs=show_tabs,
    )

  @property
  def enabled_stages(self) -> List[str]:
    """
    Names of the enabled stages, outermost first.

    Returns:
        List[str]: e.g. ``["tabs", "nonprinting", "ends"]``.
    """
    stages = []
    if self.show_tabs:
      stages.append("tabs")
    if self.show_nonprinting:
      stages.append("nonprinting")
    if self.squeeze_blank:
      stages.append("squeeze")
    if self.numbering is not None:
      stages.append(f"number-{self.numbering.value}")
    if self.show_ends:
      stages.append("ends")
    return stages


class RuntimeConfig(BaseModel):
  """
  Global configuration container for a run.
  """

  display: DisplayOptions = Field(default_factory=DisplayOptions, description="Active display stages.")
  output: str = Field("-", description="Output destination; '-' writes to standard output.")
  quiet: bool = Field(False, description="Suppress informational messages on stderr.")
  list_mode: bool = Field(False, description="List directories instead of copying files.")
  user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header for HTTP sources.")
  chunk_size: int = Field(DEFAULT_CHUNK_SIZE, description="Maximum bytes read from a source per write.")
  http_timeout: float = Field(30.0, description="Connect/read timeout for HTTP sources, in seconds.")
  metrics: bool = Field(False, description="Publish bandwidth metrics over HTTP.")
  metrics_port: int = Field(0, description="Port for the metrics listener (0 = auto-assign).")
  metrics_address: Optional[str] = Field(None, description="host:port to listen on; overrides metrics_port.")

  @field_validator("chunk_size")
  @classmethod
  def validate_chunk_size(cls, v: int) -> int:
    """
    Ensures reads make progress.

    Raises:
        ValueError: If the chunk size is not positive.
    """
    if v <= 0:
      raise ValueError(f"chunk_size must be positive, got {v}")
    return v

  @field_validator("http_timeout")
  @classmethod
  def validate_timeout(cls, v: float) -> float:
    if v <= 0:
      raise ValueError(f"http_timeout must be positive, got {v}")
    return v

  @field_validator("metrics_port")
  @classmethod
  def validate_port(cls, v: int) -> int:
    if not 0 <= v <= 65535:
      raise ValueError(f"metrics_port out of range: {v}")
    return v

  @model_validator(mode="after")
  def enable_metrics_from_listener(self) -> "RuntimeConfig":
    """Choosing a metrics port or address implies publishing metrics."""
    if self.metrics_port or self.metrics_address:
      self.metrics = True
    return self

  @property
  def metrics_listen(self) -> str:
    """
    Resolves the address the metrics server should bind.

    Returns:
        str: ``host:port``; an empty host means all interfaces.
    """
    if self.metrics_address:
      return self.metrics_address
    return f":{self.metrics_port}"

  @classmethod
  def load(
    cls,
    display: Optional[DisplayOptions] = None,
    output: Optional[str] = None,
    quiet: Optional[bool] = None,
    list_mode: Optional[bool] = None,
    user_agent: Optional[str] = None,
    chunk_size: Optional[int] = None,
    metrics: Optional[bool] = None,
    metrics_port: Optional[int] = None,
    metrics_address: Optional[str] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Display flags are never read from TOML; they only come from the CLI.

    Args:
        display (Optional[DisplayOptions]): Resolved display flags.
        output (Optional[str]): Override for the output destination.
        quiet (Optional[bool]): Override for quiet mode.
        list_mode (Optional[bool]): Override for directory listing mode.
        user_agent (Optional[str]): Override for the HTTP User-Agent.
        chunk_size (Optional[int]): Override for the read size.
        metrics (Optional[bool]): Override for metrics publishing.
        metrics_port (Optional[int]): Override for the metrics port.
        metrics_address (Optional[str]): Override for the metrics address.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.

    Raises:
        ValueError: If the merged settings fail validation.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    cli_values = {
      "output": output,
      "quiet": quiet,
      "list_mode": list_mode,
      "user_agent": user_agent,
      "chunk_size": chunk_size,
      "metrics": metrics or None,
      "metrics_port": metrics_port,
      "metrics_address": metrics_address,
    }

    merged: Dict[str, Any] = {k: v for k, v in toml_config.items() if k in cls.model_fields and k != "display"}
    merged.update({k: v for k, v in cli_values.items() if v is not None})
    merged["display"] = display or DisplayOptions()

    try:
      return cls(**merged)
    except ValidationError as e:
      raise ValueError(f"Invalid configuration: {e}")


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("allcat", {}), parent

  return {}, None
