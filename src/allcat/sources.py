"""
Input Sources and Output Sinks.

Resolves the names given on the command line into byte streams:

- ``-`` (or an empty name) reads standard input.
- ``http://`` and ``https://`` URLs are fetched with `requests`, streamed.
- ``file://`` URLs and plain paths are opened as local binary files.

Output names resolve to standard output (``-``, ``/dev/stdout``) or a local
file, wrapped in an `OutputSink` that satisfies the core sink protocol.
"""

import os
import stat
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from allcat.config import DEFAULT_CHUNK_SIZE, DEFAULT_USER_AGENT
from allcat.core.sink import SinkError

STDIO_NAMES = ("", "-")
STDOUT_NAMES = ("", "-", "/dev/stdout")
HTTP_SCHEMES = ("http", "https")


class SourceError(OSError):
  """Raised when an input cannot be opened or read."""


class Source:
  """
  A readable byte stream with a display name.

  Attributes:
      name (str): Resolved name of the input (path, URL, or ``-``).
  """

  def __init__(self, name: str, stream: BinaryIO, owns: bool = True):
    """
    Args:
        name (str): Resolved name of the input.
        stream (BinaryIO): Underlying binary stream.
        owns (bool): Whether `close` should close ``stream``.
    """
    self.name = name
    self._stream = stream
    self._owns = owns

  def iter_chunks(self, size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Yields chunks of at most ``size`` bytes until end of input.

    Short reads are passed on as they arrive, so interactive input is not held
    back waiting for a full chunk.

    Raises:
        SourceError: If reading fails.
    """
    read = getattr(self._stream, "read1", None) or self._stream.read
    while True:
      try:
        chunk = read(size)
      except OSError as e:
        raise SourceError(f"{self.name}: {e}") from e
      if not chunk:
        return
      yield chunk

  def close(self) -> None:
    if self._owns:
      self._stream.close()

  def __enter__(self) -> "Source":
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    self.close()

  def __repr__(self) -> str:
    return f"{type(self).__name__}({self.name!r})"


class HttpSource(Source):
  """A streamed HTTP(S) response body."""

  def __init__(self, response: requests.Response):
    super().__init__(response.url, response.raw)
    self._response = response

  def iter_chunks(self, size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    try:
      for chunk in self._response.iter_content(chunk_size=size):
        if chunk:
          yield chunk
    except requests.exceptions.RequestException as e:
      raise SourceError(f"{self.name}: {e}") from e

  def close(self) -> None:
    self._response.close()


def open_source(
  name: str,
  user_agent: str = DEFAULT_USER_AGENT,
  timeout: float = 30.0,
  session: Optional[requests.Session] = None,
) -> Source:
  """
  Opens an input by name.

  Args:
      name (str): ``-``, a local path, a ``file://`` URL or an HTTP(S) URL.
      user_agent (str): User-Agent header sent to HTTP servers.
      timeout (float): Connect/read timeout for HTTP requests, in seconds.
      session (Optional[requests.Session]): Session to reuse for HTTP requests.

  Returns:
      Source: The opened input.

  Raises:
      SourceError: If the input does not exist, is a directory, or the HTTP
          request fails.
  """
  if name in STDIO_NAMES:
    return Source("-", sys.stdin.buffer, owns=False)

  parsed = urlparse(name)
  if parsed.scheme in HTTP_SCHEMES:
    return _open_http(name, user_agent, timeout, session)

  path = Path(url2pathname(parsed.path)) if parsed.scheme == "file" else Path(name)
  if path.is_dir():
    raise SourceError(f"{name}: Is a directory")
  try:
    stream = open(path, "rb")
  except OSError as e:
    raise SourceError(f"{name}: {e.strerror or e}") from e
  return Source(str(path), stream)


def _open_http(url: str, user_agent: str, timeout: float, session: Optional[requests.Session]) -> HttpSource:
  getter = session.get if session is not None else requests.get
  try:
    response = getter(url, headers={"User-Agent": user_agent}, stream=True, timeout=timeout)
    response.raise_for_status()
  except requests.exceptions.RequestException as e:
    raise SourceError(f"{url}: {e}") from e
  return HttpSource(response)


class OutputSink:
  """
  Final sink writing to a binary stream.

  Standard output is flushed on `close` but never closed, so the interpreter
  and test harnesses keep a usable ``sys.stdout``.

  Attributes:
      name (str): Destination path as given, with ``~`` expanded (``-`` for standard output).
  """

  def __init__(self, name: str, stream: BinaryIO, owns: bool = True):
    self.name = name
    self._stream = stream
    self._owns = owns
    self._closed = False

  def write(self, data) -> int:
    """
    Writes all of ``data``, repeating short writes of unbuffered streams.

    Raises:
        SinkError: If the stream fails or accepts nothing; ``accepted`` is the
            number of bytes already written.
    """
    view = memoryview(data)
    done = 0
    while done < len(view):
      try:
        written = self._stream.write(view[done:])
      except OSError as e:
        raise SinkError(done, f"write to {self.name} failed") from e
      if not written:
        raise SinkError(done, f"write to {self.name} accepted no bytes")
      done += written
    return done

  def flush(self) -> None:
    self._stream.flush()

  def close(self) -> None:
    if self._closed:
      return
    self._closed = True
    try:
      self._stream.flush()
    finally:
      if self._owns:
        self._stream.close()

  def __repr__(self) -> str:
    return f"OutputSink({self.name!r})"


def open_output(name: str) -> OutputSink:
  """
  Opens the output destination.

  Args:
      name (str): ``-``/``/dev/stdout`` for standard output, otherwise a path
          which is created or truncated.

  Returns:
      OutputSink: The final sink of the chain.

  Raises:
      OSError: If the file cannot be created.
  """
  if name in STDOUT_NAMES:
    return OutputSink("-", sys.stdout.buffer, owns=False)

  path = Path(name).expanduser()
  stream = open(path, "wb")
  return OutputSink(str(path), stream)


@dataclass
class Entry:
  """One row of a directory listing."""

  name: str
  mode: str
  size: int
  modified: datetime

  @property
  def modified_rfc3339(self) -> str:
    return self.modified.isoformat(timespec="seconds")


def _entry(name: str, st: os.stat_result) -> Entry:
  modified = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).astimezone()
  return Entry(name=name, mode=stat.filemode(st.st_mode), size=st.st_size, modified=modified)


def list_entries(name: str) -> List[Entry]:
  """
  Lists a local directory, or describes a single file.

  Args:
      name (str): Directory or file path; ``-`` means the working directory.

  Returns:
      List[Entry]: Entries sorted by name.

  Raises:
      SourceError: For URLs or paths that cannot be listed.
  """
  if name in STDIO_NAMES:
    name = "."

  parsed = urlparse(name)
  if parsed.scheme in HTTP_SCHEMES:
    raise SourceError(f"{name}: listing is not supported for {parsed.scheme} URLs")
  path = Path(url2pathname(parsed.path)) if parsed.scheme == "file" else Path(name)

  try:
    if not path.is_dir():
      return [_entry(path.name, path.stat())]
    with os.scandir(path) as it:
      entries = [_entry(e.name, e.stat(follow_symlinks=False)) for e in it]
  except OSError as e:
    raise SourceError(f"{name}: {e.strerror or e}") from e

  return sorted(entries, key=lambda e: e.name)
