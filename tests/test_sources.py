"""
Tests for Input Sources and Output Sinks.

Verifies:
1. Local paths, file:// URLs and HTTP URLs resolve to readable sources.
2. Open failures surface as `SourceError` with the input name.
3. `OutputSink` reports write failures as `SinkError` and never closes stdout.
4. Directory listings are sorted and describe mode and size.
"""

import io
import sys

import pytest
import requests

from allcat.core.sink import SinkError
from allcat.sources import (
  HttpSource,
  OutputSink,
  SourceError,
  list_entries,
  open_output,
  open_source,
)


def _response(body: bytes, status: int = 200, url: str = "http://example.test/data") -> requests.Response:
  response = requests.Response()
  response.status_code = status
  response.raw = io.BytesIO(body)
  response.url = url
  return response


class FakeSession:
  def __init__(self, response=None, error=None):
    self.response = response
    self.error = error
    self.calls = []

  def get(self, url, **kwargs):
    self.calls.append((url, kwargs))
    if self.error is not None:
      raise self.error
    return self.response


def test_local_file(tmp_path):
  path = tmp_path / "a.txt"
  path.write_bytes(b"hello\nworld\n")

  with open_source(str(path)) as source:
    assert b"".join(source.iter_chunks(4)) == b"hello\nworld\n"
    assert source.name == str(path)


def test_chunks_respect_size(tmp_path):
  path = tmp_path / "a.bin"
  path.write_bytes(b"x" * 10)

  with open_source(str(path)) as source:
    assert all(len(c) <= 3 for c in source.iter_chunks(3))


def test_file_url(tmp_path):
  path = tmp_path / "b.txt"
  path.write_bytes(b"data")

  with open_source(path.as_uri()) as source:
    assert b"".join(source.iter_chunks()) == b"data"


def test_missing_file(tmp_path):
  with pytest.raises(SourceError, match="missing"):
    open_source(str(tmp_path / "missing"))


def test_directory_is_rejected(tmp_path):
  with pytest.raises(SourceError, match="Is a directory"):
    open_source(str(tmp_path))


def test_stdin_is_not_closed(monkeypatch):
  stream = io.BytesIO(b"piped")
  monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(stream))

  source = open_source("-")
  assert source.name == "-"
  assert b"".join(source.iter_chunks()) == b"piped"
  source.close()
  assert not stream.closed


def test_http_source_sends_user_agent():
  session = FakeSession(response=_response(b"remote body"))

  with open_source("http://example.test/data", user_agent="tester/1", timeout=5, session=session) as source:
    assert isinstance(source, HttpSource)
    assert b"".join(source.iter_chunks(4)) == b"remote body"

  url, kwargs = session.calls[0]
  assert url == "http://example.test/data"
  assert kwargs["headers"] == {"User-Agent": "tester/1"}
  assert kwargs["stream"] is True
  assert kwargs["timeout"] == 5


def test_http_error_status():
  session = FakeSession(response=_response(b"", status=404))
  with pytest.raises(SourceError, match="404"):
    open_source("https://example.test/missing", session=session)


def test_http_connection_error():
  session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
  with pytest.raises(SourceError, match="refused"):
    open_source("http://example.test/", session=session)


def test_output_sink_writes_and_closes_owned_stream():
  stream = io.BytesIO()
  sink = OutputSink("out.bin", stream)
  assert sink.write(b"abc") == 3
  assert stream.getvalue() == b"abc"
  sink.close()
  assert stream.closed
  sink.close()


def test_output_sink_leaves_unowned_stream_open():
  stream = io.BytesIO()
  sink = OutputSink("-", stream, owns=False)
  sink.close()
  assert not stream.closed


def test_output_sink_failure_is_sink_error():
  class Broken(io.BytesIO):
    def write(self, data):
      raise BrokenPipeError(32, "Broken pipe")

  sink = OutputSink("-", Broken(), owns=False)
  with pytest.raises(SinkError) as info:
    sink.write(b"x")
  assert info.value.accepted == 0
  assert isinstance(info.value.__cause__, BrokenPipeError)


def test_open_output_file(tmp_path):
  path = tmp_path / "out.txt"
  sink = open_output(str(path))
  sink.write(b"written")
  sink.close()
  assert path.read_bytes() == b"written"
  assert sink.name == str(path)


@pytest.mark.parametrize("name", ["-", "/dev/stdout", ""])
def test_open_output_stdout(name):
  assert open_output(name).name == "-"


def test_list_directory_sorted(tmp_path):
  (tmp_path / "b.txt").write_bytes(b"12345")
  (tmp_path / "a.txt").write_bytes(b"")
  (tmp_path / "sub").mkdir()

  entries = list_entries(str(tmp_path))
  assert [e.name for e in entries] == ["a.txt", "b.txt", "sub"]
  assert entries[1].size == 5
  assert entries[2].mode.startswith("d")
  assert entries[0].mode.startswith("-")


def test_list_single_file(tmp_path):
  path = tmp_path / "only.txt"
  path.write_bytes(b"x")

  (entry,) = list_entries(str(path))
  assert entry.name == "only.txt"
  assert entry.size == 1
  assert "T" in entry.modified_rfc3339


def test_list_missing_path(tmp_path):
  with pytest.raises(SourceError):
    list_entries(str(tmp_path / "nope"))


def test_list_http_unsupported():
  with pytest.raises(SourceError, match="not supported"):
    list_entries("https://example.test/")


class ShortWriteStream(io.BytesIO):
  """Accepts at most ``limit`` bytes per call, like an unbuffered pipe."""

  def __init__(self, limit):
    super().__init__()
    self.limit = limit

  def write(self, data):
    return super().write(bytes(data)[: self.limit])


def test_output_sink_completes_short_writes():
  stream = ShortWriteStream(limit=3)
  sink = OutputSink("-", stream, owns=False)
  assert sink.write(b"abcdefgh") == 8
  assert stream.getvalue() == b"abcdefgh"


def test_output_sink_stream_accepting_nothing():
  sink = OutputSink("-", ShortWriteStream(limit=0), owns=False)
  with pytest.raises(SinkError, match="accepted no bytes") as info:
    sink.write(b"abc")
  assert info.value.accepted == 0


def test_open_output_keeps_relative_name(tmp_path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  sink = open_output("out.txt")
  sink.close()
  assert sink.name == "out.txt"
  assert (tmp_path / "out.txt").exists()


def test_open_output_expands_home(tmp_path, monkeypatch):
  monkeypatch.setenv("HOME", str(tmp_path))
  sink = open_output("~/home.txt")
  sink.close()
  assert sink.name == str(tmp_path / "home.txt")
