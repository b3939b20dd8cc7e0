"""
Tests for Blank Line Squeezing.
"""

from allcat.core.squeeze import BlankSqueezer


def test_squeeze_runs(sink):
  out = BlankSqueezer(sink)
  data = b"\n\n\na\n\n\nb\n"
  assert out.write(data) == len(data)
  assert sink.data == b"\na\n\nb\n"


def test_squeeze_across_calls(sink):
  out = BlankSqueezer(sink)
  out.write(b"a\n\n")
  out.write(b"\n")
  out.write(b"\nb\n")
  assert sink.data == b"a\n\nb\n"


def test_suppressed_blank_still_counts_as_accepted(sink):
  out = BlankSqueezer(sink)
  out.write(b"\n")
  assert out.write(b"\n") == 1
  assert sink.data == b"\n"


def test_line_end_after_partial_line_is_kept(sink):
  out = BlankSqueezer(sink)
  out.write(b"\n")
  out.write(b"a")
  out.write(b"\n\n\n")
  assert sink.data == b"\na\n\n"


def test_partial_line_clears_blank_run(sink):
  out = BlankSqueezer(sink)
  out.write(b"\n\nx")
  out.write(b"\n\n")
  assert sink.data == b"\nx\n\n"


def test_no_blank_lines_untouched(sink):
  out = BlankSqueezer(sink)
  out.write(b"a\nb\nc")
  assert sink.data == b"a\nb\nc"
