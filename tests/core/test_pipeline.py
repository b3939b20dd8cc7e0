"""
Tests for Chain Composition.

Verifies:
1. Stages are wrapped in the documented order.
2. Every stage and every chain is invariant under re-chunking of its input.
3. The accepted count always equals the input length.
"""

import io

from hypothesis import given, settings, strategies as st

from allcat import render
from allcat.config import DisplayOptions
from allcat.core import (
  BlankSqueezer,
  LineNumberer,
  NonprintEscaper,
  NumberingMode,
  build_chain,
  describe_chain,
  end_marker,
  tab_escaper,
)
from allcat.core.replacer import ByteReplacer

# Biased towards the bytes the stages care about.
_bytes = st.lists(
  st.one_of(st.sampled_from([0x0A, 0x0A, 0x09, ord("a"), ord(" ")]), st.integers(0, 255)),
  max_size=120,
).map(bytes)

_STAGES = [
  end_marker,
  tab_escaper,
  NonprintEscaper,
  BlankSqueezer,
  lambda inner: LineNumberer(inner, NumberingMode.ALL),
  lambda inner: LineNumberer(inner, NumberingMode.NONBLANK),
]

_options = st.builds(
  DisplayOptions,
  show_ends=st.booleans(),
  numbering=st.sampled_from([None, NumberingMode.ALL, NumberingMode.NONBLANK]),
  squeeze_blank=st.booleans(),
  show_nonprinting=st.booleans(),
  show_tabs=st.booleans(),
)


def _chunk(data: bytes, cuts):
  points = sorted({c % (len(data) + 1) for c in cuts})
  chunks, last = [], 0
  for p in points:
    chunks.append(data[last:p])
    last = p
  chunks.append(data[last:])
  return chunks


def _feed(factory, chunks):
  buffer = io.BytesIO()
  out = factory(buffer)
  for chunk in chunks:
    assert out.write(chunk) == len(chunk)
  return buffer.getvalue()


def test_empty_options_return_sink_itself(sink):
  assert build_chain(sink, DisplayOptions()) is sink


def test_composition_order(sink):
  opts = DisplayOptions.from_flags(show_all=True, number=True, squeeze_blank=True)
  out = build_chain(sink, opts)

  assert isinstance(out, ByteReplacer) and out.sep == ord("\t")
  assert isinstance(out.inner, NonprintEscaper)
  assert isinstance(out.inner.inner, BlankSqueezer)
  assert isinstance(out.inner.inner.inner, LineNumberer)
  assert out.inner.inner.inner.inner.sep == ord("\n")
  assert out.inner.inner.inner.inner.inner is sink


def test_describe_chain(sink):
  out = build_chain(sink, DisplayOptions(show_tabs=True, numbering=NumberingMode.NONBLANK))
  names = describe_chain(out)
  assert names[0].startswith("ByteReplacer(")
  assert names[1] == "LineNumberer(mode='nonblank', lineno=0)"
  assert names[-1] == "RecordingSink"


def test_show_all_with_numbers():
  data = b"a\tb\x01\n\n\nc\n"
  assert render(data, show_all=True, number=True, squeeze_blank=True) == (
    b"     1\ta^Ib^A$\n     2\t$\n     3\tc$\n"
  )


def test_tab_escaping_precedes_numbering():
  """The numbering TAB is added downstream of the tab escaper, so it stays a TAB."""
  assert render(b"x\ty\n", show_tabs=True, number=True) == b"     1\tx^Iy\n"


def test_end_marker_sees_numbered_lines():
  assert render(b"\n", show_ends=True, number_nonblank=True) == b"$\n"


def test_close_reaches_final_sink_once(sink):
  out = build_chain(sink, DisplayOptions.from_flags(show_all=True, number=True, squeeze_blank=True))
  out.close()
  assert sink.closed == 1


def test_flush_reaches_final_sink(sink):
  out = build_chain(sink, DisplayOptions(show_ends=True, squeeze_blank=True))
  out.flush()
  assert sink.flushed == 1


def test_stage_context_manager_closes(sink):
  with end_marker(sink) as out:
    out.write(b"a\n")
  assert sink.closed == 1


@settings(max_examples=200)
@given(data=_bytes, cuts=st.lists(st.integers(0, 200), max_size=8), index=st.integers(0, len(_STAGES) - 1))
def test_single_stage_chunk_invariance(data, cuts, index):
  factory = _STAGES[index]
  assert _feed(factory, _chunk(data, cuts)) == _feed(factory, [data])


@settings(max_examples=200)
@given(data=_bytes, cuts=st.lists(st.integers(0, 200), max_size=8), options=_options)
def test_chain_chunk_invariance(data, cuts, options):
  def factory(buffer):
    return build_chain(buffer, options)

  assert _feed(factory, _chunk(data, cuts)) == _feed(factory, [data])


@given(data=_bytes)
def test_byte_at_a_time_matches_whole(data):
  def factory(buffer):
    return build_chain(buffer, DisplayOptions.from_flags(show_all=True, number_nonblank=True, squeeze_blank=True))

  assert _feed(factory, [data[i : i + 1] for i in range(len(data))]) == _feed(factory, [data])


@given(data=_bytes)
def test_end_marker_only_inserts(data):
  """Dropping every inserted '$' gives back the input unchanged."""
  out = render(data, show_ends=True)
  assert out.replace(b"$\n", b"\n") == data
