from __future__ import annotations

import pytest

from geo_agent_viewer.frame_decoder import FrameDecoder

STREAM = (
    'data: {"content": {"parts": [{"text": "Hello"}]}}\n'
    "\n"
    ": keep-alive comment\n"
    'data: {"content": {"parts": [{"text": " world"}]}}\r\n'
    "event: message\n"
    "data: [DONE]\n"
)
EXPECTED = [
    '{"content": {"parts": [{"text": "Hello"}]}}',
    '{"content": {"parts": [{"text": " world"}]}}',
]


def _feed_all(fragments: list[str]) -> list[str]:
    decoder = FrameDecoder()
    frames: list[str] = []
    for fragment in fragments:
        frames.extend(decoder.feed(fragment))
    return frames


def test_single_fragment_yields_data_frames_only() -> None:
    assert _feed_all([STREAM]) == EXPECTED


@pytest.mark.parametrize("cut", range(1, len(STREAM)))
def test_split_at_any_boundary_yields_same_frames(cut: int) -> None:
    assert _feed_all([STREAM[:cut], STREAM[cut:]]) == EXPECTED


def test_character_by_character_feed() -> None:
    assert _feed_all(list(STREAM)) == EXPECTED


def test_partial_line_is_held_until_line_break() -> None:
    decoder = FrameDecoder()
    assert list(decoder.feed('data: {"a"')) == []
    assert decoder.pending == 'data: {"a"'
    assert list(decoder.feed(": 1}\n")) == ['{"a": 1}']
    assert decoder.pending == ""


def test_done_sentinel_is_recorded_not_yielded() -> None:
    decoder = FrameDecoder()
    assert list(decoder.feed("data: [DONE]\n")) == []
    assert decoder.saw_done is True


def test_indented_prefix_is_accepted_after_trim() -> None:
    assert _feed_all(['   data: {"x": 1}   \n']) == ['{"x": 1}']


def test_prefix_without_space_is_not_a_frame() -> None:
    assert _feed_all(['data:{"x": 1}\n']) == []


def test_flush_emits_trailing_frame_without_newline() -> None:
    decoder = FrameDecoder()
    assert list(decoder.feed('data: {"x": 1}')) == []
    assert list(decoder.flush()) == ['{"x": 1}']
    assert list(decoder.flush()) == []


def test_reset_discards_partial_frame() -> None:
    decoder = FrameDecoder()
    list(decoder.feed('data: {"x": '))
    decoder.reset()
    assert list(decoder.feed("1}\n")) == []
