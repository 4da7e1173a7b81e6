"""Tests for block range tiling."""

import math

import pytest

from treasuryscan.indexer.planning import tile


def _assert_exact_cover(windows, from_block, to_block, span):
    assert windows[0].from_block == from_block
    assert windows[-1].to_block == to_block
    for prev, nxt in zip(windows, windows[1:]):
        assert nxt.from_block == prev.to_block + 1
    assert all(w.size <= span for w in windows)
    assert sum(w.size for w in windows) == to_block - from_block + 1
    assert len(windows) == math.ceil((to_block - from_block + 1) / span)


class TestTile:
    def test_even_split(self):
        windows = tile(0, 99, 10)
        assert len(windows) == 10
        assert windows[0].from_block == 0 and windows[0].to_block == 9
        assert windows[-1].from_block == 90 and windows[-1].to_block == 99

    def test_last_window_clamped(self):
        windows = tile(100, 124, 10)
        assert [(w.from_block, w.to_block) for w in windows] == [(100, 109), (110, 119), (120, 124)]

    def test_single_block(self):
        windows = tile(100, 100, 2000)
        assert len(windows) == 1
        assert windows[0].from_block == 100
        assert windows[0].to_block == 100

    def test_span_one(self):
        windows = tile(5, 8, 1)
        assert [w.from_block for w in windows] == [5, 6, 7, 8]
        assert all(w.size == 1 for w in windows)

    def test_span_larger_than_range(self):
        windows = tile(10, 20, 1000)
        assert len(windows) == 1
        assert windows[0].to_block == 20

    @pytest.mark.parametrize(
        "from_block,to_block,span",
        [(0, 0, 1), (0, 1, 1), (1, 1000, 7), (12_345, 67_890, 2000), (7, 8, 3), (0, 9999, 10_000)],
    )
    def test_exact_cover(self, from_block, to_block, span):
        _assert_exact_cover(tile(from_block, to_block, span), from_block, to_block, span)

    def test_deterministic(self):
        assert tile(3, 500, 17) == tile(3, 500, 17)

    def test_from_after_to_rejected(self):
        with pytest.raises(ValueError, match="from_block"):
            tile(101, 100, 10)

    def test_zero_span_rejected(self):
        with pytest.raises(ValueError, match="span"):
            tile(0, 10, 0)

    def test_negative_from_rejected(self):
        with pytest.raises(ValueError):
            tile(-1, 10, 5)
