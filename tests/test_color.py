"""Test 16-bit channel conversions.

Tests for src.utils.color:
    - expand_8bit / to_8bit byte replication and truncation
    - premultiply: integer c * a // 0xFFFF, alpha passthrough
    - unpremultiply: opaque passthrough, zero alpha → zeros, clipping
    - premultiply(unpremultiply(x)) == x for every valid premultiplied x
    - Premultiplied channels never exceed alpha

Test cases:
    - test_expand_8bit()
    - test_to_8bit()
    - test_premultiply_opaque_is_identity()
    - test_premultiply_values()
    - test_premultiplied_channels_bounded_by_alpha()
    - test_unpremultiply_zero_alpha()
    - test_unpremultiply_recovers_straight_color()
    - test_unpremultiply_clips()
    - test_premultiply_inverts_unpremultiply()

Run:
    pytest tests/test_color.py -v
"""

import numpy as np
import pytest

from src.utils import color

M = color.MAX_CHANNEL


@pytest.fixture
def straight():
    rng = np.random.RandomState(0)
    return rng.randint(0, M + 1, size=(16, 16, 4)).astype(np.uint16)


def test_expand_8bit():
    img = np.array([0, 1, 128, 255], dtype=np.uint8)
    out = color.expand_8bit(img)
    assert out.dtype == np.uint16
    assert out.tolist() == [0, 0x0101, 0x8080, 0xFFFF]


def test_to_8bit():
    img = np.array([0, 0x00FF, 0x0100, 0x8080, 0xFFFF], dtype=np.uint16)
    out = color.to_8bit(img)
    assert out.dtype == np.uint8
    assert out.tolist() == [0, 0, 1, 128, 255]


def test_8bit_roundtrip_exact():
    img = np.arange(256, dtype=np.uint8)
    np.testing.assert_array_equal(color.to_8bit(color.expand_8bit(img)), img)


def test_premultiply_opaque_is_identity():
    px = np.array([[123, 45678, 65535, M]], dtype=np.uint16)
    np.testing.assert_array_equal(color.premultiply(px), px)


def test_premultiply_values():
    px = np.array([65535, 32896, 0, 32896], dtype=np.uint16)
    out = color.premultiply(px)
    assert out.dtype == np.uint16
    assert out.tolist() == [32896, 32896 * 32896 // M, 0, 32896]

    zero = color.premultiply(np.array([M, M, M, 0], dtype=np.uint16))
    assert zero.tolist() == [0, 0, 0, 0]


def test_premultiplied_channels_bounded_by_alpha(straight):
    pm = color.premultiply(straight)
    assert np.all(pm[..., :3] <= pm[..., 3:4])
    np.testing.assert_array_equal(pm[..., 3], straight[..., 3])


def test_unpremultiply_zero_alpha():
    px = np.array([0, 0, 0, 0], dtype=np.uint16)
    assert color.unpremultiply(px).tolist() == [0, 0, 0, 0]


def test_unpremultiply_opaque_passthrough():
    px = np.array([[1, 2, 3, M], [M, 0, 7, M]], dtype=np.uint16)
    np.testing.assert_array_equal(color.unpremultiply(px), px)


def test_unpremultiply_recovers_straight_color(straight):
    """Within the precision lost to integer premultiplication."""
    straight[..., 3] = np.maximum(straight[..., 3], 0x8000)
    back = color.unpremultiply(color.premultiply(straight))

    np.testing.assert_array_equal(back[..., 3], straight[..., 3])
    diff = np.abs(back[..., :3].astype(int) - straight[..., :3].astype(int))
    assert diff.max() <= 2


def test_unpremultiply_clips():
    """Invalid premultiplied data (color > alpha) clips to the channel range."""
    px = np.array([M, 40000, 10, 1000], dtype=np.uint16)
    out = color.unpremultiply(px)
    assert out[0] == M
    assert out[1] == M
    assert out[2] == (10 * M + 999) // 1000
    assert out[3] == 1000


def test_premultiply_inverts_unpremultiply(straight):
    """Straight-color PNG output must decode back to the same canvas."""
    pm = color.premultiply(straight)
    np.testing.assert_array_equal(color.premultiply(color.unpremultiply(pm)), pm)


@pytest.mark.parametrize("px", [
    [14260, 7968, 1677, 39321],
    [1, 0, 1, 1],
    [2, 1, 0, 3],
    [0x7FFF, 0x7FFE, 1, 0x8000],
    [65533, 1, 0, 65534],
])
def test_premultiply_inverts_unpremultiply_edges(px):
    px = np.array(px, dtype=np.uint16)
    assert color.premultiply(color.unpremultiply(px)).tolist() == px.tolist()
