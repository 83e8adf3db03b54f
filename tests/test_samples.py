import math

import pytest

from tsfile_core.protocol import BIN_TYPE_FIX2, BIN_TYPE_FLT4, FULL_SCALE
from tsfile_core.samples import (
    pack_pairs,
    round_half_away,
    to_fixed,
    to_physical,
    unpack_pairs,
)


@pytest.mark.parametrize(
    "x, expected",
    [(2.5, 3), (-2.5, -3), (1.5, 2), (-1.5, -2), (0.49, 0), (-0.49, 0), (7.0, 7)],
)
def test_round_half_away_from_zero(x, expected):
    assert round_half_away(x) == expected


@pytest.mark.parametrize("bin_type", [BIN_TYPE_FIX2, BIN_TYPE_FLT4])
@pytest.mark.parametrize("scale", [0.5, 1.0, 3.75])
def test_quantization_error_within_one_step(bin_type, scale):
    full = FULL_SCALE[bin_type]
    step = scale / full
    limit = 32767 * step
    for frac in (-1.0, -0.731, -0.25, -1e-6, 0.0, 1e-6, 0.1234567, 0.5, 0.999):
        value = frac * limit
        back = to_physical(to_fixed(value, full, scale), full, scale)
        assert abs(back - value) <= step / 2 * (1 + 1e-9)


def test_fix2_error_bounded_by_full_scale_fraction():
    full = FULL_SCALE[BIN_TYPE_FIX2]
    value = 0.3333333333
    back = to_physical(to_fixed(value, full, 1.0), full, 1.0)
    assert abs(back - value) <= 1 / 32767


def test_known_values():
    full = FULL_SCALE[BIN_TYPE_FIX2]
    assert to_fixed(100 / 32767 * 0.5, full, 0.5) == 100
    assert to_fixed(-200 / 32767 * 0.5, full, 0.5) == -200
    assert to_physical(32767, full, 2.0) == 2.0


def test_out_of_range_saturates_with_warning():
    full = FULL_SCALE[BIN_TYPE_FIX2]
    with pytest.warns(UserWarning):
        assert to_fixed(10.0, full, 0.5) == 32767
    with pytest.warns(UserWarning):
        assert to_fixed(-math.inf, full, 0.5) == -32768


def test_nan_is_rejected():
    with pytest.raises(ValueError):
        to_fixed(math.nan, FULL_SCALE[BIN_TYPE_FIX2], 1.0)


def test_pairs_pack_and_ignore_trailing_bytes():
    payload = pack_pairs([(1, -1), (32767, -32768)])
    assert len(payload) == 8
    assert unpack_pairs(payload + b"\x00\x01") == [(1, -1), (32767, -32768)]
