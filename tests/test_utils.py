import math
import random
import re

import pytest

from pulsarkit import utils


def test_argsort_orders_values_and_is_stable():
    values = [3, 1, 2, 1, 3, 0]
    idx = utils.argsort(values)
    assert sorted(idx) == list(range(len(values)))
    assert [values[i] for i in idx] == sorted(values)
    for a, b in zip(idx, idx[1:]):
        if values[a] == values[b]:
            assert a < b


def test_argsort_descending_orders_values_and_is_stable():
    values = [3, 1, 2, 1, 3, 0]
    idx = utils.argsort_descending(values)
    assert [values[i] for i in idx] == sorted(values, reverse=True)
    for a, b in zip(idx, idx[1:]):
        if values[a] == values[b]:
            assert a < b


def test_argsort_points_by_dimension():
    points = [[5, 0], [1, 9], [3, 4], [1, 2]]
    idx = utils.argsort_points(points, 0)
    assert [points[i][0] for i in idx] == sorted(p[0] for p in points)
    assert idx.index(1) < idx.index(3)
    idx1 = utils.argsort_points(points, 1)
    assert [points[i][1] for i in idx1] == sorted(p[1] for p in points)


def test_kadane_classic_example():
    assert utils.kadane([-2, 1, -3, 4, -1, 2, 1, -5, 4]) == (6, 3, 6)


def test_kadane_all_negative_falls_back_to_first_element():
    assert utils.kadane([-3.0, -1.0, -2.0]) == (-3.0, 0, 0)


def test_kadane_matches_best_subarray():
    rng = random.Random(7)
    for _ in range(50):
        arr = [rng.randint(-5, 5) for _ in range(rng.randint(1, 12))]
        best, start, end = utils.kadane(arr)
        if max(arr) < 0:
            assert (best, start, end) == (arr[0], 0, 0)
            continue
        assert sum(arr[start:end + 1]) == best
        brute = max(
            sum(arr[i:j + 1]) for i in range(len(arr)) for j in range(i, len(arr))
        )
        assert best == brute


def test_kadane_empty_raises():
    with pytest.raises(ValueError):
        utils.kadane([])


def test_format_val_err_integer_error():
    assert utils.format_val_err(12.0, 3.0) == "12(3)"


@pytest.mark.parametrize("val,err", [(1.234, 0.005), (0.5, 0.02), (123.456, 0.07)])
def test_format_val_err_plain_round_trip(val, err):
    text = utils.format_val_err(val, err)
    match = re.fullmatch(r"(-?[0-9.]+)\(([0-9]+)\)", text)
    assert match is not None
    assert math.isclose(float(match.group(1)), val, rel_tol=1e-3)


@pytest.mark.parametrize("val,err", [(1.23e-6, 4e-8), (5.5e8, 3e6)])
def test_format_val_err_sci_round_trip(val, err):
    text = utils.format_val_err(val, err, style="sci")
    match = re.fullmatch(r"(-?[0-9.]+)\(([0-9]+)\)e(-?[0-9]+)", text)
    assert match is not None
    mantissa = float(match.group(1))
    exponent = int(match.group(3))
    assert 1 <= mantissa < 10
    assert math.isclose(mantissa * 10.0**exponent, val, rel_tol=1e-2)


def test_format_val_err_sci_plain_range_unchanged():
    assert utils.format_val_err(1.5, 0.2, style="sci") == utils.format_val_err(1.5, 0.2)


def test_format_val_err_sci_zero_zero_raises():
    with pytest.raises(ValueError):
        utils.format_val_err(0.0, 0.0, style="sci")


def test_get_rad_radec_twelve_hours_is_pi():
    ra, dec = utils.get_rad_radec("12:00:00", "00:00:00")
    assert math.isclose(ra, math.pi)
    assert dec == 0.0


def test_get_rad_radec_padding_and_compression():
    full = utils.get_rad_radec("06:30:00", "-10:30:00")
    assert utils.get_rad_radec("06:30", "-10:30") == full
    assert utils.get_rad_radec("06::30", "-10::30") == utils.get_rad_radec("06:30", "-10:30")


def test_get_rad_radec_sign_symmetry():
    _, dec_pos = utils.get_rad_radec("0", "20:15:10")
    _, dec_neg = utils.get_rad_radec("0", "-20:15:10")
    assert math.isclose(dec_neg, -dec_pos)
    _, dec_negzero = utils.get_rad_radec("0", "-00:30:00")
    assert dec_negzero < 0


def test_get_rad_radec_bad_text_raises():
    with pytest.raises(ValueError):
        utils.get_rad_radec("ab:cd", "00:00:00")


def test_get_bestfit_recovers_line():
    ref = [0.0, 1.0, 2.5, 4.0, 7.0]
    data = [2.0 * r + 1.0 for r in ref]
    a, b = utils.get_bestfit(data, ref)
    assert math.isclose(a, 2.0)
    assert math.isclose(b, 1.0)


def test_get_bestfit_length_mismatch():
    with pytest.raises(ValueError):
        utils.get_bestfit([1.0, 2.0], [1.0])


def test_dmdelay_properties():
    assert utils.dmdelay(100.0, 1400.0, 1400.0) == 0.0
    assert math.isclose(utils.dmdelay(1.0, 1e300, 1.0), 4.148741601e3)
    d = utils.dmdelay(10.0, 1500.0, 1200.0)
    assert d > 0
    assert math.isclose(utils.dmdelay(20.0, 1500.0, 1200.0), 2 * d)
    assert math.isclose(utils.dmdelay(10.0, 1200.0, 1500.0), -d)