"""Array kernels for statistics, normalisation, peak search and bit packing."""

from __future__ import annotations

import numpy as np

_SUPPORTED_BITS = (1, 2, 4, 8)


def _f32(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float32)


def _f64(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def reduce(data) -> float:
    """Sum of ``data`` accumulated in single precision."""
    return float(np.sum(_f32(data), dtype=np.float32))


def accumulate_mean(mean, mean_scale, scale: float, data):
    """Add ``data`` to ``mean`` and ``scale * data`` to ``mean_scale``."""
    values = _f32(data).astype(np.float64)
    return _f64(mean) + values, _f64(mean_scale) + values * scale


def accumulate_mean_var(mean, var, data, scale: float = 1.0):
    """Add ``scale * data`` to ``mean`` and its square to ``var``."""
    values = _f32(data).astype(np.float64) * scale
    return _f64(mean) + values, _f64(var) + values * values


def mean_var_sums(data) -> tuple[float, float]:
    """Return the sum and the sum of squares of ``data`` in double precision."""
    values = _f32(data).astype(np.float64)
    return float(values.sum()), float(np.dot(values, values))


def moment_sums(mean1, mean2, mean3, mean4, corr1, last_data, data):
    """Accumulate first to fourth power sums and the lag-one product.

    Returns the updated ``(mean1, mean2, mean3, mean4, corr1, last_data)``,
    where the new ``last_data`` is ``data`` itself.
    """
    values = _f32(data).astype(np.float64)
    squared = values * values
    return (
        _f64(mean1) + values,
        _f64(mean2) + squared,
        _f64(mean3) + values * squared,
        _f64(mean4) + squared * squared,
        _f64(corr1) + values * _f64(last_data),
        values.copy(),
    )


def normalize(data, weight, mean, stddev) -> np.ndarray:
    """Return ``(data - mean) / stddev * weight``."""
    return (_f32(data) - _f32(mean)) / _f32(stddev) * _f32(weight)


def normalize_inverse(data, mean, stddev_inv) -> np.ndarray:
    """Return ``(data - mean) * stddev_inv``."""
    return (_f32(data) - _f32(mean)) * _f32(stddev_inv)


def remove_baseline(data, a, b, s: float) -> np.ndarray:
    """Subtract the baseline ``a * s + b`` from ``data``."""
    return _f32(data) - (_f32(a) * np.float32(s) + _f32(b))


def remove_baseline_reduce(data, a, b, s: float) -> tuple[np.ndarray, float]:
    """Subtract the baseline and also return the sum of squared residuals."""
    out = remove_baseline(data, a, b, s)
    return out, float(np.sum(out * out, dtype=np.float32))


def kadane2d(arr) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Column-wise maximum-sum run search over a ``(nrow, ncol)`` array.

    Returns ``(max_sum, start, end)`` per column, ``end`` inclusive. Columns
    with no non-negative run get their first element and ``start = end = 0``.
    """
    values = _f32(arr)
    if values.ndim != 2 or values.shape[0] == 0:
        raise ValueError("kadane2d needs a two-dimensional array with at least one row")

    ncol = values.shape[1]
    zero = np.float32(0.0)
    total = np.zeros(ncol, dtype=np.float32)
    best = np.full(ncol, -np.inf, dtype=np.float32)
    start = np.zeros(ncol, dtype=np.int64)
    end = np.full(ncol, -1, dtype=np.int64)
    local_start = np.zeros(ncol, dtype=np.int64)

    for i, row in enumerate(values):
        total = total + row
        negative = total < 0
        better = (total >= 0) & (total > best)
        total = np.where(negative, zero, total)
        local_start = np.where(negative, i + 1, local_start)
        best = np.where(better, total, best)
        start = np.where(better, local_start, start)
        end = np.where(better, i, end)

    empty = end == -1
    best = np.where(empty, values[0], best)
    start = np.where(empty, 0, start)
    end = np.where(empty, 0, end)
    return best, start, end


def _check_bits(nbits: int) -> int:
    if nbits not in _SUPPORTED_BITS:
        raise ValueError(f"unsupported number of bits: {nbits}")
    return 8 // nbits


def scale_pack(data, scl: float, offs: float, nbits: int) -> np.ndarray:
    """Scale, round and clip ``data`` to ``nbits`` and pack into bytes.

    Samples fill each byte starting from the least significant bits.
    """
    per_byte = _check_bits(nbits)
    values = _f32(data).ravel() * np.float32(scl) + np.float32(offs)
    values = np.clip(np.rint(values), 0, 2**nbits - 1).astype(np.uint32)
    if values.size % per_byte:
        raise ValueError(f"number of samples must be a multiple of {per_byte}")

    shifts = np.arange(per_byte, dtype=np.uint32) * nbits
    packed = (values.reshape(-1, per_byte) << shifts).sum(axis=1)
    return packed.astype(np.uint8)


def unpack_bits(raw, nbits: int) -> np.ndarray:
    """Expand packed ``nbits`` samples into one byte each, low bits first."""
    per_byte = _check_bits(nbits)
    packed = np.asarray(raw, dtype=np.uint8).ravel()
    shifts = np.arange(per_byte, dtype=np.uint8) * nbits
    mask = np.uint8(2**nbits - 1)
    return ((packed[:, None] >> shifts) & mask).reshape(-1).astype(np.uint8)