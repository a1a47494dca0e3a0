"""Sorting, search, formatting and fitting helpers."""

from __future__ import annotations

import math
import re
from typing import Sequence

DM_CONSTANT = 4.148741601e3


def argsort(values: Sequence) -> list[int]:
    """Return indices that stably sort ``values`` in ascending order."""
    return sorted(range(len(values)), key=values.__getitem__)


def argsort_descending(values: Sequence) -> list[int]:
    """Return indices that stably sort ``values`` in descending order."""
    return sorted(range(len(values)), key=values.__getitem__, reverse=True)


def argsort_points(points: Sequence[Sequence], dim: int) -> list[int]:
    """Return indices that stably sort ``points`` by coordinate ``dim``."""
    return sorted(range(len(points)), key=lambda i: points[i][dim])


def kadane(arr: Sequence[float]) -> tuple[float, int, int]:
    """Find the maximum-sum contiguous run.

    Returns ``(max_sum, start, end)`` with ``end`` inclusive. When no run has
    a non-negative sum, the first element is returned with ``start = end = 0``.
    """
    if len(arr) == 0:
        raise ValueError("kadane needs at least one element")

    total = 0.0
    best = -math.inf
    start = 0
    end = -1
    local_start = 0

    for i, value in enumerate(arr):
        total += value
        if total < 0:
            total = 0.0
            local_start = i + 1
        elif total > best:
            best = total
            start = local_start
            end = i

    if end != -1:
        return best, start, end
    return arr[0], 0, 0


def _fixed(value: float, digits: int) -> str:
    return f"{value:.{digits}f}"


def format_val_err(
    val: float,
    err: float,
    style: str = "plain",
    low: int = -5,
    high: int = 6,
) -> str:
    """Format a value with its uncertainty, such as ``1.2340(50)``.

    With ``style="sci"`` values below ``10**low`` or above ``10**high`` are
    written with an exponent suffix, such as ``1.230(40)e-6``.
    """
    if style == "sci" and (val < 10.0**low or val > 10.0**high):
        if val != 0:
            exponent = math.floor(math.log10(abs(val)))
            val *= 10.0**-exponent
            err *= 10.0**-exponent
            if err >= 1:
                s_val, s_err = _fixed(val, 0), _fixed(err, 0)
            else:
                digits = -math.floor(math.log10(err)) + 1
                s_val = _fixed(val, digits)
                s_err = _fixed(err * 10.0**digits, 0)
        else:
            exponent = math.floor(math.log10(abs(err)))
            val *= 10.0**-exponent
            err *= 10.0**-exponent
            s_val, s_err = _fixed(val, 0), _fixed(err, 0)
        return f"{s_val}({s_err})e{exponent}"

    if err >= 1 or (val == 0 and err == 0):
        s_val, s_err = _fixed(val, 0), _fixed(err, 0)
    elif (err < abs(val) and err != 0) or val == 0:
        digits = -math.floor(math.log10(err)) + 1
        s_val = _fixed(val, digits)
        s_err = _fixed(err * 10.0**digits, 0)
    else:
        digits = -math.floor(math.log10(abs(val))) + 1
        s_val = _fixed(val, digits)
        s_err = _fixed(err * 10.0**digits, 0)
    return f"{s_val}({s_err})"


def _sexagesimal_fields(text: str) -> list[str]:
    fields = re.split(r":+", text)
    fields.extend(["0"] * (3 - len(fields)))
    return fields


def get_rad_radec(s_ra: str, s_dec: str) -> tuple[float, float]:
    """Convert ``hh:mm:ss`` and ``dd:mm:ss`` strings to radians."""
    hh, hm, hs = (float(x) for x in _sexagesimal_fields(s_ra)[:3])
    dd, dm, ds = (float(x) for x in _sexagesimal_fields(s_dec)[:3])

    sign = math.copysign(1.0, dd)
    ra = (hh + hm / 60.0 + hs / 3600.0) * 15.0 / 180.0 * math.pi
    dec = sign * (sign * dd + dm / 60.0 + ds / 3600.0) / 180.0 * math.pi
    return ra, dec


def get_bestfit(data: Sequence[float], data_ref: Sequence[float]) -> tuple[float, float]:
    """Least-squares fit ``data ~ a * data_ref + b``; returns ``(a, b)``."""
    if len(data) != len(data_ref):
        raise ValueError("data and data_ref must have the same length")

    xe = float(sum(data))
    se = float(sum(data_ref))
    ss = float(sum(r * r for r in data_ref))
    xs = float(sum(x * r for x, r in zip(data, data_ref)))
    ee = float(len(data))

    denominator = se * se - ss * ee
    a = (xe * se - xs * ee) / denominator
    b = (xs * se - xe * ss) / denominator
    return a, b


def dmdelay(dm: float, fh: float, fl: float) -> float:
    """Dispersion delay in seconds between frequencies ``fh`` and ``fl`` (MHz)."""
    return DM_CONSTANT * dm * (1.0 / (fl * fl) - 1.0 / (fh * fh))