"""A single sub-integration of folded or search-mode pulsar data."""

from __future__ import annotations

import copy as _copy
import enum
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .kernels import unpack_bits


class Mode(enum.Enum):
    """Observation mode of an integration."""

    SEARCH = "search"
    FOLD = "fold"


class DataType(enum.Enum):
    """Storage type of the integration samples."""

    USHORT = "ushort"
    SHORT = "short"
    UINT1 = "uint1"
    UINT2 = "uint2"
    UINT4 = "uint4"
    UINT8 = "uint8"
    FLOAT = "float"


_SEARCH_BITS = {
    DataType.UINT1: 1,
    DataType.UINT2: 2,
    DataType.UINT4: 4,
    DataType.UINT8: 8,
    DataType.FLOAT: 32,
}

# (type maximum, type minimum, numpy storage type) for folded profiles.
_FOLD_RANGES = {
    DataType.SHORT: (32767, 0, np.int16),
    DataType.USHORT: (65535, 0, np.uint16),
}


@dataclass
class Integration:
    """One sub-integration: metadata, per-channel tables and sample data.

    Folded data are stored as ``npol * nchan * nbin`` integers with per
    polarisation/channel scales and offsets. Search data are stored as
    ``nsblk * npol * nchan`` samples, packed into bytes for fewer than 32 bits.
    """

    mode: Mode = Mode.FOLD
    dtype: DataType = DataType.SHORT

    indexval: float = 0.0
    folding_period: float = 0.0
    tsubint: float = 0.0
    offs_sub: float = 0.0
    lst_sub: float = 0.0
    ra_sub: float = 0.0
    dec_sub: float = 0.0
    glon_sub: float = 0.0
    glat_sub: float = 0.0
    fd_ang: float = 0.0
    pos_ang: float = 0.0
    par_ang: float = 0.0
    tel_az: float = 0.0
    tel_zen: float = 0.0
    aux_dm: float = 0.0
    aux_rm: float = 0.0

    npol: int = 0
    nchan: int = 0
    nbin: int = 0
    nsblk: int = 1
    nbits: int = 1

    frequencies: Optional[np.ndarray] = field(default=None, repr=False)
    weights: Optional[np.ndarray] = field(default=None, repr=False)
    offsets: Optional[np.ndarray] = field(default=None, repr=False)
    scales: Optional[np.ndarray] = field(default=None, repr=False)
    data: Optional[np.ndarray] = field(default=None, repr=False)

    def _fold_storage(self):
        try:
            return _FOLD_RANGES[self.dtype]
        except KeyError:
            raise ValueError(f"data type {self.dtype.name} not supported in fold mode") from None

    def _search_bits(self) -> int:
        try:
            return _SEARCH_BITS[self.dtype]
        except KeyError:
            raise ValueError(f"data type {self.dtype.name} not supported in search mode") from None

    def resize(self, npol: int, nchan: int, nbin: int) -> None:
        """Allocate tables and data for the given shape and reset them.

        ``nbin`` is the number of phase bins in fold mode and the number of
        samples per block in search mode. Data are zeroed, scales set to 1,
        offsets and frequencies to 0 and weights to 1.
        """
        if self.mode is Mode.FOLD:
            _, _, storage = self._fold_storage()
            self.npol, self.nchan, self.nbin = npol, nchan, nbin
            self.data = np.zeros(npol * nchan * nbin, dtype=storage)
        else:
            self.nbits = self._search_bits()
            self.npol, self.nchan, self.nsblk = npol, nchan, nbin
            nsamp = nbin * npol * nchan
            if self.dtype is DataType.FLOAT:
                self.data = np.zeros(nsamp, dtype=np.float32)
            else:
                self.data = np.zeros(nsamp * self.nbits // 8, dtype=np.uint8)

        self.frequencies = np.zeros(nchan, dtype=np.float64)
        self.weights = np.ones(nchan, dtype=np.float32)
        self.offsets = np.zeros(npol * nchan, dtype=np.float32)
        self.scales = np.ones(npol * nchan, dtype=np.float32)

    def load_data(self, data, npol: int, nchan: int, nbin: int) -> None:
        """Resize and fill the integration from ``data``.

        In fold mode ``data`` holds ``npol * nchan * nbin`` float profiles that
        are quantised per channel. In search mode it holds the raw samples
        (floats, or packed bytes for fewer than 32 bits), copied as they are.
        """
        self.resize(npol, nchan, nbin)

        if self.mode is Mode.FOLD:
            type_max, type_min, storage = self._fold_storage()
            profiles = np.asarray(data, dtype=np.float32).ravel()
            if profiles.size < npol * nchan * nbin:
                raise ValueError("not enough profile samples for the given shape")
            profiles = profiles[: npol * nchan * nbin].reshape(npol * nchan, nbin)
            if nbin == 0:
                return

            hi = profiles.max(axis=1)
            lo = profiles.min(axis=1)
            scales = ((hi - lo) / np.float32(type_max - type_min)).astype(np.float32)
            if self.dtype is DataType.SHORT:
                offsets = ((hi + lo) * np.float32(0.5)).astype(np.float32)
            else:
                offsets = lo.astype(np.float32)

            safe = np.where(scales == 0, np.float32(1.0), scales)
            quantised = (profiles - offsets[:, None]) / safe[:, None]
            quantised = np.where(scales[:, None] == 0, np.float32(0.0), quantised)
            self.scales = scales
            self.offsets = offsets
            self.data = np.trunc(quantised).astype(storage).ravel()
        else:
            nsamp = self.nsblk * npol * nchan
            if self.dtype is DataType.FLOAT:
                raw = np.asarray(data, dtype=np.float32).ravel()
                count = nsamp
            else:
                raw = np.asarray(data, dtype=np.uint8).ravel()
                count = nsamp * self.nbits // 8
            if raw.size < count:
                raise ValueError("not enough samples for the given shape")
            self.data = raw[:count].copy()

    def load_frequencies(self, frequencies) -> None:
        """Copy channel frequencies, at most ``nchan`` of them."""
        values = np.asarray(frequencies, dtype=np.float64).ravel()
        count = min(values.size, self.nchan)
        self.frequencies[:count] = values[:count]

    def load_weights(self, weights) -> None:
        """Copy channel weights, at most ``nchan`` of them."""
        values = np.asarray(weights, dtype=np.float32).ravel()
        count = min(values.size, self.nchan)
        self.weights[:count] = values[:count]

    def to_char(self, target: "Integration") -> "Integration":
        """Unpack this integration's samples into an 8-bit search ``target``."""
        if target.mode is not Mode.SEARCH:
            raise ValueError("target must be in search mode")
        if target.dtype is not DataType.UINT8 or target.nbits != 8:
            raise ValueError("target must hold 8-bit unsigned samples")
        if (target.nsblk, target.npol, target.nchan) != (self.nsblk, self.npol, self.nchan):
            raise ValueError("target shape does not match")
        if target.data is None:
            raise ValueError("target has no data allocated")
        if self.nbits not in (1, 2, 4, 8):
            raise ValueError(f"unsupported number of bits: {self.nbits}")

        nchr = self.nsblk * self.npol * self.nchan
        raw = np.asarray(self.data, dtype=np.uint8)[: nchr * self.nbits // 8]
        samples = raw.copy() if self.nbits == 8 else unpack_bits(raw, self.nbits)
        target.data[: samples.size] = samples
        return target

    def copy(self) -> "Integration":
        """Return a deep copy with independent arrays."""
        return _copy.deepcopy(self)

    def free(self) -> None:
        """Release the tables and data."""
        self.frequencies = None
        self.weights = None
        self.offsets = None
        self.scales = None
        self.data = None