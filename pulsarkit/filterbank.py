"""Reading and writing of SIGPROC filterbank files."""

from __future__ import annotations

import copy as _copy
import os
import struct
import warnings
from typing import BinaryIO, Optional

import numpy as np

from .kernels import unpack_bits

_MAX_STRING = 80

_DOUBLE_KEYS = frozenset(
    {
        "az_start",
        "za_start",
        "src_raj",
        "src_dej",
        "tstart",
        "tsamp",
        "period",
        "fch1",
        "foff",
        "refdm",
    }
)

_INT_KEYS = frozenset(
    {
        "nchans",
        "telescope_id",
        "machine_id",
        "data_type",
        "ibeam",
        "nbeams",
        "nbits",
        "barycentric",
        "pulsarcentric",
        "nbins",
        "nifs",
        "npuls",
    }
)

_SAMPLES_PER_BYTE = {1: 8, 2: 4, 4: 2, 8: 1}

_TELESCOPES = {
    0: "Fake",
    1: "Arecibo",
    2: "Ooty",
    3: "Nancay",
    4: "Parkes",
    5: "Jodrell",
    6: "GBT",
    7: "GMRT",
    8: "Effelsberg",
    9: "ATA",
    10: "SRT",
    11: "LOFAR",
    12: "VLA",
    20: "CHIME",
    21: "FAST",
    64: "MeerKAT",
    65: "KAT-7",
}

_TELESCOPE_IDS = {name.lower(): ident for ident, name in _TELESCOPES.items()}


class FilterbankError(Exception):
    """Raised when a filterbank file cannot be read or written."""


def get_telescope_name(telescope_id: int) -> str:
    """Return the telescope name for a SIGPROC telescope id, or ``"Unknown"``."""
    return _TELESCOPES.get(telescope_id, "Unknown")


def get_telescope_id(name: str) -> int:
    """Return the SIGPROC telescope id for a name (case-insensitive), or -1."""
    return _TELESCOPE_IDS.get(name.lower(), -1)


def get_nsamples(filename: str, header_size: int, nbits: int, nifs: int, nchans: int) -> int:
    """Number of whole samples held in the data part of a filterbank file."""
    try:
        size = os.path.getsize(filename)
    except OSError as exc:
        raise FilterbankError(f"can not access {filename}") from exc
    if nbits <= 0 or nifs <= 0 or nchans <= 0:
        raise FilterbankError(
            f"invalid data layout: nbits={nbits}, nifs={nifs}, nchans={nchans}"
        )
    datasize = size - header_size
    return int(datasize / (nbits / 8.0) / nifs / nchans)


def _put_string(stream: BinaryIO, text: str) -> None:
    raw = text.encode("latin-1")
    stream.write(struct.pack("<i", len(raw)))
    stream.write(raw)


class Filterbank:
    """A SIGPROC filterbank file: header fields, frequency table and samples.

    Samples are kept as a flat array of ``ndata * nifs * nchans`` values,
    one byte per sample for 1 to 8 bits and ``float32`` for 32 bits.
    """

    def __init__(self, filename: str = "") -> None:
        self.filename = filename
        self.header_size = 0
        self.use_frequence_table = False

        self.telescope_id = 0
        self.machine_id = 0
        self.data_type = 1
        self.rawdatafile = ""
        self.source_name = ""
        self.barycentric = 0
        self.pulsarcentric = 0
        self.ibeam = 0
        self.nbeams = 0
        self.npuls = 0
        self.nbins = 0
        self.az_start = 0.0
        self.za_start = 0.0
        self.src_raj = 0.0
        self.src_dej = 0.0
        self.tstart = 0.0
        self.tsamp = 0.0
        self.nbits = 0
        self.nsamples = 0
        self.nifs = 0
        self.nchans = 0
        self.fch1 = 0.0
        self.foff = 0.0
        self.refdm = 0.0
        self.period = 0.0

        self.frequency_table = np.zeros(0, dtype=np.float64)
        self.ndata = 0
        self.data: Optional[np.ndarray] = None
        self._file: Optional[BinaryIO] = None

    def __enter__(self) -> "Filterbank":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying file, if one is open."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def copy(self) -> "Filterbank":
        """Return an independent copy that has no open file."""
        clone = Filterbank.__new__(Filterbank)
        for key, value in vars(self).items():
            setattr(clone, key, None if key == "_file" else _copy.deepcopy(value))
        return clone

    def _require_file(self) -> BinaryIO:
        if self._file is None:
            raise FilterbankError("file is not open")
        return self._file

    def _read_value(self, fmt: str):
        stream = self._require_file()
        size = struct.calcsize(fmt)
        raw = stream.read(size)
        if len(raw) < size:
            raise FilterbankError("unexpected end of header")
        return struct.unpack(fmt, raw)[0]

    def _get_string(self) -> str:
        stream = self._require_file()
        raw = stream.read(4)
        if len(raw) < 4:
            raise FilterbankError("error in reading the header of file")
        (nchar,) = struct.unpack("<i", raw)
        if nchar > _MAX_STRING or nchar < 1:
            return ""
        return stream.read(nchar).decode("latin-1")

    def read_header(self) -> None:
        """Open the file and parse its header.

        Sets ``header_size``, ``nsamples`` and the frequency table, and leaves
        the file positioned at the start of the data.
        """
        self.close()
        try:
            self._file = open(self.filename, "rb")
        except OSError as exc:
            raise FilterbankError(f"can not open file {self.filename}") from exc

        try:
            self._parse_header()
        except Exception:
            self.close()
            raise

    def _parse_header(self) -> None:
        if self._get_string() != "HEADER_START":
            raise FilterbankError("non-standard file format")

        expecting_rawdatafile = False
        expecting_source_name = False
        table: list[float] = []

        while True:
            key = self._get_string()
            if key == "HEADER_END":
                break
            if key == "rawdatafile":
                expecting_rawdatafile = True
            elif key == "source_name":
                expecting_source_name = True
            elif key == "FREQUENCY_START":
                self.use_frequence_table = True
                table = []
            elif key == "FREQUENCY_END":
                self.nchans = len(table)
            elif key == "fchannel":
                table.append(self._read_value("<d"))
                self.fch1 = self.foff = 0.0
                self.use_frequence_table = True
            elif key in _DOUBLE_KEYS:
                setattr(self, key, self._read_value("<d"))
            elif key in _INT_KEYS:
                setattr(self, key, self._read_value("<i"))
            elif key == "nsamples":
                # Kept only for older files; the count comes from the file size.
                self._read_value("<i")
            elif expecting_rawdatafile:
                self.rawdatafile = key
                expecting_rawdatafile = False
            elif expecting_source_name:
                self.source_name = key
                expecting_source_name = False
            else:
                raise FilterbankError(f"unknown header parameter: {key!r}")

        self.header_size = self._require_file().tell()
        self.nsamples = get_nsamples(
            self.filename, self.header_size, self.nbits, self.nifs, self.nchans
        )
        if self.use_frequence_table:
            self.frequency_table = np.asarray(table, dtype=np.float64)
        else:
            self.frequency_table = self.fch1 + np.arange(self.nchans) * self.foff

    def read_data(self, nsamples: Optional[int] = None, nstart: Optional[int] = None) -> np.ndarray:
        """Read samples from the open file and return them.

        With no ``nsamples`` all ``self.nsamples`` samples are read. With
        ``nstart`` reading starts at that sample, counted from the header end.
        Packed samples of fewer than 8 bits are expanded to one byte each.
        """
        stream = self._require_file()
        per_byte = _SAMPLES_PER_BYTE.get(self.nbits)
        if per_byte is None:
            raise FilterbankError(f"data type unsupported: nbits={self.nbits}")
        if self.nifs <= 0 or self.nchans <= 0:
            raise FilterbankError("nifs and nchans must be positive")

        if nstart is not None:
            offset = int(nstart * self.nchans * self.nifs * (self.nbits / 8.0))
            stream.seek(self.header_size + offset)

        whole = nsamples is None
        count = self.nsamples if whole else nsamples
        nchr = count * self.nifs * self.nchans
        packed = np.frombuffer(stream.read(nchr // per_byte), dtype=np.uint8)

        if self.nbits == 8:
            self.data = packed.copy()
        else:
            self.data = unpack_bits(packed, self.nbits)
        self.ndata = self.data.size // (self.nifs * self.nchans)

        if whole and self.nbits == 8:
            if self.data.size != nchr:
                warnings.warn("data ends unexpectedly, read to end of file", RuntimeWarning)
            self.nsamples = self.ndata
        return self.data

    def set_data(self, data, nsamples: int, nifs: int, nchans: int) -> None:
        """Replace the samples with ``nsamples`` 8-bit samples from ``data``."""
        if self.nbits != 8:
            raise FilterbankError(f"data type unsupported: nbits={self.nbits}")
        values = np.asarray(data, dtype=np.uint8).ravel()
        nchr = nsamples * nifs * nchans * self.nbits // 8
        if values.size < nchr:
            raise FilterbankError("not enough samples for the given shape")
        self.nifs = nifs
        self.nchans = nchans
        self.data = values[:nchr].copy()
        self.ndata = nsamples

    def write_header(self) -> None:
        """Create the file and write the header; the file stays open for data."""
        self.close()
        try:
            self._file = open(self.filename, "wb")
        except OSError as exc:
            raise FilterbankError(f"can not open file {self.filename}") from exc

        out = self._file
        _put_string(out, "HEADER_START")
        _put_string(out, "source_name")
        _put_string(out, self.source_name)

        if self.use_frequence_table or (self.fch1 == 0.0 and self.foff == 0.0):
            table = np.asarray(self.frequency_table, dtype=np.float64).ravel()
            if table.size < self.nchans:
                raise FilterbankError("frequency table is shorter than nchans")
            _put_string(out, "FREQUENCY_START")
            for frequency in table[: self.nchans]:
                _put_string(out, "fchannel")
                out.write(struct.pack("<d", float(frequency)))
            _put_string(out, "FREQUENCY_END")

        for key in ("az_start", "za_start", "src_raj", "src_dej", "tstart", "tsamp", "fch1", "foff"):
            _put_string(out, key)
            out.write(struct.pack("<d", float(getattr(self, key))))

        for key in (
            "nchans",
            "telescope_id",
            "machine_id",
            "data_type",
            "ibeam",
            "nbeams",
            "nbits",
            "barycentric",
            "pulsarcentric",
            "nifs",
        ):
            _put_string(out, key)
            out.write(struct.pack("<i", int(getattr(self, key))))

        if self.data_type == 2:
            _put_string(out, "refdm")
            out.write(struct.pack("<d", float(self.refdm)))

        _put_string(out, "HEADER_END")

    def write_data(self) -> None:
        """Append the samples to the file opened by :meth:`write_header`."""
        out = self._require_file()
        if self.data is None:
            raise FilterbankError("no data to write")
        nchr = self.ndata * self.nifs * self.nchans
        if self.nbits == 8:
            out.write(np.asarray(self.data, dtype=np.uint8).ravel()[:nchr].tobytes())
        elif self.nbits == 32:
            out.write(np.asarray(self.data, dtype="<f4").ravel()[:nchr].tobytes())
        else:
            raise FilterbankError(f"data type is not supported: nbits={self.nbits}")