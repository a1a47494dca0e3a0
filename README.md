# pulsarkit

Python tools for pulsar and fast-transient radio data.

- **`pulsarkit.filterbank`** reads and writes SIGPROC filterbank files.
  `Filterbank.read_header()` parses the keyword header, including
  per-channel frequency tables. `Filterbank.read_data()` reads 1, 2, 4 or
  8-bit samples and expands packed samples to one byte each.
  `Filterbank.write_header()` and `Filterbank.write_data()` write 8-bit or
  32-bit float samples. `get_telescope_name()` and `get_telescope_id()`
  map telescope ids to names and back. `get_nsamples()` counts the samples
  in a file from its size.
- **`pulsarkit.integration`** provides `Integration`, one sub-integration held
  in memory, together with the `Mode` (`FOLD`, `SEARCH`) and `DataType`
  enums. In fold mode, float profiles are quantised per channel to 16-bit
  integers (`SHORT` or `USHORT`), with scales and offsets stored alongside.
  In search mode, raw float or packed 1/2/4/8-bit samples are kept, and
  `to_char()` unpacks them into an 8-bit integration.
- **`pulsarkit.kernels`** contains numpy kernels:
  - running sums and moments: `reduce`, `accumulate_mean`,
    `accumulate_mean_var`, `mean_var_sums`, `moment_sums`
  - normalisation: `normalize`, `normalize_inverse`
  - baseline removal: `remove_baseline`, `remove_baseline_reduce`
  - a column-wise maximum-subarray search: `kadane2d`
  - low-bit quantise-and-pack and unpack: `scale_pack`, `unpack_bits`
- **`pulsarkit.utils`** contains helpers:
  - stable argsorts: `argsort`, `argsort_descending`, `argsort_points`
  - Kadane's maximum subarray: `kadane`
  - `value(error)` formatting: `format_val_err`
  - sexagesimal RA/Dec to radians: `get_rad_radec`
  - a least-squares baseline fit: `get_bestfit`
  - the cold-plasma dispersion delay: `dmdelay`

## Installation

```
pip install .
```

To install and run the tests:

```
pip install .[test]
pytest
```

## Examples

Read a filterbank file:

```python
from pulsarkit.filterbank import Filterbank, get_telescope_name

with Filterbank("obs.fil") as fil:
    fil.read_header()
    print(get_telescope_name(fil.telescope_id), fil.nchans, fil.tsamp)
    block = fil.read_data(1024)   # first 1024 spectra, one byte per sample
```

Quantise folded profiles into an integration:

```python
import numpy as np
from pulsarkit.integration import Integration

it = Integration()
profiles = np.random.default_rng(0).normal(size=(1, 64, 128)).astype(np.float32)
it.load_data(profiles, 1, 64, 128)
print(it.scales[:4], it.offsets[:4])
```

Format a measurement and compute a dispersion delay:

```python
from pulsarkit.utils import format_val_err, dmdelay

format_val_err(1.2345, 0.0051)        # '1.2345(51)'
dmdelay(100.0, 1500.0, 1200.0)        # seconds between 1500 and 1200 MHz
```

## Errors

Functions raise exceptions instead of returning status flags. A filterbank
file that is malformed, unreadable or has an unsupported bit depth raises
`FilterbankError`. Unsupported bit depths and shape mismatches in
`integration` and `kernels` raise `ValueError`.

## What the package does not do

- It does not read or write PSRFITS archives. `Integration` exists only in
  memory, and no module stores it in a file.
- `Filterbank.read_data()` does not read 32-bit float filterbank data. Float
  samples can be written but not read.
- It has no command-line program. Everything is used as a library.