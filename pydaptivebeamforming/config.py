# pydaptivebeamforming/config.py
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping

import numpy as np

from pydaptivebeamforming._utils.typing import ArrayLike, PathLike
from pydaptivebeamforming._utils.validation import require_in_range, require_int

__all__ = [
    "GSCConfig",
    "parse_fixed_weights",
    "load_fixed_weights",
]



@dataclass
class GSCConfig:
    """
    Scalar parameters of the Generalized Sidelobe Canceller.

    Parameters
    ----------
    nchannel_ds : int
        Number of reference channels left after downsampling the blocking
        matrix output.
    rls_ff : float
        RLS forgetting factor, ``0 < rls_ff <= 1``.
    rls_reg : float
        RLS regularization; the inverse covariance starts at ``I / rls_reg``.
    pb_ff : float
        Projection-back forgetting factor, ``0 < pb_ff < 1``.
    pb_ref_channel : int
        Input channel the output level and phase are anchored to.
    f_max : float
        Highest processed frequency in Hz.
    """
    nchannel_ds: int
    rls_ff: float
    rls_reg: float
    pb_ff: float
    pb_ref_channel: int
    f_max: float

    def __post_init__(self) -> None:
        self.nchannel_ds = require_int("nchannel_ds", self.nchannel_ds, minimum=1)
        self.rls_ff = require_in_range("rls_ff", self.rls_ff, 0.0, 1.0, high_inclusive=True)
        self.rls_reg = require_in_range("rls_reg", self.rls_reg, 0.0, np.inf)
        self.pb_ff = require_in_range("pb_ff", self.pb_ff, 0.0, 1.0)
        self.pb_ref_channel = require_int("pb_ref_channel", self.pb_ref_channel, minimum=0)
        self.f_max = require_in_range("f_max", self.f_max, 0.0, np.inf)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GSCConfig":
        """Build a config from a mapping; unknown keys are ignored."""
        names = [f.name for f in fields(cls)]
        missing = [n for n in names if n not in data]
        if missing:
            raise ValueError(f"Missing configuration field(s): {', '.join(missing)}.")
        return cls(**{n: data[n] for n in names})

    @classmethod
    def from_json(cls, path: PathLike) -> "GSCConfig":
        """Load a config from a JSON object file."""
        with open(path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}.")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_fixed_weights(values: ArrayLike, nfft: int, nchannel: int) -> np.ndarray:
    """
    Convert interleaved real/imag fixed weights into a complex matrix.

    Parameters
    ----------
    values : array_like of float
        Flat sequence ``[r0, i0, r1, i1, ...]`` of length
        ``2 * (nfft//2 + 1) * nchannel``, bin-major then channel-minor.
    nfft : int
        FFT size.
    nchannel : int
        Number of channels.

    Returns
    -------
    ndarray of complex, shape ``(nfft//2 + 1, nchannel)``
    """
    n_bins = int(nfft) // 2 + 1
    expected = 2 * n_bins * int(nchannel)

    try:
        w = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Fixed weights must be a sequence of real numbers: {exc}") from exc

    if w.ndim != 1:
        raise ValueError(f"Fixed weights must be a flat sequence. Got shape {w.shape}.")
    if w.size != expected:
        raise ValueError(
            f"Fixed weights have {w.size} values, expected 2 * {n_bins} * {nchannel} = {expected}."
        )
    if not np.all(np.isfinite(w)):
        raise ValueError("Fixed weights contain NaN or inf values.")

    return (w[0::2] + 1j * w[1::2]).reshape(n_bins, int(nchannel))


def load_fixed_weights(path: PathLike, nfft: int, nchannel: int) -> np.ndarray:
    """Read ``{"fixed_weights": [...]}`` from a JSON file and parse it."""
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict) or "fixed_weights" not in data:
        raise ValueError(f"{path}: missing 'fixed_weights' entry.")
    return parse_fixed_weights(data["fixed_weights"], nfft, nchannel)
