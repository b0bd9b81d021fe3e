# ._utils.validation.py

from __future__ import annotations

from typing import Any, Optional

import numpy as np

__all__ = [
    "require_int",
    "require_in_range",
    "as_frame",
]


def require_int(name: str, value: Any, *, minimum: Optional[int] = None) -> int:
    """Cast ``value`` to int, rejecting floats with a fractional part and bools."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer, float, np.floating)):
        raise TypeError(f"{name} must be an integer. Got {type(value).__name__}.")
    if not np.isfinite(float(value)) or float(value) != int(value):
        raise ValueError(f"{name} must be an integer. Got {value}.")
    out = int(value)
    if minimum is not None and out < minimum:
        raise ValueError(f"{name} must be >= {minimum}. Got {out}.")
    return out


def require_in_range(
    name: str,
    value: Any,
    low: float,
    high: float,
    *,
    low_inclusive: bool = False,
    high_inclusive: bool = False,
) -> float:
    """Cast ``value`` to float and check it lies in the given interval."""
    if isinstance(value, bool):
        raise TypeError(f"{name} must be a real number. Got bool.")
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"{name} must be a real number. Got {value!r}.") from exc

    ok_low = out >= low if low_inclusive else out > low
    ok_high = out <= high if high_inclusive else out < high
    if not (np.isfinite(out) and ok_low and ok_high):
        lb = "[" if low_inclusive else "("
        hb = "]" if high_inclusive else ")"
        raise ValueError(f"{name} must satisfy {name} in {lb}{low}, {high}{hb}. Got {out}.")
    return out


def as_frame(frame: Any, n_bins: int, nchannel: int) -> np.ndarray:
    """
    View an input frame as a complex ``(n_bins, nchannel)`` matrix.

    Accepts either the flat bin-major/channel-minor layout of length
    ``n_bins * nchannel`` or an already shaped ``(n_bins, nchannel)`` array.
    No copy is made when the input is already a complex128 array.
    """
    X = np.asarray(frame)
    if X.shape == (n_bins, nchannel):
        pass
    elif X.ndim == 1 and X.size == n_bins * nchannel:
        X = X.reshape(n_bins, nchannel)
    else:
        raise ValueError(
            f"Frame must have {n_bins * nchannel} samples (flat) or shape "
            f"({n_bins}, {nchannel}). Got shape {X.shape}."
        )
    return X.astype(np.complex128, copy=False)
