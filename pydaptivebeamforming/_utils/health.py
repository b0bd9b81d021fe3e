# pydaptivebeamforming/_utils/health.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np

__all__ = ["NumericHealth"]


@dataclass
class NumericHealth:
    """
    Per-bin counters of numeric-health events seen by a beamformer.

    Attributes
    ----------
    n_bins : int
        Number of processed frequency bins.
    frames : int
        Number of frames processed since construction (or the last reset).
    rls_resets : ndarray of int, shape ``(n_bins,)``
        Times each bin's RLS state was found degenerate and re-initialized.
    pb_clamps : ndarray of int, shape ``(n_bins,)``
        Frames in which the projection-back denominator was floored.
    nonfinite_repairs : ndarray of int, shape ``(n_bins,)``
        Frames in which a non-finite output sample was zeroed.
    """

    n_bins: int
    frames: int = 0
    rls_resets: np.ndarray = field(init=False)
    pb_clamps: np.ndarray = field(init=False)
    nonfinite_repairs: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        self.rls_resets = np.zeros(self.n_bins, dtype=np.int64)
        self.pb_clamps = np.zeros(self.n_bins, dtype=np.int64)
        self.nonfinite_repairs = np.zeros(self.n_bins, dtype=np.int64)

    @property
    def healthy(self) -> bool:
        """True when no bin ever needed a reset or a non-finite repair."""
        return not (self.rls_resets.any() or self.nonfinite_repairs.any())

    def reset(self) -> None:
        self.frames = 0
        self.rls_resets.fill(0)
        self.pb_clamps.fill(0)
        self.nonfinite_repairs.fill(0)

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the counters, suitable for ``ProcessingResult.extra``."""
        return {
            "frames": int(self.frames),
            "rls_resets": self.rls_resets.copy(),
            "pb_clamps": self.pb_clamps.copy(),
            "nonfinite_repairs": self.nonfinite_repairs.copy(),
        }

    def __repr__(self) -> str:
        return (
            f"<NumericHealth frames={self.frames} rls_resets={int(self.rls_resets.sum())} "
            f"pb_clamps={int(self.pb_clamps.sum())} "
            f"nonfinite_repairs={int(self.nonfinite_repairs.sum())}>"
        )
