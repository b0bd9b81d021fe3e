#  projection_back.projection_back.py
#
#       Recursive single-tap projection back: rescales a beamformer output so
#       that its per-bin level and phase match a reference input channel.

from __future__ import annotations

from typing import Tuple

import numpy as np

from pydaptivebeamforming._utils.typing import BinSelection
from pydaptivebeamforming._utils.validation import require_in_range, require_int


class ProjectionBack:
    """
    Exponentially weighted least-squares gain anchoring an output to a reference.

    Parameters
    ----------
    n_bins : int
        Number of frequency bins.
    forgetting_factor : float, optional
        Smoothing factor ``beta`` with ``0 < beta < 1``. Default is 0.98.
    den_floor : float, optional
        Lower bound applied to the output-power estimate before dividing.
        The floor is absolute, in the units of ``|z|^2``: the default 1e-12
        suits spectra of full-scale (``[-1, 1]``) audio, where per-bin power
        of any audible signal sits far above it. Bins whose smoothed output
        power stays below the floor get their gain scaled down by
        ``d / d_min``, so inputs at a much lower level need a proportionally
        smaller floor. Default is 1e-12.

    Notes
    -----
    Per bin, with output ``z`` and reference ``x_r``:

    .. math::
        n &\\leftarrow \\beta n + (1 - \\beta)\\, z^* x_r, \\\\
        d &\\leftarrow \\beta d + (1 - \\beta)\\, |z|^2, \\\\
        z &\\leftarrow z \\, \\frac{n}{\\max(d, d_{\\min})}.

    ``n`` and ``d`` start at 1 (unit gain). Bins whose rescaled output is not
    finite are zeroed and their statistics restored to the neutral state.
    """

    forgetting_factor: float
    den_floor: float
    num: np.ndarray
    den: np.ndarray

    def __init__(self, n_bins: int, forgetting_factor: float = 0.98, den_floor: float = 1e-12) -> None:
        self.n_bins = require_int("n_bins", n_bins, minimum=1)
        self.forgetting_factor = require_in_range("forgetting_factor", forgetting_factor, 0.0, 1.0)
        self.den_floor = require_in_range("den_floor", den_floor, 0.0, np.inf)

        self.num = np.ones(self.n_bins, dtype=np.complex128)
        self.den = np.ones(self.n_bins, dtype=np.float64)
        self._gain = np.ones(self.n_bins, dtype=np.complex128)
        self._den_eff = np.ones(self.n_bins, dtype=np.float64)

    def reset(self, bins: BinSelection = None) -> None:
        sel = slice(None) if bins is None else bins
        self.num[sel] = 1.0
        self.den[sel] = 1.0

    @property
    def gain(self) -> np.ndarray:
        """Current complex gain ``n / max(d, d_min)``."""
        return self.num / np.maximum(self.den, self.den_floor)

    def process(self, output: np.ndarray, reference: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Update the statistics and rescale ``output`` in place.

        Parameters
        ----------
        output : ndarray of complex, shape ``(n_bins,)``
            Beamformer output; overwritten with the rescaled values.
        reference : array_like of complex, shape ``(n_bins,)``
            Reference channel samples of the same frame.

        Returns
        -------
        (clamped, repaired) : tuple of ndarray of bool
            Bins whose denominator was floored, and bins whose output was
            non-finite and has been zeroed.
        """
        x_r = np.asarray(reference, dtype=np.complex128)
        if output.shape != (self.n_bins,) or x_r.shape != (self.n_bins,):
            raise ValueError(
                f"output and reference must have shape ({self.n_bins},). "
                f"Got {output.shape} and {x_r.shape}."
            )

        beta = self.forgetting_factor

        with np.errstate(over="ignore", invalid="ignore"):
            self.num *= beta
            self.num += (1.0 - beta) * (np.conj(output) * x_r)
            self.den *= beta
            self.den += (1.0 - beta) * (output.real ** 2 + output.imag ** 2)

            clamped = self.den < self.den_floor
            np.maximum(self.den, self.den_floor, out=self._den_eff)
            np.divide(self.num, self._den_eff, out=self._gain)
            output *= self._gain

        repaired = ~np.isfinite(output)
        if repaired.any():
            output[repaired] = 0.0
            self.reset(repaired)
        return clamped, repaired

    def __repr__(self) -> str:
        return f"<ProjectionBack bins={self.n_bins} beta={self.forgetting_factor}>"
# EOF
