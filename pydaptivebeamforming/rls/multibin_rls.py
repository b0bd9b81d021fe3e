#  rls.multibin_rls.py
#
#       Implements a bank of independent complex RLS cancellers, one per
#       frequency bin, updated with the Sherman-Morrison rank-1 identity.
#       (Algorithm 5.3 - book: Adaptive Filtering: Algorithms and Practical
#                                                       Implementation, Diniz)

from __future__ import annotations

from typing import Optional

import numpy as np

from pydaptivebeamforming._utils.typing import ArrayLike, BinSelection
from pydaptivebeamforming._utils.validation import require_in_range, require_int



class MultiBinRLS:
    """
    Per-bin complex RLS interference predictor (Sherman-Morrison form).

    For every frequency bin ``f`` the canceller keeps its own inverse
    covariance matrix ``P_f`` (``n x n``), cross-covariance vector ``p_f`` and
    weight vector ``w_f``. Bins never share state, so a bin's update depends
    only on its own previous state and the current frame.

    Parameters
    ----------
    n_bins : int
        Number of processed frequency bins ``F``.
    n_channels : int
        Number of reference channels ``n`` (regressor length).
    forgetting_factor : float, optional
        Exponential forgetting factor ``lambda`` with ``0 < lambda <= 1``.
        Values near 1 adapt slowly and stably; smaller values track faster
        with more noise. Default is 0.99.
    regularization : float, optional
        Positive ``delta``; the inverse covariance starts at ``I / delta``.
        Default is 1e-2.

    Notes
    -----
    Given the reference vector ``b_f`` and the target ``y_f`` of one frame,
    the update is

    .. math::
        p_f &\\leftarrow \\lambda p_f + y_f^* b_f, \\\\
        u &= P_f b_f, \\qquad
        v = \\frac{1}{\\lambda + \\mathrm{Re}(b_f^H u)}, \\\\
        P_f &\\leftarrow \\lambda^{-1} (P_f - v\\, u u^H), \\\\
        w_f &= P_f p_f,

    which costs :math:`O(n^2)` per bin instead of re-inverting the
    exponentially weighted covariance

    .. math::
        R_f(k) = \\lambda^k \\delta I + \\sum_{j \\le k} \\lambda^{k-j} b_f(j) b_f^H(j).

    After each update ``P_f`` is re-Hermitianized as ``(P_f + P_f^H) / 2``.

    Numeric health
        A bin is degenerate when the denominator ``lambda + Re(b^H u)`` is not
        finite or not positive, when ``P_f`` has a non-finite entry or is no
        longer positive definite (smallest eigenvalue ``<= 0``), or when
        ``w_f`` is not finite. Degenerate bins are re-initialized and reported
        by :meth:`update`. All per-frame work runs in preallocated buffers.

    References
    ----------
    .. [1] P. S. R. Diniz, *Adaptive Filtering: Algorithms and Practical
       Implementation*, 5th ed., Algorithm 5.3.
    """

    forgetting_factor: float
    regularization: float
    covmat_inv: np.ndarray
    xcov: np.ndarray
    weights: np.ndarray

    def __init__(
        self,
        n_bins: int,
        n_channels: int,
        forgetting_factor: float = 0.99,
        regularization: float = 1e-2,
    ) -> None:
        self.n_bins = require_int("n_bins", n_bins, minimum=1)
        self.n_channels = require_int("n_channels", n_channels, minimum=1)
        self.forgetting_factor = require_in_range(
            "forgetting_factor", forgetting_factor, 0.0, 1.0, high_inclusive=True
        )
        self.regularization = require_in_range("regularization", regularization, 0.0, np.inf)

        F, n = self.n_bins, self.n_channels

        self.covmat_inv = np.zeros((F, n, n), dtype=np.complex128)
        self.xcov = np.zeros((F, n), dtype=np.complex128)
        self.weights = np.zeros((F, n), dtype=np.complex128)

        self._init_inv = np.eye(n, dtype=np.complex128) / self.regularization
        self._u = np.zeros((F, n), dtype=np.complex128)
        self._bc = np.zeros((F, n), dtype=np.complex128)
        self._yc = np.zeros(F, dtype=np.complex128)
        self._quad = np.zeros(F, dtype=np.complex128)
        self._den = np.zeros(F, dtype=np.float64)
        self._v = np.zeros(F, dtype=np.float64)
        self._outer = np.zeros((F, n, n), dtype=np.complex128)

        self.reset()

    def reset(self, bins: BinSelection = None) -> None:
        """
        Re-initialize all bins, or only the selected ones.

        Parameters
        ----------
        bins : None, bool mask, index array or slice, optional
            Bins to reset. None resets every bin.
        """
        sel = slice(None) if bins is None else bins
        self.covmat_inv[sel] = self._init_inv
        self.xcov[sel] = 0.0
        self.weights[sel] = 0.0

    def update(self, reference: ArrayLike, target: ArrayLike) -> np.ndarray:
        """
        Runs one RLS step for every bin.

        Parameters
        ----------
        reference : array_like of complex, shape ``(n_bins, n_channels)``
            Regressors ``b_f`` of the current frame.
        target : array_like of complex, shape ``(n_bins,)``
            Signal ``y_f`` the references should predict.

        Returns
        -------
        ndarray of bool, shape ``(n_bins,)``
            Bins found degenerate and re-initialized during this step.
        """
        b = np.asarray(reference, dtype=np.complex128)
        y = np.asarray(target, dtype=np.complex128)
        if b.shape != (self.n_bins, self.n_channels):
            raise ValueError(
                f"reference must have shape ({self.n_bins}, {self.n_channels}). Got {b.shape}."
            )
        if y.shape != (self.n_bins,):
            raise ValueError(f"target must have shape ({self.n_bins},). Got {y.shape}.")

        lam = self.forgetting_factor
        P = self.covmat_inv

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            np.conjugate(y, out=self._yc)
            np.multiply(self._yc[:, None], b, out=self._bc)
            self.xcov *= lam
            self.xcov += self._bc

            np.einsum("fij,fj->fi", P, b, out=self._u)

            # b^H P b is real for Hermitian P
            np.conjugate(b, out=self._bc)
            np.einsum("fi,fi->f", self._bc, self._u, out=self._quad)
            np.add(self._quad.real, lam, out=self._den)
            bad = ~np.isfinite(self._den) | (self._den <= 0.0)
            self._v.fill(0.0)
            np.divide(1.0, self._den, out=self._v, where=~bad)

            np.conjugate(self._u, out=self._bc)
            np.multiply(self._u[:, :, None], self._bc[:, None, :], out=self._outer)
            self._outer *= self._v[:, None, None]
            P -= self._outer
            P *= 1.0 / lam

            np.conjugate(np.swapaxes(P, 1, 2), out=self._outer)
            P += self._outer
            P *= 0.5

            np.einsum("fij,fj->fi", P, self.xcov, out=self.weights)

            bad |= ~np.all(np.isfinite(P.reshape(self.n_bins, -1)), axis=1)
            bad |= ~np.all(np.isfinite(self.weights), axis=1)

        # positive definiteness: smallest eigenvalue of the Hermitian P
        ok = ~bad
        if ok.any():
            bad[ok] = np.linalg.eigvalsh(P[ok])[:, 0] <= 0.0

        if bad.any():
            self.reset(bad)
        return bad

    def predict(self, reference: ArrayLike, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Interference estimate ``w_f^H b_f`` for every bin."""
        b = np.asarray(reference, dtype=np.complex128)
        return np.einsum("fi,fi->f", np.conj(self.weights), b, out=out)

    def __repr__(self) -> str:
        return (
            f"<MultiBinRLS bins={self.n_bins} channels={self.n_channels} "
            f"lambda={self.forgetting_factor} delta={self.regularization}>"
        )
# EOF
