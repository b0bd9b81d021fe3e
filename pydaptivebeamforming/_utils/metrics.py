# pydaptivebeamforming/_utils/metrics.py
import numpy as np
from .typing import ArrayLike

__all__ = ["db10", "db20", "residual_correlation"]


def db10(x: ArrayLike, *, eps: float = 1e-20) -> np.ndarray:
    """10*log10(x) with numerical guard."""
    x = np.asarray(x, dtype=float)
    return 10.0 * np.log10(np.maximum(x, eps))


def db20(x: ArrayLike, *, eps: float = 1e-12) -> np.ndarray:
    """20*log10(|x|) with numerical guard."""
    x = np.asarray(x)
    return 20.0 * np.log10(np.maximum(np.abs(x), eps))


def residual_correlation(
    output: ArrayLike,
    reference: ArrayLike,
    *,
    axis: int = 0,
    eps: float = 1e-20,
) -> np.ndarray:
    """
    Normalized magnitude correlation between an output and a reference.

    .. math::
        \\rho = \\frac{|\\sum_k r^*[k] y[k]|}
                      {\\sqrt{\\sum_k |r[k]|^2 \\sum_k |y[k]|^2}}

    Parameters
    ----------
    output, reference : array_like of complex
        Same-shaped arrays, e.g. ``(n_frames, n_bins)`` STFT tracks.
    axis : int, optional
        Axis holding the time (frame) index. Default is 0.
    eps : float, optional
        Guard added to the denominator.

    Returns
    -------
    ndarray of float
        Correlation in ``[0, 1]`` for every remaining index (scalar for 1-D input).
    """
    y = np.asarray(output, dtype=complex)
    r = np.asarray(reference, dtype=complex)
    if y.shape != r.shape:
        raise ValueError(f"Shape mismatch: output{y.shape} != reference{r.shape}")

    num = np.abs(np.sum(np.conj(r) * y, axis=axis))
    den = np.sqrt(np.sum(np.abs(r) ** 2, axis=axis) * np.sum(np.abs(y) ** 2, axis=axis))
    return num / (den + eps)
