# gsc.blocking.py
#
#       Fixed beamformer, blocking matrix and channel downsampler of the
#       Generalized Sidelobe Canceller. All functions work on one frame laid
#       out as (bins, channels) and accept preallocated output buffers.

from __future__ import annotations

from typing import Optional

import numpy as np

__all__ = ["fixed_beamformer", "blocking_matrix", "downsample_channels"]


def fixed_beamformer(X: np.ndarray, W: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Matched-filter combination of all channels.

    .. math::
        y_f = \\sum_c w_{f,c}^* x_{f,c}

    Parameters
    ----------
    X : ndarray of complex, shape ``(F, C)``
        Input frame restricted to the processed band.
    W : ndarray of complex, shape ``(F, C)``
        Fixed weights, one canonical value per (bin, channel).
    out : ndarray of complex, shape ``(F,)``, optional
        Destination buffer.
    """
    return np.einsum("fc,fc->f", np.conj(W), X, out=out)


def blocking_matrix(
    X: np.ndarray,
    W: np.ndarray,
    y: np.ndarray,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Remove the look-direction component from every channel.

    .. math::
        b_{f,c} = x_{f,c} - w_{f,c}\\, y_f

    Uses the same (unconjugated) weights as :func:`fixed_beamformer`.
    """
    if out is None:
        out = np.empty_like(X, dtype=np.complex128)
    np.multiply(W, y[:, None], out=out)
    np.subtract(X, out, out=out)
    return out


def downsample_channels(
    B: np.ndarray,
    nchannel_ds: int,
    ds: int,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Average groups of ``ds`` consecutive channels.

    Output channel ``c`` is the arithmetic mean of input channels
    ``c*ds .. c*ds + ds - 1``. Channels at index ``nchannel_ds * ds`` and
    beyond belong to no group and are dropped.

    Parameters
    ----------
    B : ndarray of complex, shape ``(F, C)``
        Blocking-matrix output.
    nchannel_ds : int
        Number of output channels.
    ds : int
        Group size; ``C >= nchannel_ds * ds`` is required.
    out : ndarray of complex, shape ``(F, nchannel_ds)``, optional
        Destination buffer.
    """
    n_used = int(nchannel_ds) * int(ds)
    if B.shape[1] < n_used:
        raise ValueError(
            f"Cannot form {nchannel_ds} groups of {ds} channels from {B.shape[1]} channels."
        )
    if ds == 1:
        if out is None:
            return B[:, :n_used].copy()
        out[...] = B[:, :n_used]
        return out
    grouped = B[:, :n_used].reshape(B.shape[0], int(nchannel_ds), int(ds))
    return np.mean(grouped, axis=2, out=out)
