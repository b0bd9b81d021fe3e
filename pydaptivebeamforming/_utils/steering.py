# pydaptivebeamforming/_utils/steering.py
from __future__ import annotations

import numpy as np

from .typing import ArrayLike

__all__ = ["rfft_frequencies", "frequency_to_bin", "delay_and_sum_weights", "weights_to_interleaved"]


def rfft_frequencies(nfft: int, fs: float) -> np.ndarray:
    """Center frequencies (Hz) of the ``nfft//2 + 1`` non-negative bins."""
    return np.arange(int(nfft) // 2 + 1, dtype=float) * (float(fs) / int(nfft))


def frequency_to_bin(freq: float, nfft: int, fs: float) -> int:
    """
    Index of the bin nearest ``freq``, with bin width ``fs / nfft``.

    Ties round up (``floor(freq * nfft / fs + 0.5)``).
    """
    return int(np.floor(float(freq) * int(nfft) / float(fs) + 0.5))


def delay_and_sum_weights(
    mic_positions: ArrayLike,
    direction: ArrayLike,
    nfft: int,
    fs: float,
    sound_speed: float = 343.0,
) -> np.ndarray:
    """
    Far-field delay-and-sum weights for a look direction.

    Parameters
    ----------
    mic_positions : array_like of float, shape ``(nchannel, dim)``
        Microphone coordinates in meters.
    direction : array_like of float, shape ``(dim,)``
        Vector pointing from the array towards the source (normalized here).
    nfft : int
        FFT size; weights are produced for ``nfft//2 + 1`` bins.
    fs : float
        Sampling rate in Hz.
    sound_speed : float, optional
        Speed of sound in m/s. Default is 343.

    Returns
    -------
    ndarray of complex, shape ``(nfft//2 + 1, nchannel)``
        Steering vectors with unit norm per bin. With unit norm, ``w^H a`` is
        real and the blocking matrix ``x - w (w^H x)`` removes a plane wave
        arriving from ``direction`` exactly.
    """
    pos = np.atleast_2d(np.asarray(mic_positions, dtype=float))
    u = np.asarray(direction, dtype=float).ravel()
    if pos.shape[1] != u.size:
        raise ValueError(
            f"direction has {u.size} components but mic_positions has dim={pos.shape[1]}."
        )
    norm = np.linalg.norm(u)
    if norm == 0.0:
        raise ValueError("direction must be a non-zero vector.")
    u = u / norm

    # Arrival advance of each microphone relative to the origin.
    tau = pos @ u / float(sound_speed)
    freqs = rfft_frequencies(nfft, fs)

    steering = np.exp(1j * 2.0 * np.pi * np.outer(freqs, tau))
    return steering / np.sqrt(pos.shape[0])


def weights_to_interleaved(weights: ArrayLike) -> np.ndarray:
    """
    Flatten complex ``(n_bins, nchannel)`` weights into the interleaved
    real/imag, bin-major layout consumed by :func:`parse_fixed_weights`.
    """
    w = np.asarray(weights, dtype=complex)
    if w.ndim != 2:
        raise ValueError(f"weights must be 2D (n_bins, nchannel). Got shape {w.shape}.")
    return np.column_stack((w.real.ravel(), w.imag.ravel())).ravel()
