# pydaptivebeamforming/_utils/plotting.py
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .metrics import db10, db20

__all__ = [
    "plot_learning_curve",
    "plot_weight_trajectories",
]


def plot_learning_curve(
    power: np.ndarray,
    reference_power: Optional[np.ndarray] = None,
    title: str = "",
    labels: Sequence[str] = ("Output", "Reference"),
    show: bool = True,
):
    """
    Per-frame power in dB, optionally against a reference track
    (e.g. the fixed-beamformer output or the interferer alone).

    Returns the matplotlib Figure.
    """
    import matplotlib.pyplot as plt

    power = np.asarray(power, dtype=float).ravel()
    x = np.arange(1, power.size + 1)

    fig = plt.figure()
    plt.plot(x, db10(power))
    if reference_power is not None:
        reference_power = np.asarray(reference_power, dtype=float).ravel()
        plt.plot(x, db10(reference_power))
        plt.legend(list(labels))
    plt.grid(True)
    plt.title(title or "Learning curve")
    plt.xlabel("frame")
    plt.ylabel("power [dB]")
    if show:
        plt.show()
    return fig


def plot_weight_trajectories(
    coefficients: np.ndarray,
    bins: Optional[Sequence[int]] = None,
    title: str = "",
    show: bool = True,
):
    """
    Magnitude (dB) of the adaptive weights over frames.

    Parameters
    ----------
    coefficients : ndarray of complex, shape ``(n_frames, nfreq, nchannel_ds)``
        Weight history, e.g. ``ProcessingResult.coefficients``.
    bins : sequence of int, optional
        Band-relative bins to draw. Defaults to up to three evenly spaced bins.
    """
    import matplotlib.pyplot as plt

    W = np.asarray(coefficients)
    if W.ndim != 3:
        raise ValueError(f"coefficients must be 3D (frames, bins, channels). Got shape {W.shape}.")
    n_frames, n_bins, n_ch = W.shape
    if bins is None:
        bins = np.unique(np.linspace(0, n_bins - 1, num=min(3, n_bins)).astype(int))

    x = np.arange(1, n_frames + 1)
    fig, axes = plt.subplots(len(bins), 1, sharex=True, squeeze=False)
    for ax, f in zip(axes[:, 0], bins):
        for c in range(n_ch):
            ax.plot(x, db20(W[:, f, c]), label=f"ch {c}")
        ax.set_ylabel(f"bin {f} [dB]")
        ax.grid(True)
    axes[0, 0].legend(loc="best")
    axes[-1, 0].set_xlabel("frame")
    fig.suptitle(title or "Adaptive weights")
    if show:
        plt.show()
    return fig
