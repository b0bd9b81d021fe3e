# tests/conftest.py

from __future__ import annotations

import numpy as np
import pytest
from scipy import signal

from pydaptivebeamforming import GSC


# -------------------------
# Helpers
# -------------------------

def _complex_gaussian(rng: np.random.Generator, shape, scale: float = 1.0) -> np.ndarray:
    """Circular complex white noise with variance scale**2."""
    z = rng.standard_normal(shape) + 1j * rng.standard_normal(shape)
    return (scale / np.sqrt(2.0)) * z.astype(np.complex128, copy=False)


def _select_channel_weights(nfft: int, nchannel: int, channel: int = 0) -> np.ndarray:
    """Fixed weights passing a single channel: 1 on `channel`, 0 elsewhere."""
    W = np.zeros((nfft // 2 + 1, nchannel), dtype=np.complex128)
    W[:, channel] = 1.0
    return W


@pytest.fixture
def complex_gaussian():
    """complex_gaussian(rng, shape, scale=1.0) -> circular complex white noise."""
    return _complex_gaussian


@pytest.fixture
def select_channel_weights():
    """select_channel_weights(nfft, nchannel, channel=0) -> single-channel fixed weights."""
    return _select_channel_weights


@pytest.fixture
def make_gsc():
    """
    Factory for small GSC instances.

    Defaults: nfft=8, fs=8000 (bin width 1 kHz), 4 channels downsampled to 2,
    f_max=4 kHz (band [1, 4)), weights selecting channel 0.
    """
    def _make(**overrides):
        params = dict(
            nfft=8,
            fs=8000.0,
            nchannel=4,
            nchannel_ds=2,
            rls_ff=0.98,
            rls_reg=1e-2,
            pb_ff=0.9,
            pb_ref_channel=0,
            f_max=4000.0,
        )
        params.update(overrides)
        weights = params.pop("fixed_weights", None)
        if weights is None:
            weights = _select_channel_weights(params["nfft"], params["nchannel"])
        return GSC(weights, **params)

    return _make


@pytest.fixture
def random_frames():
    """Dense random frames for the default 4-channel, nfft=8 layout."""
    rng = np.random.default_rng(42)
    n_frames = 60
    return _complex_gaussian(rng, (n_frames, 5, 4))


# -------------------------
# End-to-end interferer scenario
# -------------------------

@pytest.fixture
def interferer_scenario():
    """
    4 channels, nfft=8 (5 bins), band [1, 4).

    Channel 0 carries a deterministic tone plus a leaked copy g*v of an
    interferer; channel 1 carries the interferer v alone, from frame 10 on.
    Channels 2 and 3 are silent. v is white noise coloured along the frame
    axis by a first-order AR filter.
    """
    rng = np.random.default_rng(2024)
    n_frames = 300
    onset = 10
    n_bins, nchannel = 5, 4

    k = np.arange(n_frames)[:, None]
    f = np.arange(n_bins)[None, :]
    tone = np.exp(1j * 2.0 * np.pi * 0.1 * f * k + 1j * 0.3 * f).astype(np.complex128)

    white = _complex_gaussian(rng, (n_frames, n_bins))
    interferer = signal.lfilter([1.0], [1.0, -0.5], white, axis=0).astype(np.complex128)
    interferer[:onset] = 0.0

    leak = np.array([0.0, 0.8 - 0.3j, -0.5 + 0.6j, 0.9 + 0.1j, 0.0], dtype=np.complex128)

    frames = np.zeros((n_frames, n_bins, nchannel), dtype=np.complex128)
    frames[:, :, 0] = tone + leak[None, :] * interferer
    frames[:, :, 1] = interferer

    return {
        "frames": frames,
        "tone": tone,
        "interferer": interferer,
        "leak": leak,
        "onset": onset,
        "n_frames": n_frames,
    }
