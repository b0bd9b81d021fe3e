#  gsc.gsc.py
#
#       Implements the frequency-domain Generalized Sidelobe Canceller (GSC)
#       with a per-bin RLS adaptive branch and projection back, for COMPLEX
#       valued STFT frames.

from __future__ import annotations

from typing import Any, Dict, Optional, Union

import numpy as np

from pydaptivebeamforming.base import AdaptiveBeamformer
from pydaptivebeamforming.config import GSCConfig, load_fixed_weights, parse_fixed_weights
from pydaptivebeamforming.gsc.blocking import blocking_matrix, downsample_channels, fixed_beamformer
from pydaptivebeamforming.projection_back import ProjectionBack
from pydaptivebeamforming.rls import MultiBinRLS
from pydaptivebeamforming._utils.health import NumericHealth
from pydaptivebeamforming._utils.logger import get_logger
from pydaptivebeamforming._utils.steering import frequency_to_bin
from pydaptivebeamforming._utils.typing import ArrayLike, FrameLike, PathLike
from pydaptivebeamforming._utils.validation import (
    as_frame,
    require_in_range,
    require_int,
)

logger = get_logger(__name__)


class GSC(AdaptiveBeamformer):
    """
    Frequency-domain Generalized Sidelobe Canceller.

    Turns one multichannel STFT frame into one enhanced half spectrum by
    suppressing directional interference while keeping the look direction
    selected by the fixed weights.

    Parameters
    ----------
    fixed_weights : array_like
        Fixed beamforming weights for the full half spectrum. Either the flat
        interleaved real/imag sequence of length ``2 * (nfft//2+1) * nchannel``
        (bin-major, channel-minor) or a complex ``(nfft//2+1, nchannel)`` array.
    nfft : int
        FFT size.
    fs : float
        Sampling rate in Hz.
    nchannel : int
        Number of input channels.
    nchannel_ds : int
        Number of reference channels after downsampling the blocking matrix.
    rls_ff : float
        RLS forgetting factor, ``0 < rls_ff <= 1``.
    rls_reg : float
        RLS regularization, ``> 0``.
    pb_ff : float
        Projection-back forgetting factor, ``0 < pb_ff < 1``.
    pb_ref_channel : int
        Reference input channel for projection back.
    f_max : float
        Highest processed frequency in Hz.
    strict_downsampling : bool, optional (keyword-only)
        If True, refuse a ``nchannel`` that is not a multiple of
        ``nchannel_ds`` instead of dropping the trailing channels.
    pb_den_floor : float, optional (keyword-only)
        Absolute floor of the projection-back output-power estimate, in the
        units of ``|X|^2``; see :class:`ProjectionBack`. Scale it with the
        input level when frames are far quieter than full-scale audio.
        Default is 1e-12.
    record_history : bool, optional (keyword-only)
        If True, stores the adaptive weights after every frame.

    Notes
    -----
    Processed band
        Bins ``[f_min_index, f_max_index)`` with ``f_min_index = 1`` (DC is
        never processed) and ``f_max_index`` the bin nearest ``f_max`` for a
        bin width of ``fs / nfft``, clipped to ``nfft//2 + 1``. Output bins
        outside the band are exactly zero.

    Per-frame pipeline (bins ``f`` of the band)

    .. math::
        y_f &= w_f^H x_f                           &\\text{(fixed beamformer)} \\\\
        b_{f,c} &= x_{f,c} - w_{f,c}\\, y_f          &\\text{(blocking matrix)} \\\\
        \\bar b_{f,g} &= \\frac{1}{ds} \\sum_{c \\in g} b_{f,c} &\\text{(downsampling)} \\\\
        a_f &\\leftarrow \\mathrm{RLS}(\\bar b_f, y_f)  &\\text{(adaptive weights)} \\\\
        z_f &= y_f - a_f^H \\bar b_f                 &\\text{(output)} \\\\
        z_f &\\leftarrow z_f\\, g_f                   &\\text{(projection back)}

    Downsampling uses ``ds = nchannel // nchannel_ds``; channels from
    ``nchannel_ds * ds`` on are listed in ``dropped_channels`` and do not feed
    the adaptive branch (they still enter the fixed beamformer).

    The instance owns all of its state and is not reentrant: frames must be
    passed one at a time, in temporal order.
    """

    rls: MultiBinRLS
    projback: ProjectionBack
    health: NumericHealth

    def __init__(
        self,
        fixed_weights: ArrayLike,
        nfft: int,
        fs: float,
        nchannel: int,
        nchannel_ds: int,
        rls_ff: float,
        rls_reg: float,
        pb_ff: float,
        pb_ref_channel: int,
        f_max: float,
        *,
        strict_downsampling: bool = False,
        pb_den_floor: float = 1e-12,
        record_history: bool = False,
    ) -> None:
        nfft = require_int("nfft", nfft, minimum=2)
        nchannel = require_int("nchannel", nchannel, minimum=1)
        super().__init__(nfft=nfft, nchannel=nchannel)

        self.fs: float = require_in_range("fs", fs, 0.0, np.inf)

        # parameters coming from the config
        config = GSCConfig(
            nchannel_ds=nchannel_ds,
            rls_ff=rls_ff,
            rls_reg=rls_reg,
            pb_ff=pb_ff,
            pb_ref_channel=pb_ref_channel,
            f_max=f_max,
        )
        self.config = config
        self.nchannel_ds: int = config.nchannel_ds
        self.rls_ff: float = config.rls_ff
        self.rls_reg: float = config.rls_reg
        self.pb_ff: float = config.pb_ff
        self.pb_ref_channel: int = config.pb_ref_channel
        self.f_max: float = config.f_max

        if self.nchannel_ds > self.nchannel:
            raise ValueError(
                f"nchannel_ds ({self.nchannel_ds}) cannot exceed nchannel ({self.nchannel})."
            )
        if self.pb_ref_channel >= self.nchannel:
            raise ValueError(
                f"pb_ref_channel must be in [0, {self.nchannel - 1}]. Got {self.pb_ref_channel}."
            )

        # downsampling of the adaptive branch
        self.ds: int = self.nchannel // self.nchannel_ds
        self.dropped_channels = tuple(range(self.nchannel_ds * self.ds, self.nchannel))
        if self.dropped_channels:
            msg = (
                f"nchannel={self.nchannel} is not a multiple of nchannel_ds={self.nchannel_ds}; "
                f"channels {list(self.dropped_channels)} are excluded from the adaptive branch."
            )
            if strict_downsampling:
                raise ValueError(msg)
            logger.warning(msg)

        # processing band
        self.f_min_index: int = 1
        self.f_max_index: int = min(frequency_to_bin(self.f_max, self.nfft, self.fs), self.n_bins_total)
        self.nfreq: int = self.f_max_index - self.f_min_index
        if self.nfreq < 1:
            raise ValueError(
                f"f_max={self.f_max} Hz leaves no bin above DC (bin width {self.fs / self.nfft} Hz)."
            )
        self._band = slice(self.f_min_index, self.f_max_index)

        # fixed weights, restricted to the band
        W = np.asarray(fixed_weights)
        if W.ndim == 2:
            if W.shape != (self.n_bins_total, self.nchannel):
                raise ValueError(
                    f"fixed_weights must have shape ({self.n_bins_total}, {self.nchannel}). "
                    f"Got {W.shape}."
                )
            W = W.astype(np.complex128)
            if not np.all(np.isfinite(W)):
                raise ValueError("Fixed weights contain NaN or inf values.")
        else:
            W = parse_fixed_weights(W, self.nfft, self.nchannel)
        self.fixed_weights: np.ndarray = np.ascontiguousarray(W[self._band])
        self.fixed_weights.flags.writeable = False

        # intermediate buffers
        self.output_fixed = np.zeros(self.nfreq, dtype=np.complex128)
        self.output_blocking = np.zeros((self.nfreq, self.nchannel), dtype=np.complex128)
        self.input_adaptive = np.zeros((self.nfreq, self.nchannel_ds), dtype=np.complex128)
        self.output_canceller = np.zeros(self.nfreq, dtype=np.complex128)
        self._prediction = np.zeros(self.nfreq, dtype=np.complex128)

        self.rls = MultiBinRLS(
            n_bins=self.nfreq,
            n_channels=self.nchannel_ds,
            forgetting_factor=self.rls_ff,
            regularization=self.rls_reg,
        )
        self.projback = ProjectionBack(
            n_bins=self.nfreq,
            forgetting_factor=self.pb_ff,
            den_floor=pb_den_floor,
        )
        self.health = NumericHealth(n_bins=self.nfreq)

        self.record_history = bool(record_history)
        self._record_history()

        logger.info(
            "GSC ready: nfft=%d fs=%g nchannel=%d -> %d (ds=%d), band=[%d, %d) (%d bins)",
            self.nfft, self.fs, self.nchannel, self.nchannel_ds, self.ds,
            self.f_min_index, self.f_max_index, self.nfreq,
        )

    @classmethod
    def from_config(
        cls,
        config: Union[GSCConfig, Dict[str, Any]],
        fixed_weights: ArrayLike,
        nfft: int,
        fs: float,
        nchannel: int,
        **kwargs: Any,
    ) -> "GSC":
        """Build from a :class:`GSCConfig` (or a mapping with the same fields)."""
        if not isinstance(config, GSCConfig):
            config = GSCConfig.from_dict(config)
        return cls(fixed_weights, nfft, fs, nchannel, **config.to_dict(), **kwargs)

    @classmethod
    def from_files(
        cls,
        config_file: PathLike,
        weights_file: PathLike,
        nfft: int,
        fs: float,
        nchannel: int,
        **kwargs: Any,
    ) -> "GSC":
        """Build from a JSON parameter file and a JSON fixed-weight file."""
        config = GSCConfig.from_json(config_file)
        weights = load_fixed_weights(weights_file, nfft, nchannel)
        return cls.from_config(config, weights, nfft, fs, nchannel, **kwargs)

    @property
    def weights(self) -> np.ndarray:
        """Adaptive weights, shape ``(nfreq, nchannel_ds)``."""
        return self.rls.weights

    adaptive_weights = weights

    @property
    def band(self) -> slice:
        return self._band

    def process(self, frame: FrameLike, out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Process one STFT frame.

        Parameters
        ----------
        frame : array_like of complex
            ``nchannel * (nfft//2+1)`` samples in bin-major, channel-minor
            order, or the same data shaped ``(nfft//2+1, nchannel)``.
        out : ndarray of complex, shape ``(nfft//2+1,)``, optional
            Destination buffer; a new array is allocated when omitted.

        Returns
        -------
        ndarray of complex, shape ``(nfft//2+1,)``
            Enhanced spectrum; zero outside ``[f_min_index, f_max_index)``.
        """
        X_full = as_frame(frame, self.n_bins_total, self.nchannel)

        if out is None:
            out = np.zeros(self.n_bins_total, dtype=np.complex128)
        else:
            if out.shape != (self.n_bins_total,) or out.dtype != np.complex128:
                raise ValueError(
                    f"out must be a complex128 array of shape ({self.n_bins_total},). "
                    f"Got {out.dtype} {out.shape}."
                )
            out.fill(0.0)

        X = X_full[self._band]
        Y = out[self._band]

        fixed_beamformer(X, self.fixed_weights, out=self.output_fixed)
        blocking_matrix(X, self.fixed_weights, self.output_fixed, out=self.output_blocking)
        downsample_channels(self.output_blocking, self.nchannel_ds, self.ds, out=self.input_adaptive)

        reset = self.rls.update(self.input_adaptive, self.output_fixed)

        self.rls.predict(self.input_adaptive, out=self._prediction)
        np.subtract(self.output_fixed, self._prediction, out=Y)
        self.output_canceller[:] = Y

        clamped, repaired = self.projback.process(Y, X[:, self.pb_ref_channel])

        self._report(reset, clamped, repaired)
        self._record_history()
        return out

    def _report(self, reset: np.ndarray, clamped: np.ndarray, repaired: np.ndarray) -> None:
        """Accumulate numeric-health counters and log the events of one frame."""
        h = self.health
        if reset.any():
            h.rls_resets += reset
            logger.warning(
                "frame %d: RLS state degenerate in bins %s, re-initialized",
                h.frames, (np.flatnonzero(reset) + self.f_min_index).tolist(),
            )
        if clamped.any():
            h.pb_clamps += clamped
            logger.debug(
                "frame %d: projection-back denominator floored in %d bin(s)",
                h.frames, int(clamped.sum()),
            )
        if repaired.any():
            h.nonfinite_repairs += repaired
            logger.warning(
                "frame %d: non-finite output zeroed in bins %s",
                h.frames, (np.flatnonzero(repaired) + self.f_min_index).tolist(),
            )
        h.frames += 1

    def reset(self) -> None:
        """Forget all adaptation; fixed weights and band are kept."""
        self.rls.reset()
        self.projback.reset()
        self.health.reset()
        for buf in (self.output_fixed, self.output_blocking, self.input_adaptive, self.output_canceller):
            buf.fill(0.0)
        self.w_history = []
        self._record_history()

    def _extra(self) -> Dict[str, Any]:
        return {
            "health": self.health.snapshot(),
            "band": (self.f_min_index, self.f_max_index),
            "projection_back_gain": self.projback.gain.copy(),
        }

    def __repr__(self) -> str:
        return (
            f"<GSC nchannel={self.nchannel} nchannel_ds={self.nchannel_ds} "
            f"band=[{self.f_min_index}, {self.f_max_index}) rls_ff={self.rls_ff}>"
        )
# EOF
