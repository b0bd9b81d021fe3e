# base.py

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from pydaptivebeamforming._utils.typing import FrameLike


@dataclass
class ProcessingResult:
    """Standard output container for a frame-by-frame processing run.

    Attributes
    ----------
    outputs:
        Enhanced spectra, shape (n_frames, n_bins_total).
    coefficients:
        Adaptive weight history, shape (n_frames, nfreq, nchannel_ds), or an
        empty array when history recording is disabled.
    algorithm:
        Algorithm name (usually class name).
    runtime_ms:
        Runtime in milliseconds.
    extra:
        Optional container for internal states / numeric-health counters.
    """

    outputs: np.ndarray
    coefficients: np.ndarray
    algorithm: str
    runtime_ms: float
    extra: Optional[Dict[str, Any]] = None

    @property
    def n_frames(self) -> int:
        return int(self.outputs.shape[0])

    def power(self) -> np.ndarray:
        """Per-frame output power summed over bins."""
        return np.sum(np.abs(self.outputs) ** 2, axis=-1)

    def __repr__(self) -> str:
        return f"<ProcessingResult algo={self.algorithm} frames={self.n_frames}>"


def validate_frames(method: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to validate and normalize `process_frames` inputs.

    Accepts:
        process_frames(frames, **kwargs)
        process_frames(frames=..., **kwargs)

    Notes
    -----
    - Frames are converted with `np.asarray` and cast to complex.
    - A single flat frame (1D) is promoted to a stack of one frame.
    - Each frame must either be flat with `n_bins_total * nchannel` samples or
      shaped `(n_bins_total, nchannel)`; anything else raises ValueError.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        frames = args[0] if args else kwargs.pop("frames", None)
        if frames is None:
            raise TypeError("Missing frames: pass frames as first argument.")
        args = args[1:]

        F = np.asarray(frames).astype(np.complex128, copy=False)
        n_flat = self.n_bins_total * self.nchannel

        if F.ndim == 1:
            F = F[None, :]
        if F.ndim == 2 and F.shape[1] == n_flat:
            F = F.reshape(F.shape[0], self.n_bins_total, self.nchannel)
        if F.ndim != 3 or F.shape[1:] != (self.n_bins_total, self.nchannel):
            raise ValueError(
                f"frames must have shape (n_frames, {n_flat}) or "
                f"(n_frames, {self.n_bins_total}, {self.nchannel}). Got {np.shape(frames)}."
            )

        return method(self, F, *args, **kwargs)

    return wrapper


class AdaptiveBeamformer(ABC):
    """Abstract base class for frame-based adaptive beamformers.

    Parameters
    ----------
    nfft:
        FFT size of the analysis transform. Frames carry `nfft // 2 + 1` bins.
    nchannel:
        Number of microphone channels.

    Notes
    -----
    - Subclasses implement `process` (one frame in, one frame out) and `reset`.
    - `process_frames` drives `process` over a stack of frames in temporal
      order and packages the result, the same way `optimize` does for the
      sample-based filters.
    - Subclasses that want weight trajectories set `self.record_history` and
      call `_record_history()` once per frame.
    """

    def __init__(self, nfft: int, nchannel: int) -> None:
        self.nfft: int = int(nfft)
        self.nchannel: int = int(nchannel)
        self.n_bins_total: int = self.nfft // 2 + 1

        self.record_history: bool = False
        self.w_history: List[np.ndarray] = []

    @property
    @abstractmethod
    def weights(self) -> np.ndarray:
        """Current adaptive coefficients."""
        raise NotImplementedError

    def _record_history(self) -> None:
        """Store a snapshot of current coefficients."""
        if self.record_history:
            self.w_history.append(np.array(self.weights, copy=True))

    def _pack_results(
        self,
        outputs: np.ndarray,
        runtime_s: float,
        extra: Optional[Dict[str, Any]] = None,
    ) -> ProcessingResult:
        """Centralized output packaging to standardize results."""
        if self.w_history:
            coefficients = np.asarray(self.w_history)
        else:
            coefficients = np.zeros((0,) + np.shape(self.weights), dtype=np.complex128)
        return ProcessingResult(
            outputs=np.asarray(outputs),
            coefficients=coefficients,
            algorithm=self.__class__.__name__,
            runtime_ms=float(runtime_s) * 1000.0,
            extra=extra,
        )

    @abstractmethod
    def process(self, frame: FrameLike, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Process one frame and return the enhanced half spectrum."""
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Restore the freshly constructed adaptive state."""
        raise NotImplementedError

    def _extra(self) -> Optional[Dict[str, Any]]:
        """Hook for subclasses to attach internal states to batch results."""
        return None

    @validate_frames
    def process_frames(self, frames: np.ndarray, verbose: bool = False) -> ProcessingResult:
        """
        Run `process` over a stack of frames, oldest first.

        Parameters
        ----------
        frames : array_like of complex
            Shape `(n_frames, n_bins_total * nchannel)` or
            `(n_frames, n_bins_total, nchannel)`.
        verbose : bool, optional
            If True, prints the total runtime after completion.

        Returns
        -------
        ProcessingResult
            Outputs of shape `(n_frames, n_bins_total)`, the weight history
            (if recording) and `extra` from `_extra()`.
        """
        tic = perf_counter()

        n_frames = int(frames.shape[0])
        outputs = np.zeros((n_frames, self.n_bins_total), dtype=np.complex128)

        for k in range(n_frames):
            self.process(frames[k], out=outputs[k])

        runtime_s = perf_counter() - tic
        if verbose:
            print(f"[{self.__class__.__name__}] {n_frames} frames in {runtime_s * 1000:.03f} ms")

        return self._pack_results(outputs=outputs, runtime_s=runtime_s, extra=self._extra())
