# ._utils.typing.py
from __future__ import annotations
from pathlib import Path
from typing import Union, Sequence
import numpy as np

ArrayLike = Union[np.ndarray, Sequence[Union[int, float, complex]]]

# one STFT frame: flat bin-major/channel-minor samples or (n_bins, nchannel)
FrameLike = Union[np.ndarray, Sequence[complex], Sequence[Sequence[complex]]]

# bins addressed by a reset: None (all), bool mask, index array or slice
BinSelection = Union[None, np.ndarray, Sequence[int], slice]

PathLike = Union[str, Path]

__all__ = ["ArrayLike", "FrameLike", "BinSelection", "PathLike"]
