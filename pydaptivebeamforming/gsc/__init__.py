#  gsc.__init__.py

from .blocking import blocking_matrix, downsample_channels, fixed_beamformer
from .gsc import GSC

__all__ = [
    "GSC",
    "fixed_beamformer",
    "blocking_matrix",
    "downsample_channels",
]
