# pydaptivebeamforming/__init__.py

from .base import AdaptiveBeamformer, ProcessingResult
from .config import GSCConfig, load_fixed_weights, parse_fixed_weights
from .gsc import GSC, blocking_matrix, downsample_channels, fixed_beamformer
from .rls import MultiBinRLS
from .projection_back import ProjectionBack
from ._utils.health import NumericHealth
from ._utils.logger import set_log_level
from ._utils.steering import delay_and_sum_weights, weights_to_interleaved

__version__ = "0.1.0"

__all__ = ["AdaptiveBeamformer", "ProcessingResult",
    "GSC", "GSCConfig", "load_fixed_weights", "parse_fixed_weights",
    "fixed_beamformer", "blocking_matrix", "downsample_channels",
    "MultiBinRLS", "ProjectionBack", "NumericHealth",
    "delay_and_sum_weights", "weights_to_interleaved",
    "set_log_level",
    "info"]


def info():
    """Prints an overview of the processing chain."""
    print("\n" + "="*70)
    print("      PyDaptive Beamforming - Generalized Sidelobe Canceller")
    print("="*70)
    stages = {
        "Fixed beamformer": "y = w^H x per bin (matched filter towards the look direction)",
        "Blocking matrix": "b = x - w y, target-free references",
        "Downsampler": "mean of groups of nchannel // nchannel_ds references",
        "RLS canceller": "per-bin Sherman-Morrison RLS predicting the interference in y",
        "Output": "z = y - a^H b",
        "Projection back": "per-bin gain anchoring z to a reference microphone",
    }
    for stage, desc in stages.items():
        print(f"\n{stage:18}: {desc}")

    print("\n" + "-"*70)
    print("Usage example: from pydaptivebeamforming import GSC")
    print("Documentation: help(pydaptivebeamforming.GSC)")
    print("="*70 + "\n")
