"""
Shared compute infrastructure for PyModelSelect.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    device: Hardware detection and device selection
    timing: Execution timing utilities
    random: Seed handling and per-unit seed derivation
    linalg: Linear algebra kernels (QR)
"""

from pymodelselect.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    get_cpu_info,
    select_device,
)
from pymodelselect.core.compute.random import (
    SeedLike,
    as_generator,
    derive_seed,
    resolve_base_seed,
)
from pymodelselect.core.compute.timing import Timer, timed

__all__ = [
    # Device detection
    "DeviceInfo",
    "detect_gpu",
    "get_cpu_info",
    "select_device",
    # Randomness
    "SeedLike",
    "as_generator",
    "derive_seed",
    "resolve_base_seed",
    # Timing
    "Timer",
    "timed",
]
