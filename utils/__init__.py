"""
Utility functions and constants for the Turing Machine solver.
"""

from utils.device import (
    get_device,
    get_device_name,
    to_numpy,
    DEFAULT_DEVICE,
    DEVICE_NAME
)
from utils.bits import full_mask, iter_bits, lowest_bit_index, mask_to_int, popcount

__all__ = [
    "get_device",
    "get_device_name",
    "to_numpy",
    "DEFAULT_DEVICE",
    "DEVICE_NAME",
    "full_mask",
    "iter_bits",
    "lowest_bit_index",
    "mask_to_int",
    "popcount",
]
