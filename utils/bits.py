"""
Bitmask helpers shared by code sets and solution sets.

Sets are stored as Python ints with bit i set when element i is a member,
which keeps intersection, union and membership single integer operations.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np
import torch

from utils.device import to_numpy


def mask_to_int(mask: torch.Tensor) -> int:
    """
    Pack a boolean membership tensor into an integer bitmask.

    Args:
        mask: [N] bool tensor, mask[i] True when element i is a member

    Returns:
        Integer with bit i set for every member i
    """
    flags = to_numpy(mask).astype(bool).reshape(-1)
    if flags.size == 0:
        return 0
    packed = np.packbits(flags, bitorder="little")
    return int.from_bytes(packed.tobytes(), byteorder="little")


def full_mask(size: int) -> int:
    """Bitmask with the lowest `size` bits set."""
    return (1 << size) - 1


def popcount(bits: int) -> int:
    """Number of set bits."""
    return bits.bit_count()


def lowest_bit_index(bits: int) -> int:
    """
    Index of the lowest set bit.

    Raises:
        ValueError: If no bit is set
    """
    if bits == 0:
        raise ValueError("No bit set")
    return (bits & -bits).bit_length() - 1


def iter_bits(bits: int) -> Iterator[int]:
    """Yield the indices of set bits in ascending order."""
    while bits:
        low = bits & -bits
        yield low.bit_length() - 1
        bits ^= low
