"""
Tests for utils.bits module.
"""

import torch
import pytest

from utils.bits import full_mask, iter_bits, lowest_bit_index, mask_to_int, popcount


def test_mask_to_int_packs_little_endian():
    mask = torch.tensor([True, False, True])
    assert mask_to_int(mask) == 0b101


def test_mask_to_int_spans_bytes():
    mask = torch.zeros(20, dtype=torch.bool)
    mask[0] = True
    mask[9] = True
    mask[19] = True
    assert mask_to_int(mask) == (1 << 0) | (1 << 9) | (1 << 19)


def test_mask_to_int_empty():
    assert mask_to_int(torch.zeros(0, dtype=torch.bool)) == 0


def test_full_mask():
    assert full_mask(0) == 0
    assert full_mask(3) == 0b111
    assert popcount(full_mask(125)) == 125


def test_popcount():
    assert popcount(0) == 0
    assert popcount(0b1011) == 3
    assert popcount((1 << 200) | (1 << 64) | 1) == 3


def test_lowest_bit_index():
    assert lowest_bit_index(0b1000) == 3
    assert lowest_bit_index(0b1010) == 1
    assert lowest_bit_index(1 << 100) == 100


def test_lowest_bit_index_of_zero():
    with pytest.raises(ValueError, match="No bit set"):
        lowest_bit_index(0)


def test_iter_bits_ascending():
    assert list(iter_bits(0b10110)) == [1, 2, 4]
    assert list(iter_bits(0)) == []
