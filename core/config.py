"""
Solver configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import torch


@dataclass(frozen=True)
class SolverParams:
    """
    Parameters for building games and searching them.

    Attributes:
        alphabet_size: Number of distinct digits per position (digits 1..alphabet_size)
        length: Number of positions in a code
        max_verifiers_per_code: Verifiers that may be tested per proposed code (one round)
        canonicalize_queries: Only propose one code per class of interchangeable codes
        device: Device for the batched deduction phase (None = utils.device default)
    """
    alphabet_size: int = 5
    length: int = 3
    max_verifiers_per_code: int = 3
    canonicalize_queries: bool = True
    device: Optional[torch.device | str] = None
