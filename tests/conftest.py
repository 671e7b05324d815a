"""
Pytest configuration for the Turing Machine solver.

Forces the deduction phase onto the CPU so test runs do not depend on the
available accelerators, and provides shared games.
"""

import os

# Run batched classification on CPU for reproducible, hardware-independent runs.
os.environ.setdefault("TURING_DEVICE", "cpu")

import pytest

from core.code import CodeSpace
from core.config import SolverParams
from core.game import Game
from core.verifier import Criterion, Verifier


@pytest.fixture(scope="session")
def reference_game():
    """Booklet challenge 1: verifiers 4, 9, 11 and 14."""
    return Game.from_verifier_numbers([4, 9, 11, 14])


@pytest.fixture
def tiny_params():
    """Two digits, two positions: four codes."""
    return SolverParams(alphabet_size=2, length=2, device="cpu")


@pytest.fixture
def position_verifiers():
    """One verifier per position, asking whether the digit is 1 or 2."""
    return [
        Verifier("the first digit", [
            Criterion("first = 1", lambda d: d[:, 0] == 1),
            Criterion("first = 2", lambda d: d[:, 0] == 2),
        ]),
        Verifier("the second digit", [
            Criterion("second = 1", lambda d: d[:, 1] == 1),
            Criterion("second = 2", lambda d: d[:, 1] == 2),
        ]),
    ]


@pytest.fixture
def tiny_space(tiny_params):
    return CodeSpace(tiny_params.alphabet_size, tiny_params.length)
