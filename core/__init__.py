"""
Core solver logic for Turing Machine puzzles.

This module provides codes and code sets, verifiers and the built-in verifier
catalog, the Game deduction phase and the game-tree search.
"""

from core.code import Code, CodeSet, CodeSpace
from core.config import SolverParams
from core.errors import (
    TuringMachineError,
    InvalidGameError,
    InvalidCodeError,
    UnknownVerifierIdError,
    AfterMoveError,
    InvalidMoveError,
    NoCodesLeftError,
    NoMoveAvailableError,
)
from core.verifier import BINARY_OUTCOMES, Criterion, Outcome, Verifier, VerifierOutcome
from core.game import DeductionTable, Game, Solution
from core.gametree import (
    AfterMoveInfo,
    ChooseNewCode,
    ChooseVerifier,
    GameScore,
    Move,
    Phase,
    SearchResult,
    State,
    VerifierSolution,
    principal_line,
    search,
)

__all__ = [
    "Code",
    "CodeSet",
    "CodeSpace",
    "SolverParams",
    "TuringMachineError",
    "InvalidGameError",
    "InvalidCodeError",
    "UnknownVerifierIdError",
    "AfterMoveError",
    "InvalidMoveError",
    "NoCodesLeftError",
    "NoMoveAvailableError",
    "Criterion",
    "Verifier",
    "VerifierOutcome",
    "Outcome",
    "BINARY_OUTCOMES",
    "DeductionTable",
    "Game",
    "Solution",
    "AfterMoveInfo",
    "ChooseNewCode",
    "ChooseVerifier",
    "GameScore",
    "Move",
    "Phase",
    "SearchResult",
    "State",
    "VerifierSolution",
    "principal_line",
    "search",
]
