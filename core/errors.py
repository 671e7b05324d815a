"""
Error types raised by the Turing Machine solver.

All errors are deterministic validation failures: they are raised before any
state is built, so the object a failing call was made on stays usable.
"""

from __future__ import annotations


class TuringMachineError(Exception):
    """Base class for all solver errors."""


class InvalidGameError(TuringMachineError, ValueError):
    """Raised when a game cannot be built from the given verifiers or code space."""


class InvalidCodeError(TuringMachineError, ValueError):
    """Raised when digits do not form a code of the requested code space."""


class UnknownVerifierIdError(TuringMachineError, KeyError):
    """
    Raised when the verifier catalog has no card with the requested number.

    Attributes:
        number: The catalog number that was looked up
    """

    def __init__(self, number: int):
        super().__init__(number)
        self.number = number

    def __str__(self) -> str:
        return f"Unknown verifier number: {self.number}"


class AfterMoveError(TuringMachineError):
    """Base class for errors raised by State.after_move."""


class InvalidMoveError(AfterMoveError, ValueError):
    """
    Raised when a move does not fit the current state.

    For example a verifier is chosen while a verifier result is still
    expected, or a verifier is chosen twice for the same code.
    """


class NoCodesLeftError(AfterMoveError):
    """
    Raised when a verifier result leaves no possible solution.

    Either a wrong verifier answer was provided or the game has no solution.
    """


class NoMoveAvailableError(TuringMachineError, RuntimeError):
    """Raised by the search when no strategy can isolate the secret code."""
