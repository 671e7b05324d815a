"""
Simulated play-outs of the solver.

SolverExperiment plays a game once per possible solution: the solver picks
every code and verifier with find_best_move, and verifier results are answered
from the active criteria of the solution acting as the hidden truth.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from core.config import SolverParams
from core.game import Game
from core.gametree import GameScore, Move, State, VerifierSolution
from experiments.trackers import PlayoutTracker, SummaryTracker

logger = logging.getLogger(__name__)


class SolverExperiment:
    """
    Experiment runner playing the best strategy against every solution.

    Example:
        ```python
        exp = SolverExperiment.from_verifier_numbers([4, 9, 11, 14])
        results = exp.run(tracker=SummaryTracker())
        print(f"Worst case: {results['worst_score']}")
        ```

    Attributes:
        game: The game being played
        max_moves: Safety limit on moves per play-out
    """

    def __init__(self, game: Game, max_moves: int = 200):
        """
        Initialize experiment runner.

        Args:
            game: Game to play
            max_moves: Maximum number of moves per play-out
        """
        self.game = game
        self.max_moves = max_moves

    @classmethod
    def from_verifier_numbers(
        cls,
        numbers: Iterable[int],
        params: Optional[SolverParams] = None,
        max_moves: int = 200
    ) -> SolverExperiment:
        return cls(Game.from_verifier_numbers(numbers, params), max_moves)

    def play(
        self,
        solution: int,
        tracker: Optional[PlayoutTracker] = None,
        predicted: Optional[GameScore] = None
    ) -> State:
        """
        Play until solved with `solution` as the hidden truth.

        Args:
            solution: Index into game.solutions
            tracker: Optional tracker receiving callbacks
            predicted: Worst-case score to check the play-out against
                (computed from the start state when None)

        Returns:
            The solved State

        Raises:
            IndexError: If the solution index is out of range
            RuntimeError: If the play-out exceeds max_moves, ends on the wrong
                code, or scores worse than predicted
        """
        if not 0 <= solution < len(self.game.solutions):
            raise IndexError(f"Solution index {solution} out of range [0, {len(self.game.solutions)})")

        state = State(self.game)
        if predicted is None and not state.is_solved():
            predicted, _ = state.find_best_move()

        step = 0
        while not state.is_solved():
            if step >= self.max_moves:
                raise RuntimeError(f"Play-out for solution {solution} exceeded {self.max_moves} moves")
            if state.is_awaiting_result():
                move: Move = VerifierSolution(
                    self.game.solution_outcome(state.pending, state.candidate, solution)
                )
            else:
                _, move = state.find_best_move()
            state, _ = state.after_move(move)
            if tracker is not None:
                tracker.on_move(solution, step, move, state)
            step += 1

        expected = self.game.solutions[solution].code
        if state.solution() != expected:
            raise RuntimeError(f"Play-out for solution {solution} ended on {state.solution()!r}, expected {expected!r}")
        if predicted is not None and state.score > predicted:
            raise RuntimeError(
                f"Play-out for solution {solution} scored {state.score}, worse than predicted {predicted}"
            )

        if tracker is not None:
            tracker.on_game_end(solution, state, predicted if predicted is not None else state.score)
        return state

    def run(
        self,
        tracker: Optional[PlayoutTracker] = None,
        solutions: Optional[Iterable[int]] = None,
        verbose: bool = False
    ) -> Any:
        """
        Play against every solution (or the given subset).

        Args:
            tracker: Tracker to collect results (default: SummaryTracker)
            solutions: Solution indices to play (default: all)
            verbose: Log progress at INFO level

        Returns:
            tracker.get_results()
        """
        if tracker is None:
            tracker = SummaryTracker()
        if solutions is None:
            solutions = range(len(self.game.solutions))

        start = State(self.game)
        predicted = None
        if not start.is_solved():
            predicted, _ = start.find_best_move()

        for index in solutions:
            state = self.play(index, tracker, predicted)
            if verbose:
                logger.info(f"Solution {index} ({state.solution()!r}) solved with score {state.score}")

        return tracker.get_results()
