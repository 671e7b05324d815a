"""
Play-out trackers for solver experiments.

Trackers receive callbacks while SolverExperiment plays a game against each
possible solution, and accumulate data for analysis or benchmarking.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from core.gametree import GameScore, Move, State


class PlayoutTracker(ABC):
    """
    Abstract base class for play-out trackers.

    Trackers receive callbacks during a play-out:
    - on_move: Called after each move is applied
    - on_game_end: Called when the state is solved
    - get_results: Returns accumulated results
    """

    @abstractmethod
    def on_move(self, solution: int, step: int, move: Move, state: State) -> None:
        """
        Called after each move.

        Args:
            solution: Index of the solution acting as the hidden truth
            step: Move number within the play-out (0-based)
            move: The move that was applied
            state: State after the move
        """
        pass

    @abstractmethod
    def on_game_end(self, solution: int, state: State, predicted: GameScore) -> None:
        """
        Called when a play-out reaches a solved state.

        Args:
            solution: Index of the solution acting as the hidden truth
            state: The solved state
            predicted: Worst-case score the first search predicted
        """
        pass

    @abstractmethod
    def get_results(self) -> Any:
        pass

    def reset(self) -> None:
        """
        Reset tracker state (optional).

        Default implementation does nothing. Override if tracker needs reset.
        """
        pass


class SummaryTracker(PlayoutTracker):
    """
    Tracker that accumulates summary statistics over play-outs.

    Memory efficient - only stores aggregated scores, not individual games.
    """

    def __init__(self):
        self.total_games = 0
        self.total_moves = 0
        self.codes = []
        self.checks = []
        self.predicted = None

    def on_move(self, solution: int, step: int, move: Move, state: State) -> None:
        self.total_moves += 1

    def on_game_end(self, solution: int, state: State, predicted: GameScore) -> None:
        self.total_games += 1
        self.codes.append(state.score.codes_guessed)
        self.checks.append(state.score.verifiers_checked)
        self.predicted = predicted

    def get_results(self) -> dict[str, Any]:
        """
        Get summary statistics.

        Returns:
            Dictionary with:
                - total_games: Number of play-outs
                - avg_moves: Average moves per play-out (including results)
                - worst_score: Lexicographically worst realised GameScore
                - mean_codes / mean_checks: Average codes proposed / verifiers tested
                - predicted_score: Worst case predicted by the search
        """
        if self.total_games == 0:
            return {
                "total_games": 0,
                "avg_moves": 0.0,
                "worst_score": None,
                "mean_codes": 0.0,
                "mean_checks": 0.0,
                "predicted_score": None,
            }

        worst = max(GameScore(c, v) for c, v in zip(self.codes, self.checks))
        return {
            "total_games": self.total_games,
            "avg_moves": self.total_moves / self.total_games,
            "worst_score": worst,
            "mean_codes": float(np.mean(self.codes)),
            "mean_checks": float(np.mean(self.checks)),
            "predicted_score": self.predicted,
        }

    def reset(self) -> None:
        """Reset all statistics."""
        self.__init__()


class TrajectoryTracker(PlayoutTracker):
    """
    Tracker that stores the full move list of every play-out.

    Useful for debugging strategies and printing solution walkthroughs.
    """

    def __init__(self, store_states: bool = False):
        """
        Initialize trajectory tracker.

        Args:
            store_states: Also keep the State after every move
        """
        self.store_states = store_states
        self.trajectories = []
        self._current = {}

    def on_move(self, solution: int, step: int, move: Move, state: State) -> None:
        trajectory = self._current.setdefault(solution, {"moves": [], "states": []})
        trajectory["moves"].append(move)
        if self.store_states:
            trajectory["states"].append(state)

    def on_game_end(self, solution: int, state: State, predicted: GameScore) -> None:
        trajectory = self._current.pop(solution, {"moves": [], "states": []})
        entry = {
            "solution": solution,
            "code": state.solution(),
            "moves": trajectory["moves"],
            "score": state.score,
        }
        if self.store_states:
            entry["states"] = trajectory["states"]
        self.trajectories.append(entry)

    def get_results(self) -> list[dict]:
        """
        Get list of trajectories.

        Returns:
            List of dicts, one per play-out, containing:
                - solution: Index of the hidden solution
                - code: The code the play-out ended on
                - moves: Moves played, in order
                - score: Realised GameScore
                - states: States after each move (only with store_states)
        """
        return self.trajectories

    def reset(self) -> None:
        """Clear all trajectories."""
        self.__init__(self.store_states)
