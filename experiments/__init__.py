"""
Experiments module for the Turing Machine solver.

This module plays the solver's best strategy against every possible solution
of a game and collects the results with flexible tracking.

Exported Classes:
    SolverExperiment: Play-out runner
    PlayoutTracker: Abstract base class for trackers
    SummaryTracker: Aggregate score statistics (O(1) per game)
    TrajectoryTracker: Full move list per play-out

Example:
    >>> from experiments import SolverExperiment, SummaryTracker
    >>> exp = SolverExperiment.from_verifier_numbers([4, 9, 11, 14])
    >>> results = exp.run(tracker=SummaryTracker())
    >>> results["worst_score"]
    GameScore(codes_guessed=1, verifiers_checked=1)
"""

from experiments.booklet import BOOKLET_CHALLENGES, challenge
from experiments.trackers import PlayoutTracker, SummaryTracker, TrajectoryTracker
from experiments.playout import SolverExperiment

__all__ = [
    "BOOKLET_CHALLENGES",
    "challenge",
    "SolverExperiment",
    "PlayoutTracker",
    "SummaryTracker",
    "TrajectoryTracker",
]
