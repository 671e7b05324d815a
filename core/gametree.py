"""
Game state, moves and the best-move search.

A State is an immutable snapshot of play: the solutions still possible, the
proposed code of the current round, the verifiers already tested on it and
the score accumulated so far. `after_move` returns a new State and leaves the
old one untouched, so sibling branches of the search share their ancestors.

The search is minimax with alpha-beta pruning. At the player's nodes the
score is minimised over moves; at result nodes it is maximised over the
outcomes that are still possible. Scores are (codes_guessed,
verifiers_checked) totals along the path from the start of the game, compared
lexicographically.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from core.code import Code, CodeSet
from core.errors import InvalidMoveError, NoCodesLeftError, NoMoveAvailableError
from core.game import Game
from core.verifier import Outcome

logger = logging.getLogger(__name__)


class Phase(Enum):
    """What the state is waiting for."""
    AWAITING_CODE_CHOICE = "awaiting_code_choice"
    AWAITING_VERIFIER_CHOICE = "awaiting_verifier_choice"
    AWAITING_RESULT = "awaiting_result"
    SOLVED = "solved"


@dataclass(frozen=True)
class ChooseNewCode:
    """Propose a new code, starting a new round."""
    code: Code


@dataclass(frozen=True)
class ChooseVerifier:
    """Test the proposed code on the verifier at this index."""
    verifier: int


@dataclass(frozen=True)
class VerifierSolution:
    """The answer of the verifier that was just chosen."""
    outcome: Outcome


Move = Union[ChooseNewCode, ChooseVerifier, VerifierSolution]


@dataclass(frozen=True, order=True)
class GameScore:
    """
    Cost of a line of play, compared lexicographically.

    Fewer proposed codes always win; among equal code counts, fewer verifier
    tests win.

    Attributes:
        codes_guessed: Number of ChooseNewCode moves
        verifiers_checked: Number of ChooseVerifier moves
    """
    codes_guessed: int = 0
    verifiers_checked: int = 0

    def after(self, move: Move) -> GameScore:
        """Score after playing `move`."""
        if isinstance(move, ChooseNewCode):
            return GameScore(self.codes_guessed + 1, self.verifiers_checked)
        if isinstance(move, ChooseVerifier):
            return GameScore(self.codes_guessed, self.verifiers_checked + 1)
        return self

    def __add__(self, other: GameScore) -> GameScore:
        return GameScore(
            self.codes_guessed + other.codes_guessed,
            self.verifiers_checked + other.verifiers_checked
        )

    def __sub__(self, other: GameScore) -> GameScore:
        return GameScore(
            self.codes_guessed - other.codes_guessed,
            self.verifiers_checked - other.verifiers_checked
        )


# Bounds outside any reachable score
_WORST_SCORE = GameScore(sys.maxsize, sys.maxsize)
_BELOW_ANY_SCORE = GameScore(-1, -1)


class AfterMoveInfo(Enum):
    """Additional information that `State.after_move` may return."""
    # The verifier test cannot narrow down (or did not narrow down) the solutions.
    USELESS_VERIFIER_CHECK = "useless_verifier_check"


class State:
    """
    Immutable snapshot of a game in progress.

    Attributes:
        game: The game being played (shared, read-only)
        phase: What the state is waiting for
        candidate: Code proposed in the current round, if any
        checked: Verifier indices already tested on the candidate
        pending: Verifier waiting for its result, if any
        score: Codes proposed and verifiers tested so far
        history: Moves played since the start of the game
    """

    __slots__ = ("game", "phase", "candidate", "checked", "pending", "score", "history", "_possible")

    def __init__(self, game: Game):
        """
        Start a game: every solution is possible and no code is proposed.

        Args:
            game: The game to play
        """
        self.game = game
        self._possible = game.solution_universe
        self.candidate: Optional[Code] = None
        self.checked: frozenset[int] = frozenset()
        self.pending: Optional[int] = None
        self.score = GameScore()
        self.history: tuple[Move, ...] = ()
        self.phase = Phase.SOLVED if game.single_code(self._possible) else Phase.AWAITING_CODE_CHOICE

    @classmethod
    def new(cls, game: Game) -> State:
        return cls(game)

    def _evolve(self, move: Move, **changes) -> State:
        state = State.__new__(State)
        state.game = self.game
        state._possible = changes.get("possible", self._possible)
        state.candidate = changes.get("candidate", self.candidate)
        state.checked = changes.get("checked", self.checked)
        state.pending = changes.get("pending", self.pending)
        state.phase = changes["phase"]
        state.score = self.score.after(move)
        state.history = self.history + (move,)
        return state

    def possible_solutions(self) -> int:
        """Bitmask over game.solutions of the solutions still possible."""
        return self._possible

    def possible_codes(self) -> CodeSet:
        """Codes still possible as the secret."""
        return self.game.codes_of(self._possible)

    def is_awaiting_result(self) -> bool:
        return self.phase is Phase.AWAITING_RESULT

    def is_solved(self) -> bool:
        return self.phase is Phase.SOLVED

    def has_selected_code(self) -> bool:
        return self.candidate is not None

    def solution(self) -> Optional[Code]:
        """The secret code once it is the only one left, else None."""
        return self.game.single_code(self._possible)

    def _informative_verifiers(self, code: Code) -> list[int]:
        table = self.game.deduction_table
        return [
            verifier for verifier in range(self.game.verifier_count)
            if verifier not in self.checked
            and table.is_informative(self._possible, verifier, code.index)
        ]

    def _code_moves(self) -> list[ChooseNewCode]:
        table = self.game.deduction_table
        return [
            ChooseNewCode(code) for code in self.game.query_representatives
            if any(
                table.is_informative(self._possible, verifier, code.index)
                for verifier in range(self.game.verifier_count)
            )
        ]

    def _may_choose_new_code(self) -> bool:
        if self.phase is Phase.AWAITING_CODE_CHOICE:
            return True
        if self.phase is Phase.AWAITING_VERIFIER_CHOICE:
            return bool(self.checked) or not self._informative_verifiers(self.candidate)
        return False

    def legal_moves(self) -> list[Move]:
        """
        Moves worth considering from this state, in search order.

        Verifier tests that cannot narrow the possible solutions and outcomes
        that no possible solution produces are left out.
        """
        if self.phase is Phase.SOLVED:
            return []
        if self.phase is Phase.AWAITING_RESULT:
            table = self.game.deduction_table
            row = table.row(self.pending, self.candidate.index)
            return [
                VerifierSolution(outcome)
                for outcome, mask in zip(table.outcomes(self.pending), row)
                if self._possible & mask
            ]
        if self.phase is Phase.AWAITING_CODE_CHOICE:
            return list(self._code_moves())

        moves: list[Move] = [ChooseVerifier(v) for v in self._informative_verifiers(self.candidate)]
        if self.checked or not moves:
            moves.extend(self._code_moves())
        return moves

    def after_move(self, move: Move) -> tuple[State, Optional[AfterMoveInfo]]:
        """
        Return the state after performing `move`.

        The state itself is never modified; on error it stays valid.

        Args:
            move: ChooseNewCode, ChooseVerifier or VerifierSolution

        Returns:
            Tuple of:
                - the new State
                - AfterMoveInfo.USELESS_VERIFIER_CHECK when a chosen verifier
                  cannot narrow the solutions or a result did not narrow them,
                  else None

        Raises:
            InvalidMoveError: If the move does not fit the current phase
            NoCodesLeftError: If a verifier result contradicts every possible solution
        """
        if self.phase is Phase.SOLVED:
            raise InvalidMoveError(f"Game is already solved, cannot play {move}")

        if isinstance(move, ChooseNewCode):
            return self._after_choose_code(move), None
        if isinstance(move, ChooseVerifier):
            return self._after_choose_verifier(move)
        if isinstance(move, VerifierSolution):
            return self._after_verifier_solution(move)
        raise InvalidMoveError(f"Unknown move {move!r}")

    def _after_choose_code(self, move: ChooseNewCode) -> State:
        if not isinstance(move.code, Code) or move.code.space != self.game.space:
            raise InvalidMoveError(f"{move.code!r} is not a code of this game")
        if not self._may_choose_new_code():
            raise InvalidMoveError(
                f"Cannot choose a new code while {self.phase.value} "
                f"with {len(self.checked)} verifier(s) tested on {self.candidate!r}"
            )
        return self._evolve(
            move,
            candidate=move.code,
            checked=frozenset(),
            pending=None,
            phase=Phase.AWAITING_VERIFIER_CHOICE,
        )

    def _after_choose_verifier(self, move: ChooseVerifier) -> tuple[State, Optional[AfterMoveInfo]]:
        verifier = move.verifier
        if self.phase is not Phase.AWAITING_VERIFIER_CHOICE:
            raise InvalidMoveError(f"Cannot choose a verifier while {self.phase.value}")
        if isinstance(verifier, bool) or not isinstance(verifier, int) \
                or not 0 <= verifier < self.game.verifier_count:
            raise InvalidMoveError(
                f"Verifier index {verifier!r} out of range [0, {self.game.verifier_count})"
            )
        if verifier in self.checked:
            raise InvalidMoveError(f"Verifier {verifier} was already tested on {self.candidate!r}")

        informative = self.game.deduction_table.is_informative(
            self._possible, verifier, self.candidate.index
        )
        state = self._evolve(
            move,
            checked=self.checked | {verifier},
            pending=verifier,
            phase=Phase.AWAITING_RESULT,
        )
        return state, None if informative else AfterMoveInfo.USELESS_VERIFIER_CHECK

    def _after_verifier_solution(self, move: VerifierSolution) -> tuple[State, Optional[AfterMoveInfo]]:
        if self.phase is not Phase.AWAITING_RESULT:
            raise InvalidMoveError(f"Cannot provide a verifier result while {self.phase.value}")
        table = self.game.deduction_table
        if move.outcome not in table.outcomes(self.pending):
            raise InvalidMoveError(
                f"{move.outcome!r} is not an outcome of verifier {self.pending}"
            )

        possible = self._possible & table.outcome_mask(self.pending, self.candidate.index, move.outcome)
        if possible == 0:
            raise NoCodesLeftError(
                f"No solution gives {move.outcome!r} for verifier {self.pending} on {self.candidate!r}"
            )
        info = AfterMoveInfo.USELESS_VERIFIER_CHECK if possible == self._possible else None

        if self.game.single_code(possible) is not None:
            return self._evolve(move, possible=possible, pending=None, phase=Phase.SOLVED), info

        round_over = len(self.checked) >= self.game.params.max_verifiers_per_code or not any(
            verifier not in self.checked
            and table.is_informative(possible, verifier, self.candidate.index)
            for verifier in range(self.game.verifier_count)
        )
        if round_over:
            state = self._evolve(
                move,
                possible=possible,
                candidate=None,
                checked=frozenset(),
                pending=None,
                phase=Phase.AWAITING_CODE_CHOICE,
            )
        else:
            state = self._evolve(
                move,
                possible=possible,
                pending=None,
                phase=Phase.AWAITING_VERIFIER_CHOICE,
            )
        return state, info

    def lower_bound(self) -> GameScore:
        """Best score any continuation of an unsolved state can reach."""
        if self.phase is Phase.AWAITING_CODE_CHOICE:
            return self.score + GameScore(1, 1)
        if self.phase is Phase.AWAITING_VERIFIER_CHOICE:
            return self.score + GameScore(0, 1)
        return self.score

    def key(self) -> tuple:
        """Everything that determines the remaining cost of play (not the score so far)."""
        candidate = self.candidate.index if self.candidate is not None else -1
        return (self.phase, self._possible, candidate, self.checked, self.pending)

    def find_best_move(self) -> tuple[GameScore, Move]:
        """
        Find the move minimising the worst-case score.

        Returns:
            Tuple of (worst-case total score, first best move in search order)

        Raises:
            NoMoveAvailableError: If the state awaits a verifier result, is
                already solved, or no strategy can solve the game
        """
        result = search(self)
        return result.score, result.move

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, State):
            return NotImplemented
        return self.game is other.game and self.key() == other.key() and self.score == other.score

    def __hash__(self) -> int:
        return hash((id(self.game), self.key(), self.score))

    def __repr__(self) -> str:
        return (
            f"State(phase={self.phase.value}, possible={len(self.possible_codes())} codes, "
            f"candidate={self.candidate!r}, checked={sorted(self.checked)}, score={self.score})"
        )


@dataclass(frozen=True)
class SearchResult:
    """
    Outcome of a best-move search.

    Attributes:
        score: Worst-case total score when following the best strategy
        move: First best move in search order
        nodes: Number of states visited
        cutoffs: Number of branches pruned
    """
    score: GameScore
    move: Move
    nodes: int
    cutoffs: int


class _Bound(Enum):
    EXACT = 0
    LOWER = 1
    UPPER = 2


class _AlphaBeta:
    """
    One alpha-beta search with a transposition table.

    The table stores the remaining cost of a state (its value minus the score
    already accumulated), so states reached through different move orders
    share entries.
    """

    def __init__(self):
        self.nodes = 0
        self.cutoffs = 0
        self._table: dict[tuple, tuple[GameScore, _Bound]] = {}

    def value(self, state: State, alpha: GameScore, beta: GameScore) -> GameScore:
        self.nodes += 1
        if state.is_solved():
            return state.score

        key = state.key()
        entry = self._table.get(key)
        if entry is not None:
            remaining, bound = entry
            value = state.score + remaining
            if bound is _Bound.EXACT:
                return value
            if bound is _Bound.LOWER and value >= beta:
                return value
            if bound is _Bound.UPPER and value <= alpha:
                return value

        if state.is_awaiting_result():
            value = self.max_node(state, alpha, beta)
        else:
            value, _ = self.min_node(state, alpha, beta)

        if value <= alpha:
            bound = _Bound.UPPER
        elif value >= beta:
            bound = _Bound.LOWER
        else:
            bound = _Bound.EXACT
        self._table[key] = (value - state.score, bound)
        return value

    def min_node(
        self,
        state: State,
        alpha: GameScore,
        beta: GameScore
    ) -> tuple[GameScore, Optional[Move]]:
        best, best_move = _WORST_SCORE, None
        floor = state.lower_bound()
        for move in state.legal_moves():
            child, _ = state.after_move(move)
            score = self.value(child, alpha, beta)
            if score < best:
                best, best_move = score, move
            if best <= alpha or best <= floor:
                self.cutoffs += 1
                break
            if best < beta:
                beta = best
        return best, best_move

    def max_node(self, state: State, alpha: GameScore, beta: GameScore) -> GameScore:
        worst = _BELOW_ANY_SCORE
        for move in state.legal_moves():
            child, _ = state.after_move(move)
            score = self.value(child, alpha, beta)
            if score > worst:
                worst = score
            if worst >= beta:
                self.cutoffs += 1
                break
            if worst > alpha:
                alpha = worst
        return worst


def search(state: State) -> SearchResult:
    """
    Run the best-move search from a state where the player is to move.

    Args:
        state: State awaiting a code or verifier choice

    Returns:
        SearchResult with the worst-case score, best move and statistics

    Raises:
        NoMoveAvailableError: If the state awaits a verifier result, is
            already solved, or no strategy can solve the game
    """
    if state.is_solved():
        raise NoMoveAvailableError("The game is already solved")
    if state.is_awaiting_result():
        raise NoMoveAvailableError("The state is waiting for a verifier result")

    searcher = _AlphaBeta()
    score, move = searcher.min_node(state, _BELOW_ANY_SCORE, _WORST_SCORE)
    if move is None or score == _WORST_SCORE:
        raise NoMoveAvailableError(f"No strategy solves the game from {state!r}")

    logger.debug(
        f"Search from {state!r}: best {move} with score {score}, "
        f"{searcher.nodes} nodes, {searcher.cutoffs} cutoffs"
    )
    return SearchResult(score=score, move=move, nodes=searcher.nodes, cutoffs=searcher.cutoffs)


def principal_line(state: State, solution: int) -> tuple[State, list[Move]]:
    """
    Play best moves from `state` until solved, answering verifier tests as
    the solution with index `solution` would.

    Args:
        state: Starting state
        solution: Index into game.solutions acting as the hidden truth

    Returns:
        Tuple of (solved state, moves played)
    """
    game = state.game
    moves: list[Move] = []
    while not state.is_solved():
        if state.is_awaiting_result():
            outcome = game.solution_outcome(state.pending, state.candidate, solution)
            move: Move = VerifierSolution(outcome)
        else:
            _, move = state.find_best_move()
        state, _ = state.after_move(move)
        moves.append(move)
    return state, moves
