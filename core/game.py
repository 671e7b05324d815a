"""
Game layout and the one-time deduction phase.

A Game is built once from its verifiers. The constructor classifies every code
of the code space with every criterion (one batched torch call per criterion),
finds all puzzle solutions, and precomputes for every verifier and every
proposed code which solutions answer with which outcome. The search afterwards
only intersects these precomputed bitmasks.
"""

from __future__ import annotations

import logging
from typing import Iterable, NamedTuple, Optional, Sequence

import torch

from core.code import Code, CodeSet, CodeSpace
from core.config import SolverParams
from core.errors import InvalidGameError
from core.verifier import Outcome, Verifier
from utils.bits import full_mask, iter_bits, lowest_bit_index, popcount

logger = logging.getLogger(__name__)


class Solution(NamedTuple):
    """
    One possible puzzle solution.

    Attributes:
        assignment: Index of the active criterion, per verifier
        code: The unique code accepted by those criteria
    """
    assignment: tuple[int, ...]
    code: Code


class DeductionTable:
    """
    Precomputed verifier answers over the solution set.

    For verifier v and proposed code index q, `row(v, q)` holds one solution
    bitmask per outcome of v (in the verifier's outcome order). Bit i is set
    when solution i makes v answer q with that outcome, so the masks of one row
    partition the solution universe.
    """

    def __init__(
        self,
        outcomes: Sequence[tuple[Outcome, ...]],
        rows: Sequence[Sequence[tuple[int, ...]]]
    ):
        self._outcomes = tuple(outcomes)
        self._rows = tuple(tuple(verifier_rows) for verifier_rows in rows)

    @property
    def verifier_count(self) -> int:
        return len(self._rows)

    def outcomes(self, verifier: int) -> tuple[Outcome, ...]:
        return self._outcomes[verifier]

    def row(self, verifier: int, code_index: int) -> tuple[int, ...]:
        return self._rows[verifier][code_index]

    def outcome_mask(self, verifier: int, code_index: int, outcome: Outcome) -> int:
        """
        Solutions for which `verifier` answers the code with `outcome`.

        Raises:
            ValueError: If the outcome is not in the verifier's alphabet
        """
        position = self._outcomes[verifier].index(outcome)
        return self._rows[verifier][code_index][position]

    def is_informative(self, possible: int, verifier: int, code_index: int) -> bool:
        """True when testing the code on the verifier can split `possible`."""
        parts = 0
        for mask in self._rows[verifier][code_index]:
            if possible & mask:
                parts += 1
                if parts > 1:
                    return True
        return False

    def signature(self, code_index: int) -> tuple[tuple[int, ...], ...]:
        """All rows of a code; codes with equal signatures are interchangeable queries."""
        return tuple(verifier_rows[code_index] for verifier_rows in self._rows)


class Game:
    """
    A game layout: the verifiers in play plus everything deduced from them.

    Immutable after construction and safe to share between any number of
    states and searches.

    Attributes:
        verifiers: Verifiers in play, identified by their position
        params: SolverParams used to build the game
        space: Code space of the game
        solutions: All puzzle solutions, ordered by assignment
        deduction_table: Precomputed verifier answers per proposed code
        query_representatives: Codes worth proposing (one per class of
            interchangeable codes, lowest index first)
    """

    def __init__(self, verifiers: Iterable[Verifier], params: Optional[SolverParams] = None):
        """
        Build a game and run the deduction phase.

        Args:
            verifiers: Verifiers in play (at least one)
            params: SolverParams (defaults when None)

        Raises:
            InvalidGameError: If there are no verifiers, an entry is not a
                Verifier, or the code space is not representable
        """
        self.params = params if params is not None else SolverParams()
        self.verifiers = tuple(verifiers)
        if len(self.verifiers) == 0:
            raise InvalidGameError("A game needs at least one verifier")
        for verifier in self.verifiers:
            if not isinstance(verifier, Verifier):
                raise InvalidGameError(f"Expected Verifier instances, got {type(verifier).__name__}")

        self.space = CodeSpace(self.params.alphabet_size, self.params.length)

        device = self.params.device
        if device is None:
            from utils.device import get_device
            device = get_device()
        device = torch.device(device) if isinstance(device, str) else device

        # [verifier][criterion] -> {outcome: CodeSet}
        self._criterion_sets = [verifier.outcome_sets(self.space, device) for verifier in self.verifiers]
        self._accepted = [
            [partition[verifier.accepting_outcome].bits for partition in partitions]
            for verifier, partitions in zip(self.verifiers, self._criterion_sets)
        ]

        self.solutions = tuple(self._find_solutions())
        self.solution_universe = full_mask(len(self.solutions))
        self._solution_code_bits = tuple(1 << solution.code.index for solution in self.solutions)
        self._same_code = tuple(
            sum(
                1 << j for j, other in enumerate(self.solutions)
                if other.code == solution.code
            )
            for solution in self.solutions
        )

        self.deduction_table = self._build_deduction_table()
        self.query_representatives = self._find_query_representatives()

        if not self.solutions:
            logger.warning(f"Game with verifiers {self.verifier_numbers()} has no solution")
        logger.info(
            f"Built game with {self.verifier_count} verifiers: "
            f"{len(self.solutions)} solutions, {len(self.query_representatives)} distinct queries"
        )

    @classmethod
    def new(cls, verifiers: Iterable[Verifier], params: Optional[SolverParams] = None) -> Game:
        return cls(verifiers, params)

    @classmethod
    def from_verifier_numbers(
        cls,
        numbers: Iterable[int],
        params: Optional[SolverParams] = None
    ) -> Game:
        """
        Build a game from verifier catalog numbers.

        Example:
            >>> Game.from_verifier_numbers([2, 14, 17, 21, 22]).verifier_count
            5

        Raises:
            UnknownVerifierIdError: If a number is not in the catalog
        """
        from core.catalog import lookup
        return cls([lookup(number) for number in numbers], params)

    new_from_verifier_numbers = from_verifier_numbers

    @property
    def verifier_count(self) -> int:
        return len(self.verifiers)

    def verifier_numbers(self) -> list[Optional[int]]:
        return [verifier.number for verifier in self.verifiers]

    def criterion_sets(self, verifier: int, criterion: int) -> dict[Outcome, CodeSet]:
        """Partition of the code space by outcome for one criterion of a verifier."""
        return dict(self._criterion_sets[verifier][criterion])

    def outcome_set(self, verifier: int, criterion: int, outcome: Outcome) -> CodeSet:
        """Codes that `criterion` of `verifier` answers with `outcome`."""
        return self._criterion_sets[verifier][criterion][outcome]

    def codes_of(self, solutions: int) -> CodeSet:
        """CodeSet of the codes of the solutions in a solution bitmask."""
        bits = 0
        for index in iter_bits(solutions):
            bits |= self._solution_code_bits[index]
        return CodeSet(bits, self.space)

    def single_code(self, solutions: int) -> Optional[Code]:
        """The code shared by every solution in the mask, or None if there is not exactly one."""
        if solutions == 0:
            return None
        first = lowest_bit_index(solutions)
        if solutions & ~self._same_code[first]:
            return None
        return self.solutions[first].code

    def solution_outcome(self, verifier: int, code: Code, solution: int) -> Outcome:
        """Answer of `verifier` to `code` when `solution` is the one in play."""
        row = self.deduction_table.row(verifier, code.index)
        for outcome, mask in zip(self.deduction_table.outcomes(verifier), row):
            if mask >> solution & 1:
                return outcome
        raise IndexError(f"Solution index {solution} out of range [0, {len(self.solutions)})")

    def describe_solution(self, solution: int) -> str:
        """Human-readable active criteria and code of a solution."""
        assignment, code = self.solutions[solution]
        lines = [f"{code!r}"]
        for verifier, criterion in zip(self.verifiers, assignment):
            lines.append(f"{verifier.description}: {verifier.criteria[criterion].description}")
        return "\n".join(lines)

    def _find_solutions(self) -> list[Solution]:
        """
        Enumerate assignments depth-first, keeping those that single out one
        code without any redundant verifier.
        """
        solutions = []
        universe = full_mask(self.space.size)
        choice: list[int] = []

        def visit(verifier: int, remaining: int) -> None:
            if remaining == 0:
                return
            if verifier == self.verifier_count:
                if popcount(remaining) == 1 and not self._has_redundant_verifier(choice):
                    code = Code.from_index(lowest_bit_index(remaining), self.space)
                    solutions.append(Solution(tuple(choice), code))
                return
            for criterion, accepted in enumerate(self._accepted[verifier]):
                choice.append(criterion)
                visit(verifier + 1, remaining & accepted)
                choice.pop()

        visit(0, universe)
        return solutions

    def _has_redundant_verifier(self, assignment: Sequence[int]) -> bool:
        """True if dropping any one verifier still leaves a single code."""
        universe = full_mask(self.space.size)
        for excluded in range(self.verifier_count):
            remaining = universe
            for verifier, criterion in enumerate(assignment):
                if verifier != excluded:
                    remaining &= self._accepted[verifier][criterion]
            if popcount(remaining) <= 1:
                return True
        return False

    def _build_deduction_table(self) -> DeductionTable:
        outcomes = [verifier.outcomes for verifier in self.verifiers]
        rows = []
        for v, verifier in enumerate(self.verifiers):
            by_criterion = [0] * verifier.criterion_count
            for index, solution in enumerate(self.solutions):
                by_criterion[solution.assignment[v]] |= 1 << index

            verifier_rows = []
            for code_index in range(self.space.size):
                row = []
                for outcome in verifier.outcomes:
                    mask = 0
                    for criterion, partition in enumerate(self._criterion_sets[v]):
                        if partition[outcome].bits >> code_index & 1:
                            mask |= by_criterion[criterion]
                    row.append(mask)
                verifier_rows.append(tuple(row))
            rows.append(verifier_rows)
        return DeductionTable(outcomes, rows)

    def _find_query_representatives(self) -> tuple[Code, ...]:
        if not self.params.canonicalize_queries:
            return tuple(self.space.codes())
        seen = set()
        representatives = []
        for code in self.space.codes():
            signature = self.deduction_table.signature(code.index)
            if signature not in seen:
                seen.add(signature)
                representatives.append(code)
        return tuple(representatives)

    def __repr__(self) -> str:
        return f"Game(verifiers={self.verifier_numbers()}, solutions={len(self.solutions)})"
