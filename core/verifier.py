"""
Verifiers and their criteria.

A verifier card lists several criteria; in a game exactly one of them is the
active one and the verifier machine answers a proposed code with the outcome
of that criterion. Criteria are written as vectorised predicates over a
[N, length] digits tensor so a whole code space is classified in one call.

Catalog cards answer CROSS or CHECK. A verifier may declare a larger outcome
alphabet (e.g. a count 0, 1, 2); its predicates then return the outcome value
of each code instead of a bool.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Optional, Sequence, Union

import torch

from core.code import Code, CodeSet, CodeSpace
from core.errors import InvalidGameError

# Maps a [N, length] digits tensor to a [N] bool or integer tensor
Predicate = Callable[[torch.Tensor], torch.Tensor]


class VerifierOutcome(IntEnum):
    """Answer of a binary verifier machine to a proposed code."""
    CROSS = 0
    CHECK = 1

    def __repr__(self) -> str:
        return self.name.capitalize()


# A VerifierOutcome, or a plain int for verifiers with a larger alphabet
Outcome = Union[VerifierOutcome, int]

BINARY_OUTCOMES: tuple[VerifierOutcome, ...] = (VerifierOutcome.CROSS, VerifierOutcome.CHECK)


class Criterion:
    """
    One option of a verifier card, e.g. "△ < □".

    Attributes:
        description: Human-readable rule
        predicate: Vectorised rule; True where a code satisfies it, or the
            outcome value of each code
    """

    def __init__(self, description: str, predicate: Predicate):
        self.description = description
        self.predicate = predicate
        self._code_sets: dict[tuple[CodeSpace, int], CodeSet] = {}

    def classify_batch(self, digits: torch.Tensor) -> torch.Tensor:
        """
        Classify many codes at once.

        Args:
            digits: [N, length] int tensor of code digits

        Returns:
            [N] int64 tensor of outcome values
        """
        if digits.ndim != 2:
            raise ValueError(f"Expected 2D digits tensor, got shape {tuple(digits.shape)}")
        return self.predicate(digits).to(torch.int64)

    def classify(self, code: Code, outcomes: Sequence[Outcome] = BINARY_OUTCOMES) -> Outcome:
        """
        Outcome of this criterion for a single code.

        Args:
            code: Code to classify
            outcomes: Outcome alphabet of the verifier owning the criterion

        Raises:
            ValueError: If the predicate yields a value outside `outcomes`
        """
        digits = torch.tensor([code.digits], dtype=torch.int64)
        value = int(self.classify_batch(digits)[0])
        for outcome in outcomes:
            if outcome == value:
                return outcome
        raise ValueError(f"{self!r} gave {value} for {code!r}, not one of {tuple(outcomes)}")

    def code_set(
        self,
        space: CodeSpace,
        device: Optional[torch.device | str] = None,
        accepting: Outcome = VerifierOutcome.CHECK
    ) -> CodeSet:
        """CodeSet of the codes this criterion answers with `accepting` (cached per space)."""
        key = (space, int(accepting))
        if key not in self._code_sets:
            outcomes = self.classify_batch(space.digits_tensor(device))
            self._code_sets[key] = CodeSet.from_mask(outcomes == int(accepting), space)
        return self._code_sets[key]

    def __repr__(self) -> str:
        return f"Criterion({self.description!r})"


class Verifier:
    """
    A verifier card: a description plus the criteria one of which is active.

    Attributes:
        description: What the card checks, e.g. "the □ number compared to 4"
        criteria: Ordered criteria; a solution picks one index per verifier
        number: Catalog number of the card, if it came from the catalog
        outcomes: Outcome alphabet, in enumeration order
        accepting_outcome: Outcome the secret code gives under the active criterion
    """

    outcomes: tuple[Outcome, ...] = BINARY_OUTCOMES
    accepting_outcome: Outcome = VerifierOutcome.CHECK

    def __init__(
        self,
        description: str,
        criteria: Sequence[Criterion],
        number: Optional[int] = None,
        outcomes: Optional[Sequence[Outcome]] = None,
        accepting_outcome: Optional[Outcome] = None
    ):
        """
        Initialize verifier.

        Args:
            description: What the card checks
            criteria: The card's criteria (at least one)
            number: Optional catalog number
            outcomes: Outcome alphabet (default CROSS, CHECK)
            accepting_outcome: Outcome of the secret under the active
                criterion (default CHECK)

        Raises:
            InvalidGameError: If no criteria are given or the outcome alphabet
                is malformed
        """
        if len(criteria) == 0:
            raise InvalidGameError(f"Verifier {description!r} has no criteria")
        self.description = description
        self.criteria = tuple(criteria)
        self.number = number
        if outcomes is not None:
            self.outcomes = tuple(outcomes)
        if accepting_outcome is not None:
            self.accepting_outcome = accepting_outcome

        if len(self.outcomes) < 2:
            raise InvalidGameError(f"Verifier {description!r} needs at least two outcomes")
        if not all(isinstance(outcome, int) for outcome in self.outcomes):
            raise InvalidGameError(f"Outcomes of {description!r} must be integers, got {self.outcomes}")
        if len(set(int(outcome) for outcome in self.outcomes)) != len(self.outcomes):
            raise InvalidGameError(f"Verifier {description!r} has duplicate outcomes {self.outcomes}")
        if self.accepting_outcome not in self.outcomes:
            raise InvalidGameError(
                f"Accepting outcome {self.accepting_outcome!r} of {description!r} "
                f"is not one of {self.outcomes}"
            )

    @property
    def criterion_count(self) -> int:
        return len(self.criteria)

    def classify(self, code: Code, criterion_index: int) -> Outcome:
        """
        Answer of this verifier to `code` when `criterion_index` is active.

        Raises:
            IndexError: If the criterion index is out of range
        """
        if not 0 <= criterion_index < len(self.criteria):
            raise IndexError(
                f"Criterion index {criterion_index} out of range [0, {len(self.criteria)})"
            )
        return self.criteria[criterion_index].classify(code, self.outcomes)

    def outcome_sets(
        self,
        space: CodeSpace,
        device: Optional[torch.device | str] = None
    ) -> list[dict[Outcome, CodeSet]]:
        """
        Partition the code space by outcome, for every criterion.

        Args:
            space: Code space to classify
            device: Device for the batched classification

        Returns:
            One dict per criterion mapping each outcome to the CodeSet of codes
            producing it; the sets of one dict partition the universe when the
            predicates only yield values of the alphabet
        """
        digits = space.digits_tensor(device)
        partitions = []
        for criterion in self.criteria:
            outcomes = criterion.classify_batch(digits)
            partitions.append({
                outcome: CodeSet.from_mask(outcomes == int(outcome), space)
                for outcome in self.outcomes
            })
        return partitions

    def __repr__(self) -> str:
        label = f"#{self.number} " if self.number is not None else ""
        options = ", ".join(criterion.description for criterion in self.criteria)
        return f"Verifier({label}{self.description!r}: {options})"
