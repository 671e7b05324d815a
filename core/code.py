"""
Codes and bit-packed code sets.

A code is a fixed-length tuple of digits 1..alphabet_size. Every code of a
CodeSpace has an index in [0, alphabet_size ** length); the first digit is the
least significant, so (1, 1, 1) has index 0 and (2, 1, 1) has index 1.
A CodeSet stores one bit per code index in a single Python int.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import Iterable, Iterator, Optional

import torch

from core.errors import InvalidCodeError, InvalidGameError
from utils.bits import full_mask, iter_bits, lowest_bit_index, mask_to_int, popcount

# Largest universe the solver accepts (one 128-bit word in the reference game)
MAX_UNIVERSE_SIZE = 128


@dataclass(frozen=True)
class CodeSpace:
    """
    The set of all codes of a given shape.

    Attributes:
        alphabet_size: Number of digits per position (digits are 1..alphabet_size)
        length: Number of positions
    """
    alphabet_size: int = 5
    length: int = 3

    def __post_init__(self):
        if self.alphabet_size < 1 or self.length < 1:
            raise InvalidGameError(
                f"Code space needs alphabet_size >= 1 and length >= 1, "
                f"got {self.alphabet_size} and {self.length}"
            )
        if self.size > MAX_UNIVERSE_SIZE:
            raise InvalidGameError(
                f"Code space has {self.size} codes, more than the supported {MAX_UNIVERSE_SIZE}"
            )

    @property
    def size(self) -> int:
        """Number of codes in the space."""
        return self.alphabet_size ** self.length

    @property
    def universe(self) -> CodeSet:
        """CodeSet containing every code of the space."""
        return CodeSet(full_mask(self.size), self)

    def index_of(self, digits: tuple[int, ...]) -> int:
        """
        Index of the code with the given digits.

        Raises:
            InvalidCodeError: If the digits do not form a code of this space
        """
        if len(digits) != self.length:
            raise InvalidCodeError(f"Expected {self.length} digits, got {len(digits)}: {digits}")
        index = 0
        for position, digit in enumerate(digits):
            if not isinstance(digit, int) or not 1 <= digit <= self.alphabet_size:
                raise InvalidCodeError(
                    f"Digit {digit!r} is outside 1..{self.alphabet_size} in {digits}"
                )
            index += (digit - 1) * self.alphabet_size ** position
        return index

    def digits_of(self, index: int) -> tuple[int, ...]:
        """Digits of the code with the given index."""
        if not 0 <= index < self.size:
            raise InvalidCodeError(f"Code index {index} out of range [0, {self.size})")
        return tuple(
            (index // self.alphabet_size ** position) % self.alphabet_size + 1
            for position in range(self.length)
        )

    def codes(self) -> Iterator[Code]:
        """Iterate over all codes in ascending index order."""
        for index in range(self.size):
            yield Code.from_index(index, self)

    def digits_tensor(self, device: Optional[torch.device | str] = None) -> torch.Tensor:
        """
        Digits of every code, for batched classification.

        Args:
            device: Device to create the tensor on (default cpu)

        Returns:
            [size, length] int64 tensor; row i holds the digits of code i
        """
        indices = torch.arange(self.size, dtype=torch.int64, device=device)
        powers = self.alphabet_size ** torch.arange(self.length, dtype=torch.int64, device=device)
        return (indices.unsqueeze(1) // powers.unsqueeze(0)) % self.alphabet_size + 1


DEFAULT_SPACE = CodeSpace()


@total_ordering
class Code:
    """
    An immutable candidate secret.

    Codes are ordered by index, so iterating or sorting codes is deterministic.

    Example:
        >>> Code(2, 4, 1).digits
        (2, 4, 1)
        >>> Code(2, 1, 1).index
        1
    """

    __slots__ = ("_index", "_space")

    def __init__(self, *digits: int, space: CodeSpace = DEFAULT_SPACE):
        """
        Create a code from its digits.

        Args:
            *digits: One digit per position, each in 1..space.alphabet_size
            space: Code space the code belongs to

        Raises:
            InvalidCodeError: If the digits do not form a code of the space
        """
        self._space = space
        self._index = space.index_of(tuple(digits))

    @classmethod
    def from_index(cls, index: int, space: CodeSpace = DEFAULT_SPACE) -> Code:
        """Create the code with the given index."""
        if not 0 <= index < space.size:
            raise InvalidCodeError(f"Code index {index} out of range [0, {space.size})")
        code = cls.__new__(cls)
        code._space = space
        code._index = index
        return code

    @property
    def index(self) -> int:
        return self._index

    @property
    def space(self) -> CodeSpace:
        return self._space

    @property
    def digits(self) -> tuple[int, ...]:
        return self._space.digits_of(self._index)

    @property
    def triangle(self) -> int:
        return self.digits[0]

    @property
    def square(self) -> int:
        return self.digits[1]

    @property
    def circle(self) -> int:
        return self.digits[2]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Code):
            return NotImplemented
        return self._index == other._index and self._space == other._space

    def __lt__(self, other: Code) -> bool:
        if not isinstance(other, Code):
            return NotImplemented
        return self._index < other._index

    def __hash__(self) -> int:
        return hash((self._index, self._space))

    def __repr__(self) -> str:
        return f"Code({', '.join(str(digit) for digit in self.digits)})"


class CodeSet:
    """
    Immutable bit-packed subset of a CodeSpace.

    Bit i of the mask is set when the code with index i is a member. All set
    algebra is plain integer arithmetic on the mask.

    Attributes:
        bits: Integer bitmask of member indices
        space: Code space the set belongs to
    """

    __slots__ = ("_bits", "_space")

    def __init__(self, bits: int = 0, space: CodeSpace = DEFAULT_SPACE):
        self._bits = bits & full_mask(space.size)
        self._space = space

    @classmethod
    def empty(cls, space: CodeSpace = DEFAULT_SPACE) -> CodeSet:
        return cls(0, space)

    @classmethod
    def universe(cls, space: CodeSpace = DEFAULT_SPACE) -> CodeSet:
        return space.universe

    @classmethod
    def singleton(cls, code: Code) -> CodeSet:
        """Set containing only `code`."""
        return cls(1 << code.index, code.space)

    @classmethod
    def from_codes(cls, codes: Iterable[Code], space: CodeSpace = DEFAULT_SPACE) -> CodeSet:
        bits = 0
        for code in codes:
            bits |= 1 << code.index
        return cls(bits, space)

    @classmethod
    def from_mask(cls, mask: torch.Tensor, space: CodeSpace = DEFAULT_SPACE) -> CodeSet:
        """
        Build a set from a boolean membership tensor.

        Args:
            mask: [space.size] bool tensor, True for members
            space: Code space the mask is indexed by
        """
        if mask.shape != (space.size,):
            raise ValueError(f"Expected mask of shape ({space.size},), got {tuple(mask.shape)}")
        return cls(mask_to_int(mask), space)

    @property
    def bits(self) -> int:
        return self._bits

    @property
    def space(self) -> CodeSpace:
        return self._space

    def intersect(self, other: CodeSet) -> CodeSet:
        return CodeSet(self._bits & other._bits, self._space)

    def union(self, other: CodeSet) -> CodeSet:
        return CodeSet(self._bits | other._bits, self._space)

    def complement(self) -> CodeSet:
        """Codes of the space that are not in this set."""
        return CodeSet(~self._bits, self._space)

    def contains(self, code: Code) -> bool:
        return (self._bits >> code.index) & 1 == 1

    def count(self) -> int:
        return popcount(self._bits)

    def is_empty(self) -> bool:
        return self._bits == 0

    def first(self) -> Optional[Code]:
        """Lowest-index member (the canonical representative), or None if empty."""
        if self._bits == 0:
            return None
        return Code.from_index(lowest_bit_index(self._bits), self._space)

    __and__ = intersect
    __or__ = union
    __invert__ = complement
    __contains__ = contains
    __len__ = count

    def __iter__(self) -> Iterator[Code]:
        for index in iter_bits(self._bits):
            yield Code.from_index(index, self._space)

    def __bool__(self) -> bool:
        return self._bits != 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CodeSet):
            return NotImplemented
        return self._bits == other._bits and self._space == other._space

    def __hash__(self) -> int:
        return hash((self._bits, self._space))

    def __repr__(self) -> str:
        return f"CodeSet({[code.digits for code in self]})"
