"""
Verifier catalog: the 48 numbered verifier cards of the game.

Positions are named after the card symbols: △ (triangle, first digit),
□ (square, second digit) and ○ (circle, third digit). Every predicate works
on a [N, 3] digits tensor and returns a [N] bool tensor.
"""

from __future__ import annotations

from functools import lru_cache

import torch

from core.errors import UnknownVerifierIdError
from core.verifier import Criterion, Verifier


def _t(d: torch.Tensor) -> torch.Tensor:
    return d[:, 0]


def _s(d: torch.Tensor) -> torch.Tensor:
    return d[:, 1]


def _c(d: torch.Tensor) -> torch.Tensor:
    return d[:, 2]


def _count_digit(d: torch.Tensor, digit: int) -> torch.Tensor:
    return (d == digit).sum(dim=1)


def _count_even(d: torch.Tensor) -> torch.Tensor:
    return (d % 2 == 0).sum(dim=1)


def _digit_sum(d: torch.Tensor) -> torch.Tensor:
    return d.sum(dim=1)


def _repeating_numbers(d: torch.Tensor) -> torch.Tensor:
    """2 for a triple, 1 for a pair, 0 when all digits differ."""
    t, s, c = _t(d), _s(d), _c(d)
    triple = (t == s) & (s == c)
    pair = (t == s) | (s == c) | (t == c)
    return torch.where(triple, 2, torch.where(pair, 1, 0))


def _sequence_ascending(d: torch.Tensor) -> torch.Tensor:
    """3 for three consecutive ascending digits, 2 for two, else 0."""
    first = _t(d) + 1 == _s(d)
    second = _s(d) + 1 == _c(d)
    return torch.where(first & second, 3, torch.where(first | second, 2, 0))


def _sequence_ascending_or_descending(d: torch.Tensor) -> torch.Tensor:
    """Like _sequence_ascending, counting descending runs too."""
    t, s, c = _t(d), _s(d), _c(d)
    up_first, up_second = t + 1 == s, s + 1 == c
    down_first, down_second = t == s + 1, s == c + 1
    full = (up_first & up_second) | (down_first & down_second)
    partial = up_first | up_second | down_first | down_second
    return torch.where(full, 3, torch.where(partial, 2, 0))


def _ascending(d: torch.Tensor) -> torch.Tensor:
    return (_t(d) < _s(d)) & (_s(d) < _c(d))


def _descending(d: torch.Tensor) -> torch.Tensor:
    return (_t(d) > _s(d)) & (_s(d) > _c(d))


def _card(number: int, description: str, options: list[tuple]) -> Verifier:
    return Verifier(
        description,
        [Criterion(option, predicate) for option, predicate in options],
        number=number,
    )


def _compare_to(name: str, position, value: int) -> list[tuple]:
    return [
        (f"{name} < {value}", lambda d: position(d) < value),
        (f"{name} = {value}", lambda d: position(d) == value),
        (f"{name} > {value}", lambda d: position(d) > value),
    ]


def _compare_positions(left: str, a, right: str, b) -> list[tuple]:
    return [
        (f"{left} < {right}", lambda d: a(d) < b(d)),
        (f"{left} = {right}", lambda d: a(d) == b(d)),
        (f"{left} > {right}", lambda d: a(d) > b(d)),
    ]


def _parity(name: str, position) -> list[tuple]:
    return [
        (f"{name} is even", lambda d: position(d) % 2 == 0),
        (f"{name} is odd", lambda d: position(d) % 2 == 1),
    ]


def _digit_count(digit: int, counts: range) -> list[tuple]:
    words = ["zero", "one", "two", "three"]
    return [
        (f"{words[n]} {digit}s", lambda d, n=n: _count_digit(d, digit) == n)
        for n in counts
    ]


def _per_position(template: str, rule) -> list[tuple]:
    positions = [("△", _t), ("□", _s), ("○", _c)]
    return [
        (template.format(name), lambda d, position=position: rule(position(d)))
        for name, position in positions
    ]


@lru_cache(maxsize=None)
def _catalog() -> dict[int, Verifier]:
    cards = [
        _card(1, "the △ number compared to 1", [
            ("△ = 1", lambda d: _t(d) == 1),
            ("△ > 1", lambda d: _t(d) > 1),
        ]),
        _card(2, "the △ number compared to 3", _compare_to("△", _t, 3)),
        _card(3, "the □ number compared to 3", _compare_to("□", _s, 3)),
        _card(4, "the □ number compared to 4", _compare_to("□", _s, 4)),
        _card(5, "if △ is even or odd", _parity("△", _t)),
        _card(6, "if □ is even or odd", _parity("□", _s)),
        _card(7, "if ○ is even or odd", _parity("○", _c)),
        _card(8, "the number of 1s in the code", _digit_count(1, range(4))),
        _card(9, "the number of 3s in the code", _digit_count(3, range(4))),
        _card(10, "the number of 4s in the code", _digit_count(4, range(4))),
        _card(11, "the △ number compared to the □ number", _compare_positions("△", _t, "□", _s)),
        _card(12, "the △ number compared to the ○ number", _compare_positions("△", _t, "○", _c)),
        _card(13, "the □ number compared to the ○ number", _compare_positions("□", _s, "○", _c)),
        _card(14, "which colour's number is smaller than either of the others", [
            ("△ < □, ○", lambda d: (_t(d) < _s(d)) & (_t(d) < _c(d))),
            ("□ < △, ○", lambda d: (_s(d) < _t(d)) & (_s(d) < _c(d))),
            ("○ < □, △", lambda d: (_c(d) < _s(d)) & (_c(d) < _t(d))),
        ]),
        _card(15, "which colour's number is larger than either of the others", [
            ("△ > □, ○", lambda d: (_t(d) > _s(d)) & (_t(d) > _c(d))),
            ("□ > △, ○", lambda d: (_s(d) > _t(d)) & (_s(d) > _c(d))),
            ("○ > □, △", lambda d: (_c(d) > _s(d)) & (_c(d) > _t(d))),
        ]),
        _card(16, "the number of even numbers compared to the number of odd numbers", [
            ("EVEN > ODD", lambda d: _count_even(d) >= 2),
            ("EVEN < ODD", lambda d: _count_even(d) <= 1),
        ]),
        _card(17, "how many even numbers there are in the code", [
            ("zero even numbers", lambda d: _count_even(d) == 0),
            ("one even number", lambda d: _count_even(d) == 1),
            ("two even numbers", lambda d: _count_even(d) == 2),
            ("three even numbers", lambda d: _count_even(d) == 3),
        ]),
        _card(18, "if the sum of all the numbers is even or odd", [
            ("△ + □ + ○ = EVEN", lambda d: _digit_sum(d) % 2 == 0),
            ("△ + □ + ○ = ODD", lambda d: _digit_sum(d) % 2 == 1),
        ]),
        _card(19, "the sum of △ and □ compared to 6", [
            ("△ + □ < 6", lambda d: _t(d) + _s(d) < 6),
            ("△ + □ = 6", lambda d: _t(d) + _s(d) == 6),
            ("△ + □ > 6", lambda d: _t(d) + _s(d) > 6),
        ]),
        _card(20, "if a number repeats itself in the code", [
            ("a triple number", lambda d: _repeating_numbers(d) == 2),
            ("a double number", lambda d: _repeating_numbers(d) == 1),
            ("no repetition", lambda d: _repeating_numbers(d) == 0),
        ]),
        _card(21, "if there is a number present exactly twice", [
            ("no pairs", lambda d: _repeating_numbers(d) != 1),
            ("a pair", lambda d: _repeating_numbers(d) == 1),
        ]),
        _card(22, "if the 3 numbers in the code are in ascending order, descending order, or no order", [
            ("ascending order", _ascending),
            ("descending order", _descending),
            ("no order", lambda d: ~_ascending(d) & ~_descending(d)),
        ]),
        _card(23, "the sum of all numbers compared to 6", [
            ("△ + □ + ○ < 6", lambda d: _digit_sum(d) < 6),
            ("△ + □ + ○ = 6", lambda d: _digit_sum(d) == 6),
            ("△ + □ + ○ > 6", lambda d: _digit_sum(d) > 6),
        ]),
        _card(24, "if there is a sequence of ascending numbers", [
            ("3 numbers in ascending order", lambda d: _sequence_ascending(d) == 3),
            ("2 numbers in ascending order", lambda d: _sequence_ascending(d) == 2),
            ("no numbers in ascending order", lambda d: _sequence_ascending(d) == 0),
        ]),
        _card(25, "if there is a sequence of ascending or descending numbers", [
            ("no sequence of numbers in ascending or descending order",
             lambda d: _sequence_ascending_or_descending(d) == 0),
            ("2 numbers in ascending or descending order",
             lambda d: _sequence_ascending_or_descending(d) == 2),
            ("3 numbers in ascending or descending order",
             lambda d: _sequence_ascending_or_descending(d) == 3),
        ]),
        _card(26, "that a specific colour is less than 3", _per_position("{} < 3", lambda x: x < 3)),
        _card(27, "that a specific colour is less than 4", _per_position("{} < 4", lambda x: x < 4)),
        _card(28, "that a specific colour is equal to 1", _per_position("{} = 1", lambda x: x == 1)),
        _card(29, "that a specific colour is equal to 3", _per_position("{} = 3", lambda x: x == 3)),
        _card(30, "that a specific colour is equal to 4", _per_position("{} = 4", lambda x: x == 4)),
        _card(31, "that a specific colour is greater than 1", _per_position("{} > 1", lambda x: x > 1)),
        _card(32, "that a specific colour is greater than 3", _per_position("{} > 3", lambda x: x > 3)),
        _card(33, "that a specific colour is even or odd",
              _parity("△", _t) + _parity("□", _s) + _parity("○", _c)),
        _card(34, "which colour has the smallest number (or is tied for the smallest number)", [
            ("△ <= □, ○", lambda d: (_t(d) <= _s(d)) & (_t(d) <= _c(d))),
            ("□ <= △, ○", lambda d: (_s(d) <= _t(d)) & (_s(d) <= _c(d))),
            ("○ <= □, △", lambda d: (_c(d) <= _s(d)) & (_c(d) <= _t(d))),
        ]),
        _card(35, "which colour has the largest number (or is tied for the largest number)", [
            ("△ >= □, ○", lambda d: (_t(d) >= _s(d)) & (_t(d) >= _c(d))),
            ("□ >= △, ○", lambda d: (_s(d) >= _t(d)) & (_s(d) >= _c(d))),
            ("○ >= □, △", lambda d: (_c(d) >= _s(d)) & (_c(d) >= _t(d))),
        ]),
        _card(36, "the sum of all the numbers is a multiple of 3 or 4 or 5", [
            ("△ + □ + ○ = 3x", lambda d: _digit_sum(d) % 3 == 0),
            ("△ + □ + ○ = 4x", lambda d: _digit_sum(d) % 4 == 0),
            ("△ + □ + ○ = 5x", lambda d: _digit_sum(d) % 5 == 0),
        ]),
        _card(37, "the sum of 2 specific colours is equal to 4", [
            ("△ + □ = 4", lambda d: _t(d) + _s(d) == 4),
            ("△ + ○ = 4", lambda d: _t(d) + _c(d) == 4),
            ("□ + ○ = 4", lambda d: _s(d) + _c(d) == 4),
        ]),
        _card(38, "the sum of 2 specific colours is equal to 6", [
            ("△ + □ = 6", lambda d: _t(d) + _s(d) == 6),
            ("△ + ○ = 6", lambda d: _t(d) + _c(d) == 6),
            ("□ + ○ = 6", lambda d: _s(d) + _c(d) == 6),
        ]),
        _card(39, "the number of one specific colour compared to 1", [
            ("△ = 1", lambda d: _t(d) == 1),
            ("△ > 1", lambda d: _t(d) > 1),
            ("□ = 1", lambda d: _s(d) == 1),
            ("□ > 1", lambda d: _s(d) > 1),
            ("○ = 1", lambda d: _c(d) == 1),
            ("○ > 1", lambda d: _c(d) > 1),
        ]),
        _card(40, "the number of one specific colour compared to 3",
              _compare_to("△", _t, 3) + _compare_to("□", _s, 3) + _compare_to("○", _c, 3)),
        _card(41, "the number of one specific colour compared to 4",
              _compare_to("△", _t, 4) + _compare_to("□", _s, 4) + _compare_to("○", _c, 4)),
        _card(42, "which colour is the smallest or the largest", [
            ("△ < ○, □", lambda d: (_t(d) < _c(d)) & (_t(d) < _s(d))),
            ("△ > ○, □", lambda d: (_t(d) > _c(d)) & (_t(d) > _s(d))),
            ("□ < △, ○", lambda d: (_s(d) < _t(d)) & (_s(d) < _c(d))),
            ("□ > △, ○", lambda d: (_s(d) > _t(d)) & (_s(d) > _c(d))),
            ("○ < □, △", lambda d: (_c(d) < _s(d)) & (_c(d) < _t(d))),
            ("○ > □, △", lambda d: (_c(d) > _s(d)) & (_c(d) > _t(d))),
        ]),
        _card(43, "the △ number compared to the number of another specific colour", [
            ("△ < □", lambda d: _t(d) < _s(d)),
            ("△ < ○", lambda d: _t(d) < _c(d)),
            ("△ = □", lambda d: _t(d) == _s(d)),
            ("△ = ○", lambda d: _t(d) == _c(d)),
            ("△ > □", lambda d: _t(d) > _s(d)),
            ("△ > ○", lambda d: _t(d) > _c(d)),
        ]),
        _card(44, "the □ number compared to the number of another specific colour", [
            ("□ < △", lambda d: _s(d) < _t(d)),
            ("□ < ○", lambda d: _s(d) < _c(d)),
            ("□ = △", lambda d: _s(d) == _t(d)),
            ("□ = ○", lambda d: _s(d) == _c(d)),
            ("□ > △", lambda d: _s(d) > _t(d)),
            ("□ > ○", lambda d: _s(d) > _c(d)),
        ]),
        _card(45, "how many 1s OR how many 3s there are in the code",
              _digit_count(1, range(3)) + _digit_count(3, range(3))),
        _card(46, "how many 3s OR how many 4s there are in the code",
              _digit_count(3, range(3)) + _digit_count(4, range(3))),
        _card(47, "how many 1s OR how many 4s there are in the code",
              _digit_count(1, range(3)) + _digit_count(4, range(3))),
        _card(48, "one specific colour compared to another specific colour",
              _compare_positions("△", _t, "□", _s)
              + _compare_positions("△", _t, "○", _c)
              + _compare_positions("□", _s, "○", _c)),
    ]
    return {card.number: card for card in cards}


def lookup(number: int) -> Verifier:
    """
    Get a verifier card by its (one-indexed) catalog number.

    Args:
        number: Catalog number, 1..48

    Returns:
        The Verifier for that card

    Raises:
        UnknownVerifierIdError: If the catalog has no such card
    """
    catalog = _catalog()
    if number not in catalog:
        raise UnknownVerifierIdError(number)
    return catalog[number]


def available_numbers() -> list[int]:
    """Catalog numbers in ascending order."""
    return sorted(_catalog())
