"""
Tests for core.code module.
"""

import torch
import pytest

from core.code import Code, CodeSet, CodeSpace, DEFAULT_SPACE
from core.errors import InvalidCodeError, InvalidGameError


def test_code_index_first_digit_least_significant():
    assert Code(1, 1, 1).index == 0
    assert Code(2, 1, 1).index == 1
    assert Code(1, 2, 1).index == 5
    assert Code(1, 1, 2).index == 25
    assert Code(5, 5, 5).index == 124


@pytest.mark.parametrize("index", [0, 1, 6, 16, 63, 124])
def test_code_from_index(index):
    code = Code.from_index(index)
    assert code.index == index
    assert Code(*code.digits) == code


def test_code_positions():
    code = Code(2, 4, 1)
    assert code.digits == (2, 4, 1)
    assert code.triangle == 2
    assert code.square == 4
    assert code.circle == 1


@pytest.mark.parametrize("digits", [(0, 1, 1), (6, 1, 1), (1, 1), (1, 1, 1, 1)])
def test_invalid_code(digits):
    with pytest.raises(InvalidCodeError):
        Code(*digits)


def test_code_from_index_out_of_range():
    with pytest.raises(InvalidCodeError, match="out of range"):
        Code.from_index(125)


def test_code_equality_and_order():
    assert Code(2, 4, 1) == Code.from_index(16)
    assert hash(Code(2, 4, 1)) == hash(Code.from_index(16))
    assert Code(1, 1, 1) < Code(2, 1, 1)
    assert sorted([Code(1, 1, 2), Code(2, 1, 1), Code(1, 1, 1)]) == [
        Code(1, 1, 1), Code(2, 1, 1), Code(1, 1, 2)
    ]


def test_code_total_order():
    assert Code(2, 1, 1) > Code(1, 1, 1)
    assert Code(1, 1, 1) >= Code(1, 1, 1)
    assert Code(1, 1, 1) <= Code(1, 1, 2)
    assert max(Code(1, 2, 1), Code(1, 1, 2)) == Code(1, 1, 2)


def test_code_repr():
    assert repr(Code(2, 4, 1)) == "Code(2, 4, 1)"


def test_code_space_size():
    assert DEFAULT_SPACE.size == 125
    assert CodeSpace(2, 2).size == 4
    assert [code.digits for code in CodeSpace(2, 2).codes()] == [(1, 1), (2, 1), (1, 2), (2, 2)]


@pytest.mark.parametrize("alphabet_size,length", [(0, 3), (5, 0), (5, 4)])
def test_invalid_code_space(alphabet_size, length):
    with pytest.raises(InvalidGameError):
        CodeSpace(alphabet_size, length)


def test_digits_tensor():
    digits = DEFAULT_SPACE.digits_tensor("cpu")
    assert digits.shape == (125, 3)
    assert digits[0].tolist() == [1, 1, 1]
    assert digits[1].tolist() == [2, 1, 1]
    assert digits[16].tolist() == [2, 4, 1]
    assert digits.min().item() == 1
    assert digits.max().item() == 5


def test_code_set_basic_operations():
    a = CodeSet.from_codes([Code(1, 1, 1), Code(2, 4, 1)])
    b = CodeSet.from_codes([Code(2, 4, 1), Code(5, 5, 5)])

    assert (a & b) == CodeSet.singleton(Code(2, 4, 1))
    assert len(a | b) == 3
    assert Code(1, 1, 1) in a
    assert Code(5, 5, 5) not in a
    assert a.count() == 2
    assert not a.is_empty()
    assert CodeSet.empty().is_empty()
    assert not CodeSet.empty()


def test_code_set_intersection_idempotent():
    a = CodeSet.from_codes([Code(1, 2, 3), Code(3, 2, 1)])
    assert a.intersect(a) == a
    assert a.union(a) == a


def test_code_set_complement():
    a = CodeSet.singleton(Code(1, 1, 1))
    assert len(~a) == 124
    assert (a | ~a) == CodeSet.universe()
    assert (a & ~a).is_empty()


def test_code_set_iterates_ascending():
    codes = [Code(5, 5, 5), Code(1, 1, 1), Code(2, 4, 1)]
    assert list(CodeSet.from_codes(codes)) == sorted(codes)
    # Restartable
    code_set = CodeSet.from_codes(codes)
    assert list(code_set) == list(code_set)


def test_code_set_first():
    assert CodeSet.from_codes([Code(5, 5, 5), Code(2, 4, 1)]).first() == Code(2, 4, 1)
    assert CodeSet.empty().first() is None


def test_code_set_from_mask():
    mask = torch.zeros(125, dtype=torch.bool)
    mask[16] = True
    assert CodeSet.from_mask(mask) == CodeSet.singleton(Code(2, 4, 1))


def test_code_set_from_mask_wrong_shape():
    with pytest.raises(ValueError, match="Expected mask of shape"):
        CodeSet.from_mask(torch.zeros(10, dtype=torch.bool))


def test_code_set_custom_space():
    space = CodeSpace(2, 2)
    universe = CodeSet.universe(space)
    assert len(universe) == 4
    assert [code.digits for code in universe] == [(1, 1), (2, 1), (1, 2), (2, 2)]
    assert len(~CodeSet.singleton(Code(1, 2, space=space))) == 3
