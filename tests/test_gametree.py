"""
Tests for core.gametree move handling (State, moves and scores).
"""

import pytest

from core.code import Code, CodeSet
from core.errors import AfterMoveError, InvalidMoveError, NoCodesLeftError
from core.gametree import (
    AfterMoveInfo,
    ChooseNewCode,
    ChooseVerifier,
    GameScore,
    Phase,
    State,
    VerifierSolution,
)
from core.verifier import VerifierOutcome

CROSS = VerifierOutcome.CROSS
CHECK = VerifierOutcome.CHECK


def test_initial_state(reference_game):
    state = State(reference_game)
    assert state.phase is Phase.AWAITING_CODE_CHOICE
    assert not state.is_solved()
    assert not state.is_awaiting_result()
    assert not state.has_selected_code()
    assert state.solution() is None
    assert state.possible_codes() == CodeSet.from_codes([Code(2, 2, 1), Code(2, 4, 1)])
    assert state.possible_solutions() == 0b11
    assert state.score == GameScore(0, 0)
    assert state.history == ()
    assert State.new(reference_game) == state


def test_game_score_order():
    assert GameScore(1, 5) < GameScore(2, 0)
    assert GameScore(1, 1) < GameScore(1, 2)
    assert GameScore(1, 2) + GameScore(0, 1) == GameScore(1, 3)
    assert GameScore(1, 2) - GameScore(1, 1) == GameScore(0, 1)


def test_game_score_after_move():
    score = GameScore()
    score = score.after(ChooseNewCode(Code(1, 1, 1)))
    assert score == GameScore(1, 0)
    score = score.after(ChooseVerifier(0))
    assert score == GameScore(1, 1)
    assert score.after(VerifierSolution(CHECK)) == score


def test_choose_code_then_verifier(reference_game):
    state = State(reference_game)
    state, info = state.after_move(ChooseNewCode(Code(1, 1, 1)))
    assert info is None
    assert state.phase is Phase.AWAITING_VERIFIER_CHOICE
    assert state.candidate == Code(1, 1, 1)
    assert state.has_selected_code()
    assert state.score == GameScore(1, 0)

    state, info = state.after_move(ChooseVerifier(0))
    assert info is None
    assert state.is_awaiting_result()
    assert state.pending == 0
    assert state.checked == frozenset({0})
    assert state.score == GameScore(1, 1)

    solved, info = state.after_move(VerifierSolution(CHECK))
    assert info is None
    assert solved.is_solved()
    assert solved.solution() == Code(2, 2, 1)
    assert solved.history == (ChooseNewCode(Code(1, 1, 1)), ChooseVerifier(0), VerifierSolution(CHECK))


def test_after_move_keeps_parent_state(reference_game):
    start = State(reference_game)
    chosen, _ = start.after_move(ChooseNewCode(Code(1, 1, 1)))
    awaiting, _ = chosen.after_move(ChooseVerifier(0))
    crossed, _ = awaiting.after_move(VerifierSolution(CROSS))
    checked, _ = awaiting.after_move(VerifierSolution(CHECK))

    assert awaiting.is_awaiting_result()
    assert len(awaiting.possible_codes()) == 2
    assert crossed.solution() == Code(2, 4, 1)
    assert checked.solution() == Code(2, 2, 1)
    assert start.phase is Phase.AWAITING_CODE_CHOICE


def test_legal_moves_by_phase(reference_game):
    state = State(reference_game)
    moves = state.legal_moves()
    assert moves[0] == ChooseNewCode(Code(1, 1, 1))
    assert all(isinstance(move, ChooseNewCode) for move in moves)

    state, _ = state.after_move(ChooseNewCode(Code(1, 1, 1)))
    # Verifiers 9 and 14 answer 111 the same way for both solutions
    assert state.legal_moves() == [ChooseVerifier(0), ChooseVerifier(2)]

    state, _ = state.after_move(ChooseVerifier(0))
    assert state.legal_moves() == [VerifierSolution(CROSS), VerifierSolution(CHECK)]

    state, _ = state.after_move(VerifierSolution(CROSS))
    assert state.legal_moves() == []


def test_useless_verifier_check(reference_game):
    state, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    state, info = state.after_move(ChooseVerifier(1))
    assert info is AfterMoveInfo.USELESS_VERIFIER_CHECK
    assert state.legal_moves() == [VerifierSolution(CHECK)]

    state, info = state.after_move(VerifierSolution(CHECK))
    assert info is AfterMoveInfo.USELESS_VERIFIER_CHECK
    assert state.phase is Phase.AWAITING_VERIFIER_CHOICE
    assert len(state.possible_codes()) == 2

    moves = state.legal_moves()
    assert moves[:2] == [ChooseVerifier(0), ChooseVerifier(2)]
    # A verifier was tested, so a new code may be proposed
    assert ChooseNewCode(Code(1, 1, 1)) in moves


def test_new_code_after_a_check(reference_game):
    state, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    state, _ = state.after_move(ChooseVerifier(1))
    state, _ = state.after_move(VerifierSolution(CHECK))
    state, info = state.after_move(ChooseNewCode(Code(2, 1, 1)))
    assert info is None
    assert state.candidate == Code(2, 1, 1)
    assert state.checked == frozenset()
    assert state.score == GameScore(2, 1)


def test_contradicting_result(reference_game):
    state, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    state, _ = state.after_move(ChooseVerifier(1))
    with pytest.raises(NoCodesLeftError, match="No solution gives"):
        state.after_move(VerifierSolution(CROSS))
    assert state.is_awaiting_result()


def test_verifier_choice_while_awaiting_code(reference_game):
    state = State(reference_game)
    with pytest.raises(InvalidMoveError, match="Cannot choose a verifier"):
        state.after_move(ChooseVerifier(0))
    # State is unchanged
    assert state.phase is Phase.AWAITING_CODE_CHOICE
    assert state.possible_codes() == CodeSet.from_codes([Code(2, 2, 1), Code(2, 4, 1)])
    assert state.score == GameScore(0, 0)


@pytest.mark.parametrize("verifier", [4, -1, 10])
def test_verifier_out_of_range(reference_game, verifier):
    state, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    with pytest.raises(InvalidMoveError, match="out of range"):
        state.after_move(ChooseVerifier(verifier))


def test_verifier_chosen_twice(reference_game):
    state, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    state, _ = state.after_move(ChooseVerifier(1))
    state, _ = state.after_move(VerifierSolution(CHECK))
    with pytest.raises(InvalidMoveError, match="already tested"):
        state.after_move(ChooseVerifier(1))


def test_new_code_before_any_check(reference_game):
    state, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    with pytest.raises(InvalidMoveError, match="Cannot choose a new code"):
        state.after_move(ChooseNewCode(Code(2, 1, 1)))


def test_result_without_pending_verifier(reference_game):
    with pytest.raises(InvalidMoveError, match="Cannot provide a verifier result"):
        State(reference_game).after_move(VerifierSolution(CHECK))


def test_move_on_solved_state(reference_game):
    state, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    state, _ = state.after_move(ChooseVerifier(0))
    state, _ = state.after_move(VerifierSolution(CROSS))
    with pytest.raises(InvalidMoveError, match="already solved"):
        state.after_move(ChooseNewCode(Code(1, 1, 1)))


def test_after_move_errors_share_base(reference_game):
    with pytest.raises(AfterMoveError):
        State(reference_game).after_move(ChooseVerifier(0))


def test_round_ends_after_max_checks(tiny_params, position_verifiers):
    from dataclasses import replace
    from core.game import Game

    game = Game(position_verifiers, replace(tiny_params, max_verifiers_per_code=1))
    space = game.space
    state, _ = State(game).after_move(ChooseNewCode(Code(1, 1, space=space)))
    state, _ = state.after_move(ChooseVerifier(0))
    state, _ = state.after_move(VerifierSolution(CHECK))
    assert state.phase is Phase.AWAITING_CODE_CHOICE
    assert state.candidate is None
    assert [code.digits for code in state.possible_codes()] == [(1, 1), (1, 2)]


def test_state_equality(reference_game):
    a, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    b, _ = State(reference_game).after_move(ChooseNewCode(Code(1, 1, 1)))
    assert a == b
    assert hash(a) == hash(b)
    assert a != State(reference_game)


def test_third_outcome_of_ternary_verifier(tiny_params, position_verifiers):
    from core.game import Game
    from core.verifier import Criterion, Verifier

    counter = Verifier("how many of one digit", [
        Criterion("count 2s", lambda d: (d == 2).sum(dim=1)),
        Criterion("count 1s", lambda d: (d == 1).sum(dim=1)),
    ], outcomes=(0, 1, 2), accepting_outcome=1)
    game = Game([counter, position_verifiers[0]], tiny_params)

    state, _ = State(game).after_move(ChooseNewCode(Code(2, 2, space=game.space)))
    state, info = state.after_move(ChooseVerifier(0))
    assert info is None
    assert state.legal_moves() == [VerifierSolution(0), VerifierSolution(2)]
    with pytest.raises(InvalidMoveError, match="is not an outcome"):
        state.after_move(VerifierSolution(3))

    state, info = state.after_move(VerifierSolution(2))
    assert info is None
    assert state.possible_solutions() == 0b0011
    assert [code.digits for code in state.possible_codes()] == [(2, 1), (1, 2)]
    assert state.phase is Phase.AWAITING_VERIFIER_CHOICE
    assert state.legal_moves()[0] == ChooseVerifier(1)
