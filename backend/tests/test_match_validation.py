"""Pure set/match scoring rules."""
from types import SimpleNamespace

from competition_engine.services.match_validation import (
    STATE_COMPLETED,
    STATE_IN_PROGRESS,
    STATE_SCHEDULED,
    count_set_wins,
    majority,
    match_state,
    validate_match_completion,
    validate_set_addition,
    validate_set_played,
)


def _set(number, s1, s2, played=True):
    return SimpleNamespace(set_number=number, registration1_score=s1, registration2_score=s2, played=played)


def _sets(*scores, played=True):
    return [_set(i + 1, s1, s2, played) for i, (s1, s2) in enumerate(scores)]


def test_majority():
    assert [majority(n) for n in (1, 3, 5, 7)] == [1, 2, 3, 4]


def test_count_set_wins_ignores_unplayed():
    sets = _sets((11, 5), (9, 11), (11, 7)) + [_set(4, 11, 0, played=False)]
    assert count_set_wins(sets) == (2, 1)


def test_sixth_set_rejected_in_best_of_five():
    existing = _sets((11, 5), (9, 11), (11, 7), (8, 11), (5, 11))
    check = validate_set_addition(False, 5, existing)
    assert not check.valid
    assert "Maximum" in check.error


def test_set_addition_rules():
    assert validate_set_addition(False, 3, []).valid
    assert validate_set_addition(False, 3, _sets((11, 5))).valid
    assert not validate_set_addition(True, 3, []).valid
    # previous set not played yet
    assert not validate_set_addition(False, 3, [_set(1, 11, 5, played=False)]).valid
    # majority already reached
    assert not validate_set_addition(False, 5, _sets((11, 5), (11, 9), (11, 2))).valid


def test_equal_scores_rejected_distinct_accepted():
    assert not validate_set_played(1, 10, 10, []).valid
    assert validate_set_played(1, 11, 9, []).valid


def test_both_scores_zero_rejected():
    assert not validate_set_played(1, 0, 0, []).valid
    assert validate_set_played(1, 0, 3, []).valid


def test_previous_sets_must_exist_and_be_played():
    assert not validate_set_played(2, 11, 9, []).valid
    assert not validate_set_played(2, 11, 9, [_set(1, 11, 3, played=False)]).valid
    assert validate_set_played(2, 11, 9, _sets((11, 3))).valid


def test_match_completion_needs_majority():
    sets = _sets((11, 5), (9, 11), (11, 7))

    best_of_three = validate_match_completion(3, sets)
    assert best_of_three.valid
    assert best_of_three.winner_slot == 1

    assert not validate_match_completion(5, sets).valid
    won_fourth = validate_match_completion(5, sets + [_set(4, 11, 6)])
    assert won_fourth.valid
    assert won_fourth.winner_slot == 1


def test_match_completion_rejects_tie_unplayed_and_empty():
    tie = validate_match_completion(3, _sets((11, 5), (5, 11)))
    assert not tie.valid
    assert "tie" in tie.error

    assert not validate_match_completion(3, _sets((11, 5)) + [_set(2, 11, 4, played=False)]).valid
    assert not validate_match_completion(3, []).valid


def test_second_competitor_can_win():
    assert validate_match_completion(3, _sets((3, 11), (11, 9), (7, 11))).winner_slot == 2


def test_match_state():
    assert match_state(SimpleNamespace(played=False), []) == STATE_SCHEDULED
    assert match_state(SimpleNamespace(played=False), _sets((11, 5), (0, 0), played=False)) == STATE_SCHEDULED
    assert match_state(SimpleNamespace(played=False), _sets((11, 5))) == STATE_IN_PROGRESS
    assert match_state(SimpleNamespace(played=True), []) == STATE_COMPLETED
