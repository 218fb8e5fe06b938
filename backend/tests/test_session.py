import random

import pytest

from partygames.services.truth_or_dare import (
    COMPLETE_POINTS,
    EmptyQuestionPool,
    InvalidTransition,
    Stage,
    TruthOrDareSession,
    apply_outcome,
    localized_content,
)
from partygames.storage import MemoryQuestionBank, MemoryScoreLedger, PersistenceFailure, QuestionRecord


def make_bank():
    return MemoryQuestionBank([
        {'type': 'truth', 'mode': 'normal', 'content': 'Was ist deine größte Angst?', 'content_en': 'What is your biggest fear?'},
        {'type': 'dare', 'mode': 'normal', 'content': 'Mache ein lustiges Selfie'},
        {'type': 'truth', 'mode': 'kids', 'content': 'Was ist dein Lieblingstier?'},
    ])


def ready_session(names, mode='normal', bank=None, ledger=None, identities=None):
    machine = TruthOrDareSession(bank or make_bank(), score_ledger=ledger, rng=random.Random(7))
    machine.select_mode(mode)
    machine.set_player_count(len(names))
    for name in names:
        machine.add_player(name, identity_id=(identities or {}).get(name))
    return machine


class FailingLedger:
    def append(self, entry):
        raise PersistenceFailure('database is down')


@pytest.mark.parametrize('n', [1, 2, 5])
def test_full_roster_reaches_awaiting_choice(n):
    machine = ready_session([f'P{i}' for i in range(n)])
    assert machine.stage is Stage.AWAITING_CHOICE
    assert machine.turn == 0
    assert machine.current_player.name == 'P0'


def test_stages_progress_in_order():
    machine = TruthOrDareSession(make_bank())
    assert machine.stage is Stage.SELECTING_MODE
    machine.select_mode('spicy')
    assert machine.stage is Stage.SELECTING_PLAYER_COUNT
    machine.set_player_count(2)
    assert machine.stage is Stage.ADDING_PLAYERS
    machine.add_player('Alice')
    assert machine.stage is Stage.ADDING_PLAYERS
    machine.add_player('Bob')
    assert machine.stage is Stage.AWAITING_CHOICE


def test_select_mode_rejects_unknown_mode():
    machine = TruthOrDareSession(make_bank())
    with pytest.raises(ValueError):
        machine.select_mode('Normal')
    assert machine.stage is Stage.SELECTING_MODE


def test_player_count_must_be_positive():
    machine = TruthOrDareSession(make_bank())
    machine.select_mode('normal')
    with pytest.raises(ValueError):
        machine.set_player_count(0)


def test_resetting_player_count_clears_roster():
    machine = TruthOrDareSession(make_bank())
    machine.select_mode('normal')
    machine.set_player_count(3)
    machine.add_player('Alice')
    machine.set_player_count(2)
    assert machine.players == []
    assert machine.target_count == 2


def test_blank_and_duplicate_names_are_ignored():
    machine = TruthOrDareSession(make_bank())
    machine.select_mode('normal')
    machine.set_player_count(2)
    assert machine.add_player('   ') is None
    assert machine.add_player('  Alice  ').name == 'Alice'
    assert machine.add_player('Alice') is None
    assert [p.name for p in machine.players] == ['Alice']
    assert machine.stage is Stage.ADDING_PLAYERS


def test_cannot_add_players_once_play_begins():
    machine = ready_session(['Alice', 'Bob'])
    with pytest.raises(InvalidTransition):
        machine.add_player('Cara')


def test_resolve_without_challenge_is_invalid():
    machine = ready_session(['Alice'])
    with pytest.raises(InvalidTransition):
        machine.resolve_challenge('completed')


def test_challenge_uses_mode_and_type():
    machine = ready_session(['Alice'], mode='kids')
    challenge = machine.request_challenge('truth', 'de')
    assert challenge['content'] == 'Was ist dein Lieblingstier?'
    assert challenge['type'] == 'truth'
    assert machine.stage is Stage.CHALLENGE_SHOWN


def test_empty_pool_leaves_state_untouched():
    machine = ready_session(['Alice', 'Bob'], mode='kids')
    with pytest.raises(EmptyQuestionPool):
        machine.request_challenge('dare', 'de')
    assert machine.stage is Stage.AWAITING_CHOICE
    assert machine.challenge is None
    assert machine.turn == 0


def test_inactive_questions_are_never_drawn():
    bank = make_bank()
    for q in bank.list_eligible('dare', 'normal'):
        bank.deactivate(q.id)
    machine = ready_session(['Alice'], bank=bank)
    with pytest.raises(EmptyQuestionPool):
        machine.request_challenge('dare', 'de')


def test_english_content_when_available():
    machine = ready_session(['Alice'])
    assert machine.request_challenge('truth', 'en')['content'] == 'What is your biggest fear?'


def test_locale_falls_back_to_primary_content():
    question = QuestionRecord(id=1, type='truth', mode='normal', content='A', content_en=None)
    assert localized_content(question, 'en') == 'A'
    assert localized_content(question, 'de') == 'A'


def test_turn_pointer_wraps_after_full_round():
    machine = ready_session(['Alice', 'Bob', 'Cara'])
    for _ in range(len(machine.players)):
        machine.request_challenge('truth', 'de')
        machine.resolve_challenge('completed')
    assert machine.turn == 0


def test_scores_never_go_negative():
    rng = random.Random(3)
    machine = ready_session(['Alice', 'Bob'])
    for _ in range(40):
        machine.request_challenge(rng.choice(['truth', 'dare']), 'de')
        machine.resolve_challenge(rng.choice(['completed', 'skipped', 'skipped']))
        assert all(p.score >= 0 for p in machine.players)


@pytest.mark.parametrize('score,expected', [(0, (0, 0)), (2, (0, -2)), (3, (0, -3)), (10, (7, -3))])
def test_skip_penalty_is_clamped(score, expected):
    assert apply_outcome(score, 'skipped') == expected


def test_skip_persists_the_applied_delta():
    ledger = MemoryScoreLedger()
    machine = ready_session(['Alice'], ledger=ledger, identities={'Alice': 9})
    machine.players[0].score = 2
    machine.request_challenge('dare', 'de')
    resolution = machine.resolve_challenge('skipped', identity_accessor=lambda: 9)
    assert resolution.delta == -2
    assert machine.players[0].score == 0
    assert [(e.points, e.user_id) for e in ledger.entries] == [(-2, 9)]


def test_unlinked_players_are_not_persisted():
    ledger = MemoryScoreLedger()
    machine = ready_session(['Alice'], ledger=ledger)
    machine.request_challenge('truth', 'de')
    resolution = machine.resolve_challenge('completed')
    assert resolution.entry is None
    assert ledger.entries == []


def test_linked_player_without_sign_in_gets_unlinked_entry():
    ledger = MemoryScoreLedger()
    machine = ready_session(['Alice'], ledger=ledger, identities={'Alice': 4})
    machine.request_challenge('truth', 'de')
    resolution = machine.resolve_challenge('completed', identity_accessor=lambda: None)
    assert resolution.entry.user_id is None
    assert resolution.entry.player_name == 'Alice'
    assert resolution.entry.points == COMPLETE_POINTS


def test_persistence_failure_does_not_block_the_game():
    machine = ready_session(['Alice', 'Bob'], ledger=FailingLedger(), identities={'Alice': 1})
    machine.request_challenge('truth', 'de')
    resolution = machine.resolve_challenge('completed', identity_accessor=lambda: 1)
    assert resolution.entry is None
    assert 'database is down' in resolution.notice
    assert machine.players[0].score == COMPLETE_POINTS
    assert machine.turn == 1
    assert machine.stage is Stage.AWAITING_CHOICE


def test_alice_and_bob_round():
    ledger = MemoryScoreLedger()
    machine = ready_session(['Alice', 'Bob'], ledger=ledger, identities={'Alice': 1, 'Bob': 2})
    identity = lambda: 1  # noqa: E731

    machine.request_challenge('truth', 'de')
    machine.resolve_challenge('completed', identity_accessor=identity)
    assert machine.players[0].score == 5
    assert machine.turn == 1
    assert machine.current_player.name == 'Bob'

    machine.request_challenge('dare', 'de')
    resolution = machine.resolve_challenge('skipped', identity_accessor=identity)
    assert resolution.delta == 0
    assert machine.players[1].score == 0
    assert machine.turn == 0
    assert [e.points for e in ledger.entries] == [5]


def test_round_trips_through_dict():
    bank = make_bank()
    machine = ready_session(['Alice', 'Bob'], bank=bank)
    machine.request_challenge('truth', 'en')
    restored = TruthOrDareSession.from_dict(machine.to_dict(), bank)
    assert restored.stage is Stage.CHALLENGE_SHOWN
    assert restored.challenge == machine.challenge
    assert [p.name for p in restored.players] == ['Alice', 'Bob']
    restored.resolve_challenge('completed')
    assert restored.turn == 1
