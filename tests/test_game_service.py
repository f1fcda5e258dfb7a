"""
Unit tests for wordwise/services/game_service.py
"""

import random

import pytest

from conftest import entry
from wordwise.exceptions import ValidationError, WordsExhaustedError
from wordwise.models.game import WordSource
from wordwise.models.history import LOSS_RESULT
from wordwise.models.sync import SyncOutcome
from wordwise.services.game_service import GameService
from wordwise.services.sync_service import SyncClient
from wordwise.services.sync_transport import InProcessSyncTransport
from wordwise.services.word_picker import WordPicker

WORDS = ['CRANE', 'SLATE', 'HOUSE', 'APPLE', 'ABOUT', 'ADAPT', 'AGENT']


class StaticPicker(WordPicker):
    """Always offers the first unused word, so tests know the answer."""

    def __init__(self, words=WORDS):
        super().__init__(words, rng=random.Random(0))
        self.calls = []

    def pick(self, history, used_words, use_ai=False, tier2_focus=False, api_key=None):
        self.calls.append({'use_ai': use_ai, 'api_key': api_key, 'history': len(history)})
        available = self.available_words(used_words)
        if not available:
            raise WordsExhaustedError('All words have been used')
        return available[0], WordSource.LIST


@pytest.fixture
def picker():
    return StaticPicker()


@pytest.fixture
def service(local_data, picker):
    return GameService(local_data, picker)


def lose(service, game_id, answer):
    wrong = [w for w in WORDS if w != answer]
    for guess in wrong[:6]:
        state = service.make_guess(game_id, guess)
    return state


class TestNewGame:

    def test_state_hides_answer(self, service):
        game_id = service.create_new_game()
        state = service.get_game_state(game_id)
        assert state.answer is None
        assert state.current_round == 0
        assert state.max_rounds == 6
        assert state.word_source == 'list'
        assert set(state.letter_status.values()) == {'unused'}

    def test_unknown_game(self, service):
        assert service.get_game_state('missing') is None
        assert service.make_guess('missing', 'CRANE') is None

    def test_exhausted_list_raises(self, service, local_data):
        for word in WORDS:
            local_data.add_used_word(word)
        with pytest.raises(WordsExhaustedError):
            service.create_new_game()

    def test_pending_understanding_flushed_first(self, service, local_data):
        local_data.history.append('HOUSE', 2)
        service.rate_understanding(9)
        service.create_new_game()
        assert local_data.history.last().understanding == 9
        assert local_data.load_pending_understanding() is None

    def test_rate_understanding_validates(self, service):
        with pytest.raises(ValidationError):
            service.rate_understanding(11)

    def test_ai_requested_only_with_enough_history(self, service, local_data, picker):
        local_data.save_api_key('sk')
        service.create_new_game()
        assert picker.calls[-1]['use_ai'] is False

        local_data.history.replace([entry('ABOUT', 3, timestamp=i, id=str(i)) for i in range(5)])
        service.create_new_game()
        assert picker.calls[-1]['use_ai'] is True
        assert picker.calls[-1]['api_key'] == 'sk'

    def test_ai_not_requested_when_disabled(self, service, local_data, picker):
        local_data.history.replace([entry('ABOUT', 3, timestamp=i, id=str(i)) for i in range(5)])
        local_data.set_setting('ai_enabled', False)
        service.create_new_game()
        assert picker.calls[-1]['use_ai'] is False


class TestGuesses:

    @pytest.mark.parametrize('guess,message', [
        ('', 'Guess must be a valid string'),
        ('CRAN', 'Guess must be exactly 5 letters'),
        ('CR4NE', 'Guess must contain only letters'),
        ('ZZZZZ', 'Not in word list'),
    ])
    def test_invalid_guesses(self, service, guess, message):
        game_id = service.create_new_game()
        assert service.is_valid_guess(game_id, guess) == (False, message)
        assert service.make_guess(game_id, guess) is None

    def test_allowed_word_is_a_valid_guess(self, service):
        game_id = service.create_new_game()
        assert 'FJORD' not in WORDS
        assert service.is_valid_guess(game_id, 'fjord') == (True, '')
        assert service.make_guess(game_id, 'FJORD').guesses == ['FJORD']

    def test_win_records_once(self, service, local_data):
        game_id = service.create_new_game()
        service.make_guess(game_id, 'SLATE')
        state = service.make_guess(game_id, 'crane')

        assert state.won and state.game_over
        assert state.answer == 'CRANE'
        assert state.letter_status['C'] == 'correct'
        stats = local_data.load_stats()
        assert (stats.played, stats.wins, stats.guess_distribution[1]) == (1, 1, 1)
        assert local_data.history.last().result == 2
        assert local_data.load_used_words() == {'CRANE'}

        assert service.is_valid_guess(game_id, 'CRANE') == (False, 'Game is already over')
        assert service.make_guess(game_id, 'CRANE') is None
        assert local_data.load_stats().played == 1
        assert len(local_data.history) == 1

    def test_loss_after_six_rows(self, service, local_data):
        game_id = service.create_new_game()
        state = lose(service, game_id, 'CRANE')

        assert state.game_over and not state.won
        assert state.current_round == 6
        stats = local_data.load_stats()
        assert (stats.played, stats.wins, stats.current_streak) == (1, 0, 0)
        assert local_data.history.last().result == LOSS_RESULT
        assert local_data.load_game_state() is None

    def test_next_game_uses_a_new_word(self, service):
        first = service.create_new_game()
        service.make_guess(first, 'CRANE')
        second = service.create_new_game()
        service.make_guess(second, 'SLATE')
        assert service.get_game_state(second).answer == 'SLATE'

    def test_remaining_words_narrow(self, service):
        game_id = service.create_new_game()
        assert 'CRANE' in service.get_remaining_words(game_id)
        service.make_guess(game_id, 'SLATE')
        remaining = service.get_remaining_words(game_id)
        assert 'CRANE' in remaining
        assert 'SLATE' not in remaining


class TestPersistence:

    def test_in_progress_game_is_restored(self, local_data, picker):
        service = GameService(local_data, picker)
        game_id = service.create_new_game()
        service.make_guess(game_id, 'SLATE')

        restored = GameService(local_data, picker)
        state = restored.get_game_state(game_id)
        assert state.guesses == ['SLATE']
        assert restored.make_guess(game_id, 'CRANE').won

    def test_delete_game(self, service, local_data):
        game_id = service.create_new_game()
        assert service.delete_game(game_id) is True
        assert service.delete_game(game_id) is False
        assert local_data.load_game_state() is None


class TestResets:

    def test_reset_statistics_keeps_history(self, service, local_data):
        game_id = service.create_new_game()
        service.make_guess(game_id, 'CRANE')
        service.reset_statistics()
        assert local_data.load_stats().played == 0
        assert len(local_data.history) == 1

    def test_start_fresh_makes_words_available_again(self, service, local_data):
        for word in WORDS:
            local_data.add_used_word(word)
        service.start_fresh()
        assert local_data.load_used_words() == set()
        assert service.create_new_game()


class TestSyncAfterGame:

    def test_finished_game_is_pushed(self, local_data, picker, sync_store):
        client = SyncClient(InProcessSyncTransport(sync_store), local_data)
        code = client.generate_code().code
        service = GameService(local_data, picker, client)

        game_id = service.create_new_game()
        service.make_guess(game_id, 'CRANE')

        assert service.last_sync_result.outcome == SyncOutcome.SUCCESS
        record = sync_store.get(code)
        assert record['version'] == 2
        assert record['data']['usedWords'] == ['CRANE']

    def test_sync_failure_does_not_affect_game(self, local_data, picker, sync_store):
        client = SyncClient(InProcessSyncTransport(sync_store), local_data)
        local_data.save_sync_code('ABCD-EFGH')
        local_data.save_sync_enabled(True)
        service = GameService(local_data, picker, client)

        game_id = service.create_new_game()
        state = service.make_guess(game_id, 'CRANE')

        assert state.won
        assert service.last_sync_result.outcome == SyncOutcome.NOT_FOUND
        assert local_data.load_stats().wins == 1

    def test_corrupt_remote_is_reported_not_raised(self, local_data, picker, sync_store):
        client = SyncClient(InProcessSyncTransport(sync_store), local_data)
        code = client.generate_code().code
        sync_store.repository.update_if_newer(code, {'stats': 'garbage'}, 2, 0)
        service = GameService(local_data, picker, client)

        game_id = service.create_new_game()
        state = service.make_guess(game_id, 'CRANE')

        assert state.won
        assert service.last_sync_result.outcome == SyncOutcome.INVALID_FORMAT
        assert local_data.load_stats().wins == 1
        assert local_data.load_used_words() == {'CRANE'}

    def test_sync_result_belongs_to_latest_game(self, local_data, picker, sync_store):
        class FailingSecondTime(SyncClient):
            calls = 0

            def sync_now(self):
                self.calls += 1
                if self.calls > 1:
                    raise RuntimeError('unexpected')
                return super().sync_now()

        client = FailingSecondTime(InProcessSyncTransport(sync_store), local_data)
        client.generate_code()
        service = GameService(local_data, picker, client)

        first = service.create_new_game()
        service.make_guess(first, 'CRANE')
        assert service.last_sync_result.outcome == SyncOutcome.SUCCESS

        second = service.create_new_game()
        assert service.make_guess(second, 'SLATE').won
        assert service.last_sync_result is None
        assert local_data.load_stats().wins == 2
