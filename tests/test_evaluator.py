"""
Unit tests for wordwise/services/evaluator.py
"""

import pytest

from wordwise.config.game_settings import WORD_LIST
from wordwise.exceptions import ValidationError
from wordwise.models.game import LetterStatus
from wordwise.services.evaluator import (
    evaluate_guess, evaluate_letter, filter_candidates, update_letter_status
)

C, P, A = LetterStatus.CORRECT, LetterStatus.PRESENT, LetterStatus.ABSENT


def statuses(guess, secret):
    return [status for _, status in evaluate_guess(guess, secret)]


class TestEvaluateGuess:

    def test_exact_match_is_all_correct(self):
        assert statuses('CRANE', 'CRANE') == [C] * 5

    def test_no_shared_letters_is_all_absent(self):
        assert statuses('BUMPY', 'CRANE') == [A] * 5

    def test_misplaced_letters_are_present(self):
        assert statuses('NACRE', 'CRANE') == [P, P, P, P, C]

    def test_duplicate_guess_letter_with_single_in_secret(self):
        # Only the first misplaced E gets the single E in the secret
        assert statuses('EERIE', 'CRANE') == [A, A, P, A, C]

    def test_green_consumes_budget_before_earlier_yellow(self):
        # The L at index 3 is exact, so the L at index 2 has nothing left
        assert statuses('HELLO', 'WORLD') == [A, A, A, C, P]

    def test_erase_against_speed(self):
        # Two Es in the secret, both guessed Es misplaced
        assert statuses('ERASE', 'SPEED') == [P, A, A, P, P]

    def test_speed_against_erase(self):
        assert statuses('SPEED', 'ERASE') == [P, A, P, P, A]

    def test_case_insensitive(self):
        assert statuses('crane', 'CRANE') == [C] * 5

    def test_letters_are_returned_uppercased(self):
        assert [letter for letter, _ in evaluate_guess('crane', 'slate')] == list('CRANE')

    def test_length_mismatch_raises(self):
        with pytest.raises(ValidationError):
            evaluate_guess('CRANES', 'CRANE')

    @pytest.mark.parametrize('guess,secret', [
        ('SPEED', 'ERASE'), ('EERIE', 'CRANE'), ('LLAMA', 'HELLO'),
        ('ABBEY', 'BABES'), ('GEESE', 'EERIE'), ('MAMMA', 'MADAM'),
    ])
    def test_never_more_scored_than_budget(self, guess, secret):
        result = evaluate_guess(guess, secret)
        for letter in set(guess):
            scored = sum(1 for l, s in result if l == letter and s != A)
            assert scored <= secret.count(letter)

    @pytest.mark.parametrize('guess,secret', [
        ('SPEED', 'ERASE'), ('HELLO', 'WORLD'), ('MAMMA', 'MADAM'),
    ])
    def test_correct_iff_same_letter_at_position(self, guess, secret):
        for i, (_, status) in enumerate(evaluate_guess(guess, secret)):
            assert (status == C) == (guess[i] == secret[i])


class TestEvaluateLetter:

    def test_matches_whole_guess_evaluation(self):
        assert [evaluate_letter('ERASE', 'SPEED', i) for i in range(5)] == [P, A, A, P, P]

    def test_position_out_of_range_raises(self):
        with pytest.raises(ValidationError):
            evaluate_letter('CRANE', 'CRANE', 5)


class TestUpdateLetterStatus:

    def test_statuses_only_move_up(self):
        keys = {'E': LetterStatus.UNUSED.value}
        update_letter_status(keys, [('E', A)])
        assert keys['E'] == 'absent'
        update_letter_status(keys, [('E', C)])
        assert keys['E'] == 'correct'
        update_letter_status(keys, [('E', P), ('E', A)])
        assert keys['E'] == 'correct'

    def test_missing_key_is_treated_as_unused(self):
        keys = {}
        update_letter_status(keys, [('Q', P)])
        assert keys == {'Q': 'present'}


class TestFilterCandidates:

    def test_no_guesses_returns_everything(self):
        assert filter_candidates(['CRANE', 'SLATE'], [], 'CRANE') == ['CRANE', 'SLATE']

    def test_secret_always_survives(self):
        for secret in ('SPEED', 'ERASE', 'CRANE', 'APPLE'):
            remaining = filter_candidates(WORD_LIST, ['EERIE', 'SPEED', 'LLAMA'], secret)
            assert secret in remaining

    def test_narrows_to_consistent_words(self):
        words = ['CRANE', 'CRATE', 'SLATE', 'BRAKE']
        assert filter_candidates(words, ['CRATE'], 'CRANE') == ['CRANE']
