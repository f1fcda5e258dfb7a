"""
HTTP tests for the Flask blueprints, using the in-process sync store and
an in-memory device.
"""

import pytest

from test_word_picker import ProxyResponse, ProxySession
from wordwise.services.game_service import get_game_service
from wordwise.services.sync_store_service import get_sync_store_service


def target_of(game_id):
    return get_game_service().games[game_id]['target_word']


def new_game(client):
    response = client.post('/api/new_game')
    assert response.status_code == 200
    return response.get_json()['game_id']


class TestSyncStoreEndpoints:

    def test_generate_then_get(self, client):
        response = client.post('/sync/generate', json={'data': {'usedWords': ['CRANE']}})
        assert response.status_code == 200
        code = response.get_json()['code']

        record = client.get(f'/sync/{code}').get_json()
        assert record['version'] == 1
        assert record['data'] == {'usedWords': ['CRANE']}
        assert record['lastSync'] == record['createdAt']

    def test_generate_requires_data(self, client):
        response = client.post('/sync/generate', json={})
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_put_and_conflict(self, client):
        code = client.post('/sync/generate', json={'data': {'n': 1}}).get_json()['code']

        response = client.put(f'/sync/{code}', json={'data': {'n': 2}, 'version': 2})
        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'version': 2}

        response = client.put(f'/sync/{code}', json={'data': {'n': 'stale'}, 'version': 2})
        assert response.status_code == 409
        body = response.get_json()
        assert body['currentVersion'] == 2
        assert body['currentData']['data'] == {'n': 2}

    def test_put_requires_version(self, client):
        code = client.post('/sync/generate', json={'data': {}}).get_json()['code']
        response = client.put(f'/sync/{code}', json={'data': {}})
        assert response.status_code == 400

    @pytest.mark.parametrize('code,status', [('not-a-code', 400), ('ABCD-EFGH', 404)])
    def test_get_errors(self, client, code, status):
        response = client.get(f'/sync/{code}')
        assert response.status_code == status
        assert response.get_json()['success'] is False

    def test_put_unknown_code(self, client):
        response = client.put('/sync/ABCD-EFGH', json={'data': {}, 'version': 2})
        assert response.status_code == 404

    @pytest.mark.parametrize('data', [
        {'stats': 'garbage'},
        {'gameHistory': [{'w': 5, 'r': 3}]},
        {'usedWords': 'CRANE'},
        ['not', 'an', 'object'],
    ])
    def test_rejects_non_snapshot_data(self, client, data):
        assert client.post('/sync/generate', json={'data': data}).status_code == 400

        code = client.post('/sync/generate', json={'data': {}}).get_json()['code']
        assert client.put(f'/sync/{code}', json={'data': data, 'version': 2}).status_code == 400
        assert client.get(f'/sync/{code}').get_json()['version'] == 1


class TestGameEndpoints:

    def test_full_game(self, client):
        game_id = new_game(client)
        target = target_of(game_id)

        state = client.get(f'/api/game/{game_id}/state').get_json()['state']
        assert state['answer'] is None
        assert state['word_source'] == 'list'

        response = client.post(f'/api/game/{game_id}/guess', json={'guess': target.lower()})
        assert response.status_code == 200
        state = response.get_json()['state']
        assert state['won'] and state['game_over']
        assert state['answer'] == target
        assert all(status == 'correct' for _, status in state['guess_results'][0])

        stats = client.get('/api/stats').get_json()['stats']
        assert stats['played'] == 1
        assert stats['guessDistribution'][0] == 1
        assert stats['listWords'] == 1

        history = client.get('/api/history').get_json()['history']
        assert history[-1]['w'] == target
        assert history[-1]['r'] == 1

    def test_guess_validation(self, client):
        game_id = new_game(client)
        assert client.post(f'/api/game/{game_id}/guess', json={}).status_code == 400
        response = client.post(f'/api/game/{game_id}/guess', json={'guess': 'ZZZZZ'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Not in word list'

    def test_allowed_guess_accepted(self, client):
        game_id = new_game(client)
        assert 'ABYSS' not in get_game_service().word_list

        response = client.post(f'/api/game/{game_id}/guess', json={'guess': 'abyss'})
        assert response.status_code == 200
        assert len(response.get_json()['state']['guesses']) == 1

    def test_unknown_game(self, client):
        assert client.get('/api/game/missing/state').status_code == 404
        assert client.post('/api/game/missing/guess', json={'guess': 'CRANE'}).status_code == 404
        assert client.get('/api/game/missing/remaining').status_code == 404
        assert client.delete('/api/game/missing').status_code == 404

    def test_remaining_and_delete(self, client):
        game_id = new_game(client)
        body = client.get(f'/api/game/{game_id}/remaining').get_json()
        assert body['count'] == len(body['words'])
        assert target_of(game_id) in body['words']

        assert client.delete(f'/api/game/{game_id}').status_code == 200

    def test_words_exhausted(self, client):
        service = get_game_service()
        for word in service.word_list:
            service.local_data.add_used_word(word)

        response = client.post('/api/new_game')
        assert response.status_code == 409
        assert response.get_json()['words_exhausted'] is True

        client.post('/api/start_fresh')
        assert client.post('/api/new_game').status_code == 200

    def test_health(self, client):
        body = client.get('/api/health').get_json()
        assert body['status'] == 'healthy'
        assert body['sync_store_available'] is True
        assert body['sync_enabled'] is False
        assert body['sync_status'] == 'idle'


class TestDeviceEndpoints:

    def test_settings_defaults_and_update(self, client):
        body = client.get('/api/settings').get_json()
        assert body['settings'] == {
            'aiEnabled': True, 'showReasoning': False, 'tier2Focus': False, 'extendedInfo': False
        }
        assert body['has_api_key'] is False

        body = client.put('/api/settings', json={'tier2Focus': True}).get_json()
        assert body['settings']['tier2Focus'] is True

    @pytest.mark.parametrize('payload', [{}, {'colour': True}, {'aiEnabled': 'yes'}])
    def test_settings_rejects_bad_payloads(self, client, payload):
        assert client.put('/api/settings', json=payload).status_code == 400

    def test_api_key_never_returned(self, client):
        assert client.put('/api/api_key', json={'apiKey': ''}).status_code == 400
        body = client.put('/api/api_key', json={'apiKey': 'sk-secret'}).get_json()
        assert body['has_api_key'] is True
        assert 'sk-secret' not in client.get('/api/settings').get_data(as_text=True)

        client.delete('/api/api_key')
        body = client.get('/api/settings').get_json()
        assert body['has_api_key'] is False
        assert body['settings']['aiEnabled'] is False

    def test_understanding_attached_at_next_game(self, client):
        game_id = new_game(client)
        client.post(f'/api/game/{game_id}/guess', json={'guess': target_of(game_id)})

        assert client.post('/api/understanding', json={'rating': 11}).status_code == 400
        assert client.post('/api/understanding', json={'rating': 6}).status_code == 200
        new_game(client)

        assert client.get('/api/history').get_json()['history'][-1]['u'] == 6

    def test_reset_stats(self, client):
        game_id = new_game(client)
        client.post(f'/api/game/{game_id}/guess', json={'guess': target_of(game_id)})

        stats = client.post('/api/stats/reset').get_json()['stats']
        assert stats['played'] == 0
        assert client.get('/api/history').get_json()['count'] == 1


class TestDeviceSyncEndpoints:

    def test_generate_and_sync_after_game(self, client):
        response = client.post('/api/sync/generate')
        assert response.status_code == 200
        code = response.get_json()['code']

        status = client.get('/api/sync/status').get_json()
        assert status['enabled'] is True
        assert status['version'] == 1

        game_id = new_game(client)
        body = client.post(f'/api/game/{game_id}/guess', json={'guess': target_of(game_id)}).get_json()
        assert body['sync']['outcome'] == 'success'
        assert body['sync']['version'] == 2

        record = client.get(f'/sync/{code}').get_json()
        assert record['data']['usedWords'] == [target_of(game_id)]

    def test_sync_now_skipped_without_code(self, client):
        response = client.post('/api/sync/now')
        assert response.status_code == 200
        assert response.get_json()['outcome'] == 'skipped'

    @pytest.mark.parametrize('code,status,outcome', [
        ('ABCD', 400, 'invalid_format'),
        ('ABCD-EFGH', 404, 'not_found'),
    ])
    def test_join_errors(self, client, code, status, outcome):
        response = client.post('/api/sync/join', json={'code': code})
        assert response.status_code == status
        assert response.get_json()['outcome'] == outcome

    def test_join_requires_code(self, client):
        assert client.post('/api/sync/join', json={}).status_code == 400

    def test_join_existing_record(self, client):
        seed = {'usedWords': ['APPLE'], 'gameHistory': [{'id': 'x', 'w': 'APPLE', 'r': 4, 'src': 'list', 't': 5}]}
        code = client.post('/sync/generate', json={'data': seed}).get_json()['code']

        response = client.post('/api/sync/join', json={'code': code.lower()})
        assert response.status_code == 200
        assert client.get('/api/history').get_json()['history'][0]['w'] == 'APPLE'

    def test_disable(self, client):
        client.post('/api/sync/generate')
        assert client.post('/api/sync/disable').status_code == 200
        status = client.get('/api/sync/status').get_json()
        assert status['enabled'] is False
        assert status['code'] is None

    def test_corrupt_remote_does_not_fail_guess(self, client):
        code = client.post('/api/sync/generate').get_json()['code']
        get_sync_store_service().repository.update_if_newer(code, {'stats': 'garbage'}, 2, 0)

        game_id = new_game(client)
        response = client.post(f'/api/game/{game_id}/guess', json={'guess': target_of(game_id)})
        assert response.status_code == 200
        body = response.get_json()
        assert body['state']['won'] is True
        assert body['sync']['outcome'] == 'invalid_format'
        assert client.get('/api/stats').get_json()['stats']['played'] == 1

        response = client.post('/api/sync/now')
        assert response.status_code == 400
        assert response.get_json()['outcome'] == 'invalid_format'


DEFINITION = [{'word': 'crane', 'meanings': []}]


def stub_lookups(*responses, proxy_url='https://proxy.test'):
    word_picker = get_game_service().word_picker
    word_picker.session = ProxySession(*responses)
    word_picker.proxy_url = proxy_url
    return word_picker.session


class TestLearnEndpoint:

    def test_definition_only_by_default(self, client):
        session = stub_lookups(ProxyResponse(body=DEFINITION))
        client.put('/api/api_key', json={'apiKey': 'sk'})

        body = client.get('/api/learn/crane').get_json()
        assert body['word'] == 'CRANE'
        assert body['definition'] == DEFINITION
        assert body['extended_info'] is None
        assert body['extended_info_error'] is None
        assert len(session.calls) == 1

    def test_extended_info_when_enabled(self, client):
        session = stub_lookups(ProxyResponse(body=DEFINITION), ProxyResponse(text='{"e": "Old English"}'))
        client.put('/api/api_key', json={'apiKey': 'sk-learn'})
        client.put('/api/settings', json={'extendedInfo': True})

        body = client.get('/api/learn/CRANE').get_json()
        assert body['definition'] == DEFINITION
        assert body['extended_info'] == {'e': 'Old English'}
        assert session.calls[1]['headers']['X-API-Key'] == 'sk-learn'

    def test_extended_info_needs_api_key(self, client):
        session = stub_lookups(ProxyResponse(body=DEFINITION))
        client.put('/api/settings', json={'extendedInfo': True})

        body = client.get('/api/learn/crane').get_json()
        assert body['extended_info'] is None
        assert 'API key' in body['extended_info_error']
        assert len(session.calls) == 1

    def test_lookup_failures_reported_separately(self, client):
        stub_lookups(ProxyResponse(status_code=404, body={}), ProxyResponse(status_code=500, body={}))
        client.put('/api/api_key', json={'apiKey': 'sk'})
        client.put('/api/settings', json={'extendedInfo': True})

        response = client.get('/api/learn/crane')
        assert response.status_code == 200
        body = response.get_json()
        assert body['definition'] is None
        assert body['definition_error'] == 'Definition not available'
        assert body['extended_info_error'] == 'AI service is temporarily unavailable'

    @pytest.mark.parametrize('word', ['CRANES', 'CR4NE'])
    def test_rejects_bad_words(self, client, word):
        assert client.get(f'/api/learn/{word}').status_code == 400
