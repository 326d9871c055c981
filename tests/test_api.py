"""Tests for the HTTP API."""

import pytest


def test_get_state(client):
    response = client.get('/api/game/state')
    assert response.status_code == 200

    state = response.get_json()['game_state']
    assert state['resources']['biomass'] == 50
    assert state['is_running'] is True
    assert state['notifications'] == []


def test_catalog(client):
    catalog = client.get('/api/game/catalog').get_json()['catalog']
    assert catalog['units']['worker']['unlocked'] is True
    assert catalog['units']['scout']['unlocked'] is False


def test_unknown_route(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Not found'}


class TestPurchases:
    """Tests for purchase endpoints."""

    def test_purchase_worker(self, client):
        response = client.post('/api/game/purchase/unit', json={'kind': 'worker'})
        assert response.status_code == 200
        assert response.get_json()['result']['count'] == 1

        state = client.get('/api/game/state').get_json()['game_state']
        assert state['units']['worker'] == 1
        assert state['resources']['biomass'] == 40

    def test_locked_unit(self, client):
        response = client.post('/api/game/purchase/unit', json={'kind': 'scout'})
        assert response.status_code == 409
        assert response.get_json()['reason'] == 'locked'

    def test_unknown_unit(self, client):
        response = client.post('/api/game/purchase/unit', json={'kind': 'queen'})
        assert response.status_code == 400
        assert response.get_json()['reason'] == 'invalid'

    def test_missing_kind(self, client):
        assert client.post('/api/game/purchase/unit', json={}).status_code == 400

    def test_bonus_without_points(self, client):
        response = client.post('/api/game/purchase/bonus', json={'flag': 'enhancedMetabolism'})
        assert response.status_code == 409
        assert response.get_json()['reason'] == 'insufficient_resources'


class TestLifecycle:
    """Tests for speed, pause, start and reset."""

    def test_set_speed(self, client):
        response = client.post('/api/game/speed', json={'multiplier': 2})
        assert response.status_code == 200
        assert response.get_json()['game_speed'] == 2.0

    @pytest.mark.parametrize('multiplier', [0, -3, 'fast'])
    def test_invalid_speed(self, client, multiplier):
        response = client.post('/api/game/speed', json={'multiplier': multiplier})
        assert response.status_code == 400
        assert response.get_json()['reason'] == 'invalid'

    def test_missing_speed(self, client):
        assert client.post('/api/game/speed', json={}).status_code == 400

    def test_pause_and_start(self, client):
        paused = client.post('/api/game/pause').get_json()
        assert paused['game_state']['is_running'] is False

        started = client.post('/api/game/start').get_json()
        assert started['game_state']['is_running'] is True

    def test_reset(self, client):
        client.post('/api/game/purchase/unit', json={'kind': 'worker'})
        state = client.post('/api/game/reset').get_json()['game_state']
        assert state['units']['worker'] == 0
        assert state['is_running'] is False

    def test_ticks_follow_the_clock(self, client, clock):
        client.post('/api/game/purchase/unit', json={'kind': 'worker'})
        clock.advance(5000)
        state = client.get('/api/game/state').get_json()['game_state']
        assert state['resources']['biomass'] == pytest.approx(40 + 2 * 5)


class TestSaves:
    """Tests for save slot endpoints."""

    def test_save_flow(self, client, clock):
        client.post('/api/game/purchase/unit', json={'kind': 'worker'})

        created = client.post('/api/saves', json={'name': 'Colony'})
        assert created.status_code == 201
        save_id = created.get_json()['save']['id']

        saves = client.get('/api/saves').get_json()['saves']
        assert [s['name'] for s in saves] == ['Colony']

        token = client.get(f'/api/saves/{save_id}/export').get_json()['token']
        clock.advance(1000)
        imported = client.post('/api/saves/import', json={'token': token})
        assert imported.status_code == 201
        assert imported.get_json()['save']['name'] == 'Imported: Colony'

        client.post('/api/game/purchase/unit', json={'kind': 'worker'})
        loaded = client.post(f'/api/saves/{save_id}/load')
        assert loaded.status_code == 200
        assert loaded.get_json()['game_state']['units']['worker'] == 1

        renamed = client.patch(f'/api/saves/{save_id}', json={'name': 'Renamed'})
        assert renamed.get_json()['save']['name'] == 'Renamed'

        assert client.delete(f'/api/saves/{save_id}').status_code == 200
        assert len(client.get('/api/saves').get_json()['saves']) == 1

    def test_unknown_save(self, client):
        response = client.post('/api/saves/save-missing/load')
        assert response.status_code == 404
        assert response.get_json()['reason'] == 'not_found'
        assert client.delete('/api/saves/save-missing').status_code == 404
        assert client.get('/api/saves/save-missing/export').status_code == 404

    def test_import_garbage(self, client):
        response = client.post('/api/saves/import', json={'token': 'definitely not a save'})
        assert response.status_code == 400
        assert response.get_json()['reason'] == 'corrupt_data'

    def test_import_missing_token(self, client):
        assert client.post('/api/saves/import', json={}).status_code == 400

    def test_rename_missing_name(self, client):
        save_id = client.post('/api/saves', json={}).get_json()['save']['id']
        assert client.patch(f'/api/saves/{save_id}', json={}).status_code == 400

    def test_quick_save_and_clear(self, client):
        response = client.post('/api/saves/quick')
        assert response.status_code == 201
        assert response.get_json()['save']['name'].startswith('Quick Save')

        assert client.delete('/api/saves').status_code == 200
        assert client.get('/api/saves').get_json()['saves'] == []

    def test_usage(self, client):
        client.post('/api/saves', json={})
        usage = client.get('/api/saves/usage').get_json()['usage']
        assert usage['used'] > 0
        assert 0 < usage['percentage'] < 100


def test_dismiss_notification(client):
    client.post('/api/saves', json={'name': 'Colony'})
    notification = client.get('/api/game/notifications').get_json()['notifications'][0]

    response = client.delete(f"/api/game/notifications/{notification['id']}")
    assert response.status_code == 200
    assert client.get('/api/game/notifications').get_json()['notifications'] == []
    assert client.delete(f"/api/game/notifications/{notification['id']}").status_code == 404


def test_get_quick_save(client):
    assert client.get('/api/saves/quick').status_code == 404

    created = client.post('/api/saves/quick').get_json()['save']
    response = client.get('/api/saves/quick')
    assert response.status_code == 200
    assert response.get_json()['save']['id'] == created['id']


def test_state_includes_metadata(client):
    metadata = client.get('/api/game/state').get_json()['game_state']['metadata']
    assert metadata['level'] == 1
    assert metadata['totalUnits'] == 0
