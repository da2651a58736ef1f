"""
Tests for the games and categories endpoints
"""
import json
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from conftest import GAMES, SITE_URL


class TestListGamesEndpoint:
    """Tests for GET /api/games"""

    def test_returns_games_and_pagination(self, client):
        response = client.get('/api/games?page=1&limit=2')
        data = response.get_json()

        assert response.status_code == 200
        assert [g['id'] for g in data['games']] == [1, 2]
        assert data['pagination'] == {'page': 1, 'limit': 2, 'total': len(GAMES), 'hasMore': True}

    def test_cache_control_header(self, client):
        response = client.get('/api/games')
        assert response.headers['Cache-Control'] == 'public, s-maxage=3600, stale-while-revalidate=7200'

    def test_search_and_category(self, client):
        data = client.get('/api/games?q=super&categories=action&page=1&limit=12').get_json()

        assert [g['title'] for g in data['games']] == ['Super Runner']
        assert data['pagination']['total'] == 1
        assert data['pagination']['hasMore'] is False

    def test_comma_separated_categories(self, client):
        data = client.get('/api/games?categories=puzzle,strategy&limit=100').get_json()
        assert sorted(g['id'] for g in data['games']) == [2, 4, 5, 9]

    def test_all_categories(self, client):
        data = client.get('/api/games?categories=all').get_json()
        assert data['pagination']['total'] == len(GAMES)

    def test_last_page_has_no_more(self, client):
        data = client.get('/api/games?page=5&limit=2').get_json()
        assert [g['id'] for g in data['games']] == [9]
        assert data['pagination']['hasMore'] is False

    def test_game_payload_shape(self, client):
        game = client.get('/api/games?limit=1').get_json()['games'][0]

        assert set(game) == {
            'id', 'title', 'slug', 'description', 'thumbnail', 'gameId', 'createdAt', 'updatedAt', 'categories'
        }
        assert game['categories'][0]['slug'] == 'action'
        assert game['createdAt'].endswith('Z')

    def test_limit_above_maximum_is_rejected(self, client):
        response = client.get('/api/games?limit=101')
        data = response.get_json()

        assert response.status_code == 400
        assert data['code'] == 'VALIDATION_ERROR'
        assert data['error'] == 'ValidationException'
        assert data['details']['errors'][0]['field'] == 'limit'
        assert 'timestamp' in data

    def test_non_positive_page_is_rejected(self, client):
        response = client.get('/api/games?page=0')
        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_non_numeric_limit_is_rejected(self, client):
        response = client.get('/api/games?limit=ten')
        assert response.status_code == 400

    def test_empty_query_string_is_rejected(self, client):
        response = client.get('/api/games?q=')
        assert response.status_code == 400

    def test_database_failure_returns_database_error(self, client):
        error = OperationalError('SELECT', {}, Exception('database is locked'))
        with patch('repositories.games_repository.GamesRepository.get_games', side_effect=error):
            response = client.get('/api/games')

        data = response.get_json()
        assert response.status_code == 500
        assert data['code'] == 'DATABASE_ERROR'
        assert 'database is locked' in data['details']['originalError']

    def test_unexpected_failure_hides_message(self, client):
        with patch('repositories.games_repository.GamesRepository.get_games', side_effect=RuntimeError('secret')):
            response = client.get('/api/games')

        data = response.get_json()
        assert response.status_code == 500
        assert data['code'] == 'INTERNAL_SERVER_ERROR'
        assert 'secret' not in json.dumps(data)


class TestGamesByIdsEndpoint:
    """Tests for GET /api/games/by-ids"""

    def test_preserves_requested_order(self, client):
        response = client.get('/api/games/by-ids?ids=5,2,8')

        assert response.status_code == 200
        assert [g['id'] for g in response.get_json()['games']] == [5, 2, 8]
        assert response.headers['Cache-Control'] == 'public, s-maxage=7200, stale-while-revalidate=14400'

    def test_unknown_and_invalid_ids_are_skipped(self, client):
        data = client.get('/api/games/by-ids?ids=5,999,x,2').get_json()
        assert [g['id'] for g in data['games']] == [5, 2]

    def test_missing_ids_is_validation_error(self, client):
        response = client.get('/api/games/by-ids')
        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_no_valid_id_is_bad_request(self, client):
        response = client.get('/api/games/by-ids?ids=abc,,')
        assert response.status_code == 400
        assert response.get_json()['code'] == 'BAD_REQUEST'

    def test_oversized_ids_are_skipped(self, client):
        data = client.get('/api/games/by-ids?ids=1,99999999999999999999999,2').get_json()
        assert [g['id'] for g in data['games']] == [1, 2]

    def test_only_oversized_ids_is_bad_request(self, client):
        response = client.get('/api/games/by-ids?ids=99999999999999999999999')
        assert response.status_code == 400
        assert response.get_json()['code'] == 'BAD_REQUEST'


class TestGameDetailEndpoints:
    """Tests for detail, related and featured games"""

    def test_detail_with_iframe_url(self, client):
        data = client.get('/api/games/super-runner').get_json()

        assert data['game']['id'] == 1
        assert data['iframeUrl'] == (
            'https://html5.gamedistribution.com/gd1001/'
            '?gd_sdk_referrer_url=https%3A%2F%2Fgamerboy.test%2Fgames%2Fsuper-runner'
        )

    def test_unknown_slug_is_not_found(self, client):
        response = client.get('/api/games/no-such-game')
        data = response.get_json()

        assert response.status_code == 404
        assert data['code'] == 'NOT_FOUND'
        assert data['error'] == 'NotFoundException'

    def test_related_games(self, client):
        data = client.get('/api/games/3/related').get_json()
        assert [g['id'] for g in data['games']] == [6, 1, 5, 9]

    def test_related_games_limit(self, client):
        data = client.get('/api/games/3/related?limit=1').get_json()
        assert [g['id'] for g in data['games']] == [6]

    def test_related_games_oversized_id(self, client):
        response = client.get('/api/games/99999999999999999999999/related')
        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_featured_games(self, client):
        data = client.get('/api/games/featured?limit=2').get_json()
        assert [g['id'] for g in data['games']] == [1, 2]

    def test_categories(self, client):
        data = client.get('/api/categories').get_json()
        assert [c['slug'] for c in data['categories']] == ['action', 'arcade', 'puzzle', 'strategy']


class TestIframeUrl:
    """Tests for generate_iframe_url"""

    def test_relative_page_url_without_base(self):
        from services.games_service import generate_iframe_url

        assert generate_iframe_url('abc', 'my-game') == (
            'https://html5.gamedistribution.com/abc/?gd_sdk_referrer_url=%2Fgames%2Fmy-game'
        )

    def test_trailing_slash_in_base(self):
        from services.games_service import generate_iframe_url

        url = generate_iframe_url('abc', 'my-game', SITE_URL + '/')
        assert url.endswith('gd_sdk_referrer_url=https%3A%2F%2Fgamerboy.test%2Fgames%2Fmy-game')


class TestServiceEndpoints:
    """Tests for health and metrics"""

    def test_health(self, client):
        from constants import BUILD_VERSION

        data = client.get('/api/health').get_json()
        assert data == {'status': 'healthy', 'version': BUILD_VERSION, 'cache': {'status': 'disabled'}}

    def test_health_reports_cache_stats(self, client, mock_redis):
        client.get('/api/games')

        cache = client.get('/api/health').get_json()['cache']
        assert cache['misses'] == 1
        assert cache['sets'] == 1
        assert cache['hits'] == 0

    def test_metrics_count_ratings(self, client):
        client.post('/api/ratings/1', json={'rating': 4, 'fingerprint': 'fp-a'})
        client.post('/api/ratings/2', json={'rating': 2, 'fingerprint': 'fp-a'})

        body = client.get('/api/metrics').get_data(as_text=True)
        assert 'gamerboy_ratings_total 2.0' in body
        assert 'gamerboy_categories_total 4.0' in body

    def test_metrics_exposition(self, client):
        client.get('/api/games')
        response = client.get('/api/metrics')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert 'gamerboy_games_total 9.0' in body
        assert 'gamerboy_api_requests_total' in body

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get('/api/nothing-here')
        data = response.get_json()

        assert response.status_code == 404
        assert data['code'] == 'NOT_FOUND'


class TestParseIdList:
    """Tests for utils.parse_id_list"""

    def test_skips_non_integers(self):
        from utils import parse_id_list

        assert parse_id_list(' 3, x,1 ,, 2.5') == [3, 1]
        assert parse_id_list(None) == []

    def test_skips_ids_outside_the_id_column(self):
        from constants import MAX_ID
        from utils import parse_id_list

        assert parse_id_list(f'1,{MAX_ID},{MAX_ID + 1},-4') == [1, MAX_ID]
