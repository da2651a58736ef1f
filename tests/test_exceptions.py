"""
Tests for the error taxonomy and the route error boundary
"""
import pytest
from sqlalchemy.exc import OperationalError


class TestErrorEnvelope:
    """Tests for GamerBoyException.to_dict"""

    def test_envelope_fields(self):
        from exceptions import BadRequestException

        data = BadRequestException('Bad ids', details={'ids': 'x'}).to_dict()

        assert data['error'] == 'BadRequestException'
        assert data['code'] == 'BAD_REQUEST'
        assert data['message'] == 'Bad ids'
        assert data['details'] == {'ids': 'x'}
        assert data['timestamp'].endswith('Z')

    def test_details_omitted_when_absent(self):
        from exceptions import NotFoundException

        assert 'details' not in NotFoundException().to_dict()

    @pytest.mark.parametrize('name,status,code', [
        ('BadRequestException', 400, 'BAD_REQUEST'),
        ('ValidationException', 400, 'VALIDATION_ERROR'),
        ('NotFoundException', 404, 'NOT_FOUND'),
        ('DatabaseException', 500, 'DATABASE_ERROR'),
        ('InternalServerException', 500, 'INTERNAL_SERVER_ERROR'),
    ])
    def test_status_and_codes(self, name, status, code):
        import exceptions

        exc = getattr(exceptions, name)()
        assert exc.status_code == status
        assert exc.code == code

    def test_rate_limit_details(self):
        from exceptions import RateLimitException

        exc = RateLimitException(42, limit=10, window=60)
        assert exc.status_code == 429
        assert exc.details == {'retryAfter': 42, 'limit': 10, 'window': 60}
        assert '42 seconds' in exc.message


class TestHandleApiErrors:
    """Tests for the handle_api_errors decorator"""

    def make_app(self, app):
        """Attach failing routes to the application"""
        from api_responses import handle_api_errors
        from exceptions import NotFoundException

        @app.route('/db')
        @handle_api_errors
        def db_failure():
            raise OperationalError('SELECT 1', {}, Exception('disk I/O error'))

        @app.route('/typed')
        @handle_api_errors
        def typed():
            raise NotFoundException('Nothing here')

        @app.route('/boom')
        @handle_api_errors
        def boom():
            raise KeyError('hidden')

        return app

    def test_database_errors_are_wrapped(self, app):
        with self.make_app(app).test_client() as client:
            response = client.get('/db')
        data = response.get_json()

        assert response.status_code == 500
        assert data['error'] == 'DatabaseException'
        assert 'disk I/O error' in data['details']['originalError']

    def test_typed_errors_pass_through(self, app):
        with self.make_app(app).test_client() as client:
            response = client.get('/typed')

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Nothing here'

    def test_unexpected_errors_become_internal(self, app):
        with self.make_app(app).test_client() as client:
            response = client.get('/boom')
        data = response.get_json()

        assert response.status_code == 500
        assert data['code'] == 'INTERNAL_SERVER_ERROR'
        assert 'details' not in data

    def test_rate_limit_response_has_retry_after_header(self, app):
        from exceptions import RateLimitException, error_response

        with app.test_request_context():
            response = error_response(RateLimitException(7))
        assert response.status_code == 429
        assert response.headers['Retry-After'] == '7'
