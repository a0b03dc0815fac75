"""
Application wiring tests: auth, error envelope, headers, CLI, validators
"""
import json
from datetime import timedelta

from connector import db, utils
from connector.models import Service, User
from connector.utils.validators import validate_length

from conftest import make_token


class TestAuthentication:

    def test_missing_header(self, client):
        response = client.put('/api/subscriptions/cancel')
        assert response.status_code == 401
        assert json.loads(response.data)['success'] is False

    def test_garbage_token(self, client):
        response = client.put('/api/subscriptions/cancel', headers={'Authorization': 'Bearer not-a-jwt'})
        assert response.status_code == 401

    def test_expired_token(self, app, client, provider):
        token = make_token(app, provider, expires_in=timedelta(minutes=-5))
        response = client.put('/api/subscriptions/cancel', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401
        assert 'expired' in json.loads(response.data)['message']

    def test_unknown_user(self, app, client, make_user):
        ghost = make_user('customer')
        token = make_token(app, ghost)
        db.session.delete(ghost)
        db.session.commit()

        response = client.put('/api/subscriptions/cancel', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401

    def test_role_comes_from_user_row(self, app, client, customer, category, service_data):
        """A token claiming a different role does not change the stored role"""
        import jwt
        token = jwt.encode({'user_id': customer.id, 'role': 'provider'},
                           app.config['JWT_SECRET_KEY'], algorithm='HS256')
        response = client.post('/api/services', headers={'Authorization': f'Bearer {token}'},
                               json=service_data())
        assert response.status_code == 403
        assert db.session.get(User, customer.id).role == 'customer'


class TestResponses:

    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'healthy'

    def test_security_headers(self, client):
        response = client.get('/health')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'

    def test_request_id_echoed(self, client):
        response = client.get('/health', headers={'X-Request-ID': 'req-42'})
        assert response.headers['X-Request-ID'] == 'req-42'

    def test_request_id_generated(self, client):
        assert client.get('/health').headers['X-Request-ID']

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        data = json.loads(response.data)
        assert data['success'] is False
        assert data['error'] == 'not_found'

    def test_non_object_body(self, client, customer_headers, service):
        response = client.post(f'/api/services/{service.id}/reviews', headers=customer_headers,
                               data='[1, 2]', content_type='application/json')
        assert response.status_code == 400


class TestCli:

    def test_recompute_ratings(self, app, service):
        Service.query.filter_by(id=service.id).update({Service.review_count: 7})
        db.session.commit()

        result = app.test_cli_runner().invoke(args=['recompute-ratings'])
        assert result.exit_code == 0
        assert 'Recomputed ratings for 1 services' in result.output

        db.session.expire_all()
        assert db.session.get(Service, service.id).review_count == 0

    def test_recompute_single_missing(self, app):
        result = app.test_cli_runner().invoke(args=['recompute-ratings', '--service-id', 'missing'])
        assert result.exit_code != 0

    def test_expire_subscriptions(self, app, provider, make_subscription):
        make_subscription(provider, status='active', end_in=timedelta(days=-1))
        result = app.test_cli_runner().invoke(args=['expire-subscriptions'])
        assert result.exit_code == 0
        assert 'Expired 1 subscriptions' in result.output


class TestValidators:

    def test_length_counts_unescaped_text(self):
        assert validate_length('&amp;' * 10, 10)
        assert not validate_length('&amp;' * 11, 10)

    def test_required_length(self):
        assert not validate_length('   ', 10, required=True)
        assert validate_length(None, 10)
        assert not validate_length(42, 10)

    def test_utils_exports(self):
        assert set(utils.__all__) == {
            'generate_uuid', 'utcnow', 'as_utc', 'parse_date', 'safe_int',
            'validate_rating', 'validate_length', 'validate_specific_ratings', 'missing_fields',
        }
