"""
Pytest configuration and fixtures for Community Connector tests
"""
import json
import itertools
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from dateutil.relativedelta import relativedelta

from connector import create_app, db
from connector.models import Community, ServiceCategory, Service, Subscription, User
from connector.services.exceptions import ExternalDependencyError
from connector.services.payment_gateway import (
    GatewayEvent,
    PaymentGateway,
    PaymentOrder,
    PaymentVerification,
)


class FakeGateway(PaymentGateway):
    """
    In-process payment gateway

    Orders are ``order_<n>``; the valid signature for an order is
    ``<order_id>_secret``. Set ``unavailable`` to simulate a timeout.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self.orders = []
        self.verifications = []
        self.unavailable = False

    def create_order(self, amount, currency, provider_id):
        if self.unavailable:
            raise ExternalDependencyError('Payment gateway unavailable')
        order_id = f'order_{next(self._ids)}'
        order = PaymentOrder(order_id, f'{order_id}_secret', amount, currency)
        self.orders.append(order)
        return order

    def verify_payment(self, order_id, payment_id, signature, amount, currency):
        self.verifications.append((order_id, payment_id, signature, amount, currency))
        if self.unavailable:
            raise ExternalDependencyError('Payment gateway unavailable')
        ok = signature == f'{order_id}_secret'
        return PaymentVerification(ok, payment_method='card' if ok else None)

    def parse_webhook(self, payload, signature_header):
        event = json.loads(payload)
        return GatewayEvent(event['id'], event['type'], event['data']['object'])


@pytest.fixture(scope='function')
def app():
    """Application with a fresh in-memory database per test"""
    app = create_app('testing')
    app.extensions['payment_gateway'] = FakeGateway()

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def gateway(app):
    return app.extensions['payment_gateway']


@pytest.fixture
def community(app):
    community = Community(
        name='Green Meadows',
        street='12 Park Road',
        city='Pune',
        state='Maharashtra',
        postal_code='411001',
        community_type='apartment',
        buildings=['A', 'B'],
        total_units=120,
    )
    db.session.add(community)
    db.session.commit()
    return community


@pytest.fixture
def other_community(app):
    community = Community(
        name='Lake View',
        city='Pune',
        state='Maharashtra',
        postal_code='411002',
        community_type='gated community',
    )
    db.session.add(community)
    db.session.commit()
    return community


@pytest.fixture
def make_user(app, community):
    """Factory: make_user('customer') -> committed User in ``community``"""
    counter = itertools.count(1)

    def _make_user(role='customer', community_id=None, **fields):
        n = next(counter)
        user = User(
            email=fields.pop('email', f'{role}{n}@example.com'),
            first_name=fields.pop('first_name', role.title()),
            last_name=fields.pop('last_name', f'Number{n}'),
            role=role,
            community_id=community_id or community.id,
            building='A',
            unit=f'{100 + n}',
            **fields,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user('customer', first_name='Chitra', last_name='Rao')


@pytest.fixture
def second_customer(make_user):
    return make_user('customer', first_name='Dev', last_name='Shah')


@pytest.fixture
def provider(make_user):
    return make_user('provider', first_name='Priya', last_name='Nair')


@pytest.fixture
def other_provider(make_user):
    return make_user('provider', first_name='Arjun', last_name='Menon')


@pytest.fixture
def admin(make_user):
    return make_user('admin', first_name='Asha', last_name='Admin')


def make_token(app, user, expires_in=timedelta(hours=1)):
    payload = {
        'user_id': user.id,
        'role': user.role,
        'exp': datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, app.config['JWT_SECRET_KEY'], algorithm='HS256')


@pytest.fixture
def headers_for(app):
    """Factory: headers_for(user) -> Authorization headers"""
    def _headers_for(user):
        return {'Authorization': f'Bearer {make_token(app, user)}'}
    return _headers_for


@pytest.fixture
def customer_headers(headers_for, customer):
    return headers_for(customer)


@pytest.fixture
def provider_headers(headers_for, provider):
    return headers_for(provider)


@pytest.fixture
def admin_headers(headers_for, admin):
    return headers_for(admin)


@pytest.fixture
def category(app):
    category = ServiceCategory(name='Home Repair', description='Plumbing, electrical and carpentry')
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def subcategory(app, category):
    subcategory = ServiceCategory(name='Plumbing', parent_id=category.id)
    db.session.add(subcategory)
    db.session.commit()
    return subcategory


@pytest.fixture
def make_subscription(app):
    """Factory: make_subscription(provider, status='active', end_in=timedelta(days=20))"""
    def _make_subscription(user, status='active', end_in=None, plan='basic'):
        now = datetime.now(timezone.utc)
        end = now + end_in if end_in is not None else now + relativedelta(months=1)
        subscription = Subscription(
            provider_id=user.id,
            plan=plan,
            status=status,
            start_date=now - timedelta(days=1),
            end_date=end,
            amount=499,
            currency='INR',
            payment_gateway_id=f'order_seed_{user.id[:8]}_{status}',
        )
        db.session.add(subscription)
        db.session.commit()
        return subscription
    return _make_subscription


@pytest.fixture
def active_subscription(make_subscription, provider):
    return make_subscription(provider)


def service_payload(category_id, **overrides):
    payload = {
        'title': 'Leaky tap repairs',
        'description': 'Same day fixes for taps, flushes and small leaks.',
        'category_id': category_id,
        'tags': ['plumbing', 'repair'],
        'price_info': {'amount': 300, 'unit': 'visit', 'negotiable': True},
        'availability': {'days': ['Mon', 'Wed', 'Sat'], 'time_slots': ['09:00-12:00']},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_service(app, category):
    """Factory: a listing stored directly, bypassing the listing gate"""
    def _make_service(owner, **overrides):
        fields = service_payload(category.id, **overrides)
        service = Service(provider_id=owner.id, community_id=owner.community_id, **fields)
        db.session.add(service)
        db.session.commit()
        return service
    return _make_service


@pytest.fixture
def service(make_service, provider):
    return make_service(provider)


@pytest.fixture
def service_data(category):
    """Factory: a valid listing payload in ``category``"""
    def _service_data(**overrides):
        category_id = overrides.pop('category_id', category.id)
        return service_payload(category_id, **overrides)
    return _service_data
