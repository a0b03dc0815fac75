"""
Stripe gateway adapter tests (Stripe calls are monkeypatched)
"""
import json
from types import SimpleNamespace

import pytest
import stripe

from connector.services.exceptions import ExternalDependencyError, ValidationError
from connector.services.payment_gateway import StripeGateway, to_minor_units


def _intent(**overrides):
    fields = dict(
        id='pi_123',
        client_secret='pi_123_secret_abc',
        status='succeeded',
        amount=49900,
        currency='inr',
        latest_charge='ch_1',
        payment_method_types=['upi'],
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestDevelopmentMode:

    def test_order_ids(self):
        order = StripeGateway().create_order(499, 'INR', 'provider-1')
        assert order.order_id.startswith('pi_dev_')
        assert order.client_secret == f'{order.order_id}_secret_dev'

    def test_verify(self):
        gateway = StripeGateway()
        order = gateway.create_order(499, 'INR', 'provider-1')

        result = gateway.verify_payment(order.order_id, None, order.client_secret, 499, 'INR')
        assert result.verified is True

        result = gateway.verify_payment(order.order_id, None, 'forged', 499, 'INR')
        assert result.verified is False

    def test_unsigned_webhook(self):
        payload = json.dumps({'id': 'evt_1', 'type': 'payment_intent.succeeded', 'data': {'object': {'id': 'pi_1'}}})
        event = StripeGateway().parse_webhook(payload, '')
        assert event.event_id == 'evt_1'
        assert event.data == {'id': 'pi_1'}

    def test_malformed_webhook(self):
        with pytest.raises(ValidationError):
            StripeGateway().parse_webhook('not json', '')


class TestLiveMode:

    @pytest.fixture
    def gateway(self):
        return StripeGateway(secret_key='sk_test_123', webhook_secret='whsec_123')

    def test_minor_units(self):
        assert to_minor_units(499) == 49900
        assert to_minor_units(19.99) == 1999

    def test_create_order(self, gateway, monkeypatch):
        calls = []

        def fake_create(**kwargs):
            calls.append(kwargs)
            return _intent(status='requires_payment_method')

        monkeypatch.setattr(stripe.PaymentIntent, 'create', fake_create)
        order = gateway.create_order(499, 'INR', 'provider-1')

        assert order.order_id == 'pi_123'
        assert order.client_secret == 'pi_123_secret_abc'
        assert calls[0]['amount'] == 49900
        assert calls[0]['currency'] == 'inr'
        assert calls[0]['metadata']['provider_id'] == 'provider-1'

    def test_create_order_unreachable(self, gateway, monkeypatch):
        def fake_create(**kwargs):
            raise stripe.APIConnectionError('Network down')

        monkeypatch.setattr(stripe.PaymentIntent, 'create', fake_create)
        with pytest.raises(ExternalDependencyError):
            gateway.create_order(499, 'INR', 'provider-1')

    def test_verify_success(self, gateway, monkeypatch):
        monkeypatch.setattr(stripe.PaymentIntent, 'retrieve', lambda order_id, **kwargs: _intent())
        result = gateway.verify_payment('pi_123', 'ch_1', 'pi_123_secret_abc', 499, 'INR')
        assert result.verified is True
        assert result.payment_method == 'upi'

    @pytest.mark.parametrize('overrides, signature, payment_id', [
        ({}, 'pi_123_secret_wrong', 'ch_1'),
        ({'status': 'processing'}, 'pi_123_secret_abc', 'ch_1'),
        ({'amount': 100}, 'pi_123_secret_abc', 'ch_1'),
        ({}, 'pi_123_secret_abc', 'ch_other'),
    ])
    def test_verify_rejections(self, gateway, monkeypatch, overrides, signature, payment_id):
        monkeypatch.setattr(stripe.PaymentIntent, 'retrieve', lambda order_id, **kwargs: _intent(**overrides))
        result = gateway.verify_payment('pi_123', payment_id, signature, 499, 'INR')
        assert result.verified is False

    def test_verify_unreachable(self, gateway, monkeypatch):
        def fake_retrieve(order_id, **kwargs):
            raise stripe.APIConnectionError('Timed out')

        monkeypatch.setattr(stripe.PaymentIntent, 'retrieve', fake_retrieve)
        with pytest.raises(ExternalDependencyError):
            gateway.verify_payment('pi_123', 'ch_1', 'pi_123_secret_abc', 499, 'INR')

    def test_dev_order_rejected_in_live_mode(self, gateway):
        result = gateway.verify_payment('pi_dev_1234', None, 'pi_dev_1234_secret_dev', 499, 'INR')
        assert result.verified is False

    def test_webhook_bad_signature(self, gateway, monkeypatch):
        def fake_construct(payload, sig_header, secret):
            raise stripe.SignatureVerificationError('No signatures found', sig_header)

        monkeypatch.setattr(stripe.Webhook, 'construct_event', fake_construct)
        with pytest.raises(ValidationError):
            gateway.parse_webhook('{}', 't=1,v1=bad')

    def test_webhook_verified(self, gateway, monkeypatch):
        event = {'id': 'evt_9', 'type': 'payment_intent.succeeded', 'data': {'object': {'id': 'pi_123'}}}
        monkeypatch.setattr(stripe.Webhook, 'construct_event', lambda payload, sig, secret: event)

        parsed = gateway.parse_webhook(json.dumps(event), 't=1,v1=good')
        assert parsed.event_type == 'payment_intent.succeeded'
        assert parsed.data['id'] == 'pi_123'

    def test_unsigned_webhook_rejected_without_signing_secret(self):
        gateway = StripeGateway(secret_key='sk_live_123', webhook_secret='')
        event = {'id': 'evt_9', 'type': 'payment_intent.succeeded', 'data': {'object': {'id': 'pi_123'}}}
        with pytest.raises(ValidationError):
            gateway.parse_webhook(json.dumps(event), None)
