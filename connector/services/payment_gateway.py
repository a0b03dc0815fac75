"""
Payment gateway adapter

Subscriptions are paid through Stripe PaymentIntents. The order id handed
to the client is the intent id and the signature it returns after paying
is the intent's client secret; verification re-reads the intent from
Stripe and checks the secret, status and amount.

Without ``STRIPE_SECRET_KEY`` the gateway runs in development mode and
issues ``pi_dev_*`` ids whose signature is ``<order_id>_secret_dev``.
"""
import hmac
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import stripe
from flask import current_app

from connector.utils.helpers import generate_uuid
from .exceptions import ExternalDependencyError, ValidationError

logger = logging.getLogger(__name__)

DEV_PREFIX = 'pi_dev_'


@dataclass
class PaymentOrder:
    order_id: str
    client_secret: str
    amount: int
    currency: str


@dataclass
class PaymentVerification:
    verified: bool
    payment_method: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class GatewayEvent:
    event_id: str
    event_type: str
    data: Dict[str, Any]


def to_minor_units(amount):
    """499 (rupees) -> 49900 (paise)"""
    return int(round(float(amount) * 100))


class PaymentGateway(ABC):
    """Contract the subscription lifecycle relies on"""

    @abstractmethod
    def create_order(self, amount, currency, provider_id) -> PaymentOrder:
        """Create a payment order for ``amount`` in major currency units"""

    @abstractmethod
    def verify_payment(self, order_id, payment_id, signature, amount, currency) -> PaymentVerification:
        """Confirm the order was paid in full by the holder of ``signature``"""

    @abstractmethod
    def parse_webhook(self, payload, signature_header) -> GatewayEvent:
        """Authenticate and decode a webhook body"""


class StripeGateway(PaymentGateway):
    """Stripe PaymentIntent implementation"""

    def __init__(self, secret_key='', webhook_secret=''):
        self.secret_key = secret_key or ''
        self.webhook_secret = webhook_secret or ''

    @property
    def dev_mode(self):
        return not self.secret_key

    def create_order(self, amount, currency, provider_id):
        if self.dev_mode:
            order_id = f'{DEV_PREFIX}{generate_uuid()[:8]}'
            logger.info('Dev payment order %s created for provider %s', order_id, provider_id)
            return PaymentOrder(order_id, f'{order_id}_secret_dev', amount, currency)

        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.secret_key,
                amount=to_minor_units(amount),
                currency=currency.lower(),
                metadata={'provider_id': provider_id, 'purpose': 'subscription'},
            )
        except stripe.APIConnectionError as e:
            logger.error('Stripe unreachable creating order: %s', e)
            raise ExternalDependencyError('Payment gateway unavailable')
        except stripe.StripeError as e:
            logger.error('Stripe error creating order: %s', e)
            raise ExternalDependencyError(f'Payment gateway error: {e.user_message or e}')

        return PaymentOrder(intent.id, intent.client_secret, amount, currency)

    def verify_payment(self, order_id, payment_id, signature, amount, currency):
        if not signature:
            return PaymentVerification(False, reason='missing signature')

        if self.dev_mode or order_id.startswith(DEV_PREFIX):
            if not self.dev_mode:
                return PaymentVerification(False, reason='development order in live mode')
            ok = hmac.compare_digest(str(signature), f'{order_id}_secret_dev')
            return PaymentVerification(ok, payment_method='dev' if ok else None,
                                       reason=None if ok else 'signature mismatch')

        try:
            intent = stripe.PaymentIntent.retrieve(order_id, api_key=self.secret_key)
        except stripe.InvalidRequestError as e:
            logger.info('Stripe rejected intent lookup %s: %s', order_id, e)
            return PaymentVerification(False, reason='unknown order')
        except stripe.APIConnectionError as e:
            logger.error('Stripe unreachable verifying %s: %s', order_id, e)
            raise ExternalDependencyError('Payment gateway unavailable')
        except stripe.StripeError as e:
            logger.error('Stripe error verifying %s: %s', order_id, e)
            raise ExternalDependencyError(f'Payment gateway error: {e.user_message or e}')

        if not hmac.compare_digest(str(signature), str(intent.client_secret or '')):
            return PaymentVerification(False, reason='signature mismatch')
        if intent.status != 'succeeded':
            return PaymentVerification(False, reason=f'payment status {intent.status}')
        if intent.amount != to_minor_units(amount) or intent.currency != currency.lower():
            return PaymentVerification(False, reason='amount mismatch')

        latest_charge = getattr(intent, 'latest_charge', None)
        if payment_id and latest_charge and payment_id != latest_charge:
            return PaymentVerification(False, reason='payment id mismatch')

        method_types = getattr(intent, 'payment_method_types', None) or ['card']
        return PaymentVerification(True, payment_method=method_types[0])

    def parse_webhook(self, payload, signature_header):
        if self.webhook_secret:
            try:
                event = stripe.Webhook.construct_event(payload, signature_header, self.webhook_secret)
            except ValueError:
                raise ValidationError('Invalid webhook payload')
            except stripe.SignatureVerificationError:
                raise ValidationError('Invalid webhook signature')
            return GatewayEvent(event['id'], event['type'], event['data']['object'])

        if not self.dev_mode:
            logger.warning('Unsigned webhook rejected: STRIPE_WEBHOOK_SECRET is not configured')
            raise ValidationError('Webhook signing secret not configured')

        # Dev mode - accept unsigned events
        try:
            event = json.loads(payload)
            return GatewayEvent(event['id'], event['type'], event['data']['object'])
        except (ValueError, KeyError, TypeError):
            raise ValidationError('Invalid webhook payload')


def get_payment_gateway() -> PaymentGateway:
    """Gateway installed on the current app by ``create_app``"""
    return current_app.extensions['payment_gateway']
