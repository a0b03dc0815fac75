"""SQLAlchemy models package"""
from .user import User
from .community import Community
from .category import ServiceCategory
from .service import Service
from .review import Review
from .subscription import Subscription, SubscriptionInvoice
from .webhook_event import WebhookEvent

__all__ = [
    'User',
    'Community',
    'ServiceCategory',
    'Service',
    'Review',
    'Subscription',
    'SubscriptionInvoice',
    'WebhookEvent',
]
