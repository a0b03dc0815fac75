"""Provider subscription models"""
from sqlalchemy import text

from connector import db
from .base import BaseModel

PLANS = ('basic', 'premium', 'professional')
STATUSES = ('pending', 'active', 'cancelled', 'expired')
CURRENT_STATUSES = ('pending', 'active')

_CURRENT_PREDICATE = text("status IN ('pending', 'active')")


class Subscription(BaseModel):
    """
    Provider subscription - a paid period during which the provider may
    publish services

    Status changes go through ``connector.services.subscription_lifecycle``.
    At most one pending or active record per provider, enforced by a
    partial unique index.
    """
    __tablename__ = 'subscriptions'

    provider_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    plan = db.Column(db.String(20), nullable=False, default='basic')
    status = db.Column(db.String(20), nullable=False, default='pending')

    start_date = db.Column(db.DateTime(timezone=True), nullable=False)
    end_date = db.Column(db.DateTime(timezone=True), nullable=False)
    auto_renew = db.Column(db.Boolean, nullable=False, default=False)

    amount = db.Column(db.Integer, nullable=False)  # major currency units
    currency = db.Column(db.String(3), nullable=False, default='INR')

    # Payment processor details
    payment_gateway_id = db.Column(db.String(255), index=True)
    payment_method = db.Column(db.String(50))

    cancellation_reason = db.Column(db.String(255))
    cancellation_date = db.Column(db.DateTime(timezone=True))

    __table_args__ = (
        db.Index(
            'uq_subscriptions_current_provider',
            'provider_id',
            unique=True,
            sqlite_where=_CURRENT_PREDICATE,
            postgresql_where=_CURRENT_PREDICATE,
        ),
        db.Index('idx_subscriptions_provider_status', 'provider_id', 'status'),
        db.CheckConstraint(
            "status IN ('pending', 'active', 'cancelled', 'expired')",
            name='ck_subscriptions_status',
        ),
    )

    provider = db.relationship('User', backref=db.backref('subscriptions', lazy='dynamic'))
    invoices = db.relationship(
        'SubscriptionInvoice',
        backref='subscription',
        order_by='SubscriptionInvoice.created_at',
        cascade='all, delete-orphan',
    )

    def __repr__(self):
        return f'<Subscription {self.plan} {self.status} for {self.provider_id}>'

    def to_dict(self, exclude=None):
        data = super().to_dict(exclude=exclude)
        data['invoices'] = [invoice.to_dict() for invoice in self.invoices]
        return data


class SubscriptionInvoice(BaseModel):
    """Paid invoice appended on each activation; never updated"""
    __tablename__ = 'subscription_invoices'

    subscription_id = db.Column(
        db.String(36), db.ForeignKey('subscriptions.id', ondelete='CASCADE'), nullable=False, index=True
    )
    invoice_id = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='paid')
    paid_at = db.Column(db.DateTime(timezone=True))
    invoice_url = db.Column(db.String(500))

    def __repr__(self):
        return f'<SubscriptionInvoice {self.invoice_id}>'
