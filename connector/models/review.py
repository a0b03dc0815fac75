"""Review model"""
from connector import db
from .base import BaseModel


class Review(BaseModel):
    """
    A customer's rating and comment on a service

    One review per (service, customer). ``specific_ratings`` holds optional
    per-criterion stars, e.g. ``{"punctuality": 5}``; they are stored and
    returned but do not feed the service's average.
    """
    __tablename__ = 'reviews'

    service_id = db.Column(db.String(36), db.ForeignKey('services.id', ondelete='CASCADE'), nullable=False)
    customer_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)

    rating = db.Column(db.Integer, nullable=False)
    # Free text is stored HTML-escaped, so columns are sized for the escaped
    # form; length limits apply to the text as submitted
    comment = db.Column(db.Text, nullable=False)
    provider_response = db.Column(db.Text)

    is_reported = db.Column(db.Boolean, nullable=False, default=False)
    report_reason = db.Column(db.Text)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)

    service_date = db.Column(db.Date)
    specific_ratings = db.Column(db.JSON)

    __table_args__ = (
        db.UniqueConstraint('service_id', 'customer_id', name='uq_reviews_service_customer'),
        db.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range'),
    )

    customer = db.relationship('User')

    def __repr__(self):
        return f'<Review {self.rating}* on {self.service_id}>'

    def to_dict(self, exclude=None):
        data = super().to_dict(exclude=exclude)
        if self.customer is not None:
            data['customer_name'] = self.customer.full_name
        return data
