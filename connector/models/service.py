"""Service listing model"""
from sqlalchemy.orm import validates

from connector import db
from .base import BaseModel

AGGREGATE_FIELDS = ('average_rating', 'review_count')


class Service(BaseModel):
    """
    Service listing published by a provider inside their community

    ``average_rating`` and ``review_count`` are derived from the service's
    reviews. They are written with a bulk UPDATE by the rating aggregator
    only; assigning them on an instance raises.
    """
    __tablename__ = 'services'

    # Stored HTML-escaped; 100 and 1000 character limits apply before escaping
    title = db.Column(db.String(600), nullable=False)
    description = db.Column(db.Text, nullable=False)

    provider_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    category_id = db.Column(db.String(36), db.ForeignKey('service_categories.id'), nullable=False, index=True)
    subcategory_id = db.Column(db.String(36), db.ForeignKey('service_categories.id'), index=True)
    community_id = db.Column(db.String(36), db.ForeignKey('communities.id'), nullable=False, index=True)

    tags = db.Column(db.JSON, nullable=False, default=list)
    price_info = db.Column(db.JSON, nullable=False)  # {amount, unit, negotiable}
    availability = db.Column(db.JSON, nullable=False)  # {days: [...], time_slots: [...]}
    images = db.Column(db.JSON, nullable=False, default=list)
    custom_fields = db.Column(db.JSON, nullable=False, default=dict)

    # Derived
    average_rating = db.Column(db.Float)
    review_count = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    __table_args__ = (
        db.Index('idx_services_community_active', 'community_id', 'is_active'),
    )

    # Relationships
    provider = db.relationship('User', backref=db.backref('services', lazy='dynamic'))
    category = db.relationship('ServiceCategory', foreign_keys=[category_id])
    subcategory = db.relationship('ServiceCategory', foreign_keys=[subcategory_id])
    reviews = db.relationship(
        'Review',
        backref='service',
        lazy='dynamic',
    )

    def __repr__(self):
        return f'<Service {self.title}>'

    @validates(*AGGREGATE_FIELDS)
    def _refuse_aggregate_write(self, key, value):
        raise AttributeError(f'{key} is derived from reviews and cannot be assigned')

    def to_dict(self, exclude=None):
        data = super().to_dict(exclude=exclude)
        if 'average_rating' in data and data['average_rating'] is not None:
            data['average_rating'] = round(float(data['average_rating']), 1)
        return data
