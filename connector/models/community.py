"""Community model"""
from connector import db
from .base import BaseModel

COMMUNITY_TYPES = ('apartment', 'gated community', 'neighborhood')


class Community(BaseModel):
    """A residential community whose residents trade services"""
    __tablename__ = 'communities'

    name = db.Column(db.String(255), nullable=False)

    # Address
    street = db.Column(db.String(255))
    city = db.Column(db.String(100), nullable=False)
    state = db.Column(db.String(100), nullable=False)
    postal_code = db.Column(db.String(20), nullable=False)

    community_type = db.Column(db.String(30), nullable=False, default='apartment')
    buildings = db.Column(db.JSON, nullable=False, default=list)
    description = db.Column(db.Text)
    amenities = db.Column(db.JSON, nullable=False, default=list)
    total_units = db.Column(db.Integer)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    members = db.relationship('User', backref='community', lazy='dynamic')

    def __repr__(self):
        return f'<Community {self.name}>'

    def to_dict(self, exclude=None):
        data = super().to_dict(exclude=exclude)
        data['address'] = {
            'street': data.pop('street', None),
            'city': data.pop('city', None),
            'state': data.pop('state', None),
            'postal_code': data.pop('postal_code', None),
        }
        return data
