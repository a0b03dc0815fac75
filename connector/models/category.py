"""Service category model"""
from connector import db
from .base import BaseModel


class ServiceCategory(BaseModel):
    """
    Service category - two level tree (category > subcategory)

    ``form_fields`` describes the extra inputs a listing in this category
    collects, e.g. ``[{"name": "experience_years", "type": "number"}]``.
    """
    __tablename__ = 'service_categories'

    name = db.Column(db.String(300), unique=True, nullable=False)
    description = db.Column(db.Text)
    parent_id = db.Column(db.String(36), db.ForeignKey('service_categories.id'), index=True)
    form_fields = db.Column(db.JSON, nullable=False, default=list)
    icon = db.Column(db.String(255))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    subcategories = db.relationship(
        'ServiceCategory',
        backref=db.backref('parent', remote_side='ServiceCategory.id'),
        lazy='dynamic',
    )

    def __repr__(self):
        return f'<ServiceCategory {self.name}>'
