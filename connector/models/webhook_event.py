"""Webhook audit model"""
from connector import db
from .base import BaseModel


class WebhookEvent(BaseModel):
    """
    One row per payment gateway event received

    The gateway's event id is unique, so redelivered events are detected
    and acknowledged without being processed twice.
    """
    __tablename__ = 'webhook_events'

    event_id = db.Column(db.String(255), unique=True, nullable=False)
    event_type = db.Column(db.String(100), nullable=False)
    payload = db.Column(db.JSON)
    status = db.Column(db.String(20), nullable=False, default='received')  # received, processed, ignored, failed
    error_message = db.Column(db.Text)
    processed_at = db.Column(db.DateTime(timezone=True))

    def __repr__(self):
        return f'<WebhookEvent {self.event_type} {self.status}>'
