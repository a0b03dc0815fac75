"""User model"""
from connector import db
from .base import BaseModel

ROLES = ('customer', 'provider', 'admin')


class User(BaseModel):
    """
    User model - residents who browse and review (customers), neighbours
    who offer services (providers) and platform admins

    Accounts are provisioned by the identity service; rows here mirror the
    fields this API needs for authorization.
    """
    __tablename__ = 'users'

    email = db.Column(db.String(255), unique=True, nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(50))

    role = db.Column(db.String(20), nullable=False, default='customer')

    community_id = db.Column(db.String(36), db.ForeignKey('communities.id'), index=True)
    building = db.Column(db.String(100))
    unit = db.Column(db.String(50))

    is_verified = db.Column(db.Boolean, nullable=False, default=False)

    __table_args__ = (
        db.CheckConstraint("role IN ('customer', 'provider', 'admin')", name='ck_users_role'),
    )

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'

    @property
    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self, exclude=None):
        data = super().to_dict(exclude=exclude)
        data['full_name'] = self.full_name
        return data
