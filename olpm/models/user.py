"""
User Model
Identity records resolved from bearer tokens (registration lives elsewhere)
"""
from olpm.extensions import db
from datetime import datetime, timezone


def now_utc():
    return datetime.now(timezone.utc)


class User(db.Model):
    """User model"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role = db.Column(db.String(20), nullable=False, default='student')
    status = db.Column(db.String(20), nullable=False, default='pending')
    created_at = db.Column(db.DateTime, default=now_utc)

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'

    @property
    def is_approved(self):
        return self.status == 'approved'
