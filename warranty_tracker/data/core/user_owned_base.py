from warranty_tracker import db
from sqlalchemy.orm import declared_attr
from warranty_tracker.business.core.data_insertion_mixin import DataInsertionMixin
from warranty_tracker.utils.dates import utc_now


class UserOwnedBase(db.Model, DataInsertionMixin):
    """Abstract base class for records owned by (and only visible to) one user"""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    @declared_attr
    def user_id(cls):
        return db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    @declared_attr
    def owner(cls):
        return db.relationship('User')

    def get_columns(self):
        return {
            'id', 'user_id', 'created_at', 'updated_at'
        }
