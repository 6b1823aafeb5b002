"""
Generic data insertion mixin for SQLAlchemy models
Provides from_dict and to_dict so gateways and routes can move rows in and
out of plain dictionaries without per-model boilerplate.
"""

from datetime import date, datetime
from sqlalchemy import inspect


class DataInsertionMixin:
    """
    Mixin that provides dictionary conversion for SQLAlchemy models

    This mixin adds:
    - from_dict(): Create a model instance from a dictionary
    - to_dict(): Convert a model instance to a JSON-ready dictionary
    """

    # Columns the caller may never set through from_dict
    PROTECTED_FIELDS = ('id', 'created_at', 'updated_at')

    @classmethod
    def from_dict(cls, data_dict, owner_id=None, skip_fields=None):
        """
        Create a model instance from a dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            owner_id (int, optional): Owner stamped on models with a user_id column
            skip_fields (list, optional): Fields to skip during creation

        Returns:
            Model instance (not added to the session)
        """
        skip = set(skip_fields or ()) | set(cls.PROTECTED_FIELDS)

        mapper = inspect(cls)
        columns = {c.key for c in mapper.columns}

        filtered_data = {
            key: value
            for key, value in data_dict.items()
            if key in columns and key not in skip
        }

        instance = cls(**filtered_data)

        if owner_id is not None and 'user_id' in columns:
            instance.user_id = owner_id

        return instance

    def to_dict(self, include_audit_fields=True):
        """
        Convert model instance to dictionary

        Args:
            include_audit_fields (bool): Whether to include created/updated timestamps

        Returns:
            dict: Dictionary representation of the model
        """
        result = {}

        mapper = inspect(self.__class__)

        for column in mapper.columns:
            if not include_audit_fields and column.key in ('created_at', 'updated_at'):
                continue

            value = getattr(self, column.key)

            # datetime is a date subclass; both serialize to ISO strings
            if isinstance(value, (datetime, date)):
                result[column.key] = value.isoformat()
            else:
                result[column.key] = value

        return result
