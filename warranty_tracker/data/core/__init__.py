"""
Core models: users and the customers they manage
"""

from .user import User
from .customer import Customer

__all__ = [
    'User',
    'Customer',
]
