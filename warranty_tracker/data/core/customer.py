from warranty_tracker import db
from warranty_tracker.data.core.user_owned_base import UserOwnedBase


class Customer(UserOwnedBase):
    """A client company that can hold equipment and receive movements"""
    __tablename__ = 'customers'

    company_name = db.Column(db.String(200), nullable=False)
    tax_id = db.Column(db.String(32), nullable=True)
    contact_name = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(40), nullable=True)
    address = db.Column(db.Text, nullable=True)

    # Relationships
    equipment = db.relationship('Equipment', back_populates='customer', lazy='dynamic')

    def __repr__(self):
        return f'<Customer {self.company_name}>'
