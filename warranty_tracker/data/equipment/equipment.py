from warranty_tracker import db
from warranty_tracker.data.core.user_owned_base import UserOwnedBase
from warranty_tracker.business.equipment.warranty import evaluate_warranty


class Equipment(UserOwnedBase):
    """
    An inventory line: one model of equipment with an on-hand quantity.

    A uniform batch carries a single ``warranty_expires_on``. A heterogeneous
    batch (``tracks_units``) leaves it unset and keeps one EquipmentUnit per
    physical unit instead.
    """
    __tablename__ = 'equipments'
    SKU_CONSTRAINT = 'uq_equipments_owner_sku'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'sku', name=SKU_CONSTRAINT),
        db.CheckConstraint('quantity >= 0', name='ck_equipments_quantity_non_negative'),
    )

    name = db.Column(db.String(200), nullable=False)
    serial_number = db.Column(db.String(100), nullable=True)
    sku = db.Column(db.String(64), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=True, index=True)
    model = db.Column(db.String(120), nullable=True)
    location = db.Column(db.String(200), nullable=True)
    warranty_expires_on = db.Column(db.Date, nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    tracks_units = db.Column(db.Boolean, nullable=False, default=False)

    # Relationships
    customer = db.relationship('Customer', back_populates='equipment')
    units = db.relationship(
        'EquipmentUnit',
        back_populates='equipment',
        cascade='all, delete-orphan',
        order_by='EquipmentUnit.id',
    )
    movements = db.relationship(
        'EquipmentMovement',
        back_populates='equipment',
        lazy='dynamic',
        order_by='EquipmentMovement.id',
    )
    maintenance_orders = db.relationship('MaintenanceOrder', back_populates='equipment', lazy='dynamic')

    def __repr__(self):
        return f'<Equipment {self.sku}: {self.name} x{self.quantity}>'

    @property
    def held_by_company(self):
        """True when no customer currently holds the equipment"""
        return self.customer_id is None

    def warranty(self, now=None, window_days=None):
        """Warranty evaluation of the parent row (status ``none`` for unit-tracked batches)"""
        return evaluate_warranty(self.warranty_expires_on, now, window_days)
