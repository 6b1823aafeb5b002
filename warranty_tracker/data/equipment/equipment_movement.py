from sqlalchemy import event
from warranty_tracker import db
from warranty_tracker.business.core.data_insertion_mixin import DataInsertionMixin
from warranty_tracker.utils.dates import utc_now


class EquipmentMovement(db.Model, DataInsertionMixin):
    """
    Append-only ledger entry: equipment entering (incoming) or leaving
    (outgoing) the company's possession. Rows are never updated or deleted.
    """
    __tablename__ = 'equipment_movements'
    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_equipment_movements_quantity_positive'),
        db.CheckConstraint("kind IN ('incoming', 'outgoing')", name='ck_equipment_movements_kind'),
    )

    INCOMING = 'incoming'
    OUTGOING = 'outgoing'
    KINDS = (INCOMING, OUTGOING)

    id = db.Column(db.Integer, primary_key=True)
    equipment_id = db.Column(db.Integer, db.ForeignKey('equipments.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    kind = db.Column(db.String(20), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=True, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    movement_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    # Relationships
    equipment = db.relationship('Equipment', back_populates='movements')
    customer = db.relationship('Customer')

    def __repr__(self):
        return f'<EquipmentMovement {self.kind}: Equipment {self.equipment_id}, Qty {self.quantity}>'

    @property
    def is_incoming(self):
        return self.kind == self.INCOMING

    @property
    def is_outgoing(self):
        return self.kind == self.OUTGOING

    @property
    def signed_quantity(self):
        """Quantity delta this movement applied to the equipment"""
        return self.quantity if self.is_incoming else -self.quantity


class ImmutableMovementError(RuntimeError):
    """Raised when code tries to edit or delete a recorded movement"""


@event.listens_for(EquipmentMovement, 'before_update')
def _refuse_movement_update(mapper, connection, target):
    raise ImmutableMovementError(f"Equipment movement {target.id} is immutable")


@event.listens_for(EquipmentMovement, 'before_delete')
def _refuse_movement_delete(mapper, connection, target):
    raise ImmutableMovementError(f"Equipment movement {target.id} cannot be deleted")
