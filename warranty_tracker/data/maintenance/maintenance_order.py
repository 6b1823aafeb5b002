from warranty_tracker import db
from warranty_tracker.data.core.user_owned_base import UserOwnedBase


class MaintenanceOrder(UserOwnedBase):
    """A maintenance work order (service order) opened against an equipment"""
    __tablename__ = 'maintenance_orders'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'order_number', name='uq_maintenance_orders_owner_number'),
    )

    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    STATUSES = (PENDING, IN_PROGRESS, COMPLETED, CANCELLED)
    OPEN_STATUSES = (PENDING, IN_PROGRESS)

    STATUS_LABELS = {
        PENDING: 'Pending',
        IN_PROGRESS: 'In progress',
        COMPLETED: 'Completed',
        CANCELLED: 'Cancelled',
    }

    order_number = db.Column(db.Integer, nullable=False)
    equipment_id = db.Column(db.Integer, db.ForeignKey('equipments.id'), nullable=False, index=True)
    opened_on = db.Column(db.Date, nullable=False)
    finished_on = db.Column(db.Date, nullable=True)
    completed_on = db.Column(db.Date, nullable=True)
    technician = db.Column(db.String(120), nullable=True)
    problem = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=PENDING)

    equipment = db.relationship('Equipment', back_populates='maintenance_orders')

    def __repr__(self):
        return f'<MaintenanceOrder #{self.order_number} ({self.status})>'

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES

    @property
    def status_label(self):
        return self.STATUS_LABELS.get(self.status, self.status)

    @property
    def completion_date(self):
        """Date the order counts as completed: completed_on, else finished_on, else last update"""
        if self.completed_on:
            return self.completed_on
        if self.finished_on:
            return self.finished_on
        return self.updated_at.date() if self.updated_at else None
