from warranty_tracker import db
from warranty_tracker.business.core.data_insertion_mixin import DataInsertionMixin
from warranty_tracker.business.equipment.warranty import evaluate_warranty
from warranty_tracker.utils.dates import utc_now


class EquipmentUnit(db.Model, DataInsertionMixin):
    """One physical unit of a heterogeneous equipment batch"""
    __tablename__ = 'equipment_units'

    id = db.Column(db.Integer, primary_key=True)
    equipment_id = db.Column(db.Integer, db.ForeignKey('equipments.id'), nullable=False, index=True)
    serial_number = db.Column(db.String(100), nullable=True)
    warranty_expires_on = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    equipment = db.relationship('Equipment', back_populates='units')

    def __repr__(self):
        return f'<EquipmentUnit {self.serial_number or self.id} of Equipment {self.equipment_id}>'

    def warranty(self, now=None, window_days=None):
        return evaluate_warranty(self.warranty_expires_on, now, window_days)
