from io import BytesIO

from flask import Blueprint, jsonify, request, send_file
from flask_login import current_user, login_required

from warranty_tracker.business.equipment.gateway import SqlAlchemyEquipmentGateway
from warranty_tracker.business.equipment.quantity_ledger import EquipmentQuantityLedger
from warranty_tracker.business.equipment.registration import EquipmentRegistrationWorkflow
from warranty_tracker.business.errors import ValidationError
from warranty_tracker.presentation.routes.payload import request_payload, search_arg
from warranty_tracker.services.equipment_service import EquipmentService
from warranty_tracker.services.qr_code_service import QRCodeService

bp = Blueprint('equipment', __name__)


def _gateway():
    return SqlAlchemyEquipmentGateway(current_user.id)


def _form_int(value, field):
    """Form posts carry numbers as text; JSON ints pass through untouched"""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            raise ValidationError(f"{field} must be an integer", field=field)
    return value


@bp.get('')
@login_required
def list_equipment():
    rows = EquipmentService.get_list_data(
        current_user.id,
        search=search_arg(),
        customer_id=request.args.get('customer_id', type=int),
        warranty_status=request.args.get('warranty_status') or None,
    )
    return jsonify(rows)


@bp.post('')
@login_required
def create_equipment():
    equipment = EquipmentRegistrationWorkflow(_gateway()).create_equipment(request_payload())
    return jsonify(EquipmentService.serialize(equipment)), 201


@bp.get('/<int:equipment_id>')
@login_required
def get_equipment(equipment_id):
    return jsonify(EquipmentService.serialize(_gateway().get_equipment(equipment_id)))


@bp.route('/<int:equipment_id>', methods=['PUT', 'PATCH'])
@login_required
def update_equipment(equipment_id):
    equipment = EquipmentRegistrationWorkflow(_gateway()).update_equipment(equipment_id, request_payload())
    return jsonify(EquipmentService.serialize(equipment))


@bp.get('/<int:equipment_id>/movements')
@login_required
def list_movements(equipment_id):
    movements = EquipmentQuantityLedger(_gateway()).history(equipment_id)
    return jsonify([movement.to_dict() for movement in movements])


@bp.post('/<int:equipment_id>/movements')
@login_required
def register_movement(equipment_id):
    data = request_payload()
    result = EquipmentQuantityLedger(_gateway()).register_movement(
        equipment_id,
        kind=data.get('kind'),
        quantity=_form_int(data.get('quantity'), 'quantity'),
        customer_id=_form_int(data.get('customer_id'), 'customer_id'),
        movement_date=data.get('movement_date'),
        notes=data.get('notes'),
    )
    return jsonify(result.to_dict()), 201


@bp.get('/<int:equipment_id>/units')
@login_required
def list_units(equipment_id):
    return jsonify(EquipmentService.get_units(current_user.id, equipment_id))


@bp.get('/<int:equipment_id>/qrcode.png')
@login_required
def equipment_qrcode(equipment_id):
    equipment = _gateway().get_equipment(equipment_id)
    png = QRCodeService.generate_png(equipment.sku)
    return send_file(
        BytesIO(png),
        mimetype='image/png',
        as_attachment=request.args.get('download', type=int) == 1,
        download_name=f"{equipment.sku}.png",
    )
