from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from warranty_tracker.business.maintenance.maintenance_manager import MaintenanceManager
from warranty_tracker.presentation.routes.payload import request_payload, search_arg

bp = Blueprint('maintenance', __name__)


def _order_json(order):
    data = order.to_dict()
    data['status_label'] = order.status_label
    data['equipment_name'] = order.equipment.name if order.equipment else None
    data['equipment_sku'] = order.equipment.sku if order.equipment else None
    customer = order.equipment.customer if order.equipment else None
    data['customer_name'] = customer.company_name if customer else None
    return data


@bp.get('')
@login_required
def list_orders():
    orders = MaintenanceManager(current_user.id).list(
        search=search_arg(),
        status=request.args.get('status') or None,
    )
    return jsonify([_order_json(order) for order in orders])


@bp.post('')
@login_required
def create_order():
    order = MaintenanceManager(current_user.id).create(request_payload())
    return jsonify(_order_json(order)), 201


@bp.get('/<int:order_id>')
@login_required
def get_order(order_id):
    return jsonify(_order_json(MaintenanceManager(current_user.id).get(order_id)))


@bp.route('/<int:order_id>', methods=['PUT', 'PATCH'])
@login_required
def update_order(order_id):
    order = MaintenanceManager(current_user.id).update(order_id, request_payload())
    return jsonify(_order_json(order))


@bp.delete('/<int:order_id>')
@login_required
def delete_order(order_id):
    MaintenanceManager(current_user.id).delete(order_id)
    return jsonify({'deleted': order_id})
