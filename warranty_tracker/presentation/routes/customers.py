from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from warranty_tracker.business.customers.customer_manager import CustomerManager
from warranty_tracker.presentation.routes.payload import request_payload, search_arg

bp = Blueprint('customers', __name__)


def _customer_json(customer, equipment_count=None):
    data = customer.to_dict()
    if equipment_count is not None:
        data['equipment_count'] = equipment_count
    return data


@bp.get('')
@login_required
def list_customers():
    rows = CustomerManager(current_user.id).list(search=search_arg())
    return jsonify([_customer_json(customer, count) for customer, count in rows])


@bp.post('')
@login_required
def create_customer():
    customer = CustomerManager(current_user.id).create(request_payload())
    return jsonify(_customer_json(customer, 0)), 201


@bp.get('/<int:customer_id>')
@login_required
def get_customer(customer_id):
    return jsonify(_customer_json(CustomerManager(current_user.id).get(customer_id)))


@bp.route('/<int:customer_id>', methods=['PUT', 'PATCH'])
@login_required
def update_customer(customer_id):
    customer = CustomerManager(current_user.id).update(customer_id, request_payload())
    return jsonify(_customer_json(customer))


@bp.delete('/<int:customer_id>')
@login_required
def delete_customer(customer_id):
    CustomerManager(current_user.id).delete(customer_id)
    return jsonify({'deleted': customer_id})
