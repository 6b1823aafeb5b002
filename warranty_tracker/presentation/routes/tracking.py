from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from warranty_tracker.services.tracking_service import TrackingService

bp = Blueprint('tracking', __name__)


@bp.get('/<path:sku>')
@login_required
def lookup(sku):
    """Resolve the SKU decoded from an equipment QR label"""
    return jsonify(TrackingService.lookup_by_sku(current_user.id, sku))
