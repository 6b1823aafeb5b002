from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from warranty_tracker.services.dashboard_service import DashboardService

bp = Blueprint('dashboard', __name__)


@bp.get('')
@login_required
def summary():
    return jsonify(DashboardService.get_summary(current_user.id))
