"""
Routes package for the warranty tracker
JSON blueprints, one per domain area
"""

from warranty_tracker.logger import get_logger

logger = get_logger("warranty_tracker.routes")


def init_app(app):
    """Register every route blueprint and the JSON error handlers"""
    logger.debug("Initializing route blueprints")

    from . import customers, dashboard, equipment, maintenance, reports, tracking
    from .errors import register_error_handlers

    app.register_blueprint(customers.bp, url_prefix='/customers')
    app.register_blueprint(equipment.bp, url_prefix='/equipment')
    app.register_blueprint(maintenance.bp, url_prefix='/maintenance')
    app.register_blueprint(tracking.bp, url_prefix='/tracking')
    app.register_blueprint(dashboard.bp, url_prefix='/dashboard')
    app.register_blueprint(reports.bp, url_prefix='/reports')

    register_error_handlers(app)

    logger.info("Route blueprints registered")
