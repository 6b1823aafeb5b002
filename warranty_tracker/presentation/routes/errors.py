from flask import jsonify
from werkzeug.exceptions import HTTPException

from warranty_tracker.business.errors import (
    DuplicateSkuError,
    InsufficientQuantityError,
    NotFoundError,
    PartialMovementError,
    StorageError,
    ValidationError,
    WarrantyDomainError,
)
from warranty_tracker.logger import get_logger

logger = get_logger("warranty_tracker.routes.errors")

# Most specific first; the first isinstance match decides the status code
STATUS_CODES = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (DuplicateSkuError, 409),
    (InsufficientQuantityError, 409),
    (PartialMovementError, 500),
    (StorageError, 500),
)


def status_for(error: WarrantyDomainError) -> int:
    for error_type, status in STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 500


def register_error_handlers(app):

    @app.errorhandler(WarrantyDomainError)
    def handle_domain_error(error):
        status = status_for(error)
        if status >= 500:
            logger.error(f"{error.kind}: {error.message}")
        else:
            logger.info(f"{error.kind}: {error.message}")
        return jsonify(error.to_dict()), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            'error': (error.name or 'error').lower().replace(' ', '_'),
            'message': error.description,
        }), error.code
