"""
Domain exceptions for the warranty tracker

Raised by the business layer when a request violates a rule, references
something that does not exist, or the store fails. Every exception carries
structured detail through ``to_dict()`` so callers can render a message.
"""

from typing import Any, Dict, Optional


class WarrantyDomainError(Exception):
    """Base exception for all warranty tracker domain errors"""

    kind = 'domain_error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {'error': self.kind, 'message': self.message}
        payload.update(self.details())
        return payload


class ValidationError(WarrantyDomainError):
    """Raised when caller input violates a precondition"""

    kind = 'validation_error'

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def details(self):
        return {'field': self.field} if self.field else {}


class DuplicateSkuError(WarrantyDomainError):
    """Raised when a SKU collides with an existing equipment SKU"""

    kind = 'duplicate_sku'

    def __init__(self, sku: str, message: Optional[str] = None):
        super().__init__(message or f"SKU '{sku}' is already in use")
        self.sku = sku

    def details(self):
        return {'sku': self.sku}


class InsufficientQuantityError(WarrantyDomainError):
    """Raised when an outgoing movement requests more than is on hand"""

    kind = 'insufficient_quantity'

    def __init__(self, available: int, requested: int):
        super().__init__(f"Only {available} unit(s) available, {requested} requested")
        self.available = available
        self.requested = requested

    def details(self):
        return {'available': self.available, 'requested': self.requested}


class NotFoundError(WarrantyDomainError):
    """Raised when a referenced record does not exist for the current owner"""

    kind = 'not_found'

    def __init__(self, entity: str, identifier: Any):
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier

    def details(self):
        return {'entity': self.entity, 'id': self.identifier}


class StorageError(WarrantyDomainError):
    """Raised when the persistence layer fails; wraps the original exception"""

    kind = 'storage_error'

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original


class SkuConflict(StorageError):
    """
    Raised by a gateway when an insert/update hits the SKU uniqueness
    constraint. The registration workflow translates it into a retry or a
    DuplicateSkuError; it never reaches the caller.
    """

    kind = 'sku_conflict'

    def __init__(self, sku: str, original: Optional[BaseException] = None):
        super().__init__(f"SKU '{sku}' violates the uniqueness constraint", original)
        self.sku = sku


class PartialMovementError(WarrantyDomainError):
    """
    Raised when a movement row was recorded but the equipment quantity could
    not be updated. The caller must reconcile; the movement is not rolled back.
    """

    kind = 'partial_movement'

    def __init__(self, movement_id: Any, cause: BaseException):
        super().__init__(f"Movement {movement_id} was recorded but the equipment quantity was not updated: {cause}")
        self.movement_id = movement_id
        self.cause = cause

    def details(self):
        return {'movement_id': self.movement_id}
