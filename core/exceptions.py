"""
Custom exceptions for the application.
Every exception carries a machine-readable kind so the HTTP layer can map it
without inspecting messages.
"""
from core.constants import ErrorKind


class BaseApplicationException(Exception):
    """Base exception for all application-specific exceptions"""
    default_message = "An application error occurred"
    kind = ErrorKind.FATAL

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.default_message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        return {
            'detail': self.message,
            'kind': self.kind,
            'code': self.code,
            'details': self.details,
        }


class NotFoundError(BaseApplicationException):
    """Raised when a resource is absent or belongs to another account"""
    default_message = "Resource not found"
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource_type=None, resource_id=None, **kwargs):
        self.resource_type = resource_type
        self.resource_id = resource_id
        if resource_type and 'message' not in kwargs:
            kwargs['message'] = f"{resource_type} not found"
        kwargs.setdefault('details', {})
        if resource_type:
            kwargs['details'].setdefault('resource_type', resource_type)
        if resource_id is not None:
            kwargs['details'].setdefault('resource_id', resource_id)
        super().__init__(**kwargs)


class AlreadyExistsError(BaseApplicationException):
    """Raised when a unique business fact would be recorded twice"""
    default_message = "Resource already exists"
    kind = ErrorKind.ALREADY_EXISTS


class InvalidStateError(BaseApplicationException):
    """Raised when the operation is not possible in the current state"""
    default_message = "Operation not allowed in the current state"
    kind = ErrorKind.INVALID_STATE


class ValidationError(InvalidStateError):
    """Raised when validation fails"""
    default_message = "Validation failed"


class ConcurrencyConflictError(BaseApplicationException):
    """Raised when concurrent modification is detected"""
    default_message = "Resource is being modified by another request"
    kind = ErrorKind.CONCURRENCY_CONFLICT


class FatalError(BaseApplicationException):
    """Raised for unexpected datastore failures"""
    default_message = "An unexpected error occurred"
    kind = ErrorKind.FATAL
