"""
Base service classes.
Services contain business logic and orchestrate between repositories.
"""
from contextlib import contextmanager
from django.db import DatabaseError
from django.utils import timezone
import logging

from core.exceptions import FatalError

logger = logging.getLogger(__name__)


class BaseService:
    """
    Base service class providing common functionality.
    Services should contain business logic and use repositories for data access.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def datastore_guard(self, operation: str, **context):
        """
        Convert unexpected datastore failures into FatalError.

        Application exceptions pass through untouched; the enclosing
        transaction has already been rolled back when this handler runs.
        """
        try:
            yield
        except DatabaseError as e:
            self.log_error(f"Datastore failure during {operation}", error=e, **context)
            raise FatalError(
                message=f"Unexpected failure during {operation}",
                code="DATASTORE_ERROR",
                details={k: str(v) for k, v in context.items()}
            ) from e

    def today(self, today=None):
        return today or timezone.localdate()

    def log_info(self, message: str, **context):
        """Log info message with context"""
        self.logger.info(f"{message} | Context: {context}")

    def log_warning(self, message: str, **context):
        self.logger.warning(f"{message} | Context: {context}")

    def log_error(self, message: str, error: Exception = None, **context):
        """Log error message with context"""
        if error:
            self.logger.error(f"{message} | Context: {context}", exc_info=error)
        else:
            self.logger.error(f"{message} | Context: {context}")
