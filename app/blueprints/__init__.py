"""
Ship or Sink: Change
Blueprint registry and shared error mapping.
"""

import logging

from flask import request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from app.core.exceptions import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from app.models import db
from app.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def register_error_handlers(bp):
    """Map service exceptions to JSON error responses for one blueprint.

    NotFoundError 404, ValidationError 400, ConflictError and IntegrityError
    409, AccessDeniedError 403, anything else 500.
    """

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, f"{error.resource} not found")

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @bp.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        return api_error(E.CONFLICT_DUPLICATE, str(error))

    @bp.errorhandler(AccessDeniedError)
    def _handle_forbidden(error: AccessDeniedError):
        return api_error(E.FORBIDDEN, str(error))

    @bp.errorhandler(IntegrityError)
    def _handle_integrity(error: IntegrityError):
        db.session.rollback()
        logger.warning("Integrity error in %s endpoint=%s: %s", bp.name, request.endpoint, error.orig)
        return api_error(E.CONFLICT_DUPLICATE, "Record conflicts with an existing one")

    @bp.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return {"error": error.description or error.name}, error.code
        db.session.rollback()
        logger.exception("Unexpected error in %s endpoint=%s", bp.name, request.endpoint)
        return api_error(E.INTERNAL, "Internal server error")

    return bp
