"""Exceptions raised by HRFlow and their JSON rendering."""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class HRFlowError(Exception):
    status_code = 500
    message = 'Internal error'

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.errors = errors

    def to_dict(self):
        payload = {'success': False, 'message': self.message}
        if self.errors:
            payload['errors'] = self.errors
        return payload


class ValidationError(HRFlowError):
    status_code = 400
    message = 'Invalid data'


class GeofenceError(ValidationError):
    message = 'Invalid location'


class PermissionDenied(HRFlowError):
    status_code = 403
    message = 'Access denied'


class NotFound(HRFlowError):
    status_code = 404
    message = 'Not found'


class Conflict(HRFlowError):
    status_code = 409
    message = 'Conflict'


def form_errors(form):
    """Flatten WTForms errors into 'field: message' strings"""
    details = []
    for field, messages in form.errors.items():
        for message in messages:
            details.append(f'{field}: {message}')
    return details


def register_error_handlers(app, db):
    @app.errorhandler(HRFlowError)
    def handle_hrflow_error(error):
        if error.status_code >= 500:
            logger.error(f"{error.__class__.__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception(f"Database error: {error}")
        return jsonify({'success': False, 'message': 'Database error'}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description}), error.code
