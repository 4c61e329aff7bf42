"""
Error Types
Every failure a service can raise, with the HTTP status it maps to
"""


class OLPMError(Exception):
    """Base error carrying a user-visible message and an HTTP status"""
    status_code = 500

    def __init__(self, message, status_code=None, code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.code = code

    def to_dict(self):
        payload = {"error": self.message}
        if self.code:
            payload["code"] = self.code
        return payload


class ValidationError(OLPMError):
    """Missing or malformed input"""
    status_code = 400


class AuthenticationError(OLPMError):
    """No usable identity on the request"""
    status_code = 401


class AuthorizationError(OLPMError):
    """Identity known but not allowed to do this"""
    status_code = 403


class NotFoundError(OLPMError):
    status_code = 404


class PersistenceError(OLPMError):
    """Database failure; the enclosing transaction has been rolled back"""
    status_code = 500


class ServiceUnavailableError(OLPMError):
    """No pooled connection became available in time"""
    status_code = 503


def register_error_handlers(app):
    """Render every failure as a JSON body with an error message"""
    import logging
    from flask import jsonify, request
    from sqlalchemy.exc import TimeoutError as PoolTimeoutError
    from werkzeug.exceptions import HTTPException
    from olpm.extensions import db

    logger = logging.getLogger(__name__)

    @app.errorhandler(OLPMError)
    def handle_olpm_error(error):
        if error.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(PoolTimeoutError)
    def handle_pool_timeout(error):
        logger.error("No database connection available for %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({'error': 'Database is busy. Please try again shortly.'}), 503

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({
            'error': 'Route not found',
            'path': request.path,
            'method': request.method,
        }), 404

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({'error': 'Internal server error'}), 500
