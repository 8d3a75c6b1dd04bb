from flask import jsonify, current_app

from hvz import db
from hvz.services import errors

# Stable status per error kind
STATUS_BY_ERROR = [
    (errors.NotFound, 404),
    (errors.DuplicateRegistration, 409),
    (errors.IllegalPhaseTransition, 409),
    (errors.GameNotActive, 409),
    (errors.NoPlayersRegistered, 400),
    (errors.GameNotInWindow, 400),
    (errors.InvalidGameConfiguration, 400),
    (errors.InvalidBiteCode, 400),
    (errors.InvalidPointOfInterest, 400),
]


class BadRequest(Exception):
    """Malformed request payload."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


def status_for(exc: errors.HvzError) -> int:
    for error_cls, status in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status
    return 400


def register_error_handlers(flask_app) -> None:
    @flask_app.errorhandler(errors.HvzError)
    def handle_hvz_error(exc):
        db.session.rollback()
        status = status_for(exc)
        current_app.logger.info(f"[error] {exc.kind} status={status} {exc.message}")
        return jsonify({'error': exc.kind, 'message': exc.message}), status

    @flask_app.errorhandler(BadRequest)
    def handle_bad_request(exc):
        db.session.rollback()
        return jsonify({'error': exc.message}), 400
