"""Application factory for the microproduct submission service."""

import logging
from typing import Any, Mapping, Optional

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException, BadRequest, Conflict, \
    InternalServerError, MethodNotAllowed, NotFound, ServiceUnavailable

from .core import ServiceConfig, SubmissionService
from .routes import api
from .services import FileStore, GitHubStore


def create_app(store: Optional[FileStore] = None,
               config: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Create a new app.

    Parameters
    ----------
    store : :class:`.FileStore`
        Store for submission files. If not provided, a :class:`.GitHubStore`
        is configured from the application config.
    config : dict
        Overrides for the parameters in :mod:`microproducts.config`.

    """
    app = Flask('microproducts')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)
    logging.basicConfig(format='%(asctime)s - %(process)d: [%(levelname)s]'
                               ' %(name)s: %(message)s')
    logging.getLogger('microproducts').setLevel(app.config['LOGLEVEL'])

    if store is None:
        GitHubStore.init_app(app)
        store = GitHubStore.get_session(app)
    app.extensions['submissions'] = \
        SubmissionService(store, ServiceConfig.from_mapping(app.config))

    register_error_handlers(app)
    app.register_blueprint(api)
    return app


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(Conflict)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)
    app.errorhandler(ServiceUnavailable)(jsonify_exception)


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    exc_resp = error.get_response()
    body = {'success': False, 'error': error.description}
    details = getattr(error, 'details', None)
    if details:
        body['details'] = details
    response: Response = jsonify(body)
    response.status_code = exc_resp.status_code
    return response
