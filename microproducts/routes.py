"""Request routing."""

from functools import wraps
from typing import Any, Callable, Dict

from flask import Blueprint, Response, jsonify, make_response, request
from werkzeug.exceptions import BadRequest

from . import controllers

api = Blueprint('microproducts', __name__, url_prefix='/api/storage')


def json_response(func: Callable) -> Callable:
    """Generate a wrapper for routes that JSONifies the response body."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Response:
        data, code, head = func(*args, **kwargs)
        response: Response = make_response(jsonify(data), code, head)
        return response
    return wrapper


def get_payload() -> Dict[str, Any]:
    """Get the JSON object in the request body."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return data


@api.route('/status', methods=['GET', 'HEAD'])
@json_response
def service_status() -> Any:
    """Status check endpoint."""
    return controllers.service_status()


@api.route('', methods=['GET'])
@json_response
def list_submissions() -> Any:
    """List all submissions."""
    return controllers.list_submissions()


@api.route('', methods=['POST'])
@json_response
def create_submission() -> Any:
    """Accept a new submission."""
    return controllers.create_submission(get_payload())


@api.route('', methods=['PATCH'])
@json_response
def update_status() -> Any:
    """Change the status of a submission."""
    return controllers.update_status(get_payload())


@api.route('/files/<string:filename>', methods=['GET'])
@json_response
def get_submission(filename: str) -> Any:
    """Get a single submission."""
    return controllers.get_submission(filename)


@api.route('/join', methods=['POST'])
@json_response
def join_submission() -> Any:
    """Join the team of a submission."""
    return controllers.join_submission(get_payload())
