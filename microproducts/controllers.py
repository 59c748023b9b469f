"""
Request controllers.

Each controller returns a tuple of response data, HTTP status code, and
headers. Exceptions raised by :class:`.SubmissionService` are translated
into HTTP exceptions here; the application renders those as JSON with
:func:`.factory.jsonify_exception`.
"""

import logging
from http import HTTPStatus as status
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app
from werkzeug.exceptions import BadRequest, Conflict, InternalServerError, \
    NotFound, ServiceUnavailable

from . import exceptions
from .core import SubmissionService

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], int, Dict[str, str]]


class InvalidPayload(BadRequest):
    """The request body violates one or more field rules."""

    def __init__(self, error: exceptions.ValidationError) -> None:
        """Keep the individual field errors for the response body."""
        super(InvalidPayload, self).__init__('Validation failed')
        self.details: List[Dict[str, str]] = \
            [e.to_dict() for e in error.errors]


def get_service() -> SubmissionService:
    """Get the :class:`.SubmissionService` for the current application."""
    service: SubmissionService = current_app.extensions['submissions']
    return service


def service_status() -> Response:
    """Handle requests for the status of this service."""
    if not get_service().store.is_available():
        raise ServiceUnavailable('Cannot access the submission store')
    return {'success': True, 'message': 'Connected to the submission store'},\
        status.OK, {}


def create_submission(data: Dict[str, Any]) -> Response:
    """
    Create a new submission.

    Parameters
    ----------
    data : dict
        Submission fields from the request body.

    Returns
    -------
    dict
        Data for the response body.
    int
        HTTP response status code.
    dict
        Headers to add to the response.

    """
    logger.debug('Received request to create submission: %s', data)
    try:
        filename = get_service().create(data)
    except exceptions.ValidationError as e:
        raise InvalidPayload(e) from e
    except exceptions.StoreConflict as e:
        raise Conflict('A submission with this title was already made'
                       ' today') from e
    except exceptions.StoreError as e:
        logger.error('Problem interacting with the store: (%s) %s',
                     type(e).__name__, e)
        raise InternalServerError('Could not store submission') from e
    return {
        'success': True,
        'filename': filename,
        'message': 'Submission created successfully'
    }, status.CREATED, {}


def list_submissions() -> Response:
    """List all submissions, including any that could not be parsed."""
    try:
        listing = get_service().list()
    except exceptions.StoreError as e:
        logger.error('Could not list submissions: %s', e)
        raise InternalServerError('Could not list submissions') from e
    return {'success': True, 'files': [item.to_dict() for item in listing]},\
        status.OK, {}


def get_submission(filename: str) -> Response:
    """Retrieve a single submission."""
    try:
        item = get_service().get(filename)
    except exceptions.ValidationError as e:
        raise InvalidPayload(e) from e
    except exceptions.NotFound as e:
        raise NotFound(f'No such submission: {filename}') from e
    except exceptions.StoreError as e:
        logger.error('Could not read %s: %s', filename, e)
        raise InternalServerError('Could not read submission') from e
    return {'success': True, 'file': item.to_dict()}, status.OK, {}


def join_submission(data: Dict[str, Any]) -> Response:
    """
    Add the requester to the team of a submission.

    Parameters
    ----------
    data : dict
        Request body with ``filename``, ``name``, and optionally ``email``.

    """
    filename: Optional[str] = data.get('filename')
    try:
        get_service().join(filename, data.get('name'), data.get('email'))
    except exceptions.ValidationError as e:
        raise InvalidPayload(e) from e
    except exceptions.NotFound as e:
        raise NotFound(f'No such submission: {filename}') from e
    except exceptions.StoreConflict as e:
        raise Conflict('The submission changed while joining; please try'
                       ' again') from e
    except exceptions.StoreError as e:
        logger.error('Could not join %s: %s', filename, e)
        raise InternalServerError('Could not join submission') from e
    return {'success': True, 'message': 'Joined'}, status.OK, {}


def update_status(data: Dict[str, Any]) -> Response:
    """
    Change the status of a submission.

    Parameters
    ----------
    data : dict
        Request body with ``filename`` and ``newStatus``.

    """
    filename: Optional[str] = data.get('filename')
    new_status = data.get('newStatus')
    try:
        new_filename = get_service().set_status(filename, new_status)
    except exceptions.ValidationError as e:
        raise InvalidPayload(e) from e
    except exceptions.MalformedFilename as e:
        raise BadRequest('Invalid filename format') from e
    except exceptions.NotFound as e:
        raise NotFound(f'No such submission: {filename}') from e
    except exceptions.StoreConflict as e:
        raise Conflict('The submission changed before its status could be'
                       ' updated; please try again') from e
    except exceptions.StoreError as e:
        logger.error('Could not change status of %s: %s', filename, e)
        raise InternalServerError(str(e)) from e
    return {
        'success': True,
        'oldFilename': filename,
        'newFilename': new_filename,
        'message': f'Status updated to {new_status}'
    }, status.OK, {}
