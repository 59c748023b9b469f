"""
Integration with the GitHub contents API.

Submission records live as files in a GitHub repository. The git blob SHA
of each file serves as its revision marker: GitHub refuses to update or
delete a file unless the request carries the SHA of the current blob, and
answers ``409 Conflict`` when it is stale.

To use this in a Flask application, the following config parameters must be
set:

- ``GITHUB_REPO_OWNER``: user or organization that owns the repository
- ``GITHUB_REPO_NAME``: name of the repository
- ``GITHUB_TOKEN``: token with read/write access to repository contents

See :mod:`microproducts.config` for the optional parameters.
"""

import base64
import logging
from dataclasses import dataclass
from http import HTTPStatus as status
from typing import Any, Collection, List, Mapping, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from retry.api import retry_call
from urllib3.util.retry import Retry

from ..domain import StoredFile, DirectoryEntry
from ..exceptions import NotFound, StoreConflict, StoreUnavailable
from .store import FileStore

logger = logging.getLogger(__name__)

API_VERSION = '2022-11-28'


@dataclass(frozen=True)
class StoreConfig:
    """Connection parameters for :class:`GitHubStore`."""

    owner: str
    repo: str
    token: Optional[str] = None
    branch: Optional[str] = None
    """Branch to read and write; the repository default if ``None``."""

    endpoint: str = 'https://api.github.com'
    verify: bool = True
    timeout: float = 10.0
    """Seconds to wait for GitHub to respond to a single request."""

    read_tries: int = 3
    """Attempts for idempotent reads; writes are only attempted once."""

    read_retry_delay: float = 0.5

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'StoreConfig':
        """Build the connection parameters from an application config."""
        return cls(
            owner=config['GITHUB_REPO_OWNER'],
            repo=config['GITHUB_REPO_NAME'],
            token=config.get('GITHUB_TOKEN') or None,
            branch=config.get('GITHUB_BRANCH') or None,
            endpoint=config.get('GITHUB_ENDPOINT') or cls.endpoint,
            verify=bool(config.get('GITHUB_VERIFY', True)),
            timeout=float(config.get('GITHUB_TIMEOUT') or cls.timeout),
            read_tries=int(config.get('GITHUB_READ_TRIES', cls.read_tries)),
            read_retry_delay=float(config.get('GITHUB_READ_RETRY_DELAY',
                                              cls.read_retry_delay))
        )


class GitHubStore(FileStore):
    """Stores files in a GitHub repository via the contents API."""

    def __init__(self, config: StoreConfig) -> None:
        """Open an HTTP session with the GitHub API."""
        self._config = config
        self._session = requests.Session()
        adapter = HTTPAdapter(max_retries=self.get_retry_config())
        self._session.mount('https://', adapter)
        self._session.mount('http://', adapter)
        self._session.headers.update({
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': API_VERSION,
        })
        if config.token:
            self._session.headers['Authorization'] = f'Bearer {config.token}'

    @classmethod
    def init_app(cls, app: Any) -> None:
        """Set default configuration params for an application instance."""
        app.config.setdefault('GITHUB_ENDPOINT', StoreConfig.endpoint)
        app.config.setdefault('GITHUB_BRANCH', None)
        app.config.setdefault('GITHUB_VERIFY', True)
        app.config.setdefault('GITHUB_TIMEOUT', StoreConfig.timeout)

    @classmethod
    def get_session(cls, app: Any) -> 'GitHubStore':
        """Get a new session with the repository configured on ``app``."""
        return cls(StoreConfig.from_mapping(app.config))

    def get_retry_config(self) -> Retry:
        """
        Configure to only retry on connection errors.

        A write that reached GitHub may have been applied even if we never
        saw the response, so retrying is left to the application.
        """
        return Retry(total=3, read=0, connect=3, status=0,
                     backoff_factor=0.5)

    @property
    def repository(self) -> str:
        """The ``owner/repo`` slug of the repository."""
        return f'{self._config.owner}/{self._config.repo}'

    def _url(self, path: str = '') -> str:
        base = f'{self._config.endpoint.rstrip("/")}/repos/{self.repository}'
        if not path:
            return base
        return f'{base}/contents/{quote(path.strip("/"))}'

    def _request(self, method: str, path: Optional[str] = None,
                 conflict: Collection[int] = (),
                 **kwargs: Any) -> requests.Response:
        url = self._url(path or '')
        try:
            response = self._session.request(method, url,
                                             timeout=self._config.timeout,
                                             verify=self._config.verify,
                                             **kwargs)
        except requests.exceptions.RequestException as e:
            raise StoreUnavailable(f'Could not reach GitHub: {e}') from e

        if response.status_code == status.NOT_FOUND:
            raise NotFound(f'No such path in {self.repository}: {path}')
        if response.status_code in conflict:
            raise StoreConflict(f'{path} has changed since it was read:'
                                f' {_reason(response)}')
        if response.status_code >= 400:
            raise StoreUnavailable(f'GitHub responded with'
                                   f' {response.status_code}:'
                                   f' {_reason(response)}')
        return response

    def _ref(self) -> dict:
        return {'ref': self._config.branch} if self._config.branch else {}

    def _with_branch(self, body: dict) -> dict:
        if self._config.branch:
            body['branch'] = self._config.branch
        return body

    def _read(self, func: Any, *args: Any) -> Any:
        return retry_call(func, fargs=args, exceptions=StoreUnavailable,
                          tries=max(self._config.read_tries, 1),
                          delay=self._config.read_retry_delay, backoff=2,
                          logger=logger)

    def get(self, path: str) -> StoredFile:
        """Get the content of a file and its blob SHA."""
        return self._read(self._get, path)

    def _get(self, path: str) -> StoredFile:
        data = self._request('get', path, params=self._ref()).json()
        if not isinstance(data, dict) or data.get('type') != 'file':
            raise NotFound(f'Not a file in {self.repository}: {path}')
        content = base64.b64decode(data.get('content') or '')
        return StoredFile(path=data.get('path', path), content=content,
                          revision=data['sha'])

    def list(self, dir_path: str) -> List[DirectoryEntry]:
        """List the entries of a directory in the repository."""
        return self._read(self._list, dir_path)

    def _list(self, dir_path: str) -> List[DirectoryEntry]:
        data = self._request('get', dir_path, params=self._ref()).json()
        if not isinstance(data, list):
            raise NotFound(f'Not a directory in {self.repository}:'
                           f' {dir_path}')
        return [DirectoryEntry(name=item['name'], path=item['path'],
                               type=item['type']) for item in data]

    def put(self, path: str, content: bytes, message: str,
            revision: Optional[str] = None) -> str:
        """Commit the content of a file, and return the new blob SHA."""
        body = {
            'message': message,
            'content': base64.b64encode(content).decode('ascii')
        }
        if revision is not None:
            body['sha'] = revision
        # GitHub answers 422 when no SHA is given for a file that exists.
        response = self._request('put', path, json=self._with_branch(body),
                                 conflict=(status.CONFLICT,
                                           status.UNPROCESSABLE_ENTITY))
        new_revision: str = response.json()['content']['sha']
        logger.debug('Committed %s at %s', path, new_revision)
        return new_revision

    def delete(self, path: str, message: str, revision: str) -> None:
        """Commit the removal of a file."""
        body = {'message': message, 'sha': revision}
        self._request('delete', path, json=self._with_branch(body),
                      conflict=(status.CONFLICT,
                                status.UNPROCESSABLE_ENTITY))
        logger.debug('Deleted %s at %s', path, revision)

    def is_available(self) -> bool:
        """Check our connection to the repository."""
        try:
            self._request('get')
        except Exception as e:
            logger.error('Error when calling GitHub: %s', e)
            return False
        return True


def _reason(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return str(response.reason)
    if isinstance(data, dict) and 'message' in data:
        return str(data['message'])
    return str(response.reason)
