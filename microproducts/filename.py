"""
Filenames of submission records.

The filename is both the identity of a submission and the only record of
its workflow status::

    {status}__{YYYY-MM-DD}-{slug}.yaml

Everything after the ``__`` separator is fixed when the submission is
created, and is carried over verbatim when the status changes.
"""

import re
from datetime import date, datetime
from typing import NamedTuple, Tuple, Union

from .domain import Status
from .exceptions import MalformedFilename

SEPARATOR = '__'
EXTENSION = '.yaml'
MAX_SLUG_LENGTH = 50

_NON_ALPHANUMERIC = re.compile(r'[^a-z0-9]+')


class FilenameParts(NamedTuple):
    """A filename split at its status separator."""

    status: Status
    suffix: str
    """The creation date and slug, including the extension."""


def slug(title: str) -> str:
    """
    Generate a filename-safe slug from a submission title.

    Runs of characters outside ``[a-z0-9]`` (after lowercasing) become a
    single hyphen. Leading and trailing hyphens are kept, since existing
    filenames were generated the same way.
    """
    return _NON_ALPHANUMERIC.sub('-', title.lower())[:MAX_SLUG_LENGTH]


def make_filename(status: Union[Status, str],
                  created: Union[date, datetime], title: str) -> str:
    """Generate the filename for a submission."""
    if isinstance(created, datetime):
        created = created.date()
    return (f'{Status(status).value}{SEPARATOR}{created.isoformat()}'
            f'-{slug(title)}{EXTENSION}')


def _split(filename: str) -> Tuple[str, str]:
    parts = filename.split(SEPARATOR)
    if len(parts) != 2:
        raise MalformedFilename(f'Expected exactly one "{SEPARATOR}" in'
                                f' filename: {filename}')
    prefix, suffix = parts
    return prefix, suffix


def rename_for_status(filename: str, status: Union[Status, str]) -> str:
    """
    Generate the filename for a submission after a change of status.

    Raises
    ------
    :class:`.MalformedFilename`
        Raised if ``filename`` does not contain exactly one separator.

    """
    _, suffix = _split(filename)
    return f'{Status(status).value}{SEPARATOR}{suffix}'


def parse_filename(filename: str) -> FilenameParts:
    """
    Get the status and suffix from a filename.

    Raises
    ------
    :class:`.MalformedFilename`
        Raised if ``filename`` does not contain exactly one separator, or if
        the prefix is not a recognized status.

    """
    prefix, suffix = _split(filename)
    try:
        status = Status(prefix)
    except ValueError as e:
        raise MalformedFilename(f'Unknown status "{prefix}" in filename:'
                                f' {filename}') from e
    return FilenameParts(status, suffix)
