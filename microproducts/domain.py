"""Data structures for microproduct submissions."""

from typing import NamedTuple, Optional, Dict, Any, Tuple
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pytz import UTC


class Status(Enum):
    """Workflow states of a submission, encoded in its filename."""

    PENDING = 'pending'
    APPROVED = 'approved'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'
    REJECTED = 'rejected'


RECORD_FIELDS: Tuple[str, ...] = (
    'title',
    'purpose',
    'deliverable',
    'output_type',
    'scope',
    'target_audience',
    'releasability',
    'duration_weeks',
    'milestones',
    'effort_estimate',
    'lead_name',
    'lead_email',
    'team_members',
    'focus_area',
    'dependencies',
    'submitted_date',
)
"""Fields of a submission record, in the order that they are serialized."""


def get_tzaware_utc_now() -> datetime:
    """Generate a datetime for the current moment in UTC."""
    return datetime.now(UTC)


@dataclass
class TeamMember:
    """A person on the team that will deliver a microproduct."""

    name: str
    email: str = ''
    joined_date: Optional[str] = None
    """ISO-8601 timestamp; only set for members who joined after creation."""

    def to_dict(self) -> Dict[str, str]:
        """Generate a dict representation, omitting an unset join date."""
        data = {'name': self.name, 'email': self.email}
        if self.joined_date is not None:
            data['joined_date'] = self.joined_date
        return data


class StoredFile(NamedTuple):
    """Content of a file in the store, and the revision that was read."""

    path: str
    content: bytes
    revision: str


class DirectoryEntry(NamedTuple):
    """An item in a directory listing."""

    name: str
    path: str
    type: str


@dataclass
class ListedSubmission:
    """A submission file as read from the store, for display."""

    name: str
    path: str
    revision: Optional[str] = None
    status: Optional[Status] = None
    parsed: Optional[Dict[str, Any]] = None
    """Decoded record, or ``None`` if the file could not be read/parsed."""

    raw: Optional[str] = None
    error: Optional[str] = None
    """Describes why ``parsed`` is missing."""

    def to_dict(self) -> dict:
        """Generate a dict representation of this listing entry."""
        return {
            'name': self.name,
            'path': self.path,
            'revision': self.revision,
            'status': self.status.value if self.status else None,
            'parsed': self.parsed,
            'raw': self.raw,
            'error': self.error
        }
