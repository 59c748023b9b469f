"""Helpers for tests."""

from hashlib import sha1
from typing import Dict, List, Optional

from microproducts.domain import StoredFile, DirectoryEntry
from microproducts.exceptions import NotFound, StoreConflict
from microproducts.services.store import FileStore


def valid_payload(**overrides) -> dict:
    """Generate a submission payload that passes validation."""
    payload = {
        'title': 'Orbital Debris Tracking Database',
        'purpose': 'Catalog known debris objects for conjunction analysis.',
        'deliverable': 'A queryable database of debris orbits.',
        'output_type': 'Database',
        'scope': 'Objects larger than 10cm in low earth orbit.',
        'target_audience': 'Mission planners',
        'releasability': 'public',
        'duration_weeks': 6,
        'milestones': 'Week 2: schema. Week 4: ingest. Week 6: release.',
        'effort_estimate': '2 people, part time',
        'lead_name': 'Ada Lovelace',
        'lead_email': 'ada@example.com',
        'team_members': [
            {'name': 'Charles Babbage', 'email': 'charles@example.com'}
        ],
        'focus_area': 'Research & Technology',
        'dependencies': ''
    }
    payload.update(overrides)
    return payload


class InMemoryStore(FileStore):
    """A :class:`.FileStore` that keeps files in a dict."""

    def __init__(self) -> None:
        """Start with an empty store."""
        self.files: Dict[str, bytes] = {}
        self.messages: List[str] = []
        self._revisions: Dict[str, str] = {}
        self._writes = 0

    def _revision(self, path: str) -> str:
        return sha1(path.encode('utf-8') + self.files[path]
                    + str(self._writes).encode('ascii')).hexdigest()

    def seed(self, path: str, content: str) -> str:
        """Add a file directly, and return its revision."""
        self.files[path] = content.encode('utf-8')
        self._writes += 1
        self._revisions[path] = self._revision(path)
        return self._revisions[path]

    def get(self, path: str) -> StoredFile:
        if path not in self.files:
            raise NotFound(path)
        return StoredFile(path=path, content=self.files[path],
                          revision=self._revisions[path])

    def list(self, dir_path: str) -> List[DirectoryEntry]:
        prefix = dir_path.rstrip('/') + '/'
        entries = [
            DirectoryEntry(name=path[len(prefix):], path=path, type='file')
            for path in sorted(self.files)
            if path.startswith(prefix) and '/' not in path[len(prefix):]
        ]
        if not entries:
            raise NotFound(dir_path)
        return entries

    def put(self, path: str, content: bytes, message: str,
            revision: Optional[str] = None) -> str:
        if revision is None and path in self.files:
            raise StoreConflict(f'{path} already exists')
        if revision is not None and self._revisions.get(path) != revision:
            raise StoreConflict(f'{path} has changed')
        self.files[path] = content
        self.messages.append(message)
        self._writes += 1
        self._revisions[path] = self._revision(path)
        return self._revisions[path]

    def delete(self, path: str, message: str, revision: str) -> None:
        if path not in self.files:
            raise NotFound(path)
        if self._revisions[path] != revision:
            raise StoreConflict(f'{path} has changed')
        del self.files[path]
        del self._revisions[path]
        self.messages.append(message)
