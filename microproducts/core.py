"""
Persistence API for microproduct submissions.

:class:`SubmissionService` implements the read-modify-write protocol against
a :class:`.FileStore`. Records are validated with :mod:`.schema`, serialized
with :mod:`.codec`, and named with :mod:`.filename`.

Every write to an existing file carries the revision that was read moments
earlier, so that a concurrent change causes the write to fail with
:class:`.StoreConflict` rather than silently overwriting it. Nothing in this
module retries a failed write; the caller may retry the whole operation,
which re-reads the file.

.. warning::

   A change of status deletes the file and recreates it under a new name.
   The store offers no way to do both in one step, so a failure in between
   leaves the submission missing until it is restored. See
   :meth:`SubmissionService.set_status`.

"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from . import codec, schema
from .domain import RECORD_FIELDS, ListedSubmission, Status, StoredFile, \
    TeamMember, get_tzaware_utc_now
from .exceptions import DecodeError, FieldError, IncompleteRename, \
    MalformedFilename, NotFound, StoreError, ValidationError
from .filename import make_filename, parse_filename, rename_for_status
from .services.store import FileStore

logger = logging.getLogger(__name__)

YAML_EXTENSIONS = ('.yaml', '.yml')


@dataclass(frozen=True)
class ServiceConfig:
    """Parameters for :class:`SubmissionService`."""

    submissions_path: str = 'submissions'
    """Directory in the store that holds one file per submission."""

    duration_weeks_min: int = 2
    duration_weeks_max: int = 12

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'ServiceConfig':
        """Build the parameters from an application config."""
        return cls(
            submissions_path=config.get('SUBMISSIONS_PATH',
                                        cls.submissions_path),
            duration_weeks_min=int(config.get('DURATION_WEEKS_MIN',
                                              cls.duration_weeks_min)),
            duration_weeks_max=int(config.get('DURATION_WEEKS_MAX',
                                              cls.duration_weeks_max))
        )


class SubmissionService:
    """Creates, lists, and updates submissions in a :class:`.FileStore`."""

    def __init__(self, store: FileStore,
                 config: Optional[ServiceConfig] = None) -> None:
        """Load the payload validators for this configuration."""
        self.store = store
        self.config = config or ServiceConfig()
        low, high = self.config.duration_weeks_min, \
            self.config.duration_weeks_max
        self._validate_submission = schema.load('submission.json', {
            'duration_weeks': {
                'minimum': low,
                'maximum': high,
                'description': f'Duration must be a whole number of weeks,'
                               f' between {low} and {high}'
            }
        })
        self._validate_join = schema.load('join.json')
        self._validate_status = schema.load('status.json')

    def _path(self, filename: str) -> str:
        # Filenames come from clients; they must not escape the directory.
        if '/' in filename or '\\' in filename or filename in ('.', '..'):
            raise ValidationError([
                FieldError('filename', 'Filename must not contain a path')
            ])
        return f'{self.config.submissions_path.strip("/")}/{filename}'

    def _record_path(self, filename: str) -> str:
        if not filename.lower().endswith(YAML_EXTENSIONS):
            raise ValidationError([
                FieldError('filename', 'Filename must name a YAML submission'
                                       ' record')
            ])
        return self._path(filename)

    def create(self, payload: Mapping[str, Any]) -> str:
        """
        Validate and store a new submission.

        Parameters
        ----------
        payload : dict
            Submission fields, as entered by the submitter. Keys that are not
            part of a submission record are ignored.

        Returns
        -------
        str
            Filename of the new submission, with ``pending`` status.

        Raises
        ------
        :class:`.ValidationError`
            Raised if the payload violates any field rule.
        :class:`.StoreConflict`
            Raised if a file with the same name already exists.

        """
        self._validate_submission(payload)
        now = get_tzaware_utc_now()
        record: Dict[str, Any] = {
            key: payload[key] for key in RECORD_FIELDS if key in payload
        }
        record['team_members'] = \
            codec.normalize_team_members(payload.get('team_members'))
        # The schema accepts integral floats such as 6.0 as integers.
        record['duration_weeks'] = int(record['duration_weeks'])
        record.setdefault('dependencies', '')
        record['submitted_date'] = now.isoformat()

        filename = make_filename(Status.PENDING, now, payload['title'])
        logger.debug('Creating %s', filename)
        self.store.put(self._path(filename),
                       codec.encode(record).encode('utf-8'),
                       f'New microproduct submission: {payload["title"]}')
        logger.info('Created submission %s', filename)
        return filename

    def list(self) -> List[ListedSubmission]:
        """
        Read all of the submissions in the store.

        A file that cannot be read or parsed is still included, with
        ``parsed`` set to ``None`` and ``error`` describing the problem.
        Files that are created or renamed while the listing is in progress
        may or may not be included.
        """
        try:
            entries = self.store.list(self.config.submissions_path)
        except NotFound:
            logger.warning('Submissions directory %s does not exist',
                           self.config.submissions_path)
            return []
        listing = []
        for entry in entries:
            if entry.type != 'file' \
                    or not entry.name.lower().endswith(YAML_EXTENSIONS):
                continue
            try:
                stored = self.store.get(entry.path)
            except StoreError as e:
                logger.error('Could not read %s: %s', entry.path, e)
                listing.append(ListedSubmission(
                    name=entry.name,
                    path=entry.path,
                    status=_status_of(entry.name),
                    error=f'Could not read file: {e}'
                ))
                continue
            listing.append(_describe(entry.name, stored))
        return listing

    def get(self, filename: str) -> ListedSubmission:
        """
        Read a single submission.

        Raises
        ------
        :class:`.NotFound`
            Raised if there is no such submission.

        """
        return _describe(filename, self.store.get(self._path(filename)))

    def join(self, filename: str, name: str,
             email: Optional[str] = None) -> TeamMember:
        """
        Add a member to the team of a submission.

        Existing members in the legacy text format are converted to the
        structured format as part of the update. A file that cannot be
        parsed is treated as an empty record, and is overwritten.

        Returns
        -------
        :class:`.TeamMember`
            The member that was added.

        Raises
        ------
        :class:`.ValidationError`
            Raised if ``filename`` or ``name`` is missing, ``filename`` is not
            a YAML file, or ``email`` is not a valid address.
        :class:`.NotFound`
            Raised if there is no such submission.
        :class:`.StoreConflict`
            Raised if the file changed after it was read. No member is
            added; the caller may retry.

        """
        self._validate_join({'filename': filename, 'name': name,
                             'email': email})
        path = self._record_path(filename)
        stored = self.store.get(path)
        record = _decode(stored)

        members = codec.normalize_team_members(record.get('team_members'))
        member = TeamMember(name=name.strip(), email=(email or '').strip(),
                            joined_date=get_tzaware_utc_now().isoformat())
        members.append(member)
        record['team_members'] = members

        self.store.put(path, codec.encode(record).encode('utf-8'),
                       f'Add joiner to {filename}', revision=stored.revision)
        logger.info('%s joined %s', member.name, filename)
        return member

    def set_status(self, filename: str,
                   new_status: Union[Status, str]) -> str:
        """
        Change the status of a submission by renaming its file.

        The old file is deleted (conditioned on the revision that was read)
        and a new file with the same content is created. If creating the new
        file fails, the old file is put back if possible and
        :class:`.IncompleteRename` is raised; a failed rename is never
        reported as a success.

        Returns
        -------
        str
            The new filename.

        Raises
        ------
        :class:`.ValidationError`
            Raised if ``new_status`` is not a recognized status, or is the
            current status. Nothing is read from the store in the first case.
        :class:`.NotFound`
            Raised if there is no such submission.
        :class:`.MalformedFilename`
            Raised if ``filename`` does not have exactly one ``__``.
        :class:`.StoreConflict`
            Raised if the file changed after it was read. Nothing is renamed.
        :class:`.IncompleteRename`
            Raised if the old file was deleted but the new one could not be
            created.

        """
        if isinstance(new_status, Status):
            new_status = new_status.value
        self._validate_status({'filename': filename,
                               'newStatus': new_status})
        path = self._path(filename)
        stored = self.store.get(path)
        new_filename = rename_for_status(filename, new_status)
        if new_filename == filename:
            raise ValidationError([
                FieldError('newStatus', f'Submission is already {new_status}')
            ])
        message = f'Status change: {filename} -> {new_filename}'

        self.store.delete(path, message, stored.revision)
        try:
            self.store.put(self._path(new_filename), stored.content, message)
        except StoreError as e:
            logger.error('Deleted %s but could not create %s: %s',
                         filename, new_filename, e)
            restored = self._restore(path, stored.content, filename)
            raise IncompleteRename(filename, new_filename, restored) from e
        logger.info('Renamed %s to %s', filename, new_filename)
        return new_filename

    def _restore(self, path: str, content: bytes, filename: str) -> bool:
        try:
            self.store.put(path, content,
                           f'Restore {filename} after failed status change')
        except StoreError as e:
            logger.error('Could not restore %s; recover it from the'
                         ' repository history: %s', filename, e)
            return False
        logger.warning('Restored %s after failed status change', filename)
        return True


def _status_of(filename: str) -> Optional[Status]:
    try:
        return parse_filename(filename).status
    except MalformedFilename:
        return None


def _decode(stored: StoredFile) -> Dict[str, Any]:
    try:
        text = stored.content.decode('utf-8')
    except UnicodeDecodeError:
        logger.warning('Treating non-UTF-8 file %s as empty', stored.path)
        return {}
    return codec.decode(text)


def _describe(name: str, stored: StoredFile) -> ListedSubmission:
    item = ListedSubmission(name=name, path=stored.path,
                            revision=stored.revision, status=_status_of(name))
    try:
        item.raw = stored.content.decode('utf-8')
        item.parsed = codec.parse(item.raw)
    except (UnicodeDecodeError, DecodeError) as e:
        logger.warning('Could not parse %s: %s', stored.path, e)
        item.error = f'Could not parse file: {e}'
    return item
