"""Exceptions raised by :mod:`microproducts`."""

from typing import List, NamedTuple


class FieldError(NamedTuple):
    """A single rule violation in a request payload."""

    field: str
    message: str

    def to_dict(self) -> dict:
        """Generate a dict representation of this error."""
        return {'field': self.field, 'message': self.message}


class ValidationError(ValueError):
    """A payload violates one or more field-level rules."""

    def __init__(self, errors: List[FieldError]) -> None:
        """Use the field errors to build an error message."""
        self.errors = list(errors)
        summary = '; '.join(f'{e.field}: {e.message}' for e in self.errors)
        super(ValidationError, self).__init__(f'Invalid payload: {summary}')

    @property
    def fields(self) -> List[str]:
        """Names of the fields that failed validation."""
        return [e.field for e in self.errors]


class DecodeError(ValueError):
    """Stored content could not be parsed as a submission record."""


class MalformedFilename(ValueError):
    """A filename does not follow the ``{status}__{suffix}`` scheme."""


class StoreError(RuntimeError):
    """Base for file store exceptions."""


class NotFound(StoreError):
    """A request was made for a file that does not exist."""


class StoreConflict(StoreError):
    """A write was rejected because the file changed since it was read."""


class StoreUnavailable(StoreError):
    """The file store could not be reached or failed unexpectedly."""


class IncompleteRename(StoreUnavailable):
    """A status change deleted the old file but could not create the new one.

    ``restored`` is ``True`` if the original file was put back at its old
    path, in which case the submission is intact under ``old_filename``.
    Otherwise the record is no longer visible under either name and needs
    manual recovery from the repository history.
    """

    def __init__(self, old_filename: str, new_filename: str,
                 restored: bool) -> None:
        """Record both filenames and the outcome of the restore attempt."""
        self.old_filename = old_filename
        self.new_filename = new_filename
        self.restored = restored
        if restored:
            msg = (f'Could not rename {old_filename} to {new_filename};'
                   f' the original file was restored')
        else:
            msg = (f'Could not rename {old_filename} to {new_filename};'
                   f' the original file was deleted and could not be'
                   f' restored')
        super(IncompleteRename, self).__init__(msg)
