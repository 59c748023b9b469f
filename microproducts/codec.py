"""
Serialization of submission records to and from YAML.

Records are stored as block-style YAML mappings, one file per submission.
Older files store ``team_members`` as a single block of text with one member
per line, in the form ``Name <email>``; newer files store a list of
mappings. :func:`normalize_team_members` accepts either shape and always
produces the structured form, so any file that is written back through
:func:`encode` is migrated to the list format.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .domain import RECORD_FIELDS, TeamMember
from .exceptions import DecodeError

logger = logging.getLogger(__name__)

LEGACY_MEMBER = re.compile(r'^(.*)\s*<([^>]+)>$')
"""A line in the legacy team format, e.g. ``Alice Smith <alice@x.com>``."""


class _Dumper(yaml.SafeDumper):
    """Writes multi-line text as literal blocks, to keep files readable."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.Node:
    style = '|' if '\n' in data else None
    return dumper.represent_scalar('tag:yaml.org,2002:str', data, style=style)


_Dumper.add_representer(str, _represent_str)


def normalize_team_members(value: Any) -> List[TeamMember]:
    """
    Coerce a ``team_members`` value of any known shape to a list of members.

    Parameters
    ----------
    value : object
        Either a list of mappings (or bare names), or a block of text in the
        legacy one-member-per-line format. Anything else yields an empty
        list.

    Returns
    -------
    list
        :class:`.TeamMember` instances, in their original order. Entries
        without a name are dropped.

    """
    if not value:
        return []
    if isinstance(value, str):
        return _parse_legacy_members(value)
    if isinstance(value, list):
        return [member for member in map(_coerce_member, value)
                if member is not None]
    return []


def _coerce_member(entry: Any) -> Optional[TeamMember]:
    if isinstance(entry, TeamMember):
        return entry if entry.name else None
    if isinstance(entry, str):
        name = entry.strip()
        return TeamMember(name=name) if name else None
    if isinstance(entry, Mapping):
        name = _as_text(entry.get('name'))
        if not name:
            return None
        joined = entry.get('joined_date')
        return TeamMember(name=name, email=_as_text(entry.get('email')),
                          joined_date=_as_text(joined) if joined else None)
    return None


def _parse_legacy_members(text: str) -> List[TeamMember]:
    members = []
    for line in text.splitlines():
        line = line.strip()
        match = LEGACY_MEMBER.match(line)
        if match:
            member = TeamMember(name=match.group(1).strip(),
                                email=match.group(2).strip())
        else:
            member = TeamMember(name=line)
        if member.name:
            members.append(member)
    return members


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def encode(record: Mapping[str, Any]) -> str:
    """
    Serialize a submission record as YAML.

    Known fields are written first, in :const:`.RECORD_FIELDS` order; any
    other keys already present in the record (e.g. from a hand-edited file)
    follow, so that a read-modify-write cycle does not drop them.
    """
    data: Dict[str, Any] = {}
    for key in RECORD_FIELDS:
        if key in record:
            data[key] = record[key]
    for key, value in record.items():
        if key not in data:
            data[key] = value
    if 'team_members' in data:
        data['team_members'] = [
            member.to_dict()
            for member in normalize_team_members(data['team_members'])
        ]
    return yaml.dump(data, Dumper=_Dumper, sort_keys=False,
                     allow_unicode=True, default_flow_style=False)


def parse(text: str) -> Dict[str, Any]:
    """
    Parse YAML text into a submission record.

    Unquoted timestamps, at any depth, are returned as ISO-8601 strings
    rather than :class:`datetime` objects, matching what :func:`encode`
    writes. The result contains only JSON-compatible values.

    Raises
    ------
    :class:`.DecodeError`
        Raised if the text is not valid YAML, is not a mapping, or contains
        values that a record cannot hold (e.g. ``!!binary`` or ``!!set``).

    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DecodeError(f'Invalid YAML: {e}') from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DecodeError(f'Expected a mapping, got {type(data).__name__}')
    return {str(key): _coerce(value, str(key))
            for key, value in data.items()}


def _coerce(value: Any, where: str) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, list):
        return [_coerce(item, f'{where}.{i}') for i, item in enumerate(value)]
    if isinstance(value, dict):
        if not all(isinstance(key, str) for key in value):
            raise DecodeError(f'Expected text keys in {where}')
        return {key: _coerce(item, f'{where}.{key}')
                for key, item in value.items()}
    raise DecodeError(f'Unsupported value of type {type(value).__name__}'
                      f' in {where}')


def decode(text: str) -> Dict[str, Any]:
    """Parse YAML text into a record, or an empty record if malformed."""
    try:
        return parse(text)
    except DecodeError as e:
        logger.warning('Treating malformed record as empty: %s', e)
        return {}
