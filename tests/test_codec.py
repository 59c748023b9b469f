"""Tests for :mod:`microproducts.codec`."""

from unittest import TestCase

import yaml

from microproducts import codec
from microproducts.domain import TeamMember
from microproducts.exceptions import DecodeError

from .util import valid_payload


class TestNormalizeTeamMembers(TestCase):
    """Tests for :func:`.codec.normalize_team_members`."""

    def test_empty(self):
        """Missing or empty values yield no members."""
        for value in (None, '', [], {}):
            self.assertEqual(codec.normalize_team_members(value), [])

    def test_legacy_text(self):
        """Lines of legacy text are parsed into names and emails."""
        members = codec.normalize_team_members('Alice <a@x.com>\nBob')
        self.assertEqual(members, [TeamMember('Alice', 'a@x.com'),
                                   TeamMember('Bob', '')])

    def test_legacy_text_with_blank_lines(self):
        """Blank lines and surrounding whitespace are ignored."""
        members = codec.normalize_team_members(
            '  Alice Smith <a@x.com>  \r\n\r\n   \nBob Jones\n'
        )
        self.assertEqual(members, [TeamMember('Alice Smith', 'a@x.com'),
                                   TeamMember('Bob Jones', '')])

    def test_legacy_line_with_only_email(self):
        """A line with an email but no name is dropped."""
        self.assertEqual(codec.normalize_team_members('<a@x.com>'), [])

    def test_structured(self):
        """A list of mappings is kept, with missing emails set to empty."""
        members = codec.normalize_team_members([
            {'name': 'Alice', 'email': 'a@x.com'},
            {'name': 'Bob'},
            {'name': 'Carol', 'email': None},
        ])
        self.assertEqual(members, [TeamMember('Alice', 'a@x.com'),
                                   TeamMember('Bob', ''),
                                   TeamMember('Carol', '')])

    def test_structured_keeps_join_date(self):
        """The join date of a member who joined later is kept."""
        members = codec.normalize_team_members([
            {'name': 'Alice', 'email': '',
             'joined_date': '2024-01-02T03:04:05+00:00'}
        ])
        self.assertEqual(members[0].joined_date, '2024-01-02T03:04:05+00:00')

    def test_bare_names_in_list(self):
        """Bare strings in a list are names without an email."""
        members = codec.normalize_team_members(['Alice', '  ', 'Bob'])
        self.assertEqual(members, [TeamMember('Alice'), TeamMember('Bob')])

    def test_unusable_entries_are_dropped(self):
        """Entries without a name, or of an unknown shape, are dropped."""
        members = codec.normalize_team_members([
            {'email': 'a@x.com'}, {'name': ''}, 42, None, ['x'],
            {'name': 'Dana'}
        ])
        self.assertEqual(members, [TeamMember('Dana')])

    def test_other_shapes(self):
        """Values that are neither text nor a list yield no members."""
        self.assertEqual(codec.normalize_team_members({'name': 'Alice'}), [])
        self.assertEqual(codec.normalize_team_members(42), [])

    def test_idempotent(self):
        """Normalizing the structured form of legacy text changes nothing."""
        legacy = 'Alice <a@x.com>\nBob\n\nCarol Danvers <carol@x.org>'
        once = codec.normalize_team_members(legacy)
        twice = codec.normalize_team_members([m.to_dict() for m in once])
        self.assertEqual(once, twice)


class TestEncodeDecode(TestCase):
    """Tests for :func:`.codec.encode` and :func:`.codec.decode`."""

    def setUp(self):
        """Start with a normalized record."""
        self.record = valid_payload(
            milestones='Week 2: schema\nWeek 4: ingest\nWeek 6: release',
            submitted_date='2024-01-01T12:00:00.123456+00:00'
        )
        self.record['team_members'] = [
            m.to_dict()
            for m in codec.normalize_team_members(self.record['team_members'])
        ]

    def test_round_trip(self):
        """A normalized record survives encoding and decoding."""
        self.assertEqual(codec.decode(codec.encode(self.record)),
                         self.record)

    def test_field_order(self):
        """Fields are written in record order, whatever the input order."""
        shuffled = dict(reversed(list(self.record.items())))
        keys = list(yaml.safe_load(codec.encode(shuffled)).keys())
        self.assertEqual(keys[0], 'title')
        self.assertEqual(keys[-1], 'submitted_date')

    def test_unknown_fields_are_kept(self):
        """Keys outside the record schema are not dropped."""
        self.record['reviewer_notes'] = 'Looks good'
        decoded = codec.decode(codec.encode(self.record))
        self.assertEqual(decoded['reviewer_notes'], 'Looks good')

    def test_multiline_text_is_a_block(self):
        """Multi-line values are written as literal blocks."""
        self.assertIn('milestones: |', codec.encode(self.record))

    def test_legacy_team_is_migrated(self):
        """Legacy team text is written as a list."""
        self.record['team_members'] = 'Alice <a@x.com>\nBob'
        decoded = codec.decode(codec.encode(self.record))
        self.assertEqual(decoded['team_members'], [
            {'name': 'Alice', 'email': 'a@x.com'},
            {'name': 'Bob', 'email': ''}
        ])

    def test_team_member_instances(self):
        """:class:`.TeamMember` instances are written as mappings."""
        self.record['team_members'] = [TeamMember('Alice', 'a@x.com', 'now')]
        decoded = codec.decode(codec.encode(self.record))
        self.assertEqual(decoded['team_members'], [
            {'name': 'Alice', 'email': 'a@x.com', 'joined_date': 'now'}
        ])

    def test_decode_malformed(self):
        """Malformed YAML decodes to an empty record."""
        self.assertEqual(codec.decode('title: [unclosed'), {})

    def test_decode_not_a_mapping(self):
        """A YAML document that is not a mapping decodes to an empty record."""
        self.assertEqual(codec.decode('- one\n- two\n'), {})
        self.assertEqual(codec.decode('just text'), {})

    def test_decode_empty(self):
        """An empty document decodes to an empty record."""
        self.assertEqual(codec.decode(''), {})

    def test_parse_malformed(self):
        """The strict parser raises on malformed YAML."""
        with self.assertRaises(DecodeError):
            codec.parse('title: [unclosed')
        with self.assertRaises(DecodeError):
            codec.parse('- one\n- two\n')

    def test_parse_unquoted_timestamp(self):
        """Unquoted timestamps are returned as ISO-8601 text."""
        data = codec.parse('submitted_date: 2024-01-01T00:00:00Z\n')
        self.assertIsInstance(data['submitted_date'], str)
        self.assertTrue(
            data['submitted_date'].startswith('2024-01-01T00:00:00')
        )

    def test_parse_nested_timestamp(self):
        """Timestamps inside lists and mappings are returned as text."""
        data = codec.parse(
            'team_members:\n'
            '- name: Alice\n'
            '  joined_date: 2024-01-02\n'
        )
        self.assertEqual(data['team_members'][0]['joined_date'],
                         '2024-01-02')

    def test_parse_unsupported_values(self):
        """Values that a record cannot hold are a parse error."""
        for text in ('blob: !!binary aGVsbG8=\n',
                     'tags: !!set {a: null, b: null}\n',
                     'nested:\n  - {1: one}\n'):
            with self.assertRaises(DecodeError):
                codec.parse(text)
        self.assertEqual(codec.decode('blob: !!binary aGVsbG8=\n'), {})
