"""
Provides JSON Schema validation tools.

Request payloads are described by the JSON Schema documents in
``resources/``. Each property carries a human-readable ``description``,
which is used as the error message when a value for that property is
rejected.
"""

import copy
import json
import os
from typing import Any, Callable, Dict, List, Mapping, Optional

import jsonschema

from ..exceptions import FieldError, ValidationError

RESOURCES = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                         'resources')

Validator = Callable[[Mapping[str, Any]], None]


def load(schema_name: str,
         overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) \
        -> Validator:
    """
    Load a JSON Schema from ``resources/``.

    Parameters
    ----------
    schema_name : str
        Filename of the schema document, e.g. ``submission.json``.
    overrides : dict
        Keyword updates for individual properties, keyed by property name.
        Used to apply configurable bounds.

    Returns
    -------
    callable
        A validator function; when called with a ``dict``, validates the data
        against the schema.

    """
    with open(os.path.join(RESOURCES, schema_name)) as f:
        schema = json.load(f)
    if overrides:
        schema = copy.deepcopy(schema)
        for name, keywords in overrides.items():
            schema['properties'][name].update(keywords)

    validator_class = jsonschema.validators.validator_for(schema)
    validator_class.check_schema(schema)
    validator = validator_class(schema)

    def validate(data: Mapping[str, Any]) -> None:
        """
        Validate ``data`` against the enclosed schema.

        Raises
        ------
        :class:`.ValidationError`
            Describes every rule that ``data`` violates.

        """
        errors = _field_errors(validator.iter_errors(data))
        if errors:
            raise ValidationError(errors)
    return validate


def _field_errors(errors: Any) -> List[FieldError]:
    field_errors: Dict[FieldError, None] = {}   # Ordered, without duplicates.
    ordered = sorted(errors, key=lambda e: [str(p) for p in e.absolute_path])
    for error in ordered:
        for field_error in _describe(error):
            field_errors[field_error] = None
    return list(field_errors)


def _describe(error: jsonschema.ValidationError) -> List[FieldError]:
    path = [str(part) for part in error.absolute_path]
    if error.validator == 'required':
        properties = error.schema.get('properties', {})
        return [
            FieldError('.'.join(path + [name]),
                       properties.get(name, {}).get('description',
                                                    f'{name} is required'))
            for name in error.validator_value
            if isinstance(error.instance, dict) and name not in error.instance
        ]
    field = '.'.join(path) or '(root)'
    message = error.schema.get('description', error.message) \
        if isinstance(error.schema, dict) else error.message
    return [FieldError(field, message)]
