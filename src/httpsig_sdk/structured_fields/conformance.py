"""
Structured Field conformance fixture support

Loads records in the format of the public httpwg structured-field-tests
suite and rebuilds the expected values as Structured Field containers, so
the serializer output can be compared with the canonical text.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

from ..exceptions import SfFormatError
from .bare_items import SfBareItem, SfToken, SfDisplayString
from .containers import (
    SfParameters,
    SfItem,
    SfInnerList,
    SfListMember,
    SfList,
    SfDictionaryMember,
    SfDictionary,
)

HEADER_TYPES = ('item', 'list', 'dictionary')


@dataclass
class FixtureRecord:
    """
    One conformance test record

    Attributes:
        name: Test name
        header_type: "item", "list" or "dictionary"
        expected: Nested JSON form of the expected value (None when absent)
        must_fail: Construction must raise SfFormatError
        can_fail: Construction may raise SfFormatError
        raw: Field line values as received
        canonical: Canonical field line values
    """
    name: str
    header_type: str
    expected: Any
    must_fail: bool = False
    can_fail: bool = False
    raw: Optional[List[str]] = None
    canonical: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: dict, default_name: str = '') -> 'FixtureRecord':
        return cls(
            name=data.get('name') or default_name,
            header_type=data.get('header_type') or 'item',
            expected=data.get('expected'),
            must_fail=data.get('must_fail') is True,
            can_fail=data.get('can_fail') is True,
            raw=data.get('raw'),
            canonical=data.get('canonical'),
        )


def load_fixture_records(path: Union[str, Path]) -> List[FixtureRecord]:
    """
    Load every record from one fixture file.

    Args:
        path: Path to a JSON fixture file

    Returns:
        list: Records in file order
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return [FixtureRecord.from_dict(entry, str(path)) for entry in data]


def collect_fixture_files(root: Union[str, Path], include_serialisation_tests: bool = False) -> List[Path]:
    """
    Find fixture files below a directory, skipping JSON schema files.

    Args:
        root: Fixture root directory
        include_serialisation_tests: Include files under serialisation-tests/

    Returns:
        list: Sorted fixture paths
    """
    files = []
    for path in Path(root).rglob('*.json'):
        parts = path.parts
        if 'schema' in parts:
            continue
        if not include_serialisation_tests and 'serialisation-tests' in parts:
            continue
        files.append(path)
    return sorted(files)


def expected_serialization(record: FixtureRecord) -> Optional[str]:
    """
    Return the expected serialized text of a record.

    Canonical values are preferred over raw values; multiple field lines
    are combined with ", " like an HTTP list-based field.
    """
    values = record.canonical if record.canonical is not None else record.raw
    if values is None:
        return None
    return ', '.join(values)


def build_structure(header_type: str, expected: Any) -> Union[SfItem, SfList, SfDictionary]:
    """
    Rebuild a container from its nested JSON form.

    Args:
        header_type: "item", "list" or "dictionary"
        expected: Nested JSON value

    Returns:
        The reconstructed container

    Raises:
        SfFormatError: If a value violates the Structured Field grammar
        ValueError: If the JSON shape is not understood
    """
    kind = header_type.lower()
    if kind == 'item':
        return item_from_json(expected)
    if kind == 'list':
        return list_from_json(expected)
    if kind == 'dictionary':
        return dictionary_from_json(expected)
    raise ValueError(f"Unsupported header type: {header_type}")


def serialize_structure(header_type: str, structure: Union[SfItem, SfList, SfDictionary]) -> str:
    """Serialize a container rebuilt by build_structure."""
    if header_type.lower() not in HEADER_TYPES:
        raise ValueError(f"Unsupported header type: {header_type}")
    return structure.serialize()


def item_from_json(data: Any) -> SfItem:
    if not isinstance(data, list) or len(data) != 2:
        raise ValueError(f"Invalid item representation: {data!r}")
    return SfItem(bare_item_from_json(data[0]), parameters_from_json(data[1]))


def inner_list_from_json(data: Any) -> SfInnerList:
    if not isinstance(data, list) or len(data) != 2 or not isinstance(data[0], list):
        raise ValueError(f"Invalid inner list representation: {data!r}")
    items = [item_from_json(entry) for entry in data[0]]
    return SfInnerList(items, parameters_from_json(data[1]))


def list_from_json(data: Any) -> SfList:
    if not isinstance(data, list):
        raise ValueError(f"Invalid list representation: {data!r}")

    members = []
    for entry in data:
        if not isinstance(entry, list) or len(entry) != 2:
            raise ValueError(f"Invalid list member: {entry!r}")
        if isinstance(entry[0], list):
            members.append(SfListMember.of_inner_list(inner_list_from_json(entry)))
        else:
            members.append(SfListMember.of_item(item_from_json(entry)))
    return SfList(members)


def dictionary_from_json(data: Any) -> SfDictionary:
    if not isinstance(data, list):
        raise ValueError(f"Invalid dictionary representation: {data!r}")

    entries = []
    for entry in data:
        if not isinstance(entry, list) or len(entry) != 2:
            raise ValueError(f"Invalid dictionary entry: {entry!r}")
        key, value = entry
        entries.append((key, dictionary_member_from_json(value)))
    return SfDictionary(entries)


def dictionary_member_from_json(data: Any) -> SfDictionaryMember:
    if not isinstance(data, list) or len(data) != 2:
        raise ValueError(f"Invalid dictionary member: {data!r}")

    value = data[0]
    if isinstance(value, list):
        return SfDictionaryMember.of_inner_list(inner_list_from_json(data))
    if value is True:
        return SfDictionaryMember.boolean_true(parameters_from_json(data[1]))
    return SfDictionaryMember.of_item(item_from_json(data))


def parameters_from_json(data: Any) -> SfParameters:
    if not data:
        return SfParameters()

    entries = []
    for entry in data:
        if not isinstance(entry, list) or len(entry) != 2:
            raise ValueError(f"Invalid parameter entry: {entry!r}")
        entries.append((entry[0], bare_item_from_json(entry[1])))
    return SfParameters(entries)


def bare_item_from_json(data: Any) -> SfBareItem:
    """
    Map a JSON scalar or tagged object to a bare item.

    bool, int, float and str map to Boolean, Integer, Decimal and String.
    Tagged objects ``{"__type": ..., "value": ...}`` select token, binary
    (base32 encoded), date and displaystring.
    """
    if isinstance(data, bool):
        return SfBareItem.boolean(data)
    if isinstance(data, int):
        return SfBareItem.integer(data)
    if isinstance(data, float):
        return SfBareItem.decimal(data)
    if isinstance(data, str):
        return SfBareItem.string(data)
    if isinstance(data, dict):
        tag = data.get('__type')
        value = data.get('value')
        if tag == 'token':
            return SfBareItem.token(SfToken(value))
        if tag == 'binary':
            return SfBareItem.byte_sequence(decode_base32(value))
        if tag == 'date':
            return SfBareItem.date(value)
        if tag == 'displaystring':
            return SfBareItem.display_string(SfDisplayString(value))
    raise ValueError(f"Unsupported bare item representation: {data!r}")


def decode_base32(text: str) -> bytes:
    """
    Decode base32 text as used by the fixtures, tolerating missing padding
    and lowercase input.

    Raises:
        SfFormatError: If the text is not valid base32
    """
    sanitized = text.replace('=', '').upper()
    padding = '=' * (-len(sanitized) % 8)
    try:
        return base64.b32decode(sanitized + padding)
    except (binascii.Error, ValueError) as e:
        raise SfFormatError(f"Invalid base32 value: {e}", text)
