"""
Canonical serialization of Structured Field values

Pure recursive functions rendering bare items and containers into their
RFC 9651 wire form. Values are validated when they are constructed, so
nothing here can fail for a well-formed structure.
"""

from typing import List, Union

from .bare_items import SfBareItem, SfBareItemType, encode_base64
from .containers import (
    SfParameters,
    SfItem,
    SfInnerList,
    SfListMember,
    SfList,
    SfDictionaryMember,
    SfDictionary,
)

Structure = Union[SfBareItem, SfParameters, SfItem, SfInnerList, SfList, SfDictionary]


def serialize_bare_item(item: SfBareItem) -> str:
    """
    Serialize a bare item.

    Args:
        item: Bare item to serialize

    Returns:
        str: Canonical text
    """
    out: List[str] = []
    _write_bare_item(item, out)
    return ''.join(out)


def serialize_parameters(parameters: SfParameters) -> str:
    """Serialize parameters as ``;key`` / ``;key=value`` fragments."""
    out: List[str] = []
    _write_parameters(parameters, out)
    return ''.join(out)


def serialize_item(item: SfItem) -> str:
    """Serialize an item with its parameters."""
    out: List[str] = []
    _write_item(item, out)
    return ''.join(out)


def serialize_inner_list(inner_list: SfInnerList) -> str:
    """Serialize an inner list; an empty one becomes ``()``."""
    out: List[str] = []
    _write_inner_list(inner_list, out)
    return ''.join(out)


def serialize_list(sf_list: SfList) -> str:
    """Serialize a list; an empty one becomes the empty string."""
    out: List[str] = []
    for index, member in enumerate(sf_list.members):
        if index > 0:
            out.append(', ')
        _write_list_member(member, out)
    return ''.join(out)


def serialize_dictionary(dictionary: SfDictionary) -> str:
    """Serialize a dictionary in insertion order; an empty one becomes the empty string."""
    out: List[str] = []
    for index, (key, member) in enumerate(dictionary.as_map().items()):
        if index > 0:
            out.append(', ')
        out.append(key)
        _write_dictionary_member(member, out)
    return ''.join(out)


def serialize(structure: Structure) -> str:
    """
    Serialize any Structured Field value.

    Args:
        structure: Bare item, parameters, item, inner list, list or dictionary

    Returns:
        str: Canonical text

    Raises:
        TypeError: If the object is not a Structured Field value
    """
    if isinstance(structure, SfBareItem):
        return serialize_bare_item(structure)
    if isinstance(structure, SfParameters):
        return serialize_parameters(structure)
    if isinstance(structure, SfItem):
        return serialize_item(structure)
    if isinstance(structure, SfInnerList):
        return serialize_inner_list(structure)
    if isinstance(structure, SfList):
        return serialize_list(structure)
    if isinstance(structure, SfDictionary):
        return serialize_dictionary(structure)
    raise TypeError(f"Cannot serialize {type(structure).__name__} as a Structured Field")


def _write_bare_item(item: SfBareItem, out: List[str]) -> None:
    item_type = item.type
    value = item.value

    if item_type == SfBareItemType.INTEGER:
        out.append(str(value))
    elif item_type == SfBareItemType.DECIMAL:
        out.append(str(value))
    elif item_type == SfBareItemType.STRING:
        out.append('"')
        out.append(value.replace('\\', '\\\\').replace('"', '\\"'))
        out.append('"')
    elif item_type == SfBareItemType.TOKEN:
        out.append(value)
    elif item_type == SfBareItemType.BYTE_SEQUENCE:
        out.append(':')
        out.append(encode_base64(value))
        out.append(':')
    elif item_type == SfBareItemType.BOOLEAN:
        out.append('?1' if value else '?0')
    elif item_type == SfBareItemType.DATE:
        out.append(f"@{value.seconds}")
    elif item_type == SfBareItemType.DISPLAY_STRING:
        out.append(_encode_display_string(value))
    else:
        raise TypeError(f"Unknown bare item type: {item_type}")


def _encode_display_string(value: str) -> str:
    """Percent-encode ``%``, ``"`` and non-printable UTF-8 bytes."""
    parts = ['%"']
    for byte in value.encode('utf-8'):
        if byte == 0x25 or byte == 0x22 or byte < 0x20 or byte > 0x7E:
            parts.append(f"%{byte:02x}")
        else:
            parts.append(chr(byte))
    parts.append('"')
    return ''.join(parts)


def _write_parameters(parameters: SfParameters, out: List[str]) -> None:
    for key, value in parameters.as_map().items():
        out.append(';')
        out.append(key)
        # boolean true omits "=value"
        if not value.is_boolean_true:
            out.append('=')
            _write_bare_item(value, out)


def _write_item(item: SfItem, out: List[str]) -> None:
    _write_bare_item(item.bare_item, out)
    _write_parameters(item.parameters, out)


def _write_inner_list(inner_list: SfInnerList, out: List[str]) -> None:
    out.append('(')
    for index, item in enumerate(inner_list.items):
        if index > 0:
            out.append(' ')
        _write_item(item, out)
    out.append(')')
    _write_parameters(inner_list.parameters, out)


def _write_list_member(member: SfListMember, out: List[str]) -> None:
    if member.item is not None:
        _write_item(member.item, out)
    else:
        _write_inner_list(member.inner_list, out)


def _write_dictionary_member(member: SfDictionaryMember, out: List[str]) -> None:
    if member.item is not None:
        # a boolean true value is implied by the bare key
        if member.item.bare_item.is_boolean_true:
            _write_parameters(member.item.parameters, out)
        else:
            out.append('=')
            _write_item(member.item, out)
    elif member.inner_list is not None:
        out.append('=')
        _write_inner_list(member.inner_list, out)
    elif member.parameters is not None:
        _write_parameters(member.parameters, out)
