"""
Structured Field containers

Parameters, items, inner lists, lists and dictionaries as defined by
RFC 9651. Insertion order is preserved at every level and all keys are
validated eagerly on construction.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..exceptions import SfFormatError
from .bare_items import SfBareItem, SfToken, SfDisplayString
from .validation import validate_key

ParameterInput = Union[Mapping[str, Any], Iterable[Tuple[str, Any]], 'SfParameters', None]


class SfParameters:
    """
    Ordered, key-validated parameters attached to an item, inner list or
    boolean-true dictionary member
    """

    def __init__(self, entries: ParameterInput = None):
        """
        Build parameters from raw values.

        Args:
            entries: Mapping or iterable of (key, value) pairs. Values are
                coerced with SfBareItem.from_value.

        Raises:
            SfFormatError: If any key or value is invalid
        """
        items: Dict[str, SfBareItem] = {}

        if isinstance(entries, SfParameters):
            items.update(entries.as_map())
        elif entries:
            pairs = entries.items() if isinstance(entries, Mapping) else entries
            for pair in pairs:
                try:
                    key, value = pair
                except (TypeError, ValueError):
                    raise SfFormatError(f"Invalid parameter entry: {pair!r}", pair)
                validate_key(key)
                items[key] = SfBareItem.from_value(value)

        self._entries = MappingProxyType(items)

    @property
    def is_empty(self) -> bool:
        """True when no parameters are present."""
        return not self._entries

    def as_map(self) -> Mapping[str, SfBareItem]:
        """Read-only view of the parameters in insertion order."""
        return self._entries

    def get(self, key: str) -> Optional[SfBareItem]:
        return self._entries.get(key)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SfParameters):
            return NotImplemented
        return list(self._entries.items()) == list(other._entries.items())

    def __repr__(self) -> str:
        return f"SfParameters({dict(self._entries)!r})"

    def serialize(self) -> str:
        """Serialize into the ``;key=value`` form."""
        from .serializer import serialize_parameters
        return serialize_parameters(self)


class SfItem:
    """An sf-item: one bare item plus parameters"""

    def __init__(self, bare_item: SfBareItem, parameters: ParameterInput = None):
        if not isinstance(bare_item, SfBareItem):
            bare_item = SfBareItem.from_value(bare_item)
        self.bare_item = bare_item
        self.parameters = SfParameters(parameters)

    @classmethod
    def string(cls, value: str, parameters: ParameterInput = None) -> 'SfItem':
        return cls(SfBareItem.string(value), parameters)

    @classmethod
    def token(cls, value: Union[SfToken, str], parameters: ParameterInput = None) -> 'SfItem':
        return cls(SfBareItem.token(value), parameters)

    @classmethod
    def boolean(cls, value: bool, parameters: ParameterInput = None) -> 'SfItem':
        return cls(SfBareItem.boolean(value), parameters)

    @classmethod
    def integer(cls, value: int, parameters: ParameterInput = None) -> 'SfItem':
        return cls(SfBareItem.integer(value), parameters)

    @classmethod
    def decimal(cls, value: Any, parameters: ParameterInput = None) -> 'SfItem':
        return cls(SfBareItem.decimal(value), parameters)

    @classmethod
    def byte_sequence(cls, value: bytes, parameters: ParameterInput = None) -> 'SfItem':
        return cls(SfBareItem.byte_sequence(value), parameters)

    @classmethod
    def date(cls, value: Any, parameters: ParameterInput = None) -> 'SfItem':
        return cls(SfBareItem.date(value), parameters)

    @classmethod
    def display_string(cls, value: Union[SfDisplayString, str], parameters: ParameterInput = None) -> 'SfItem':
        return cls(SfBareItem.display_string(value), parameters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SfItem):
            return NotImplemented
        return self.bare_item == other.bare_item and self.parameters == other.parameters

    def __repr__(self) -> str:
        return f"SfItem({self.bare_item!r}, {self.parameters!r})"

    def serialize(self) -> str:
        """Serialize the item and its parameters."""
        from .serializer import serialize_item
        return serialize_item(self)


class SfInnerList:
    """An inner list: ordered items plus parameters"""

    def __init__(self, items: Iterable[SfItem], parameters: ParameterInput = None):
        self.items: Tuple[SfItem, ...] = tuple(items)
        for item in self.items:
            if not isinstance(item, SfItem):
                raise SfFormatError(f"Inner list members must be SfItem instances, got {type(item).__name__}", item)
        self.parameters = SfParameters(parameters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SfInnerList):
            return NotImplemented
        return self.items == other.items and self.parameters == other.parameters

    def __repr__(self) -> str:
        return f"SfInnerList({list(self.items)!r}, {self.parameters!r})"

    def serialize(self) -> str:
        """Serialize as ``(a b);params``."""
        from .serializer import serialize_inner_list
        return serialize_inner_list(self)


class SfListMember:
    """A list member holding either an item or an inner list"""

    def __init__(self, item: Optional[SfItem] = None, inner_list: Optional[SfInnerList] = None):
        if (item is None) == (inner_list is None):
            raise SfFormatError("A list member holds exactly one of an item or an inner list")
        self.item = item
        self.inner_list = inner_list

    @classmethod
    def of_item(cls, item: SfItem) -> 'SfListMember':
        return cls(item=item)

    @classmethod
    def of_inner_list(cls, inner_list: SfInnerList) -> 'SfListMember':
        return cls(inner_list=inner_list)

    @property
    def value(self) -> Union[SfItem, SfInnerList]:
        return self.item if self.item is not None else self.inner_list


class SfList:
    """An sf-list of items and inner lists"""

    def __init__(self, members: Iterable[Union[SfListMember, SfItem, SfInnerList]]):
        normalized: List[SfListMember] = []
        for member in members:
            if isinstance(member, SfItem):
                member = SfListMember.of_item(member)
            elif isinstance(member, SfInnerList):
                member = SfListMember.of_inner_list(member)
            elif not isinstance(member, SfListMember):
                raise SfFormatError(f"Invalid list member: {type(member).__name__}", member)
            normalized.append(member)
        self.members: Tuple[SfListMember, ...] = tuple(normalized)

    def __len__(self) -> int:
        return len(self.members)

    def serialize(self) -> str:
        """Serialize as a comma-separated list; empty lists give an empty string."""
        from .serializer import serialize_list
        return serialize_list(self)


class SfDictionaryMember:
    """
    A dictionary member: an item, an inner list, or boolean true carrying
    only parameters
    """

    def __init__(
        self,
        item: Optional[SfItem] = None,
        inner_list: Optional[SfInnerList] = None,
        parameters: ParameterInput = None
    ):
        if item is not None and inner_list is not None:
            raise SfFormatError("A dictionary member holds at most one of an item or an inner list")
        if item is not None and not isinstance(item, SfItem):
            raise SfFormatError(f"Dictionary member item must be an SfItem, got {type(item).__name__}", item)
        if inner_list is not None and not isinstance(inner_list, SfInnerList):
            raise SfFormatError(
                f"Dictionary member inner list must be an SfInnerList, got {type(inner_list).__name__}", inner_list)
        self.item = item
        self.inner_list = inner_list
        self.parameters = SfParameters(parameters) if parameters is not None else None

    @classmethod
    def of_item(cls, item: SfItem) -> 'SfDictionaryMember':
        return cls(item=item)

    @classmethod
    def of_inner_list(cls, inner_list: SfInnerList) -> 'SfDictionaryMember':
        return cls(inner_list=inner_list)

    @classmethod
    def boolean_true(cls, parameters: ParameterInput = None) -> 'SfDictionaryMember':
        return cls(parameters=SfParameters(parameters))

    @property
    def is_boolean_true(self) -> bool:
        return self.item is None and self.inner_list is None


class SfDictionary:
    """An sf-dictionary: ordered key to member mapping"""

    def __init__(self, entries: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]):
        """
        Build a dictionary, validating every key.

        Args:
            entries: Mapping or (key, member) pairs. Members may be
                SfDictionaryMember, SfItem or SfInnerList.

        Raises:
            SfFormatError: If a key or member is invalid
        """
        members: Dict[str, SfDictionaryMember] = {}
        pairs = entries.items() if isinstance(entries, Mapping) else entries
        for pair in pairs:
            try:
                key, member = pair
            except (TypeError, ValueError):
                raise SfFormatError(f"Invalid dictionary entry: {pair!r}", pair)
            validate_key(key)
            if isinstance(member, SfItem):
                member = SfDictionaryMember.of_item(member)
            elif isinstance(member, SfInnerList):
                member = SfDictionaryMember.of_inner_list(member)
            elif not isinstance(member, SfDictionaryMember):
                raise SfFormatError(f"Invalid dictionary member for key {key}: {type(member).__name__}", member)
            members[key] = member
        self._entries = MappingProxyType(members)

    def as_map(self) -> Mapping[str, SfDictionaryMember]:
        """Read-only view of the members in insertion order."""
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def serialize(self) -> str:
        """Serialize as comma-separated ``key=value`` members."""
        from .serializer import serialize_dictionary
        return serialize_dictionary(self)
