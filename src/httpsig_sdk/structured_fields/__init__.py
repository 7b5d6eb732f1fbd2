"""
Structured Field Values (RFC 9651)

Typed bare items, parameters and containers with eager validation, and a
canonical serializer for them. Parsing the wire format is not supported.
"""

from .bare_items import (
    SfBareItem,
    SfBareItemType,
    SfToken,
    SfDisplayString,
    SfDecimal,
    SfDate,
    MAX_INTEGER,
    MIN_INTEGER,
    MIN_DATE_SECONDS,
    MAX_DATE_SECONDS,
)

from .containers import (
    SfParameters,
    SfItem,
    SfInnerList,
    SfListMember,
    SfList,
    SfDictionaryMember,
    SfDictionary,
)

from .serializer import (
    serialize,
    serialize_bare_item,
    serialize_parameters,
    serialize_item,
    serialize_inner_list,
    serialize_list,
    serialize_dictionary,
)

from ..exceptions import SfFormatError

__all__ = [
    # Bare items
    'SfBareItem',
    'SfBareItemType',
    'SfToken',
    'SfDisplayString',
    'SfDecimal',
    'SfDate',
    'MAX_INTEGER',
    'MIN_INTEGER',
    'MIN_DATE_SECONDS',
    'MAX_DATE_SECONDS',
    # Containers
    'SfParameters',
    'SfItem',
    'SfInnerList',
    'SfListMember',
    'SfList',
    'SfDictionaryMember',
    'SfDictionary',
    # Serializer
    'serialize',
    'serialize_bare_item',
    'serialize_parameters',
    'serialize_item',
    'serialize_inner_list',
    'serialize_list',
    'serialize_dictionary',
    # Errors
    'SfFormatError',
]
