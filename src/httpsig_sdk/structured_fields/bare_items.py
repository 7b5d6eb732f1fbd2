"""
Bare item model for Structured Field values

This module defines the eight RFC 9651 bare item types. Every value is fully
validated when it is constructed, so serialization of an existing bare item
can never fail.
"""

import base64
import decimal
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Union

from ..exceptions import SfFormatError
from .validation import (
    validate_string,
    validate_token,
    validate_display_string,
)

# Largest magnitude for sf-integer and for the scaled sf-decimal value
MAX_INTEGER = 999999999999999
MIN_INTEGER = -MAX_INTEGER

# Fixed fractional scale used by sf-decimal
DECIMAL_SCALE = 1000

# Seconds since epoch for 0001-01-01T00:00:00Z and 9999-12-31T00:00:00Z
MIN_DATE_SECONDS = -62135596800
MAX_DATE_SECONDS = 253402214400

_DECIMAL_PATTERN = re.compile(r'^-?[0-9]{1,12}\.[0-9]{1,3}$')
_DATE_PATTERN = re.compile(r'^@-?[0-9]{1,15}$')
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Tolerance used to detect a .5 tie after scaling a float
_TIE_EPSILON = 1e-9


class SfBareItemType(str, Enum):
    """Bare item types defined by RFC 9651"""
    INTEGER = "integer"
    DECIMAL = "decimal"
    STRING = "string"
    TOKEN = "token"
    BYTE_SEQUENCE = "byte_sequence"
    BOOLEAN = "boolean"
    DATE = "date"
    DISPLAY_STRING = "display_string"


@dataclass(frozen=True)
class SfToken:
    """
    An sf-token value

    Attributes:
        value: Token text, starting with ALPHA or "*"
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise SfFormatError(f"sf-token must be a string, got {type(self.value).__name__}", self.value)
        validate_token(self.value)


@dataclass(frozen=True)
class SfDisplayString:
    """
    A display string value

    Attributes:
        value: Unicode text without surrogate code points
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise SfFormatError(f"Display string must be a string, got {type(self.value).__name__}", self.value)
        validate_display_string(self.value)


@dataclass(frozen=True)
class SfDecimal:
    """
    An sf-decimal held as a fixed-point integer scaled by 1000

    Attributes:
        scaled_value: Decimal value multiplied by 1000
    """
    scaled_value: int

    def __post_init__(self):
        if isinstance(self.scaled_value, bool) or not isinstance(self.scaled_value, int):
            raise SfFormatError("Decimal scaled value must be an integer", self.scaled_value)

        if abs(self.scaled_value) > MAX_INTEGER:
            raise SfFormatError("Decimal magnitude exceeds allowed range", self.scaled_value)

    @classmethod
    def from_number(cls, value: Union[int, float, decimal.Decimal]) -> 'SfDecimal':
        """
        Create a decimal from a number, rounding to three fractional digits.

        Floats are rounded ties-to-even after scaling; decimal.Decimal values
        are quantized exactly with ROUND_HALF_EVEN.

        Args:
            value: Number to convert

        Returns:
            SfDecimal: Rounded decimal

        Raises:
            SfFormatError: If the value is not finite or is out of range
        """
        if isinstance(value, bool):
            raise SfFormatError("Booleans cannot be converted to decimals", value)

        if isinstance(value, int):
            return cls(value * DECIMAL_SCALE)

        if isinstance(value, decimal.Decimal):
            if not value.is_finite():
                raise SfFormatError(f"Decimals must be finite numbers: {value}", value)
            scaled = (value * DECIMAL_SCALE).quantize(decimal.Decimal(1), rounding=decimal.ROUND_HALF_EVEN)
            return cls(int(scaled))

        if isinstance(value, float):
            if not math.isfinite(value):
                raise SfFormatError(f"Decimals must be finite numbers: {value}", value)
            return cls(_round_ties_to_even(value * DECIMAL_SCALE))

        raise SfFormatError(f"Unsupported value for decimal: {type(value).__name__}", value)

    @classmethod
    def parse(cls, text: str) -> 'SfDecimal':
        """
        Parse the textual form ``-?digits.digits`` (1-12 integer digits,
        1-3 fractional digits).

        Args:
            text: Decimal literal

        Returns:
            SfDecimal: Parsed decimal

        Raises:
            SfFormatError: If the text does not match the decimal grammar
        """
        if not isinstance(text, str) or not _DECIMAL_PATTERN.match(text):
            raise SfFormatError(f"Invalid decimal format: {text}", text)

        negative = text.startswith('-')
        integral, fractional = text.lstrip('-').split('.')
        scaled = int(integral) * DECIMAL_SCALE + int(fractional.ljust(3, '0'))
        return cls(-scaled if negative else scaled)

    def to_float(self) -> float:
        """Convert the decimal into a float."""
        return self.scaled_value / DECIMAL_SCALE

    def __str__(self) -> str:
        sign = '-' if self.scaled_value < 0 else ''
        integral, fractional = divmod(abs(self.scaled_value), DECIMAL_SCALE)
        digits = f"{fractional:03d}".rstrip('0') or '0'
        return f"{sign}{integral}.{digits}"


@dataclass(frozen=True)
class SfDate:
    """
    An sf-date holding whole seconds since the Unix epoch

    Attributes:
        seconds: Seconds since 1970-01-01T00:00:00Z
    """
    seconds: int

    def __post_init__(self):
        if isinstance(self.seconds, bool) or not isinstance(self.seconds, int):
            raise SfFormatError("Date seconds must be an integer", self.seconds)

        if self.seconds < MIN_DATE_SECONDS or self.seconds > MAX_DATE_SECONDS:
            raise SfFormatError(f"Date value {self.seconds} is outside the supported range", self.seconds)

    @classmethod
    def from_datetime(cls, value: datetime) -> 'SfDate':
        """
        Create a date from a datetime. Naive datetimes are taken as UTC.

        Args:
            value: Datetime to convert

        Returns:
            SfDate: Date truncated to whole seconds
        """
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)

        delta = value - _EPOCH
        return cls(delta.days * 86400 + delta.seconds)

    @classmethod
    def parse(cls, text: str) -> 'SfDate':
        """
        Parse the textual form ``@seconds``.

        Raises:
            SfFormatError: If the text does not match the date grammar
        """
        if not isinstance(text, str) or not _DATE_PATTERN.match(text):
            raise SfFormatError(f"Invalid date format: {text}", text)
        return cls(int(text[1:]))

    def to_datetime(self) -> datetime:
        """Convert to an aware UTC datetime."""
        return _EPOCH + timedelta(seconds=self.seconds)

    def __str__(self) -> str:
        return f"@{self.seconds}"


@dataclass(frozen=True)
class SfBareItem:
    """
    A bare item: exactly one typed value

    Use the classmethod constructors rather than building instances directly.
    The payload is validated against its type on construction either way.

    Attributes:
        type: Bare item type tag
        value: Payload; int, SfDecimal, str, bytes, bool or SfDate by type
    """
    type: SfBareItemType
    value: Any

    def __post_init__(self):
        _validate_payload(self.type, self.value)

    @classmethod
    def integer(cls, value: int) -> 'SfBareItem':
        """Create an sf-integer, rejecting magnitudes above 999,999,999,999,999."""
        return cls(SfBareItemType.INTEGER, value)

    @classmethod
    def decimal(cls, value: Union[SfDecimal, int, float, decimal.Decimal, str]) -> 'SfBareItem':
        """Create an sf-decimal from an SfDecimal, a number or a decimal literal."""
        if isinstance(value, SfDecimal):
            return cls(SfBareItemType.DECIMAL, value)
        if isinstance(value, str):
            return cls(SfBareItemType.DECIMAL, SfDecimal.parse(value))
        return cls(SfBareItemType.DECIMAL, SfDecimal.from_number(value))

    @classmethod
    def string(cls, value: str) -> 'SfBareItem':
        """Create an sf-string holding printable ASCII."""
        return cls(SfBareItemType.STRING, value)

    @classmethod
    def token(cls, value: Union[SfToken, str]) -> 'SfBareItem':
        """Create an sf-token."""
        if isinstance(value, SfToken):
            value = value.value
        return cls(SfBareItemType.TOKEN, value)

    @classmethod
    def byte_sequence(cls, value: Union[bytes, bytearray, memoryview, list]) -> 'SfBareItem':
        """Create a byte sequence, copying the supplied buffer."""
        try:
            data = bytes(value)
        except (TypeError, ValueError) as e:
            raise SfFormatError(f"Invalid byte sequence: {e}", value)
        return cls(SfBareItemType.BYTE_SEQUENCE, data)

    @classmethod
    def boolean(cls, value: bool) -> 'SfBareItem':
        """Create an sf-boolean."""
        return cls(SfBareItemType.BOOLEAN, value)

    @classmethod
    def date(cls, value: Union[SfDate, datetime, int]) -> 'SfBareItem':
        """Create an sf-date from an SfDate, a datetime or epoch seconds."""
        if isinstance(value, SfDate):
            return cls(SfBareItemType.DATE, value)
        if isinstance(value, datetime):
            return cls(SfBareItemType.DATE, SfDate.from_datetime(value))
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(SfBareItemType.DATE, SfDate(value))
        raise SfFormatError(f"Unsupported value for date bare item: {type(value).__name__}", value)

    @classmethod
    def display_string(cls, value: Union[SfDisplayString, str]) -> 'SfBareItem':
        """Create a display string."""
        if isinstance(value, SfDisplayString):
            value = value.value
        return cls(SfBareItemType.DISPLAY_STRING, value)

    @classmethod
    def from_value(cls, value: Any) -> 'SfBareItem':
        """
        Coerce an untyped Python value into a bare item.

        The inference order is fixed: existing bare items and typed wrappers,
        then bool, int, decimal, byte sequence, datetime and finally str.
        A str containing "." is tried as a decimal literal first and becomes
        an sf-string when decimal parsing rejects it.

        Args:
            value: Value to coerce

        Returns:
            SfBareItem: Coerced bare item

        Raises:
            SfFormatError: If the value cannot be represented
        """
        if isinstance(value, SfBareItem):
            return value
        if isinstance(value, SfToken):
            return cls.token(value)
        if isinstance(value, SfDisplayString):
            return cls.display_string(value)
        if isinstance(value, SfDate):
            return cls.date(value)
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, (SfDecimal, float, decimal.Decimal)):
            return cls.decimal(value)
        if isinstance(value, str) and '.' in value:
            try:
                return cls.decimal(value)
            except SfFormatError:
                return cls.string(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.byte_sequence(value)
        if isinstance(value, (list, tuple)) and all(isinstance(b, int) for b in value):
            return cls.byte_sequence(list(value))
        if isinstance(value, datetime):
            return cls.date(value)
        if isinstance(value, str):
            return cls.string(value)
        raise SfFormatError(f"Unsupported value for bare item: {type(value).__name__}", value)

    @property
    def is_boolean_true(self) -> bool:
        """True when this item is the boolean true."""
        return self.type == SfBareItemType.BOOLEAN and self.value is True

    def serialize(self) -> str:
        """Serialize into canonical Structured Field text."""
        from .serializer import serialize_bare_item
        return serialize_bare_item(self)

    def __str__(self) -> str:
        return self.serialize()


def _validate_payload(item_type: SfBareItemType, value: Any) -> None:
    """Check that a payload is valid for its bare item type."""
    if item_type == SfBareItemType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SfFormatError(f"Integer bare item requires an int, got {type(value).__name__}", value)
        if value < MIN_INTEGER or value > MAX_INTEGER:
            raise SfFormatError(f"Integer magnitude exceeds allowed range: {value}", value)
    elif item_type == SfBareItemType.DECIMAL:
        if not isinstance(value, SfDecimal):
            raise SfFormatError("Decimal bare item requires an SfDecimal", value)
    elif item_type == SfBareItemType.STRING:
        if not isinstance(value, str):
            raise SfFormatError(f"String bare item requires a str, got {type(value).__name__}", value)
        validate_string(value)
    elif item_type == SfBareItemType.TOKEN:
        if not isinstance(value, str):
            raise SfFormatError(f"Token bare item requires a str, got {type(value).__name__}", value)
        validate_token(value)
    elif item_type == SfBareItemType.BYTE_SEQUENCE:
        if not isinstance(value, bytes):
            raise SfFormatError("Byte sequence bare item requires bytes", value)
    elif item_type == SfBareItemType.BOOLEAN:
        if not isinstance(value, bool):
            raise SfFormatError(f"Boolean bare item requires a bool, got {type(value).__name__}", value)
    elif item_type == SfBareItemType.DATE:
        if not isinstance(value, SfDate):
            raise SfFormatError("Date bare item requires an SfDate", value)
    elif item_type == SfBareItemType.DISPLAY_STRING:
        if not isinstance(value, str):
            raise SfFormatError(f"Display string bare item requires a str, got {type(value).__name__}", value)
        validate_display_string(value)
    else:
        raise SfFormatError(f"Unknown bare item type: {item_type}", value)


def _round_ties_to_even(value: float) -> int:
    """Round a scaled float to an integer, resolving .5 ties to the even neighbour."""
    lower = math.floor(value)
    fraction = value - lower
    if abs(fraction - 0.5) <= _TIE_EPSILON:
        return lower if lower % 2 == 0 else lower + 1
    return lower if fraction < 0.5 else lower + 1


def encode_base64(data: bytes) -> str:
    """Standard base64 with padding, as used by byte sequences."""
    return base64.b64encode(data).decode('ascii')
