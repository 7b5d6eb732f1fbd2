"""
Character class validation for Structured Field values

This module implements the RFC 9651 character set rules used when
constructing keys, sf-strings, sf-tokens and display strings. All checks
raise SfFormatError identifying the offending character and its position.
"""

from ..exceptions import SfFormatError

# HTTP tchar punctuation (RFC 9110 section 5.6.2)
_TCHAR_PUNCTUATION = frozenset("!#$%&'*+-.^_`|~")

# Key characters allowed after the first position
_KEY_PUNCTUATION = frozenset("_-.*")


def is_lower_alpha(char: str) -> bool:
    """Return True for a-z."""
    return "a" <= char <= "z"


def is_alpha(char: str) -> bool:
    """Return True for A-Z and a-z."""
    return is_lower_alpha(char) or "A" <= char <= "Z"


def is_digit(char: str) -> bool:
    """Return True for 0-9."""
    return "0" <= char <= "9"


def is_tchar(char: str) -> bool:
    """Return True when the character belongs to the HTTP tchar set."""
    return is_alpha(char) or is_digit(char) or char in _TCHAR_PUNCTUATION


def validate_key(key: str) -> None:
    """
    Validate a parameter or dictionary key.

    Args:
        key: Key to validate

    Raises:
        SfFormatError: If the key is empty or contains a disallowed character
    """
    if not isinstance(key, str):
        raise SfFormatError(f"Structured Field keys must be strings, got {type(key).__name__}", key)

    if not key:
        raise SfFormatError("Structured Field parameter and dictionary keys must not be empty", key)

    for index, char in enumerate(key):
        if index == 0:
            valid = char == "*" or is_lower_alpha(char)
        else:
            valid = is_lower_alpha(char) or is_digit(char) or char in _KEY_PUNCTUATION

        if not valid:
            raise SfFormatError(
                f'Invalid character "{char}" in key "{key}" at position {index}',
                key,
                {"position": index}
            )


def validate_string(value: str) -> None:
    """
    Validate that an sf-string only holds printable ASCII.

    Args:
        value: String to validate

    Raises:
        SfFormatError: If a control character or non-ASCII character is found
    """
    for index, char in enumerate(value):
        code_point = ord(char)
        if code_point < 0x20 or code_point >= 0x7F:
            raise SfFormatError(
                f"Invalid character 0x{code_point:02x} in sf-string at position {index}",
                value,
                {"position": index}
            )


def validate_token(value: str) -> None:
    """
    Validate the character set of an sf-token.

    Tokens start with ALPHA or "*" and continue with tchar, ":" or "/".

    Args:
        value: Token text to validate

    Raises:
        SfFormatError: If the token is empty or contains a disallowed character
    """
    if not value:
        raise SfFormatError("sf-token must not be empty", value)

    for index, char in enumerate(value):
        if index == 0:
            valid = is_alpha(char) or char == "*"
        else:
            valid = is_tchar(char) or char in ":/"

        if not valid:
            raise SfFormatError(
                f'Invalid character "{char}" in sf-token "{value}" at position {index}',
                value,
                {"position": index}
            )


def validate_display_string(value: str) -> None:
    """
    Validate that a display string only holds Unicode scalar values.

    Args:
        value: Text to validate

    Raises:
        SfFormatError: If a surrogate code point is present
    """
    for index, char in enumerate(value):
        code_point = ord(char)
        if 0xD800 <= code_point <= 0xDFFF:
            raise SfFormatError(
                f"Display strings must not contain surrogate code points (0x{code_point:04x} at position {index})",
                value,
                {"position": index}
            )
