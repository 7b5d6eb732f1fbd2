"""
Utility functions for request signing

This module provides helpers for RFC 9421 HTTP Message Signatures,
including nonce and timestamp generation, content digest formatting,
field value combination and target URI decomposition.
"""

import base64
import re
import time
import uuid
from typing import Dict, List, Optional
from urllib.parse import urlsplit, parse_qsl

from .types import (
    SigningError,
    SigningErrorCodes,
    SignatureDigest,
)

# Default ports that @authority omits
DEFAULT_PORTS = {
    'http': 80,
    'https': 443,
}

# CRLF line folding together with its surrounding whitespace
_LINE_FOLDING = re.compile(r'\s*\r\n\s*')


def generate_nonce() -> str:
    """
    Generate a UUID v4 nonce for replay protection.

    Returns:
        str: UUID v4 string for use as nonce
    """
    return str(uuid.uuid4())


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp.

    Returns:
        int: Current Unix timestamp (seconds since epoch)
    """
    return int(time.time())


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.lower().strip()


def normalize_component_name(identifier: str) -> str:
    """
    Normalize a component identifier: derived ``@`` components are kept
    as-is, header names are lowercased.
    """
    if identifier.startswith('@'):
        return identifier
    return identifier.lower()


def combine_field_values(values: List[str]) -> str:
    """
    Combine the field line values of one header into a single value.

    Each value is trimmed and CRLF line folding is collapsed to a single
    space before joining with ", ".

    Args:
        values: Field line values in order

    Returns:
        str: Combined value
    """
    cleaned = [_LINE_FOLDING.sub(' ', value.strip()) for value in values]
    return ', '.join(cleaned)


def format_content_digest(digest: SignatureDigest, body: bytes) -> str:
    """
    Format a Content-Digest header value for a body.

    Args:
        digest: Digest algorithm
        body: Body bytes to hash

    Returns:
        str: Header value such as ``sha-256=:<base64>:``
    """
    encoded = base64.b64encode(digest.hash(body)).decode('ascii')
    return f"{digest.identifier}=:{encoded}:"


class TargetUri:
    """
    Decomposition of a request target URI into the values used by derived
    components
    """

    def __init__(self, uri: str):
        """
        Args:
            uri: Absolute request URI

        Raises:
            SigningError: If the URI has no scheme or host
        """
        if not isinstance(uri, str):
            uri = str(uri)

        try:
            parts = urlsplit(uri)
            port = parts.port
        except ValueError as e:
            raise SigningError(
                f"Invalid target URI: {e}",
                SigningErrorCodes.INVALID_COMPONENT,
                {"uri": uri}
            )

        if not parts.scheme or not parts.hostname:
            raise SigningError(
                f"Target URI must be absolute: {uri}",
                SigningErrorCodes.INVALID_COMPONENT,
                {"uri": uri}
            )

        self.uri = uri
        self.scheme = parts.scheme
        self.host = parts.hostname
        self.port = port
        self.path = parts.path
        self.query = parts.query
        self.has_query = '?' in uri.split('#', 1)[0]

    @property
    def authority(self) -> str:
        """Host, with the port appended unless it is the scheme default or 0."""
        host = f"[{self.host}]" if ':' in self.host else self.host
        if self.port is None or self.port == 0 or DEFAULT_PORTS.get(self.scheme) == self.port:
            return host
        return f"{host}:{self.port}"

    @property
    def normalized_path(self) -> str:
        return self.path or '/'

    @property
    def request_target(self) -> str:
        """Path, followed by ``?query`` when the URI has a query."""
        if not self.has_query:
            return self.normalized_path
        return f"{self.normalized_path}?{self.query}"

    def query_parameters(self) -> Dict[str, List[str]]:
        """Decoded query parameters, each with all of its values in order."""
        params: Dict[str, List[str]] = {}
        for name, value in parse_qsl(self.query, keep_blank_values=True):
            params.setdefault(name, []).append(value)
        return params

    def query_parameter(self, name: str) -> Optional[str]:
        """
        Return the single value of a query parameter.

        Returns:
            The value, or None when the parameter is absent or repeated
        """
        values = self.query_parameters().get(name)
        if not values or len(values) > 1:
            return None
        return values[0]

    def __str__(self) -> str:
        return self.uri
