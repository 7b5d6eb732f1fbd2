"""
Type definitions for request signing functionality

This module provides the enums, error type and aliases shared by the
RFC 9421 HTTP Message Signatures components.
"""

import hashlib
from typing import Dict, List, Optional, Union, Callable, Any
from enum import Enum


class SignatureDigest(str, Enum):
    """Content digest algorithms"""
    SHA256 = "sha-256"
    SHA512 = "sha-512"

    @property
    def identifier(self) -> str:
        """HTTP identifier used in the Content-Digest header."""
        return self.value

    def hash(self, data: bytes) -> bytes:
        """Hash data with this algorithm."""
        if self is SignatureDigest.SHA256:
            return hashlib.sha256(data).digest()
        return hashlib.sha512(data).digest()

    @classmethod
    def from_identifier(cls, identifier: str) -> 'SignatureDigest':
        """
        Look up a digest algorithm by its HTTP identifier.

        Raises:
            SigningError: If the identifier is not supported
        """
        for digest in cls:
            if digest.value == identifier:
                return digest
        raise SigningError(
            f"Unsupported digest identifier: {identifier}",
            SigningErrorCodes.INVALID_CONFIG,
            {"algorithm": identifier, "supported": [d.value for d in cls]}
        )


class SigningMode(str, Enum):
    """Key used to sign messages"""
    INSTALL = "install"
    ACCOUNT = "account"

    @property
    def algorithm(self) -> str:
        """Value advertised in the ``alg`` signature parameter."""
        if self is SigningMode.INSTALL:
            return "ecdsa-p256-sha256"
        return "hmac-sha256"

    @property
    def label(self) -> str:
        """Label naming the signature in Signature / Signature-Input."""
        return self.value


class SigningError(Exception):
    """
    Error class for signing operations

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.code}, details: {self.details})"
        return f"{self.message} (code: {self.code})"

    def __repr__(self) -> str:
        return f"SigningError(message='{self.message}', code='{self.code}', details={self.details})"


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"

    # Resolution errors
    MISSING_COMPONENT = "MISSING_COMPONENT"
    UNKNOWN_DERIVED_COMPONENT = "UNKNOWN_DERIVED_COMPONENT"
    INVALID_COMPONENT = "INVALID_COMPONENT"
    BODY_DIGEST_REQUIRED = "BODY_DIGEST_REQUIRED"

    # Signing errors
    SIGNING_FAILED = "SIGNING_FAILED"
    SIGNING_UNAVAILABLE = "SIGNING_UNAVAILABLE"


# Type aliases for convenience
NonceGenerator = Callable[[], str]
TimestampGenerator = Callable[[], int]
HeaderValues = Union[str, List[str]]
HeaderCallback = Callable[[str, str], None]
RequestBody = Union[str, bytes, None]
