"""
Signature parameters factory

A factory holds a signing policy (base components, signing key mode,
timestamps, token header, optional headers and body digest) and turns it
into a SignatureParameters instance for one request. Factories are not
modified by build() and can be shared between threads.
"""

import copy
from typing import Iterable, List, Optional, Union

from ..structured_fields import SfItem
from .context import SigningContext
from .signature_parameters import SignatureParameters
from .types import (
    SignatureDigest,
    SigningMode,
    NonceGenerator,
    TimestampGenerator,
)
from .utils import generate_timestamp, normalize_header_name

# Lifetime used for the expires parameter by the default factory
DEFAULT_EXPIRES_LIFETIME_SECONDS = 15

# Headers signed by the default factory when present
DEFAULT_OPTIONAL_HEADERS = ['authorization', 'content-length', 'content-type']


class SignatureParametersFactory:
    """
    Builder for per-request signature parameters with fluent API
    """

    def __init__(self):
        self._base_parameters: Optional[SignatureParameters] = None
        self._body_digest: Optional[SignatureDigest] = None
        self._body_digest_required = False
        self._signing_mode = SigningMode.ACCOUNT
        self._add_created = False
        self._expires_lifetime_seconds = 0
        self._add_token_header = False
        self._optional_headers: List[str] = []
        self._debug_mode = False
        self._timestamp_generator: TimestampGenerator = generate_timestamp
        self._nonce_generator: Optional[NonceGenerator] = None

    def set_base_parameters(self, base: SignatureParameters) -> 'SignatureParametersFactory':
        """
        Seed the factory with parameters copied into every build.

        Args:
            base: Base parameters, copied so later changes do not leak in

        Returns:
            SignatureParametersFactory: Self for method chaining
        """
        self._base_parameters = base.copy()
        return self

    def set_body_digest_config(
        self,
        algorithm: Optional[Union[SignatureDigest, str]],
        required: bool = False
    ) -> 'SignatureParametersFactory':
        """
        Configure the Content-Digest of the request body.

        Args:
            algorithm: "sha-256", "sha-512", or None to disable
            required: Fail the build when the request body is unavailable

        Returns:
            SignatureParametersFactory: Self for method chaining

        Raises:
            SigningError: If the algorithm is not supported
        """
        if algorithm is not None and not isinstance(algorithm, SignatureDigest):
            algorithm = SignatureDigest.from_identifier(algorithm)
        self._body_digest = algorithm
        self._body_digest_required = required
        return self

    def set_use_install_message_signing(self) -> 'SignatureParametersFactory':
        """Sign with the install key (ecdsa-p256-sha256)."""
        self._signing_mode = SigningMode.INSTALL
        return self

    def set_use_account_message_signing(self) -> 'SignatureParametersFactory':
        """Sign with the account key (hmac-sha256)."""
        self._signing_mode = SigningMode.ACCOUNT
        return self

    def set_signing_mode(self, mode: Union[SigningMode, str]) -> 'SignatureParametersFactory':
        self._signing_mode = SigningMode(mode)
        return self

    def set_add_created(self, add_created: bool) -> 'SignatureParametersFactory':
        self._add_created = add_created
        return self

    def set_expires_lifetime(self, seconds: int) -> 'SignatureParametersFactory':
        """Set the expires lifetime in seconds; 0 disables expires."""
        self._expires_lifetime_seconds = seconds
        return self

    def set_add_token_header(self, add: bool) -> 'SignatureParametersFactory':
        """Sign the attestation token header when the request carries it."""
        self._add_token_header = add
        return self

    def add_optional_headers(self, headers: Iterable[str]) -> 'SignatureParametersFactory':
        """
        Add headers signed only when present on the request.

        Args:
            headers: Header names; duplicates are ignored

        Returns:
            SignatureParametersFactory: Self for method chaining
        """
        for header in headers:
            normalized = normalize_header_name(header)
            if normalized not in self._optional_headers:
                self._optional_headers.append(normalized)
        return self

    def set_debug_mode(self, debug_mode: bool) -> 'SignatureParametersFactory':
        self._debug_mode = debug_mode
        return self

    def set_timestamp_generator(self, generator: TimestampGenerator) -> 'SignatureParametersFactory':
        """Use a custom clock for created/expires."""
        self._timestamp_generator = generator
        return self

    def set_nonce_generator(self, generator: Optional[NonceGenerator]) -> 'SignatureParametersFactory':
        """Emit a nonce parameter produced by the generator."""
        self._nonce_generator = generator
        return self

    @property
    def signing_mode(self) -> SigningMode:
        return self._signing_mode

    @property
    def signature_label(self) -> str:
        """Label for the produced signature."""
        return self._signing_mode.label

    @property
    def optional_headers(self) -> List[str]:
        return list(self._optional_headers)

    def with_signing_mode(self, mode: Union[SigningMode, str]) -> 'SignatureParametersFactory':
        """Return a copy of this factory using a different signing mode."""
        clone = copy.copy(self)
        clone._optional_headers = list(self._optional_headers)
        clone._signing_mode = SigningMode(mode)
        return clone

    def build(self, context: SigningContext) -> SignatureParameters:
        """
        Build signature parameters for one request.

        Args:
            context: Signing context of the request

        Returns:
            SignatureParameters: Parameters covering the configured components

        Raises:
            SigningError: If a body digest is required and no body is available
        """
        params = self._base_parameters.copy() if self._base_parameters is not None else SignatureParameters()
        params.debug_mode = self._debug_mode
        params.set_alg(self._signing_mode.algorithm)

        now = self._timestamp_generator()
        if self._add_created:
            params.set_created(now)
        if self._expires_lifetime_seconds > 0:
            params.set_expires(now + self._expires_lifetime_seconds)
        if self._nonce_generator is not None:
            params.set_nonce(self._nonce_generator())

        if self._add_token_header:
            token_header = context.token_header_name
            if token_header is not None and context.has_field(token_header):
                params.add_component_identifier(token_header)

        for header in self._optional_headers:
            if not context.has_field(header):
                continue
            if header == 'content-length' and not _should_sign_content_length(context):
                continue
            params.add_component_identifier(header)

        if self._body_digest is not None:
            digest_header = context.ensure_content_digest(self._body_digest, required=self._body_digest_required)
            if digest_header is not None:
                params.add_component_identifier('content-digest')

        return params

    @classmethod
    def generate_default_factory(
        cls,
        override_base: Optional[SignatureParameters] = None
    ) -> 'SignatureParametersFactory':
        """
        Create the default factory: @method and @target-uri, install key,
        created, 15 second expiry, token header, authorization /
        content-length / content-type when present, and an optional
        sha-256 body digest.

        Args:
            override_base: Base parameters replacing @method / @target-uri

        Returns:
            SignatureParametersFactory: Configured factory
        """
        base = override_base
        if base is None:
            base = (SignatureParameters()
                    .add_component_identifier('@method')
                    .add_component_identifier('@target-uri'))

        return (cls()
                .set_base_parameters(base)
                .set_use_install_message_signing()
                .set_add_created(True)
                .set_expires_lifetime(DEFAULT_EXPIRES_LIFETIME_SECONDS)
                .set_add_token_header(True)
                .add_optional_headers(DEFAULT_OPTIONAL_HEADERS)
                .set_body_digest_config(SignatureDigest.SHA256, required=False))


def _should_sign_content_length(context: SigningContext) -> bool:
    """
    Content-Length is only signed when the request has a body or a non-zero
    value. HTTP clients drop an automatic "Content-Length: 0" on bodiless
    requests, so signing it would not match what is transmitted.
    """
    if context.body:
        return True

    value = context.get_component_value(SfItem.string('content-length'))
    return value is not None and value.strip() != '0'
