"""
HTTP Message Signatures (RFC 9421) - Signature Base Module

This module builds signature parameters and the canonical signature base
for outgoing requests, and integrates with the requests library. Producing
the signature bytes is left to a MessageSigner supplied by the caller.
"""

from .types import (
    SignatureDigest,
    SigningMode,
    SigningError,
    SigningErrorCodes,
)

from .utils import (
    generate_nonce,
    generate_timestamp,
    normalize_header_name,
    combine_field_values,
    format_content_digest,
    TargetUri,
)

from .signature_parameters import (
    SignatureParameters,
    SIGNATURE_PARAMS_IDENTIFIER,
)

from .context import (
    SigningContext,
    HeaderSink,
    CallbackHeaderSink,
)

from .parameters_factory import (
    SignatureParametersFactory,
    DEFAULT_EXPIRES_LIFETIME_SECONDS,
    DEFAULT_OPTIONAL_HEADERS,
)

from .base_builder import (
    SignatureBaseBuilder,
    create_signature_base,
)

from .message_signing import MessageSigning

from .integration import (
    MessageSigner,
    SigningUnavailableError,
    SigningAuth,
    sign_prepared_request,
    create_signing_session,
)

# Public API exports
__all__ = [
    # Types
    'SignatureDigest',
    'SigningMode',
    'SigningError',
    'SigningErrorCodes',
    # Utilities
    'generate_nonce',
    'generate_timestamp',
    'normalize_header_name',
    'combine_field_values',
    'format_content_digest',
    'TargetUri',
    # Signature parameters
    'SignatureParameters',
    'SIGNATURE_PARAMS_IDENTIFIER',
    'SignatureParametersFactory',
    'DEFAULT_EXPIRES_LIFETIME_SECONDS',
    'DEFAULT_OPTIONAL_HEADERS',
    # Signature base
    'SigningContext',
    'HeaderSink',
    'CallbackHeaderSink',
    'SignatureBaseBuilder',
    'create_signature_base',
    'MessageSigning',
    # HTTP Integration
    'MessageSigner',
    'SigningUnavailableError',
    'SigningAuth',
    'sign_prepared_request',
    'create_signing_session',
]
