"""
HTTP Message Signatures Python SDK
Structured Field serialization and RFC 9421 signature bases
"""

from .version import __version__
from .exceptions import (
    HttpSigSDKError,
    ValidationError,
    SfFormatError,
)
from .structured_fields import (
    SfBareItem,
    SfBareItemType,
    SfToken,
    SfDisplayString,
    SfDecimal,
    SfDate,
    SfParameters,
    SfItem,
    SfInnerList,
    SfListMember,
    SfList,
    SfDictionaryMember,
    SfDictionary,
    serialize,
)
from .signing import (
    SignatureDigest,
    SigningMode,
    SigningError,
    SigningErrorCodes,
    SignatureParameters,
    SignatureParametersFactory,
    SigningContext,
    HeaderSink,
    CallbackHeaderSink,
    SignatureBaseBuilder,
    create_signature_base,
    MessageSigning,
    MessageSigner,
    SigningUnavailableError,
    SigningAuth,
    sign_prepared_request,
    create_signing_session,
)
from .config import (
    SigningPolicy,
    SigningPolicyConfig,
    SigningPolicyError,
    get_signing_profile,
    list_signing_profiles,
)

__all__ = [
    '__version__',
    # Errors
    'HttpSigSDKError',
    'ValidationError',
    'SfFormatError',
    # Structured Fields
    'SfBareItem',
    'SfBareItemType',
    'SfToken',
    'SfDisplayString',
    'SfDecimal',
    'SfDate',
    'SfParameters',
    'SfItem',
    'SfInnerList',
    'SfListMember',
    'SfList',
    'SfDictionaryMember',
    'SfDictionary',
    'serialize',
    # Signing
    'SignatureDigest',
    'SigningMode',
    'SigningError',
    'SigningErrorCodes',
    'SignatureParameters',
    'SignatureParametersFactory',
    'SigningContext',
    'HeaderSink',
    'CallbackHeaderSink',
    'SignatureBaseBuilder',
    'create_signature_base',
    'MessageSigning',
    'MessageSigner',
    'SigningUnavailableError',
    'SigningAuth',
    'sign_prepared_request',
    'create_signing_session',
    # Configuration
    'SigningPolicy',
    'SigningPolicyConfig',
    'SigningPolicyError',
    'get_signing_profile',
    'list_signing_profiles',
]
