"""
HTTP client integration for request signing

This module connects the signature base builder to the requests library.
Outgoing prepared requests are turned into a SigningContext, the host's
factory builds the signature parameters, and the resulting base is handed
to a MessageSigner. The Signature-Input and Signature headers are added to
the request.
"""

import logging
from typing import Optional, Protocol, Union, runtime_checkable

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest
from requests.structures import CaseInsensitiveDict

from ..structured_fields import SfDictionary, SfDictionaryMember, SfItem
from .base_builder import create_signature_base
from .context import SigningContext
from .message_signing import MessageSigning
from .parameters_factory import SignatureParametersFactory
from .types import SigningError, SigningErrorCodes, SigningMode

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'Signature'
SIGNATURE_INPUT_HEADER = 'Signature-Input'


class SigningUnavailableError(SigningError):
    """Raised by a signer when the key for the requested mode cannot be used."""

    def __init__(self, message: str, mode: Union[SigningMode, str, None] = None):
        details = {"mode": SigningMode(mode).value} if mode is not None else None
        super().__init__(message, SigningErrorCodes.SIGNING_UNAVAILABLE, details)


@runtime_checkable
class MessageSigner(Protocol):
    """Produces raw signature bytes over a signature base."""

    def sign(self, message: str, mode: SigningMode) -> bytes:
        ...


class PreparedRequestHeaderSink:
    """HeaderSink writing into the headers of a prepared request."""

    def __init__(self, prepared: PreparedRequest):
        self.prepared = prepared

    def set_header(self, name: str, value: str) -> None:
        self.prepared.headers[name] = value

    def add_header(self, name: str, value: str) -> None:
        existing = self.prepared.headers.get(name)
        self.prepared.headers[name] = value if existing is None else f"{existing}, {value}"


def signature_header(label: str, signature: bytes) -> str:
    """
    Build the Signature header value, ``label=:<base64>:``.

    Args:
        label: Signature label
        signature: Raw signature bytes

    Returns:
        str: Serialized dictionary
    """
    member = SfDictionaryMember.of_item(SfItem.byte_sequence(signature))
    return SfDictionary({label: member}).serialize()


def context_from_prepared_request(
    prepared: PreparedRequest,
    token_header_name: Optional[str] = None
) -> SigningContext:
    """
    Build a signing context over a prepared request.

    A request without a body is treated as having an empty body. Streamed
    bodies (files, generators) are not available for digesting.
    """
    body = prepared.body
    if body is None:
        body = b''
    elif not isinstance(body, (bytes, str)):
        body = None

    headers = {}
    for name, value in (prepared.headers or {}).items():
        headers[name] = value.decode('latin-1') if isinstance(value, bytes) else value

    return SigningContext(
        method=prepared.method or 'GET',
        uri=prepared.url,
        headers=headers,
        body=body,
        token_header_name=token_header_name,
        header_sink=PreparedRequestHeaderSink(prepared)
    )


def sign_prepared_request(
    prepared: PreparedRequest,
    message_signing: MessageSigning,
    signer: MessageSigner,
    token_header_name: Optional[str] = None
) -> PreparedRequest:
    """
    Sign a prepared request in place.

    When the install key is unavailable the request is signed once more
    with the account key. Parameters are rebuilt for the account mode and
    the signature base is regenerated.

    Args:
        prepared: Prepared request to sign
        message_signing: Registry selecting the factory for the request host
        signer: Signer producing the signature bytes
        token_header_name: Header carrying the attestation token, if any

    Returns:
        PreparedRequest: The same request with signature headers added

    Raises:
        SigningError: If the parameters cannot be built or signing fails
    """
    if prepared.headers is None:
        prepared.headers = CaseInsensitiveDict()

    context = context_from_prepared_request(prepared, token_header_name)
    factory = message_signing.factory_for_host(context.target.host)
    if factory is None:
        logger.debug(f"No signing factory for host {context.target.host}; request left unsigned")
        return prepared

    try:
        label, params, signature = _sign_with_factory(factory, context, signer)
    except SigningUnavailableError as e:
        if factory.signing_mode is not SigningMode.INSTALL:
            raise
        logger.warning(f"Install key unavailable, falling back to account signing: {e.message}")
        account_factory = factory.with_signing_mode(SigningMode.ACCOUNT)
        label, params, signature = _sign_with_factory(account_factory, context, signer)

    context.set_header(SIGNATURE_INPUT_HEADER, params.signature_input_header(label))
    context.set_header(SIGNATURE_HEADER, signature_header(label, signature))
    logger.debug(f"Signed {context.method.upper()} {context.uri} with label '{label}'")

    return prepared


def _sign_with_factory(factory: SignatureParametersFactory, context: SigningContext, signer: MessageSigner):
    params = factory.build(context)
    signature_base = create_signature_base(params, context)

    try:
        signature = signer.sign(signature_base, factory.signing_mode)
    except SigningError:
        raise
    except Exception as e:
        raise SigningError(
            f"Signer failed: {e}",
            SigningErrorCodes.SIGNING_FAILED,
            {"mode": factory.signing_mode.value}
        ) from e

    if not isinstance(signature, (bytes, bytearray)):
        raise SigningError(
            "Signer must return bytes",
            SigningErrorCodes.SIGNING_FAILED,
            {"type": type(signature).__name__}
        )

    return factory.signature_label, params, bytes(signature)


class SigningAuth(AuthBase):
    """
    requests authentication handler that signs every outgoing request

    Example:
        session.auth = SigningAuth(message_signing, signer)
    """

    def __init__(
        self,
        message_signing: MessageSigning,
        signer: MessageSigner,
        token_header_name: Optional[str] = None
    ):
        self.message_signing = message_signing
        self.signer = signer
        self.token_header_name = token_header_name

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        return sign_prepared_request(
            request,
            self.message_signing,
            self.signer,
            token_header_name=self.token_header_name
        )


def create_signing_session(
    message_signing: MessageSigning,
    signer: MessageSigner,
    token_header_name: Optional[str] = None,
    session: Optional[requests.Session] = None,
    **session_kwargs
) -> requests.Session:
    """
    Create a requests session that signs every request.

    Args:
        message_signing: Registry of signing factories
        signer: Signer producing the signature bytes
        token_header_name: Header carrying the attestation token, if any
        session: Existing session to configure instead of a new one
        **session_kwargs: Attributes applied to the session (e.g. verify)

    Returns:
        requests.Session: Session with SigningAuth installed
    """
    session = session or requests.Session()

    for key, value in session_kwargs.items():
        if hasattr(session, key):
            setattr(session, key, value)

    session.auth = SigningAuth(message_signing, signer, token_header_name)
    logger.info("Configured request signing for session")
    return session
