"""
Signing context for RFC 9421 HTTP Message Signatures

The context is a per-request snapshot of the method, target URI, headers
and body. Headers written through the context (such as Content-Digest) are
recorded in its own header map and forwarded to a header sink so they also
reach the outgoing request.
"""

from typing import Dict, List, Mapping, Optional, Protocol, Union, runtime_checkable

from ..structured_fields import SfBareItemType, SfItem
from .signature_parameters import component_identifier_value
from .types import (
    SigningError,
    SigningErrorCodes,
    SignatureDigest,
    HeaderCallback,
    HeaderValues,
    RequestBody,
)
from .utils import TargetUri, combine_field_values, format_content_digest, normalize_header_name


@runtime_checkable
class HeaderSink(Protocol):
    """Receives header writes destined for the live outgoing request."""

    def set_header(self, name: str, value: str) -> None:
        """Replace all values of a header."""
        ...

    def add_header(self, name: str, value: str) -> None:
        """Append a value to a header."""
        ...


class CallbackHeaderSink:
    """HeaderSink backed by two optional callables."""

    def __init__(self, on_set: Optional[HeaderCallback] = None, on_add: Optional[HeaderCallback] = None):
        self.on_set = on_set
        self.on_add = on_add

    def set_header(self, name: str, value: str) -> None:
        if self.on_set is not None:
            self.on_set(name, value)

    def add_header(self, name: str, value: str) -> None:
        if self.on_add is not None:
            self.on_add(name, value)


class SigningContext:
    """
    Request data needed to resolve signature components
    """

    def __init__(
        self,
        method: str,
        uri: str,
        headers: Optional[Mapping[str, HeaderValues]] = None,
        body: RequestBody = None,
        token_header_name: Optional[str] = None,
        header_sink: Optional[HeaderSink] = None
    ):
        """
        Capture the request for signing.

        Args:
            method: HTTP method
            uri: Absolute target URI
            headers: Header name to value or list of field line values
            body: Request body; None when the body is not available
            token_header_name: Header carrying the attestation token, if any
            header_sink: Receives headers set through this context

        Raises:
            SigningError: If the URI is not absolute
        """
        self.method = method
        self.target = TargetUri(uri)
        if isinstance(body, str):
            body = body.encode('utf-8')
        self.body: Optional[bytes] = bytes(body) if body is not None else None
        self.token_header_name = token_header_name
        self.header_sink = header_sink

        self._headers: Dict[str, List[str]] = {}
        for name, values in (headers or {}).items():
            if isinstance(values, str):
                values = [values]
            self._headers.setdefault(normalize_header_name(name), []).extend(values)

    @property
    def uri(self) -> str:
        return self.target.uri

    def has_field(self, name: str) -> bool:
        """True when a header with this name has at least one value."""
        return bool(self._headers.get(normalize_header_name(name)))

    def set_header(self, name: str, value: str) -> None:
        """Replace a header with a single value and forward it to the sink."""
        self._headers[normalize_header_name(name)] = [value]
        if self.header_sink is not None:
            self.header_sink.set_header(name, value)

    def add_header(self, name: str, value: str) -> None:
        """Append a header value and forward it to the sink."""
        self._headers.setdefault(normalize_header_name(name), []).append(value)
        if self.header_sink is not None:
            self.header_sink.add_header(name, value)

    def snapshot_headers(self) -> Dict[str, List[str]]:
        """Copy of the tracked headers."""
        return {name: list(values) for name, values in self._headers.items()}

    def get_component_value(self, component: SfItem) -> Optional[str]:
        """
        Resolve the value of a component identifier against this request.

        Args:
            component: Component identifier item

        Returns:
            The canonical value, or None when a header is absent or a
            query parameter is absent or repeated

        Raises:
            SigningError: For unknown derived components or an invalid
                @query-param name parameter
        """
        identifier = component_identifier_value(component)

        if not identifier.startswith('@'):
            values = self._headers.get(normalize_header_name(identifier))
            if not values:
                return None
            return combine_field_values(values)

        if identifier == '@method':
            return self.method.upper()
        if identifier == '@authority':
            return self.target.authority
        if identifier == '@scheme':
            return self.target.scheme
        if identifier == '@target-uri':
            return self.target.uri
        if identifier == '@request-target':
            return self.target.request_target
        if identifier == '@path':
            return self.target.normalized_path
        if identifier == '@query':
            return self.target.query
        if identifier == '@query-param':
            name = component.parameters.get('name')
            if name is None:
                raise SigningError(
                    "Missing name parameter for @query-param",
                    SigningErrorCodes.INVALID_COMPONENT
                )
            if name.type != SfBareItemType.STRING:
                raise SigningError(
                    "name parameter for @query-param must be an sf-string",
                    SigningErrorCodes.INVALID_COMPONENT,
                    {"name": name.serialize()}
                )
            return self.target.query_parameter(name.value)

        raise SigningError(
            f"Unknown derived component: {identifier}",
            SigningErrorCodes.UNKNOWN_DERIVED_COMPONENT,
            {"component": identifier}
        )

    def ensure_content_digest(self, digest: Union[SignatureDigest, str], required: bool = False) -> Optional[str]:
        """
        Hash the body and install the Content-Digest header.

        Args:
            digest: Digest algorithm or its identifier
            required: Fail instead of skipping when the body is unavailable

        Returns:
            The Content-Digest value, or None when there is no body and the
            digest is not required

        Raises:
            SigningError: If the digest is required but no body is available
        """
        if not isinstance(digest, SignatureDigest):
            digest = SignatureDigest.from_identifier(digest)

        if self.body is None:
            if required:
                raise SigningError(
                    "Body digest required but body is not available",
                    SigningErrorCodes.BODY_DIGEST_REQUIRED,
                    {"algorithm": digest.identifier}
                )
            return None

        header_value = format_content_digest(digest, self.body)
        self.set_header('Content-Digest', header_value)
        return header_value
