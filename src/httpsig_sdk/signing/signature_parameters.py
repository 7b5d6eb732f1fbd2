"""
Signature parameters for RFC 9421 HTTP Message Signatures

This module holds the ordered list of covered component identifiers and the
signature metadata (alg, created, expires, keyid, nonce, tag), and renders
them with the Structured Field serializer.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..structured_fields import (
    SfBareItem,
    SfBareItemType,
    SfItem,
    SfInnerList,
    SfParameters,
    SfDictionary,
    SfDictionaryMember,
)
from .types import SigningError, SigningErrorCodes
from .utils import normalize_component_name

SIGNATURE_PARAMS_IDENTIFIER = '@signature-params'


def component_identifier_value(item: SfItem) -> str:
    """
    Return the string value of a component identifier.

    Raises:
        SigningError: If the identifier is not an sf-string
    """
    if item.bare_item.type != SfBareItemType.STRING:
        raise SigningError(
            "Component identifiers must be sf-string values",
            SigningErrorCodes.INVALID_COMPONENT,
            {"component": item.serialize()}
        )
    return item.bare_item.value


class SignatureParameters:
    """
    Covered components and metadata for one signature

    Component identifiers keep their insertion order. Adding an identifier
    whose value and serialized parameters match an existing entry is a no-op.
    """

    def __init__(self):
        self._component_identifiers: List[SfItem] = []
        self._parameters: Dict[str, SfBareItem] = {}
        self.debug_mode = False

    def copy(self) -> 'SignatureParameters':
        """Return an independent copy."""
        clone = SignatureParameters()
        clone._component_identifiers = list(self._component_identifiers)
        clone._parameters = dict(self._parameters)
        clone.debug_mode = self.debug_mode
        return clone

    @property
    def component_identifiers(self) -> Tuple[SfItem, ...]:
        """Covered component identifiers in order."""
        return tuple(self._component_identifiers)

    @property
    def component_names(self) -> List[str]:
        """String values of the covered component identifiers."""
        return [component_identifier_value(item) for item in self._component_identifiers]

    @property
    def parameters(self) -> Mapping[str, SfBareItem]:
        """Signature metadata in insertion order."""
        return dict(self._parameters)

    @property
    def algorithm_identifier(self) -> Optional[str]:
        """The ``alg`` parameter, if set."""
        alg = self._parameters.get('alg')
        if alg is None:
            return None
        if alg.type != SfBareItemType.STRING:
            raise SigningError(
                "alg parameter must be an sf-string",
                SigningErrorCodes.INVALID_CONFIG
            )
        return alg.value

    def add_component_identifier(
        self,
        identifier: str,
        parameters: Optional[Union[Mapping[str, Any], SfParameters]] = None
    ) -> 'SignatureParameters':
        """
        Add a covered component.

        Header names are lowercased; ``@`` derived components are kept as-is.

        Args:
            identifier: Component name, e.g. "@method" or "Content-Type"
            parameters: Optional component parameters, e.g. {"name": "foo"},
                as a mapping or SfParameters

        Returns:
            SignatureParameters: Self for method chaining
        """
        normalized = normalize_component_name(identifier)
        if isinstance(parameters, SfParameters):
            parameters = parameters.as_map()
        # component parameter text is always an sf-string, never a decimal literal
        coerced = {
            key: SfBareItem.string(value) if isinstance(value, str) else value
            for key, value in (parameters or {}).items()
        }
        candidate = SfItem.string(normalized, coerced)

        for existing in self._component_identifiers:
            if _identifiers_match(existing, candidate):
                return self

        self._component_identifiers.append(candidate)
        return self

    def set_alg(self, value: str) -> 'SignatureParameters':
        """Set ``alg``, e.g. hmac-sha256 or ecdsa-p256-sha256."""
        self._parameters['alg'] = SfBareItem.string(value)
        return self

    def set_created(self, timestamp: int) -> 'SignatureParameters':
        self._parameters['created'] = SfBareItem.integer(timestamp)
        return self

    def set_expires(self, timestamp: int) -> 'SignatureParameters':
        self._parameters['expires'] = SfBareItem.integer(timestamp)
        return self

    def set_keyid(self, key_id: str) -> 'SignatureParameters':
        self._parameters['keyid'] = SfBareItem.string(key_id)
        return self

    def set_nonce(self, nonce: str) -> 'SignatureParameters':
        self._parameters['nonce'] = SfBareItem.string(nonce)
        return self

    def set_tag(self, tag: str) -> 'SignatureParameters':
        self._parameters['tag'] = SfBareItem.string(tag)
        return self

    def signature_params_identifier(self) -> SfItem:
        """Identifier naming the final line of the signature base."""
        return SfItem.string(SIGNATURE_PARAMS_IDENTIFIER)

    def to_inner_list(self) -> SfInnerList:
        return SfInnerList(self._component_identifiers, self._parameters)

    def serialize_component_value(self) -> str:
        """
        Serialize as an inner list of components carrying the metadata as
        parameters, e.g. ``("@method" "@path");alg="hmac-sha256"``.
        """
        return self.to_inner_list().serialize()

    def signature_input_header(self, label: str) -> str:
        """
        Build the Signature-Input header value for a signature label.

        Args:
            label: Signature label, e.g. "install"

        Returns:
            str: Dictionary serialization ``label=(...);...``
        """
        member = SfDictionaryMember.of_inner_list(self.to_inner_list())
        return SfDictionary({label: member}).serialize()

    def __repr__(self) -> str:
        return f"SignatureParameters({self.serialize_component_value()})"


def _identifiers_match(existing: SfItem, candidate: SfItem) -> bool:
    """Identifiers match when the values and serialized parameter sets are equal."""
    if component_identifier_value(existing) != component_identifier_value(candidate):
        return False
    return _parameters_match(existing.parameters, candidate.parameters)


def _parameters_match(existing: SfParameters, candidate: SfParameters) -> bool:
    existing_map = existing.as_map()
    candidate_map = candidate.as_map()
    if len(existing_map) != len(candidate_map):
        return False

    for key, value in candidate_map.items():
        other = existing_map.get(key)
        if other is None or other.serialize() != value.serialize():
            return False
    return True
