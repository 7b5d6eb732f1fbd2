"""
Signing policy configuration

A signing policy is the declarative form of a SignatureParametersFactory:
covered components, signing key, timestamps, optional headers and body
digest. Policies can be loaded from JSON, picked from the predefined
profiles, and assigned per host to build a MessageSigning registry.
"""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..signing.message_signing import MessageSigning
from ..signing.parameters_factory import (
    DEFAULT_EXPIRES_LIFETIME_SECONDS,
    DEFAULT_OPTIONAL_HEADERS,
    SignatureParametersFactory,
)
from ..signing.signature_parameters import SignatureParameters
from ..signing.types import SignatureDigest, SigningError, SigningMode

# A component entry is either a name or {"name": ..., "parameters": {...}}
ComponentSpec = Union[str, Dict[str, Any]]


class SigningPolicyError(Exception):
    """Signing policy loading and validation error"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


@dataclass
class SigningPolicy:
    """
    Declarative signing policy

    Attributes:
        components: Base components, signed on every request
        signing_mode: "install" or "account"
        add_created: Emit the created parameter
        expires_lifetime_seconds: Lifetime for expires; 0 disables it
        add_token_header: Sign the attestation token header when present
        optional_headers: Headers signed only when present
        digest_algorithm: "sha-256", "sha-512" or None
        digest_required: Fail when the body is not available for digesting
        debug: Log signature bases
    """
    components: List[ComponentSpec] = field(default_factory=lambda: ['@method', '@target-uri'])
    signing_mode: str = SigningMode.INSTALL.value
    add_created: bool = True
    expires_lifetime_seconds: int = DEFAULT_EXPIRES_LIFETIME_SECONDS
    add_token_header: bool = True
    optional_headers: List[str] = field(default_factory=lambda: list(DEFAULT_OPTIONAL_HEADERS))
    digest_algorithm: Optional[str] = SignatureDigest.SHA256.value
    digest_required: bool = False
    debug: bool = False

    def validate(self) -> None:
        """
        Check field values.

        Raises:
            SigningPolicyError: If any value is invalid
        """
        if self.signing_mode not in [mode.value for mode in SigningMode]:
            raise SigningPolicyError(f"Unknown signing mode '{self.signing_mode}'", "INVALID_FORMAT")

        if self.digest_algorithm is not None:
            try:
                SignatureDigest.from_identifier(self.digest_algorithm)
            except SigningError as e:
                raise SigningPolicyError(e.message, "INVALID_FORMAT")

        if not isinstance(self.expires_lifetime_seconds, int) or self.expires_lifetime_seconds < 0:
            raise SigningPolicyError("expires_lifetime_seconds must be a non-negative integer", "INVALID_FORMAT")

        for component in self.components:
            _component_name(component)

    def to_factory(self) -> SignatureParametersFactory:
        """Build a parameters factory implementing this policy."""
        self.validate()

        base = SignatureParameters()
        for component in self.components:
            if isinstance(component, str):
                base.add_component_identifier(component)
            else:
                base.add_component_identifier(_component_name(component), component.get('parameters'))

        return (SignatureParametersFactory()
                .set_base_parameters(base)
                .set_signing_mode(self.signing_mode)
                .set_add_created(self.add_created)
                .set_expires_lifetime(self.expires_lifetime_seconds)
                .set_add_token_header(self.add_token_header)
                .add_optional_headers(self.optional_headers)
                .set_body_digest_config(self.digest_algorithm, required=self.digest_required)
                .set_debug_mode(self.debug))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SigningPolicy':
        """
        Create a policy from a dictionary.

        A "profile" key starts from a predefined profile; the other keys
        override its fields.

        Raises:
            SigningPolicyError: For unknown keys, profiles or invalid values
        """
        if not isinstance(data, dict):
            raise SigningPolicyError("Signing policy must be a JSON object", "INVALID_FORMAT")

        data = dict(data)
        profile_name = data.pop('profile', None)
        base = get_signing_profile(profile_name) if profile_name is not None else cls()

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise SigningPolicyError(f"Unknown signing policy keys: {', '.join(unknown)}", "INVALID_FORMAT")

        policy = replace(base, **data)
        policy.validate()
        return policy

    @classmethod
    def from_json(cls, json_string: str) -> 'SigningPolicy':
        """Load a signing policy from a JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise SigningPolicyError(f"Failed to parse signing policy JSON: {e}", "PARSE_ERROR")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'SigningPolicy':
        """Load a signing policy from a JSON file"""
        return cls.from_json(_read_file(file_path))


def _component_name(component: ComponentSpec) -> str:
    if isinstance(component, str):
        return component
    if isinstance(component, dict) and isinstance(component.get('name'), str):
        parameters = component.get('parameters')
        if parameters is not None and not isinstance(parameters, dict):
            raise SigningPolicyError("Component parameters must be an object", "INVALID_FORMAT")
        return component['name']
    raise SigningPolicyError(f"Invalid component entry: {component!r}", "INVALID_FORMAT")


def _read_file(file_path: Union[str, Path]) -> str:
    try:
        with open(Path(file_path), 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        raise SigningPolicyError(f"Failed to read signing policy file: {e}", "FILE_ERROR")


# Predefined signing profiles
SIGNING_PROFILES: Dict[str, SigningPolicy] = {
    'default': SigningPolicy(),
    'account': SigningPolicy(signing_mode=SigningMode.ACCOUNT.value),
    'minimal': SigningPolicy(
        signing_mode=SigningMode.ACCOUNT.value,
        add_created=True,
        expires_lifetime_seconds=0,
        add_token_header=False,
        optional_headers=[],
        digest_algorithm=None,
    ),
}


def get_signing_profile(name: str) -> SigningPolicy:
    """
    Get a copy of a predefined signing profile.

    Raises:
        SigningPolicyError: If the profile does not exist
    """
    profile = SIGNING_PROFILES.get(name)
    if profile is None:
        raise SigningPolicyError(f"Signing profile '{name}' not found", "PROFILE_NOT_FOUND")
    return replace(profile, components=list(profile.components), optional_headers=list(profile.optional_headers))


def list_signing_profiles() -> List[str]:
    """List available signing profiles"""
    return list(SIGNING_PROFILES.keys())


@dataclass
class SigningPolicyConfig:
    """Default policy plus per-host policies"""
    default_policy: Optional[SigningPolicy] = None
    host_policies: Dict[str, SigningPolicy] = field(default_factory=dict)

    def to_message_signing(self) -> MessageSigning:
        """Build a MessageSigning registry with one factory per policy."""
        registry = MessageSigning()
        if self.default_policy is not None:
            registry.set_default_factory(self.default_policy.to_factory())
        for host, policy in self.host_policies.items():
            registry.put_host_factory(host, policy.to_factory())
        return registry

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SigningPolicyConfig':
        """
        Parse ``{"default": <policy>, "hosts": {"<host>": <policy>}}``.

        A policy is either an object or the name of a predefined profile.
        """
        if not isinstance(data, dict):
            raise SigningPolicyError("Signing configuration must be a JSON object", "INVALID_FORMAT")

        hosts = data.get('hosts', {})
        if not isinstance(hosts, dict):
            raise SigningPolicyError("'hosts' must be an object", "INVALID_FORMAT")

        default = data.get('default')
        return cls(
            default_policy=_parse_policy(default) if default is not None else None,
            host_policies={host: _parse_policy(policy) for host, policy in hosts.items()}
        )

    @classmethod
    def from_json(cls, json_string: str) -> 'SigningPolicyConfig':
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise SigningPolicyError(f"Failed to parse signing configuration JSON: {e}", "PARSE_ERROR")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'SigningPolicyConfig':
        return cls.from_json(_read_file(file_path))


def _parse_policy(value: Union[str, Dict[str, Any]]) -> SigningPolicy:
    if isinstance(value, str):
        return get_signing_profile(value)
    return SigningPolicy.from_dict(value)


def load_signing_config_from_file(file_path: Union[str, Path]) -> MessageSigning:
    """Load a signing configuration file and build its MessageSigning registry"""
    return SigningPolicyConfig.from_file(file_path).to_message_signing()
