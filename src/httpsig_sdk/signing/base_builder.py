"""
Signature base construction for RFC 9421 HTTP Message Signatures

The signature base is one ``"<component>": <value>`` line per covered
component followed by the ``"@signature-params"`` line. It is the exact
text handed to the signer.
"""

import logging

from .context import SigningContext
from .signature_parameters import SignatureParameters, component_identifier_value
from .types import SigningError, SigningErrorCodes

logger = logging.getLogger(__name__)


class SignatureBaseBuilder:
    """
    Builds the canonical signature base from parameters and a request
    """

    def __init__(self, params: SignatureParameters, context: SigningContext):
        """
        Args:
            params: Covered components and signature metadata
            context: Request being signed
        """
        self.params = params
        self.context = context

    def create_signature_base(self) -> str:
        """
        Build the signature base string.

        Returns:
            str: Signature base; the last line has no trailing newline

        Raises:
            SigningError: If any covered component cannot be resolved
        """
        lines = []
        for component in self.params.component_identifiers:
            value = self.context.get_component_value(component)
            if value is None:
                name = component_identifier_value(component)
                raise SigningError(
                    f"Missing component value for {name}",
                    SigningErrorCodes.MISSING_COMPONENT,
                    {"component": component.serialize()}
                )
            lines.append(f"{component.serialize()}: {value}\n")

        signature_params = self.params.signature_params_identifier()
        lines.append(f"{signature_params.serialize()}: {self.params.serialize_component_value()}")
        signature_base = ''.join(lines)

        if self.params.debug_mode:
            logger.debug(f"Signature base for {self.context.method.upper()} {self.context.uri}:\n{signature_base}")

        return signature_base


def create_signature_base(params: SignatureParameters, context: SigningContext) -> str:
    """
    Build the signature base for a request.

    Args:
        params: Signature parameters
        context: Signing context

    Returns:
        str: Signature base string
    """
    return SignatureBaseBuilder(params, context).create_signature_base()
