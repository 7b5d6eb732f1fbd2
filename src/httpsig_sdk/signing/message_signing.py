"""
Per-host selection of signature parameter factories
"""

import logging
from typing import Dict, Optional

from .context import SigningContext
from .parameters_factory import SignatureParametersFactory
from .signature_parameters import SignatureParameters
from .utils import TargetUri

logger = logging.getLogger(__name__)


class MessageSigning:
    """
    Maps request hosts to signature parameter factories, with an optional
    default factory for hosts without their own
    """

    def __init__(self, default_factory: Optional[SignatureParametersFactory] = None):
        self._default_factory = default_factory
        self._host_factories: Dict[str, SignatureParametersFactory] = {}

    def set_default_factory(self, factory: Optional[SignatureParametersFactory]) -> 'MessageSigning':
        self._default_factory = factory
        return self

    def put_host_factory(self, host: str, factory: SignatureParametersFactory) -> 'MessageSigning':
        """Register a factory for one host; replaces any previous one."""
        self._host_factories[host.lower()] = factory
        logger.debug(f"Registered signature parameters factory for host: {host}")
        return self

    def remove_host_factory(self, host: str) -> 'MessageSigning':
        self._host_factories.pop(host.lower(), None)
        return self

    @property
    def default_factory(self) -> Optional[SignatureParametersFactory]:
        return self._default_factory

    def factory_for_host(self, host: str) -> Optional[SignatureParametersFactory]:
        """Host factory if registered, otherwise the default factory."""
        return self._host_factories.get(host.lower(), self._default_factory)

    def build_parameters_for(self, uri: str, context: SigningContext) -> Optional[SignatureParameters]:
        """
        Build signature parameters for a request URI.

        Args:
            uri: Request URI used to select the factory
            context: Signing context of the request

        Returns:
            SignatureParameters, or None when no factory applies
        """
        factory = self.factory_for_host(TargetUri(uri).host)
        if factory is None:
            return None
        return factory.build(context)
