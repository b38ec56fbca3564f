"""
Euno Integration Registry — Kind discovery + controller wiring.

Enumerates the supported integration kinds and hands out one lifecycle
controller per kind. Every controller receives the same transport, so the
concurrency ceiling holds for the whole process rather than per kind.
"""
from __future__ import annotations
from typing import Iterable, Optional, Union

import httpx

from euno.config import ProviderConfig
from euno.errors import InputValidationError
from euno.kinds import ALL_KINDS, IntegrationKind
from euno.lifecycle.controller import IntegrationController
from euno.lifecycle.managed import ManagedIntegration
from euno.state import StateStore
from euno.transport import RateLimitedTransport


class IntegrationRegistry:
    """Central registry for integration kinds and their controllers."""

    def __init__(
        self,
        transport: RateLimitedTransport,
        kinds: Iterable[IntegrationKind] = ALL_KINDS,
    ):
        self.transport = transport
        self._kinds: dict[str, IntegrationKind] = {}
        self._controllers: dict[str, IntegrationController] = {}
        for kind in kinds:
            self.register(kind)

    @classmethod
    def configure(
        cls,
        config: ProviderConfig,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        kinds: Iterable[IntegrationKind] = ALL_KINDS,
    ) -> "IntegrationRegistry":
        """Build the one shared transport from ``config`` and wire every kind to it."""
        return cls(RateLimitedTransport(config, http_transport=http_transport), kinds)

    def register(self, kind: IntegrationKind):
        if kind.integration_type in self._kinds:
            raise ValueError(f"Kind already registered: {kind.integration_type}")
        self._kinds[kind.integration_type] = kind
        self._controllers[kind.integration_type] = IntegrationController(kind, self.transport)

    def _resolve(self, kind: Union[str, IntegrationKind]) -> str:
        name = kind.integration_type if isinstance(kind, IntegrationKind) else kind
        if name in self._kinds:
            return name
        for registered in self._kinds.values():
            if registered.resource_type == name:
                return registered.integration_type
        raise InputValidationError(f"Unknown integration kind: {name}", field="integration_type")

    def kinds(self) -> list[IntegrationKind]:
        return list(self._kinds.values())

    def get_kind(self, kind: Union[str, IntegrationKind]) -> IntegrationKind:
        return self._kinds[self._resolve(kind)]

    def controller(self, kind: Union[str, IntegrationKind]) -> IntegrationController:
        """Controller for a kind, by integration type ("hex") or resource type
        ("euno_hex_integration")."""
        return self._controllers[self._resolve(kind)]

    def resource_types(self) -> list[str]:
        return [k.resource_type for k in self._kinds.values()]

    def managed(
        self, kind: Union[str, IntegrationKind], store: StateStore, key: str
    ) -> ManagedIntegration:
        return ManagedIntegration(self.controller(kind), store, key)

    @property
    def kind_count(self) -> int:
        return len(self._kinds)
