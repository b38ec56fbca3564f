"""
Euno Lifecycle Controller — create/read/update/delete/import for one kind.

One generic controller serves every kind; the kind supplies data (its tag,
push/pull style and configuration contract), never behaviour:
- create: typed desired model -> POST -> typed result with identity
- read: identity -> GET -> server-owned fields refreshed
- update: typed desired model with identity -> PATCH -> typed result
- delete: identity -> DELETE (not-found counts as success)
- import_state: identity string -> ImportedIdentity (no request)

Operations never mutate the caller's object. A new object is returned on
success; on failure the error propagates and nothing is returned.
"""
from __future__ import annotations
from dataclasses import replace
from typing import Generic, Optional, TypeVar, Union
import asyncio
import logging
import re

from euno.errors import (
    InputValidationError,
    IntegrationVanishedError,
    NotFoundError,
    RemoteFailureError,
)
from euno.kinds.base import IntegrationKind
from euno.mapping.blocks import invalidation_from_remote, invalidation_to_remote
from euno.models.remote import IntegrationIn, IntegrationOut
from euno.models.resource import ImportedIdentity, IntegrationState
from euno.transport import RateLimitedTransport

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT")

IdentityRef = Union[IntegrationState, ImportedIdentity, int]

_IDENTITY_PATTERN = re.compile(r"[0-9]+")


def parse_identity(raw: str) -> int:
    """Parse an import identity. Only a plain decimal string is accepted."""
    if not isinstance(raw, str) or not _IDENTITY_PATTERN.fullmatch(raw):
        raise InputValidationError(
            f"integration id must be a numeric string, got {raw!r}", field="id"
        )
    value = int(raw)
    if value <= 0:
        raise InputValidationError("integration id must be positive", field="id")
    return value


def identity_of(ref: IdentityRef) -> int:
    """Resolve the numeric identity of a stored model or a bare id."""
    if isinstance(ref, bool):
        raise InputValidationError("integration id must be an integer", field="id")
    if isinstance(ref, int):
        integration_id = ref
    else:
        if not ref.is_created:
            raise InputValidationError(
                "integration has not been created yet (no id)", field="id"
            )
        integration_id = ref.id
    if integration_id <= 0:
        raise InputValidationError("integration id must be positive", field="id")
    return integration_id


class IntegrationController(Generic[ConfigT]):
    """Lifecycle operations for one integration kind over a shared transport."""

    def __init__(self, kind: IntegrationKind[ConfigT], transport: RateLimitedTransport):
        self.kind = kind
        self.transport = transport

    @property
    def integration_type(self) -> str:
        return self.kind.integration_type

    @property
    def resource_type(self) -> str:
        return self.kind.resource_type

    # --- Conversion ---

    def to_request(self, desired: IntegrationState[ConfigT]) -> IntegrationIn:
        """Build the wire body from the typed desired model.

        Raises InputValidationError for a missing name or a missing/mistyped
        configuration field; nothing is sent in that case.
        """
        if not desired.name:
            raise InputValidationError("name is required", field="name")
        if desired.configuration is None:
            raise InputValidationError("configuration is required", field="configuration")
        if not isinstance(desired.configuration, self.kind.config_type):
            raise InputValidationError(
                f"{self.resource_type} expects {self.kind.config_type.__name__}, "
                f"got {type(desired.configuration).__name__}",
                field="configuration",
            )
        if desired.schedule is not None and not self.kind.supports_schedule:
            logger.warning(
                "%s is a push integration; ignoring the configured schedule",
                self.resource_type,
            )

        return IntegrationIn(
            integration_type=self.kind.integration_type,
            name=desired.name,
            active=desired.active,
            configuration=self.kind.configuration.to_remote(desired.configuration),
            schedule=self.kind.schedule_to_remote(desired.schedule),
            invalidation_strategy=invalidation_to_remote(desired.invalidation_strategy),
            pending_credentials_lookup_key=desired.pending_credentials_lookup_key,
        )

    def from_response(
        self,
        observed: IntegrationOut,
        desired: Optional[IntegrationState[ConfigT]] = None,
    ) -> IntegrationState[ConfigT]:
        """Build a typed result from the service's document.

        Server values win. Configuration keys the server omits (for example
        masked credentials) and an omitted pending credentials key keep the
        desired value. Schedule and invalidation strategy are taken from the
        server as a whole.
        """
        if observed.integration_type != self.kind.integration_type:
            raise InputValidationError(
                f"integration {observed.id} is of type {observed.integration_type!r}, "
                f"not {self.kind.integration_type!r}",
                field="integration_type",
            )

        contract = self.kind.configuration
        configuration = contract.merge(
            desired.configuration if desired is not None else None,
            contract.from_remote(observed.configuration),
        )

        active = observed.active
        pending_key = observed.pending_credentials_lookup_key
        name = observed.name
        if desired is not None:
            if active is None:
                active = desired.active
            if pending_key is None:
                pending_key = desired.pending_credentials_lookup_key
            if not name:
                name = desired.name

        return IntegrationState(
            name=name,
            configuration=configuration,
            active=active,
            schedule=self.kind.schedule_from_remote(observed.schedule),
            invalidation_strategy=invalidation_from_remote(observed.invalidation_strategy),
            pending_credentials_lookup_key=pending_key,
            id=observed.id,
            integration_type=observed.integration_type,
            created_at=observed.created_at,
            last_updated_at=observed.last_updated_at,
            last_run_status=observed.last_run_status,
            health=observed.health,
            trigger_secret=observed.trigger_secret,
            trigger_url=observed.trigger_url,
        )

    # --- Lifecycle operations ---

    async def create(
        self,
        desired: IntegrationState[ConfigT],
        cancel: Optional[asyncio.Event] = None,
    ) -> IntegrationState[ConfigT]:
        """unmanaged -> managed. Returns the desired model with identity and
        server-computed fields filled in."""
        if desired.is_created:
            raise InputValidationError(
                f"{self.resource_type} already has id {desired.id}; use update",
                field="id",
            )
        request = self.to_request(desired)
        observed = await self.transport.create_integration(request, cancel=cancel)
        result = self.from_response(observed, desired)
        logger.info("Created %s %d", self.resource_type, result.id)
        return result

    async def read(
        self,
        current: IdentityRef,
        cancel: Optional[asyncio.Event] = None,
    ) -> IntegrationState[ConfigT]:
        """managed -> managed. Raises NotFoundError when the instance is gone.

        ``current`` may be a previously stored model (its desired fields are
        kept where the server omits them), an ImportedIdentity or a bare id.
        """
        integration_id = identity_of(current)
        desired = current if isinstance(current, IntegrationState) else None
        observed = await self.transport.get_integration(integration_id, cancel=cancel)
        result = self.from_response(observed, desired)
        logger.debug("Read %s %d", self.resource_type, integration_id)
        return result

    async def update(
        self,
        desired: Union[IntegrationState[ConfigT], ImportedIdentity],
        cancel: Optional[asyncio.Event] = None,
    ) -> IntegrationState[ConfigT]:
        """managed -> managed. Raises IntegrationVanishedError when the
        instance no longer exists remotely."""
        if isinstance(desired, ImportedIdentity):
            raise InputValidationError(
                f"{self.resource_type} {desired.id} was imported but never read; read it first",
                field="id",
            )
        integration_id = identity_of(desired)
        request = self.to_request(desired)
        try:
            observed = await self.transport.update_integration(
                integration_id, request, cancel=cancel
            )
        except NotFoundError as exc:
            raise IntegrationVanishedError(
                f"{self.resource_type} {integration_id} no longer exists",
                body=exc.body,
            ) from exc
        if observed.id != integration_id:
            raise RemoteFailureError(
                f"PATCH integrations/{integration_id} returned integration {observed.id}",
                status_code=200,
            )
        result = self.from_response(observed, desired)
        logger.info("Updated %s %d", self.resource_type, integration_id)
        return result

    async def delete(
        self,
        current: IdentityRef,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        """managed -> deleted. Deleting a missing instance succeeds."""
        integration_id = identity_of(current)
        try:
            await self.transport.delete_integration(integration_id, cancel=cancel)
        except NotFoundError:
            logger.info("%s %d already absent", self.resource_type, integration_id)
            return
        logger.info("Deleted %s %d", self.resource_type, integration_id)

    def import_state(self, raw_identity: str) -> ImportedIdentity:
        """unmanaged -> managed with identity only. A read must follow."""
        result = ImportedIdentity(id=parse_identity(raw_identity))
        logger.info("Imported %s %d", self.resource_type, result.id)
        return result

    def with_identity(
        self, desired: IntegrationState[ConfigT], stored: IdentityRef
    ) -> IntegrationState[ConfigT]:
        """Copy of ``desired`` carrying the identity of a stored model."""
        return replace(desired, id=identity_of(stored))
