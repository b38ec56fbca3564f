"""Drive one integration instance through its lifecycle against a state store.

ManagedIntegration is what the declarative state manager talks to: it
loads the persisted typed model, runs the controller operation, records
the state transition and persists the result only once the operation has
succeeded. A failed operation leaves the store exactly as it was.
"""

import asyncio
import logging
from typing import Generic, Optional, TypeVar

from euno.errors import InputValidationError
from euno.lifecycle.controller import IntegrationController
from euno.lifecycle.states import IntegrationLifecycle, LifecycleState
from euno.models.resource import ImportedIdentity, IntegrationState
from euno.state import StateStore, StoredState

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT")


class ManagedIntegration(Generic[ConfigT]):
    """One instance, identified by the caller's ``key`` in ``store``.

    Usage::

        managed = ManagedIntegration(registry.controller("hex"), store, "hex_main")
        await managed.create(desired)
        await managed.refresh()
        await managed.delete()
    """

    def __init__(
        self,
        controller: IntegrationController[ConfigT],
        store: StateStore,
        key: str,
    ):
        self.controller = controller
        self.store = store
        self.key = key
        initial = (
            LifecycleState.MANAGED if store.get(key) is not None else LifecycleState.UNMANAGED
        )
        self.lifecycle = IntegrationLifecycle(key=key, current_state=initial)
        # A read keeps the state at MANAGED, so it is tracked separately.
        self._reading = False

    @property
    def state(self) -> LifecycleState:
        return self.lifecycle.current_state

    @property
    def is_busy(self) -> bool:
        """True while any operation on this instance is in flight."""
        return self._reading or self.lifecycle.is_busy

    def _require_idle(self) -> None:
        if self.is_busy:
            raise InputValidationError(
                f"{self.key!r} has an operation in flight ({self.state.value})"
            )

    def current(self) -> Optional[StoredState]:
        """The persisted typed model, or None if nothing is stored."""
        return self.store.get(self.key)

    def _require_current(self) -> StoredState:
        stored = self.store.get(self.key)
        if stored is None:
            raise InputValidationError(f"no stored state for {self.key!r}", field="id")
        return stored

    def _enter(self, transient: LifecycleState, operation: str) -> LifecycleState:
        self._require_idle()
        previous = self.lifecycle.current_state
        try:
            self.lifecycle.transition(transient, operation=operation)
        except ValueError as exc:
            raise InputValidationError(str(exc)) from exc
        return previous

    # --- Operations ---

    async def create(
        self,
        desired: IntegrationState[ConfigT],
        cancel: Optional[asyncio.Event] = None,
    ) -> IntegrationState[ConfigT]:
        previous = self._enter(LifecycleState.CREATING, "create")
        try:
            result = await self.controller.create(desired, cancel=cancel)
        except BaseException:
            self.lifecycle.transition(previous, operation="create")
            raise
        self.store.set(self.key, result)
        self.lifecycle.transition(
            LifecycleState.MANAGED, operation="create", metadata={"id": result.id}
        )
        return result

    async def refresh(self, cancel: Optional[asyncio.Event] = None) -> IntegrationState[ConfigT]:
        """Read server truth. On NotFoundError the stored model is left as is;
        deciding between recreate and forget is the caller's call."""
        self._require_idle()
        if self.state != LifecycleState.MANAGED:
            raise InputValidationError(f"{self.key!r} is {self.state.value}, not managed")
        stored = self._require_current()
        self._reading = True
        try:
            result = await self.controller.read(stored, cancel=cancel)
        finally:
            self._reading = False
        if self.state != LifecycleState.MANAGED:
            raise InputValidationError(
                f"{self.key!r} became {self.state.value} while it was being read"
            )
        self.store.set(self.key, result)
        self.lifecycle.transition(LifecycleState.MANAGED, operation="read")
        return result

    async def update(
        self,
        desired: IntegrationState[ConfigT],
        cancel: Optional[asyncio.Event] = None,
    ) -> IntegrationState[ConfigT]:
        """Push ``desired`` to the service under the stored identity."""
        stored = self._require_current()
        if isinstance(stored, ImportedIdentity):
            raise InputValidationError(
                f"{self.key!r} was imported but never read; refresh it first", field="id"
            )
        previous = self._enter(LifecycleState.UPDATING, "update")
        try:
            result = await self.controller.update(
                self.controller.with_identity(desired, stored), cancel=cancel
            )
        except BaseException:
            self.lifecycle.transition(previous, operation="update")
            raise
        self.store.set(self.key, result)
        self.lifecycle.transition(LifecycleState.MANAGED, operation="update")
        return result

    async def delete(self, cancel: Optional[asyncio.Event] = None) -> None:
        stored = self._require_current()
        previous = self._enter(LifecycleState.DELETING, "delete")
        try:
            await self.controller.delete(stored, cancel=cancel)
        except BaseException:
            self.lifecycle.transition(previous, operation="delete")
            raise
        self.store.delete(self.key)
        self.lifecycle.transition(LifecycleState.DELETED, operation="delete")

    def import_identity(self, raw_identity: str) -> ImportedIdentity:
        """Adopt an existing remote instance. ``refresh`` must run next."""
        if self.state != LifecycleState.UNMANAGED:
            raise InputValidationError(f"{self.key!r} is already {self.state.value}")
        result = self.controller.import_state(raw_identity)
        self.store.set(self.key, result)
        self.lifecycle.transition(
            LifecycleState.MANAGED, operation="import", metadata={"id": result.id}
        )
        logger.debug("Stored imported identity %d under %r", result.id, self.key)
        return result
