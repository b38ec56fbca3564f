"""
Euno Integrations — reconcile declared integrations against the Euno API.

Provides:
- RateLimitedTransport: bounded-concurrency HTTP gateway (3 in flight)
- Per-kind conversion contracts (snowflake, fivetran, hex, dbt_core)
- IntegrationController: create/read/update/delete/import for one kind
- ManagedIntegration + StateStore: lifecycle against persisted state
- IntegrationRegistry: one shared transport for every kind
"""
from euno.config import ProviderConfig
from euno.errors import (
    CancellationError,
    ConnectivityError,
    EunoError,
    InputValidationError,
    IntegrationVanishedError,
    NotFoundError,
    RemoteFailureError,
)
from euno.kinds import ALL_KINDS, IntegrationKind, TriggerStyle
from euno.lifecycle import IntegrationController, LifecycleState, ManagedIntegration
from euno.models import (
    ImportedIdentity,
    IntegrationState,
    InvalidationStrategyConfig,
    ScheduleConfig,
)
from euno.registry import IntegrationRegistry
from euno.state import InMemoryStateStore, StateStore
from euno.transport import RateLimitedTransport

__all__ = [
    # Config
    "ProviderConfig",
    # Errors
    "CancellationError",
    "ConnectivityError",
    "EunoError",
    "InputValidationError",
    "IntegrationVanishedError",
    "NotFoundError",
    "RemoteFailureError",
    # Models
    "ImportedIdentity",
    "IntegrationState",
    "InvalidationStrategyConfig",
    "ScheduleConfig",
    # Kinds
    "ALL_KINDS",
    "IntegrationKind",
    "TriggerStyle",
    # Lifecycle
    "IntegrationController",
    "LifecycleState",
    "ManagedIntegration",
    # Wiring
    "IntegrationRegistry",
    "InMemoryStateStore",
    "RateLimitedTransport",
    "StateStore",
]
