"""Typed declarative model for an integration instance.

Every optional field uses ``None`` for "absent (never configured)", which
stays distinct from an explicit empty value ("", [], {}). Server-computed
fields are ``None`` until a lifecycle operation fills them in.
"""

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

ConfigT = TypeVar("ConfigT")


@dataclass
class ScheduleConfig:
    """Polling schedule of a pull integration."""

    time_zone: Optional[str] = None
    repeat_on: Optional[list[str]] = None
    repeat_time: Optional[str] = None
    repeat_period: Optional[int] = None  # hours


@dataclass
class InvalidationStrategyConfig:
    """Retention policy applied by the service to collected artifacts."""

    ttl_days: Optional[int] = None
    revision_id: Optional[int] = None


@dataclass
class IntegrationState(Generic[ConfigT]):
    """Desired configuration plus the server-owned fields observed for it.

    ``configuration`` holds the kind-specific dataclass (e.g.
    ``SnowflakeConfiguration``). ``id`` is None until the instance is created.
    """

    name: str
    configuration: ConfigT
    active: Optional[bool] = None
    schedule: Optional[ScheduleConfig] = None
    invalidation_strategy: Optional[InvalidationStrategyConfig] = None
    pending_credentials_lookup_key: Optional[str] = None

    # Server-computed
    id: Optional[int] = None
    integration_type: Optional[str] = None
    created_at: Optional[str] = None
    last_updated_at: Optional[str] = None
    last_run_status: Optional[str] = None
    health: Optional[str] = None
    trigger_secret: Optional[str] = field(default=None, repr=False)
    trigger_url: Optional[str] = field(default=None, repr=False)

    @property
    def is_created(self) -> bool:
        return self.id is not None


@dataclass(frozen=True)
class ImportedIdentity:
    """Identity-only placeholder produced by import.

    Nothing but the identity is known; a read must run before the instance
    can be updated or inspected.
    """

    id: int

    @property
    def is_created(self) -> bool:
        return True
