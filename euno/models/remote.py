"""
Euno Remote Resource Model — wire schema for an integration.

IntegrationIn is what we send on create/update; IntegrationOut is what the
service returns. The per-kind ``configuration`` map and the schedule and
invalidation blocks stay untyped dicts here: their keys and value types are
decided by the kind's conversion contract, not by the envelope.
"""
from __future__ import annotations
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class IntegrationIn(BaseModel):
    """Create/update request body."""
    integration_type: str
    name: str
    active: Optional[bool] = None
    configuration: dict[str, Any] = Field(default_factory=dict, repr=False)
    schedule: Optional[dict[str, Any]] = None
    invalidation_strategy: Optional[dict[str, Any]] = None
    pending_credentials_lookup_key: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        """JSON body with absent optional fields omitted."""
        return self.model_dump(exclude_none=True)


class IntegrationOut(BaseModel):
    """Integration document returned by the service."""
    model_config = ConfigDict(extra="ignore")

    id: int
    integration_type: str
    name: str = ""
    account_id: Optional[int] = None
    active: Optional[bool] = None
    configuration: Optional[dict[str, Any]] = Field(default=None, repr=False)
    schedule: Optional[dict[str, Any]] = None
    invalidation_strategy: Optional[dict[str, Any]] = None
    collected_integration_data: Optional[dict[str, Any]] = Field(default=None, repr=False)

    # Server-computed
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    last_updated_at: Optional[str] = None
    last_updated_by: Optional[str] = None
    last_run_status: Optional[str] = None
    last_completed_run_end_time: Optional[str] = None
    last_time_triggered: Optional[str] = None
    health: Optional[str] = None
    trigger_type: Optional[str] = None
    trigger_secret: Optional[str] = Field(default=None, repr=False)
    trigger_url: Optional[str] = Field(default=None, repr=False)
    pending_credentials_lookup_key: Optional[str] = None
