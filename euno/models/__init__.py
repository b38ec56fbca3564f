from euno.models.remote import IntegrationIn, IntegrationOut
from euno.models.resource import (
    ImportedIdentity,
    IntegrationState,
    InvalidationStrategyConfig,
    ScheduleConfig,
)

__all__ = [
    "ImportedIdentity",
    "IntegrationIn",
    "IntegrationOut",
    "IntegrationState",
    "InvalidationStrategyConfig",
    "ScheduleConfig",
]
