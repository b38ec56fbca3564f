"""
Euno Mapping — conversion contracts between typed blocks and wire JSON.

Provides:
- MappingContract / ConfigField: table-driven bidirectional converter
- Shared schedule and invalidation-strategy contracts
"""
from euno.mapping.blocks import (
    INVALIDATION_CONTRACT,
    SCHEDULE_CONTRACT,
    invalidation_from_remote,
    invalidation_to_remote,
    schedule_from_remote,
    schedule_to_remote,
)
from euno.mapping.fields import (
    COERCERS,
    ConfigField,
    FieldType,
    MappingContract,
)

__all__ = [
    # Fields
    "COERCERS",
    "ConfigField",
    "FieldType",
    "MappingContract",
    # Blocks
    "INVALIDATION_CONTRACT",
    "SCHEDULE_CONTRACT",
    "invalidation_from_remote",
    "invalidation_to_remote",
    "schedule_from_remote",
    "schedule_to_remote",
]
