"""Shared schedule and invalidation-strategy contracts.

Both blocks are optional as a whole: ``None`` on either side means the
block is absent. Pull kinds use both; push kinds use only the
invalidation strategy.
"""

import logging
from typing import Any, Optional

from euno.mapping.fields import ConfigField, FieldType, MappingContract
from euno.models.resource import InvalidationStrategyConfig, ScheduleConfig

logger = logging.getLogger(__name__)


SCHEDULE_CONTRACT = MappingContract(
    "schedule",
    ScheduleConfig,
    [
        ConfigField("time_zone", FieldType.STRING, required=True,
                    description="The time zone for the schedule"),
        ConfigField("repeat_on", FieldType.STRING_LIST,
                    description="The days of the week to repeat on"),
        ConfigField("repeat_time", FieldType.STRING, zero_is_absent=True,
                    description="The time to repeat at (HH:MM:SS format)"),
        ConfigField("repeat_period", FieldType.INT, zero_is_absent=True,
                    description="The period in hours to repeat"),
    ],
)

INVALIDATION_CONTRACT = MappingContract(
    "invalidation_strategy",
    InvalidationStrategyConfig,
    [
        ConfigField("ttl_days", FieldType.INT, required=True,
                    description="The TTL in days for invalidation"),
        ConfigField("revision_id", FieldType.INT,
                    description="The revision ID for invalidation"),
    ],
)


def _block_to_remote(contract: MappingContract, block: Any) -> Optional[dict[str, Any]]:
    if block is None:
        return None
    return contract.to_remote(block)


def _block_from_remote(contract: MappingContract, data: Any) -> Any:
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s block from server: expected an object", contract.name)
        return None
    return contract.from_remote(data)


def schedule_to_remote(schedule: Optional[ScheduleConfig]) -> Optional[dict[str, Any]]:
    return _block_to_remote(SCHEDULE_CONTRACT, schedule)


def schedule_from_remote(data: Any) -> Optional[ScheduleConfig]:
    return _block_from_remote(SCHEDULE_CONTRACT, data)


def invalidation_to_remote(
    strategy: Optional[InvalidationStrategyConfig],
) -> Optional[dict[str, Any]]:
    return _block_to_remote(INVALIDATION_CONTRACT, strategy)


def invalidation_from_remote(data: Any) -> Optional[InvalidationStrategyConfig]:
    return _block_from_remote(INVALIDATION_CONTRACT, data)
