"""Integration kind definition.

A kind is data, not behaviour: its tag, whether it is push or pull, and
the conversion contract for its ``configuration`` block. The lifecycle
controller is generic and takes a kind as a parameter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from euno.mapping.blocks import schedule_from_remote, schedule_to_remote
from euno.mapping.fields import MappingContract
from euno.models.resource import ScheduleConfig

ConfigT = TypeVar("ConfigT")


class TriggerStyle(str, Enum):
    """How runs of an integration are started."""

    PULL = "pull"  # polled by the service on a schedule
    PUSH = "push"  # triggered externally through trigger_url / trigger_secret


@dataclass(frozen=True)
class IntegrationKind(Generic[ConfigT]):
    """Static description of one integration type.

    Usage::

        HEX = IntegrationKind(
            integration_type="hex",
            trigger_style=TriggerStyle.PULL,
            configuration=MappingContract("hex", HexConfiguration, HEX_FIELDS),
        )
    """

    integration_type: str
    trigger_style: TriggerStyle
    configuration: MappingContract[ConfigT]
    description: str = ""

    @property
    def resource_type(self) -> str:
        return f"euno_{self.integration_type}_integration"

    @property
    def supports_schedule(self) -> bool:
        return self.trigger_style == TriggerStyle.PULL

    @property
    def config_type(self) -> type[ConfigT]:
        return self.configuration.model

    def empty_configuration(self) -> ConfigT:
        """Configuration with every field absent."""
        return self.configuration.model()

    # Push kinds never carry a schedule, whatever either side supplies.

    def schedule_to_remote(self, schedule: Optional[ScheduleConfig]) -> Optional[dict[str, Any]]:
        if not self.supports_schedule:
            return None
        return schedule_to_remote(schedule)

    def schedule_from_remote(self, data: Any) -> Optional[ScheduleConfig]:
        if not self.supports_schedule:
            return None
        return schedule_from_remote(data)
